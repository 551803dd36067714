"""
Tests for the postal code tier lookup.
"""
import pytest
import yaml

from subsidy_app.config import SubsidyConfig
from subsidy_app.domain.exceptions import InvalidTierTableError
from subsidy_app.domain.services import CapLookupService


@pytest.fixture
def lookup(config):
    return CapLookupService(config)


class TestResolveTier:
    """Tests for CapLookupService.resolve_tier."""

    def test_mapped_tier_4(self, lookup):
        resolution = lookup.resolve_tier("40210")
        assert resolution.tier == 4
        assert resolution.ceiling_a == 18400000
        assert resolution.ceiling_b == 11000000
        assert resolution.is_default is False

    def test_mapped_tier_1(self, lookup):
        resolution = lookup.resolve_tier("45879")
        assert resolution.tier == 1
        assert resolution.ceiling_a == 10000000
        assert resolution.ceiling_b == 5900000

    def test_tier_message_names_postal_code_and_ceilings(self, lookup):
        message = lookup.resolve_tier("44135").message
        assert "44135" in message
        assert "115.000,00 €" in message
        assert "69.000,00 €" in message

    def test_whitespace_is_stripped(self, lookup):
        resolution = lookup.resolve_tier(" 33 602\t")
        assert resolution.postal_code == "33602"
        assert resolution.tier == 3
        assert resolution.is_default is False

    def test_unmapped_code_uses_default_tier(self, lookup, config):
        resolution = lookup.resolve_tier("00000")
        assert resolution.tier == 4
        assert resolution.ceiling_a == 18400000
        assert resolution.is_default is True
        assert resolution.message == config.default_tier_message

    @pytest.mark.parametrize("code", ["", None, "abc", "4021", "402100"])
    def test_malformed_codes_never_raise(self, lookup, code):
        assert lookup.resolve_tier(code).tier == 4

    def test_repeated_calls_are_deterministic(self, lookup):
        first = lookup.resolve_tier("52062")
        for _ in range(5):
            assert lookup.resolve_tier("52062") == first

    def test_changed_digit_of_unmapped_code_stays_default(self, lookup):
        for digit in "123456789":
            code = digit + "0000"
            if code not in lookup.table:
                assert lookup.resolve_tier(code).is_default is True

    def test_max_loan_ceiling(self, lookup):
        assert lookup.max_loan_ceiling("47051") == 10000000
        assert lookup.max_loan_ceiling("00000") == 18400000


class TestTierTableValidation:
    """The tier table is rejected when it references unconfigured tiers."""

    def test_unknown_tier_rejected(self, tmp_path, config):
        table_path = tmp_path / "tiers.yaml"
        table_path.write_text(yaml.safe_dump({"postcodes": {"12345": 7}}), encoding="utf-8")

        raw = yaml.safe_load(config.config_path.read_text(encoding="utf-8"))
        raw["cost_tiers"]["table_path"] = str(table_path)
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump(raw, allow_unicode=True), encoding="utf-8")

        with pytest.raises(InvalidTierTableError) as exc_info:
            CapLookupService(SubsidyConfig(config_path))

        assert exc_info.value.code == "INVALID_TIER_TABLE"
        assert exc_info.value.tier == 7
        assert exc_info.value.postal_code == "12345"
