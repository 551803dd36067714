"""
Tests for the configuration loader.
"""
import pytest
import tempfile
from decimal import Decimal
from pathlib import Path

from subsidy_app.config import (
    CONFIG_PATH_ENV,
    ConfigurationError,
    SubsidyConfig,
    get_config,
    reload_config,
)


class TestSubsidyConfig:
    """Tests for SubsidyConfig class."""

    def test_load_default_config(self):
        """Test loading the default configuration file."""
        config = get_config()
        assert config.version == "1.0.0"
        assert sorted(config.tier_ceilings) == [1, 2, 3, 4]

    def test_tier_ceilings(self):
        config = get_config()
        assert config.tier_ceilings[1]["ceiling_a_cents"] == 10000000
        assert config.tier_ceilings[2]["ceiling_a_cents"] == 11500000
        assert config.tier_ceilings[3]["ceiling_b_cents"] == 8800000
        assert config.tier_ceilings[4]["ceiling_b_cents"] == 11000000
        assert config.default_tier == 4

    def test_postcode_table_loaded(self):
        config = get_config()
        tiers = config.postcode_tiers
        assert tiers["40210"] == 4
        assert tiers["45879"] == 1
        assert "00000" not in tiers
        assert all(tier in config.tier_ceilings for tier in tiers.values())

    def test_messages(self):
        config = get_config()
        assert "{postal_code}" in config.tier_message_template
        assert "184.000,00 €" in config.default_tier_message


class TestPublicLoans:
    """Tests for public loan configuration."""

    def test_discount_rates(self):
        config = get_config()
        assert config.get_discount_rate("base_loan") == Decimal("0.1")
        assert config.get_discount_rate("wood_construction") == Decimal("0.1")
        assert config.get_discount_rate("efficiency_standard") == Decimal("0.5")

    def test_supplement_ceilings(self):
        config = get_config()
        assert config.get_loan_max("barrier_free") == 1150000
        assert config.get_loan_max("wood_construction") == 1700000
        assert config.get_loan_max("location_cost") == 2500000
        assert config.get_loan_max("efficiency_standard") == 3000000
        assert config.get_loan_max("base_loan") is None

    def test_family_bonus_and_location_ratio(self):
        config = get_config()
        assert config.family_bonus_per_dependent == 2400000
        assert config.location_cost_ratio == Decimal("0.75")


class TestReconciliationSettings:
    def test_supplementary_loan_bounds(self):
        config = get_config()
        assert config.supplementary_loan_min == 200000
        assert config.supplementary_loan_max == 5000000

    def test_contribution_and_tolerance(self):
        config = get_config()
        assert config.min_own_contribution_ratio == Decimal("0.075")
        assert config.reconciliation_tolerance == 1
        assert config.max_external_loans == 3


class TestConfigLoading:
    """Tests for config loading edge cases."""

    def test_missing_config_file(self):
        """Test error on missing config file."""
        with pytest.raises(ConfigurationError, match="not found"):
            SubsidyConfig(Path("/nonexistent/config.yaml"))

    def test_invalid_yaml(self):
        """Test error on invalid YAML."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("invalid: yaml: content: [")
            f.flush()
            with pytest.raises(ConfigurationError, match="Invalid YAML"):
                SubsidyConfig(Path(f.name))

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            SubsidyConfig(path)

    def test_defaults_for_minimal_config(self, tmp_path):
        path = tmp_path / "minimal.yaml"
        path.write_text("version: '0.1'\n", encoding="utf-8")
        config = SubsidyConfig(path)
        assert config.version == "0.1"
        assert config.reconciliation_tolerance == 1
        assert config.min_own_contribution_ratio == Decimal("0.075")
        assert config.supplementary_loan_max == 5000000
        assert config.currency_config["symbol"] == "€"

    def test_env_var_overrides_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("version: 'custom'\nreconciliation:\n  tolerance_cents: 100\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
        try:
            config = reload_config()
            assert config.version == "custom"
            assert config.reconciliation_tolerance == 100
        finally:
            monkeypatch.delenv(CONFIG_PATH_ENV)
            reload_config()

    def test_config_singleton(self):
        """Test that get_config returns same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2

    def test_reload_config(self):
        """Test config reload."""
        config1 = get_config()
        config2 = reload_config()
        # After reload, should be a new instance
        assert config1 is not config2
        assert config2.version == "1.0.0"

    def test_dict_access(self):
        """Test dictionary-style access."""
        config = get_config()
        assert "cost_tiers" in config
        assert config["version"] == "1.0.0"
        assert config.get("nonexistent", "default") == "default"
