"""
Tests for variant classification.
"""
import pytest

from subsidy_app.domain.entities import SubsidyVariant
from subsidy_app.domain.services import classify


class TestClassify:
    """Tests for classify()."""

    def test_new_build_house(self):
        c = classify("neubau")
        assert c.variant is SubsidyVariant.NEW_BUILD_HOUSE
        assert c.is_new_build
        assert not c.is_apartment
        assert c.includes_construction_costs
        assert not c.includes_purchase_price
        assert c.qualifies_for_supplements

    def test_new_build_apartment(self):
        c = classify("neubau-wohnung")
        assert c.is_new_build
        assert c.is_apartment

    def test_existing_purchase(self):
        c = classify("bestandserwerb-wohnung")
        assert c.is_existing_purchase
        assert c.is_apartment
        assert c.includes_purchase_price
        assert not c.includes_construction_costs
        assert not c.qualifies_for_supplements

    def test_first_acquisition(self):
        c = classify("ersterwerb-eigenheim")
        assert c.is_first_acquisition
        assert c.includes_purchase_price
        assert c.qualifies_for_supplements
        assert not c.includes_construction_costs

    def test_change_of_use(self):
        c = classify("nutzungsaenderung")
        assert c.is_change_of_use
        assert c.includes_construction_costs
        assert not c.is_new_build
        assert not c.qualifies_for_supplements

    @pytest.mark.parametrize("alias,variant", [
        ("new-build-house", SubsidyVariant.NEW_BUILD_HOUSE),
        ("first-acquisition-apartment", SubsidyVariant.FIRST_ACQUISITION_APARTMENT),
        ("change-of-use", SubsidyVariant.CHANGE_OF_USE),
    ])
    def test_english_aliases(self, alias, variant):
        assert classify(alias).variant is variant

    def test_code_is_trimmed_and_case_insensitive(self):
        assert classify("  NeuBau ").variant is SubsidyVariant.NEW_BUILD_HOUSE

    @pytest.mark.parametrize("code", [None, "", "   ", "villa"])
    def test_unknown_code_has_all_predicates_false(self, code):
        c = classify(code)
        assert c.is_known is False
        predicates = {k: v for k, v in c.to_dict().items() if k.startswith(("is_", "includes_", "qualifies_"))}
        assert predicates
        assert not any(predicates.values())

    def test_every_variant_classifies(self):
        for variant in SubsidyVariant:
            assert classify(variant.value).variant is variant
