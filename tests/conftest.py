"""
Shared fixtures for financing engine tests.
"""
import copy

import pytest

from subsidy_app.config import get_config
from subsidy_app.domain.services import FinancingEvaluationService


NEW_BUILD_RECORD = {
    "variant": "neubau",
    "postal_code": "40210",
    "household": {
        "adult_count": 2,
        "child_count": 0,
        "disabled_adult_count": 0,
        "disabled_child_count": 0,
    },
    "flags": {
        "wants_barrier_free_loan": False,
        "wants_wood_construction_loan": False,
        "wants_location_cost_loan": False,
        "meets_efficiency_standard": False,
        "has_supplementary_loan": False,
    },
    "costs": {
        "site": {
            "purchase_price": "60.000,00 €",
            "value": "0,00 €",
            "development_costs": "5.000,00 €",
        },
        "construction": {
            "building_costs": "120.000,00 €",
            "special_construction": "0,00 €",
            "existing_structure_value": "0,00 €",
            "outdoor_facilities": "3.000,00 €",
            "architect_fees": "7.000,00 €",
        },
        "incidentals": {
            "acquisition_incidentals": "3.000,00 €",
            "administration": "500,00 €",
            "permanent_financing": "500,00 €",
            "interim_financing": "500,00 €",
            "other_incidentals": "300,00 €",
            "additional_costs": "200,00 €",
        },
    },
    "financing": {
        "external_loans": [],
        "public_loans": {
            "base_loan": "100.000,00 €",
        },
        "own_contribution": {
            "cash_funds": "60.000,00 €",
            "grants": "0,00 €",
            "self_help": "10.000,00 €",
            "existing_structure_value": "0,00 €",
            "land_value": "30.000,00 €",
        },
    },
}

# Required fields applicable to NEW_BUILD_RECORD:
# household 3 + property 6 + costs 14 + base loan 1 + own contribution 5
NEW_BUILD_POTENTIAL_FIELDS = 29


@pytest.fixture
def config():
    """Packaged default configuration."""
    return get_config()


@pytest.fixture
def service(config):
    """Evaluation service on the default configuration."""
    return FinancingEvaluationService(config)


@pytest.fixture
def new_build_record():
    """Complete, reconciled new-build record (fresh copy per test)."""
    return copy.deepcopy(NEW_BUILD_RECORD)


@pytest.fixture
def new_build_potential():
    """Number of required fields applicable to the new-build record."""
    return NEW_BUILD_POTENTIAL_FIELDS
