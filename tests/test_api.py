"""
Tests for the financing API endpoints.
"""
import pytest

from fastapi.testclient import TestClient

from subsidy_app.main import app


@pytest.fixture(scope="module")
def client():
    """Create test client."""
    with TestClient(app) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["config_version"] == "1.0.0"
        assert data["postal_codes"] > 0


class TestEvaluate:
    """Tests for POST /api/v1/financing/evaluate"""

    def test_evaluate_complete_record(self, client, new_build_record):
        response = client.post("/api/v1/financing/evaluate", json=new_build_record)
        assert response.status_code == 200

        data = response.json()
        assert data["is_valid"] is True
        assert data["violations"] == []
        assert data["totals"]["financing_sum"] == "100.000,00 €"
        assert data["reconciliation"]["difference_cents"] == 0
        assert data["completeness"]["score"] == 100
        assert data["tier"]["tier"] == 4
        assert data["classification"]["is_new_build"] is True

    def test_evaluate_reports_violations_without_failing(self, client, new_build_record):
        new_build_record["household"]["child_count"] = 1
        new_build_record["financing"]["public_loans"]["family_bonus"] = "24.000,01 €"
        response = client.post("/api/v1/financing/evaluate", json=new_build_record)
        assert response.status_code == 200

        data = response.json()
        codes = [v["code"] for v in data["violations"]]
        assert codes.count("ABOVE_MAX") == 1
        assert "6" in data["violations_by_step"]

    def test_evaluate_empty_record(self, client):
        response = client.post("/api/v1/financing/evaluate", json={})
        assert response.status_code == 200
        assert response.json()["completeness"]["score"] == 0

    def test_fractional_json_amount_is_read_in_euros(self, client, new_build_record):
        new_build_record["financing"]["public_loans"]["base_loan"] = 100000.0
        response = client.post("/api/v1/financing/evaluate", json=new_build_record)
        assert response.status_code == 200
        data = response.json()
        assert data["totals"]["financing_sum_cents"] == 10000000
        assert data["is_valid"] is True

    def test_text_counts_are_accepted(self, client, new_build_record):
        new_build_record["household"]["adult_count"] = "2"
        response = client.post("/api/v1/financing/evaluate", json=new_build_record)
        assert response.status_code == 200
        assert response.json()["is_valid"] is True


class TestRequirements:
    """Tests for POST /api/v1/financing/requirements"""

    def test_requirements_table(self, client, new_build_record):
        response = client.post("/api/v1/financing/requirements", json=new_build_record)
        assert response.status_code == 200

        data = response.json()
        assert data["required"] == 29
        keys = {f["key"]: f for f in data["fields"]}
        assert keys["costs.site.value"]["applies"] is True
        assert keys["costs.purchase.purchase_price"]["applies"] is False

    def test_single_field(self, client, new_build_record):
        response = client.post(
            "/api/v1/financing/requirements/financing.public_loans.base_loan",
            json=new_build_record,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["applies"] is True
        assert data["limits"] == [{"kind": "max", "amount": 18400000}]

    def test_unknown_field_returns_404(self, client, new_build_record):
        response = client.post(
            "/api/v1/financing/requirements/costs.unknown",
            json=new_build_record,
        )
        assert response.status_code == 404
        assert "costs.unknown" in response.json()["detail"]


class TestLookups:
    """Tests for tier and classification lookups."""

    def test_tier_lookup(self, client):
        response = client.get("/api/v1/financing/tiers/45879")
        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == 1
        assert data["ceiling_a"] == "100.000,00 €"

    def test_unmapped_tier_lookup(self, client):
        response = client.get("/api/v1/financing/tiers/00000")
        assert response.status_code == 200
        data = response.json()
        assert data["tier"] == 4
        assert data["is_default"] is True
        assert data["ceiling_a_cents"] == 18400000

    def test_classification_lookup(self, client):
        response = client.get("/api/v1/financing/classification/nutzungsaenderung")
        assert response.status_code == 200
        data = response.json()
        assert data["is_change_of_use"] is True
        assert data["includes_construction_costs"] is True

    def test_unknown_classification(self, client):
        response = client.get("/api/v1/financing/classification/villa")
        assert response.status_code == 200
        assert response.json()["variant"] is None
