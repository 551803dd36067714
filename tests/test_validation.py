"""
Tests for cross-validation and reconciliation.
"""
from subsidy_app.domain.entities import WizardStep


def _codes(result):
    return [v.code for v in result.violations]


class TestReconciliation:
    """own contribution + financing must equal total cost."""

    def test_balanced_record_has_no_mismatch(self, service, new_build_record):
        result = service.evaluate(new_build_record)
        assert result.reconciliation.difference == 0
        assert "NOT_RECONCILED" not in _codes(result)

    def test_distribution_across_categories_does_not_matter(self, service, new_build_record):
        """Move 10.000,00 € from cash funds to an external loan."""
        new_build_record["financing"]["own_contribution"]["cash_funds"] = "50.000,00 €"
        new_build_record["financing"]["external_loans"] = [
            {"lender": "Bank", "principal": "10.000,00 €", "interest_rate": "3",
             "disbursement_rate": "100", "amortization_rate": "2"},
        ]
        result = service.evaluate(new_build_record)
        assert result.reconciliation.difference == 0
        assert result.violations == ()

    def test_mismatch_names_both_sums_and_difference(self, service, new_build_record):
        new_build_record["financing"]["public_loans"]["base_loan"] = "90.000,00 €"
        result = service.evaluate(new_build_record)
        mismatches = [v for v in result.violations if v.code == "NOT_RECONCILED"]
        assert len(mismatches) == 1
        message = mismatches[0].message
        assert "190.000,00 €" in message
        assert "200.000,00 €" in message
        assert "-10.000,00 €" in message

    def test_one_cent_difference_is_tolerated(self, service, new_build_record):
        new_build_record["financing"]["public_loans"]["base_loan"] = "100.000,01 €"
        result = service.evaluate(new_build_record)
        assert result.reconciliation.difference == 1
        assert "NOT_RECONCILED" not in _codes(result)

    def test_two_cent_difference_is_reported(self, service, new_build_record):
        new_build_record["financing"]["public_loans"]["base_loan"] = "99.999,98 €"
        result = service.evaluate(new_build_record)
        assert "NOT_RECONCILED" in _codes(result)


class TestMinimumContribution:
    """Own contribution must be at least 7.5 % of total cost."""

    def _record(self, record, own_cents):
        """Total 200.000,00 €; own contribution as cash, rest as base loan."""
        own = record["financing"]["own_contribution"]
        own.update({"cash_funds": own_cents, "grants": 0, "self_help": 0,
                    "existing_structure_value": 0, "land_value": 0})
        record["financing"]["public_loans"]["base_loan"] = 20000000 - own_cents
        return record

    def test_exact_minimum_passes(self, service, new_build_record):
        result = service.evaluate(self._record(new_build_record, 1500000))
        assert result.reconciliation.minimum_own_contribution == 1500000
        assert "OWN_CONTRIBUTION_TOO_LOW" not in _codes(result)

    def test_one_cent_above_passes(self, service, new_build_record):
        result = service.evaluate(self._record(new_build_record, 1500001))
        assert "OWN_CONTRIBUTION_TOO_LOW" not in _codes(result)

    def test_one_cent_below_reports_once(self, service, new_build_record):
        result = service.evaluate(self._record(new_build_record, 1499999))
        low = [v for v in result.violations if v.code == "OWN_CONTRIBUTION_TOO_LOW"]
        assert len(low) == 1
        assert "15.000,00 €" in low[0].message
        assert "0,01 €" in low[0].message


class TestFieldViolations:
    """Every applicable field is checked; nothing short-circuits."""

    def test_missing_fields_all_reported(self, service, new_build_record):
        del new_build_record["costs"]["incidentals"]["administration"]
        del new_build_record["financing"]["own_contribution"]["grants"]
        new_build_record["household"]["child_count"] = None
        result = service.evaluate(new_build_record)
        missing = {v.field_key for v in result.violations if v.code == "MISSING"}
        assert missing == {
            "costs.incidentals.administration",
            "financing.own_contribution.grants",
            "household.child_count",
        }

    def test_violations_ordered_by_step(self, service):
        result = service.evaluate({"variant": "neubau"})
        steps = [int(v.step) for v in result.violations]
        assert steps == sorted(steps)
        assert result.violations[0].step == WizardStep.HOUSEHOLD

    def test_violations_by_step_groups_messages(self, service):
        result = service.evaluate({"variant": "neubau"})
        grouped = result.violations_by_step()
        assert list(grouped) == sorted(grouped)
        assert sum(len(m) for m in grouped.values()) == len(result.violations)

    def test_flag_message_asks_for_an_answer(self, service, new_build_record):
        new_build_record["flags"]["wants_wood_construction_loan"] = None
        result = service.evaluate(new_build_record)
        assert result.violation_messages() == [
            "Please state whether the supplemental loan for wood construction is requested"
        ]

    def test_too_many_external_loans(self, service, new_build_record):
        loan = {"lender": "Bank", "principal": "1,00 €", "interest_rate": "1",
                "disbursement_rate": "100", "amortization_rate": "1"}
        new_build_record["financing"]["external_loans"] = [dict(loan) for _ in range(4)]
        new_build_record["financing"]["own_contribution"]["cash_funds"] = "59.999,96 €"
        result = service.evaluate(new_build_record)
        assert _codes(result) == ["TOO_MANY_ENTRIES"]


class TestSelfHelpConsistency:
    """Self-help amount must match the self-help form."""

    def test_matching_total_passes(self, service, new_build_record):
        new_build_record["self_help_declaration"] = {"will_provide_self_help": True, "total": "10.000,00 €"}
        assert service.evaluate(new_build_record).violations == ()

    def test_mismatching_total_reported(self, service, new_build_record):
        new_build_record["self_help_declaration"] = {"will_provide_self_help": True, "total": "8.000,00 €"}
        result = service.evaluate(new_build_record)
        assert _codes(result) == ["MISMATCH"]
        assert result.violations[0].field_key == "financing.own_contribution.self_help"

    def test_amount_without_declared_self_help(self, service, new_build_record):
        new_build_record["self_help_declaration"] = {"will_provide_self_help": False}
        result = service.evaluate(new_build_record)
        assert _codes(result) == ["ABOVE_MAX"]
