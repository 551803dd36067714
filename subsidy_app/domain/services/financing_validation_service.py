"""
Financing Validation Service - Cross-validation and reconciliation.

Implements validation rules:
- Per-field presence and limit checks from the rule table
- External loan count limit
- Minimum own contribution (7.5 % of total cost)
- Reconciliation: own contribution + financing = total cost, within tolerance

All findings are collected; nothing short-circuits.
"""
import logging
from typing import List, Optional

from subsidy_app.config import SubsidyConfig, get_config
from subsidy_app.domain.entities import ReconciliationResult, Totals, Violation, WizardStep
from subsidy_app.modules.money import format_with_config, percent_of

from .field_rules import RuleTable

logger = logging.getLogger(__name__)

# Aggregate checks sort after every field rule of their step
AGGREGATE_ORDER = 10_000


class FinancingValidationService:
    """Service producing the ordered violation list for one record."""

    def __init__(self, config: Optional[SubsidyConfig] = None):
        self.config = config or get_config()

    def _fmt(self, cents: int) -> str:
        return format_with_config(cents, self.config.currency_config)

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def reconcile(self, totals: Totals) -> ReconciliationResult:
        """Build the reconciliation result from aggregated totals."""
        return ReconciliationResult(
            own_contribution_sum=totals.own_contribution,
            financing_sum=totals.financing_sum,
            total_cost=totals.total_cost,
            minimum_own_contribution=percent_of(
                totals.total_cost, self.config.min_own_contribution_ratio
            ),
            tolerance=self.config.reconciliation_tolerance,
        )

    def check_minimum_contribution(self, result: ReconciliationResult) -> Optional[Violation]:
        if result.meets_minimum_contribution:
            return None
        ratio = self.config.min_own_contribution_ratio * 100
        message = (
            f"The own contribution must be at least {ratio.normalize():f} % of the total cost "
            f"({self._fmt(result.minimum_own_contribution)}); "
            f"shortfall: {self._fmt(result.contribution_shortfall)}"
        )
        return Violation(WizardStep.FINANCING, message, None, "OWN_CONTRIBUTION_TOO_LOW", AGGREGATE_ORDER)

    def check_reconciliation(self, result: ReconciliationResult) -> Optional[Violation]:
        if result.is_balanced:
            return None
        message = (
            f"The sum of own contribution and financing "
            f"({self._fmt(result.own_contribution_sum + result.financing_sum)}) "
            f"must equal the total cost ({self._fmt(result.total_cost)}). "
            f"Difference: {self._fmt(result.difference)}"
        )
        return Violation(WizardStep.FINANCING, message, None, "NOT_RECONCILED", AGGREGATE_ORDER + 1)

    # =========================================================================
    # Field Checks
    # =========================================================================

    def check_fields(self, table: RuleTable) -> List[Violation]:
        """One violation per applicable field that is missing or over a limit."""
        violations = []
        for rule in table:
            violation = rule.check()
            if violation is not None:
                violations.append(violation)
        return violations

    def check_external_loan_count(self, count: int) -> Optional[Violation]:
        maximum = self.config.max_external_loans
        if count <= maximum:
            return None
        message = f"At most {maximum} external loans can be entered (currently: {count})"
        return Violation(WizardStep.FINANCING, message, "financing.external_loans", "TOO_MANY_ENTRIES", -1)

    # =========================================================================
    # Entry Point
    # =========================================================================

    def validate(
        self,
        table: RuleTable,
        reconciliation: ReconciliationResult,
        external_loan_count: int = 0,
    ) -> List[Violation]:
        """
        Collect every violation for a record.

        Args:
            table: Rule table evaluated for the record
            reconciliation: Result of reconcile()
            external_loan_count: Number of external loan entries submitted

        Returns:
            Violations ordered by wizard step, then rule order
        """
        violations = self.check_fields(table)
        for check in (
            self.check_external_loan_count(external_loan_count),
            self.check_minimum_contribution(reconciliation),
            self.check_reconciliation(reconciliation),
        ):
            if check is not None:
                violations.append(check)

        violations.sort(key=lambda v: v.sort_key)
        logger.debug(f"Validation produced {len(violations)} violations")
        return violations
