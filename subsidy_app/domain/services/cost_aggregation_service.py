"""
Cost Aggregation Service - Category subtotals, totals and repayment discounts.

Implements the aggregation rules:
- total_cost = site + purchase + construction + incidentals
- financing_sum = external loans + (public package | supplementary loan)
- Only applicable fields are summed; applicability comes from the rule table
"""
from decimal import Decimal
from typing import List, Optional

from subsidy_app.config import SubsidyConfig, get_config
from subsidy_app.domain.entities import RepaymentDiscount, Totals
from subsidy_app.modules.money import percent_of

from .field_rules import MONEY, RuleTable

PUBLIC_LOAN_KEYS = (
    "base_loan",
    "family_bonus",
    "barrier_free",
    "wood_construction",
    "location_cost",
    "efficiency_standard",
)

COST_CATEGORIES = ("site", "purchase", "construction", "incidentals")


class CostAggregationService:
    """
    Service for summing applicable monetary fields.

    Ensures:
    - A field that does not apply never contributes to any sum
    - Repayment discounts are always derived from their principal
    """

    def __init__(self, config: Optional[SubsidyConfig] = None):
        self.config = config or get_config()

    # =========================================================================
    # Repayment Discounts
    # =========================================================================

    def derive_repayment_discounts(self, table: RuleTable) -> List[RepaymentDiscount]:
        """
        Per-loan repayment discounts for the applicable public loans.

        discount = round_half_up(principal × rate); the rate is 10 % for
        the base loan and supplements and 50 % for the efficiency standard.
        """
        discounts = []
        for loan_key in PUBLIC_LOAN_KEYS:
            rule = table.get(f"financing.public_loans.{loan_key}")
            if not rule.applies:
                continue
            rate = self.config.get_discount_rate(loan_key)
            principal = rule.numeric_value
            discounts.append(RepaymentDiscount(
                loan_key=loan_key,
                principal=principal,
                rate_percent=int(rate * Decimal(100)),
                discount=percent_of(principal, rate),
            ))
        return discounts

    # =========================================================================
    # Totals
    # =========================================================================

    def aggregate(self, table: RuleTable) -> Totals:
        """
        Compute every subtotal and total for one rule table.

        Args:
            table: Rule table evaluated for the record

        Returns:
            Totals in cents
        """
        site = table.sum_category("site")
        purchase = table.sum_category("purchase")
        construction = table.sum_category("construction")
        incidentals = table.sum_category("incidentals")

        external = sum(
            rule.numeric_value
            for rule in table.applicable("external_loans")
            if rule.kind == MONEY
        )
        public = table.sum_category("public_loans")
        discounts = sum(d.discount for d in self.derive_repayment_discounts(table))
        supplementary = table.sum_category("supplementary_loan")

        return Totals(
            site=site,
            purchase=purchase,
            construction=construction,
            incidentals=incidentals,
            total_cost=site + purchase + construction + incidentals,
            own_contribution=table.sum_category("own_contribution"),
            external_loans=external,
            public_loans=public,
            public_loan_discounts=discounts,
            supplementary_loan=supplementary,
            financing_sum=external + public + supplementary,
        )
