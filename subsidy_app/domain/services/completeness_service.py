"""
Completeness Service - Share of required fields that are satisfied.
"""
from decimal import Decimal, ROUND_HALF_UP

from subsidy_app.domain.entities import CompletenessResult

from .field_rules import RuleTable


class CompletenessService:
    """
    Folds over the rule table.

    potential = required rules in the current context
    unsatisfied = required rules that are missing or breach a limit
    score = round_half_up(100 × (potential - unsatisfied) / potential)

    Aggregate checks (minimum contribution, reconciliation) do not count.
    """

    def score(self, table: RuleTable) -> CompletenessResult:
        required = table.required()
        potential = len(required)
        unsatisfied = sum(1 for rule in required if not rule.is_satisfied)

        if potential == 0:
            return CompletenessResult(potential_fields=0, unsatisfied_fields=0, score=100)

        ratio = Decimal(100 * (potential - unsatisfied)) / Decimal(potential)
        score = int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return CompletenessResult(
            potential_fields=potential,
            unsatisfied_fields=unsatisfied,
            score=score,
        )
