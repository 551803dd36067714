"""
Financing Evaluation Service - One pure pass over an application record.

record -> classification -> tier -> rule table -> totals
       -> reconciliation -> violations + completeness

No state is kept between calls; every evaluation rebuilds all derived
data from the record.
"""
import logging
from typing import Any, Optional, Union

from subsidy_app.config import SubsidyConfig, get_config
from subsidy_app.domain.entities import EvaluationResult, FinancingApplication

from .cap_lookup_service import CapLookupService
from .classification_resolver import classify
from .completeness_service import CompletenessService
from .cost_aggregation_service import CostAggregationService
from .field_rules import RuleContext, RuleTable, build_rule_table
from .financing_validation_service import FinancingValidationService

logger = logging.getLogger(__name__)

RecordInput = Union[FinancingApplication, dict]


class FinancingEvaluationService:
    """
    Orchestrates the engine stages.

    Usage:
        service = FinancingEvaluationService()
        result = service.evaluate({"variant": "neubau", ...})
        result.violation_messages()
    """

    def __init__(
        self,
        config: Optional[SubsidyConfig] = None,
        cap_lookup: Optional[CapLookupService] = None,
    ):
        self.config = config or get_config()
        self.cap_lookup = cap_lookup or CapLookupService(self.config)
        self.aggregation = CostAggregationService(self.config)
        self.validation = FinancingValidationService(self.config)
        self.completeness = CompletenessService()

    def build_rules(self, record: Any) -> RuleTable:
        """Evaluate the rule table for a record."""
        application = FinancingApplication.coerce(record)
        context = RuleContext(
            record=application,
            classification=classify(application.variant),
            tier=self.cap_lookup.resolve_tier(application.postal_code),
            config=self.config,
        )
        return build_rule_table(context)

    def evaluate(self, record: RecordInput) -> EvaluationResult:
        """
        Evaluate an application record.

        Args:
            record: FinancingApplication or raw nested mapping

        Returns:
            EvaluationResult with totals, reconciliation, ordered
            violations, completeness and repayment discounts
        """
        application = FinancingApplication.coerce(record)
        classification = classify(application.variant)
        tier = self.cap_lookup.resolve_tier(application.postal_code)
        table = build_rule_table(RuleContext(
            record=application,
            classification=classification,
            tier=tier,
            config=self.config,
        ))

        totals = self.aggregation.aggregate(table)
        reconciliation = self.validation.reconcile(totals)
        violations = self.validation.validate(
            table,
            reconciliation,
            external_loan_count=len(application.financing.external_loans),
        )
        completeness = self.completeness.score(table)

        logger.debug(
            f"Evaluated variant={classification.raw_code or '-'} tier={tier.tier}: "
            f"total={totals.total_cost} financing={totals.financing_sum} "
            f"violations={len(violations)} completeness={completeness.score}"
        )

        return EvaluationResult(
            classification=classification,
            tier=tier,
            totals=totals,
            reconciliation=reconciliation,
            completeness=completeness,
            violations=tuple(violations),
            repayment_discounts=tuple(self.aggregation.derive_repayment_discounts(table)),
        )


def evaluate(record: RecordInput, config: Optional[SubsidyConfig] = None) -> EvaluationResult:
    """Module-level convenience wrapper around FinancingEvaluationService."""
    return FinancingEvaluationService(config).evaluate(record)
