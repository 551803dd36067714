"""
Domain Services - Engine stages for classification, rules, aggregation and validation.
"""

from .cap_lookup_service import CapLookupService
from .classification_resolver import classify, resolve_variant
from .field_rules import FieldRule, Limit, RuleContext, RuleTable, build_rule_table
from .cost_aggregation_service import CostAggregationService, PUBLIC_LOAN_KEYS
from .financing_validation_service import FinancingValidationService
from .completeness_service import CompletenessService
from .evaluation_service import FinancingEvaluationService, evaluate

__all__ = [
    'CapLookupService',
    'classify',
    'resolve_variant',
    'FieldRule',
    'Limit',
    'RuleContext',
    'RuleTable',
    'build_rule_table',
    'CostAggregationService',
    'PUBLIC_LOAN_KEYS',
    'FinancingValidationService',
    'CompletenessService',
    'FinancingEvaluationService',
    'evaluate',
]
