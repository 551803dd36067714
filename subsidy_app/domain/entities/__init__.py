"""
Domain Entities - Immutable value objects of the financing engine.
"""

from .classification import ProjectClassification, SubsidyVariant, VARIANT_ALIASES
from .household import HouseholdComposition, FeatureFlags, as_mapping, parse_count, parse_flag
from .application import (
    FinancingApplication, CostBreakdown, SiteCosts, PurchaseCosts,
    ConstructionCosts, IncidentalCosts, FinancingPlan, ExternalLoan,
    PublicLoanPackage, OwnContribution, SelfHelpDeclaration,
)
from .results import (
    WizardStep, Violation, TierResolution, RepaymentDiscount, Totals,
    ReconciliationResult, CompletenessResult, EvaluationResult,
)

__all__ = [
    'ProjectClassification', 'SubsidyVariant', 'VARIANT_ALIASES',
    'HouseholdComposition', 'FeatureFlags', 'as_mapping', 'parse_count', 'parse_flag',
    'FinancingApplication', 'CostBreakdown', 'SiteCosts', 'PurchaseCosts',
    'ConstructionCosts', 'IncidentalCosts', 'FinancingPlan', 'ExternalLoan',
    'PublicLoanPackage', 'OwnContribution', 'SelfHelpDeclaration',
    'WizardStep', 'Violation', 'TierResolution', 'RepaymentDiscount', 'Totals',
    'ReconciliationResult', 'CompletenessResult', 'EvaluationResult',
]
