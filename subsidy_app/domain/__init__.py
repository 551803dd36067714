"""
Domain Layer - Core value objects and services of the financing engine.

This module contains:
- entities/: Immutable domain objects (FinancingApplication, ProjectClassification, results)
- services/: Engine stages (CapLookupService, RuleTable, aggregation, validation, completeness)
"""

from .entities import FinancingApplication, ProjectClassification, EvaluationResult, Violation, WizardStep
from .services import FinancingEvaluationService, evaluate

__all__ = [
    'FinancingApplication', 'ProjectClassification', 'EvaluationResult', 'Violation', 'WizardStep',
    'FinancingEvaluationService', 'evaluate',
]
