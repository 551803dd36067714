"""
Evaluation results - Immutable outputs of the financing engine.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

from subsidy_app.modules.money import format_with_config

from .classification import ProjectClassification


class WizardStep(IntEnum):
    """Wizard step a violation is reported under, in display order."""
    PERSON = 1
    HOUSEHOLD = 2
    PROPERTY = 3
    OWNERSHIP = 4
    COSTS = 5
    FINANCING = 6

    @property
    def title(self) -> str:
        return _STEP_TITLES[self]


_STEP_TITLES = {
    WizardStep.PERSON: "Step 1: Personal data",
    WizardStep.HOUSEHOLD: "Step 2: Household",
    WizardStep.PROPERTY: "Step 3: Property",
    WizardStep.OWNERSHIP: "Step 4: Ownership",
    WizardStep.COSTS: "Step 5: Costs",
    WizardStep.FINANCING: "Step 6: Financing",
}


@dataclass(frozen=True)
class Violation:
    """
    Advisory finding for one field or one aggregate check.

    Attributes:
        step: Wizard step the finding belongs to
        message: Human-readable message
        field_key: Rule key, or None for aggregate checks
        code: Machine-readable reason (MISSING, ABOVE_MAX, ...)
        order: Position of the producing rule in the rule table
    """

    step: WizardStep
    message: str
    field_key: Optional[str] = None
    code: str = "INVALID"
    order: int = 0

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (int(self.step), self.order)

    def to_dict(self) -> dict:
        return {
            'step': int(self.step),
            'step_title': self.step.title,
            'field_key': self.field_key,
            'code': self.code,
            'message': self.message,
        }


@dataclass(frozen=True)
class TierResolution:
    """Cost tier resolved from a postal code."""

    postal_code: str
    tier: int
    ceiling_a: int
    ceiling_b: int
    message: str
    is_default: bool = False

    def to_dict(self, currency: Optional[dict] = None) -> dict:
        return {
            'postal_code': self.postal_code,
            'tier': self.tier,
            'ceiling_a_cents': self.ceiling_a,
            'ceiling_b_cents': self.ceiling_b,
            'ceiling_a': format_with_config(self.ceiling_a, currency),
            'ceiling_b': format_with_config(self.ceiling_b, currency),
            'message': self.message,
            'is_default': self.is_default,
        }


@dataclass(frozen=True)
class RepaymentDiscount:
    """Derived repayment discount of one public loan."""

    loan_key: str
    principal: int
    rate_percent: int
    discount: int

    def to_dict(self, currency: Optional[dict] = None) -> dict:
        return {
            'loan_key': self.loan_key,
            'principal_cents': self.principal,
            'rate_percent': self.rate_percent,
            'discount_cents': self.discount,
            'principal': format_with_config(self.principal, currency),
            'discount': format_with_config(self.discount, currency),
        }


@dataclass(frozen=True)
class Totals:
    """
    Aggregated sums in cents, counting applicable fields only.

    total_cost = site + purchase + construction + incidentals
    financing_sum = external loans + (public package | supplementary loan)
    """

    site: int = 0
    purchase: int = 0
    construction: int = 0
    incidentals: int = 0
    total_cost: int = 0
    own_contribution: int = 0
    external_loans: int = 0
    public_loans: int = 0
    public_loan_discounts: int = 0
    supplementary_loan: int = 0
    financing_sum: int = 0

    def to_dict(self, currency: Optional[dict] = None) -> dict:
        """Amounts in cents plus their display strings, formatted per `currency`."""
        values = {
            'site': self.site,
            'purchase': self.purchase,
            'construction': self.construction,
            'incidentals': self.incidentals,
            'total_cost': self.total_cost,
            'own_contribution': self.own_contribution,
            'external_loans': self.external_loans,
            'public_loans': self.public_loans,
            'public_loan_discounts': self.public_loan_discounts,
            'supplementary_loan': self.supplementary_loan,
            'financing_sum': self.financing_sum,
        }
        result = {f'{key}_cents': value for key, value in values.items()}
        result.update({key: format_with_config(value, currency) for key, value in values.items()})
        return result


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of the reconciliation and minimum contribution checks."""

    own_contribution_sum: int
    financing_sum: int
    total_cost: int
    minimum_own_contribution: int
    tolerance: int = 1

    @property
    def difference(self) -> int:
        """Signed difference: own + financing - total."""
        return self.own_contribution_sum + self.financing_sum - self.total_cost

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) <= self.tolerance

    @property
    def meets_minimum_contribution(self) -> bool:
        return self.own_contribution_sum >= self.minimum_own_contribution

    @property
    def contribution_shortfall(self) -> int:
        return max(0, self.minimum_own_contribution - self.own_contribution_sum)

    def to_dict(self, currency: Optional[dict] = None) -> dict:
        return {
            'own_contribution_sum_cents': self.own_contribution_sum,
            'financing_sum_cents': self.financing_sum,
            'total_cost_cents': self.total_cost,
            'difference_cents': self.difference,
            'minimum_own_contribution_cents': self.minimum_own_contribution,
            'tolerance_cents': self.tolerance,
            'own_contribution_sum': format_with_config(self.own_contribution_sum, currency),
            'financing_sum': format_with_config(self.financing_sum, currency),
            'total_cost': format_with_config(self.total_cost, currency),
            'difference': format_with_config(self.difference, currency),
            'minimum_own_contribution': format_with_config(self.minimum_own_contribution, currency),
            'is_balanced': self.is_balanced,
            'meets_minimum_contribution': self.meets_minimum_contribution,
        }


@dataclass(frozen=True)
class CompletenessResult:
    """Completeness score folded over the rule table."""

    potential_fields: int
    unsatisfied_fields: int
    score: int

    def to_dict(self) -> dict:
        return {
            'potential_fields': self.potential_fields,
            'unsatisfied_fields': self.unsatisfied_fields,
            'score': self.score,
        }


@dataclass(frozen=True)
class EvaluationResult:
    """Everything derived from one application record."""

    classification: ProjectClassification
    tier: TierResolution
    totals: Totals
    reconciliation: ReconciliationResult
    completeness: CompletenessResult
    violations: Tuple[Violation, ...] = ()
    repayment_discounts: Tuple[RepaymentDiscount, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def violation_messages(self) -> List[str]:
        """Flat, ordered list of violation messages."""
        return [v.message for v in self.violations]

    def violations_by_step(self) -> Dict[int, List[str]]:
        """Violation messages keyed by wizard step number, steps in order."""
        grouped: Dict[int, List[str]] = {}
        for violation in self.violations:
            grouped.setdefault(int(violation.step), []).append(violation.message)
        return grouped

    def to_dict(self, currency: Optional[dict] = None) -> dict:
        """
        Convert to dictionary for serialization.

        Args:
            currency: `currency` config section used for display strings
        """
        return {
            'classification': self.classification.to_dict(),
            'tier': self.tier.to_dict(currency),
            'totals': self.totals.to_dict(currency),
            'reconciliation': self.reconciliation.to_dict(currency),
            'completeness': self.completeness.to_dict(),
            'is_valid': self.is_valid,
            'violations': [v.to_dict() for v in self.violations],
            'violations_by_step': {str(k): v for k, v in self.violations_by_step().items()},
            'repayment_discounts': [d.to_dict(currency) for d in self.repayment_discounts],
        }
