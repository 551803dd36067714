"""
Financing Application - The input record of one evaluation.

Money fields keep the raw text entered in the form (e.g. "12.500,00 €")
so that presence ("0,00 €" vs. blank) can be told apart from the amount.
Use FinancingApplication.from_dict() to build one from a nested mapping.
"""
from dataclasses import dataclass, field, fields
from typing import Any, Optional, Tuple

from subsidy_app.modules.money import MoneyInput, is_present, parse_money_to_cents
from .household import FeatureFlags, HouseholdComposition, as_mapping, parse_flag


def _money_fields_from_dict(cls, data: Optional[dict]):
    """Build a dataclass whose fields are all raw money values."""
    data = as_mapping(data)
    return cls(**{f.name: data.get(f.name) for f in fields(cls)})


def _money_fields_to_dict(obj) -> dict:
    return {f.name: getattr(obj, f.name) for f in fields(obj)}


# =============================================================================
# Cost Categories
# =============================================================================

@dataclass(frozen=True)
class SiteCosts:
    """Building site costs (new-build)."""
    purchase_price: MoneyInput = None
    value: MoneyInput = None
    development_costs: MoneyInput = None
    location_extra_costs: MoneyInput = None


@dataclass(frozen=True)
class PurchaseCosts:
    """Purchase price (existing purchase or first acquisition)."""
    purchase_price: MoneyInput = None


@dataclass(frozen=True)
class ConstructionCosts:
    """Construction costs (new-build or change of use)."""
    building_costs: MoneyInput = None
    special_construction: MoneyInput = None
    existing_structure_value: MoneyInput = None
    outdoor_facilities: MoneyInput = None
    architect_fees: MoneyInput = None


@dataclass(frozen=True)
class IncidentalCosts:
    """Incidental costs, applicable to every variant."""
    acquisition_incidentals: MoneyInput = None
    administration: MoneyInput = None
    permanent_financing: MoneyInput = None
    interim_financing: MoneyInput = None
    other_incidentals: MoneyInput = None
    additional_costs: MoneyInput = None


@dataclass(frozen=True)
class CostBreakdown:
    """All cost categories of the cost step."""

    site: SiteCosts = field(default_factory=SiteCosts)
    purchase: PurchaseCosts = field(default_factory=PurchaseCosts)
    construction: ConstructionCosts = field(default_factory=ConstructionCosts)
    incidentals: IncidentalCosts = field(default_factory=IncidentalCosts)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'CostBreakdown':
        data = as_mapping(data)
        return cls(
            site=_money_fields_from_dict(SiteCosts, data.get('site')),
            purchase=_money_fields_from_dict(PurchaseCosts, data.get('purchase')),
            construction=_money_fields_from_dict(ConstructionCosts, data.get('construction')),
            incidentals=_money_fields_from_dict(IncidentalCosts, data.get('incidentals')),
        )

    def to_dict(self) -> dict:
        return {
            'site': _money_fields_to_dict(self.site),
            'purchase': _money_fields_to_dict(self.purchase),
            'construction': _money_fields_to_dict(self.construction),
            'incidentals': _money_fields_to_dict(self.incidentals),
        }


# =============================================================================
# Financing Groups
# =============================================================================

@dataclass(frozen=True)
class ExternalLoan:
    """
    Loan from a third-party lender.

    Attributes:
        lender: Name of the lender
        principal: Nominal amount (money text)
        interest_rate: Interest rate as entered (e.g. "3,5")
        disbursement_rate: Disbursement rate as entered
        amortization_rate: Amortization rate as entered
    """

    lender: Optional[str] = None
    principal: MoneyInput = None
    interest_rate: Optional[str] = None
    disbursement_rate: Optional[str] = None
    amortization_rate: Optional[str] = None

    def values(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def is_started(self) -> bool:
        """Whether any field of the entry carries a value."""
        return any(is_present(v) for v in self.values().values())

    @property
    def principal_cents(self) -> int:
        return parse_money_to_cents(self.principal)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ExternalLoan':
        data = as_mapping(data)
        kwargs = {}
        for f in fields(cls):
            value = data.get(f.name)
            kwargs[f.name] = value if value is None or f.name == 'principal' else str(value)
        return cls(**kwargs)


@dataclass(frozen=True)
class PublicLoanPackage:
    """Public loan package: base loan plus supplemental loans."""
    base_loan: MoneyInput = None
    family_bonus: MoneyInput = None
    barrier_free: MoneyInput = None
    wood_construction: MoneyInput = None
    location_cost: MoneyInput = None
    efficiency_standard: MoneyInput = None


@dataclass(frozen=True)
class OwnContribution:
    """Applicant's own contribution."""
    cash_funds: MoneyInput = None
    grants: MoneyInput = None
    self_help: MoneyInput = None
    existing_structure_value: MoneyInput = None
    land_value: MoneyInput = None


@dataclass(frozen=True)
class FinancingPlan:
    """All financing groups of the financing step."""

    external_loans: Tuple[ExternalLoan, ...] = ()
    public_loans: PublicLoanPackage = field(default_factory=PublicLoanPackage)
    supplementary_loan: MoneyInput = None
    own_contribution: OwnContribution = field(default_factory=OwnContribution)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'FinancingPlan':
        data = as_mapping(data)
        loans = data.get('external_loans')
        if not isinstance(loans, (list, tuple)):
            loans = []
        return cls(
            external_loans=tuple(ExternalLoan.from_dict(loan) for loan in loans),
            public_loans=_money_fields_from_dict(PublicLoanPackage, data.get('public_loans')),
            supplementary_loan=data.get('supplementary_loan'),
            own_contribution=_money_fields_from_dict(OwnContribution, data.get('own_contribution')),
        )

    def to_dict(self) -> dict:
        return {
            'external_loans': [loan.values() for loan in self.external_loans],
            'public_loans': _money_fields_to_dict(self.public_loans),
            'supplementary_loan': self.supplementary_loan,
            'own_contribution': _money_fields_to_dict(self.own_contribution),
        }


@dataclass(frozen=True)
class SelfHelpDeclaration:
    """
    Summary of the separate self-help form.

    Attributes:
        will_provide_self_help: Whether the applicant will provide self-help
        total: Total value of the declared self-help work (money text)
    """

    will_provide_self_help: Optional[bool] = None
    total: MoneyInput = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['SelfHelpDeclaration']:
        if not isinstance(data, dict):
            return None
        return cls(
            will_provide_self_help=parse_flag(data.get('will_provide_self_help')),
            total=data.get('total'),
        )


# =============================================================================
# Application Record
# =============================================================================

@dataclass(frozen=True)
class FinancingApplication:
    """
    One application record as submitted through the wizard.

    The record is transient: every evaluation rebuilds all derived data
    from it.
    """

    variant: Optional[str] = None
    postal_code: Optional[str] = None
    household: HouseholdComposition = field(default_factory=HouseholdComposition)
    flags: FeatureFlags = field(default_factory=FeatureFlags)
    costs: CostBreakdown = field(default_factory=CostBreakdown)
    financing: FinancingPlan = field(default_factory=FinancingPlan)
    self_help_declaration: Optional[SelfHelpDeclaration] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'FinancingApplication':
        """Create from a nested mapping (JSON / YAML record)."""
        data = as_mapping(data)
        variant = data.get('variant')
        postal_code = data.get('postal_code')
        return cls(
            variant=str(variant) if variant is not None else None,
            postal_code=str(postal_code) if postal_code is not None else None,
            household=HouseholdComposition.from_dict(data.get('household')),
            flags=FeatureFlags.from_dict(data.get('flags')),
            costs=CostBreakdown.from_dict(data.get('costs')),
            financing=FinancingPlan.from_dict(data.get('financing')),
            self_help_declaration=SelfHelpDeclaration.from_dict(data.get('self_help_declaration')),
        )

    @classmethod
    def coerce(cls, record: Any) -> 'FinancingApplication':
        """Accept either an application or a raw mapping."""
        if isinstance(record, cls):
            return record
        return cls.from_dict(record)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        declaration = None
        if self.self_help_declaration is not None:
            declaration = {
                'will_provide_self_help': self.self_help_declaration.will_provide_self_help,
                'total': self.self_help_declaration.total,
            }
        return {
            'variant': self.variant,
            'postal_code': self.postal_code,
            'household': self.household.to_dict(),
            'flags': self.flags.to_dict(),
            'costs': self.costs.to_dict(),
            'financing': self.financing.to_dict(),
            'self_help_declaration': declaration,
        }
