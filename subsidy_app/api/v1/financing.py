"""
Financing API Endpoints - Evaluation, field requirements and lookups.

Implements:
- POST /api/v1/financing/evaluate - Evaluate an application record
- POST /api/v1/financing/requirements - Applicability table for a record
- POST /api/v1/financing/requirements/{field_key} - One field's rule
- GET /api/v1/financing/tiers/{postal_code} - Cost tier and ceilings
- GET /api/v1/financing/classification/{variant} - Variant predicates
"""
from functools import lru_cache
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from subsidy_app.domain.exceptions import DomainError, UnknownFieldError
from subsidy_app.domain.services import FinancingEvaluationService, classify

router = APIRouter()

MoneyField = Optional[Union[int, float, str]]


# =============================================================================
# Pydantic Models
# =============================================================================

class HouseholdIn(BaseModel):
    """Household counts; text values are parsed tolerantly."""
    adult_count: Optional[Union[int, str]] = None
    child_count: Optional[Union[int, str]] = None
    disabled_adult_count: Optional[Union[int, str]] = None
    disabled_child_count: Optional[Union[int, str]] = None


class FlagsIn(BaseModel):
    """Tri-state feature flags (null = unanswered)."""
    wants_barrier_free_loan: Optional[bool] = None
    wants_wood_construction_loan: Optional[bool] = None
    wants_location_cost_loan: Optional[bool] = None
    meets_efficiency_standard: Optional[bool] = None
    has_supplementary_loan: Optional[bool] = None


class SiteCostsIn(BaseModel):
    purchase_price: MoneyField = None
    value: MoneyField = None
    development_costs: MoneyField = None
    location_extra_costs: MoneyField = None


class PurchaseCostsIn(BaseModel):
    purchase_price: MoneyField = None


class ConstructionCostsIn(BaseModel):
    building_costs: MoneyField = None
    special_construction: MoneyField = None
    existing_structure_value: MoneyField = None
    outdoor_facilities: MoneyField = None
    architect_fees: MoneyField = None


class IncidentalCostsIn(BaseModel):
    acquisition_incidentals: MoneyField = None
    administration: MoneyField = None
    permanent_financing: MoneyField = None
    interim_financing: MoneyField = None
    other_incidentals: MoneyField = None
    additional_costs: MoneyField = None


class CostsIn(BaseModel):
    site: SiteCostsIn = Field(default_factory=SiteCostsIn)
    purchase: PurchaseCostsIn = Field(default_factory=PurchaseCostsIn)
    construction: ConstructionCostsIn = Field(default_factory=ConstructionCostsIn)
    incidentals: IncidentalCostsIn = Field(default_factory=IncidentalCostsIn)


class ExternalLoanIn(BaseModel):
    lender: Optional[str] = None
    principal: MoneyField = None
    interest_rate: Optional[str] = None
    disbursement_rate: Optional[str] = None
    amortization_rate: Optional[str] = None


class PublicLoansIn(BaseModel):
    base_loan: MoneyField = None
    family_bonus: MoneyField = None
    barrier_free: MoneyField = None
    wood_construction: MoneyField = None
    location_cost: MoneyField = None
    efficiency_standard: MoneyField = None


class OwnContributionIn(BaseModel):
    cash_funds: MoneyField = None
    grants: MoneyField = None
    self_help: MoneyField = None
    existing_structure_value: MoneyField = None
    land_value: MoneyField = None


class FinancingIn(BaseModel):
    external_loans: List[ExternalLoanIn] = Field(default_factory=list)
    public_loans: PublicLoansIn = Field(default_factory=PublicLoansIn)
    supplementary_loan: MoneyField = None
    own_contribution: OwnContributionIn = Field(default_factory=OwnContributionIn)


class SelfHelpDeclarationIn(BaseModel):
    will_provide_self_help: Optional[bool] = None
    total: MoneyField = None


class ApplicationRecord(BaseModel):
    """Request model for one application record."""
    variant: Optional[str] = Field(None, description="Funding variant code, e.g. 'neubau'")
    postal_code: Optional[str] = Field(None, description="Postal code of the property")
    household: HouseholdIn = Field(default_factory=HouseholdIn)
    flags: FlagsIn = Field(default_factory=FlagsIn)
    costs: CostsIn = Field(default_factory=CostsIn)
    financing: FinancingIn = Field(default_factory=FinancingIn)
    self_help_declaration: Optional[SelfHelpDeclarationIn] = None


class ViolationResponse(BaseModel):
    step: int
    step_title: str
    field_key: Optional[str]
    code: str
    message: str


class TierResponse(BaseModel):
    """Response model for a postal code tier lookup."""
    postal_code: str
    tier: int
    ceiling_a_cents: int
    ceiling_b_cents: int
    ceiling_a: str
    ceiling_b: str
    message: str
    is_default: bool


class ClassificationResponse(BaseModel):
    variant: Optional[str]
    raw_code: str
    is_new_build: bool
    is_existing_purchase: bool
    is_first_acquisition: bool
    is_change_of_use: bool
    is_apartment: bool
    includes_construction_costs: bool
    includes_purchase_price: bool
    qualifies_for_supplements: bool


class CompletenessResponse(BaseModel):
    potential_fields: int
    unsatisfied_fields: int
    score: int


class EvaluationResponse(BaseModel):
    """Response model for an evaluation."""
    classification: ClassificationResponse
    tier: TierResponse
    totals: Dict[str, Any]
    reconciliation: Dict[str, Any]
    completeness: CompletenessResponse
    is_valid: bool
    violations: List[ViolationResponse]
    violations_by_step: Dict[str, List[str]]
    repayment_discounts: List[Dict[str, Any]]


class FieldRuleResponse(BaseModel):
    key: str
    label: str
    step: int
    category: str
    kind: str
    applies: bool
    required: bool
    present: bool
    limits: List[Dict[str, Any]]
    breached_limit: Optional[str]


class RequirementsResponse(BaseModel):
    """Per-field applicability for a record."""
    fields: List[FieldRuleResponse]
    applicable: int
    required: int


# =============================================================================
# Dependencies
# =============================================================================

@lru_cache(maxsize=1)
def get_evaluation_service() -> FinancingEvaluationService:
    """Shared, stateless evaluation service."""
    return FinancingEvaluationService()


def _record_dict(record: ApplicationRecord) -> dict:
    return record.model_dump()


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/evaluate",
    response_model=EvaluationResponse,
    summary="Evaluate an application record",
    description="Aggregate costs and financing, cross-validate and score completeness. "
                "Violations are advisory and never block the request."
)
def evaluate_record(
    record: ApplicationRecord,
    service: FinancingEvaluationService = Depends(get_evaluation_service)
):
    try:
        result = service.evaluate(_record_dict(record))
    except DomainError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    return result.to_dict(service.config.currency_config)


@router.post(
    "/requirements",
    response_model=RequirementsResponse,
    summary="Field requirements for a record",
    description="Applicability, requirement and limits for every field"
)
def get_requirements(
    record: ApplicationRecord,
    service: FinancingEvaluationService = Depends(get_evaluation_service)
):
    table = service.build_rules(_record_dict(record))
    return {
        'fields': [rule.to_dict() for rule in table],
        'applicable': len(table.applicable()),
        'required': len(table.required()),
    }


@router.post(
    "/requirements/{field_key}",
    response_model=FieldRuleResponse,
    summary="Requirement of a single field"
)
def get_field_requirement(
    field_key: str,
    record: ApplicationRecord,
    service: FinancingEvaluationService = Depends(get_evaluation_service)
):
    table = service.build_rules(_record_dict(record))
    try:
        return table.get(field_key).to_dict()
    except UnknownFieldError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )


@router.get(
    "/tiers/{postal_code}",
    response_model=TierResponse,
    summary="Resolve cost tier for a postal code"
)
def get_tier(
    postal_code: str,
    service: FinancingEvaluationService = Depends(get_evaluation_service)
):
    """Unknown postal codes resolve to the default tier."""
    resolution = service.cap_lookup.resolve_tier(postal_code)
    return resolution.to_dict(service.config.currency_config)


@router.get(
    "/classification/{variant}",
    response_model=ClassificationResponse,
    summary="Classify a funding variant"
)
def get_classification(variant: str):
    return classify(variant).to_dict()
