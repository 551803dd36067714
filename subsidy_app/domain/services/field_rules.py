"""
Conditional Field Requirement Engine.

A single declarative rule table answers, for every field of the
application and the current record context:
- is the field applicable (shown / counted)?
- is it required?
- which limits apply (ordered; the first breached one is reported)?

The validator, the aggregator and the completeness scorer all read the
same table, so field inclusion never diverges between them.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Iterator, List, Optional, Tuple

from subsidy_app.config import SubsidyConfig
from subsidy_app.domain.entities import (
    FinancingApplication,
    ProjectClassification,
    TierResolution,
    Violation,
    WizardStep,
)
from subsidy_app.domain.exceptions import UnknownFieldError
from subsidy_app.modules.money import format_with_config, is_present, parse_money_to_cents

# Field kinds
MONEY = "money"
TEXT = "text"
COUNT = "count"
FLAG = "flag"

# Limit kinds
MAX = "max"
MIN = "min"
EQUAL = "equal"

_LIMIT_CODES = {MAX: "ABOVE_MAX", MIN: "BELOW_MIN", EQUAL: "MISMATCH"}


@dataclass(frozen=True)
class Limit:
    """
    A bound on a field's numeric value.

    Attributes:
        kind: 'max', 'min' or 'equal'
        amount: Bound in cents (money) or persons (count)
        message: Message reported when the bound is breached
    """

    kind: str
    amount: int
    message: str

    @property
    def code(self) -> str:
        return _LIMIT_CODES[self.kind]

    def is_breached(self, value: int) -> bool:
        if self.kind == MAX:
            return value > self.amount
        if self.kind == MIN:
            return value < self.amount
        return value != self.amount


@dataclass(frozen=True)
class FieldRule:
    """
    Requirement rule for one field, already evaluated against a record.

    Attributes:
        key: Dotted field key, e.g. 'financing.public_loans.base_loan'
        label: Display label used in messages
        step: Wizard step the field lives in
        category: Aggregation category ('site', 'public_loans', ...)
        kind: money, text, count or flag
        applies: Field is applicable in the current context
        required: Field must carry a value when applicable
        value: Raw value from the record
        limits: Ordered limits, checked only when a value is present
        order: Position in the table
    """

    key: str
    label: str
    step: WizardStep
    category: str
    kind: str
    applies: bool
    required: bool
    value: Any = None
    limits: Tuple[Limit, ...] = ()
    order: int = 0

    @property
    def is_present(self) -> bool:
        if self.kind in (COUNT, FLAG):
            return self.value is not None
        return is_present(self.value)

    @property
    def numeric_value(self) -> int:
        """Cents for money fields, the count for count fields, else 0."""
        if self.kind == MONEY:
            return parse_money_to_cents(self.value)
        if self.kind == COUNT:
            return self.value or 0
        return 0

    @property
    def is_missing(self) -> bool:
        return self.applies and self.required and not self.is_present

    def breached_limit(self) -> Optional[Limit]:
        """First breached limit, or None."""
        if not self.applies or not self.is_present:
            return None
        value = self.numeric_value
        for limit in self.limits:
            if limit.is_breached(value):
                return limit
        return None

    @property
    def is_satisfied(self) -> bool:
        """Applicable field is neither missing nor over a limit."""
        return not self.is_missing and self.breached_limit() is None

    def check(self) -> Optional[Violation]:
        """Single violation for this field, or None."""
        if not self.applies:
            return None
        if self.is_missing:
            if self.kind == FLAG:
                message = f"Please state whether {self.label}"
            else:
                message = f"Please enter {self.label}"
            return Violation(self.step, message, self.key, "MISSING", self.order)
        limit = self.breached_limit()
        if limit is not None:
            return Violation(self.step, limit.message, self.key, limit.code, self.order)
        return None

    def to_dict(self) -> dict:
        limit = self.breached_limit()
        return {
            'key': self.key,
            'label': self.label,
            'step': int(self.step),
            'category': self.category,
            'kind': self.kind,
            'applies': self.applies,
            'required': self.required,
            'present': self.is_present,
            'limits': [{'kind': l.kind, 'amount': l.amount} for l in self.limits],
            'breached_limit': limit.kind if limit else None,
        }


@dataclass(frozen=True)
class RuleContext:
    """Inputs the rule table is evaluated against."""

    record: FinancingApplication
    classification: ProjectClassification
    tier: TierResolution
    config: SubsidyConfig

    def fmt(self, cents: int) -> str:
        return format_with_config(cents, self.config.currency_config)


@dataclass
class RuleTable:
    """Ordered collection of evaluated field rules."""

    rules: List[FieldRule] = field(default_factory=list)

    def __iter__(self) -> Iterator[FieldRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, key: str) -> bool:
        return any(rule.key == key for rule in self.rules)

    def add(self, **kwargs) -> FieldRule:
        rule = FieldRule(order=len(self.rules), **kwargs)
        self.rules.append(rule)
        return rule

    def get(self, key: str) -> FieldRule:
        """
        Look up a rule by field key.

        Raises:
            UnknownFieldError: If the key is not in the table
        """
        for rule in self.rules:
            if rule.key == key:
                return rule
        raise UnknownFieldError(key)

    def applicable(self, category: Optional[str] = None) -> List[FieldRule]:
        return [
            rule for rule in self.rules
            if rule.applies and (category is None or rule.category == category)
        ]

    def required(self) -> List[FieldRule]:
        return [rule for rule in self.rules if rule.applies and rule.required]

    def sum_category(self, category: str) -> int:
        """Sum of applicable money fields in a category, in cents."""
        return sum(
            rule.numeric_value for rule in self.applicable(category)
            if rule.kind == MONEY
        )


# =============================================================================
# Table Construction
# =============================================================================

def build_rule_table(context: RuleContext) -> RuleTable:
    """Evaluate every field rule against the record context."""
    table = RuleTable()
    _household_rules(table, context)
    _property_rules(table, context)
    _cost_rules(table, context)
    _external_loan_rules(table, context)
    _public_loan_rules(table, context)
    _supplementary_loan_rules(table, context)
    _own_contribution_rules(table, context)
    return table


def _household_rules(table: RuleTable, ctx: RuleContext) -> None:
    household = ctx.record.household
    step = WizardStep.HOUSEHOLD

    table.add(
        key="household.adult_count", label="the number of adults", step=step,
        category="household", kind=COUNT, applies=True, required=True,
        value=household.adult_count,
        limits=(Limit(MIN, 1, "The number of adults must not be 0"),),
    )
    table.add(
        key="household.child_count", label="the number of children", step=step,
        category="household", kind=COUNT, applies=True, required=True,
        value=household.child_count,
    )
    table.add(
        key="household.disabled_adult_count", label="the number of disabled adults",
        step=step, category="household", kind=COUNT, applies=True, required=False,
        value=household.disabled_adult_count,
        limits=(Limit(
            MAX, household.adult_count or 0,
            "The number of disabled adults cannot exceed the number of adults",
        ),),
    )
    table.add(
        key="household.disabled_child_count", label="the number of disabled children",
        step=step, category="household", kind=COUNT, applies=True, required=False,
        value=household.disabled_child_count,
        limits=(Limit(
            MAX, household.child_count or 0,
            "The number of disabled children cannot exceed the number of children",
        ),),
    )
    table.add(
        key="flags.has_supplementary_loan",
        label="a supplementary loan is requested instead of the public loan package",
        step=step, category="household", kind=FLAG, applies=True, required=True,
        value=ctx.record.flags.has_supplementary_loan,
    )


def _property_rules(table: RuleTable, ctx: RuleContext) -> None:
    flags = ctx.record.flags
    supplements = ctx.classification.qualifies_for_supplements
    step = WizardStep.PROPERTY

    table.add(
        key="variant", label="the funding variant", step=step, category="property",
        kind=TEXT, applies=True, required=True, value=ctx.record.variant,
    )
    table.add(
        key="postal_code", label="the postal code of the property", step=step,
        category="property", kind=TEXT, applies=True, required=True,
        value=ctx.record.postal_code,
    )
    table.add(
        key="flags.wants_wood_construction_loan",
        label="the supplemental loan for wood construction is requested",
        step=step, category="property", kind=FLAG, applies=True, required=True,
        value=flags.wants_wood_construction_loan,
    )
    table.add(
        key="flags.wants_barrier_free_loan",
        label="the supplemental loan for barrier-free construction is requested",
        step=step, category="property", kind=FLAG, applies=supplements, required=True,
        value=flags.wants_barrier_free_loan,
    )
    table.add(
        key="flags.meets_efficiency_standard",
        label="the property meets the efficiency house 40 standard",
        step=step, category="property", kind=FLAG, applies=supplements, required=True,
        value=flags.meets_efficiency_standard,
    )
    table.add(
        key="flags.wants_location_cost_loan",
        label="the supplemental loan for location-related extra costs is requested",
        step=step, category="property", kind=FLAG, applies=supplements, required=True,
        value=flags.wants_location_cost_loan,
    )


def _location_loan_applies(ctx: RuleContext) -> bool:
    return ctx.classification.qualifies_for_supplements and ctx.record.flags.wants_location_cost_loan is True


def _cost_rules(table: RuleTable, ctx: RuleContext) -> None:
    costs = ctx.record.costs
    cls = ctx.classification
    step = WizardStep.COSTS

    def money(key, label, category, applies, value, required=True):
        table.add(
            key=f"costs.{key}", label=label, step=step, category=category,
            kind=MONEY, applies=applies, required=required, value=value,
        )

    money("site.purchase_price", "the purchase price of the building site", "site",
          cls.is_new_build, costs.site.purchase_price)
    money("site.value", "the value of the building site", "site",
          cls.is_new_build, costs.site.value)
    money("site.development_costs", "the development costs", "site",
          cls.is_new_build, costs.site.development_costs)
    money("site.location_extra_costs", "the eligible location-related extra costs", "site",
          _location_loan_applies(ctx), costs.site.location_extra_costs)

    money("purchase.purchase_price", "the purchase price", "purchase",
          cls.includes_purchase_price, costs.purchase.purchase_price)

    construction = cls.includes_construction_costs
    money("construction.building_costs", "the building costs", "construction",
          construction, costs.construction.building_costs, required=cls.is_new_build)
    money("construction.special_construction", "the costs of special construction", "construction",
          construction, costs.construction.special_construction)
    money("construction.existing_structure_value", "the value of existing building parts",
          "construction", construction, costs.construction.existing_structure_value)
    money("construction.outdoor_facilities", "the costs of outdoor facilities", "construction",
          construction, costs.construction.outdoor_facilities)
    money("construction.architect_fees", "the costs of architect and engineering services",
          "construction", construction, costs.construction.architect_fees)

    incidentals = costs.incidentals
    money("incidentals.acquisition_incidentals", "the acquisition incidentals", "incidentals",
          True, incidentals.acquisition_incidentals)
    money("incidentals.administration", "the costs of administration services", "incidentals",
          True, incidentals.administration)
    money("incidentals.permanent_financing", "the costs of procuring permanent financing",
          "incidentals", True, incidentals.permanent_financing)
    money("incidentals.interim_financing", "the costs of procuring and servicing interim financing",
          "incidentals", True, incidentals.interim_financing)
    money("incidentals.other_incidentals", "the other incidental costs", "incidentals",
          True, incidentals.other_incidentals)
    money("incidentals.additional_costs", "the additional costs", "incidentals",
          True, incidentals.additional_costs)


_LOAN_FIELD_LABELS = (
    ("lender", "lender", TEXT),
    ("principal", "principal", MONEY),
    ("interest_rate", "interest rate", TEXT),
    ("disbursement_rate", "disbursement rate", TEXT),
    ("amortization_rate", "amortization rate", TEXT),
)


def _external_loan_rules(table: RuleTable, ctx: RuleContext) -> None:
    for index, loan in enumerate(ctx.record.financing.external_loans):
        started = loan.is_started
        values = loan.values()
        for name, label, kind in _LOAN_FIELD_LABELS:
            table.add(
                key=f"financing.external_loans.{index}.{name}",
                label=f"the {label} of external loan {index + 1}",
                step=WizardStep.FINANCING, category="external_loans", kind=kind,
                applies=started, required=True, value=values[name],
            )


def _public_loan_rules(table: RuleTable, ctx: RuleContext) -> None:
    record = ctx.record
    loans = record.financing.public_loans
    flags = record.flags
    config = ctx.config
    package = not flags.uses_supplementary_loan
    supplements = ctx.classification.qualifies_for_supplements
    step = WizardStep.FINANCING
    fmt = ctx.fmt

    def loan(key, label, applies, value, limits=()):
        table.add(
            key=f"financing.public_loans.{key}", label=label, step=step,
            category="public_loans", kind=MONEY, applies=applies, required=True,
            value=value, limits=tuple(limits),
        )

    def fixed_max(loan_key, title, value):
        ceiling = config.get_loan_max(loan_key)
        return Limit(MAX, ceiling, f"{title} may be at most {fmt(ceiling)} (currently: {fmt(value)})")

    base = parse_money_to_cents(loans.base_loan)
    loan("base_loan", "the principal of the base loan", package, loans.base_loan, [
        Limit(MAX, ctx.tier.ceiling_a,
              f"The base loan may be at most {fmt(ctx.tier.ceiling_a)} (currently: {fmt(base)})"),
    ])

    household = record.household
    per_dependent = config.family_bonus_per_dependent
    dependents = household.eligible_dependents
    bonus_max = dependents * per_dependent
    bonus = parse_money_to_cents(loans.family_bonus)
    loan("family_bonus", "the principal of the family bonus", package and household.has_children,
         loans.family_bonus, [
             Limit(MAX, bonus_max,
                   f"The family bonus may be at most {fmt(bonus_max)} "
                   f"({dependents} eligible persons × {fmt(per_dependent)}, currently: {fmt(bonus)})"),
         ])

    barrier_free = parse_money_to_cents(loans.barrier_free)
    loan("barrier_free", "the principal for barrier-free construction",
         package and supplements and flags.wants_barrier_free_loan is True, loans.barrier_free,
         [fixed_max("barrier_free", "The barrier-free loan", barrier_free)])

    wood = parse_money_to_cents(loans.wood_construction)
    loan("wood_construction", "the principal for wood construction",
         package and flags.wants_wood_construction_loan is True, loans.wood_construction,
         [fixed_max("wood_construction", "The wood construction loan", wood)])

    location = parse_money_to_cents(loans.location_cost)
    location_limits = [fixed_max("location_cost", "The location-related extra costs loan", location)]
    declared = record.costs.site.location_extra_costs
    if is_present(declared):
        ratio = config.location_cost_ratio
        cap = int((Decimal(parse_money_to_cents(declared)) * ratio).to_integral_value(rounding=ROUND_FLOOR))
        location_limits.append(Limit(
            MAX, cap,
            f"The location-related extra costs loan may be at most {ratio * 100:.0f} % of the declared "
            f"eligible location-related extra costs (at most {fmt(cap)}, currently: {fmt(location)})",
        ))
    loan("location_cost", "the principal for location-related extra costs",
         package and _location_loan_applies(ctx), loans.location_cost, location_limits)

    efficiency = parse_money_to_cents(loans.efficiency_standard)
    loan("efficiency_standard", "the principal for the efficiency house 40 standard",
         package and supplements and flags.meets_efficiency_standard is True,
         loans.efficiency_standard,
         [fixed_max("efficiency_standard", "The efficiency house 40 standard loan", efficiency)])


def _supplementary_loan_rules(table: RuleTable, ctx: RuleContext) -> None:
    config = ctx.config
    value = ctx.record.financing.supplementary_loan
    amount = parse_money_to_cents(value)
    fmt = ctx.fmt
    maximum = config.supplementary_loan_max
    minimum = config.supplementary_loan_min
    table.add(
        key="financing.supplementary_loan", label="the principal of the supplementary loan",
        step=WizardStep.FINANCING, category="supplementary_loan", kind=MONEY,
        applies=ctx.record.flags.uses_supplementary_loan, required=True, value=value,
        limits=(
            Limit(MAX, maximum, f"The supplementary loan may be at most {fmt(maximum)} (currently: {fmt(amount)})"),
            Limit(MIN, minimum, f"The supplementary loan must be at least {fmt(minimum)} (currently: {fmt(amount)})"),
        ),
    )


def _self_help_limits(ctx: RuleContext) -> Tuple[Limit, ...]:
    """Consistency of the self-help amount with the separate self-help form."""
    declaration = ctx.record.self_help_declaration
    if declaration is None:
        return ()
    fmt = ctx.fmt
    amount = parse_money_to_cents(ctx.record.financing.own_contribution.self_help)
    if declaration.will_provide_self_help is False:
        return (Limit(
            MAX, 0,
            f"A self-help amount of {fmt(amount)} was entered, "
            f"but the self-help form states that no self-help will be provided",
        ),)
    if declaration.will_provide_self_help is True and is_present(declaration.total):
        total = parse_money_to_cents(declaration.total)
        return (Limit(
            EQUAL, total,
            f"The self-help amount ({fmt(amount)}) must match the total "
            f"of the self-help form ({fmt(total)})",
        ),)
    return ()


def _own_contribution_rules(table: RuleTable, ctx: RuleContext) -> None:
    own = ctx.record.financing.own_contribution
    cls = ctx.classification

    def money(key, label, applies, value, limits=()):
        table.add(
            key=f"financing.own_contribution.{key}", label=label, step=WizardStep.FINANCING,
            category="own_contribution", kind=MONEY, applies=applies, required=True,
            value=value, limits=tuple(limits),
        )

    money("cash_funds", "the own cash funds", True, own.cash_funds)
    money("grants", "the grants", True, own.grants)
    money("self_help", "the value of self-help work", True, own.self_help, _self_help_limits(ctx))
    money("existing_structure_value", "the value of existing building parts",
          cls.includes_construction_costs, own.existing_structure_value)
    money("land_value", "the value of the building site", cls.is_new_build, own.land_value)
