"""
Household and feature flag value objects.

Counts and flags come from wizard answers and may be unset. Unset is
kept distinct from zero / False so that presence rules can report it.
"""
from dataclasses import dataclass
from typing import Any, Optional

_TRUE_WORDS = {"true", "yes", "ja", "1"}
_FALSE_WORDS = {"false", "no", "nein", "0"}


def as_mapping(value: Any) -> dict:
    """A record section, or an empty one when the section is not a mapping."""
    return value if isinstance(value, dict) else {}


def parse_count(value: Any) -> Optional[int]:
    """
    Tolerant parse of a person count.

    Returns None for unset, negative or malformed input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    text = str(value).strip()
    if not text.isdigit():
        return None
    return int(text)


def parse_flag(value: Any) -> Optional[bool]:
    """Tri-state flag parse: True, False or None (unanswered)."""
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


@dataclass(frozen=True)
class HouseholdComposition:
    """
    Household members relevant for the family bonus.

    Attributes:
        adult_count: Adults in the household
        child_count: Children in the household
        disabled_adult_count: Adults with a disability
        disabled_child_count: Children with a disability
    """

    adult_count: Optional[int] = None
    child_count: Optional[int] = None
    disabled_adult_count: Optional[int] = None
    disabled_child_count: Optional[int] = None

    @property
    def eligible_dependents(self) -> int:
        """Persons counted for the family bonus (children plus disabled adults)."""
        return (self.child_count or 0) + (self.disabled_adult_count or 0)

    @property
    def has_children(self) -> bool:
        return (self.child_count or 0) > 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'HouseholdComposition':
        data = as_mapping(data)
        return cls(
            adult_count=parse_count(data.get('adult_count')),
            child_count=parse_count(data.get('child_count')),
            disabled_adult_count=parse_count(data.get('disabled_adult_count')),
            disabled_child_count=parse_count(data.get('disabled_child_count')),
        )

    def to_dict(self) -> dict:
        return {
            'adult_count': self.adult_count,
            'child_count': self.child_count,
            'disabled_adult_count': self.disabled_adult_count,
            'disabled_child_count': self.disabled_child_count,
            'eligible_dependents': self.eligible_dependents,
        }


@dataclass(frozen=True)
class FeatureFlags:
    """Optional-feature answers from the property and household steps."""

    wants_barrier_free_loan: Optional[bool] = None
    wants_wood_construction_loan: Optional[bool] = None
    wants_location_cost_loan: Optional[bool] = None
    meets_efficiency_standard: Optional[bool] = None
    has_supplementary_loan: Optional[bool] = None

    @property
    def uses_supplementary_loan(self) -> bool:
        """Supplementary loan replaces the public package only on an explicit True."""
        return self.has_supplementary_loan is True

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'FeatureFlags':
        data = as_mapping(data)
        return cls(
            wants_barrier_free_loan=parse_flag(data.get('wants_barrier_free_loan')),
            wants_wood_construction_loan=parse_flag(data.get('wants_wood_construction_loan')),
            wants_location_cost_loan=parse_flag(data.get('wants_location_cost_loan')),
            meets_efficiency_standard=parse_flag(data.get('meets_efficiency_standard')),
            has_supplementary_loan=parse_flag(data.get('has_supplementary_loan')),
        )

    def to_dict(self) -> dict:
        return {
            'wants_barrier_free_loan': self.wants_barrier_free_loan,
            'wants_wood_construction_loan': self.wants_wood_construction_loan,
            'wants_location_cost_loan': self.wants_location_cost_loan,
            'meets_efficiency_standard': self.meets_efficiency_standard,
            'has_supplementary_loan': self.has_supplementary_loan,
        }
