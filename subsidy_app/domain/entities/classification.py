"""
Project Classification - Subsidy variant and its derived predicates.

The variant is resolved once per record; every downstream stage reads
the predicates instead of comparing variant codes.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubsidyVariant(Enum):
    """Funding variant selected in the application wizard."""
    NEW_BUILD_HOUSE = "neubau"
    NEW_BUILD_APARTMENT = "neubau-wohnung"
    EXISTING_PURCHASE_HOUSE = "bestandserwerb-eigenheim"
    EXISTING_PURCHASE_APARTMENT = "bestandserwerb-wohnung"
    FIRST_ACQUISITION_HOUSE = "ersterwerb-eigenheim"
    FIRST_ACQUISITION_APARTMENT = "ersterwerb-wohnung"
    CHANGE_OF_USE = "nutzungsaenderung"


VARIANT_ALIASES = {
    "new-build-house": SubsidyVariant.NEW_BUILD_HOUSE,
    "new-build-apartment": SubsidyVariant.NEW_BUILD_APARTMENT,
    "existing-purchase-house": SubsidyVariant.EXISTING_PURCHASE_HOUSE,
    "existing-purchase-apartment": SubsidyVariant.EXISTING_PURCHASE_APARTMENT,
    "first-acquisition-house": SubsidyVariant.FIRST_ACQUISITION_HOUSE,
    "first-acquisition-apartment": SubsidyVariant.FIRST_ACQUISITION_APARTMENT,
    "change-of-use": SubsidyVariant.CHANGE_OF_USE,
}

_NEW_BUILD = {SubsidyVariant.NEW_BUILD_HOUSE, SubsidyVariant.NEW_BUILD_APARTMENT}
_EXISTING_PURCHASE = {SubsidyVariant.EXISTING_PURCHASE_HOUSE, SubsidyVariant.EXISTING_PURCHASE_APARTMENT}
_FIRST_ACQUISITION = {SubsidyVariant.FIRST_ACQUISITION_HOUSE, SubsidyVariant.FIRST_ACQUISITION_APARTMENT}
_APARTMENT = {
    SubsidyVariant.NEW_BUILD_APARTMENT,
    SubsidyVariant.EXISTING_PURCHASE_APARTMENT,
    SubsidyVariant.FIRST_ACQUISITION_APARTMENT,
}


@dataclass(frozen=True)
class ProjectClassification:
    """
    Immutable classification of an application.

    Attributes:
        variant: Resolved variant, None when the code is empty or unknown
        raw_code: The code as received, for display
    """

    variant: Optional[SubsidyVariant] = None
    raw_code: str = ""

    @property
    def is_known(self) -> bool:
        return self.variant is not None

    @property
    def is_new_build(self) -> bool:
        return self.variant in _NEW_BUILD

    @property
    def is_existing_purchase(self) -> bool:
        return self.variant in _EXISTING_PURCHASE

    @property
    def is_first_acquisition(self) -> bool:
        return self.variant in _FIRST_ACQUISITION

    @property
    def is_change_of_use(self) -> bool:
        return self.variant is SubsidyVariant.CHANGE_OF_USE

    @property
    def is_apartment(self) -> bool:
        return self.variant in _APARTMENT

    @property
    def includes_construction_costs(self) -> bool:
        """Construction cost block applies (new-build or change-of-use)."""
        return self.is_new_build or self.is_change_of_use

    @property
    def includes_purchase_price(self) -> bool:
        """Purchase price applies (existing-purchase or first-acquisition)."""
        return self.is_existing_purchase or self.is_first_acquisition

    @property
    def qualifies_for_supplements(self) -> bool:
        """Barrier-free, location and efficiency supplements are offered."""
        return self.is_new_build or self.is_first_acquisition

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'variant': self.variant.value if self.variant else None,
            'raw_code': self.raw_code,
            'is_new_build': self.is_new_build,
            'is_existing_purchase': self.is_existing_purchase,
            'is_first_acquisition': self.is_first_acquisition,
            'is_change_of_use': self.is_change_of_use,
            'is_apartment': self.is_apartment,
            'includes_construction_costs': self.includes_construction_costs,
            'includes_purchase_price': self.includes_purchase_price,
            'qualifies_for_supplements': self.qualifies_for_supplements,
        }
