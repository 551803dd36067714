"""
Classification Resolver - Variant code to ProjectClassification.
"""
from typing import Optional

from subsidy_app.domain.entities import ProjectClassification, SubsidyVariant, VARIANT_ALIASES

_BY_CODE = {variant.value: variant for variant in SubsidyVariant}


def resolve_variant(code: Optional[str]) -> Optional[SubsidyVariant]:
    """Match a variant code or alias, case-insensitively."""
    key = (code or "").strip().lower()
    if not key:
        return None
    return _BY_CODE.get(key) or VARIANT_ALIASES.get(key)


def classify(variant_code: Optional[str]) -> ProjectClassification:
    """
    Build the classification for a variant code.

    Empty or unknown codes yield a classification with every predicate false.
    """
    return ProjectClassification(
        variant=resolve_variant(variant_code),
        raw_code=(variant_code or "").strip(),
    )
