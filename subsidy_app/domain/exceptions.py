"""
Domain Exceptions for the Financing Engine.

Bad input data never raises: it degrades to zero, the default tier or
"not applicable" and surfaces as violations. These exceptions cover
programming and configuration faults only:
- Lookup of a field key that is not in the rule table
- A tier table that maps postal codes to unconfigured tiers
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Rule Table Exceptions
# =============================================================================

class UnknownFieldError(DomainError):
    """Raised when a field key is not part of the rule table."""

    def __init__(self, field_key: str):
        message = f"Field '{field_key}' is not a known financing field"
        super().__init__(message, code="UNKNOWN_FIELD")
        self.field_key = field_key


# =============================================================================
# Tier Table Exceptions
# =============================================================================

class InvalidTierTableError(DomainError):
    """Raised when the postal code table references a tier without ceilings."""

    def __init__(self, postal_code: str, tier: int, known_tiers: list):
        message = (
            f"Postal code '{postal_code}' maps to tier {tier}, "
            f"but only tiers {sorted(known_tiers)} are configured"
        )
        super().__init__(message, code="INVALID_TIER_TABLE")
        self.postal_code = postal_code
        self.tier = tier
        self.known_tiers = known_tiers
