"""
Cap Lookup Service - Postal code to cost tier and base loan ceilings.

The tier table is read once from configuration and never mutated.
Unmapped postal codes fall back to the default tier with a generic
advisory message.
"""
import logging
import re
from typing import Optional

from subsidy_app.config import SubsidyConfig, get_config
from subsidy_app.domain.entities import TierResolution
from subsidy_app.domain.exceptions import InvalidTierTableError
from subsidy_app.modules.money import format_with_config

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class CapLookupService:
    """
    Service resolving base loan ceilings from the property postal code.

    Ceiling A is the enforced maximum of the base loan; ceiling B is
    informational only.
    """

    def __init__(self, config: Optional[SubsidyConfig] = None):
        self.config = config or get_config()
        self.ceilings = self.config.tier_ceilings
        self.table = self.config.postcode_tiers
        self.default_tier = self.config.default_tier
        self._validate_table()

    def _validate_table(self) -> None:
        """Every mapped tier, and the default tier, must have ceilings."""
        known = list(self.ceilings)
        if self.default_tier not in self.ceilings:
            raise InvalidTierTableError("<default>", self.default_tier, known)
        for postal_code, tier in self.table.items():
            if tier not in self.ceilings:
                raise InvalidTierTableError(postal_code, tier, known)

    @staticmethod
    def normalize(postal_code: Optional[str]) -> str:
        """Strip all whitespace from a postal code."""
        return _WHITESPACE.sub("", str(postal_code or ""))

    def resolve_tier(self, postal_code: Optional[str]) -> TierResolution:
        """
        Resolve tier and ceilings for a postal code.

        Args:
            postal_code: Property postal code, may be blank or unknown

        Returns:
            TierResolution; never raises for bad input
        """
        code = self.normalize(postal_code)
        tier = self.table.get(code)

        if tier is None:
            logger.debug(f"Postal code '{code}' not in tier table, using tier {self.default_tier}")
            ceilings = self.ceilings[self.default_tier]
            return TierResolution(
                postal_code=code,
                tier=self.default_tier,
                ceiling_a=int(ceilings["ceiling_a_cents"]),
                ceiling_b=int(ceilings["ceiling_b_cents"]),
                message=self.config.default_tier_message,
                is_default=True,
            )

        ceilings = self.ceilings[tier]
        ceiling_a = int(ceilings["ceiling_a_cents"])
        ceiling_b = int(ceilings["ceiling_b_cents"])
        currency = self.config.currency_config
        message = self.config.tier_message_template.format(
            postal_code=code,
            ceiling_a=format_with_config(ceiling_a, currency),
            ceiling_b=format_with_config(ceiling_b, currency),
        )
        return TierResolution(
            postal_code=code,
            tier=tier,
            ceiling_a=ceiling_a,
            ceiling_b=ceiling_b,
            message=message,
            is_default=False,
        )

    def max_loan_ceiling(self, postal_code: Optional[str]) -> int:
        """Enforced base loan maximum (ceiling A) in cents."""
        return self.resolve_tier(postal_code).ceiling_a
