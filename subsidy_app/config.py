"""
Configuration loader for the Subsidy Financing Engine.

Loads settings from subsidy_config.yaml and provides typed access
to all configuration sections.
"""
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml

logger = logging.getLogger(__name__)


# Default config path inside the package data directory
DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "subsidy_config.yaml"
CONFIG_PATH_ENV = "SUBSIDY_CONFIG_PATH"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def _load_yaml_mapping(path: Path) -> dict:
    """Read a YAML file that must contain a mapping."""
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a YAML mapping: {path}")

    return data


class SubsidyConfig:
    """
    Configuration manager for the financing engine.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or DEFAULT_CONFIG_PATH
        self._config: dict = {}
        self._postcode_tiers: Optional[dict] = None
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        self._config = _load_yaml_mapping(self._config_path)
        self._postcode_tiers = None
        logger.info(f"Loaded financing configuration {self.version} from {self._config_path}")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        # Clear the cached singleton to force reload on next get_config()
        get_config.cache_clear()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Currency
    # =========================================================================

    @property
    def currency_config(self) -> dict:
        """Currency formatting configuration."""
        return self._config.get("currency", {
            "symbol": "€",
            "decimal_places": 2,
            "thousands_separator": ".",
            "decimal_separator": ",",
        })

    # =========================================================================
    # Cost Tiers
    # =========================================================================

    @property
    def cost_tiers(self) -> dict:
        """Cost tier section."""
        return self._config.get("cost_tiers", {})

    @property
    def tier_ceilings(self) -> dict[int, dict]:
        """
        Ceilings per tier.

        Returns:
            Dict mapping tier number -> {'ceiling_a_cents', 'ceiling_b_cents'}
        """
        tiers = self.cost_tiers.get("tiers", {})
        return {int(tier): values for tier, values in tiers.items()}

    @property
    def default_tier(self) -> int:
        """Tier used for postal codes missing from the table."""
        return int(self.cost_tiers.get("default_tier", 4))

    @property
    def tier_message_template(self) -> str:
        """Advisory message for mapped postal codes."""
        return self.cost_tiers.get("messages", {}).get("tier", "")

    @property
    def default_tier_message(self) -> str:
        """Generic advisory message for unmapped postal codes."""
        return self.cost_tiers.get("messages", {}).get("default", "")

    @property
    def tier_table_path(self) -> Path:
        """Location of the postal code -> tier table."""
        path = Path(self.cost_tiers.get("table_path", "postcode_tiers.yaml"))
        if not path.is_absolute():
            path = self._config_path.parent / path
        return path

    @property
    def postcode_tiers(self) -> dict[str, int]:
        """
        Postal code -> tier mapping, read once from the tier table file.

        Raises:
            ConfigurationError: If the table file is missing or malformed
        """
        if self._postcode_tiers is None:
            table = _load_yaml_mapping(self.tier_table_path).get("postcodes") or {}
            if not isinstance(table, dict):
                raise ConfigurationError("Tier table 'postcodes' must be a mapping")
            try:
                self._postcode_tiers = {str(code).strip(): int(tier) for code, tier in table.items()}
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Tier table contains a non-numeric tier: {e}")
            logger.info(f"Loaded {len(self._postcode_tiers)} postal codes from {self.tier_table_path}")
        return self._postcode_tiers

    # =========================================================================
    # Public Loan Package
    # =========================================================================

    @property
    def public_loans(self) -> dict:
        """Public loan package configuration."""
        return self._config.get("public_loans", {})

    def get_loan_config(self, loan_key: str) -> dict:
        """
        Get configuration for a public loan.

        Args:
            loan_key: One of 'base_loan', 'family_bonus', 'barrier_free',
                'wood_construction', 'location_cost', 'efficiency_standard'
        """
        return self.public_loans.get(loan_key, {})

    def get_discount_rate(self, loan_key: str) -> Decimal:
        """Repayment discount rate for a public loan (e.g. 0.10)."""
        return Decimal(str(self.get_loan_config(loan_key).get("discount_rate", "0.10")))

    def get_loan_max(self, loan_key: str) -> Optional[int]:
        """Fixed ceiling for a supplemental loan in cents, if any."""
        value = self.get_loan_config(loan_key).get("max_cents")
        return int(value) if value is not None else None

    @property
    def family_bonus_per_dependent(self) -> int:
        """Family bonus ceiling per eligible dependent in cents."""
        return int(self.get_loan_config("family_bonus").get("per_dependent_cents", 2400000))

    @property
    def location_cost_ratio(self) -> Decimal:
        """Share of declared location extra costs the location loan may cover."""
        return Decimal(str(self.get_loan_config("location_cost").get("max_cost_ratio", "0.75")))

    # =========================================================================
    # Supplementary Loan
    # =========================================================================

    @property
    def supplementary_loan(self) -> dict:
        return self._config.get("supplementary_loan", {})

    @property
    def supplementary_loan_min(self) -> int:
        return int(self.supplementary_loan.get("min_cents", 200000))

    @property
    def supplementary_loan_max(self) -> int:
        return int(self.supplementary_loan.get("max_cents", 5000000))

    # =========================================================================
    # Reconciliation
    # =========================================================================

    @property
    def min_own_contribution_ratio(self) -> Decimal:
        """Minimum own contribution as a share of total cost."""
        section = self._config.get("own_contribution", {})
        return Decimal(str(section.get("min_ratio", "0.075")))

    @property
    def reconciliation_tolerance(self) -> int:
        """Allowed absolute reconciliation difference in cents."""
        section = self._config.get("reconciliation", {})
        return int(section.get("tolerance_cents", 1))

    @property
    def max_external_loans(self) -> int:
        section = self._config.get("external_loans", {})
        return int(section.get("max_entries", 3))

    # =========================================================================
    # Logging
    # =========================================================================

    @property
    def log_level(self) -> str:
        return self._config.get("logging", {}).get("level", "INFO")

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> SubsidyConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Falls back to the
            SUBSIDY_CONFIG_PATH environment variable, then the packaged file.

    Returns:
        SubsidyConfig singleton instance
    """
    path = config_path or os.getenv(CONFIG_PATH_ENV)
    return SubsidyConfig(Path(path) if path else None)


def reload_config() -> SubsidyConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
