# Subsidy Financing Engine - Modules
from .money import parse_money_to_cents, cents_to_display, format_with_config, is_present

__all__ = [
    "parse_money_to_cents",
    "cents_to_display",
    "format_with_config",
    "is_present",
]
