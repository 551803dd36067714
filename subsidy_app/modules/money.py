"""
Monetary codec for currency text fields.

Form values arrive as free text such as "184.000,00 €". The codec reads
them as integer cents (minor units) and renders cents back as display text.
All arithmetic in the engine happens on integer cents.
"""
import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

_NON_DIGITS = re.compile(r"[^0-9]")

MoneyInput = Union[str, int, float, None]


def parse_money_to_cents(value: MoneyInput) -> int:
    """
    Parse a currency string to integer cents.

    Every non-digit character is dropped and the remaining digits are read
    as minor units, so the separators never need to be interpreted.

    Handles:
        "1.234,56 €"  → 123456
        "0,00 €"      → 0
        "abc", "", None → 0
        12345 (int)   → 12345 (already cents)
        1234.56 (float) → 123456 (major units, rounded half-up)
        nan, inf      → 0

    Returns:
        int: Amount in cents
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, int):
        return value

    # YAML and JSON numbers with a fraction arrive as floats in major units
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        cents = (Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return int(cents)

    digits = _NON_DIGITS.sub("", str(value))
    if not digits:
        return 0
    return int(digits)


def cents_to_display(
    cents: int,
    symbol: str = "€",
    thousands_separator: str = ".",
    decimal_separator: str = ",",
    decimal_places: int = 2,
) -> str:
    """Format integer cents as a de-DE display string, e.g. "1.234,56 €"."""
    sign = "-" if cents < 0 else ""
    units, minor = divmod(abs(cents), 10 ** decimal_places)
    grouped = f"{units:,}".replace(",", thousands_separator)
    text = f"{sign}{grouped}{decimal_separator}{minor:0{decimal_places}d}"
    return f"{text} {symbol}" if symbol else text


def format_with_config(cents: int, currency: Optional[dict] = None) -> str:
    """Format cents using a `currency` config section."""
    if not currency:
        return cents_to_display(cents)
    return cents_to_display(
        cents,
        symbol=currency.get("symbol", "€"),
        thousands_separator=currency.get("thousands_separator", "."),
        decimal_separator=currency.get("decimal_separator", ","),
        decimal_places=int(currency.get("decimal_places", 2)),
    )


def is_present(value: MoneyInput) -> bool:
    """
    Whether a field carries a value.

    "0,00 €" is present; an empty or whitespace-only string is not.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def percent_of(cents: int, rate: Decimal) -> int:
    """Apply a rate to cents, rounding half-up to a whole cent."""
    return int((Decimal(cents) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
