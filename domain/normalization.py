"""Domain normalization — pure functions, zero external dependencies.

Only stdlib imports allowed.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENTIMES = Decimal("0.01")
_QUATRE_DECIMALES = Decimal("0.0001")
_SEUIL_POURCENTAGE = Decimal("10")


def to_decimal(value):
    """Convert int/float/str to Decimal. Returns None for empty or unparsable input."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so that floats keep their shortest repr (0.19, not 0.18999...)
        result = Decimal(str(value).strip().replace(",", "."))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def round_price(value):
    """Round a unit price to 2 decimal places."""
    return Decimal(value).quantize(_CENTIMES, rounding=ROUND_HALF_UP)


def round_rate(value):
    """Round a tax rate to 4 decimal places."""
    return Decimal(value).quantize(_QUATRE_DECIMALES, rounding=ROUND_HALF_UP)


def normalize_tax_rate(value):
    """Normalize a tax rate to a fraction rounded to 4 decimals.

    Values greater than 10 are read as percentages ("19" -> 0.19); values up
    to 10 are taken as already fractional. A rate of exactly 10 is therefore
    kept as 10, not 0.10.
    """
    taux = to_decimal(value)
    if taux is None:
        return None
    if taux > _SEUIL_POURCENTAGE:
        taux = taux / 100
    return round_rate(taux)


def normalize_service_type(name):
    """Trim and uppercase a service type for storage and comparison."""
    return (name or "").strip().upper()


def parse_reference_volume(value):
    """Parse a reference volume: int, or None for empty/unparsable input."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return None
