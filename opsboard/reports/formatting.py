"""Value formatting helpers used by report rendering."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(num_bytes: int | float) -> str:
    """Format a byte count with binary units and at most two decimals.

    Examples: ``0 -> "0 B"``, ``1536 -> "1.5 KB"``, ``1073741824 -> "1 GB"``.
    """
    value = float(num_bytes or 0)
    if value <= 0:
        return "0 B"
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[unit]}"


def format_percent(part: int | float, total: int | float) -> int:
    """Integer percentage of ``part`` in ``total``, rounded half-up.

    Returns 0 when ``total`` is 0.
    """
    if not total:
        return 0
    ratio = Decimal(str(part)) * 100 / Decimal(str(total))
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
