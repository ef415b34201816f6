"""Human-readable formatting for byte counts and numeric tag values."""

import math
from decimal import Decimal, ROUND_HALF_UP

SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_number(value) -> str:
    """Render a number the way it would print in JSON output.

    Integral floats lose their trailing ``.0`` so that ``50.0`` prints as
    ``"50"``. Anything that is not a real number is rendered with ``str``.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_file_size(num_bytes: float) -> str:
    """Format a size in bytes as a human-readable string.

    The unit is picked by ``floor(log1024(num_bytes))`` and clamped to the
    last entry of SIZE_UNITS, so anything from 1 TB upward is shown in TB.

    Args:
        num_bytes: Size in bytes

    Returns:
        Formatted size (e.g. "0 Bytes", "1 KB", "1.5 KB", "3.21 MB")

    Examples:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return f"{format_number(num_bytes)} Bytes"

    index = math.floor(math.log(num_bytes) / math.log(1024))
    index = max(0, min(index, len(SIZE_UNITS) - 1))

    value = _round_half_up(num_bytes / math.pow(1024, index))
    return f"{format_number(value)} {SIZE_UNITS[index]}"
