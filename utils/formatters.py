"""Display formatters for prices, compact figures, and date labels."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

# Labels are rendered for Korean readers regardless of host timezone.
KST = timezone(timedelta(hours=9), name="KST")

_COMPACT_UNITS = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)


def format_usd(value: float) -> str:
    """Format as US dollars with two decimals, e.g. ``$1,234.57``."""
    if value is None or not math.isfinite(value):
        return "N/A"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _trim_decimals(number: float) -> str:
    text = f"{number:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_compact(value: float) -> str:
    """
    Format a number in short compact notation.

    Mirrors en-US compact formatting with at most two fraction digits:
    ``1234 -> "1.23K"``, ``1500000 -> "1.5M"``, ``999.999 -> "1K"``.
    """
    if value is None or not math.isfinite(value):
        return "N/A"

    sign = "-" if value < 0 else ""
    magnitude = abs(value)

    for index, (threshold, suffix) in enumerate(_COMPACT_UNITS):
        if magnitude >= threshold:
            scaled = round(magnitude / threshold, 2)
            # Rounding can carry into the next unit (999.999K -> 1M)
            if scaled >= 1000 and index > 0:
                upper_threshold, upper_suffix = _COMPACT_UNITS[index - 1]
                return f"{sign}{_trim_decimals(magnitude / upper_threshold)}{upper_suffix}"
            return f"{sign}{_trim_decimals(scaled)}{suffix}"

    rounded = round(magnitude, 2)
    if rounded >= 1000:
        return f"{sign}1K"
    return f"{sign}{_trim_decimals(rounded)}"


def format_krw(value: float) -> str:
    """Compact won amount for chart annotations, e.g. ``₩1.23B``."""
    if value is None or not math.isfinite(value):
        return "N/A"
    compact = format_compact(value)
    if compact.startswith("-"):
        return f"-₩{compact[1:]}"
    return f"₩{compact}"


def format_short_date(timestamp_ms: int, tz: Optional[timezone] = None) -> str:
    """Format an epoch-millisecond timestamp as a Korean month/day label (``3월 5일``)."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz or KST)
    return f"{moment.month}월 {moment.day}일"
