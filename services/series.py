"""Price series extraction and derived metrics."""

import math
from typing import Any, List, Optional, Sequence

from models.schemas import PricePoint, SeriesSummary
from services.market_data import EmptyResult
from utils.formatters import format_short_date


class EmptySeries(EmptyResult):
    """Raised when a price series has no points."""

    def __init__(self, message: str = "시세 데이터가 비어 있습니다."):
        super().__init__(message)


def to_price_points(raw_prices: Sequence[Sequence[Any]]) -> List[PricePoint]:
    """Convert raw ``[timestamp_ms, price]`` pairs, keeping their order."""
    points: List[PricePoint] = []
    for entry in raw_prices:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise ValueError(f"Malformed price entry: {entry!r}")
        points.append(PricePoint(timestamp_ms=int(entry[0]), price=float(entry[1])))
    return points


def percent_change(first: float, latest: float) -> Optional[float]:
    """Period change in percent, or None when it cannot be computed."""
    if first == 0:
        return None
    change = (latest - first) / first * 100
    if not math.isfinite(change):
        return None
    return change


def format_percent_change(first: float, latest: float) -> Optional[str]:
    """Signed two-decimal change (``+50.00%``), or None when unavailable."""
    change = percent_change(first, latest)
    if change is None:
        return None
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


def extract_series(raw_prices: Sequence[Sequence[Any]]) -> SeriesSummary:
    """
    Build chart labels/values and period metrics from raw price pairs.

    Raises:
        EmptySeries: If ``raw_prices`` is empty
    """
    if not raw_prices:
        raise EmptySeries()

    points = to_price_points(raw_prices)
    values = [point.price for point in points]
    first = values[0]
    latest = values[-1]

    return SeriesSummary(
        labels=[format_short_date(point.timestamp_ms) for point in points],
        values=values,
        latest=latest,
        first=first,
        mean=sum(values) / len(values),
        change_percent=percent_change(first, latest),
    )
