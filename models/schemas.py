"""
Data models and schemas for coin lookups and market tickers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Enumeration of failure categories surfaced to the dashboard."""
    REQUEST_FAILED = "request_failed"
    EMPTY_RESULT = "empty_result"
    INVALID_QUERY = "invalid_query"
    SUPERSEDED = "superseded"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Failure:
    """Why an operation produced no value."""
    kind: FailureKind
    message: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Tagged result of a pipeline run.

    Exactly one of ``value`` / ``failure`` is meaningful: ``ok`` tells which.
    An empty list is a valid successful value.
    """
    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        kind: FailureKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> "Outcome[T]":
        return cls(failure=Failure(kind=kind, message=message, status_code=status_code))


def _to_optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Coin:
    """
    Coin returned by the market-data search endpoint.

    Attributes:
        id: Stable provider identifier (e.g. "bitcoin")
        name: Display name
        symbol: Ticker symbol as returned by the provider (usually lowercase)
        market_cap_rank: Positive market-cap rank, or None when unranked
    """
    id: str
    name: str
    symbol: str
    market_cap_rank: Optional[int] = None

    @classmethod
    def from_search_item(cls, item: Dict[str, Any]) -> "Coin":
        """Create instance from a search ``coins[]`` entry."""
        rank = item.get("market_cap_rank")
        try:
            rank = int(rank) if rank is not None else None
        except (TypeError, ValueError):
            rank = None
        if rank is not None and rank <= 0:
            rank = None

        return cls(
            id=str(item.get("id", "")).strip(),
            name=str(item.get("name", "")).strip(),
            symbol=str(item.get("symbol", "")).strip(),
            market_cap_rank=rank,
        )


@dataclass(frozen=True)
class PricePoint:
    """A USD price observed at an epoch-millisecond timestamp."""
    timestamp_ms: int
    price: float


@dataclass(frozen=True)
class Ticker:
    """
    Live ticker for a single trading pair.

    Attributes:
        market: Pair identifier (e.g. "KRW-BTC" or "BTC/KRW")
        base: Base asset key used for labels and deduplication
        last: Last traded price in the quote currency
        converted_last_usd: Last price converted to USD, when the source provides it
        trade_value_24h: 24-hour cumulative trade value in the quote currency
        coin_id: Provider coin identifier, when the source provides it
    """
    market: str
    base: str
    last: float
    converted_last_usd: Optional[float] = None
    trade_value_24h: Optional[float] = None
    coin_id: Optional[str] = None

    @property
    def asset_key(self) -> str:
        """Key identifying the base asset across pairs."""
        return self.coin_id or self.base

    @classmethod
    def from_exchange_listing(cls, row: Dict[str, Any]) -> "Ticker":
        """Create instance from a market-data exchange ``tickers[]`` entry."""
        base = str(row.get("base") or "").strip()
        target = str(row.get("target") or "").strip()
        converted = row.get("converted_last") or {}
        return cls(
            market=f"{base}/{target}",
            base=base,
            last=_to_optional_float(row.get("last")) or 0.0,
            converted_last_usd=_to_optional_float(converted.get("usd")),
            coin_id=str(row.get("coin_id") or "").strip() or None,
        )

    @classmethod
    def from_direct_market(cls, row: Dict[str, Any]) -> "Ticker":
        """Create instance from a direct exchange ``/ticker`` row."""
        market = str(row.get("market") or "").strip()
        base = market.split("-", 1)[1] if "-" in market else market
        return cls(
            market=market,
            base=base,
            last=_to_optional_float(row.get("trade_price")) or 0.0,
            trade_value_24h=_to_optional_float(row.get("acc_trade_price_24h")),
        )


@dataclass(frozen=True)
class TopTicker:
    """One bar of the top-tickers chart."""
    label: str
    value: float


@dataclass
class SeriesSummary:
    """Chart-ready price series plus the metrics derived from it."""
    labels: List[str] = field(default_factory=list)
    values: List[float] = field(default_factory=list)
    latest: float = 0.0
    first: float = 0.0
    mean: float = 0.0
    change_percent: Optional[float] = None
