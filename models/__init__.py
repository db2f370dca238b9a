# Models module for the coin lookup dashboard
# Contains domain dataclasses and the tagged Outcome type

from .schemas import (
    Coin,
    Failure,
    FailureKind,
    Outcome,
    PricePoint,
    SeriesSummary,
    Ticker,
    TopTicker,
)

__all__ = [
    "Coin",
    "Failure",
    "FailureKind",
    "Outcome",
    "PricePoint",
    "SeriesSummary",
    "Ticker",
    "TopTicker",
]
