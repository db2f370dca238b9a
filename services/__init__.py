# Services module for the coin lookup dashboard
# Contains query resolution, market data, series, top tickers and the controller

from .coin_query import KOREAN_COIN_ALIASES, resolve_query, select_best_match
from .market_data import (
    AsyncMarketDataClient,
    EmptyResult,
    MarketDataError,
    RequestFailed,
    failure_from_exception,
)
from .series import EmptySeries, extract_series, format_percent_change
from .history import RecentHistory
from .top_tickers import (
    DirectMarketStrategy,
    ExchangeListingStrategy,
    aggregate_top_tickers,
    build_strategy,
)
from .price_chart import PriceChartRenderer
from .coin_dashboard import (
    ChartSlot,
    CoinDashboardController,
    DashboardState,
    SearchResult,
    StatusMessage,
)

__all__ = [
    "KOREAN_COIN_ALIASES",
    "resolve_query",
    "select_best_match",
    "AsyncMarketDataClient",
    "EmptyResult",
    "MarketDataError",
    "RequestFailed",
    "failure_from_exception",
    "EmptySeries",
    "extract_series",
    "format_percent_change",
    "RecentHistory",
    "DirectMarketStrategy",
    "ExchangeListingStrategy",
    "aggregate_top_tickers",
    "build_strategy",
    "PriceChartRenderer",
    "ChartSlot",
    "CoinDashboardController",
    "DashboardState",
    "SearchResult",
    "StatusMessage",
]
