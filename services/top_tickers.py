"""
Top KRW trading pairs.

Two independent sourcing strategies rank the won market:

- ``DirectMarketStrategy`` reads Upbit's market list and live tickers and
  ranks pairs by 24-hour trade value.
- ``ExchangeListingStrategy`` pages through CoinGecko's ticker listing for an
  exchange and ranks pairs by USD-converted last price, shown in KRW.

Requests are always issued one after another.
"""

from typing import Any, Dict, List, Protocol

from models.schemas import Outcome, Ticker, TopTicker
from services.market_data import (
    AsyncMarketDataClient,
    EmptyResult,
    failure_from_exception,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

QUOTE_CURRENCY = "KRW"
UNAVAILABLE_MESSAGE = "거래대금 상위 데이터를 불러올 수 없습니다."


class TopTickersStrategy(Protocol):
    name: str

    async def fetch(self, limit: int) -> List[TopTicker]:
        ...


def krw_per_usd(rates: Dict[str, Dict[str, Any]]) -> float:
    """
    Derive the KRW-per-USD rate from BTC-denominated exchange rates.

    Raises:
        EmptyResult: If either the KRW or the USD rate is missing
    """
    krw = (rates.get("krw") or {}).get("value")
    usd = (rates.get("usd") or {}).get("value")
    if krw is None or usd is None:
        raise EmptyResult("환율 데이터가 없습니다.")
    krw_value = float(krw)
    usd_value = float(usd)
    if usd_value == 0:
        raise EmptyResult("환율 데이터가 없습니다.")
    return krw_value / usd_value


def dedupe_by_asset(tickers: List[Ticker]) -> List[Ticker]:
    """Keep the first ticker seen for each base asset, preserving order."""
    seen = set()
    unique: List[Ticker] = []
    for ticker in tickers:
        key = ticker.asset_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(ticker)
    return unique


class ExchangeListingStrategy:
    """Rank an exchange's KRW pairs from the paginated CoinGecko listing."""

    name = "exchange"

    def __init__(
        self,
        client: AsyncMarketDataClient,
        exchange_id: str = "upbit",
        page_size: int = 100,
        max_pages: int = 10,
    ):
        self.client = client
        self.exchange_id = exchange_id
        self.page_size = page_size
        self.max_pages = max_pages

    async def fetch_listing(self) -> List[Dict[str, Any]]:
        """Collect listing pages until a short or empty page, up to ``max_pages``."""
        rows: List[Dict[str, Any]] = []
        for page in range(1, self.max_pages + 1):
            page_rows = await self.client.fetch_exchange_tickers(
                self.exchange_id,
                page=page,
                per_page=self.page_size,
            )
            rows.extend(page_rows)
            if len(page_rows) < self.page_size:
                break
        else:
            logger.warning("exchange_listing_page_cap_reached", max_pages=self.max_pages)
        return rows

    async def fetch(self, limit: int) -> List[TopTicker]:
        rows = await self.fetch_listing()
        tickers = [
            Ticker.from_exchange_listing(row)
            for row in rows
            if str(row.get("target") or "").upper() == QUOTE_CURRENCY
        ]
        tickers = dedupe_by_asset(tickers)
        if not tickers:
            return []

        tickers.sort(key=self._rank_value, reverse=True)
        top = tickers[:limit]

        rate = krw_per_usd(await self.client.fetch_exchange_rates())
        return [TopTicker(label=ticker.base.upper(), value=self._krw_value(ticker, rate)) for ticker in top]

    def _rank_value(self, ticker: Ticker) -> float:
        if ticker.converted_last_usd is not None:
            return ticker.converted_last_usd
        return ticker.last

    def _krw_value(self, ticker: Ticker, rate: float) -> float:
        # Without a USD conversion, ``last`` is already quoted in KRW.
        if ticker.converted_last_usd is None:
            return ticker.last
        return ticker.converted_last_usd * rate


class DirectMarketStrategy:
    """Rank Upbit KRW markets by 24-hour trade value."""

    name = "direct"

    def __init__(self, client: AsyncMarketDataClient, batch_size: int = 100):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.client = client
        self.batch_size = batch_size

    async def fetch_krw_markets(self) -> List[str]:
        prefix = f"{QUOTE_CURRENCY}-"
        markets = await self.client.fetch_markets()
        return [
            str(row["market"])
            for row in markets
            if str(row.get("market") or "").startswith(prefix)
        ]

    async def fetch_ticker_rows(self, markets: List[str]) -> List[Dict[str, Any]]:
        """Fetch tickers in sequential batches of ``batch_size`` and concatenate them."""
        rows: List[Dict[str, Any]] = []
        for start in range(0, len(markets), self.batch_size):
            batch = markets[start:start + self.batch_size]
            rows.extend(await self.client.fetch_tickers(batch))
        return rows

    async def fetch(self, limit: int) -> List[TopTicker]:
        markets = await self.fetch_krw_markets()
        if not markets:
            return []

        tickers = [Ticker.from_direct_market(row) for row in await self.fetch_ticker_rows(markets)]
        tickers.sort(key=lambda ticker: ticker.trade_value_24h or 0.0, reverse=True)

        return [
            TopTicker(label=ticker.base, value=ticker.trade_value_24h or 0.0)
            for ticker in tickers[:limit]
        ]


def build_strategy(
    name: str,
    client: AsyncMarketDataClient,
    exchange_id: str = "upbit",
    batch_size: int = 100,
    page_size: int = 100,
    max_pages: int = 10,
) -> TopTickersStrategy:
    """Create the strategy registered under ``name`` ("direct" or "exchange")."""
    if name == DirectMarketStrategy.name:
        return DirectMarketStrategy(client, batch_size=batch_size)
    if name == ExchangeListingStrategy.name:
        return ExchangeListingStrategy(
            client,
            exchange_id=exchange_id,
            page_size=page_size,
            max_pages=max_pages,
        )
    raise ValueError(f"Unknown top tickers strategy: {name}")


async def aggregate_top_tickers(
    strategy: TopTickersStrategy,
    limit: int = 12,
) -> Outcome[List[TopTicker]]:
    """
    Run ``strategy`` and wrap the ranked list in an Outcome.

    Any failure is reported as unavailable data; an empty ranking is a
    successful result.
    """
    try:
        entries = await strategy.fetch(limit)
    except Exception as exc:
        failure = failure_from_exception(exc)
        logger.warning(
            "top_tickers_failed",
            strategy=strategy.name,
            kind=failure.kind.value,
            error=str(exc),
        )
        return Outcome.fail(
            failure.kind,
            UNAVAILABLE_MESSAGE,
            failure.status_code,
        )

    logger.info("top_tickers_loaded", strategy=strategy.name, count=len(entries))
    return Outcome.success(entries)
