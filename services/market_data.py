"""
Market data service.
Fetches coin search results, price history, exchange rates and tickers from
CoinGecko (api.coingecko.com) and Upbit (api.upbit.com).
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx

from models.schemas import Coin, Failure, FailureKind
from utils.logging_config import get_logger

logger = get_logger(__name__)


class MarketDataError(Exception):
    """Base exception for market data failures."""
    pass


class RequestFailed(MarketDataError):
    """Raised when a request does not complete with a success status."""

    def __init__(self, status_code: Optional[int], url: str = ""):
        self.status_code = status_code
        self.url = url
        reason = str(status_code) if status_code is not None else "네트워크 오류"
        super().__init__(f"요청 실패 ({reason})")


class EmptyResult(MarketDataError):
    """Raised when a successful response carries no usable data."""
    pass


UNKNOWN_ERROR_MESSAGE = "알 수 없는 오류가 발생했습니다."


def failure_from_exception(exc: BaseException) -> Failure:
    """Map a pipeline exception onto the Failure taxonomy."""
    if isinstance(exc, RequestFailed):
        return Failure(FailureKind.REQUEST_FAILED, str(exc), exc.status_code)
    if isinstance(exc, EmptyResult):
        return Failure(FailureKind.EMPTY_RESULT, str(exc))
    return Failure(FailureKind.UNKNOWN, UNKNOWN_ERROR_MESSAGE)


class AsyncMarketDataClient:
    """Async client for the CoinGecko and Upbit public REST APIs."""

    SEARCH_PATH = "/search"
    MARKET_CHART_PATH = "/coins/{coin_id}/market_chart"
    EXCHANGE_RATES_PATH = "/exchange_rates"
    EXCHANGE_TICKERS_PATH = "/exchanges/{exchange_id}/tickers"

    UPBIT_MARKETS_PATH = "/market/all"
    UPBIT_TICKER_PATH = "/ticker"

    def __init__(
        self,
        coingecko_base: str = "https://api.coingecko.com/api/v3",
        upbit_base: str = "https://api.upbit.com/v1",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.coingecko_base = coingecko_base.rstrip("/")
        self.upbit_base = upbit_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            options: Dict[str, Any] = {
                "follow_redirects": True,
                "headers": {"Accept": "application/json"},
            }
            if self.timeout is not None:
                options["timeout"] = self.timeout
            if self._transport is not None:
                options["transport"] = self._transport
            self._http_client = httpx.AsyncClient(**options)
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ── Transport ───────────────────────────────────────────────────────

    async def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Raises:
            RequestFailed: On a non-2xx status or a transport error
        """
        try:
            response = await self.http_client.get(url, params=params)
        except httpx.TransportError as exc:
            logger.warning("market_data_transport_error", url=url, error=str(exc))
            raise RequestFailed(None, url) from exc

        if not response.is_success:
            logger.warning("market_data_request_failed", url=url, status_code=response.status_code)
            raise RequestFailed(response.status_code, url)

        return response.json()

    # ── CoinGecko ───────────────────────────────────────────────────────

    async def search_coins(self, query: str) -> List[Coin]:
        """Search coins by free text. Returns provider relevance order."""
        data = await self.fetch_json(
            f"{self.coingecko_base}{self.SEARCH_PATH}",
            params={"query": query},
        )
        items = data.get("coins") if isinstance(data, dict) else None

        coins: List[Coin] = []
        for item in items or []:
            if not isinstance(item, dict):
                continue
            coin = Coin.from_search_item(item)
            if coin.id and coin.name:
                coins.append(coin)
        return coins

    async def fetch_market_chart(
        self,
        coin_id: str,
        vs_currency: str = "usd",
        days: int = 365,
    ) -> List[List[float]]:
        """Fetch ``[timestamp_ms, price]`` pairs for the lookback window."""
        data = await self.fetch_json(
            f"{self.coingecko_base}{self.MARKET_CHART_PATH.format(coin_id=coin_id)}",
            params={"vs_currency": vs_currency, "days": days},
        )
        prices = data.get("prices") if isinstance(data, dict) else None
        return prices if isinstance(prices, list) else []

    async def fetch_exchange_rates(self) -> Dict[str, Dict[str, Any]]:
        """Fetch per-currency rate objects keyed by lowercase currency code."""
        data = await self.fetch_json(f"{self.coingecko_base}{self.EXCHANGE_RATES_PATH}")
        rates = data.get("rates") if isinstance(data, dict) else None
        return rates if isinstance(rates, dict) else {}

    async def fetch_exchange_tickers(
        self,
        exchange_id: str,
        page: int = 1,
        per_page: int = 100,
    ) -> List[Dict[str, Any]]:
        """Fetch one page of an exchange's ticker listing."""
        data = await self.fetch_json(
            f"{self.coingecko_base}{self.EXCHANGE_TICKERS_PATH.format(exchange_id=exchange_id)}",
            params={"page": page, "per_page": per_page},
        )
        tickers = data.get("tickers") if isinstance(data, dict) else None
        return [row for row in tickers or [] if isinstance(row, dict)]

    # ── Upbit ───────────────────────────────────────────────────────────

    async def fetch_markets(self) -> List[Dict[str, Any]]:
        """Fetch the full market list (``[{"market": "KRW-BTC", ...}, ...]``)."""
        data = await self.fetch_json(f"{self.upbit_base}{self.UPBIT_MARKETS_PATH}")
        if not isinstance(data, list):
            return []
        return [row for row in data if isinstance(row, dict)]

    async def fetch_tickers(self, markets: Sequence[str]) -> List[Dict[str, Any]]:
        """Fetch a live ticker snapshot for the given market identifiers."""
        if not markets:
            return []
        data = await self.fetch_json(
            f"{self.upbit_base}{self.UPBIT_TICKER_PATH}",
            params={"markets": ",".join(markets)},
        )
        if not isinstance(data, list):
            return []
        return [row for row in data if isinstance(row, dict)]
