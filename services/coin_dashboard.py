"""
Coin dashboard controller.

Owns the session-wide state behind the page: the market data client, the
recent-search history, the rendered charts and the status line. Searches and
the top-tickers load report through ``Outcome`` values; the page only reads
``state`` and the chart slots.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from config import Config
from models.schemas import Coin, FailureKind, Outcome, SeriesSummary, TopTicker
from services.coin_query import resolve_query, select_best_match
from services.history import RecentHistory
from services.market_data import AsyncMarketDataClient, failure_from_exception
from services.price_chart import PriceChartRenderer
from services.series import extract_series, format_percent_change
from services.top_tickers import (
    UNAVAILABLE_MESSAGE,
    TopTickersStrategy,
    aggregate_top_tickers,
    build_strategy,
)
from utils.formatters import format_compact, format_usd
from utils.logging_config import bind_context, clear_context, get_logger

logger = get_logger(__name__)

C = TypeVar("C")

EMPTY_QUERY_MESSAGE = "검색어를 입력해 주세요."
NO_SEARCH_RESULT_MESSAGE = "검색 결과가 없습니다."
EMPTY_PRICES_MESSAGE = "시세 데이터가 비어 있습니다."
LOADING_MESSAGE = "CoinGecko에서 데이터를 가져오는 중입니다."
SUPERSEDED_MESSAGE = "더 최근 검색 결과로 대체되었습니다."
TOP_TICKERS_TITLE = "원화 마켓 거래대금 상위"


class ChartSlot(Generic[C]):
    """
    Holds at most one live chart.

    ``replace`` installs a new chart and disposes the previous one, so a slot
    never leaks figures across searches.
    """

    def __init__(self, dispose: Callable[[C], None]):
        self._dispose = dispose
        self._chart: Optional[C] = None

    @property
    def current(self) -> Optional[C]:
        return self._chart

    def replace(self, chart: C) -> None:
        previous = self._chart
        self._chart = chart
        if previous is not None and previous is not chart:
            self._dispose(previous)

    def clear(self) -> None:
        if self._chart is not None:
            self._dispose(self._chart)
            self._chart = None


@dataclass
class StatusMessage:
    text: str = ""
    level: str = "info"  # info | loading | success | error


@dataclass
class SearchResult:
    """Everything a successful search displays."""
    coin: Coin
    summary: SeriesSummary
    title: str
    meta: str
    chart_label: str


@dataclass
class DashboardState:
    current: Optional[SearchResult] = None
    status: StatusMessage = field(default_factory=StatusMessage)
    top_tickers: List[TopTicker] = field(default_factory=list)
    top_tickers_notice: Optional[str] = None
    is_loading: bool = False


def describe_rank(coin: Coin) -> str:
    if coin.market_cap_rank:
        return f"시가총액 순위 {coin.market_cap_rank}위"
    return "시가총액 순위 정보 없음"


def build_coin_meta(coin: Coin, summary: SeriesSummary) -> str:
    """One-line metadata: rank, latest price and yearly change."""
    change = format_percent_change(summary.first, summary.latest) or "N/A"
    return f"{describe_rank(coin)} · 최근 가격 {format_usd(summary.latest)} · 연간 변동 {change}"


class CoinDashboardController:
    """Search-and-render controller for one dashboard session."""

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[AsyncMarketDataClient] = None,
        renderer: Optional[PriceChartRenderer] = None,
        strategy: Optional[TopTickersStrategy] = None,
    ):
        self.config = config or Config()
        self.client = client or AsyncMarketDataClient(
            coingecko_base=self.config.coingecko_api_base,
            upbit_base=self.config.upbit_api_base,
            timeout=self.config.request_timeout,
        )
        self.renderer = renderer or PriceChartRenderer()
        self.strategy = strategy or build_strategy(
            self.config.top_tickers_strategy,
            self.client,
            exchange_id=self.config.top_tickers_exchange,
            batch_size=self.config.ticker_batch_size,
            page_size=self.config.listing_page_size,
            max_pages=self.config.listing_max_pages,
        )
        self.init()

    def init(self) -> None:
        """Reset to the empty start-up state."""
        self.history = RecentHistory(max_size=self.config.history_size)
        self.price_chart: ChartSlot[Any] = ChartSlot(self.renderer.dispose)
        self.tickers_chart: ChartSlot[Any] = ChartSlot(self.renderer.dispose)
        self.state = DashboardState()
        self._search_seq = 0

    async def close(self) -> None:
        await self.client.close()

    # ── Search flow ─────────────────────────────────────────────────────

    async def search(self, query: str) -> Outcome[SearchResult]:
        """Look up ``query`` and, on full success, replace the displayed coin."""
        cleaned = query.strip() if query else ""
        if not cleaned:
            return self._fail(Outcome.fail(FailureKind.INVALID_QUERY, EMPTY_QUERY_MESSAGE))

        return await self._execute(self._run_search(cleaned), query=cleaned)

    async def open_recent(self, coin: Coin) -> Outcome[SearchResult]:
        """Reload a history entry by its stored id, skipping the search step."""
        return await self._execute(self._load_coin(coin), coin_id=coin.id)

    async def _execute(
        self,
        pending: Awaitable[Outcome[SearchResult]],
        **context: Any,
    ) -> Outcome[SearchResult]:
        self._search_seq += 1
        seq = self._search_seq
        bind_context(search_seq=seq, **context)
        self.state.is_loading = True
        self.state.status = StatusMessage(LOADING_MESSAGE, "loading")

        try:
            outcome = await pending
        except Exception as exc:
            failure = failure_from_exception(exc)
            if failure.kind == FailureKind.UNKNOWN:
                logger.exception("coin_search_unexpected_error", error=str(exc))
            else:
                logger.warning("coin_search_failed", kind=failure.kind.value, error=str(exc))
            outcome = Outcome(failure=failure)

        try:
            if self._is_stale(seq):
                logger.info("coin_search_superseded", latest_seq=self._search_seq)
                return Outcome.fail(FailureKind.SUPERSEDED, SUPERSEDED_MESSAGE)

            self.state.is_loading = False
            if not outcome.ok:
                return self._fail(outcome)

            try:
                self._apply(outcome.value)
            except Exception as exc:
                logger.exception("coin_search_render_failed", error=str(exc))
                return self._fail(Outcome(failure=failure_from_exception(exc)))
            return outcome
        finally:
            clear_context()

    async def _run_search(self, query: str) -> Outcome[SearchResult]:
        search_term = resolve_query(query)
        coins = await self.client.search_coins(search_term)
        if not coins:
            logger.info("coin_search_no_results", search_term=search_term)
            return Outcome.fail(FailureKind.EMPTY_RESULT, NO_SEARCH_RESULT_MESSAGE)

        coin = select_best_match(coins, search_term)
        return await self._load_coin(coin)

    async def _load_coin(self, coin: Coin) -> Outcome[SearchResult]:
        raw_prices = await self.client.fetch_market_chart(coin.id)
        if not raw_prices:
            logger.info("coin_search_empty_prices", coin_id=coin.id)
            return Outcome.fail(FailureKind.EMPTY_RESULT, EMPTY_PRICES_MESSAGE)

        summary = extract_series(raw_prices)
        return Outcome.success(SearchResult(
            coin=coin,
            summary=summary,
            title=f"{coin.name} ({coin.symbol.upper()})",
            meta=build_coin_meta(coin, summary),
            chart_label=f"{coin.name} 1년 시세 (USD)",
        ))

    def _is_stale(self, seq: int) -> bool:
        return self.config.discard_stale_searches and seq != self._search_seq

    def _apply(self, result: SearchResult) -> None:
        # Render first so a rendering error leaves the previous view intact.
        figure = self.renderer.render_price_line(
            result.summary.labels,
            result.summary.values,
            result.chart_label,
        )
        self.price_chart.replace(figure)
        self.state.current = result
        self.history.push(result.coin)
        self.state.status = StatusMessage(
            f"{result.coin.name} 데이터를 불러왔습니다. "
            f"1년 평균 가격: {format_compact(result.summary.mean)} USD",
            "success",
        )
        logger.info(
            "coin_search_completed",
            coin_id=result.coin.id,
            points=len(result.summary.values),
        )

    def _fail(self, outcome: Outcome[SearchResult]) -> Outcome[SearchResult]:
        self.state.is_loading = False
        self.state.status = StatusMessage(outcome.failure.message, "error")
        return outcome

    # ── Top tickers ─────────────────────────────────────────────────────

    async def load_top_tickers(self) -> Outcome[List[TopTicker]]:
        """Refresh the top-tickers chart; failures only affect that chart."""
        outcome = await aggregate_top_tickers(self.strategy, self.config.top_tickers_limit)
        if not outcome.ok:
            self.tickers_chart.clear()
            self.state.top_tickers = []
            self.state.top_tickers_notice = UNAVAILABLE_MESSAGE
            return outcome

        entries = outcome.value or []
        self.state.top_tickers = entries
        self.state.top_tickers_notice = None
        if entries:
            self.tickers_chart.replace(
                self.renderer.render_top_tickers(entries, TOP_TICKERS_TITLE)
            )
        else:
            self.tickers_chart.clear()
        return outcome
