"""Tests for the market data client."""

import httpx
import pytest

from models.schemas import FailureKind
from services.market_data import (
    EmptyResult,
    RequestFailed,
    failure_from_exception,
)


class TestFetchJson:
    """Tests for status handling in fetch_json."""

    @pytest.mark.asyncio
    async def test_returns_decoded_json(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, json={"ok": True}))

        data = await client.fetch_json("https://api.coingecko.test/api/v3/ping")

        assert data == {"ok": True}
        await client.close()

    @pytest.mark.asyncio
    async def test_non_success_status_raises_request_failed(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(429, json={"error": "slow down"}))

        with pytest.raises(RequestFailed) as exc:
            await client.fetch_json("https://api.coingecko.test/api/v3/search")

        assert exc.value.status_code == 429
        assert str(exc.value) == "요청 실패 (429)"
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises_request_failed_without_status(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(handler)

        with pytest.raises(RequestFailed) as exc:
            await client.fetch_json("https://api.coingecko.test/api/v3/search")

        assert exc.value.status_code is None
        await client.close()

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(503))

        with pytest.raises(RequestFailed):
            await client.fetch_json("https://api.coingecko.test/api/v3/search")

        assert len(transport.requests) == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_close_allows_new_client(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(200, json=[]))

        await client.fetch_json("https://api.upbit.test/v1/market/all")
        await client.close()
        await client.fetch_json("https://api.upbit.test/v1/market/all")
        await client.close()

        assert len(transport.requests) == 2


class TestCoinGeckoEndpoints:
    """Tests for CoinGecko request building and response parsing."""

    @pytest.mark.asyncio
    async def test_search_coins_encodes_query(self, make_client, sample_search_payload):
        client, transport = make_client(lambda request: httpx.Response(200, json=sample_search_payload))

        coins = await client.search_coins("비트 코인")

        request = transport.requests[0]
        assert request.url.path == "/api/v3/search"
        assert request.url.params["query"] == "비트 코인"
        assert [coin.id for coin in coins] == ["ethereum-classic", "ethereum", "ethereum-pow-iou"]
        assert coins[1].market_cap_rank == 2
        assert coins[2].market_cap_rank is None
        await client.close()

    @pytest.mark.asyncio
    async def test_search_coins_without_results(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, json={"coins": []}))

        assert await client.search_coins("zzzz") == []
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_market_chart_params(self, make_client, sample_chart_payload):
        client, transport = make_client(lambda request: httpx.Response(200, json=sample_chart_payload))

        prices = await client.fetch_market_chart("bitcoin")

        request = transport.requests[0]
        assert request.url.path == "/api/v3/coins/bitcoin/market_chart"
        assert request.url.params["vs_currency"] == "usd"
        assert request.url.params["days"] == "365"
        assert prices[0] == [1767225600000, 100.0]
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_market_chart_missing_prices(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, json={}))

        assert await client.fetch_market_chart("bitcoin") == []
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_exchange_rates(self, make_client, sample_rates_payload):
        client, transport = make_client(lambda request: httpx.Response(200, json=sample_rates_payload))

        rates = await client.fetch_exchange_rates()

        assert transport.requests[0].url.path == "/api/v3/exchange_rates"
        assert rates["krw"]["value"] == 140000000.0
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_exchange_tickers_page_params(self, make_client):
        client, transport = make_client(
            lambda request: httpx.Response(200, json={"name": "Upbit", "tickers": [{"base": "BTC"}]})
        )

        rows = await client.fetch_exchange_tickers("upbit", page=3, per_page=100)

        request = transport.requests[0]
        assert request.url.path == "/api/v3/exchanges/upbit/tickers"
        assert request.url.params["page"] == "3"
        assert request.url.params["per_page"] == "100"
        assert rows == [{"base": "BTC"}]
        await client.close()


class TestUpbitEndpoints:
    """Tests for the direct exchange endpoints."""

    @pytest.mark.asyncio
    async def test_fetch_markets(self, make_client):
        client, transport = make_client(
            lambda request: httpx.Response(200, json=[{"market": "KRW-BTC"}, {"market": "BTC-ETH"}])
        )

        markets = await client.fetch_markets()

        assert transport.requests[0].url.path == "/v1/market/all"
        assert markets == [{"market": "KRW-BTC"}, {"market": "BTC-ETH"}]
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_tickers_joins_markets(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(200, json=[]))

        await client.fetch_tickers(["KRW-BTC", "KRW-ETH"])

        assert transport.requests[0].url.params["markets"] == "KRW-BTC,KRW-ETH"
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_tickers_with_no_markets_skips_request(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(200, json=[]))

        assert await client.fetch_tickers([]) == []
        assert transport.requests == []


class TestFailureFromException:
    """Tests for mapping exceptions onto the failure taxonomy."""

    def test_request_failed(self):
        failure = failure_from_exception(RequestFailed(404))
        assert failure.kind == FailureKind.REQUEST_FAILED
        assert failure.status_code == 404
        assert failure.message == "요청 실패 (404)"

    def test_empty_result(self):
        failure = failure_from_exception(EmptyResult("no data"))
        assert failure.kind == FailureKind.EMPTY_RESULT
        assert failure.message == "no data"

    def test_anything_else_is_unknown(self):
        failure = failure_from_exception(KeyError("prices"))
        assert failure.kind == FailureKind.UNKNOWN
        assert failure.message == "알 수 없는 오류가 발생했습니다."
