"""
Pytest configuration and shared fixtures for the coin lookup dashboard tests.
"""

from typing import Callable, List

import httpx
import pytest

from services.market_data import AsyncMarketDataClient

COINGECKO_BASE = "https://api.coingecko.test/api/v3"
UPBIT_BASE = "https://api.upbit.test/v1"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that also keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def make_client():
    """Build a market data client whose HTTP calls are served by ``handler``."""
    def factory(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        client = AsyncMarketDataClient(
            coingecko_base=COINGECKO_BASE,
            upbit_base=UPBIT_BASE,
            transport=transport,
        )
        return client, transport
    return factory


@pytest.fixture
def sample_search_payload():
    """Search response with a near-miss ranked ahead of the exact hit."""
    return {
        "coins": [
            {"id": "ethereum-classic", "name": "Ethereum Classic", "symbol": "ETC", "market_cap_rank": 30},
            {"id": "ethereum", "name": "Ethereum", "symbol": "ETH", "market_cap_rank": 2},
            {"id": "ethereum-pow-iou", "name": "EthereumPoW", "symbol": "ETHW", "market_cap_rank": None},
        ],
        "exchanges": [],
    }


@pytest.fixture
def sample_chart_payload():
    """Three daily points, 2026-01-01..03 00:00 UTC."""
    return {
        "prices": [
            [1767225600000, 100.0],
            [1767312000000, 200.0],
            [1767398400000, 300.0],
        ],
        "market_caps": [],
        "total_volumes": [],
    }


@pytest.fixture
def sample_rates_payload():
    return {
        "rates": {
            "btc": {"name": "Bitcoin", "unit": "BTC", "value": 1.0, "type": "crypto"},
            "usd": {"name": "US Dollar", "unit": "$", "value": 100000.0, "type": "fiat"},
            "krw": {"name": "South Korean Won", "unit": "₩", "value": 140000000.0, "type": "fiat"},
        }
    }
