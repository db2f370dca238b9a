"""Tests for environment-driven configuration."""

import pytest

from config import Config, ConfigurationError, get_config

ENV_VARS = (
    "COINGECKO_API_BASE",
    "UPBIT_API_BASE",
    "REQUEST_TIMEOUT",
    "TOP_TICKERS_STRATEGY",
    "TOP_TICKERS_LIMIT",
    "TOP_TICKERS_EXCHANGE",
    "TICKER_BATCH_SIZE",
    "LISTING_PAGE_SIZE",
    "LISTING_MAX_PAGES",
    "HISTORY_SIZE",
    "DISCARD_STALE_SEARCHES",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = get_config()

    assert config == Config()
    assert config.coingecko_api_base == "https://api.coingecko.com/api/v3"
    assert config.upbit_api_base == "https://api.upbit.com/v1"
    assert config.request_timeout is None
    assert config.top_tickers_strategy == "direct"
    assert config.top_tickers_limit == 12
    assert config.ticker_batch_size == 100
    assert config.history_size == 6
    assert config.discard_stale_searches is True


def test_overrides(monkeypatch):
    monkeypatch.setenv("COINGECKO_API_BASE", "https://proxy.example/api/v3/")
    monkeypatch.setenv("REQUEST_TIMEOUT", "7.5")
    monkeypatch.setenv("TOP_TICKERS_STRATEGY", "Exchange")
    monkeypatch.setenv("TOP_TICKERS_LIMIT", "5")
    monkeypatch.setenv("DISCARD_STALE_SEARCHES", "off")
    monkeypatch.setenv("LOG_JSON", "yes")

    config = Config.from_env()

    assert config.coingecko_api_base == "https://proxy.example/api/v3"
    assert config.request_timeout == 7.5
    assert config.top_tickers_strategy == "exchange"
    assert config.top_tickers_limit == 5
    assert config.discard_stale_searches is False
    assert config.log_json is True


def test_blank_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("TOP_TICKERS_LIMIT", " ")
    monkeypatch.setenv("DISCARD_STALE_SEARCHES", "")

    config = Config.from_env()

    assert config.top_tickers_limit == 12
    assert config.discard_stale_searches is True


@pytest.mark.parametrize(
    "name, value",
    [
        ("TOP_TICKERS_LIMIT", "twelve"),
        ("HISTORY_SIZE", "0"),
        ("TICKER_BATCH_SIZE", "-1"),
        ("REQUEST_TIMEOUT", "0"),
        ("REQUEST_TIMEOUT", "soon"),
        ("TOP_TICKERS_STRATEGY", "parallel"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as exc_info:
        Config.from_env()

    assert name in str(exc_info.value)


def test_all_invalid_names_are_reported(monkeypatch):
    monkeypatch.setenv("LISTING_PAGE_SIZE", "x")
    monkeypatch.setenv("LISTING_MAX_PAGES", "y")

    with pytest.raises(ConfigurationError) as exc_info:
        Config.from_env()

    message = str(exc_info.value)
    assert "LISTING_PAGE_SIZE" in message
    assert "LISTING_MAX_PAGES" in message
