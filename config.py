"""
Configuration management for the coin lookup dashboard.
Loads environment variables and provides centralized configuration.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

TOP_TICKERS_STRATEGIES = ("direct", "exchange")


class ConfigurationError(Exception):
    """Raised when a configuration value is invalid."""
    pass


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass
class Config:
    """Application configuration."""

    # API endpoints
    coingecko_api_base: str = "https://api.coingecko.com/api/v3"
    upbit_api_base: str = "https://api.upbit.com/v1"
    request_timeout: Optional[float] = None  # Seconds (None = httpx default)

    # Top tickers
    top_tickers_strategy: str = "direct"  # "direct" (Upbit) or "exchange" (CoinGecko listing)
    top_tickers_limit: int = 12
    top_tickers_exchange: str = "upbit"
    ticker_batch_size: int = 100
    listing_page_size: int = 100
    listing_max_pages: int = 10

    # Search
    history_size: int = 6
    discard_stale_searches: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        invalid: List[str] = []

        def read_int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                value = int(raw)
            except ValueError:
                invalid.append(name)
                return default
            if value < 1:
                invalid.append(name)
                return default
            return value

        timeout_raw = os.getenv("REQUEST_TIMEOUT")
        request_timeout: Optional[float] = None
        if timeout_raw:
            try:
                request_timeout = float(timeout_raw)
            except ValueError:
                invalid.append("REQUEST_TIMEOUT")
            else:
                if request_timeout <= 0:
                    invalid.append("REQUEST_TIMEOUT")
                    request_timeout = None

        strategy = os.getenv("TOP_TICKERS_STRATEGY", "direct").strip().lower()
        if strategy not in TOP_TICKERS_STRATEGIES:
            invalid.append("TOP_TICKERS_STRATEGY")

        config = cls(
            coingecko_api_base=os.getenv("COINGECKO_API_BASE", cls.coingecko_api_base).rstrip("/"),
            upbit_api_base=os.getenv("UPBIT_API_BASE", cls.upbit_api_base).rstrip("/"),
            request_timeout=request_timeout,
            top_tickers_strategy=strategy,
            top_tickers_limit=read_int("TOP_TICKERS_LIMIT", 12),
            top_tickers_exchange=os.getenv("TOP_TICKERS_EXCHANGE", "upbit").strip(),
            ticker_batch_size=read_int("TICKER_BATCH_SIZE", 100),
            listing_page_size=read_int("LISTING_PAGE_SIZE", 100),
            listing_max_pages=read_int("LISTING_MAX_PAGES", 10),
            history_size=read_int("HISTORY_SIZE", 6),
            discard_stale_searches=_parse_bool(os.getenv("DISCARD_STALE_SEARCHES"), True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_parse_bool(os.getenv("LOG_JSON"), False),
        )

        if invalid:
            raise ConfigurationError(
                f"Invalid values for environment variables: {', '.join(invalid)}"
            )

        return config


def get_config() -> Config:
    """Get the application configuration."""
    return Config.from_env()
