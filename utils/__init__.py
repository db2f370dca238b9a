# Utilities module for the coin lookup dashboard
# Contains structured logging setup and display formatters

from .logging_config import configure_logging, get_logger, bind_context, clear_context
from .formatters import format_compact, format_krw, format_short_date, format_usd

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "format_compact",
    "format_krw",
    "format_short_date",
    "format_usd",
]
