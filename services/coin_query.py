"""
Coin query resolution.
Maps Korean coin names to provider identifiers and picks the best search hit.
"""

from typing import Dict, Sequence

from models.schemas import Coin

# Korean display name -> CoinGecko coin id
KOREAN_COIN_ALIASES: Dict[str, str] = {
    "비트코인": "bitcoin",
    "이더리움": "ethereum",
    "리플": "ripple",
    "솔라나": "solana",
    "도지코인": "dogecoin",
    "에이다": "cardano",
    "트론": "tron",
    "폴카닷": "polkadot",
    "체인링크": "chainlink",
    "라이트코인": "litecoin",
    "비트코인캐시": "bitcoin-cash",
    "스텔라루멘": "stellar",
    "아발란체": "avalanche-2",
    "테더": "tether",
}


def resolve_query(query: str) -> str:
    """Return the provider id for a known Korean name, else the trimmed query."""
    cleaned = query.strip() if query else ""
    return KOREAN_COIN_ALIASES.get(cleaned, cleaned)


def select_best_match(candidates: Sequence[Coin], query: str) -> Coin:
    """
    Pick the search result matching ``query`` exactly by name or symbol.

    Comparison is case-insensitive and the first exact hit in list order
    wins. Without an exact hit the provider's own ranking is trusted and the
    first candidate is returned. ``candidates`` must be non-empty.
    """
    needle = query.lower()
    for candidate in candidates:
        if candidate.name.lower() == needle or candidate.symbol.lower() == needle:
            return candidate
    return candidates[0]
