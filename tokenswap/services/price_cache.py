"""
Price cache with stale fallback.

Holds exactly one entry (the whole price list). The entry is replaced
wholesale on every successful refresh and is served, however old, when a
refresh fails.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import settings
from ..core.errors import PriceFeedError
from ..providers.base import PriceProvider
from ..providers.prices import PriceQuote, SwitcheoPriceProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceCacheEntry:
    data: Tuple[PriceQuote, ...]
    fetched_at: float
    # Issue order of the request that produced this entry
    sequence: int


@dataclass(frozen=True)
class PriceFetchResult:
    """Outcome of a fetch, including whether the data is a stale fallback."""

    quotes: List[PriceQuote]
    cached: bool = False
    stale: bool = False
    error: Optional[PriceFeedError] = None


class PriceCache:
    """Single-entry TTL cache in front of a price provider.

    Construct one per process and hand it to the PriceFeed; nothing else
    writes the entry.
    """

    def __init__(
        self,
        provider: Optional[PriceProvider] = None,
        *,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._provider = provider or SwitcheoPriceProvider()
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.price_cache_ttl_seconds
        self._clock = clock
        self._entry: Optional[PriceCacheEntry] = None
        self._sequence = itertools.count(1)
        self._lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()

    @property
    def provider(self) -> PriceProvider:
        return self._provider

    @property
    def entry(self) -> Optional[PriceCacheEntry]:
        return self._entry

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and self._clock() - entry.fetched_at < self.ttl_seconds

    async def fetch(self, use_cache: bool = True) -> List[PriceQuote]:
        """Return the price list, raising only when nothing is cached."""
        result = await self.fetch_with_status(use_cache)
        return result.quotes

    async def fetch_with_status(self, use_cache: bool = True) -> PriceFetchResult:
        if not use_cache:
            return await self._refresh()

        # Cache-reading callers share one refresh; later ones find it fresh
        async with self._refresh_lock:
            if self.is_fresh():
                logger.debug("Using cached token prices")
                return PriceFetchResult(quotes=list(self._entry.data), cached=True)
            return await self._refresh()

    async def _refresh(self) -> PriceFetchResult:
        sequence = next(self._sequence)
        try:
            logger.debug("Fetching token prices from %s", self._provider.name)
            quotes = await self._provider.get_prices()
        except PriceFeedError as exc:
            fallback = self._entry
            if fallback is None:
                logger.error("Failed to fetch token prices and no cached data: %s", exc)
                raise
            logger.warning("Failed to fetch token prices, using stale cached data: %s", exc)
            return PriceFetchResult(quotes=list(fallback.data), stale=True, error=exc)

        committed = await self._commit(quotes, sequence)
        logger.info("Fetched %d token prices", len(committed.data))
        return PriceFetchResult(quotes=list(committed.data))

    async def _commit(self, quotes: Iterable[PriceQuote], sequence: int) -> PriceCacheEntry:
        async with self._lock:
            current = self._entry
            if current is not None and current.sequence > sequence:
                # A request issued later already landed; keep its data.
                logger.debug("Discarding out-of-order price response %d", sequence)
                return current
            self._entry = PriceCacheEntry(
                data=tuple(quotes),
                fetched_at=self._clock(),
                sequence=sequence,
            )
            return self._entry

    async def get_token_price(self, currency: str) -> Optional[Decimal]:
        try:
            quotes = await self.fetch()
        except PriceFeedError as exc:
            logger.error("Failed to get price for %s: %s", currency, exc)
            return None
        return find_price(quotes, currency)

    async def get_multiple_token_prices(self, currencies: Iterable[str]) -> Dict[str, Decimal]:
        try:
            quotes = await self.fetch()
        except PriceFeedError as exc:
            logger.error("Failed to get multiple token prices: %s", exc)
            return {}

        result: Dict[str, Decimal] = {}
        for currency in currencies:
            price = find_price(quotes, currency)
            if price is not None:
                result[currency.upper()] = price
        return result

    def clear(self) -> None:
        self._entry = None
        logger.info("Token prices cache cleared")


def find_price(quotes: Iterable[PriceQuote], currency: str) -> Optional[Decimal]:
    wanted = currency.upper()
    for quote in quotes:
        if quote.currency.upper() == wanted:
            return quote.price
    return None


__all__ = ["PriceCache", "PriceCacheEntry", "PriceFetchResult", "find_price"]
