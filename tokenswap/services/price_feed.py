"""
Price feed state exposed to the display layer.

Wraps the process-wide PriceCache and the AssetCatalog and keeps the
last-known price list, loading/error flags and the stale-data warning.
Sessions subscribe to receive the rebuilt asset list after every load.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.errors import ApiError, NetworkError, PriceFeedError
from ..core.swap.catalog import AssetCatalog
from ..core.swap.models import Asset
from ..providers.prices import PriceQuote
from .price_cache import PriceCache, find_price

logger = logging.getLogger(__name__)

STALE_WARNING = "Using cached prices."

AssetsListener = Callable[[List[Asset]], None]


def describe_error(exc: Exception) -> str:
    if isinstance(exc, ApiError):
        return f"API Error: {exc}"
    if isinstance(exc, NetworkError):
        return f"Network Error: {exc}"
    return str(exc) or "Failed to fetch token prices"


class PriceFeed:
    def __init__(self, cache: PriceCache, catalog: Optional[AssetCatalog] = None):
        self._cache = cache
        self._catalog = catalog or AssetCatalog()
        self.prices: List[PriceQuote] = []
        # Until the first load succeeds the form works off fallback prices
        self.assets: List[Asset] = self._catalog.fallback_assets()
        self.error: Optional[str] = None
        self.warning: Optional[str] = None
        self.last_updated: Optional[datetime] = None
        self._listeners: List[AssetsListener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._in_flight = 0
        self._issued = 0
        self._applied = 0

    @property
    def cache(self) -> PriceCache:
        return self._cache

    @property
    def catalog(self) -> AssetCatalog:
        return self._catalog

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def status(self) -> str:
        if self.error and not self.prices:
            return "unavailable"
        if self.warning:
            return "degraded"
        if not self.prices:
            return "loading" if self.loading else "idle"
        return "healthy"

    async def load(self, use_cache: bool = True) -> None:
        self._issued += 1
        sequence = self._issued
        self._in_flight += 1
        self.error = None
        try:
            result = await self._cache.fetch_with_status(use_cache)
        except PriceFeedError as exc:
            if sequence > self._applied:
                self._applied = sequence
                self.error = describe_error(exc)
            return
        finally:
            self._in_flight -= 1

        if sequence < self._applied:
            logger.debug("Ignoring price load %d superseded by %d", sequence, self._applied)
            return
        self._applied = sequence

        self.prices = result.quotes
        self.warning = STALE_WARNING if result.stale else None
        self.last_updated = datetime.now(timezone.utc)
        self.assets = self._catalog.build(self.prices)
        self._notify()

    async def refetch(self) -> None:
        await self.load(use_cache=False)

    def start_background_refresh(self, use_cache: bool = True) -> asyncio.Task:
        task = asyncio.create_task(self.load(use_cache))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def get_price(self, symbol: str) -> Optional[Decimal]:
        return find_price(self.prices, symbol)

    def clear_error(self) -> None:
        self.error = None

    def subscribe(self, listener: AssetsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: AssetsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "loading": self.loading,
            "error": self.error,
            "warning": self.warning,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "prices": [
                {
                    "currency": quote.currency,
                    "date": quote.as_of.isoformat(),
                    "price": str(quote.price),
                }
                for quote in self.prices
            ],
        }

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(list(self.assets))
            except Exception as exc:  # noqa: BLE001
                logger.warning("Asset listener failed: %s", exc, exc_info=exc)


__all__ = ["PriceFeed", "STALE_WARNING", "describe_error"]
