from .price_cache import PriceCache, PriceCacheEntry, PriceFetchResult
from .price_feed import PriceFeed, STALE_WARNING

__all__ = [
    "PriceCache",
    "PriceCacheEntry",
    "PriceFetchResult",
    "PriceFeed",
    "STALE_WARNING",
]
