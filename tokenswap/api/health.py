from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services.price_feed import PriceFeed
from .dependencies import get_price_feed

router = APIRouter()


@router.get("/healthz")
async def health_check(feed: PriceFeed = Depends(get_price_feed)) -> Dict[str, Any]:
    """Health check reporting whether prices are live, stale or missing"""
    cache_entry = feed.cache.entry
    status = feed.status

    return {
        "status": "healthy" if status in ("healthy", "idle", "loading") else status,
        "price_feed": {
            "status": status,
            "provider": feed.cache.provider.name,
            "cached_quotes": len(cache_entry.data) if cache_entry else 0,
            "cache_fresh": feed.cache.is_fresh(),
            "last_updated": feed.last_updated.isoformat() if feed.last_updated else None,
            "error": feed.error,
            "warning": feed.warning,
        },
    }
