from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..services.price_feed import PriceFeed
from .dependencies import get_price_feed

router = APIRouter()


@router.get("/prices")
async def get_prices(feed: PriceFeed = Depends(get_price_feed)) -> Dict[str, Any]:
    """Current price list; loads it on first use"""
    if not feed.prices and not feed.loading:
        await feed.load()
    return feed.to_dict()


@router.post("/prices/refresh")
async def refresh_prices(feed: PriceFeed = Depends(get_price_feed)) -> Dict[str, Any]:
    """Refetch bypassing the cache (falls back to cached data on failure)"""
    await feed.refetch()
    return feed.to_dict()


@router.get("/prices/{symbol}")
async def get_price(symbol: str, feed: PriceFeed = Depends(get_price_feed)) -> Dict[str, Any]:
    price = feed.get_price(symbol)
    if price is None:
        raise HTTPException(status_code=404, detail=f"No price for {symbol.upper()}")
    return {"currency": symbol.upper(), "price": str(price), "stale": feed.warning is not None}


@router.get("/assets")
async def list_assets(feed: PriceFeed = Depends(get_price_feed)) -> List[Dict[str, Any]]:
    return [asset.to_dict() for asset in feed.assets]
