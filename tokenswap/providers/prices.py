"""Upstream price list provider (single bounded-time GET)."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..config import settings
from ..core.errors import ApiError, NetworkError, PriceFeedError
from .base import PriceProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """USD price of one currency as published by the feed."""

    currency: str
    as_of: datetime
    price: Decimal


class SwitcheoPriceProvider(PriceProvider):
    """Fetches the public ``prices.json`` list."""

    name = "switcheo"

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.price_feed_url
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self._transport = transport

    async def ready(self) -> bool:
        return bool(self.url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "No price feed URL configured"}

        try:
            quotes = await self.get_prices()
        except PriceFeedError as exc:
            return {"status": "error", "reason": str(exc)}
        return {"status": "healthy", "quotes": len(quotes)}

    async def get_prices(self) -> List[PriceQuote]:
        payload = await self._request()
        if not isinstance(payload, list):
            raise ApiError("Invalid response format", payload=payload)
        return parse_price_list(payload)

    async def _request(self) -> Any:
        # wait_for cancels the in-flight request (and closes the client) once the deadline passes
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout_s) as client:
                response = await asyncio.wait_for(
                    client.get(self.url, headers={"Content-Type": "application/json"}),
                    timeout=self.timeout_s,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise NetworkError("Request timeout") from exc
        except httpx.RequestError as exc:
            raise NetworkError("Failed to fetch data") from exc

        if not response.is_success:
            raise ApiError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                payload=response.text,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Invalid response format",
                status_code=response.status_code,
                payload=response.text,
            ) from exc


def parse_price_list(entries: Iterable[Any]) -> List[PriceQuote]:
    """Keep the most recent valid quote per currency, in first-seen order."""
    latest: Dict[str, PriceQuote] = {}
    skipped = 0
    for entry in entries:
        quote = _parse_price_entry(entry)
        if quote is None:
            skipped += 1
            continue
        key = quote.currency.upper()
        current = latest.get(key)
        if current is None or quote.as_of > current.as_of:
            latest[key] = quote

    if skipped:
        logger.debug("Skipped %d malformed price entries", skipped)
    return list(latest.values())


def _parse_price_entry(entry: Any) -> Optional[PriceQuote]:
    if not isinstance(entry, dict):
        return None

    currency = entry.get("currency")
    raw_price = entry.get("price")
    if not isinstance(currency, str) or not currency.strip():
        return None
    if isinstance(raw_price, bool) or not isinstance(raw_price, (int, float)):
        return None
    if not math.isfinite(raw_price) or raw_price < 0:
        return None

    as_of = _parse_timestamp(entry.get("date"))
    if as_of is None:
        return None

    try:
        price = Decimal(str(raw_price))
    except InvalidOperation:
        return None

    return PriceQuote(currency=currency.strip(), as_of=as_of, price=price)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["PriceQuote", "SwitcheoPriceProvider", "parse_price_list"]
