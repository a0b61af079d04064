from decimal import Decimal

import httpx
import pytest

from tokenswap.core.errors import ApiError, NetworkError
from tokenswap.core.swap.catalog import get_asset_by_symbol
from tokenswap.providers.prices import SwitcheoPriceProvider
from tokenswap.services.price_cache import PriceCache
from tokenswap.services.price_feed import STALE_WARNING, PriceFeed, describe_error


def _feed(provider, clock):
    return PriceFeed(PriceCache(provider, clock=clock))


def test_describe_error():
    assert describe_error(ApiError("HTTP 404: Not Found")) == "API Error: HTTP 404: Not Found"
    assert describe_error(NetworkError("Request timeout")) == "Network Error: Request timeout"
    assert describe_error(RuntimeError("")) == "Failed to fetch token prices"


def test_initial_state_uses_fallback_assets(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)

    assert feed.prices == []
    assert feed.status == "idle"
    assert feed.last_updated is None
    assert get_asset_by_symbol(feed.assets, "ETH").price == Decimal("2600")


@pytest.mark.asyncio
async def test_load_publishes_prices_and_assets(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)
    received = []
    feed.subscribe(received.append)

    await feed.load()

    assert feed.prices == live_quotes
    assert feed.status == "healthy"
    assert feed.error is None
    assert feed.warning is None
    assert feed.last_updated is not None
    assert not feed.loading
    assert get_asset_by_symbol(feed.assets, "BTC").price == Decimal("26002.82")
    assert len(received) == 1
    assert received[0] == feed.assets


@pytest.mark.asyncio
async def test_first_load_failure_reports_error(make_provider, clock):
    feed = _feed(make_provider(NetworkError("Request timeout")), clock)
    received = []
    feed.subscribe(received.append)

    await feed.load()

    assert feed.error == "Network Error: Request timeout"
    assert feed.status == "unavailable"
    assert feed.prices == []
    assert not received
    # The swap form keeps working off fallback prices
    assert get_asset_by_symbol(feed.assets, "ETH").price == Decimal("2600")


@pytest.mark.asyncio
async def test_failed_refetch_serves_cached_prices_with_warning(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes, ApiError("HTTP 502: Bad Gateway", status_code=502)), clock)
    await feed.load()

    await feed.refetch()

    assert feed.prices == live_quotes
    assert feed.warning == STALE_WARNING
    assert feed.error is None
    assert feed.status == "degraded"


@pytest.mark.asyncio
async def test_warning_clears_after_successful_refetch(make_provider, live_quotes, clock):
    provider = make_provider(live_quotes, NetworkError("Request timeout"), live_quotes)
    feed = _feed(provider, clock)

    await feed.load()
    await feed.refetch()
    assert feed.warning == STALE_WARNING

    await feed.refetch()
    assert feed.warning is None
    assert provider.calls == 3


@pytest.mark.asyncio
async def test_timeout_after_expiry_falls_back_to_cache(live_quotes, clock):
    """A feed that stops answering after the TTL still serves the cached list."""

    calls = []

    async def handler(request):
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(
                200,
                json=[{"currency": "ETH", "date": "2023-08-29T07:10:40Z", "price": 1645.93}],
            )
        raise httpx.ReadTimeout("timed out", request=request)

    provider = SwitcheoPriceProvider(url="https://prices.test/prices.json", transport=httpx.MockTransport(handler))
    feed = _feed(provider, clock)

    await feed.load()
    clock.advance(61)
    await feed.load()

    assert len(calls) == 2
    assert feed.get_price("eth") == Decimal("1645.93")
    assert feed.warning == STALE_WARNING


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_loading(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)
    received = []

    def broken(assets):
        raise RuntimeError("listener bug")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    await feed.load()

    assert len(received) == 1


@pytest.mark.asyncio
async def test_unsubscribe(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)
    received = []
    feed.subscribe(received.append)
    feed.subscribe(received.append)
    feed.unsubscribe(received.append)

    await feed.load()

    assert received == []


@pytest.mark.asyncio
async def test_background_refresh(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)

    task = feed.start_background_refresh()
    await task

    assert feed.status == "healthy"
    await feed.aclose()


@pytest.mark.asyncio
async def test_clear_error(make_provider, clock):
    feed = _feed(make_provider(NetworkError()), clock)
    await feed.load()
    assert feed.error == "Network Error: Network request failed"

    feed.clear_error()

    assert feed.error is None


@pytest.mark.asyncio
async def test_to_dict(make_provider, live_quotes, clock):
    feed = _feed(make_provider(live_quotes), clock)
    await feed.load()

    data = feed.to_dict()

    assert data["status"] == "healthy"
    assert data["loading"] is False
    assert data["prices"][0] == {
        "currency": "ETH",
        "date": "2023-08-29T07:10:40+00:00",
        "price": "1645.93",
    }
