import asyncio
from decimal import Decimal

import pytest

from tokenswap.core.errors import ApiError, NetworkError
from tokenswap.services.price_cache import PriceCache


class GatedPriceProvider:
    """Each call blocks until its gate is opened, so tests control completion order."""

    name = "gated"

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.gates = [asyncio.Event() for _ in payloads]
        self.calls = 0

    async def get_prices(self):
        index = self.calls
        self.calls += 1
        await self.gates[index].wait()
        return self.payloads[index]


@pytest.mark.asyncio
async def test_fresh_entry_is_served_without_refetch(make_provider, live_quotes, clock):
    provider = make_provider(live_quotes)
    cache = PriceCache(provider, ttl_seconds=60, clock=clock)

    first = await cache.fetch()
    clock.advance(59)
    second = await cache.fetch_with_status()

    assert provider.calls == 1
    assert second.cached
    assert second.quotes == first == live_quotes


@pytest.mark.asyncio
async def test_expired_entry_is_refetched(make_provider, live_quotes, quote_factory, clock):
    newer = [quote_factory("ETH", "1700")]
    provider = make_provider(live_quotes, newer)
    cache = PriceCache(provider, ttl_seconds=60, clock=clock)

    await cache.fetch()
    clock.advance(60)
    quotes = await cache.fetch()

    assert provider.calls == 2
    assert quotes == newer
    assert cache.entry.data == tuple(newer)


@pytest.mark.asyncio
async def test_bypassing_cache_always_fetches(make_provider, live_quotes, clock):
    provider = make_provider(live_quotes)
    cache = PriceCache(provider, clock=clock)

    await cache.fetch()
    await cache.fetch(use_cache=False)

    assert provider.calls == 2


@pytest.mark.asyncio
async def test_failure_falls_back_to_stale_entry(make_provider, live_quotes, clock):
    provider = make_provider(live_quotes, NetworkError("Request timeout"))
    cache = PriceCache(provider, ttl_seconds=60, clock=clock)
    await cache.fetch()

    clock.advance(3600)
    result = await cache.fetch_with_status()

    assert result.stale
    assert not result.cached
    assert result.quotes == live_quotes
    assert isinstance(result.error, NetworkError)
    # The stale entry is kept as is
    assert cache.entry.fetched_at == 1000.0


@pytest.mark.asyncio
async def test_failure_without_entry_raises(make_provider, clock):
    cache = PriceCache(make_provider(ApiError("HTTP 500: Internal Server Error", status_code=500)), clock=clock)

    with pytest.raises(ApiError):
        await cache.fetch()

    assert cache.entry is None


@pytest.mark.asyncio
async def test_unexpected_errors_are_not_swallowed(make_provider, live_quotes, clock):
    cache = PriceCache(make_provider(live_quotes, ValueError("bug")), clock=clock)
    await cache.fetch()

    with pytest.raises(ValueError):
        await cache.fetch(use_cache=False)


@pytest.mark.asyncio
async def test_out_of_order_response_does_not_overwrite_newer_data(quote_factory, clock):
    older = [quote_factory("ETH", "1500")]
    newer = [quote_factory("ETH", "1700")]
    provider = GatedPriceProvider(older, newer)
    cache = PriceCache(provider, clock=clock)

    first = asyncio.create_task(cache.fetch(use_cache=False))
    await asyncio.sleep(0)
    clock.advance(1)
    second = asyncio.create_task(cache.fetch(use_cache=False))
    await asyncio.sleep(0)

    provider.gates[1].set()
    assert await second == newer

    provider.gates[0].set()
    late = await first

    assert cache.entry.data == tuple(newer)
    assert late == newer


@pytest.mark.asyncio
async def test_requests_issued_in_same_clock_tick_keep_issue_order(quote_factory, clock):
    older = [quote_factory("ETH", "1500")]
    newer = [quote_factory("ETH", "1700")]
    provider = GatedPriceProvider(older, newer)
    cache = PriceCache(provider, clock=clock)

    first = asyncio.create_task(cache.fetch(use_cache=False))
    second = asyncio.create_task(cache.fetch(use_cache=False))
    await asyncio.sleep(0)

    provider.gates[1].set()
    await second
    provider.gates[0].set()
    await first

    assert cache.entry.data == tuple(newer)
    assert cache.entry.sequence == 2


@pytest.mark.asyncio
async def test_concurrent_cached_fetches_share_one_request(live_quotes, clock):
    provider = GatedPriceProvider(live_quotes)
    cache = PriceCache(provider, clock=clock)

    first = asyncio.create_task(cache.fetch_with_status())
    second = asyncio.create_task(cache.fetch_with_status())
    await asyncio.sleep(0)
    provider.gates[0].set()
    results = await asyncio.gather(first, second)

    assert provider.calls == 1
    assert [result.quotes for result in results] == [live_quotes, live_quotes]
    assert [result.cached for result in results] == [False, True]


@pytest.mark.asyncio
async def test_token_price_lookup(make_provider, live_quotes, clock):
    cache = PriceCache(make_provider(live_quotes), clock=clock)

    assert await cache.get_token_price("eth") == Decimal("1645.93")
    assert await cache.get_token_price("DOGE") is None
    assert await cache.get_multiple_token_prices(["btc", "USDC", "DOGE"]) == {
        "BTC": Decimal("26002.82"),
        "USDC": Decimal("0.99"),
    }


@pytest.mark.asyncio
async def test_token_price_lookup_without_data(make_provider, clock):
    cache = PriceCache(make_provider(NetworkError("Failed to fetch data")), clock=clock)

    assert await cache.get_token_price("ETH") is None
    assert await cache.get_multiple_token_prices(["ETH"]) == {}


@pytest.mark.asyncio
async def test_clear_forces_refetch(make_provider, live_quotes, clock):
    provider = make_provider(live_quotes)
    cache = PriceCache(provider, clock=clock)
    await cache.fetch()

    cache.clear()

    assert cache.entry is None
    assert not cache.is_fresh()
    await cache.fetch()
    assert provider.calls == 2


def test_default_ttl_comes_from_settings(make_provider, live_quotes):
    assert PriceCache(make_provider(live_quotes)).ttl_seconds == 60
