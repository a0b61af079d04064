from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

import pytest

from tokenswap.core.swap.models import Asset
from tokenswap.providers.base import PriceProvider
from tokenswap.providers.prices import PriceQuote


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedPriceProvider(PriceProvider):
    """Replays queued results; the last one repeats once the queue runs dry."""

    name = "scripted"

    def __init__(self, *results: Any):
        self.results: List[Any] = list(results)
        self.calls = 0

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def get_prices(self) -> List[PriceQuote]:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return list(result)


def make_quote(currency: str, price: str, as_of: str = "2023-08-29T07:10:40+00:00") -> PriceQuote:
    return PriceQuote(currency=currency, as_of=datetime.fromisoformat(as_of), price=Decimal(price))


def make_asset(symbol: str, price: str, balance: str = "0") -> Asset:
    return Asset(
        symbol=symbol,
        name=symbol.title(),
        price=Decimal(price),
        balance=Decimal(balance),
        icon=f"https://icons.example/{symbol}.svg",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def live_quotes() -> List[PriceQuote]:
    return [
        make_quote("ETH", "1645.93"),
        make_quote("BTC", "26002.82"),
        make_quote("usdc", "0.99"),
    ]


@pytest.fixture
def eth() -> Asset:
    return make_asset("ETH", "2600", "10")


@pytest.fixture
def btc() -> Asset:
    return make_asset("BTC", "60000", "1")


@pytest.fixture
def usdc() -> Asset:
    return make_asset("USDC", "1", "2500")


@pytest.fixture
def unpriced() -> Asset:
    return make_asset("SWTH", "0", "100000")


@pytest.fixture
def instant_settlement():
    calls = []

    async def settle(state):
        calls.append(state)

    settle.calls = calls
    return settle


@pytest.fixture
def failing_settlement():
    async def settle(state):
        raise RuntimeError("matching engine unavailable")

    return settle


@pytest.fixture
def make_provider():
    return ScriptedPriceProvider


@pytest.fixture
def quote_factory():
    return make_quote


@pytest.fixture
def asset_factory():
    return make_asset
