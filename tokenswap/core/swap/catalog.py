"""Merge static token metadata with live or fallback prices."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ...providers.prices import PriceQuote
from .constants import FALLBACK_PRICES, TOKEN_LIST, USER_BALANCES
from .models import Asset


class AssetCatalog:
    """Builds the ordered tradable asset list from a price list.

    ``build`` is pure and total: unknown symbols fall back to the static
    price table, and to zero when the table has no entry either.
    """

    def __init__(
        self,
        tokens: Sequence[Mapping[str, str]] = TOKEN_LIST,
        balances: Optional[Mapping[str, Decimal]] = None,
        fallback_prices: Optional[Mapping[str, Decimal]] = None,
    ):
        self._tokens = tuple(tokens)
        self._balances: Dict[str, Decimal] = {
            symbol.upper(): amount
            for symbol, amount in (USER_BALANCES if balances is None else balances).items()
        }
        self._fallback_prices: Dict[str, Decimal] = {
            symbol.upper(): price
            for symbol, price in (FALLBACK_PRICES if fallback_prices is None else fallback_prices).items()
        }

    @property
    def symbols(self) -> List[str]:
        return [token['symbol'] for token in self._tokens]

    def build(self, price_quotes: Iterable[PriceQuote]) -> List[Asset]:
        live_prices: Dict[str, Decimal] = {}
        for quote in price_quotes:
            # First quote per symbol wins, matching a linear scan of the list
            live_prices.setdefault(quote.currency.upper(), quote.price)

        assets: List[Asset] = []
        for token in self._tokens:
            symbol = token['symbol']
            key = symbol.upper()
            price = live_prices.get(key)
            if price is None:
                price = self._fallback_prices.get(key, Decimal('0'))
            assets.append(
                Asset(
                    symbol=symbol,
                    name=token.get('name', symbol),
                    price=price,
                    balance=self._balances.get(key, Decimal('0')),
                    icon=token.get('logo', ''),
                )
            )
        return assets

    def fallback_assets(self) -> List[Asset]:
        return self.build([])


def get_asset_by_symbol(assets: Iterable[Asset], symbol: str) -> Optional[Asset]:
    wanted = symbol.upper()
    for asset in assets:
        if asset.symbol.upper() == wanted:
            return asset
    return None


__all__ = ["AssetCatalog", "get_asset_by_symbol"]
