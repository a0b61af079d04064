"""Pure quote math: amount parsing, USD valuation, conversion and formatting."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Dict, Optional

from .models import EMPTY_QUOTE, Asset, SwapQuote

# ASCII digits only; used with fullmatch so a trailing newline is rejected too
AMOUNT_PATTERN = re.compile(r'[0-9]*\.?[0-9]*')

USD_PLACES = 2
OUTPUT_PLACES = 6
RATE_PLACES = 6

# Wide enough that very large amounts times large prices still quantize exactly.
_PRECISION = 60


def is_amount_text(text: str) -> bool:
    """True for text the amount field accepts: empty, digits, one decimal point."""
    return AMOUNT_PATTERN.fullmatch(text) is not None


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    if text is None:
        return None
    stripped = text.strip()
    if not stripped or not is_amount_text(stripped):
        return None
    try:
        return Decimal(stripped)
    except InvalidOperation:
        return None


def calculate_swap_amount(amount_text: Optional[str], from_asset: Asset, to_asset: Asset) -> SwapQuote:
    """Convert ``amount_text`` of ``from_asset`` into ``to_asset`` via USD.

    Never raises: a zero-priced destination yields an ``unpriced`` quote with
    no output amount instead of a division error.
    """
    amount = parse_amount(amount_text)
    if amount is None or amount <= 0:
        return EMPTY_QUOTE

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        usd_value = amount * from_asset.price
        if to_asset.price <= 0:
            return SwapQuote(amount=amount, usd_value=usd_value, output_amount=None, unpriced=True)
        output_amount = usd_value / to_asset.price

    return SwapQuote(
        amount=amount,
        usd_value=usd_value,
        output_amount=output_amount,
        unpriced=from_asset.price <= 0,
    )


def calculate_usd_value(amount_text: Optional[str], asset: Asset) -> str:
    amount = parse_amount(amount_text)
    if amount is None or amount <= 0:
        return '0'
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return format_usd_value(amount * asset.price)


def exchange_rate(from_asset: Asset, to_asset: Asset) -> Optional[Decimal]:
    """Units of ``to_asset`` per one ``from_asset``; display only."""
    if to_asset.price <= 0:
        return None
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return from_asset.price / to_asset.price


def quote_display(quote: SwapQuote) -> Dict[str, str]:
    if quote.is_empty:
        return {'output_amount': '0', 'usd_value': '0'}
    return {
        'output_amount': format_output_amount(quote.output_amount),
        'usd_value': format_usd_value(quote.usd_value),
    }


def format_usd_value(value: Decimal) -> str:
    return _fixed(value, USD_PLACES)


def format_output_amount(value: Optional[Decimal]) -> str:
    if value is None:
        return '0'
    return _fixed(value, OUTPUT_PLACES)


def format_rate(rate: Optional[Decimal]) -> Optional[str]:
    if rate is None:
        return None
    return _fixed(rate, RATE_PLACES)


def format_price(price: Decimal) -> str:
    """Thousands-separated price; sub-dollar prices keep up to 6 decimals."""
    places = OUTPUT_PLACES if price < 1 else USD_PLACES
    text = f'{_quantize(price, places):,.{places}f}'
    if places > USD_PLACES:
        whole, _, frac = text.partition('.')
        text = f"{whole}.{frac.rstrip('0').ljust(USD_PLACES, '0')}"
    return text


def format_decimal(value: Decimal) -> str:
    """Plain text without exponent or trailing zeros (``Decimal('10.0')`` -> ``'10'``)."""
    if value == 0:
        return '0'
    return format(value.normalize(), 'f')


def _quantize(value: Decimal, places: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _fixed(value: Decimal, places: int) -> str:
    return f'{_quantize(value, places):.{places}f}'


__all__ = [
    'AMOUNT_PATTERN',
    'is_amount_text',
    'parse_amount',
    'calculate_swap_amount',
    'calculate_usd_value',
    'exchange_rate',
    'quote_display',
    'format_usd_value',
    'format_output_amount',
    'format_rate',
    'format_price',
    'format_decimal',
]
