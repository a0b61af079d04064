from decimal import Decimal

import pytest

from tokenswap.core.swap.models import EMPTY_QUOTE
from tokenswap.core.swap.quote import (
    calculate_swap_amount,
    calculate_usd_value,
    exchange_rate,
    format_decimal,
    format_output_amount,
    format_price,
    format_rate,
    format_usd_value,
    is_amount_text,
    parse_amount,
    quote_display,
)


@pytest.mark.parametrize("text", ["", "5", "5.", ".5", ".", "0012.500"])
def test_amount_text_accepts_plain_decimals(text):
    assert is_amount_text(text)


@pytest.mark.parametrize("text", ["1.2.3", "-1", "1e5", "abc", " 5", "5,0", "5\n", "5 ", "\u0665", "\uff15"])
def test_amount_text_rejects_everything_else(text):
    assert not is_amount_text(text)


def test_parse_amount_handles_partial_input():
    assert parse_amount("5.") == Decimal("5")
    assert parse_amount(".25") == Decimal("0.25")
    assert parse_amount(".") is None
    assert parse_amount("") is None
    assert parse_amount(None) is None
    assert parse_amount("NaN") is None
    assert parse_amount("Infinity") is None
    assert parse_amount("-1") is None
    assert parse_amount("\u0665") is None


def test_swap_amount_converts_through_usd(eth, btc):
    """5 ETH at 2600 USD buys 13000 USD worth of BTC at 60000."""

    quote = calculate_swap_amount("5", eth, btc)

    assert quote.amount == Decimal("5")
    assert quote.usd_value == Decimal("13000")
    assert not quote.unpriced
    assert quote_display(quote) == {"output_amount": "0.216667", "usd_value": "13000.00"}


@pytest.mark.parametrize("text", ["", "0", "0.000", "."])
def test_swap_amount_empty_for_missing_or_zero_input(eth, btc, text):
    quote = calculate_swap_amount(text, eth, btc)

    assert quote is EMPTY_QUOTE
    assert quote_display(quote) == {"output_amount": "0", "usd_value": "0"}


def test_swap_amount_never_divides_by_zero_price(eth, unpriced):
    quote = calculate_swap_amount("2", eth, unpriced)

    assert quote.unpriced
    assert quote.output_amount is None
    assert quote.usd_value == Decimal("5200")
    assert quote_display(quote) == {"output_amount": "0", "usd_value": "5200.00"}


def test_swap_amount_flags_unpriced_source(unpriced, eth):
    quote = calculate_swap_amount("1000", unpriced, eth)

    assert quote.unpriced
    assert quote.output_amount == Decimal("0")


def test_swap_amount_keeps_precision_for_large_values(asset_factory):
    whale = asset_factory("WBTC", "60000", "0")
    dust = asset_factory("SHIB", "0.00000001", "0")

    quote = calculate_swap_amount("123456789.123456789", whale, dust)

    assert format_output_amount(quote.output_amount) == "740740734740740734000.000000"


def test_usd_value_for_single_asset(eth):
    assert calculate_usd_value("2", eth) == "5200.00"
    assert calculate_usd_value("", eth) == "0"
    assert calculate_usd_value("-1", eth) == "0"


def test_exchange_rate(eth, btc, unpriced):
    assert format_rate(exchange_rate(eth, btc)) == "0.043333"
    assert format_rate(exchange_rate(btc, eth)) == "23.076923"
    assert exchange_rate(eth, unpriced) is None
    assert format_rate(None) is None


class TestFormatting:
    def test_usd_rounds_half_up(self):
        assert format_usd_value(Decimal("0.125")) == "0.13"
        assert format_usd_value(Decimal("13000")) == "13000.00"

    def test_output_amount_six_places(self):
        assert format_output_amount(Decimal("0.0000005")) == "0.000001"
        assert format_output_amount(Decimal("0.21666666666")) == "0.216667"
        assert format_output_amount(None) == "0"

    def test_price_uses_thousands_separators(self):
        assert format_price(Decimal("26002.82")) == "26,002.82"
        assert format_price(Decimal("1645.934")) == "1,645.93"

    def test_small_prices_keep_significant_decimals(self):
        assert format_price(Decimal("0.0301")) == "0.0301"
        assert format_price(Decimal("0.5")) == "0.50"
        assert format_price(Decimal("0.123456789")) == "0.123457"

    def test_decimal_drops_trailing_zeros(self):
        assert format_decimal(Decimal("10")) == "10"
        assert format_decimal(Decimal("10.50")) == "10.5"
        assert format_decimal(Decimal("100000")) == "100000"
        assert format_decimal(Decimal("0.000")) == "0"
