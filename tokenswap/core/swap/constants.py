"""Static token metadata, demo balances and fallback prices for the swap form."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Tuple

ICON_BASE_URL = "https://raw.githubusercontent.com/Switcheo/token-icons/main/tokens"

# Ordered: the first two entries are the default from/to selection.
TOKEN_LIST: Tuple[Dict[str, str], ...] = (
    {'symbol': 'ETH', 'name': 'Ethereum', 'logo': f'{ICON_BASE_URL}/ETH.svg'},
    {'symbol': 'BTC', 'name': 'Bitcoin', 'logo': f'{ICON_BASE_URL}/BTC.svg'},
    {'symbol': 'USDT', 'name': 'Tether', 'logo': f'{ICON_BASE_URL}/USDT.svg'},
    {'symbol': 'USDC', 'name': 'USD Coin', 'logo': f'{ICON_BASE_URL}/USDC.svg'},
    {'symbol': 'BNB', 'name': 'BNB', 'logo': f'{ICON_BASE_URL}/BNB.svg'},
    {'symbol': 'SOL', 'name': 'Solana', 'logo': f'{ICON_BASE_URL}/SOL.svg'},
    {'symbol': 'XRP', 'name': 'XRP', 'logo': f'{ICON_BASE_URL}/XRP.svg'},
    {'symbol': 'DOGE', 'name': 'Dogecoin', 'logo': f'{ICON_BASE_URL}/DOGE.svg'},
    {'symbol': 'ADA', 'name': 'Cardano', 'logo': f'{ICON_BASE_URL}/ADA.svg'},
    {'symbol': 'AVAX', 'name': 'Avalanche', 'logo': f'{ICON_BASE_URL}/AVAX.svg'},
    {'symbol': 'LINK', 'name': 'Chainlink', 'logo': f'{ICON_BASE_URL}/LINK.svg'},
    {'symbol': 'MATIC', 'name': 'Polygon', 'logo': f'{ICON_BASE_URL}/MATIC.svg'},
    {'symbol': 'LTC', 'name': 'Litecoin', 'logo': f'{ICON_BASE_URL}/LTC.svg'},
    {'symbol': 'UNI', 'name': 'Uniswap', 'logo': f'{ICON_BASE_URL}/UNI.svg'},
    {'symbol': 'WBTC', 'name': 'Wrapped Bitcoin', 'logo': f'{ICON_BASE_URL}/WBTC.svg'},
    {'symbol': 'DAI', 'name': 'Dai', 'logo': f'{ICON_BASE_URL}/DAI.svg'},
    {'symbol': 'ATOM', 'name': 'Cosmos', 'logo': f'{ICON_BASE_URL}/ATOM.svg'},
    {'symbol': 'ARB', 'name': 'Arbitrum', 'logo': f'{ICON_BASE_URL}/ARB.svg'},
    {'symbol': 'OP', 'name': 'Optimism', 'logo': f'{ICON_BASE_URL}/OP.svg'},
    {'symbol': 'SWTH', 'name': 'Switcheo', 'logo': f'{ICON_BASE_URL}/SWTH.svg'},
)

USER_BALANCES: Dict[str, Decimal] = {
    'ETH': Decimal('10'),
    'BTC': Decimal('1'),
    'USDT': Decimal('5000'),
    'USDC': Decimal('2500'),
    'BNB': Decimal('12.5'),
    'SOL': Decimal('40'),
    'XRP': Decimal('1500'),
    'DOGE': Decimal('20000'),
    'ADA': Decimal('3000'),
    'AVAX': Decimal('25'),
    'LINK': Decimal('120'),
    'MATIC': Decimal('800'),
    'LTC': Decimal('6'),
    'UNI': Decimal('150'),
    'WBTC': Decimal('0.25'),
    'DAI': Decimal('1000'),
    'ATOM': Decimal('60'),
    'ARB': Decimal('400'),
    'OP': Decimal('300'),
    'SWTH': Decimal('100000'),
}

# Approximate market prices used when the feed has no quote for a symbol.
FALLBACK_PRICES: Dict[str, Decimal] = {
    'BTC': Decimal('60000'),
    'ETH': Decimal('2600'),
    'USDT': Decimal('1.0'),
    'USDC': Decimal('1.0'),
    'BNB': Decimal('300'),
    'SOL': Decimal('100'),
    'XRP': Decimal('0.6'),
    'DOGE': Decimal('0.08'),
    'ADA': Decimal('0.5'),
    'AVAX': Decimal('35'),
    'LINK': Decimal('15'),
    'MATIC': Decimal('0.8'),
    'LTC': Decimal('90'),
    'SHIB': Decimal('0.000025'),
    'UNI': Decimal('7'),
    'WBTC': Decimal('60000'),
    'DAI': Decimal('1.0'),
    'ATOM': Decimal('12'),
    'DOT': Decimal('6'),
    'ARB': Decimal('1.2'),
    'OP': Decimal('2.5'),
    'NEAR': Decimal('3'),
    'APE': Decimal('4'),
    'FIL': Decimal('8'),
    'FTM': Decimal('0.4'),
}

__all__ = [
    'ICON_BASE_URL',
    'TOKEN_LIST',
    'USER_BALANCES',
    'FALLBACK_PRICES',
]
