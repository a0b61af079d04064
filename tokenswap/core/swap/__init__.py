"""
Swap core: asset catalog, quote math and the per-user swap session.
"""

from .catalog import AssetCatalog, get_asset_by_symbol
from .manager import SwapSessionManager
from .models import (
    Asset,
    SwapPhase,
    SwapQuote,
    SwapReceipt,
    SwapResult,
    SwapState,
)
from .quote import (
    calculate_swap_amount,
    calculate_usd_value,
    exchange_rate,
    format_price,
    parse_amount,
    quote_display,
)
from .session import SwapSession, simulate_settlement, validate_swap

__all__ = [
    "AssetCatalog",
    "get_asset_by_symbol",
    "SwapSessionManager",
    "Asset",
    "SwapPhase",
    "SwapQuote",
    "SwapReceipt",
    "SwapResult",
    "SwapState",
    "calculate_swap_amount",
    "calculate_usd_value",
    "exchange_rate",
    "format_price",
    "parse_amount",
    "quote_display",
    "SwapSession",
    "simulate_settlement",
    "validate_swap",
]
