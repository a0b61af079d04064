"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Asset:
    """A tradable token with its current price and the user's balance."""

    symbol: str
    name: str
    price: Decimal
    balance: Decimal
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'name': self.name,
            'price': str(self.price),
            'balance': str(self.balance),
            'icon': self.icon,
        }


class SwapPhase(str, Enum):
    UNINITIALIZED = "uninitialized"  # nothing selected
    SELECTING = "selecting"          # not swap-eligible yet
    READY = "ready"
    BUSY = "busy"                    # settlement in flight
    ERROR = "error"                  # last settlement failed


@dataclass(frozen=True)
class SwapQuote:
    """Conversion of an input amount into the destination token.

    ``output_amount`` is None when the destination is priced at zero;
    ``unpriced`` flags that case so callers can refuse the swap.
    """

    amount: Optional[Decimal] = None
    usd_value: Decimal = Decimal('0')
    output_amount: Optional[Decimal] = Decimal('0')
    unpriced: bool = False

    @property
    def is_empty(self) -> bool:
        return self.amount is None


EMPTY_QUOTE = SwapQuote()


@dataclass(frozen=True)
class SwapState:
    """Immutable snapshot of one swap form; every operation replaces it."""

    from_asset: Optional[Asset] = None
    to_asset: Optional[Asset] = None
    input_amount: str = ""
    amount: Optional[Decimal] = None
    quote: SwapQuote = EMPTY_QUOTE
    validation_message: str = ""
    settlement_failed: bool = False
    busy: bool = False

    @property
    def phase(self) -> SwapPhase:
        if self.busy:
            return SwapPhase.BUSY
        if self.settlement_failed:
            return SwapPhase.ERROR
        if self.from_asset is None and self.to_asset is None:
            return SwapPhase.UNINITIALIZED
        if self.validation_message:
            return SwapPhase.SELECTING
        return SwapPhase.READY


@dataclass(frozen=True)
class SwapReceipt:
    from_symbol: str
    to_symbol: str
    amount_in: Decimal
    amount_out: Decimal
    usd_value: Decimal
    settled_at: datetime


@dataclass
class SwapResult:
    """Structured result of a submit attempt."""

    status: str
    message: Optional[str] = None
    receipt: Optional[SwapReceipt] = None

    @property
    def ok(self) -> bool:
        return self.status == 'success'
