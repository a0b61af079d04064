"""
Swap session controller.

Holds one user's from/to selection and input amount and keeps the derived
quote and validation message consistent with them. Every operation replaces
the immutable ``SwapState`` through ``_commit``, which recomputes all derived
fields together, so the latest edit always wins.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from ...config import settings
from ..errors import UnknownAssetError
from .catalog import get_asset_by_symbol
from .models import EMPTY_QUOTE, Asset, SwapPhase, SwapReceipt, SwapResult, SwapState
from .quote import (
    calculate_swap_amount,
    exchange_rate,
    format_decimal,
    format_output_amount,
    format_rate,
    is_amount_text,
    parse_amount,
    quote_display,
)

SELECT_BOTH_MESSAGE = "Please select both tokens"
INVALID_AMOUNT_MESSAGE = "Please enter a valid amount"
SAME_TOKEN_MESSAGE = "Cannot swap the same token"
SWAP_FAILED_MESSAGE = "Swap failed. Please try again."
SWAP_IN_PROGRESS_MESSAGE = "A swap is already in progress"

SettlementHandler = Callable[[SwapState], Awaitable[None]]


async def simulate_settlement(state: SwapState) -> None:
    """Stand-in for trade execution: wait, then report success."""
    await asyncio.sleep(settings.settlement_delay_seconds)


def validate_swap(state: SwapState) -> str:
    """Return the first reason the state cannot be swapped, or ``""``."""
    from_asset, to_asset = state.from_asset, state.to_asset
    if from_asset is None or to_asset is None:
        return SELECT_BOTH_MESSAGE
    amount = state.amount
    if amount is None or amount <= 0:
        return INVALID_AMOUNT_MESSAGE
    if amount > from_asset.balance:
        return (
            f"Insufficient balance. Available: "
            f"{format_decimal(from_asset.balance)} {from_asset.symbol}"
        )
    if _same_symbol(from_asset, to_asset):
        return SAME_TOKEN_MESSAGE
    for asset in (to_asset, from_asset):
        if asset.price <= 0:
            return f"Unable to quote: {asset.symbol} has no price"
    return ""


def _same_symbol(left: Optional[Asset], right: Optional[Asset]) -> bool:
    return left is not None and right is not None and left.symbol.upper() == right.symbol.upper()


class SwapSession:
    def __init__(
        self,
        assets: Optional[Sequence[Asset]] = None,
        *,
        settle: Optional[SettlementHandler] = None,
        session_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self._settle = settle or simulate_settlement
        self._logger = logger or logging.getLogger(__name__)
        self._assets: List[Asset] = []
        self._state = self._recompute(SwapState())
        if assets:
            self.sync_assets(assets)

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> SwapState:
        return self._state

    @property
    def assets(self) -> List[Asset]:
        return list(self._assets)

    @property
    def from_asset(self) -> Optional[Asset]:
        return self._state.from_asset

    @property
    def to_asset(self) -> Optional[Asset]:
        return self._state.to_asset

    @property
    def input_amount(self) -> str:
        return self._state.input_amount

    @property
    def output_amount(self) -> str:
        return quote_display(self._state.quote)['output_amount']

    @property
    def usd_value(self) -> str:
        return quote_display(self._state.quote)['usd_value']

    @property
    def validation_message(self) -> str:
        return self._state.validation_message

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def phase(self) -> SwapPhase:
        return self._state.phase

    @property
    def exchange_rate(self) -> Optional[str]:
        if self.from_asset is None or self.to_asset is None:
            return None
        return format_rate(exchange_rate(self.from_asset, self.to_asset))

    def available_from_assets(self) -> List[Asset]:
        return [asset for asset in self._assets if not _same_symbol(asset, self.to_asset)]

    def available_to_assets(self) -> List[Asset]:
        return [asset for asset in self._assets if not _same_symbol(asset, self.from_asset)]

    def asset_by_symbol(self, symbol: str) -> Asset:
        asset = get_asset_by_symbol(self._assets, symbol)
        if asset is None:
            raise UnknownAssetError(symbol)
        return asset

    def snapshot(self) -> Dict[str, Any]:
        state = self._state
        return {
            'session_id': self.session_id,
            'phase': state.phase.value,
            'from_asset': state.from_asset.to_dict() if state.from_asset else None,
            'to_asset': state.to_asset.to_dict() if state.to_asset else None,
            'input_amount': state.input_amount,
            'output_amount': self.output_amount,
            'usd_value': self.usd_value,
            'exchange_rate': self.exchange_rate,
            'validation_message': state.validation_message,
            'busy': state.busy,
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def sync_assets(self, assets: Sequence[Asset]) -> None:
        """Adopt a rebuilt catalog: rebind selections by symbol, seed defaults.

        Freshly seeded defaults already carry "Please enter a valid amount";
        the message always reflects the current state.
        """
        self._assets = list(assets)
        from_asset = self._rebind(self._state.from_asset)
        to_asset = self._rebind(self._state.to_asset)

        if from_asset is None and to_asset is None and self._assets:
            from_asset = self._assets[0]
            to_asset = self._assets[1] if len(self._assets) > 1 else None

        self._commit(user_edit=False, from_asset=from_asset, to_asset=to_asset)

    def select_from(self, asset: Asset) -> None:
        to_asset = self._state.to_asset
        if _same_symbol(asset, to_asset):
            to_asset = None
        self._commit(from_asset=asset, to_asset=to_asset)

    def select_to(self, asset: Asset) -> None:
        from_asset = self._state.from_asset
        if _same_symbol(asset, from_asset):
            from_asset = None
        self._commit(from_asset=from_asset, to_asset=asset)

    def set_amount(self, text: str) -> bool:
        """Apply user input; text that is not a plain decimal is ignored."""
        if not is_amount_text(text):
            return False
        self._commit(input_amount=text)
        return True

    def flip(self) -> None:
        """Swap the two sides and clear the amount. No-op unless both are set.

        The old output is dropped rather than reused as input. The message is
        recomputed like after any edit, so it reads "Please enter a valid
        amount" instead of going blank.
        """
        state = self._state
        if state.from_asset is None or state.to_asset is None:
            return
        self._commit(from_asset=state.to_asset, to_asset=state.from_asset, input_amount="")

    def max_amount(self) -> None:
        from_asset = self._state.from_asset
        if from_asset is None:
            return
        self._commit(input_amount=format_decimal(from_asset.balance))

    def validate(self) -> str:
        return validate_swap(self._state)

    async def submit(self) -> SwapResult:
        state = self._state
        if state.busy:
            return SwapResult(status='busy', message=SWAP_IN_PROGRESS_MESSAGE)

        message = validate_swap(state)
        if message:
            self._commit()
            return SwapResult(status='invalid', message=message)

        self._commit(busy=True)
        snapshot = self._state
        self._logger.info(
            "Submitting swap %s %s -> %s (session %s)",
            snapshot.input_amount,
            snapshot.from_asset.symbol,
            snapshot.to_asset.symbol,
            self.session_id,
        )

        try:
            await self._settle(snapshot)
        except Exception:
            self._logger.exception("Swap settlement failed (session %s)", self.session_id)
            self._commit(user_edit=False, busy=False, settlement_failed=True)
            return SwapResult(status='failed', message=SWAP_FAILED_MESSAGE)
        finally:
            if self._state.busy:
                self._commit(user_edit=False, busy=False)

        receipt = _build_receipt(snapshot)
        success = (
            f"Successfully swapped {snapshot.input_amount} {receipt.from_symbol} "
            f"for {format_output_amount(receipt.amount_out)} {receipt.to_symbol}!"
        )
        self._logger.info(success)
        self._commit(input_amount="")
        return SwapResult(status='success', message=success, receipt=receipt)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rebind(self, asset: Optional[Asset]) -> Optional[Asset]:
        if asset is None:
            return None
        return get_asset_by_symbol(self._assets, asset.symbol)

    def _commit(self, *, user_edit: bool = True, **changes: Any) -> None:
        if user_edit:
            changes.setdefault('settlement_failed', False)
        self._state = self._recompute(replace(self._state, **changes))

    @staticmethod
    def _recompute(state: SwapState) -> SwapState:
        if state.from_asset is not None and state.to_asset is not None:
            quote = calculate_swap_amount(state.input_amount, state.from_asset, state.to_asset)
        else:
            quote = EMPTY_QUOTE
        derived = replace(state, amount=parse_amount(state.input_amount), quote=quote)
        message = SWAP_FAILED_MESSAGE if derived.settlement_failed else validate_swap(derived)
        return replace(derived, validation_message=message)


def _build_receipt(state: SwapState) -> SwapReceipt:
    quote = state.quote
    return SwapReceipt(
        from_symbol=state.from_asset.symbol,
        to_symbol=state.to_asset.symbol,
        amount_in=quote.amount or Decimal('0'),
        amount_out=quote.output_amount or Decimal('0'),
        usd_value=quote.usd_value,
        settled_at=datetime.now(timezone.utc),
    )


__all__ = [
    "SwapSession",
    "SettlementHandler",
    "simulate_settlement",
    "validate_swap",
    "SELECT_BOTH_MESSAGE",
    "INVALID_AMOUNT_MESSAGE",
    "SAME_TOKEN_MESSAGE",
    "SWAP_FAILED_MESSAGE",
]
