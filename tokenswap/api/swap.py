from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..core.swap.manager import SwapSessionManager
from ..core.swap.quote import format_output_amount, format_usd_value
from .dependencies import get_session_manager

logger = structlog.stdlib.get_logger("swap")

router = APIRouter(prefix="/swap")


class SelectAssetRequest(BaseModel):
    symbol: str = Field(min_length=1, description="Symbol of a catalog asset, case-insensitive")


class SetAmountRequest(BaseModel):
    amount: str = Field(description="Raw amount text; anything but digits and one '.' is ignored")


class SwapSessionResponse(BaseModel):
    session_id: str
    phase: str
    from_asset: Optional[Dict[str, Any]] = None
    to_asset: Optional[Dict[str, Any]] = None
    input_amount: str
    output_amount: str
    usd_value: str
    exchange_rate: Optional[str] = None
    validation_message: str
    busy: bool
    available_from: List[str] = []
    available_to: List[str] = []
    accepted: Optional[bool] = None


class SwapSubmitResponse(BaseModel):
    status: str
    message: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = None
    session: SwapSessionResponse


def _session_response(session, *, accepted: Optional[bool] = None) -> SwapSessionResponse:
    return SwapSessionResponse(
        **session.snapshot(),
        available_from=[asset.symbol for asset in session.available_from_assets()],
        available_to=[asset.symbol for asset in session.available_to_assets()],
        accepted=accepted,
    )


@router.post("/sessions", status_code=201)
async def create_session(
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    return _session_response(manager.create())


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    return _session_response(manager.get(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> None:
    manager.close(session_id)


@router.post("/sessions/{session_id}/from")
async def select_from(
    session_id: str,
    req: SelectAssetRequest,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    session = manager.get(session_id)
    session.select_from(session.asset_by_symbol(req.symbol))
    return _session_response(session)


@router.post("/sessions/{session_id}/to")
async def select_to(
    session_id: str,
    req: SelectAssetRequest,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    session = manager.get(session_id)
    session.select_to(session.asset_by_symbol(req.symbol))
    return _session_response(session)


@router.post("/sessions/{session_id}/amount")
async def set_amount(
    session_id: str,
    req: SetAmountRequest,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    session = manager.get(session_id)
    accepted = session.set_amount(req.amount)
    return _session_response(session, accepted=accepted)


@router.post("/sessions/{session_id}/flip")
async def flip(
    session_id: str,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    session = manager.get(session_id)
    session.flip()
    return _session_response(session)


@router.post("/sessions/{session_id}/max")
async def max_amount(
    session_id: str,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSessionResponse:
    session = manager.get(session_id)
    session.max_amount()
    return _session_response(session)


@router.post("/sessions/{session_id}/submit")
async def submit(
    session_id: str,
    manager: SwapSessionManager = Depends(get_session_manager),
) -> SwapSubmitResponse:
    session = manager.get(session_id)
    result = await session.submit()
    logger.info(
        "swap_submitted",
        status=result.status,
        from_symbol=session.from_asset.symbol if session.from_asset else None,
        to_symbol=session.to_asset.symbol if session.to_asset else None,
        amount_in=result.receipt.amount_in if result.receipt else None,
        amount_out=result.receipt.amount_out if result.receipt else None,
    )

    receipt = None
    if result.receipt is not None:
        receipt = {
            "from_symbol": result.receipt.from_symbol,
            "to_symbol": result.receipt.to_symbol,
            "amount_in": str(result.receipt.amount_in),
            "amount_out": format_output_amount(result.receipt.amount_out),
            "usd_value": format_usd_value(result.receipt.usd_value),
            "settled_at": result.receipt.settled_at.isoformat(),
        }

    return SwapSubmitResponse(
        status=result.status,
        message=result.message,
        receipt=receipt,
        session=_session_response(session),
    )
