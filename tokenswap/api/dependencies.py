from fastapi import Request

from ..core.swap.manager import SwapSessionManager
from ..services.price_feed import PriceFeed


def get_price_feed(request: Request) -> PriceFeed:
    return request.app.state.price_feed


def get_session_manager(request: Request) -> SwapSessionManager:
    return request.app.state.session_manager
