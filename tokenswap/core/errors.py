"""
Error types shared by the price feed and the swap sessions.

Fetch failures are exceptions; swap validation problems are not (they are
carried as ``validation_message`` strings on the session state).
"""

from typing import Any, Optional


class PriceFeedError(Exception):
    """Base price feed error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Any] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NetworkError(PriceFeedError):
    """The request timed out or never reached the feed."""

    def __init__(self, message: str = "Network request failed"):
        super().__init__(message)


class ApiError(PriceFeedError):
    """The feed answered with a non-success status or a malformed body."""
    pass


class SessionNotFoundError(KeyError):
    """No swap session is registered under the given id."""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Swap session {self.session_id} not found"


class UnknownAssetError(LookupError):
    """The symbol is not part of the tradable asset list."""

    def __init__(self, symbol: str):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"Unknown asset {self.symbol}"


__all__ = [
    "PriceFeedError",
    "NetworkError",
    "ApiError",
    "SessionNotFoundError",
    "UnknownAssetError",
]
