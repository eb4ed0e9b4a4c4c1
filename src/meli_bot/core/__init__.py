"""Core module - Logging, errors, credential lifecycle and monitoring."""

from meli_bot.core.errors import (
    AuthExchangeFailed,
    DispatchFailed,
    MeliBotError,
    NotAuthorized,
    RefreshFailed,
    UpstreamFetchFailed,
)
from meli_bot.core.logger import setup_logger

__all__ = [
    "setup_logger",
    "MeliBotError",
    "NotAuthorized",
    "RefreshFailed",
    "AuthExchangeFailed",
    "UpstreamFetchFailed",
    "DispatchFailed",
]
