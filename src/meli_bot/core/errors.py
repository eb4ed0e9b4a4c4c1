"""Error kinds raised by the credential manager and the order pipeline."""

from typing import Any, Optional


class MeliBotError(Exception):
    """Base error. ``detail`` carries the upstream payload when there is one."""

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail is None:
            return self.message
        return f"{self.message}: {self.detail}"


class NotAuthorized(MeliBotError):
    """No credential stored yet. Resolved by visiting /auth."""


class RefreshFailed(MeliBotError):
    """The token endpoint rejected or failed the refresh-token grant."""


class AuthExchangeFailed(MeliBotError):
    """The authorization code could not be exchanged. The user must restart the flow."""


class UpstreamFetchFailed(MeliBotError):
    """The order could not be fetched from the marketplace."""


class DispatchFailed(MeliBotError):
    """The buyer message could not be posted."""
