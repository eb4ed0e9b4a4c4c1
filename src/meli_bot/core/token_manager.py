"""Token management for Mercado Livre API authentication.

Owns the single stored credential: expiry math, proactive refresh and the
one save path every credential write goes through.
"""

import asyncio
import time
from typing import Callable, Optional

from meli_bot.api.client import MeliAPIClient
from meli_bot.config.constants import CREDENTIAL_KEY, DEFAULT_REFRESH_SKEW_MINUTES
from meli_bot.core.errors import NotAuthorized, RefreshFailed
from meli_bot.core.logger import setup_logger
from meli_bot.db.repository import CredentialRepository
from meli_bot.models.credential import Credential, TokenResponse

logger = setup_logger(__name__)

DEFAULT_REFRESH_SKEW_MS = DEFAULT_REFRESH_SKEW_MINUTES * 60 * 1000


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def is_token_expired(
    issued_at_ms: int,
    expires_in: int,
    current_ms: int,
    refresh_skew_ms: int = DEFAULT_REFRESH_SKEW_MS,
) -> bool:
    """Check if a token is due for renewal (boundary inclusive)."""
    return current_ms >= issued_at_ms + expires_in * 1000 - refresh_skew_ms


class TokenManager:
    """
    Credential lifecycle manager.

    Refreshes are serialized with a per-process lock. A caller that waited on
    the lock re-reads the store and reuses the credential saved by the
    previous holder instead of refreshing a second time.
    """

    def __init__(
        self,
        repository: CredentialRepository,
        api_client: MeliAPIClient,
        refresh_skew_ms: int = DEFAULT_REFRESH_SKEW_MS,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize the manager.

        Args:
            repository: Store holding the credential record
            api_client: Client for the token endpoint
            refresh_skew_ms: Renew this long before literal expiry
            clock: Returns the current epoch time in milliseconds
        """
        self.repository = repository
        self.api_client = api_client
        self.refresh_skew_ms = refresh_skew_ms
        self.clock = clock
        self._refresh_lock = asyncio.Lock()

    def is_expired(self, credential: Credential, current_ms: Optional[int] = None) -> bool:
        """Check a stored credential against the configured refresh skew."""
        if current_ms is None:
            current_ms = self.clock()
        return is_token_expired(
            credential.issued_at_ms,
            credential.expires_in,
            current_ms,
            self.refresh_skew_ms,
        )

    async def load_credential(self) -> Optional[Credential]:
        """Read the stored credential, or None if not yet authorized."""
        return await self.repository.get(CREDENTIAL_KEY)

    async def save_tokens(self, tokens: TokenResponse) -> Credential:
        """
        Persist a token response as the new credential.

        The issue time is taken from the local clock. The previous record is
        replaced in full.
        """
        credential = Credential(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
            issued_at_ms=self.clock(),
        )
        await self.repository.upsert(CREDENTIAL_KEY, credential)
        logger.info(
            f"Tokens saved (expires_in={credential.expires_in}s, "
            f"user_id={tokens.user_id})"
        )
        return credential

    async def get_valid_access_token(self) -> str:
        """
        Return an access token that is not due for renewal.

        Raises:
            NotAuthorized: No credential stored yet
            RefreshFailed: A needed refresh call failed
        """
        credential = await self.load_credential()
        if credential is None:
            raise NotAuthorized("No credential stored. Authorize at /auth")

        if not self.is_expired(credential):
            return credential.access_token

        async with self._refresh_lock:
            # Another task may have refreshed while we waited
            credential = await self.load_credential()
            if credential is None:
                raise NotAuthorized("No credential stored. Authorize at /auth")
            if not self.is_expired(credential):
                logger.debug("Using credential refreshed by a concurrent caller")
                return credential.access_token

            return (await self._refresh(credential)).access_token

    async def _refresh(self, credential: Credential) -> Credential:
        """Run the refresh-token grant and save the result."""
        logger.info("Token expired, refreshing...")
        try:
            tokens = await self.api_client.refresh_token(credential.refresh_token)
        except RefreshFailed as e:
            logger.error(f"Token refresh failed, stored credential kept: {e.detail or e}")
            raise

        refreshed = await self.save_tokens(tokens)
        logger.info("Access token refreshed successfully")
        return refreshed
