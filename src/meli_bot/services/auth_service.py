"""One-time OAuth authorization flow that bootstraps the stored credential."""

from typing import Optional

from meli_bot.api.client import MeliAPIClient
from meli_bot.core.errors import AuthExchangeFailed
from meli_bot.core.logger import setup_logger
from meli_bot.core.token_manager import TokenManager
from meli_bot.models.credential import Credential

logger = setup_logger(__name__)


class AuthorizationFlow:
    """Authorize redirect plus callback code exchange."""

    def __init__(self, api_client: MeliAPIClient, token_manager: TokenManager):
        """Initialize flow with API client and the credential manager."""
        self.api_client = api_client
        self.token_manager = token_manager

    def build_authorization_redirect(self) -> str:
        """URL of the marketplace authorization page for this application."""
        return self.api_client.authorization_url()

    async def handle_callback(self, code: Optional[str]) -> Credential:
        """
        Exchange the authorization code and persist the first credential.

        The code is single-use, so there is no retry. On failure the stored
        credential is left as it was.

        Raises:
            AuthExchangeFailed: Missing code or any upstream error
        """
        if not code:
            raise AuthExchangeFailed("Missing authorization code")

        logger.info("Exchanging authorization code")
        tokens = await self.api_client.exchange_code(code)
        credential = await self.token_manager.save_tokens(tokens)
        logger.info("Authorization completed, credential stored")
        return credential
