"""Mercado Livre API client."""

from typing import Any, Optional, Type
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from meli_bot.config.constants import GRANT_AUTHORIZATION_CODE, GRANT_REFRESH_TOKEN
from meli_bot.core.errors import (
    AuthExchangeFailed,
    DispatchFailed,
    MeliBotError,
    RefreshFailed,
    UpstreamFetchFailed,
)
from meli_bot.core.logger import setup_logger
from meli_bot.models.credential import TokenResponse
from meli_bot.models.order import OutboundMessage

from .endpoints import AUTHORIZATION, OAUTH_TOKEN, PACK_MESSAGES

logger = setup_logger(__name__)


def _response_body(response: httpx.Response) -> Any:
    """Response payload, parsed when it is JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


class MeliAPIClient:
    """Async HTTP client for the Mercado Livre OAuth, orders and messaging APIs."""

    def __init__(
        self,
        app_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: Optional[str],
        api_base_url: str = "https://api.mercadolibre.com",
        auth_base_url: str = "https://auth.mercadolivre.com.br",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize API client with application credentials."""
        self.app_id = app_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.api_base_url = api_base_url
        self.auth_base_url = auth_base_url
        self.client = httpx.AsyncClient(
            base_url=api_base_url,
            timeout=timeout,
            transport=transport,
        )

    def authorization_url(self) -> str:
        """Build the authorization page URL the seller is redirected to."""
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.app_id or "",
                "redirect_uri": self.redirect_uri or "",
            }
        )
        return f"{self.auth_base_url}{AUTHORIZATION}?{query}"

    async def _request_token(
        self,
        form: dict,
        error_cls: Type[MeliBotError],
    ) -> TokenResponse:
        """
        POST a form-encoded grant to the token endpoint.

        Args:
            form: Grant-specific form fields
            error_cls: Error raised on any failure of this call

        Returns:
            Parsed token response
        """
        data = {
            "client_id": self.app_id or "",
            "client_secret": self.client_secret or "",
            **form,
        }
        grant_type = form.get("grant_type")

        try:
            response = await self.client.post(
                OAUTH_TOKEN,
                data=data,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _response_body(e.response)
            logger.error(
                f"Token endpoint rejected {grant_type} grant "
                f"({e.response.status_code}): {detail}"
            )
            raise error_cls(
                f"Token endpoint returned {e.response.status_code}", detail
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling token endpoint ({grant_type})")
            raise error_cls("Timeout calling token endpoint") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling token endpoint ({grant_type}): {e}")
            raise error_cls(f"HTTP error calling token endpoint: {e}") from e

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed token response ({grant_type}): {response.text}")
            raise error_cls("Malformed token response", response.text) from e

    async def exchange_code(self, code: str) -> TokenResponse:
        """Exchange a single-use authorization code for tokens."""
        return await self._request_token(
            {
                "grant_type": GRANT_AUTHORIZATION_CODE,
                "code": code,
                "redirect_uri": self.redirect_uri or "",
            },
            AuthExchangeFailed,
        )

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Obtain a new token pair with the refresh-token grant."""
        return await self._request_token(
            {
                "grant_type": GRANT_REFRESH_TOKEN,
                "refresh_token": refresh_token,
            },
            RefreshFailed,
        )

    async def get_resource(self, resource: str, access_token: str) -> dict:
        """
        Fetch a resource referenced by a notification.

        Args:
            resource: API path such as "/orders/2000001"
            access_token: Valid bearer token

        Returns:
            Parsed JSON response
        """
        try:
            logger.info(f"Fetching {resource}")
            response = await self.client.get(
                resource,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            detail = _response_body(e.response)
            logger.error(f"HTTP error fetching {resource}: {e.response.status_code} - {detail}")
            raise UpstreamFetchFailed(
                f"Fetching {resource} returned {e.response.status_code}", detail
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Timeout fetching {resource}")
            raise UpstreamFetchFailed(f"Timeout fetching {resource}") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching {resource}: {e}")
            raise UpstreamFetchFailed(f"HTTP error fetching {resource}: {e}") from e
        except ValueError as e:
            logger.error(f"Non-JSON body fetching {resource}: {response.text}")
            raise UpstreamFetchFailed(f"Non-JSON body for {resource}", response.text) from e

    async def send_message(
        self,
        pack_id: int,
        message: OutboundMessage,
        access_token: str,
    ) -> dict:
        """
        Post a seller-to-buyer message in a pack conversation.

        Args:
            pack_id: Pack (or order id when the order has no pack)
            message: Sender, recipient and text
            access_token: Valid bearer token

        Returns:
            Parsed JSON response from the messaging API
        """
        path = PACK_MESSAGES.format(pack_id=pack_id, seller_id=message.seller_id)

        try:
            logger.info(f"Posting message to pack {pack_id}")
            response = await self.client.post(
                path,
                params={"tag": "post_sale"},
                json=message.to_payload(),
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            detail = _response_body(e.response)
            logger.error(f"HTTP error posting message to pack {pack_id}: {e.response.status_code} - {detail}")
            raise DispatchFailed(
                f"Messaging API returned {e.response.status_code} for pack {pack_id}", detail
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Timeout posting message to pack {pack_id}")
            raise DispatchFailed(f"Timeout posting message to pack {pack_id}") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error posting message to pack {pack_id}: {e}")
            raise DispatchFailed(f"HTTP error posting message to pack {pack_id}: {e}") from e

        return _response_body(response) if response.content else {}

    async def close(self) -> None:
        """Close HTTP client connection."""
        await self.client.aclose()
