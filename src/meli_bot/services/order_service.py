"""Order service for resolving notification resources into orders."""

from pydantic import ValidationError

from meli_bot.api.client import MeliAPIClient
from meli_bot.config.constants import PAID_STATUS
from meli_bot.core.errors import UpstreamFetchFailed
from meli_bot.core.logger import setup_logger
from meli_bot.core.token_manager import TokenManager
from meli_bot.models.order import Order

logger = setup_logger(__name__)


class OrderService:
    """Fetches order data from the Mercado Livre API."""

    def __init__(self, api_client: MeliAPIClient, token_manager: TokenManager):
        """Initialize service with API client and credential manager."""
        self.api_client = api_client
        self.token_manager = token_manager

    async def resolve(self, resource: str) -> Order:
        """
        Fetch the full order a notification refers to.

        Args:
            resource: Resource path from the notification, e.g. "/orders/2000001"

        Returns:
            Parsed order

        Raises:
            NotAuthorized, RefreshFailed: No usable credential
            UpstreamFetchFailed: Network error, non-2xx or unexpected body
        """
        # Only API-relative paths, so the bearer token never leaves the API host
        if not resource.startswith("/") or resource.startswith("//"):
            raise UpstreamFetchFailed(f"Unexpected resource reference: {resource!r}")

        access_token = await self.token_manager.get_valid_access_token()
        data = await self.api_client.get_resource(resource, access_token)

        try:
            order = Order.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected order payload for {resource}: {data}")
            raise UpstreamFetchFailed(f"Unexpected order payload for {resource}", data) from e

        logger.info(
            f"Got order {order.id} (status={order.status}) "
            f"with {len(order.order_items)} items"
        )
        return order

    @staticmethod
    def is_paid(order: Order) -> bool:
        """Only paid orders receive a delivery message."""
        return order.status == PAID_STATUS
