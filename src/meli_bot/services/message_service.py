"""Buyer messaging for paid orders."""

from typing import Optional

from meli_bot.api.client import MeliAPIClient
from meli_bot.core.logger import setup_logger
from meli_bot.core.token_manager import TokenManager
from meli_bot.models.order import Order, OutboundMessage
from meli_bot.services.message_rules import MessageRuleTable, default_rules

logger = setup_logger(__name__)


class MessageDispatcher:
    """Selects the message body for an order and posts it to the buyer."""

    def __init__(
        self,
        api_client: MeliAPIClient,
        token_manager: TokenManager,
        rules: Optional[MessageRuleTable] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            api_client: Client for the messaging API
            token_manager: Source of valid access tokens
            rules: Message rule table (defaults to the built-in table)
        """
        self.api_client = api_client
        self.token_manager = token_manager
        self.rules = rules or default_rules()

    def select_message(self, order: Order) -> str:
        """Message body for the order's first item."""
        return self.rules.select(order)

    async def send(self, order: Order, body: str) -> None:
        """
        Post ``body`` from the seller to the buyer in the order's pack.

        Raises:
            NotAuthorized, RefreshFailed: No usable credential
            DispatchFailed: Network error or non-2xx response
        """
        access_token = await self.token_manager.get_valid_access_token()
        message = OutboundMessage(
            seller_id=order.seller.id,
            buyer_id=order.buyer.id,
            text=body,
        )
        await self.api_client.send_message(order.effective_pack_id, message, access_token)
        logger.info(f"Message sent for order {order.id} (pack {order.effective_pack_id})")
