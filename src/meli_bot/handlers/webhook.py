"""Webhook event handling.

Intake parses and filters notifications; qualifying order notifications are
handed to the delivery pipeline as an independent asyncio task.
"""

import asyncio
import json
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from meli_bot.config.constants import ORDER_TOPIC
from meli_bot.core.errors import MeliBotError
from meli_bot.core.logger import setup_logger
from meli_bot.core.monitoring import capture_exception, set_order_context
from meli_bot.db.repository import DeliveryLedgerRepository
from meli_bot.models.notification import Notification
from meli_bot.services.message_service import MessageDispatcher
from meli_bot.services.order_service import OrderService

logger = setup_logger(__name__)


class DeliveryOutcome(str, Enum):
    """How the pipeline ended for one notification."""

    SENT = "sent"
    NOT_PAID = "not_paid"
    ALREADY_DELIVERED = "already_delivered"
    FAILED = "failed"


class DeliveryPipeline:
    """Resolve -> filter paid -> select message -> send, for one order notification.

    Business Rules:
    - Only paid orders receive a message
    - An order already in the delivery ledger is not messaged again
    - Failures are logged and dropped; there is no retry
    """

    def __init__(
        self,
        order_service: OrderService,
        dispatcher: MessageDispatcher,
        ledger: Optional[DeliveryLedgerRepository] = None,
    ):
        """
        Initialize pipeline.

        Args:
            order_service: Resolves notification resources into orders
            dispatcher: Selects and posts buyer messages
            ledger: Delivery ledger (None disables duplicate detection)
        """
        self.order_service = order_service
        self.dispatcher = dispatcher
        self.ledger = ledger

    async def process_order_notification(self, resource: str) -> DeliveryOutcome:
        """
        Run the pipeline for one order resource.

        Never raises; every failure is contained and logged here.
        """
        set_order_context(topic=ORDER_TOPIC, resource=resource)

        try:
            order = await self.order_service.resolve(resource)

            if not self.order_service.is_paid(order):
                logger.info(f"Order {order.id} is {order.status}, not paid. Skipping.")
                return DeliveryOutcome.NOT_PAID

            logger.info(f"Paid order: {order.id}")
            set_order_context(topic=ORDER_TOPIC, resource=resource, order_id=order.id)

            if self.ledger and await self.ledger.has_delivered(order.id):
                logger.info(f"Order {order.id} was already messaged. Skipping.")
                return DeliveryOutcome.ALREADY_DELIVERED

            body = self.dispatcher.select_message(order)
            await self.dispatcher.send(order, body)

            if self.ledger:
                first_item = order.first_item
                await self.ledger.record_delivery(
                    order_id=order.id,
                    pack_id=order.effective_pack_id,
                    catalog_id=first_item.item.id if first_item else None,
                )

            return DeliveryOutcome.SENT

        except MeliBotError as e:
            logger.error(
                f"{type(e).__name__} processing {resource}: {e}",
                extra={"resource": resource, "upstream": e.detail},
            )
            return DeliveryOutcome.FAILED

        except Exception as e:
            logger.error(f"Unexpected error processing {resource}: {e}", exc_info=True)
            capture_exception(e, {"resource": resource})
            return DeliveryOutcome.FAILED


def parse_notification(raw_body: bytes) -> Optional[Notification]:
    """
    Parse a notification body.

    Returns:
        The notification, or None when the body is not a valid notification
    """
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Dropping notification with unreadable body: {e}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"Dropping notification that is not an object: {payload!r}")
        return None

    try:
        return Notification.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Dropping malformed notification {payload}: {e.errors()}")
        return None


def handle_webhook_event(
    raw_body: bytes,
    pipeline: DeliveryPipeline,
) -> Optional[asyncio.Task]:
    """
    Handle an incoming notification without waiting on downstream work.

    Args:
        raw_body: Raw request body
        pipeline: Delivery pipeline for order notifications

    Returns:
        The spawned pipeline task, or None if the notification was dropped
    """
    notification = parse_notification(raw_body)
    if notification is None:
        return None

    logger.info(
        f"Notification received: topic={notification.topic}, "
        f"resource={notification.resource}, attempts={notification.attempts}"
    )

    if notification.topic != ORDER_TOPIC:
        logger.info(f"Ignoring notification topic {notification.topic}")
        return None

    if not notification.resource:
        logger.warning("Dropping order notification without resource")
        return None

    return asyncio.create_task(
        pipeline.process_order_notification(notification.resource),
        name=f"order-notification:{notification.resource}",
    )
