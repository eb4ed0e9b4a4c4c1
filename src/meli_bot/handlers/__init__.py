"""Handlers module - Notification intake and the order delivery pipeline."""

from meli_bot.handlers.webhook import (
    DeliveryOutcome,
    DeliveryPipeline,
    handle_webhook_event,
    parse_notification,
)

__all__ = ["DeliveryOutcome", "DeliveryPipeline", "handle_webhook_event", "parse_notification"]
