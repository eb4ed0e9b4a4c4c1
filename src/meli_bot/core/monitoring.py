"""
GlitchTip Error Monitoring Utilities

Helper functions for error tracking and context management.
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from meli_bot.core.logger import setup_logger

logger = setup_logger(__name__)


def init_monitoring(dsn: Optional[str], environment: str) -> bool:
    """
    Initialize Sentry-compatible error monitoring.

    Args:
        dsn: GlitchTip DSN (monitoring stays off when empty)
        environment: Deployment environment name

    Returns:
        True if monitoring was initialized
    """
    if not dsn:
        return False

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=None,  # All log levels as breadcrumbs
                    event_level=logging.ERROR,
                ),
            ],
            traces_sample_rate=0.1,
            profiles_sample_rate=0.0,
            send_default_pii=False,
        )
        logger.info("GlitchTip error monitoring initialized")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize GlitchTip: {e}")
        return False


def set_order_context(
    topic: Optional[str],
    resource: Optional[str] = None,
    order_id: Optional[int] = None,
    **extra_tags,
) -> None:
    """
    Set notification-specific context for error tracking.

    Args:
        topic: Notification topic
        resource: Resource path from the notification
        order_id: Marketplace order id, once known
        **extra_tags: Additional tags to add
    """
    try:
        sentry_sdk.set_tag("notification.topic", topic)
        if resource:
            sentry_sdk.set_tag("notification.resource", resource)
        if order_id:
            sentry_sdk.set_tag("order.id", order_id)

        for key, value in extra_tags.items():
            sentry_sdk.set_tag(key, value)

        context_data = {"topic": topic, "resource": resource, "order_id": order_id}
        context_data.update(extra_tags)
        sentry_sdk.set_context("notification", context_data)
    except Exception as e:
        logger.warning(f"Failed to set notification context: {e}")


def capture_exception(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture an exception and send to GlitchTip.

    Args:
        error: The exception to capture
        context: Additional context data
    """
    try:
        with sentry_sdk.push_scope() as scope:
            if context:
                scope.set_context("custom", context)
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.warning(f"Failed to capture exception in GlitchTip: {e}")
