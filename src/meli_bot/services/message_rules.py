"""
Message selection rules.

Buyer message bodies are chosen by the catalog id of the first purchased
item. Rules are evaluated in order, first match wins, and the table ends with
exactly one catch-all rule.
"""

import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from meli_bot.models.order import Order, OrderItem

# Renders a message body for an order and its first line (None if the order has no lines)
Template = Callable[[Order, Optional[OrderItem]], str]

SIGNATURE = "Att, equipe Refrigerista."

GENERIC_DOWNLOAD_LINK = "https://seusistema.com/download"

# Catalog listing of Refrigerista Pro
REFRIGERISTA_PRO_CATALOG_ID = "MLBU1425061106"

REFRIGERISTA_PRO_LINKS = (
    "https://seusistema.com/download/refrigerista-pro/windows",
    "https://seusistema.com/download/refrigerista-pro/android",
    "https://seusistema.com/download/refrigerista-pro/manual.pdf",
)


def generate_license_fragment() -> str:
    """Six-digit license fragment for the message body. Not unique, not a secret."""
    return f"{random.randrange(1_000_000):06d}"


def refrigerista_pro_template(order: Order, item: Optional[OrderItem]) -> str:
    """Dedicated delivery message with the fixed download links."""
    windows, android, manual = REFRIGERISTA_PRO_LINKS
    return (
        "Olá! Obrigado por adquirir o Refrigerista Pro 🚀\n"
        "\n"
        f"Windows: {windows}\n"
        f"Android: {android}\n"
        f"Manual: {manual}\n"
        "\n"
        f"{SIGNATURE}"
    )


def generic_template(order: Order, item: Optional[OrderItem]) -> str:
    """Thank-you message naming the purchased item."""
    title = item.item.title if item and item.item.title else "seu produto"
    return (
        f"Olá! Obrigado por adquirir {title} 🚀\n"
        "\n"
        f"Link: {GENERIC_DOWNLOAD_LINK}\n"
        f"Licença: {generate_license_fragment()}\n"
        "\n"
        f"{SIGNATURE}"
    )


@dataclass(frozen=True)
class MessageRule:
    """Maps a catalog id to a template. ``catalog_id=None`` is the catch-all."""

    template: Template
    catalog_id: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.catalog_id is None

    def matches(self, catalog_id: Optional[str]) -> bool:
        return self.is_default or self.catalog_id == catalog_id


class MessageRuleTable:
    """Ordered, first-match-wins rule table ending in one catch-all rule."""

    def __init__(self, rules: Sequence[MessageRule]):
        """
        Validate and store the rules.

        Raises:
            ValueError: Not exactly one catch-all rule, or it is not last
        """
        rules = list(rules)
        defaults = [index for index, rule in enumerate(rules) if rule.is_default]

        if len(defaults) != 1:
            raise ValueError(
                f"Message rules need exactly one catch-all rule, got {len(defaults)}"
            )
        if defaults[0] != len(rules) - 1:
            raise ValueError("The catch-all message rule must be the last rule")

        self.rules: List[MessageRule] = rules

    def select(self, order: Order) -> str:
        """Render the body of the first rule matching the first item's catalog id."""
        item = order.first_item
        catalog_id = item.item.id if item else None

        for rule in self.rules:
            if rule.matches(catalog_id):
                return rule.template(order, item)

        # Unreachable: the last rule always matches
        raise AssertionError("No message rule matched")


def default_rules() -> MessageRuleTable:
    """Rule table used by the running service."""
    return MessageRuleTable(
        [
            MessageRule(refrigerista_pro_template, catalog_id=REFRIGERISTA_PRO_CATALOG_ID),
            MessageRule(generic_template),
        ]
    )
