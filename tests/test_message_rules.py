import pytest

from conftest import order_body
from meli_bot.models.order import Order
from meli_bot.services.message_rules import (
    REFRIGERISTA_PRO_CATALOG_ID,
    REFRIGERISTA_PRO_LINKS,
    MessageRule,
    MessageRuleTable,
    default_rules,
    generic_template,
)


def make_order(**kwargs) -> Order:
    return Order.model_validate(order_body(**kwargs))


def test_dedicated_catalog_id_gets_download_links() -> None:
    body = default_rules().select(make_order(catalog_id=REFRIGERISTA_PRO_CATALOG_ID))

    assert REFRIGERISTA_PRO_CATALOG_ID == "MLBU1425061106"
    for link in REFRIGERISTA_PRO_LINKS:
        assert link in body


def test_other_catalog_id_gets_generic_message_with_title() -> None:
    body = default_rules().select(make_order(catalog_id="MLB3344556677", title="Curso de Refrigeração"))

    assert "Curso de Refrigeração" in body
    assert "Licença:" in body
    for link in REFRIGERISTA_PRO_LINKS:
        assert link not in body


def test_order_without_items_falls_back_to_default() -> None:
    order = make_order()
    order.order_items = []

    body = default_rules().select(order)

    assert "seu produto" in body


def test_first_matching_rule_wins() -> None:
    table = MessageRuleTable(
        [
            MessageRule(lambda order, item: "first", catalog_id="MLB1"),
            MessageRule(lambda order, item: "second", catalog_id="MLB1"),
            MessageRule(lambda order, item: "default"),
        ]
    )

    assert table.select(make_order(catalog_id="MLB1")) == "first"
    assert table.select(make_order(catalog_id="MLB2")) == "default"


def test_templates_receive_order_and_first_item() -> None:
    seen = []

    def capture(order, item):
        seen.append((order.id, item.item.id))
        return "ok"

    MessageRuleTable([MessageRule(capture)]).select(make_order(order_id=77, catalog_id="MLB9"))

    assert seen == [(77, "MLB9")]


@pytest.mark.parametrize(
    "rules",
    [
        [],
        [MessageRule(generic_template, catalog_id="MLB1")],
        [MessageRule(generic_template), MessageRule(generic_template)],
        [MessageRule(generic_template), MessageRule(generic_template, catalog_id="MLB1")],
    ],
    ids=["empty", "no-default", "two-defaults", "default-not-last"],
)
def test_invalid_rule_tables_are_rejected(rules) -> None:
    with pytest.raises(ValueError):
        MessageRuleTable(rules)
