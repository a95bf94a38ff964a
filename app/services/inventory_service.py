from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from app.models import OrderType, Product
from app.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockDelta:
    product_id: int
    quantity: int


def signed_quantity(order_type: OrderType, quantity: int, *, reverse: bool = False) -> int:
    # Purchases add stock, sales remove it; deletion applies the inverse.
    delta = quantity if order_type == OrderType.PURCHASE else -quantity
    return -delta if reverse else delta


def order_deltas(order_type: OrderType, items: Iterable, *, reverse: bool = False) -> list[StockDelta]:
    return [
        StockDelta(product_id=item.product_id, quantity=signed_quantity(order_type, item.quantity, reverse=reverse))
        for item in items
    ]


def apply_stock_deltas(store: EntityStore, deltas: Iterable[StockDelta]) -> int:
    """Increment ``Product.quantity`` once per delta, in order.

    Each increment is its own single-row UPDATE. Nothing here checks the
    resulting level, so a sale racing another sale can drive stock negative.
    Returns the number of product rows touched.
    """
    touched = 0
    for delta in deltas:
        if delta.quantity == 0:
            continue
        updated = store.update_one(Product, Product.id == delta.product_id, increments={'quantity': delta.quantity})
        if updated == 0:
            logger.warning('Stock adjustment skipped, product %s no longer exists', delta.product_id)
        touched += updated
    return touched
