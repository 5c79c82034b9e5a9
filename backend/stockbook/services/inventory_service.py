# Overview: Service-layer operations for the inventory ledger; the only writer of Product.stock.

"""
Inventory Ledger Invariants (authoritative)

- Product.stock is a plain integer stored on the product record.
- Only this module changes stock on behalf of invoices and purchase orders
  (direct catalog edits in products_service aside).
- deduct / restore are pure field updates keyed by product id.
- No floor or ceiling: stock may go negative, restores may push it
  arbitrarily high.
- An unknown product id is ignored (logged as a warning, not raised).
- apply_stock_delta writes all affected products in one snapshot write, so
  a multi-line change is never half applied.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import Product


def get_stock(product_id: str) -> int | None:
    """Current stock, or None for an unknown product."""
    product = store.products.get(product_id)
    return product.stock if product else None


def apply_stock_delta(delta: dict[str, int]) -> list[Product]:
    """
    Apply signed quantity changes: positive returns stock, negative takes it.

    Returns the products that were changed.
    """
    changes = {pid: qty for pid, qty in delta.items() if qty}
    if not changes:
        return []

    changed: list[Product] = []
    for product in store.products.filter(lambda p: p.id in changes):
        product.stock += changes[product.id]
        changed.append(product)

    missing = set(changes) - {p.id for p in changed}
    for product_id in sorted(missing):
        current_app.logger.warning(
            "Stock change of %+d ignored: product %s not found", changes[product_id], product_id
        )

    store.products.update_many(changed)
    return changed


def deduct(product_id: str, quantity: int) -> Product | None:
    """Take quantity out of stock. Unknown product -> None."""
    changed = apply_stock_delta({product_id: -quantity})
    return changed[0] if changed else None


def restore(product_id: str, quantity: int) -> Product | None:
    """Put quantity back into stock. Unknown product -> None."""
    changed = apply_stock_delta({product_id: quantity})
    return changed[0] if changed else None


def receive_by_name(quantities: dict[str, int]) -> list[Product]:
    """
    Increase stock for products matched by exact name.

    Every product carrying a matching name is increased. Names matching no
    product are dropped (logged).
    """
    by_name: dict[str, int] = {}
    for name, qty in quantities.items():
        by_name[name] = by_name.get(name, 0) + qty

    delta: dict[str, int] = {}
    matched_names: set[str] = set()
    for product in store.products.all():
        if product.name in by_name:
            delta[product.id] = delta.get(product.id, 0) + by_name[product.name]
            matched_names.add(product.name)

    for name in sorted(set(by_name) - matched_names):
        current_app.logger.warning("Received %d x %r dropped: no product with that name", by_name[name], name)

    return apply_stock_delta(delta)
