"""
Purchase Order Service

WHY: Approving a purchase order is how received goods enter stock.

LIFECYCLE:
1. Create PO (Pending)
2. Approve (Pending -> Approved): every line increases stock of the
   products carrying its name; runs at most once per PO
3. Reject (Pending -> Rejected): no stock effect

PO lines reference products by *name*, not id. A line naming no product is
dropped (logged); a name shared by several products increases all of them.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import POStatus, PurchaseOrder, PurchaseOrderLine
from ..storage import new_record_id
from ..time_utils import today
from ..validation import (
    NotFoundError,
    ValidationError,
    coerce_cents,
    coerce_date,
    coerce_int,
    coerce_text,
)
from . import inventory_service


def _build_lines(raw_items) -> list[PurchaseOrderLine]:
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("At least one item is required")

    lines: list[PurchaseOrderLine] = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, PurchaseOrderLine):
            raw = raw.to_dict()
        if not isinstance(raw, dict):
            raise ValidationError(f"Item {index} must be an object", details={"index": index})
        lines.append(PurchaseOrderLine(
            product_name=coerce_text(raw.get("product_name"), f"items[{index}].product_name"),
            quantity=coerce_int(raw.get("quantity"), f"items[{index}].quantity", minimum=1),
            cost_cents=coerce_cents(raw.get("cost_cents", 0), f"items[{index}].cost_cents"),
        ))
    return lines


def create_purchase_order(*, supplier: str, items: list, date: str | None = None) -> PurchaseOrder:
    """
    Raises:
        ValidationError: missing supplier, no items, malformed line
    """
    supplier = coerce_text(supplier, "supplier")
    lines = _build_lines(items)

    po = PurchaseOrder(
        id=new_record_id(),
        supplier=supplier,
        date=coerce_date(date, "date") if date else today().isoformat(),
        status=POStatus.PENDING,
        items=lines,
        total_cost_cents=sum(line.quantity * line.cost_cents for line in lines),
    )
    store.purchase_orders.add(po)
    current_app.logger.info("Created purchase order %s from %s (%d lines)", po.id, po.supplier, len(lines))
    return po


def get_purchase_order(po_id: str) -> PurchaseOrder:
    po = store.purchase_orders.get(po_id)
    if po is None:
        raise NotFoundError(f"Purchase order {po_id} not found")
    return po


def approve_purchase_order(po_id: str) -> PurchaseOrder:
    """
    Receive a Pending PO into stock and mark it Approved.

    Approving an already approved (or rejected) PO changes nothing.
    """
    po = get_purchase_order(po_id)
    if po.status != POStatus.PENDING:
        current_app.logger.info("Purchase order %s is %s; approve ignored", po.id, po.status)
        return po

    quantities: dict[str, int] = {}
    for line in po.items:
        quantities[line.product_name] = quantities.get(line.product_name, 0) + line.quantity

    po.status = POStatus.APPROVED
    store.purchase_orders.update(po)
    received = inventory_service.receive_by_name(quantities)

    current_app.logger.info(
        "Approved purchase order %s: %d product(s) restocked", po.id, len(received)
    )
    return po


def reject_purchase_order(po_id: str) -> PurchaseOrder:
    """Pending -> Rejected. Any other status is left alone."""
    po = get_purchase_order(po_id)
    if po.status != POStatus.PENDING:
        return po
    po.status = POStatus.REJECTED
    store.purchase_orders.update(po)
    current_app.logger.info("Rejected purchase order %s", po.id)
    return po


def list_purchase_orders(status: str | None = None) -> list[PurchaseOrder]:
    if status is not None and status not in POStatus.ALL:
        raise ValidationError(f"status must be one of: {', '.join(POStatus.ALL)}")
    orders = store.purchase_orders.filter(lambda po: status is None or po.status == status)
    orders.sort(key=lambda po: po.date, reverse=True)
    return orders
