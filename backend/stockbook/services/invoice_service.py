"""
Invoice Lifecycle Service - stock-consistent create / update / delete

WHY: An invoice only holds stock while it is Paid. Every save therefore
works out how much stock the previous version held, how much the new
version needs, and applies the difference in one step.

LIFECYCLE:
- Draft / Cancelled: hold no stock
- Paid: holds quantity of every line

TRANSITIONS (old -> new):
- Paid -> Paid:   give back old lines, take new lines (net delta)
- Paid -> other:  give back old lines
- other -> Paid:  take new lines
- other -> other: no stock effect
- delete Paid:    give back its lines

VALIDATION (runs before anything is written):
- customer name and at least one line are required
- each line needs a product id, a quantity >= 1 and a price >= 0
- saving as Paid checks every product against its *available* stock:
  live stock plus whatever the previously saved Paid version of this same
  invoice already holds. Keeping or lowering a reservation always passes;
  raising it is allowed up to the real free stock.

The invoice total is always recomputed from its lines; a caller-supplied
total is never used.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import store
from ..models import Invoice, InvoiceItem, InvoiceStatus, Product
from ..storage import new_record_id
from ..time_utils import today, default_due_date, parse_iso_date
from ..validation import (
    NotFoundError,
    ValidationError,
    coerce_cents,
    coerce_date,
    coerce_int,
    coerce_text,
)
from . import inventory_service


REASON_INSUFFICIENT_STOCK = "insufficient_stock"
REASON_PRODUCT_NOT_FOUND = "product_not_found"


@dataclass
class LineShortage:
    """A line that cannot be saved as Paid, with the most it could ask for."""
    index: int
    product_id: str
    product_name: str
    requested_quantity: int
    max_available: int
    reason: str = REASON_INSUFFICIENT_STOCK

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "requested_quantity": self.requested_quantity,
            "max_available": self.max_available,
            "reason": self.reason,
        }


class InsufficientStockError(Exception):
    """Raised when a Paid invoice asks for more than the available stock."""

    def __init__(self, shortages: list[LineShortage]):
        super().__init__("Insufficient stock for one or more lines")
        self.shortages = shortages
        self.details = {"lines": [s.to_dict() for s in shortages]}


# =============================================================================
# PURE HELPERS
# =============================================================================

def recompute_total(items: list[InvoiceItem]) -> int:
    """Invoice total in cents: sum of quantity * unit price."""
    return sum(item.quantity * item.price_cents for item in items)


def reserved_quantities(invoice: Invoice | None) -> dict[str, int]:
    """Stock held by an invoice, per product. Only Paid invoices hold stock."""
    held: dict[str, int] = {}
    if invoice is None or invoice.status != InvoiceStatus.PAID:
        return held
    for item in invoice.items:
        held[item.product_id] = held.get(item.product_id, 0) + item.quantity
    return held


def compute_stock_delta(old: Invoice | None, new: Invoice | None) -> dict[str, int]:
    """
    Signed stock change per product for replacing old with new.

    Positive values return stock, negative values take it. Either side may
    be None (create / delete). Products with a zero net change are omitted.
    """
    delta = dict(reserved_quantities(old))
    for product_id, qty in reserved_quantities(new).items():
        delta[product_id] = delta.get(product_id, 0) - qty
    return {pid: qty for pid, qty in delta.items() if qty != 0}


def find_shortages(
    items: list[InvoiceItem],
    products: dict[str, Product],
    previous: Invoice | None = None,
) -> list[LineShortage]:
    """
    Check lines against available stock (live stock + what previous holds).

    Lines of the same product are checked together; each failing line
    reports the most it could ask for given the other lines of that product.
    """
    credit = reserved_quantities(previous)

    requested: dict[str, int] = {}
    for item in items:
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

    shortages: list[LineShortage] = []
    for index, item in enumerate(items):
        product = products.get(item.product_id)
        if product is None:
            shortages.append(LineShortage(
                index=index,
                product_id=item.product_id,
                product_name=item.product_name,
                requested_quantity=item.quantity,
                max_available=0,
                reason=REASON_PRODUCT_NOT_FOUND,
            ))
            continue

        available = product.stock + credit.get(product.id, 0)
        total_requested = requested[product.id]
        if total_requested > available:
            other_lines = total_requested - item.quantity
            shortages.append(LineShortage(
                index=index,
                product_id=product.id,
                product_name=item.product_name or product.name,
                requested_quantity=item.quantity,
                max_available=max(available - other_lines, 0),
            ))

    return shortages


# =============================================================================
# INPUT NORMALIZATION
# =============================================================================

def _build_items(raw_items, products: dict[str, Product]) -> list[InvoiceItem]:
    """
    Normalize line payloads into InvoiceItem snapshots.

    Missing product_name / price_cents are copied from the live product.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("At least one item is required")

    items: list[InvoiceItem] = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, InvoiceItem):
            raw = raw.to_dict()
        if not isinstance(raw, dict):
            raise ValidationError(f"Item {index} must be an object", details={"index": index})

        product_id = str(raw.get("product_id") or "").strip()
        if not product_id:
            raise ValidationError(f"Item {index} has no product", details={"index": index})

        quantity = coerce_int(raw.get("quantity"), f"items[{index}].quantity", minimum=1)
        product = products.get(product_id)

        if raw.get("price_cents") is not None:
            price_cents = coerce_cents(raw["price_cents"], f"items[{index}].price_cents")
        elif product is not None:
            price_cents = product.price_cents
        else:
            raise ValidationError(
                f"Item {index} needs price_cents (product {product_id} not found)",
                details={"index": index},
            )

        product_name = str(raw.get("product_name") or "").strip()
        if not product_name and product is not None:
            product_name = product.name

        items.append(InvoiceItem(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            price_cents=price_cents,
        ))
    return items


def _check_status(status: str) -> str:
    if status not in InvoiceStatus.ALL:
        raise ValidationError(f"status must be one of: {', '.join(InvoiceStatus.ALL)}")
    return status


def _products_by_id() -> dict[str, Product]:
    return {p.id: p for p in store.products.all()}


def _validate_for_save(invoice: Invoice, products: dict[str, Product], previous: Invoice | None) -> None:
    if invoice.status != InvoiceStatus.PAID:
        return
    shortages = find_shortages(invoice.items, products, previous)
    if shortages:
        current_app.logger.info(
            "Invoice %s rejected: %d line(s) exceed available stock", invoice.id, len(shortages)
        )
        raise InsufficientStockError(shortages)


def _commit(old: Invoice | None, new: Invoice | None) -> dict[str, int]:
    delta = compute_stock_delta(old, new)
    if new is None:
        store.invoices.delete(old.id)
    elif old is None:
        store.invoices.add(new)
    else:
        store.invoices.update(new)
    inventory_service.apply_stock_delta(delta)
    return delta


# =============================================================================
# LIFECYCLE OPERATIONS
# =============================================================================

def create_invoice(
    *,
    customer_name: str,
    items: list,
    created_by: str,
    status: str = InvoiceStatus.DRAFT,
    date: str | None = None,
    due_date: str | None = None,
    notes: str | None = None,
) -> Invoice:
    """
    Create an invoice; a Paid invoice takes its quantities out of stock.

    Raises:
        ValidationError: missing customer, no items, malformed line
        InsufficientStockError: Paid and some line exceeds live stock
    """
    customer_name = coerce_text(customer_name, "customer_name")
    status = _check_status(status)
    products = _products_by_id()
    built_items = _build_items(items, products)

    issued = coerce_date(date, "date") if date else today().isoformat()
    due = coerce_date(due_date, "due_date") if due_date else (
        default_due_date(parse_iso_date(issued)).isoformat()
    )

    invoice = Invoice(
        id=new_record_id(),
        customer_name=customer_name,
        date=issued,
        due_date=due,
        created_by=created_by or "unknown",
        status=status,
        items=built_items,
        total_cents=recompute_total(built_items),
        notes=notes,
    )

    _validate_for_save(invoice, products, previous=None)
    delta = _commit(None, invoice)

    current_app.logger.info(
        "Created invoice %s (%s, total=%d) stock delta=%s", invoice.id, invoice.status, invoice.total_cents, delta
    )
    return invoice


def update_invoice(
    invoice_id: str,
    *,
    customer_name: str,
    items: list,
    status: str,
    date: str | None = None,
    due_date: str | None = None,
    notes: str | None = None,
) -> Invoice:
    """
    Replace an invoice's content and status, moving stock per the transition table.

    created_by is kept from the saved version; date/due_date too when omitted.

    Raises:
        NotFoundError: no such invoice
        ValidationError: missing customer, no items, malformed line
        InsufficientStockError: Paid and some line exceeds available stock
    """
    old = get_invoice(invoice_id)

    customer_name = coerce_text(customer_name, "customer_name")
    status = _check_status(status)
    products = _products_by_id()
    built_items = _build_items(items, products)

    new = Invoice(
        id=old.id,
        customer_name=customer_name,
        date=coerce_date(date, "date") if date else old.date,
        due_date=coerce_date(due_date, "due_date") if due_date else old.due_date,
        created_by=old.created_by,
        status=status,
        items=built_items,
        total_cents=recompute_total(built_items),
        notes=notes,
    )

    _validate_for_save(new, products, previous=old)
    delta = _commit(old, new)

    current_app.logger.info(
        "Updated invoice %s (%s -> %s) stock delta=%s", new.id, old.status, new.status, delta
    )
    return new


def delete_invoice(invoice_id: str) -> Invoice:
    """
    Remove an invoice; a Paid invoice gives its quantities back first.

    Raises:
        NotFoundError: no such invoice
    """
    old = get_invoice(invoice_id)
    delta = _commit(old, None)
    current_app.logger.info("Deleted invoice %s (%s) stock delta=%s", old.id, old.status, delta)
    return old


def delete_invoices(invoice_ids: list[str]) -> list[Invoice]:
    """Bulk delete. All ids must exist; nothing is deleted otherwise."""
    missing = [i for i in invoice_ids if not store.invoices.exists(i)]
    if missing:
        raise NotFoundError(f"Invoices not found: {', '.join(missing)}")
    return [delete_invoice(i) for i in dict.fromkeys(invoice_ids)]


# =============================================================================
# QUERIES
# =============================================================================

def get_invoice(invoice_id: str) -> Invoice:
    invoice = store.invoices.get(invoice_id)
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return invoice


def list_invoices(
    status: str | None = None,
    search: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[Invoice]:
    """
    Invoices newest first.

    search matches customer name or invoice id (case-insensitive);
    start_date / end_date are inclusive bounds on the invoice date.
    """
    if status is not None:
        _check_status(status)
    start = coerce_date(start_date, "start_date") if start_date else None
    end = coerce_date(end_date, "end_date") if end_date else None
    needle = search.lower() if search else None

    def matches(inv: Invoice) -> bool:
        if status is not None and inv.status != status:
            return False
        if needle and needle not in inv.customer_name.lower() and needle not in inv.id.lower():
            return False
        if start and inv.date < start:
            return False
        if end and inv.date > end:
            return False
        return True

    invoices = store.invoices.filter(matches)
    invoices.sort(key=lambda inv: inv.date, reverse=True)
    return invoices
