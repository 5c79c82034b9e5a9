from __future__ import annotations

from dataclasses import dataclass, field


class InvoiceStatus:
    DRAFT = "Draft"
    PAID = "Paid"
    CANCELLED = "Cancelled"

    ALL = (DRAFT, PAID, CANCELLED)


@dataclass
class InvoiceItem:
    """Line snapshot: name and unit price are copied from the product when the line is saved."""
    product_id: str
    product_name: str
    quantity: int
    price_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_cents

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price_cents": self.price_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceItem":
        return cls(
            product_id=str(data["product_id"]),
            product_name=str(data.get("product_name") or ""),
            quantity=int(data["quantity"]),
            price_cents=int(data["price_cents"]),
        )


@dataclass
class Invoice:
    id: str
    customer_name: str
    date: str
    due_date: str
    created_by: str
    status: str = InvoiceStatus.DRAFT
    items: list[InvoiceItem] = field(default_factory=list)
    total_cents: int = 0
    notes: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "date": self.date,
            "due_date": self.due_date,
            "items": [item.to_dict() for item in self.items],
            "total_cents": self.total_cents,
            "status": self.status,
            "notes": self.notes,
            "created_by": self.created_by,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        status = data.get("status", InvoiceStatus.DRAFT)
        if status not in InvoiceStatus.ALL:
            raise ValueError(f"unknown invoice status: {status!r}")
        return cls(
            id=str(data["id"]),
            customer_name=str(data["customer_name"]),
            date=str(data["date"]),
            due_date=str(data.get("due_date") or data["date"]),
            created_by=str(data.get("created_by") or "unknown"),
            status=status,
            items=[InvoiceItem.from_dict(item) for item in data.get("items") or []],
            total_cents=int(data.get("total_cents") or 0),
            notes=data.get("notes"),
        )
