from __future__ import annotations

from dataclasses import dataclass, field


class POStatus:
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class ReturnStatus:
    PENDING = "Pending"
    PROCESSED = "Processed"

    ALL = (PENDING, PROCESSED)


@dataclass
class PurchaseOrderLine:
    """PO lines reference products by name only."""
    product_name: str
    quantity: int
    cost_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "product_name": self.product_name,
            "quantity": self.quantity,
            "cost_cents": self.cost_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrderLine":
        return cls(
            product_name=str(data["product_name"]),
            quantity=int(data["quantity"]),
            cost_cents=int(data.get("cost_cents") or 0),
        )


@dataclass
class PurchaseOrder:
    id: str
    supplier: str
    date: str
    status: str = POStatus.PENDING
    items: list[PurchaseOrderLine] = field(default_factory=list)
    total_cost_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier": self.supplier,
            "items": [line.to_dict() for line in self.items],
            "total_cost_cents": self.total_cost_cents,
            "status": self.status,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseOrder":
        status = data.get("status", POStatus.PENDING)
        if status not in POStatus.ALL:
            raise ValueError(f"unknown purchase order status: {status!r}")
        return cls(
            id=str(data["id"]),
            supplier=str(data["supplier"]),
            date=str(data["date"]),
            status=status,
            items=[PurchaseOrderLine.from_dict(line) for line in data.get("items") or []],
            total_cost_cents=int(data.get("total_cost_cents") or 0),
        )


@dataclass
class SalesReturn:
    """
    Return (RMA) record.

    Passive: creating or processing a return touches neither stock nor the
    referenced invoice.
    """
    id: str
    invoice_id: str
    reason: str
    date: str
    status: str = ReturnStatus.PENDING
    refund_amount_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "reason": self.reason,
            "date": self.date,
            "status": self.status,
            "refund_amount_cents": self.refund_amount_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SalesReturn":
        status = data.get("status", ReturnStatus.PENDING)
        if status not in ReturnStatus.ALL:
            raise ValueError(f"unknown return status: {status!r}")
        return cls(
            id=str(data["id"]),
            invoice_id=str(data["invoice_id"]),
            reason=str(data.get("reason") or ""),
            date=str(data["date"]),
            status=status,
            refund_amount_cents=int(data.get("refund_amount_cents") or 0),
        )
