"""
Return (RMA) Service

Returns are bookkeeping records only. Creating or processing one changes
neither product stock nor the referenced invoice; a refund that should put
goods back on the shelf is handled by editing or cancelling the invoice.

LIFECYCLE:
1. Create return (Pending) against an existing invoice
2. Process (Pending -> Processed)
"""

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import ReturnStatus, SalesReturn
from ..storage import new_record_id
from ..time_utils import today
from ..validation import NotFoundError, ValidationError, coerce_cents, coerce_text


def create_return(*, invoice_id: str, reason: str, refund_amount_cents=0) -> SalesReturn:
    """
    Raises:
        ValidationError: blank invoice id or reason, bad refund amount
        NotFoundError: the invoice does not exist
    """
    invoice_id = coerce_text(invoice_id, "invoice_id")
    reason = coerce_text(reason, "reason")
    refund = coerce_cents(refund_amount_cents, "refund_amount_cents")

    invoice = store.invoices.get(invoice_id)
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")

    rma = SalesReturn(
        id=new_record_id(),
        invoice_id=invoice.id,
        reason=reason,
        date=today().isoformat(),
        status=ReturnStatus.PENDING,
        refund_amount_cents=refund,
    )
    store.returns.add(rma)
    current_app.logger.info("Created return %s for invoice %s", rma.id, invoice.id)
    return rma


def process_return(return_id: str) -> SalesReturn:
    """Pending -> Processed; already processed returns are returned unchanged."""
    rma = store.returns.get(return_id)
    if rma is None:
        raise NotFoundError(f"Return {return_id} not found")
    if rma.status == ReturnStatus.PROCESSED:
        return rma
    rma.status = ReturnStatus.PROCESSED
    store.returns.update(rma)
    current_app.logger.info("Processed return %s", rma.id)
    return rma


def list_returns(status: str | None = None) -> list[SalesReturn]:
    if status is not None and status not in ReturnStatus.ALL:
        raise ValidationError(f"status must be one of: {', '.join(ReturnStatus.ALL)}")
    returns = store.returns.filter(lambda r: status is None or r.status == status)
    returns.sort(key=lambda r: r.date, reverse=True)
    return returns
