# Overview: Flask API routes for invoice operations; parses input and returns JSON responses.

# backend/stockbook/routes/invoices.py
"""
Invoice API Routes

Every write goes through invoice_service, which keeps product stock in line
with the set of Paid invoices.

Errors:
    400: validation (missing customer, no items, malformed line)
    404: unknown invoice
    409: Paid invoice exceeds available stock; details.lines lists each
         failing line with its max_available
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..permissions import Capability
from ..services import invoice_service
from ..models import InvoiceStatus
from ..services.invoice_service import InsufficientStockError
from ..validation import ValidationError, NotFoundError, json_body


invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


def _invoice_fields(data: dict) -> dict:
    return {
        "customer_name": data.get("customer_name"),
        "items": data.get("items"),
        "date": data.get("date"),
        "due_date": data.get("due_date"),
        "notes": data.get("notes"),
    }


@invoices_bp.get("")
@require_auth
@require_capability(Capability.INVOICES)
def list_invoices_route():
    """
    Query params:
        status: Draft | Paid | Cancelled
        search: customer name or invoice id
        start / end: inclusive YYYY-MM-DD bounds
    """
    try:
        invoices = invoice_service.list_invoices(
            status=request.args.get("status"),
            search=request.args.get("search"),
            start_date=request.args.get("start"),
            end_date=request.args.get("end"),
        )
        return jsonify({"items": [i.to_dict() for i in invoices], "count": len(invoices)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@invoices_bp.get("/<invoice_id>")
@require_auth
@require_capability(Capability.INVOICES)
def get_invoice_route(invoice_id: str):
    try:
        return jsonify({"invoice": invoice_service.get_invoice(invoice_id).to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@invoices_bp.post("")
@require_auth
@require_capability(Capability.INVOICES)
def create_invoice_route():
    """
    Request body:
    {
        "customer_name": "Acme Ltd",
        "status": "Paid",                      (optional, default Draft)
        "items": [{"product_id": "...", "quantity": 2, "price_cents": 2999}],
        "date": "2026-01-31",                  (optional)
        "due_date": "2026-02-07",              (optional)
        "notes": "..."                         (optional)
    }
    """
    try:
        data = json_body()
        invoice = invoice_service.create_invoice(
            status=data.get("status") or InvoiceStatus.DRAFT,
            created_by=g.current_user.username,
            **_invoice_fields(data),
        )
        return jsonify({"invoice": invoice.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to create invoice")
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.put("/<invoice_id>")
@require_auth
@require_capability(Capability.INVOICES)
def update_invoice_route(invoice_id: str):
    """Replace the invoice's content and status (same body as create; status required)."""
    try:
        data = json_body()
        if not data.get("status"):
            return jsonify({"error": "status is required"}), 400
        invoice = invoice_service.update_invoice(
            invoice_id,
            status=data["status"],
            **_invoice_fields(data),
        )
        return jsonify({"invoice": invoice.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except Exception:
        current_app.logger.exception("Failed to update invoice")
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.delete("/<invoice_id>")
@require_auth
@require_capability(Capability.INVOICES)
def delete_invoice_route(invoice_id: str):
    try:
        invoice_service.delete_invoice(invoice_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete invoice")
        return jsonify({"error": "Internal server error"}), 500


@invoices_bp.post("/bulk-delete")
@require_auth
@require_capability(Capability.INVOICES)
def bulk_delete_route():
    """Request body: {"ids": ["...", "..."]}"""
    try:
        ids = json_body().get("ids")
        if not isinstance(ids, list) or not ids or not all(isinstance(i, str) for i in ids):
            return jsonify({"error": "ids must be a non-empty list of invoice ids"}), 400
        deleted = invoice_service.delete_invoices(ids)
        return jsonify({"deleted": [i.id for i in deleted]}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to bulk delete invoices")
        return jsonify({"error": "Internal server error"}), 500
