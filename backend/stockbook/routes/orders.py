# Overview: Flask API routes for purchase orders; parses input and returns JSON responses.

"""
Purchase Order API Routes

Approving a Pending PO adds its quantities to the products carrying each
line's name. Approving twice is harmless.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_capability
from ..permissions import Capability
from ..services import purchase_order_service
from ..validation import ValidationError, NotFoundError, json_body


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_capability(Capability.ORDERS)
def list_orders_route():
    try:
        orders = purchase_order_service.list_purchase_orders(status=request.args.get("status"))
        return jsonify({"items": [po.to_dict() for po in orders], "count": len(orders)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@orders_bp.post("")
@require_auth
@require_capability(Capability.ORDERS)
def create_order_route():
    """
    Request body:
    {
        "supplier": "Logitech",
        "items": [{"product_name": "Wireless Mouse", "quantity": 10, "cost_cents": 1500}],
        "date": "2026-01-31"  (optional)
    }
    """
    try:
        data = json_body()
        po = purchase_order_service.create_purchase_order(
            supplier=data.get("supplier"),
            items=data.get("items"),
            date=data.get("date"),
        )
        return jsonify({"order": po.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create purchase order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<po_id>/approve")
@require_auth
@require_capability(Capability.ORDERS)
def approve_order_route(po_id: str):
    try:
        po = purchase_order_service.approve_purchase_order(po_id)
        return jsonify({"order": po.to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to approve purchase order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.post("/<po_id>/reject")
@require_auth
@require_capability(Capability.ORDERS)
def reject_order_route(po_id: str):
    try:
        po = purchase_order_service.reject_purchase_order(po_id)
        return jsonify({"order": po.to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
