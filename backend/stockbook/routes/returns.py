# Overview: Flask API routes for returns (RMA); parses input and returns JSON responses.

"""
Return API Routes

Returns live on the orders page and share its capability. They are records
only: no stock moves and the invoice is not changed.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_capability
from ..permissions import Capability
from ..services import return_service
from ..validation import ValidationError, NotFoundError, json_body


returns_bp = Blueprint("returns", __name__, url_prefix="/api/returns")


@returns_bp.get("")
@require_auth
@require_capability(Capability.ORDERS)
def list_returns_route():
    try:
        returns = return_service.list_returns(status=request.args.get("status"))
        return jsonify({"items": [r.to_dict() for r in returns], "count": len(returns)}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@returns_bp.post("")
@require_auth
@require_capability(Capability.ORDERS)
def create_return_route():
    """
    Request body:
    {
        "invoice_id": "...",
        "reason": "Damaged in transit",
        "refund_amount_cents": 2999  (optional, default: 0)
    }

    Returns:
        201: Return created with Pending status
        400: Invalid input
        404: Invoice not found
    """
    try:
        data = json_body()
        rma = return_service.create_return(
            invoice_id=data.get("invoice_id"),
            reason=data.get("reason"),
            refund_amount_cents=data.get("refund_amount_cents", 0),
        )
        return jsonify({"return": rma.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create return")
        return jsonify({"error": "Internal server error"}), 500


@returns_bp.post("/<return_id>/process")
@require_auth
@require_capability(Capability.ORDERS)
def process_return_route(return_id: str):
    try:
        rma = return_service.process_return(return_id)
        return jsonify({"return": rma.to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
