# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockbook/routes/products.py
"""
Product catalog routes.

Reading the catalog only needs a signed-in user (the invoice editor picks
products from it); every change needs the inventory capability.
"""

from flask import Blueprint, jsonify, request, current_app

from ..decorators import require_auth, require_capability
from ..permissions import Capability
from ..services import products_service, description_service
from ..validation import ValidationError, NotFoundError, coerce_int, json_body

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products_route():
    """
    List products with optional search and pagination.

    Query params:
        search: substring of name or SKU
        page: Page number (1-indexed). If omitted, returns all items.
        per_page: Items per page (default 20, max 100)
    """
    try:
        page = request.args.get("page")
        per_page = request.args.get("per_page")
        result = products_service.list_products(
            search=request.args.get("search"),
            page=coerce_int(page, "page") if page is not None else None,
            per_page=coerce_int(per_page, "per_page", minimum=1) if per_page is not None else None,
        )
        return jsonify(result), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@products_bp.get("/low-stock")
@require_auth
def low_stock_route():
    items = products_service.low_stock_products()
    return jsonify({"items": [p.to_dict() for p in items], "count": len(items)}), 200


@products_bp.get("/<product_id>")
@require_auth
def get_product_route(product_id: str):
    try:
        return jsonify({"product": products_service.get_product(product_id).to_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@products_bp.post("")
@require_auth
@require_capability(Capability.INVENTORY)
def create_product_route():
    """
    Request body:
    {
        "name": "Wireless Mouse",
        "sku": "WM-001",
        "price_cents": 2999,
        "cost_cents": 1500,       (optional)
        "stock": 50,              (optional)
        "description": "...",     (optional)
        "category": "Electronics" (optional)
        "brand": "Logitech"       (optional)
    }
    """
    try:
        product = products_service.create_product(request.get_json(silent=True))
        return jsonify({"product": product.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.patch("/<product_id>")
@products_bp.put("/<product_id>")
@require_auth
@require_capability(Capability.INVENTORY)
def update_product_route(product_id: str):
    try:
        product = products_service.update_product(product_id, request.get_json(silent=True))
        return jsonify({"product": product.to_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<product_id>")
@require_auth
@require_capability(Capability.INVENTORY)
def delete_product_route(product_id: str):
    try:
        products_service.delete_product(product_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@products_bp.post("/describe")
@require_auth
@require_capability(Capability.INVENTORY)
def describe_product_route():
    """Generate a catalog description for a product name."""
    try:
        name = str(json_body().get("name") or "").strip()
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    if not name:
        return jsonify({"error": "name is required"}), 400
    return jsonify({"description": description_service.generate_product_description(name)}), 200
