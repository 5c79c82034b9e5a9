# Overview: Flask API routes for categories and brands.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_capability
from ..permissions import Capability
from ..services import products_service
from ..validation import ValidationError, NotFoundError, json_body

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


@catalog_bp.get("/categories")
@require_auth
def list_categories_route():
    return jsonify({"items": [c.to_dict() for c in products_service.list_categories()]}), 200


@catalog_bp.post("/categories")
@require_auth
@require_capability(Capability.INVENTORY)
def add_category_route():
    try:
        category = products_service.add_category(json_body().get("name"))
        return jsonify({"category": category.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@catalog_bp.delete("/categories/<category_id>")
@require_auth
@require_capability(Capability.INVENTORY)
def delete_category_route(category_id: str):
    try:
        products_service.delete_category(category_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@catalog_bp.get("/brands")
@require_auth
def list_brands_route():
    return jsonify({"items": [b.to_dict() for b in products_service.list_brands()]}), 200


@catalog_bp.post("/brands")
@require_auth
@require_capability(Capability.INVENTORY)
def add_brand_route():
    try:
        brand = products_service.add_brand(json_body().get("name"))
        return jsonify({"brand": brand.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@catalog_bp.delete("/brands/<brand_id>")
@require_auth
@require_capability(Capability.INVENTORY)
def delete_brand_route(brand_id: str):
    try:
        products_service.delete_brand(brand_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
