# backend/stockbook/services/products_service.py
"""
Products Service

Catalog CRUD plus the category and brand tag registries. Products refer to
categories and brands by name; deleting a tag or a product never cascades
(invoices keep their own name/price snapshot).
"""
from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import Product, Category, Brand
from ..storage import new_record_id
from ..validation import (
    NotFoundError,
    RecordValidationPolicy,
    coerce_text,
    validate_payload,
)


PRODUCT_POLICY = RecordValidationPolicy(
    writable_fields={
        "name", "sku", "description", "price_cents", "cost_cents", "stock", "category", "brand",
    },
    required_on_create={"name", "sku", "price_cents"},
    int_fields={"stock"},
    cents_fields={"price_cents", "cost_cents"},
    optional_fields={"category", "brand"},
)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_POLICY.writable_fields:
            continue
        setattr(p, k, v)


def list_products(
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing, filtered by name/SKU substring, with optional pagination.

    Returns:
        Dict with 'items', 'count', and pagination metadata if paginated.
    """
    products = store.products.all()
    if search:
        needle = search.lower()
        products = [p for p in products if needle in p.name.lower() or needle in p.sku.lower()]

    if page is None:
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    per_page = min(per_page or 20, 100)
    page = max(page, 1)

    total = len(products)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    window = products[(page - 1) * per_page: page * per_page]

    return {
        "items": [p.to_dict() for p in window],
        "count": len(window),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def get_product(product_id: str) -> Product:
    product = store.products.get(product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def create_product(payload: dict) -> Product:
    """
    Create a product from a client payload.

    name, sku and price_cents are required; stock and cost default to 0.
    """
    patch = validate_payload(record_type=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    product = Product(id=new_record_id(), name=patch.pop("name"))
    apply_product_patch(product, patch)
    store.products.add(product)
    current_app.logger.info("Created product %s (%s)", product.name, product.sku)
    return product


def update_product(product_id: str, payload: dict) -> Product:
    """
    Patch a product. Setting stock here is a manual correction and bypasses
    the ledger checks (negative values are accepted).
    """
    product = get_product(product_id)
    patch = validate_payload(record_type=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    apply_product_patch(product, patch)
    store.products.update(product)
    return product


def delete_product(product_id: str) -> Product:
    """Remove a product. Invoices referencing it are left untouched."""
    removed = store.products.delete(product_id)
    if removed is None:
        raise NotFoundError(f"Product {product_id} not found")
    current_app.logger.info("Deleted product %s", removed.name)
    return removed


def low_stock_products(threshold: int | None = None) -> list[Product]:
    if threshold is None:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    return store.products.filter(lambda p: p.stock < threshold)


# -- Categories / brands --

def list_categories() -> list[Category]:
    return store.categories.all()


def add_category(name: str) -> Category:
    category = Category(id=new_record_id(), name=coerce_text(name, "name"))
    store.categories.add(category)
    return category


def delete_category(category_id: str) -> Category:
    removed = store.categories.delete(category_id)
    if removed is None:
        raise NotFoundError(f"Category {category_id} not found")
    return removed


def list_brands() -> list[Brand]:
    return store.brands.all()


def add_brand(name: str) -> Brand:
    brand = Brand(id=new_record_id(), name=coerce_text(name, "name"))
    store.brands.add(brand)
    return brand


def delete_brand(brand_id: str) -> Brand:
    removed = store.brands.delete(brand_id)
    if removed is None:
        raise NotFoundError(f"Brand {brand_id} not found")
    return removed
