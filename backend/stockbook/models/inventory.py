from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Product:
    """
    Catalog entry.

    stock is a plain integer owned by the inventory ledger; it is allowed to
    go negative (no floor is applied anywhere).
    category and brand hold tag *names*, not ids.
    """
    id: str
    name: str
    sku: str = ""
    description: str = ""
    price_cents: int = 0
    cost_cents: int = 0
    stock: int = 0
    category: str | None = None
    brand: str | None = None

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "stock": self.stock,
            "category": self.category,
            "brand": self.brand,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            sku=str(data.get("sku") or ""),
            description=str(data.get("description") or ""),
            price_cents=int(data.get("price_cents") or 0),
            cost_cents=int(data.get("cost_cents") or 0),
            stock=int(data.get("stock") or 0),
            category=data.get("category"),
            brand=data.get("brand"),
        )


@dataclass
class Category:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(id=str(data["id"]), name=str(data["name"]))


@dataclass
class Brand:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Brand":
        return cls(id=str(data["id"]), name=str(data["name"]))
