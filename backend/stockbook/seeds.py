# Overview: Default contents for each collection (first run, or an unreadable snapshot).

from .models import User, UserRole, UserPermissions, Product, Category, Brand
from .permissions.roles import FULL_PERMISSIONS


DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "password"


def seed_users() -> list[User]:
    from .services.auth_service import hash_password

    return [
        User(
            id="1",
            username=DEFAULT_ADMIN_USERNAME,
            password_hash=hash_password(DEFAULT_ADMIN_PASSWORD),
            role=UserRole.SUPERADMIN,
            is_active=True,
            permissions=UserPermissions(**FULL_PERMISSIONS),
        )
    ]


def seed_products() -> list[Product]:
    return [
        Product(
            id="1", name="Wireless Mouse", description="Ergonomic wireless mouse",
            price_cents=2999, cost_cents=1500, stock=50, sku="WM-001",
            category="Electronics", brand="Logitech",
        ),
        Product(
            id="2", name="Mechanical Keyboard", description="RGB mechanical keyboard",
            price_cents=8999, cost_cents=4500, stock=15, sku="MK-002",
            category="Electronics", brand="Keychron",
        ),
        Product(
            id="3", name="USB-C Monitor", description="27 inch 4K Display",
            price_cents=34999, cost_cents=20000, stock=8, sku="MN-003",
            category="Monitors", brand="Dell",
        ),
    ]


def seed_categories() -> list[Category]:
    return [Category(id="1", name="Electronics"), Category(id="2", name="Monitors")]


def seed_brands() -> list[Brand]:
    return [Brand(id="1", name="Logitech"), Brand(id="2", name="Dell")]


_SEEDS = {
    "users": seed_users,
    "products": seed_products,
    "categories": seed_categories,
    "brands": seed_brands,
}


def seed_collection(key: str) -> list:
    """Seed records for a collection; collections without seeds start empty."""
    factory = _SEEDS.get(key)
    return factory() if factory else []
