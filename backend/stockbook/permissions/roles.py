# Overview: Default permission flags per role.

from ..models.auth import UserRole


FULL_PERMISSIONS = {
    "inventory": True,
    "invoices": True,
    "orders": True,
    "reports": True,
    "team": True,
}

DEFAULT_MEMBER_PERMISSIONS = {
    "inventory": True,
    "invoices": True,
    "orders": False,
    "reports": False,
    "team": False,
}

DEFAULT_ROLE_PERMISSIONS = {
    UserRole.SUPERADMIN: FULL_PERMISSIONS,
    UserRole.ADMIN: FULL_PERMISSIONS,
    UserRole.MEMBER: DEFAULT_MEMBER_PERMISSIONS,
}
