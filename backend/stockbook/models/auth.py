from __future__ import annotations

from dataclasses import dataclass, field, asdict


class UserRole:
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    ALL = (SUPERADMIN, ADMIN, MEMBER)


@dataclass
class UserPermissions:
    """Per-user capability flags. Superadmin ignores them."""
    inventory: bool = True
    invoices: bool = True
    orders: bool = False
    reports: bool = False
    team: bool = False

    def get(self, capability: str) -> bool:
        return bool(getattr(self, capability, False))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None, *, role: str) -> "UserPermissions":
        """
        Build flags from a stored object, back-filling anything missing.

        inventory/invoices default to on; orders/reports/team default to on
        only for Superadmin and Admin records.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError("permissions must be an object")
        elevated = role in (UserRole.SUPERADMIN, UserRole.ADMIN)
        return cls(
            inventory=bool(data.get("inventory", True)),
            invoices=bool(data.get("invoices", True)),
            orders=bool(data.get("orders", elevated)),
            reports=bool(data.get("reports", elevated)),
            team=bool(data.get("team", elevated)),
        )


@dataclass
class User:
    id: str
    username: str
    password_hash: str
    role: str = UserRole.MEMBER
    is_active: bool = True
    permissions: UserPermissions = field(default_factory=UserPermissions)

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    def access_snapshot(self) -> tuple:
        """Fields whose change must be reflected in a live session."""
        return (self.role, self.is_active, self.permissions.to_dict())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "password_hash": self.password_hash,
            "role": self.role,
            "is_active": self.is_active,
            "permissions": self.permissions.to_dict(),
        }

    def to_public_dict(self) -> dict:
        data = self.to_dict()
        data.pop("password_hash")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        role = data.get("role", UserRole.MEMBER)
        if role not in UserRole.ALL:
            raise ValueError(f"unknown role: {role!r}")
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            password_hash=str(data["password_hash"]),
            role=role,
            is_active=bool(data.get("is_active", True)),
            permissions=UserPermissions.from_dict(data.get("permissions"), role=role),
        )


@dataclass
class SessionRecord:
    """The signed-in user, cached as of login or the last sync."""
    user_id: str
    user: User

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "user": self.user.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        return cls(user_id=str(data["user_id"]), user=User.from_dict(data["user"]))
