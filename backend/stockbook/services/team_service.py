# Overview: Service-layer operations for team management; create, deactivate, re-flag and delete users.

"""
Team Management

Every operation takes the acting user and enforces the team rules from
permission_service before writing:
- actor needs the team capability (Superadmin always has it)
- nobody acts on their own account
- Superadmin manages anyone else; Admin manages Members only

After each write the current session is re-synced so that a change to the
signed-in user's own record is visible immediately.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import store
from ..models import User, UserRole, UserPermissions
from ..permissions import Capability, GRANULAR_CAPABILITIES
from ..validation import ValidationError, NotFoundError
from . import auth_service, permission_service, session_service


def list_users(actor: User | None) -> list[User]:
    permission_service.require_capability(actor, Capability.TEAM)
    return store.users.all()


def _get_target(user_id: str) -> User:
    user = store.users.get(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def parse_permissions(data: dict | None, base: UserPermissions | None = None) -> UserPermissions:
    """
    Build flags from a payload. Keys not given keep the value from base.

    Raises ValidationError for unknown keys or non-boolean values.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("permissions must be an object")

    merged = (base or UserPermissions()).to_dict()
    for key, value in data.items():
        if key not in GRANULAR_CAPABILITIES:
            raise ValidationError(f"Unknown permission: {key}")
        if not isinstance(value, bool):
            raise ValidationError(f"Permission {key} must be true or false")
        merged[key] = value
    return UserPermissions(**merged)


def create_user(
    actor: User | None,
    username: str,
    password: str,
    role: str = UserRole.MEMBER,
    permissions: UserPermissions | None = None,
) -> User | None:
    """
    Register a user on behalf of a team manager.

    Admins may only create Members (they could not manage anything else
    afterwards). Returns None when the username is taken.
    """
    permission_service.require_capability(actor, Capability.TEAM)
    if actor.role == UserRole.ADMIN and role != UserRole.MEMBER:
        permission_service.log_security_event(
            actor, "TEAM_ACTION_DENIED", Capability.TEAM, reason=f"ADMIN cannot create {role}"
        )
        raise permission_service.PermissionDeniedError(
            f"Permission denied: ADMIN cannot create {role}", Capability.TEAM
        )
    return auth_service.register_user(username, password, role, permissions)


def toggle_user_status(actor: User | None, user_id: str) -> User:
    target = _get_target(user_id)
    permission_service.require_can_manage_user(actor, target)

    target.is_active = not target.is_active
    store.users.update(target)
    current_app.logger.info(
        "%s set %s active=%s", actor.username, target.username, target.is_active
    )
    session_service.sync_session()
    return target


def update_user_permissions(actor: User | None, user_id: str, permissions: dict) -> User:
    target = _get_target(user_id)
    permission_service.require_can_manage_user(actor, target)

    target.permissions = parse_permissions(permissions, base=target.permissions)
    store.users.update(target)
    current_app.logger.info(
        "%s updated permissions of %s: %s", actor.username, target.username, target.permissions.to_dict()
    )
    session_service.sync_session()
    return target


def delete_user(actor: User | None, user_id: str) -> User:
    target = _get_target(user_id)
    permission_service.require_can_manage_user(actor, target)

    store.users.delete(target.id)
    current_app.logger.info("%s deleted user %s", actor.username, target.username)
    session_service.sync_session()
    return target
