# Overview: Service-layer operations for capability checks; encapsulates the role/flag access rules.

"""
Capability Checking and Security Event Logging

WHY: Gate every feature area (inventory, invoices, orders, reports, team) and
the Superadmin-only billing surface behind one decision function, so routes,
CLI and services all apply the same rules.

RULES (evaluated in order):
1. No user                -> UNAUTHENTICATED
2. Inactive user          -> INACTIVE (reported apart from "please log in")
3. Superadmin             -> ALLOWED for everything, stored flags ignored
4. Admin / Member         -> ALLOWED iff the capability flag is set;
                             "superadmin" is never granted to them

Admin has no implicit elevation: an Admin without a flag is treated exactly
like a Member without it.

Team management adds a target rule on top (see can_manage_user).
"""

from __future__ import annotations

from flask import current_app, has_app_context

from ..models import User, UserRole
from ..permissions import Capability, GRANULAR_CAPABILITIES, validate_capability_code


class AccessDecision:
    ALLOWED = "allowed"
    UNAUTHENTICATED = "unauthenticated"
    INACTIVE = "inactive"
    FORBIDDEN = "forbidden"


class AuthorizationError(Exception):
    """Base for route/action denials."""
    status_code = 403
    code = "permission_denied"

    def __init__(self, message: str, capability: str | None = None):
        super().__init__(message)
        self.capability = capability


class AuthenticationRequiredError(AuthorizationError):
    """Raised when no user is signed in."""
    status_code = 401
    code = "authentication_required"


class AccountInactiveError(AuthorizationError):
    """Raised when the signed-in account has been deactivated."""
    code = "account_inactive"


class PermissionDeniedError(AuthorizationError):
    """Raised when user lacks required capability."""
    pass


def log_security_event(
    user: User | None,
    event_type: str,
    capability: str | None = None,
    resource: str | None = None,
    reason: str | None = None,
) -> None:
    """
    Write a denial to the application log.

    event_type examples:
    - PERMISSION_DENIED
    - ACCOUNT_INACTIVE
    - AUTHENTICATION_REQUIRED
    - TEAM_ACTION_DENIED
    - LOGIN_FAILED
    """
    if not has_app_context():
        return
    current_app.logger.warning(
        "security event=%s user=%s capability=%s resource=%s reason=%s",
        event_type,
        user.username if user else None,
        capability,
        resource,
        reason,
    )


def evaluate_access(user: User | None, capability: str) -> str:
    """Decide access to a capability. Returns an AccessDecision value."""
    if not validate_capability_code(capability):
        raise ValueError(f"Unknown capability: {capability!r}")

    if user is None:
        return AccessDecision.UNAUTHENTICATED

    if not user.is_active:
        return AccessDecision.INACTIVE

    if user.role == UserRole.SUPERADMIN:
        return AccessDecision.ALLOWED

    if capability == Capability.SUPERADMIN:
        return AccessDecision.FORBIDDEN

    if user.permissions.get(capability):
        return AccessDecision.ALLOWED

    return AccessDecision.FORBIDDEN


def has_capability(user: User | None, capability: str) -> bool:
    return evaluate_access(user, capability) == AccessDecision.ALLOWED


def get_effective_capabilities(user: User | None) -> set[str]:
    """
    All capability codes the user currently holds.

    Superadmin holds every granular capability plus "superadmin".
    """
    if user is None or not user.is_active:
        return set()
    if user.role == UserRole.SUPERADMIN:
        return set(GRANULAR_CAPABILITIES) | {Capability.SUPERADMIN}
    return {cap for cap in GRANULAR_CAPABILITIES if user.permissions.get(cap)}


def require_capability(user: User | None, capability: str, resource: str | None = None) -> User:
    """
    Require user to hold a capability, raise an AuthorizationError if not.

    Usage:
        require_capability(current_user, Capability.ORDERS, resource="/api/orders")
    """
    decision = evaluate_access(user, capability)

    if decision == AccessDecision.ALLOWED:
        return user

    if decision == AccessDecision.UNAUTHENTICATED:
        log_security_event(None, "AUTHENTICATION_REQUIRED", capability, resource)
        raise AuthenticationRequiredError("Authentication required", capability)

    if decision == AccessDecision.INACTIVE:
        log_security_event(user, "ACCOUNT_INACTIVE", capability, resource, "Account is inactive")
        raise AccountInactiveError(
            "Your account is currently inactive. Please contact the administrator.",
            capability,
        )

    log_security_event(user, "PERMISSION_DENIED", capability, resource, f"Missing capability: {capability}")
    raise PermissionDeniedError(f"Permission denied: {capability}", capability)


def can_manage_user(actor: User | None, target: User) -> bool:
    """
    Whether actor may change target's status/permissions or delete target.

    Needs team access (or Superadmin), never on self; Superadmin manages
    anyone else, Admin manages Members only, Members manage nobody.
    """
    if not has_capability(actor, Capability.TEAM):
        return False
    if target.id == actor.id:
        return False
    if actor.role == UserRole.SUPERADMIN:
        return True
    if actor.role == UserRole.ADMIN:
        return target.role == UserRole.MEMBER
    return False


def require_can_manage_user(actor: User | None, target: User, resource: str | None = None) -> User:
    """Raise unless can_manage_user(actor, target)."""
    require_capability(actor, Capability.TEAM, resource=resource)

    if not can_manage_user(actor, target):
        reason = "Cannot manage own account" if target.id == actor.id else (
            f"{actor.role} cannot manage {target.role}"
        )
        log_security_event(actor, "TEAM_ACTION_DENIED", Capability.TEAM, resource, reason)
        raise PermissionDeniedError(f"Permission denied: {reason}", Capability.TEAM)

    return actor
