# Overview: Request and capability decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .permissions import Capability
from .services import session_service, permission_service
from .services.permission_service import AuthorizationError


def _is_authenticated() -> bool:
    return getattr(g, "current_user", None) is not None


def require_auth(f):
    """
    Require a signed-in, active user.

    Sets g.current_user to the session user *after* syncing it with the
    canonical user record, so flag or status changes apply immediately.

    Returns 401 when nobody is signed in and 403 (account_inactive) when the
    account has been deactivated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = session_service.get_current_user()

        if user is None:
            return jsonify({"error": "Authentication required"}), 401

        if not user.is_active:
            permission_service.log_security_event(
                user, "ACCOUNT_INACTIVE", resource=request.path, reason="Account is inactive"
            )
            return jsonify({
                "error": "Your account is currently inactive. Please contact the administrator.",
                "code": "account_inactive",
            }), 403

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_capability(capability: str):
    """Require a capability flag (Superadmin passes every check)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                permission_service.require_capability(g.current_user, capability, resource=request.path)
            except AuthorizationError as e:
                return jsonify({
                    "error": "Permission denied",
                    "code": e.code,
                    "required_permission": capability,
                    "message": str(e),
                }), e.status_code

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_superadmin(f):
    """Superadmin-only surfaces (billing)."""
    return require_capability(Capability.SUPERADMIN)(f)
