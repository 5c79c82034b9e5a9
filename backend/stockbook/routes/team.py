# Overview: Flask API routes for team management; parses input and returns JSON responses.

"""
Team API Routes

All checks (team capability, no self-management, Admin manages Members
only) live in team_service; these routes translate its errors.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..models import UserRole
from ..permissions import Capability, GRANULAR_CAPABILITIES, get_capability_definition
from ..services import auth_service, team_service
from ..services.permission_service import AuthorizationError
from ..validation import ValidationError, NotFoundError, json_body


team_bp = Blueprint("team", __name__, url_prefix="/api/team")


def _denied(e: AuthorizationError):
    return jsonify({"error": str(e), "code": e.code}), e.status_code


@team_bp.get("/users")
@require_auth
@require_capability(Capability.TEAM)
def list_users_route():
    try:
        users = team_service.list_users(g.current_user)
        return jsonify({"items": [u.to_public_dict() for u in users], "count": len(users)}), 200
    except AuthorizationError as e:
        return _denied(e)


@team_bp.post("/users")
@require_auth
@require_capability(Capability.TEAM)
def create_user_route():
    """
    Request body:
    {
        "username": "jane",
        "password": "secret",
        "role": "MEMBER",                 (optional)
        "permissions": {"orders": true}   (optional, merged over role defaults)
    }

    Returns:
        201: user created
        200: {"created": false} when the username is taken
    """
    try:
        data = json_body()
        role = data.get("role") or UserRole.MEMBER
        permissions = None
        if data.get("permissions") is not None:
            if role not in UserRole.ALL:
                raise ValidationError(f"role must be one of: {', '.join(UserRole.ALL)}")
            permissions = team_service.parse_permissions(
                data["permissions"], base=auth_service.default_permissions_for(role)
            )
        user = team_service.create_user(
            g.current_user, data.get("username"), data.get("password"), role, permissions
        )
        if user is None:
            return jsonify({"created": False}), 200
        return jsonify({"created": True, "user": user.to_public_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except AuthorizationError as e:
        return _denied(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@team_bp.post("/users/<user_id>/toggle-status")
@require_auth
@require_capability(Capability.TEAM)
def toggle_status_route(user_id: str):
    try:
        user = team_service.toggle_user_status(g.current_user, user_id)
        return jsonify({"user": user.to_public_dict()}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except AuthorizationError as e:
        return _denied(e)


@team_bp.put("/users/<user_id>/permissions")
@require_auth
@require_capability(Capability.TEAM)
def update_permissions_route(user_id: str):
    """Request body: {"orders": true, "reports": false, ...}"""
    try:
        user = team_service.update_user_permissions(
            g.current_user, user_id, json_body()
        )
        return jsonify({"user": user.to_public_dict()}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except AuthorizationError as e:
        return _denied(e)


@team_bp.delete("/users/<user_id>")
@require_auth
@require_capability(Capability.TEAM)
def delete_user_route(user_id: str):
    try:
        team_service.delete_user(g.current_user, user_id)
        return jsonify({"deleted": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except AuthorizationError as e:
        return _denied(e)


@team_bp.get("/capabilities")
@require_auth
@require_capability(Capability.TEAM)
def list_capabilities_route():
    """Labels for the permission toggles on the team page."""
    items = [get_capability_definition(code) for code in GRANULAR_CAPABILITIES]
    return jsonify({"items": items}), 200
