# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/stockbook/routes/auth.py
"""
Authentication API routes

One session slot per installation: a successful login (or registration)
replaces whoever was signed in before.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..models import UserRole
from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..services.auth_service import LoginStatus
from ..validation import ValidationError, json_body
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(user) -> dict:
    return {
        "user": user.to_public_dict(),
        "capabilities": sorted(permission_service.get_effective_capabilities(user)),
    }


@auth_bp.post("/register")
def register_route():
    """
    Create an account and sign it in.

    Self-registered accounts start with member flags whatever the role;
    role defaults only apply to accounts created from the team page.

    Request body:
    {
        "username": "jane",
        "password": "secret",
        "role": "MEMBER"  (optional)
    }

    Returns:
        201: created and signed in
        200: {"created": false} when the username is already taken
        400: missing username/password or unknown role
    """
    try:
        data = json_body()
        user = auth_service.register_user(
            data.get("username"),
            data.get("password"),
            data.get("role") or UserRole.MEMBER,
            auth_service.default_permissions_for(UserRole.MEMBER),
        )
        if user is None:
            return jsonify({"created": False}), 200

        session_service.start_session(user)
        return jsonify({"created": True, **_user_payload(user)}), 201

    except ValidationError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Registration failed")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and store the session snapshot.

    Returns:
        200: signed in
        400: username and password required
        401: invalid credentials
        403: account inactive (password was correct)
    """
    try:
        data = json_body()
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        result = session_service.login(username, password)

        if result.status == LoginStatus.INACTIVE:
            permission_service.log_security_event(
                result.user, "ACCOUNT_INACTIVE", resource=request.path, reason="Login to inactive account"
            )
            return jsonify({
                "error": "Your account is currently inactive. Please contact the administrator.",
                "code": "account_inactive",
            }), 403

        if not result.ok:
            permission_service.log_security_event(
                None, "LOGIN_FAILED", resource=request.path, reason=f"Invalid credentials for {username!r}"
            )
            return jsonify({"error": "Invalid credentials", "code": "invalid_credentials"}), 401

        return jsonify(_user_payload(result.user)), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Login failed")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    session_service.logout()
    return jsonify({"success": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(_user_payload(g.current_user)), 200
