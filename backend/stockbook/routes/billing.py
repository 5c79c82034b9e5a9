# Overview: Flask API route for the Superadmin billing page.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_superadmin
from ..services import reporting_service

billing_bp = Blueprint("billing", __name__, url_prefix="/api/billing")


@billing_bp.get("")
@require_auth
@require_superadmin
def billing_route():
    return jsonify({"plan": "self-hosted", "usage": reporting_service.usage_summary()}), 200
