# Overview: Flask API routes for dashboard and financial reporting.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_capability
from ..extensions import store
from ..permissions import Capability
from ..services import reporting_service, description_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
def dashboard_route():
    return jsonify(reporting_service.dashboard_stats()), 200


@reports_bp.get("/financial")
@require_auth
@require_capability(Capability.REPORTS)
def financial_route():
    return jsonify(reporting_service.financial_report()), 200


@reports_bp.post("/insights")
@require_auth
@require_capability(Capability.REPORTS)
def insights_route():
    """Model-generated tips from the current sales and stock figures."""
    text = description_service.analyze_business_data(store.invoices.all(), store.products.all())
    return jsonify({"insights": text}), 200
