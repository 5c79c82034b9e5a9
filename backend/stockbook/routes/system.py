# backend/stockbook/routes/system.py
"""
System health endpoint.

Reports whether the configured storage backend answers, plus record counts
for a quick look at what is loaded.
"""

import time
from flask import Blueprint, jsonify, current_app

from ..extensions import store
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_storage_health() -> dict:
    start_time = time.time()
    try:
        entries = store.backend.entries()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "backend": current_app.config.get("STORAGE_BACKEND"),
                "entries": entries,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/health")
@system_bp.get("/api/health")
def health():
    storage = check_storage_health()
    healthy = storage["status"] == "healthy"
    return jsonify({
        "status": "ok" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "checks": {"storage": storage},
    }), (200 if healthy else 503)
