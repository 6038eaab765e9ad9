# backend/shopmapper/routes/system.py
"""
System health and version endpoints.

Public (no session). Used by the deployment's liveness probe.
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Territory, Lorry, User
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        territory_count = db.session.query(Territory).count()
        lorry_count = db.session.query(Lorry).count()
        user_count = db.session.query(User).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "territories": territory_count,
                "lorries": lorry_count,
                "users": user_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_upload_health() -> dict:
    """Uploads are optional; missing credentials only degrade the service."""
    configured = all(
        current_app.config.get(key)
        for key in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET")
    ) or current_app.extensions.get("image_uploader") is not None
    if configured:
        return {"status": "healthy"}
    return {"status": "degraded", "warning": "Image uploads are not configured"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded (degraded is still operational)
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    upload_health = check_upload_health()

    if database_health["status"] == "unhealthy":
        overall_status = "unhealthy"
        http_status = 503
    elif upload_health["status"] == "degraded":
        overall_status = "degraded"
        http_status = 200
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "uploads": upload_health,
        }
    }

    return response, http_status


@system_bp.get("/version")
def version():
    """Non-sensitive deployment information."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": "1.0.0",
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
