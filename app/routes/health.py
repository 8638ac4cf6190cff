# app/routes/health.py
"""
Liveness and readiness endpoints.
"""

import time

from fastapi import APIRouter

from app.config import settings
from app.db.pool import db_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "visatrack-reminders"}


@router.get("/readyz")
async def readyz():
    """
    Readiness check: database pool plus the configuration the dispatcher needs.
    """
    checks = {}
    overall_ok = True

    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = db_health.get("healthy", False)

        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }

        if "pool_stats" in db_health:
            pool_stats = db_health["pool_stats"]
            checks["database"].update(
                {
                    "pool_size": pool_stats.get("pool_size", 0),
                    "pool_available": pool_stats.get("pool_available", 0),
                    "pool_utilization_percent": pool_stats.get("pool_utilization_percent", 0),
                    "connection_time_ms": db_health.get("connection_time_ms", 0),
                }
            )

        if "warnings" in db_health:
            checks["database"]["warnings"] = db_health["warnings"]

        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")
            if "error_type" in db_health:
                checks["database"]["error_type"] = db_health["error_type"]

        overall_ok = overall_ok and is_healthy

    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    # Missing channel credentials degrade delivery but don't block readiness
    config_issues = []
    if not settings.SUPABASE_DB_URL:
        config_issues.append("SUPABASE_DB_URL not set")
    if not settings.REMINDER_CRON_SECRET:
        config_issues.append("REMINDER_CRON_SECRET not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
        "channels": settings.get_channel_config(),
    }
    overall_ok = overall_ok and bool(settings.SUPABASE_DB_URL)

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}


@router.get("/health/database")
async def database_health():
    """Detailed database pool health information."""
    return await db_health_check()
