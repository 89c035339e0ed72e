"""Health check API router."""

from typing import Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from connector_hub.infra.config import config
from connector_hub.infra.database import get_db
from connector_hub.infra.metrics import get_metrics_response

router = APIRouter()

# Store name -> table the gateway reads it from
STORE_TABLES = {
    "services": "mcp_services",
    "app_tokens": "mcp_service_tokens",
    "owner_tokens": "connection_tokens",
    "connections": "connections",
    "job_templates": "job_templates",
}


def check_stores(db: Session) -> Dict[str, str]:
    """Probe the database and every table backing a store; ``ok`` or the error per check."""
    checks = {}
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        db.rollback()
        checks["database"] = f"error: {e.__class__.__name__}"
        # Tables cannot be probed without a connection
        for store in STORE_TABLES:
            checks[store] = "skipped"
        return checks

    for store, table in STORE_TABLES.items():
        try:
            db.execute(text(f"SELECT 1 FROM {table} LIMIT 1"))
            checks[store] = "ok"
        except Exception as e:
            db.rollback()
            checks[store] = f"error: {e.__class__.__name__}"
    return checks


@router.get("/health", tags=["Health"])
async def health_check():
    """Combined health check endpoint."""
    return {
        "status": "ok",
        "service": "connector-hub",
        "version": "1.0.0",
        "environment": config.APP_ENV,
    }


@router.get("/health/live", tags=["Health"])
async def liveness_probe():
    """Liveness probe - indicates if the process is running."""
    return {"status": "alive"}


@router.get("/health/ready", tags=["Health"])
async def readiness_probe(db: Session = Depends(get_db)):
    """
    Readiness probe - checks the database, each store table and the identity provider settings.

    Answers 503 with the per-check results when any check fails.
    """
    checks = check_stores(db)
    checks["identity_provider"] = "ok" if config.SUPABASE_URL else "error: SUPABASE_URL not configured"

    failed = sorted(name for name, result in checks.items() if result != "ok")
    if failed:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "failed": failed, "checks": checks},
        )
    return {"status": "ready", "checks": checks}


@router.get("/metrics", tags=["Health"])
async def metrics():
    """Prometheus metrics endpoint."""
    return get_metrics_response()
