"""
Health endpoints for uptime probes and deployment readiness.

/health answers without touching anything; /health/db does one real read;
/health/ready also reports which outside integrations are configured.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from app.config.firebase import get_db
from app.core.settings import settings
from app.utils.firestore_helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _database_name() -> str:
    return "firestore-mock" if settings.USE_MOCK_DB else "firestore"


def _ping_database() -> None:
    list(get_db().collection("reports").limit(1).stream())


@router.get("")
async def liveness():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/db")
async def database_health():
    """Reads at most one report; 503 when Firestore is unreachable or misconfigured."""
    try:
        _ping_database()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {e}",
        )
    return {
        "status": "healthy",
        "database": _database_name(),
        "connected": True,
        "timestamp": utcnow().isoformat(),
    }


@router.get("/ready")
async def readiness():
    """
    Ready means the database answers. Missing Cloudinary or sign-in config
    is reported but does not fail the probe, since browsing still works.
    """
    try:
        _ping_database()
        database_ok = True
    except Exception as e:
        logger.warning(f"Readiness: database unavailable: {e}")
        database_ok = False

    body = {
        "ready": database_ok,
        "database": _database_name(),
        "checks": {
            "database": database_ok,
            "image_uploads": bool(settings.CLOUDINARY_CLOUD_NAME),
            "password_sign_in": bool(settings.FIREBASE_WEB_API_KEY),
            "geocoding_provider": (settings.GEOCODING_PROVIDER or "nominatim").lower(),
        },
        "timestamp": utcnow().isoformat(),
    }
    if not database_ok:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=body)
    return body
