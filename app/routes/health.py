"""
Health check endpoints.

- /health: process is up
- /health/db: reports store answers
- /health/integrations: which outbound integrations are configured
"""

from fastapi import APIRouter
from app.config.firebase import get_db
from app.core.exceptions import StoreError
from app.core.settings import settings
from app.services.email_service import get_email_service
from app.services.telephony_service import get_telephony_service
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": _now(),
    }


@router.get("/db")
def database_health():
    """
    Reads the reports collection once (limit 1) to verify the store answers.

    Raises:
        503: If the store cannot be reached
    """
    try:
        sample = get_db().collection("reports").limit(1).get()
    except Exception as e:
        logger.error(f"Store health check failed: {e}")
        raise StoreError(f"Database connection failed: {e}")

    return {
        "status": "healthy",
        "database": "mock" if settings.USE_MOCK_DB else "firestore",
        "connected": True,
        "has_reports": len(sample) > 0,
        "timestamp": _now(),
    }


@router.get("/integrations")
def integrations_health():
    """
    Configuration readiness of the outbound integrations. No calls are made.
    """
    email = get_email_service()
    return {
        "identity_provider": bool(settings.FIREBASE_WEB_API_KEY),
        "email": bool(email.user and email.password and email.recipient),
        "voice_alert": get_telephony_service().is_configured(),
        "relay_key_required": bool(settings.RELAY_API_KEY),
        "anchor_base_url": settings.ANCHOR_BASE_URL,
        "timestamp": _now(),
    }
