"""
Shared FastAPI dependencies: the reviewer route guard and the relay guard.
"""

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Iterator, Optional
import logging

from app.core.exceptions import RateLimitError, RelayAccessError, SessionRequiredError
from app.core.settings import settings
from app.services.auth_service import get_identity_provider
from app.services.session_context import SessionContext
from app.utils.security import FixedWindowRateLimiter, hash_client_address, keys_match

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"

# Security scheme
security = HTTPBearer(auto_error=False)

relay_rate_limiter = FixedWindowRateLimiter(limit=settings.RELAY_RATE_LIMIT_PER_MINUTE, window_seconds=60)


def require_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Iterator[SessionContext]:
    """
    Route guard for reviewer endpoints.

    Owns a SessionContext for the duration of the request: subscribed on
    entry, unsubscribed when the response is done. Without a session the
    handler never runs.
    """
    token = credentials.credentials if credentials else request.cookies.get(SESSION_COOKIE)

    context = SessionContext(get_identity_provider(), token)
    try:
        context.start()
        if not context.is_authenticated:
            raise SessionRequiredError("Authentication required")
        yield context
    finally:
        context.stop()


def require_relay_access(
    request: Request,
    x_relay_key: Optional[str] = Header(None, alias="X-Relay-Key"),
) -> None:
    """
    Relay guard.

    With RELAY_API_KEY set, every caller must present it and keyed callers
    (the backend's own notification client) are not rate limited. Without a
    key the relay is open and each client is held to the per-minute limit.
    """
    if settings.RELAY_API_KEY:
        if not keys_match(x_relay_key, settings.RELAY_API_KEY):
            logger.warning(f"Relay call to {request.url.path} rejected: bad or missing relay key")
            raise RelayAccessError("Invalid relay key")
        return

    client = hash_client_address(request.client.host if request.client else None)
    if not relay_rate_limiter.allow(client):
        raise RateLimitError("Too many relay requests, try again later")
