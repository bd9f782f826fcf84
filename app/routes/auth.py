"""
Authentication endpoints - reviewer email/password login.
"""

from fastapi import APIRouter, Depends, Response
from app.core.settings import settings
from app.dependencies import SESSION_COOKIE, require_session
from app.models.user import AuthResponse, LoginRequest, User
from app.services.auth_service import get_identity_provider
from app.services.session_context import SessionContext
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, response: Response):
    """
    Sign in a reviewer.

    Returns the session (ID token for the Authorization header) and also
    sets it as an HTTP-only cookie for browser use.

    Raises:
        401: InvalidCredentials
        503: NetworkUnavailable
        500: Unknown
    """
    session = get_identity_provider().sign_in(request.email, request.password)
    response.set_cookie(
        SESSION_COOKIE,
        session.id_token,
        max_age=session.expires_in,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
    )
    return AuthResponse(success=True, message="Signed in", session=session)


@router.post("/logout", response_model=AuthResponse)
def logout(response: Response, session: SessionContext = Depends(require_session)):
    """
    Sign out: revokes the reviewer's refresh tokens and clears the cookie.
    """
    get_identity_provider().sign_out(session.user.id)
    response.delete_cookie(SESSION_COOKIE)
    return AuthResponse(success=True, message="Signed out")


@router.get("/me", response_model=User)
def get_current_user(session: SessionContext = Depends(require_session)):
    """
    The signed-in reviewer.
    """
    return session.user
