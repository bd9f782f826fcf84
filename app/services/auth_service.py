"""
Identity provider - reviewer sign-in/out on Firebase Authentication.

- Sign-in: Identity Toolkit REST (email + password), needs FIREBASE_WEB_API_KEY
- Session lookup: Admin SDK ID-token verification (revocation checked)
- Sign-out: Admin SDK refresh-token revocation

Provider error wording is logged, never returned; callers get one of the
generic AuthError categories.
"""

from firebase_admin import auth as firebase_auth
from firebase_admin.exceptions import DeadlineExceededError, FirebaseError, UnavailableError
from typing import Callable, Dict, List, Optional
import logging
import threading

import requests

from app.config.firebase import ensure_firebase_app
from app.core.exceptions import AuthError
from app.core.settings import settings
from app.models.user import Session, User, UserRole

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, Optional[Session]], None]

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# Identity Toolkit error codes → generic categories
_INVALID_CREDENTIAL_CODES = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
    "MISSING_PASSWORD",
}


def classify_provider_error(message: str) -> str:
    """Map an Identity Toolkit error message ("CODE : detail") to an AuthError category."""
    code = (message or "").split(":", 1)[0].strip().upper()
    if code in _INVALID_CREDENTIAL_CODES:
        return AuthError.INVALID_CREDENTIALS
    return AuthError.UNKNOWN


def _user_from_claims(claims: Dict) -> User:
    role = claims.get("role")
    return User(
        id=claims.get("uid") or claims.get("sub"),
        email=claims.get("email"),
        role=role if role in {r.value for r in UserRole} else None,
        name=claims.get("name"),
        department=claims.get("department"),
    )


class IdentityProvider:
    """
    Wraps Firebase Authentication and fans out session-change notifications.
    """

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key or settings.FIREBASE_WEB_API_KEY
        self.timeout = timeout
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()

    # Change notifications

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """
        Subscribe to sign-in/sign-out events.

        Returns:
            A callable that removes the subscription (safe to call twice)
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _emit(self, uid: str, session: Optional[Session]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(uid, session)
            except Exception as e:
                logger.error(f"Session listener failed: {e}", exc_info=True)

    # Provider calls

    def sign_in(self, email: str, password: str) -> Session:
        """
        Sign in with email and password. Not retried.

        Raises:
            AuthError: InvalidCredentials, NetworkUnavailable or Unknown
        """
        if not self.api_key:
            logger.error("FIREBASE_WEB_API_KEY is not configured; cannot sign in")
            raise AuthError(AuthError.UNKNOWN, "FIREBASE_WEB_API_KEY not configured")

        try:
            resp = requests.post(
                SIGN_IN_URL,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Error signing in: {e}")
            raise AuthError(AuthError.NETWORK_UNAVAILABLE, str(e))

        if resp.status_code != 200:
            try:
                provider_message = resp.json().get("error", {}).get("message", "")
            except ValueError:
                provider_message = resp.text[:200]
            category = classify_provider_error(provider_message)
            if resp.status_code >= 500:
                category = AuthError.NETWORK_UNAVAILABLE
            logger.warning(f"Error signing in ({resp.status_code}): {provider_message}")
            raise AuthError(category, provider_message)

        data = resp.json()
        user = User(
            id=data["localId"],
            email=data.get("email"),
            name=data.get("displayName") or None,
        )
        session = Session(
            user=user,
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            expires_in=int(data["expiresIn"]) if data.get("expiresIn") else None,
        )
        logger.info(f"Reviewer signed in: {user.id}")
        self._emit(user.id, session)
        return session

    def get_current_session(self, id_token: Optional[str]) -> Optional[Session]:
        """
        Resolve the session for an ID token.

        Returns:
            Session, or None for a missing/invalid/expired/revoked token

        Raises:
            AuthError: NetworkUnavailable if signing keys or the revocation
                check cannot be reached, Unknown for other provider errors
        """
        if not id_token:
            return None

        ensure_firebase_app()
        try:
            claims = firebase_auth.verify_id_token(id_token, check_revoked=True)
        except firebase_auth.CertificateFetchError as e:
            logger.error(f"Could not fetch token signing keys: {e}")
            raise AuthError(AuthError.NETWORK_UNAVAILABLE, str(e))
        except (
            firebase_auth.InvalidIdTokenError,
            firebase_auth.UserDisabledError,
            firebase_auth.UserNotFoundError,
            ValueError,
        ) as e:
            logger.info(f"Rejected session token: {e}")
            return None
        except (UnavailableError, DeadlineExceededError) as e:
            logger.error(f"Revocation check unreachable: {e}")
            raise AuthError(AuthError.NETWORK_UNAVAILABLE, str(e))
        except FirebaseError as e:
            logger.error(f"Error verifying session token: {e}")
            raise AuthError(AuthError.UNKNOWN, str(e))

        return Session(user=_user_from_claims(claims), id_token=id_token)

    def sign_out(self, uid: str) -> None:
        """
        Revoke the user's refresh tokens so every session of theirs ends.

        Raises:
            AuthError: If revocation fails (logged first)
        """
        ensure_firebase_app()
        try:
            firebase_auth.revoke_refresh_tokens(uid)
        except (FirebaseError, ValueError) as e:
            logger.error(f"Error signing out {uid}: {e}")
            raise AuthError(AuthError.UNKNOWN, str(e))

        logger.info(f"Reviewer signed out: {uid}")
        self._emit(uid, None)


_identity_provider = None


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = IdentityProvider()
    return _identity_provider
