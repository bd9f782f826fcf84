"""
Session context - the current reviewer session as an explicit object.

start() loads the session and subscribes to the provider's change
notifications; stop() unsubscribes. A context holds at most one
subscription. The route guard owns one context per request.
"""

from typing import Callable, Optional
import logging

from app.models.user import Session, User
from app.services.auth_service import IdentityProvider

logger = logging.getLogger(__name__)


class SessionContext:

    def __init__(self, provider: IdentityProvider, id_token: Optional[str] = None):
        self.provider = provider
        self.id_token = id_token
        self.session: Optional[Session] = None
        self.loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_authenticated(self) -> bool:
        return not self.loading and self.session is not None

    @property
    def user(self) -> Optional[User]:
        return self.session.user if self.session else None

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> "SessionContext":
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.on_session_change(self._on_change)
        self.loading = True
        try:
            self.session = self.provider.get_current_session(self.id_token)
        finally:
            self.loading = False
        return self

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, uid: str, session: Optional[Session]) -> None:
        # Only events about the user this context belongs to
        if self.session is None or self.session.user.id != uid:
            return
        if session is None:
            logger.info(f"Session ended for {uid}")
        self.session = session

    def __enter__(self) -> "SessionContext":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
