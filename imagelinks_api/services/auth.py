"""Auth Service - Cookie session tokens backed by the key-value store."""

import logging
import secrets
import uuid
from typing import Optional

from fastapi import Depends, Request

from imagelinks_api.core.store import get_key_value_store
from imagelinks_catalog.exceptions import UnauthorizedError
from imagelinks_catalog.interfaces import KeyValueStoreInterface
from imagelinks_core.config import AdminConfig, Settings, get_settings
from imagelinks_core.constants import (
    SESSION_COOKIE_NAME,
    SESSION_KEY_PREFIX,
    SESSION_VALID_MARKER,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """Issues, checks and revokes administrator sessions."""

    def __init__(self, kv: KeyValueStoreInterface, config: AdminConfig):
        self._kv = kv
        self._config = config

    def login(self, username: str, password: str) -> str:
        """Return a new session token, or raise UnauthorizedError."""
        expected = self._config.admin_password.get_secret_value()
        if not expected:
            logger.warning("Login attempted but no administrator password is configured")
            raise UnauthorizedError("Invalid credentials")

        user_ok = secrets.compare_digest(username.encode(), self._config.admin_username.encode())
        password_ok = secrets.compare_digest(password.encode(), expected.encode())
        if not (user_ok and password_ok):
            logger.info("Rejected login attempt")
            raise UnauthorizedError("Invalid credentials")

        token = str(uuid.uuid4())
        self._kv.put(self._key(token), SESSION_VALID_MARKER, ttl=self._config.session_expiry_seconds)
        logger.info("Administrator session created")
        return token

    def is_authenticated(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self._kv.get(self._key(token)) == SESSION_VALID_MARKER

    def logout(self, token: Optional[str]) -> None:
        if token:
            self._kv.delete(self._key(token))

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"


def get_session_manager(
    kv: KeyValueStoreInterface = Depends(get_key_value_store),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    return SessionManager(kv, settings)


def require_admin(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> None:
    """Dependency guarding administrative routes."""
    if not sessions.is_authenticated(request.cookies.get(SESSION_COOKIE_NAME)):
        raise UnauthorizedError("Unauthorized")
