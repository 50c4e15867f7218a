"""Session state: backend credentials and the current access token."""

from __future__ import annotations

import logging
import threading
from typing import Any

from .config import BreakoutConfig
from .exceptions import AuthenticationError, BreakoutStatusError, ProtocolError
from .executor import RequestExecutor
from .logging import log_request, log_token_event
from .models import AuthMode, RequestDescriptor

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/token"
TOKEN_SCOPE = "read write"


class Session:
    """Holds the base URL, client credentials and, once authenticated, the access token.

    The token is only ever changed by a successful grant, by
    ``set_access_token`` or by ``clear_access_token``.
    """

    def __init__(
        self,
        config: BreakoutConfig,
        executor: RequestExecutor | None = None,
    ) -> None:
        self.config = config
        self.executor = executor or RequestExecutor(
            timeout=config.timeout,
            on_request=log_request if config.debug else None,
        )
        self._access_token: str | None = None
        self._lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def client_secret(self) -> str:
        return self.config.client_secret

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------
    def authenticate(self, username: str, password: str) -> dict[str, Any]:
        """Password grant; stores the returned access token on success."""
        return self._grant(
            "password",
            {"username": username, "password": password},
        )

    def refresh(self, refresh_token: str) -> dict[str, Any]:
        """Refresh-token grant; the stored token is untouched unless this succeeds."""
        return self._grant(
            "refresh_token",
            {"refresh_token": refresh_token},
        )

    def set_access_token(self, token: str) -> None:
        with self._lock:
            self._access_token = token
        log_token_event(logger, "external", token, level_success=logging.DEBUG)

    def clear_access_token(self) -> None:
        with self._lock:
            self._access_token = None

    def current_auth_header(self) -> str | None:
        token = self._access_token
        if token is None:
            return None
        return f"Bearer {token}"

    def _grant(self, grant_type: str, fields: dict[str, str]) -> dict[str, Any]:
        descriptor = RequestDescriptor(
            method="POST",
            path=TOKEN_PATH,
            form={"grant_type": grant_type, "scope": TOKEN_SCOPE, **fields},
            auth=AuthMode.CLIENT,
        )
        try:
            payload = self.executor.execute(descriptor, self)
        except BreakoutStatusError as exc:
            log_token_event(logger, grant_type, None)
            if isinstance(exc, AuthenticationError):
                raise
            raise AuthenticationError(exc.status_code, exc.body, exc.text) from exc

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            log_token_event(logger, grant_type, None)
            raise ProtocolError(f"Token response for {grant_type} grant has no access_token")

        with self._lock:
            self._access_token = token
        log_token_event(logger, grant_type, token)
        return payload
