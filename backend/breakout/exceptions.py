"""Breakout-specific exception hierarchy."""

from __future__ import annotations

from typing import Any


class BreakoutError(Exception):
    """Base error for Breakout client failures."""


class TransportError(BreakoutError):
    """Raised when no response was received (DNS, refused connection, timeout)."""


class UnauthenticatedError(BreakoutError):
    """Raised before sending a request that needs a token while none is stored."""


class DuplicateEndpointError(BreakoutError):
    """Raised when two endpoint declarations collide."""


class BreakoutStatusError(BreakoutError):
    """Base error for responses with a non-2xx status code."""

    def __init__(self, status_code: int, body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.text = text
        super().__init__(f"Breakout request failed with status {status_code}: {text}")


class AuthenticationError(BreakoutStatusError):
    """Raised on 401/403, or when a token grant is refused."""


class NotFoundError(BreakoutStatusError):
    """Raised on 404."""


class ValidationError(BreakoutStatusError):
    """Raised on 400/422; ``details`` holds the server's validation payload."""

    DETAIL_KEYS = ("errors", "details", "fieldErrors")

    def __init__(self, status_code: int, body: Any = None, text: str = "") -> None:
        super().__init__(status_code, body, text)
        self.details = self._extract_details(body)

    @classmethod
    def _extract_details(cls, body: Any) -> Any:
        if isinstance(body, dict):
            for key in cls.DETAIL_KEYS:
                if key in body:
                    return body[key]
        return body


class UnexpectedStatusError(BreakoutStatusError):
    """Raised for any other status code outside 2xx."""


class ProtocolError(BreakoutError):
    """Raised when a response body is not the JSON that was expected."""

    def __init__(self, message: str, status_code: int | None = None, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        super().__init__(message)
