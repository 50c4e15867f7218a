"""Request executor: one HTTP call per invocation, uniformly classified."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping
from urllib.parse import quote, urlencode, urlparse

import requests
from requests.auth import AuthBase, HTTPBasicAuth

from .config import DEFAULT_TIMEOUT, valid_timeout
from .exceptions import (
    AuthenticationError,
    BreakoutStatusError,
    NotFoundError,
    ProtocolError,
    TransportError,
    UnauthenticatedError,
    UnexpectedStatusError,
    ValidationError,
)
from .models import AuthMode, RequestDescriptor

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

RequestHook = Callable[[str, str], None]

AUTH_STATUSES = (401, 403)
VALIDATION_STATUSES = (400, 422)


class RequestExecutor:
    """Performs exactly one HTTP call per ``execute`` and normalizes the outcome."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        on_request: RequestHook | None = None,
    ) -> None:
        if not valid_timeout(timeout):
            raise ValueError("timeout must be a positive, finite number of seconds")
        self.http = session or requests.Session()
        self.timeout = timeout
        self.on_request = on_request

    def execute(self, descriptor: RequestDescriptor, session: Session) -> Any:
        url = build_url(session.base_url, descriptor.path, descriptor.query)
        headers, auth = self._auth_material(descriptor, session, url)

        if self.on_request is not None:
            self.on_request(descriptor.method, url)

        try:
            response = self.http.request(
                descriptor.method,
                url,
                json=descriptor.json,
                data=descriptor.form,
                files=descriptor.files,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        except requests.exceptions.InvalidJSONError as exc:
            raise TypeError(f"{descriptor.method} {descriptor.path}: body is not JSON serializable") from exc
        except requests.RequestException as exc:
            logger.warning(
                "Breakout request %s %s failed", descriptor.method, _loggable(url), exc_info=exc
            )
            raise TransportError(f"{descriptor.method} {_loggable(url)} failed: {exc}") from exc

        logger.debug(
            "Breakout %s %s -> %s", descriptor.method, _loggable(url), response.status_code
        )
        return classify_response(response)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _auth_material(
        self, descriptor: RequestDescriptor, session: Session, url: str
    ) -> tuple[dict[str, str], AuthBase]:
        headers = {"Accept": "application/json"}
        if descriptor.auth is AuthMode.CLIENT:
            return headers, HTTPBasicAuth(session.client_id, session.client_secret)
        if descriptor.auth is AuthMode.NONE:
            return headers, HeaderAuth(None)

        header = session.current_auth_header()
        if header is None and descriptor.auth is AuthMode.BEARER:
            raise UnauthenticatedError(
                f"{descriptor.method} {descriptor.path} requires an access token"
            )
        if header is None:
            return headers, HeaderAuth(None)
        if not same_origin(session.base_url, url):
            if descriptor.auth is AuthMode.BEARER:
                raise UnauthenticatedError(
                    f"Refusing to send the access token to a foreign host: {urlparse(url).netloc}"
                )
            return headers, HeaderAuth(None)
        return headers, HeaderAuth(header)


class HeaderAuth(AuthBase):
    """Sets ``Authorization`` to exactly ``value``, or removes it when ``value`` is None.

    It takes precedence over ``requests.Session.auth``, session-level headers
    and netrc credentials.
    """

    def __init__(self, value: str | None) -> None:
        self.value = value

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if self.value is None:
            request.headers.pop("Authorization", None)
        else:
            request.headers["Authorization"] = self.value
        return request


def build_url(base_url: str, path: str, query: Mapping[str, Any] | None = None) -> str:
    if path.startswith(("http://", "https://")):
        url = path
    else:
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
    encoded = encode_query(query or {})
    if not encoded:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{encoded}"


def encode_query(query: Mapping[str, Any]) -> str:
    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        if not values:
            raise TypeError(f"Query parameter {key!r} is an empty list")
        for item in values:
            if item is None:
                raise TypeError(f"Query parameter {key!r} has no value")
            pairs.append((key, query_value(item)))
    return urlencode(pairs, quote_via=quote)


def query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def same_origin(base_url: str, url: str) -> bool:
    base, target = urlparse(base_url), urlparse(url)
    return (base.scheme, base.netloc) == (target.scheme, target.netloc)


def classify_response(response: requests.Response) -> Any:
    status = response.status_code
    text = response.text
    if 200 <= status < 300:
        if not text.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Expected a JSON body (status {status})", status_code=status, text=text
            ) from exc
    raise status_error(status, _parse_error_body(response), text)


def status_error(status: int, body: Any, text: str) -> BreakoutStatusError:
    if status in AUTH_STATUSES:
        return AuthenticationError(status, body, text)
    if status == 404:
        return NotFoundError(status, body, text)
    if status in VALIDATION_STATUSES:
        return ValidationError(status, body, text)
    return UnexpectedStatusError(status, body, text)


def _parse_error_body(response: requests.Response) -> Any:
    if not response.text.strip():
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _loggable(url: str) -> str:
    # Query strings may carry emails or search terms; logs get the path only.
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
