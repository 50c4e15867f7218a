import json
from typing import Any
from urllib.parse import urlparse

import requests
from requests.adapters import BaseAdapter

from breakout import BreakoutClient, BreakoutConfig, RequestExecutor, Session

BASE_URL = "https://api.example.test"
CLIENT_ID = "client_app"
CLIENT_SECRET = "123456789"


def build_config(**overrides: Any) -> BreakoutConfig:
    values = {
        "base_url": BASE_URL,
        "client_id": CLIENT_ID,
        "client_secret": CLIENT_SECRET,
        "cloudinary_cloud": "breakout",
        "cloudinary_api_key": "cloud-key",
    }
    values.update(overrides)
    return BreakoutConfig(**values)


def build_response(status: int = 200, body: Any = None, raw: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if raw is not None:
        response._content = raw.encode("utf-8")
    elif body is None:
        response._content = b""
    else:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.encoding = "utf-8"
    return response


class RecordingAdapter(BaseAdapter):
    """Transport adapter that records prepared requests and replays queued outcomes."""

    def __init__(self) -> None:
        super().__init__()
        self.requests: list[requests.PreparedRequest] = []
        self.timeouts: list[Any] = []
        self._outcomes: list[Any] = []
        self.routes: dict[tuple[str, str], Any] = {}
        self.default: Any = None

    def queue(self, status: int = 200, body: Any = None, raw: str | None = None) -> None:
        self._outcomes.append(build_response(status, body, raw))

    def queue_error(self, exc: Exception) -> None:
        self._outcomes.append(exc)

    def route(self, method: str, path: str, status: int = 200, body: Any = None) -> None:
        self.routes[(method, path)] = (status, body)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        route = self.routes.get((request.method, urlparse(request.url).path))
        if route is not None:
            outcome = build_response(*route)
        elif self._outcomes:
            outcome = self._outcomes.pop(0)
        elif self.default is not None:
            outcome = build_response(*self.default)
        else:
            raise AssertionError(f"Unexpected request {request.method} {request.url}")
        if isinstance(outcome, Exception):
            raise outcome
        outcome.request = request
        outcome.url = request.url
        return outcome

    def close(self) -> None:
        pass

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> requests.PreparedRequest:
        return self.requests[-1]


def build_http() -> tuple[requests.Session, RecordingAdapter]:
    adapter = RecordingAdapter()
    http = requests.Session()
    http.mount("https://", adapter)
    http.mount("http://", adapter)
    return http, adapter


def build_session(timeout: float = 5.0, **overrides: Any) -> tuple[Session, RecordingAdapter]:
    http, adapter = build_http()
    executor = RequestExecutor(session=http, timeout=timeout)
    return Session(build_config(**overrides), executor), adapter


def build_client(token: str | None = "tok1", **overrides: Any) -> tuple[BreakoutClient, RecordingAdapter]:
    session, adapter = build_session(**overrides)
    if token is not None:
        session.set_access_token(token)
    return BreakoutClient(session=session), adapter


def json_body(request: requests.PreparedRequest) -> Any:
    return json.loads(request.body)
