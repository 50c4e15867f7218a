"""REST client for the Breakout backend (accounts, events, teams, postings, invoices)."""

from __future__ import annotations

import dataclasses
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import requests

from .config import BreakoutConfig
from .endpoints import ENDPOINTS, EndpointRegistry
from .exceptions import BreakoutError, DuplicateEndpointError
from .executor import RequestExecutor, RequestHook
from .logging import log_request
from .media import CloudinaryUploader, Image
from .session import Session

logger = logging.getLogger(__name__)

FANOUT_WORKERS = 8

STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
STATUS_WITHDRAWN = "withdrawn"
STATUS_WITH_PROOF = "WITH_PROOF"


class BreakoutClient:
    """Breakout client exposing every endpoint of ``ENDPOINTS`` plus composite helpers.

    Endpoints are called by name, ``client.get_team_by_id(42)``, or through
    ``client.call("get_team_by_id", 42)``.
    """

    def __init__(
        self,
        config: BreakoutConfig | None = None,
        session: Session | None = None,
        http: requests.Session | None = None,
        on_request: RequestHook | None = None,
        endpoints: EndpointRegistry = ENDPOINTS,
    ) -> None:
        if session is None:
            if config is None:
                raise ValueError("BreakoutClient needs a config or a session")
            session = self._build_default_session(config, http, on_request)
        if endpoints is not ENDPOINTS:
            check_endpoint_names(type(self), endpoints)
        self.session = session
        self.endpoints = endpoints
        self.uploader = CloudinaryUploader(session)

    @property
    def config(self) -> BreakoutConfig:
        return self.session.config

    # ------------------------------------------------------------------
    # Endpoint dispatch
    # ------------------------------------------------------------------
    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        descriptor = self.endpoints.get(name).build(*args, **kwargs)
        return self.session.executor.execute(descriptor, self.session)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        endpoints = self.__dict__.get("endpoints")
        if endpoints is None or name not in endpoints:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return functools.partial(self.call, name)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def authenticate(self, username: str, password: str) -> dict[str, Any]:
        return self.session.authenticate(username, password)

    login = authenticate

    def refresh(self, refresh_token: str) -> dict[str, Any]:
        return self.session.refresh(refresh_token)

    def set_access_token(self, token: str) -> None:
        self.session.set_access_token(token)

    def clear_access_token(self) -> None:
        self.session.clear_access_token()

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    # ------------------------------------------------------------------
    # Composite helpers
    # ------------------------------------------------------------------
    def is_user_participant(self) -> bool:
        me = self.call("get_me")
        return bool(me.get("participant"))

    def get_all_invitations(self) -> list[dict[str, Any]]:
        """Invitations of the current user across all events, each with its team and event state."""
        events = self.call("get_all_events")
        with ThreadPoolExecutor(max_workers=FANOUT_WORKERS) as pool:
            batches = list(pool.map(lambda event: self.call("get_invitations", event["id"]), events))
            invitations = [invitation for batch in batches for invitation in batch]
            team_ids = list(dict.fromkeys(invitation["team"] for invitation in invitations))
            teams = dict(zip(team_ids, pool.map(lambda team_id: self.call("get_team_by_id", team_id), team_ids)))

        events_by_id = {event["id"]: event for event in events}
        results = []
        for invitation in invitations:
            team = teams[invitation["team"]]
            event = events_by_id.get(team.get("event"), {})
            results.append({**invitation, "team": team, "current": event.get("current")})
        logger.debug("Collected %d invitations across %d events", len(results), len(events))
        return results

    def join_team(self, team_id: Any) -> Any:
        me = self.call("get_me")
        # The member route rejects placeholder ids, so any real event id is used.
        events = self.call("get_all_events")
        if not events:
            raise BreakoutError("No event available to join a team through")
        return self.call("add_team_member", events[0]["id"], team_id, email=me["email"])

    def invite_to_team(self, team_id: Any, email: str) -> Any:
        team = self.call("get_team_by_id", team_id)
        return self.call("invite_to_team_at_event", team["event"], team_id, email=email)

    def accept_sponsoring(self, event_id: Any, team_id: Any, sponsoring_id: Any) -> Any:
        return self._change_sponsoring_status(event_id, team_id, sponsoring_id, STATUS_ACCEPTED)

    def reject_sponsoring(self, event_id: Any, team_id: Any, sponsoring_id: Any) -> Any:
        return self._change_sponsoring_status(event_id, team_id, sponsoring_id, STATUS_REJECTED)

    def withdraw_sponsoring(self, event_id: Any, team_id: Any, sponsoring_id: Any) -> Any:
        return self._change_sponsoring_status(event_id, team_id, sponsoring_id, STATUS_WITHDRAWN)

    def accept_challenge(self, challenge_id: Any) -> Any:
        return self.call("change_challenge_status", challenge_id, status=STATUS_ACCEPTED)

    def reject_challenge(self, challenge_id: Any) -> Any:
        return self.call("change_challenge_status", challenge_id, status=STATUS_REJECTED)

    def withdraw_challenge(self, challenge_id: Any) -> Any:
        return self.call("change_challenge_status", challenge_id, status=STATUS_WITHDRAWN)

    def add_proof_to_challenge(self, challenge_id: Any, posting_id: Any) -> Any:
        return self.call(
            "change_challenge_status",
            challenge_id,
            status=STATUS_WITH_PROOF,
            posting_id=posting_id,
        )

    def upload_image(self, image: Image, signed_params: dict[str, Any] | None = None) -> Any:
        if signed_params is None:
            signed_params = self.call("sign_cloudinary_params")
        return self.uploader.upload(image, signed_params)

    def clone(self, debug: bool = False) -> "BreakoutClient":
        """A client with the same settings and a fresh, unauthenticated session."""
        return BreakoutClient(config=dataclasses.replace(self.config, debug=debug))

    def close(self) -> None:
        self.session.executor.http.close()

    def __enter__(self) -> "BreakoutClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_default_session(
        self,
        config: BreakoutConfig,
        http: requests.Session | None,
        on_request: RequestHook | None,
    ) -> Session:
        if on_request is None and config.debug:
            on_request = log_request
        executor = RequestExecutor(session=http, timeout=config.timeout, on_request=on_request)
        return Session(config, executor)

    def _change_sponsoring_status(
        self, event_id: Any, team_id: Any, sponsoring_id: Any, status: str
    ) -> Any:
        return self.call("change_sponsoring_status", event_id, team_id, sponsoring_id, status=status)


def check_endpoint_names(cls: type, endpoints: EndpointRegistry) -> None:
    """Refuse endpoint names that would be hidden by a real attribute of ``cls``."""
    for name in endpoints.names():
        if hasattr(cls, name):
            raise DuplicateEndpointError(
                f"Endpoint {name!r} is shadowed by {cls.__name__}.{name}"
            )


check_endpoint_names(BreakoutClient, ENDPOINTS)
