"""Declarative table of the Breakout REST endpoints.

Every endpoint is a fixed method, a path template, an auth mode and the
shape of its query and body. ``Endpoint.build`` turns call arguments into a
``RequestDescriptor``; the registry refuses two declarations with the same
name or the same route.

Some routes need an event, team or posting id segment the backend never
checks. Those segments are listed in ``ignored`` and filled with
``IGNORED_PATH_VALUE`` unless the caller passes a value.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from string import Formatter
from typing import Any, Callable, Iterable, Iterator
from urllib.parse import quote

from .exceptions import DuplicateEndpointError
from .models import AuthMode, RequestDescriptor

IGNORED_PATH_VALUE = "-1"

_PLACEHOLDER = re.compile(r"\{[^}]*\}")


class _Required:
    def __repr__(self) -> str:
        return "REQUIRED"


REQUIRED: Any = _Required()


def unix_now() -> int:
    return int(time.time())


def unix_now_precise() -> float:
    return time.time()


@dataclass(frozen=True, slots=True)
class Param:
    """A query parameter or JSON body field of an endpoint."""

    name: str
    wire: str | None = None
    default: Any = REQUIRED
    factory: Callable[[], Any] | None = None

    @property
    def wire_name(self) -> str:
        return self.wire or self.name

    def take(self, kwargs: dict[str, Any], endpoint: str) -> Any:
        value = kwargs.pop(self.name, None)
        if value is not None:
            return value
        if self.factory is not None:
            return self.factory()
        if self.default is REQUIRED:
            raise TypeError(f"{endpoint}() missing required argument: {self.name!r}")
        return self.default


@dataclass(frozen=True, slots=True)
class Endpoint:
    name: str
    method: str
    path: str
    auth: AuthMode = AuthMode.BEARER
    query: tuple[Param, ...] = ()
    fields: tuple[Param, ...] = ()
    body: Param | None = None
    ignored: tuple[str, ...] = ()
    open_query: bool = False

    @property
    def path_params(self) -> tuple[str, ...]:
        return tuple(name for _, name, _, _ in Formatter().parse(self.path) if name)

    @property
    def route(self) -> tuple[str, str]:
        return self.method, _PLACEHOLDER.sub("{}", self.path)

    def build(self, *args: Any, **kwargs: Any) -> RequestDescriptor:
        positional = [name for name in self.path_params if name not in self.ignored]
        if len(args) > len(positional):
            raise TypeError(
                f"{self.name}() takes {len(positional)} positional arguments but {len(args)} were given"
            )
        for name, value in zip(positional, args):
            if name in kwargs:
                raise TypeError(f"{self.name}() got multiple values for argument {name!r}")
            kwargs[name] = value

        segments: dict[str, str] = {}
        for name in self.path_params:
            if name in kwargs:
                value = kwargs.pop(name)
            elif name in self.ignored:
                value = IGNORED_PATH_VALUE
            else:
                raise TypeError(f"{self.name}() missing required argument: {name!r}")
            if value is None:
                raise TypeError(f"{self.name}() argument {name!r} must not be None")
            segments[name] = quote(str(value), safe="")

        query: dict[str, Any] = {}
        for param in self.query:
            value = param.take(kwargs, self.name)
            if value is not None:
                query[param.wire_name] = value
        if self.open_query:
            query.update(kwargs.pop("params", None) or {})

        payload: Any = None
        if self.body is not None:
            payload = self.body.take(kwargs, self.name)
        elif self.fields:
            payload = {}
            for param in self.fields:
                value = param.take(kwargs, self.name)
                if value is not None:
                    payload[param.wire_name] = value

        if kwargs:
            unexpected = ", ".join(sorted(kwargs))
            raise TypeError(f"{self.name}() got unexpected keyword arguments: {unexpected}")

        return RequestDescriptor(
            method=self.method,
            path=self.path.format(**segments),
            query=query,
            json=payload,
            auth=self.auth,
        )


class EndpointRegistry:
    """Endpoints keyed by name and by route; collisions fail at registration."""

    def __init__(self, endpoints: Iterable[Endpoint] = ()) -> None:
        self._by_name: dict[str, Endpoint] = {}
        self._by_route: dict[tuple[str, str], Endpoint] = {}
        for endpoint in endpoints:
            self.register(endpoint)

    def register(self, endpoint: Endpoint) -> Endpoint:
        if endpoint.name in self._by_name:
            raise DuplicateEndpointError(f"Endpoint {endpoint.name!r} is declared twice")
        existing = self._by_route.get(endpoint.route)
        if existing is not None:
            raise DuplicateEndpointError(
                f"{endpoint.method} {endpoint.path} is already declared as {existing.name!r}"
            )
        self._by_name[endpoint.name] = endpoint
        self._by_route[endpoint.route] = endpoint
        return endpoint

    def get(self, name: str) -> Endpoint:
        return self._by_name[name]

    def names(self) -> list[str]:
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


NONE = AuthMode.NONE
OPTIONAL = AuthMode.OPTIONAL
CLIENT = AuthMode.CLIENT

BODY = Param("body")
DATE = Param("date", factory=unix_now)
USERID = Param("userid", default=None)

ENDPOINTS = EndpointRegistry(
    [
        # Accounts and users
        Endpoint("get_me", "GET", "/me/"),
        Endpoint(
            "create_account",
            "POST",
            "/user/",
            auth=CLIENT,
            fields=(Param("email"), Param("password"), Param("newsletter", default=False)),
        ),
        Endpoint("request_password_reset", "POST", "/user/requestreset/", auth=NONE, fields=(Param("email"),)),
        Endpoint(
            "reset_password",
            "POST",
            "/user/passwordreset/",
            auth=NONE,
            fields=(Param("email"), Param("token"), Param("password")),
        ),
        Endpoint("get_user", "GET", "/user/{user_id}/", auth=OPTIONAL),
        Endpoint("update_user", "PUT", "/user/{user_id}/", body=BODY),
        Endpoint("delete_account", "DELETE", "/user/{user_id}/"),
        Endpoint("update_notification_token", "PUT", "/user/{user_id}/notificationtoken", body=BODY),
        Endpoint("remove_notification_token", "DELETE", "/user/{user_id}/notificationtoken"),
        Endpoint("check_email_existence", "GET", "/user/exists/", auth=OPTIONAL, query=(Param("email"),)),
        Endpoint("search_user", "GET", "/user/search/{search}/", auth=OPTIONAL),
        Endpoint("remove_user_logo", "DELETE", "/user/{user_id}/logo"),
        Endpoint("remove_sponsor_url", "DELETE", "/user/{user_id}/url"),
        Endpoint("get_invitation_by_token", "GET", "/user/invitation", auth=NONE, query=(Param("token"),)),
        Endpoint("activate_user", "GET", "/activation", auth=NONE, query=(Param("token"),)),
        # Administration
        Endpoint("make_admin", "POST", "/admin/user/{user_id}/admin/", query=(Param("authority"),)),
        Endpoint("remove_admin", "DELETE", "/admin/user/{user_id}/admin/", query=(Param("authority"),)),
        Endpoint("swap_passwords", "POST", "/admin/user/{user_id}/swappasswords/"),
        # Events
        Endpoint("get_all_events", "GET", "/event/"),
        Endpoint("create_event", "POST", "/event/", body=BODY),
        Endpoint("get_event", "GET", "/event/{event_id}/", auth=OPTIONAL),
        Endpoint("update_event", "PUT", "/event/{event_id}/", body=BODY),
        Endpoint("get_all_open_events", "GET", "/me/event/open/"),
        Endpoint("get_donate_sum_for_event", "GET", "/event/{event_id}/donatesum/", auth=OPTIONAL),
        Endpoint("get_distance_for_event", "GET", "/event/{event_id}/distance/", auth=OPTIONAL),
        Endpoint("fetch_locations_for_event", "GET", "/event/{event_id}/location/", auth=OPTIONAL),
        Endpoint("add_email_whitelist", "POST", "/event/{event_id}/whitelistMail/", fields=(Param("email"),)),
        Endpoint("add_domain_whitelist", "POST", "/event/{event_id}/whitelistDomain/", fields=(Param("domain"),)),
        # Teams
        Endpoint("get_invitations", "GET", "/event/{event_id}/team/invitation/"),
        Endpoint("create_team", "POST", "/event/{event_id}/team/", body=BODY),
        Endpoint("fetch_teams_for_event", "GET", "/event/{event_id}/team/", auth=OPTIONAL),
        Endpoint("get_team_by_id", "GET", "/event/{event_id}/team/{team_id}/", ignored=("event_id",)),
        Endpoint(
            "add_team_member",
            "POST",
            "/event/{event_id}/team/{team_id}/member/",
            fields=(Param("email"),),
        ),
        Endpoint(
            "invite_to_team_at_event",
            "POST",
            "/event/{event_id}/team/{team_id}/invitation/",
            fields=(Param("email"),),
        ),
        Endpoint("delete_team", "DELETE", "/team/{team_id}/"),
        Endpoint("get_invoice_for_team", "GET", "/team/{team_id}/startingfee"),
        Endpoint(
            "get_distance_for_team",
            "GET",
            "/event/{event_id}/team/{team_id}/distance/",
            auth=OPTIONAL,
            ignored=("event_id",),
        ),
        Endpoint(
            "get_donate_sum_for_team",
            "GET",
            "/event/{event_id}/team/{team_id}/donatesum/",
            auth=OPTIONAL,
            ignored=("event_id",),
        ),
        Endpoint(
            "fetch_locations_for_team",
            "GET",
            "/event/{event_id}/team/{team_id}/location/",
            auth=OPTIONAL,
            query=(Param("per_team", wire="perTeam", default=100),),
            ignored=("event_id",),
        ),
        Endpoint(
            "upload_location_for_team",
            "POST",
            "/event/{event_id}/team/{team_id}/location/",
            fields=(Param("latitude"), Param("longitude"), DATE),
            ignored=("event_id",),
        ),
        Endpoint(
            "fetch_postings_for_team",
            "GET",
            "/event/{event_id}/team/{team_id}/posting/",
            auth=OPTIONAL,
            ignored=("event_id",),
        ),
        # Sponsorings and challenges
        Endpoint("fetch_challenges_for_user", "GET", "/user/{user_id}/sponsor/challenge/"),
        Endpoint("fetch_sponsorings_for_user", "GET", "/user/{user_id}/sponsor/sponsoring/"),
        Endpoint("fetch_challenges_for_team", "GET", "/team/{team_id}/challenge/", auth=OPTIONAL),
        Endpoint("fetch_sponsorings_for_team", "GET", "/team/{team_id}/sponsoring/", auth=OPTIONAL),
        Endpoint(
            "fetch_challenges_for_team_at_event",
            "GET",
            "/event/{event_id}/team/{team_id}/challenge/",
            auth=OPTIONAL,
            ignored=("event_id",),
        ),
        Endpoint(
            "fetch_sponsorings_for_team_at_event",
            "GET",
            "/event/{event_id}/team/{team_id}/sponsoring/",
            auth=OPTIONAL,
            ignored=("event_id",),
        ),
        Endpoint(
            "add_sponsoring",
            "POST",
            "/event/{event_id}/team/{team_id}/sponsoring/",
            body=BODY,
            ignored=("event_id",),
        ),
        Endpoint(
            "change_sponsoring_status",
            "PUT",
            "/event/{event_id}/team/{team_id}/sponsoring/{sponsoring_id}/status/",
            fields=(Param("status"),),
        ),
        Endpoint(
            "add_challenge",
            "POST",
            "/event/{event_id}/team/{team_id}/challenge/",
            body=BODY,
            ignored=("event_id",),
        ),
        Endpoint(
            "change_challenge_status",
            "PUT",
            "/event/{event_id}/team/{team_id}/challenge/{challenge_id}/status/",
            fields=(Param("status"), Param("posting_id", wire="postingId", default=None)),
            ignored=("event_id", "team_id"),
        ),
        # Postings
        Endpoint(
            "fetch_postings",
            "GET",
            "/posting/",
            auth=OPTIONAL,
            query=(
                Param("page", default=0),
                Param("limit", default=None),
                Param("offset", default=None),
                USERID,
            ),
        ),
        Endpoint(
            "create_posting",
            "POST",
            "/posting/",
            fields=(
                Param("text", default=None),
                Param("posting_location", wire="postingLocation", default=None),
                Param("media", default=None),
                Param("upload_media_types", wire="uploadMediaTypes", default=None),
                Param("date", factory=unix_now_precise),
            ),
        ),
        Endpoint("get_posting", "GET", "/posting/{posting_id}/", auth=OPTIONAL, query=(USERID,)),
        Endpoint("delete_posting", "DELETE", "/posting/{posting_id}/"),
        Endpoint("get_postings_by_ids", "POST", "/posting/get/ids", auth=OPTIONAL, query=(USERID,), body=BODY),
        Endpoint("get_posting_ids_since", "GET", "/posting/get/since/{posting_id}/", auth=OPTIONAL),
        Endpoint("get_postings_by_hashtag", "GET", "/posting/hashtag/{hashtag}/", auth=OPTIONAL, query=(USERID,)),
        Endpoint("like_posting", "POST", "/posting/{posting_id}/like/", fields=(DATE,)),
        Endpoint("get_likes_for_posting", "GET", "/posting/{posting_id}/like/", auth=OPTIONAL),
        Endpoint("create_comment", "POST", "/posting/{posting_id}/comment/", fields=(Param("text"), DATE)),
        Endpoint(
            "delete_comment",
            "DELETE",
            "/posting/{posting_id}/comment/{comment_id}/",
            ignored=("posting_id",),
        ),
        Endpoint("delete_media", "DELETE", "/media/{media_id}/"),
        Endpoint(
            "sign_cloudinary_params",
            "POST",
            "/media/signCloudinaryParams/",
            body=Param("body", factory=dict),
        ),
        # Messaging
        Endpoint("create_group_message", "POST", "/messaging/", body=BODY),
        Endpoint("get_group_message", "GET", "/messaging/{group_message_id}/"),
        Endpoint("add_users_to_group_message", "PUT", "/messaging/{group_message_id}/", body=BODY),
        Endpoint(
            "add_message_to_group_message",
            "POST",
            "/messaging/{group_message_id}/message/",
            fields=(Param("text"), DATE),
        ),
        # Invoicing
        Endpoint(
            "fetch_invoices_for_event",
            "GET",
            "/sponsoringinvoice/{event_id}/",
            query=(Param("detailed", default=False),),
        ),
        Endpoint("search_invoices", "GET", "/sponsoringinvoice/search/", open_query=True),
        Endpoint("get_all_invoices", "GET", "/invoice/sponsoring/"),
        Endpoint("create_invoice", "POST", "/invoice/sponsoring/", body=BODY),
        Endpoint("get_invoices_for_team", "GET", "/invoice/sponsoring/{team_id}/"),
        Endpoint(
            "add_payment",
            "POST",
            "/invoice/{invoice_id}/payment/",
            fields=(Param("amount"), Param("fidor_id", wire="fidorId", default=None), DATE),
        ),
    ]
)
