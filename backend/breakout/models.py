from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping


class AuthMode(enum.Enum):
    NONE = "none"
    OPTIONAL = "optional"
    BEARER = "bearer"
    CLIENT = "client"


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """One pending HTTP call against the backend (or a third-party host)."""

    method: str
    path: str
    query: Mapping[str, Any] = field(default_factory=dict)
    json: Any = None
    form: Mapping[str, Any] | None = None
    files: Mapping[str, Any] | None = None
    auth: AuthMode = AuthMode.BEARER

    @property
    def requires_auth(self) -> bool:
        return self.auth is AuthMode.BEARER

    @property
    def is_absolute(self) -> bool:
        return self.path.startswith(("http://", "https://"))
