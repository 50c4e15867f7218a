from __future__ import annotations

import math
import os
from dataclasses import dataclass
from urllib.parse import urlparse

DEFAULT_TIMEOUT = 30.0
TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True, slots=True)
class BreakoutConfig:
    """Connection settings for one Breakout backend."""

    base_url: str
    client_id: str
    client_secret: str
    cloudinary_cloud: str = ""
    cloudinary_api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if urlparse(self.base_url).scheme not in ("http", "https"):
            raise ValueError(f"Invalid protocol in base_url: {self.base_url}")
        if not self.client_id:
            raise ValueError("client_id must not be empty")
        if not self.client_secret:
            raise ValueError("client_secret must not be empty")
        if not valid_timeout(self.timeout):
            raise ValueError("timeout must be a positive, finite number of seconds")


def valid_timeout(timeout: float) -> bool:
    return isinstance(timeout, (int, float)) and math.isfinite(timeout) and timeout > 0


def default_config(base_url: str, client_id: str, client_secret: str) -> BreakoutConfig:
    return BreakoutConfig(base_url=base_url, client_id=client_id, client_secret=client_secret)


def config_from_env(environ: dict[str, str] | None = None) -> BreakoutConfig:
    """Build a config from ``BREAKOUT_*`` environment variables."""
    env = os.environ if environ is None else environ
    return BreakoutConfig(
        base_url=env.get("BREAKOUT_URL", ""),
        client_id=env.get("BREAKOUT_CLIENT_ID", ""),
        client_secret=env.get("BREAKOUT_CLIENT_SECRET", ""),
        cloudinary_cloud=env.get("BREAKOUT_CLOUDINARY_CLOUD", ""),
        cloudinary_api_key=env.get("BREAKOUT_CLOUDINARY_API_KEY", ""),
        timeout=float(env.get("BREAKOUT_TIMEOUT", DEFAULT_TIMEOUT)),
        debug=env.get("BREAKOUT_DEBUG", "").lower() in TRUTHY,
    )
