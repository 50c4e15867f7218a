"""Breakout REST client: OAuth2 session, request executor and endpoint table."""

from .client import BreakoutClient
from .config import BreakoutConfig, config_from_env, default_config
from .endpoints import ENDPOINTS, IGNORED_PATH_VALUE, Endpoint, EndpointRegistry, Param
from .exceptions import (
    AuthenticationError,
    BreakoutError,
    BreakoutStatusError,
    DuplicateEndpointError,
    NotFoundError,
    ProtocolError,
    TransportError,
    UnauthenticatedError,
    UnexpectedStatusError,
    ValidationError,
)
from .executor import RequestExecutor
from .media import CloudinaryUploader
from .models import AuthMode, RequestDescriptor
from .session import Session

__version__ = "0.1.0"

__all__ = [
    "BreakoutClient",
    "BreakoutConfig",
    "config_from_env",
    "default_config",
    "ENDPOINTS",
    "IGNORED_PATH_VALUE",
    "Endpoint",
    "EndpointRegistry",
    "Param",
    "AuthenticationError",
    "BreakoutError",
    "BreakoutStatusError",
    "DuplicateEndpointError",
    "NotFoundError",
    "ProtocolError",
    "TransportError",
    "UnauthenticatedError",
    "UnexpectedStatusError",
    "ValidationError",
    "RequestExecutor",
    "CloudinaryUploader",
    "AuthMode",
    "RequestDescriptor",
    "Session",
]
