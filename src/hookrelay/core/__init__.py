"""
Core module for shared configuration and errors.
"""

from hookrelay.core.config import (
    AppConfig,
    RelayConfig,
    ServerConfig,
    ThrottleConfig,
    get_config,
    reload_config,
)
from hookrelay.core.errors import (
    AlreadyExists,
    DeliveryFailed,
    InvalidInput,
    RateLimited,
    RelayError,
    Unexpected,
)

__all__ = [
    "AppConfig",
    "RelayConfig",
    "ServerConfig",
    "ThrottleConfig",
    "get_config",
    "reload_config",
    "AlreadyExists",
    "DeliveryFailed",
    "InvalidInput",
    "RateLimited",
    "RelayError",
    "Unexpected",
]
