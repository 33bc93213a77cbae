from __future__ import annotations

from .app import (
    DEFAULT_ADMIN_RATE_LIMIT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_SETTINGS_PATH,
    AppState,
    RateLimitExceeded,
    RateLimiter,
    ServerConfig,
    create_app,
    get_app_state,
)

__all__ = [
    "DEFAULT_ADMIN_RATE_LIMIT",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_SETTINGS_PATH",
    "AppState",
    "RateLimitExceeded",
    "RateLimiter",
    "ServerConfig",
    "create_app",
    "get_app_state",
]
