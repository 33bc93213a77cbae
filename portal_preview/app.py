from __future__ import annotations

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Deque, Dict, Optional

from fastapi import FastAPI, Request

from .config import YamlConfigLoader
from .content import ContentRepository, Page
from .kernel import KernelFactory
from .models.config import PreviewSettings
from .preview import (
    PRE_RENDER,
    EventDispatcher,
    PageObjectProvider,
    PreRenderEvent,
    PreviewRenderer,
    ProviderRegistry,
)
from .routing import PageRouteDefaultsProvider, RouteDefaultsProviderRegistry
from .webspace import WebspaceManager

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_SETTINGS_PATH = Path("preview.yaml")
DEFAULT_ADMIN_RATE_LIMIT = 60

LOGGER = logging.getLogger(__name__)


class RateLimitExceeded(RuntimeError):
    """Raised when an identifier used up its requests for the current window."""

    def __init__(self, key: str, retry_after: float) -> None:
        super().__init__(f"Rate limit exceeded for '{key}'")
        self.key = key
        self.retry_after = retry_after


class RateLimiter:
    """Sliding-window limiter for preview and log requests.

    Identifiers whose requests all fell out of the window are dropped on
    every :meth:`hit`, so only clients seen within the last window are
    tracked.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = max(0, int(limit))
        self.window_seconds = max(1.0, float(window_seconds))
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def hit(self, key: str) -> None:
        """Record a request for ``key`` or raise :class:`RateLimitExceeded`."""

        if self.limit == 0:
            return
        now = self._clock()
        with self._lock:
            self._expire(now - self.window_seconds)
            hits = self._hits.setdefault(key, deque())
            if len(hits) >= self.limit:
                raise RateLimitExceeded(key, retry_after=hits[0] + self.window_seconds - now)
            hits.append(now)

    def _expire(self, cutoff: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    settings_path: Optional[Path] = DEFAULT_SETTINGS_PATH
    admin_token: Optional[str] = None
    rate_limit_per_minute: int = DEFAULT_ADMIN_RATE_LIMIT
    log_path: Optional[Path] = None


@dataclass
class AppState:
    """Container for FastAPI state shared across request handlers.

    Everything except ``last_rendered`` is built once by :func:`create_app`
    from the settings file and is not modified afterwards.
    """

    config: ServerConfig
    settings: PreviewSettings
    webspace_manager: WebspaceManager
    repository: ContentRepository
    providers: ProviderRegistry
    event_dispatcher: EventDispatcher
    kernel_factory: KernelFactory
    renderer: PreviewRenderer
    rate_limiter: RateLimiter
    last_rendered: Optional[str] = None

    @property
    def log_file(self) -> Optional[Path]:
        return self.config.log_path


def get_app_state(request: Request) -> AppState:
    state = getattr(request.app.state, "preview", None)
    if state is None:
        raise RuntimeError("Application state has not been initialised")
    return state


def _log_pre_render(event: PreRenderEvent) -> None:
    attributes = event.attributes
    LOGGER.debug(
        "Rendering preview for webspace=%s locale=%s portal=%s url=%s",
        attributes.webspace.key if attributes.webspace else None,
        attributes.locale,
        attributes.portal.key if attributes.portal else None,
        attributes.portal_url,
    )


def create_app(
    config: Optional[ServerConfig] = None,
    settings: Optional[PreviewSettings] = None,
) -> FastAPI:
    config = config or ServerConfig()
    if settings is None:
        settings = YamlConfigLoader(config.settings_path, PreviewSettings).load()

    webspace_manager = WebspaceManager.from_settings(settings)
    repository = ContentRepository.from_settings(settings)

    route_defaults = RouteDefaultsProviderRegistry()
    route_defaults.register(Page, PageRouteDefaultsProvider(repository))
    providers = ProviderRegistry([("pages", PageObjectProvider(repository))])

    event_dispatcher = EventDispatcher()
    event_dispatcher.add_listener(PRE_RENDER, _log_pre_render)

    base_dir = config.settings_path.parent if config.settings_path else Path.cwd()
    template_dirs = [
        path if path.is_absolute() else (base_dir / path).resolve()
        for path in (Path(item) for item in settings.template_dirs)
    ]
    kernel_factory = KernelFactory(template_dirs)

    renderer = PreviewRenderer(
        route_defaults,
        kernel_factory,
        webspace_manager,
        event_dispatcher,
        settings.preview_defaults.model_dump(),
        settings.environment,
        settings.target_group_header,
    )
    limiter = RateLimiter(limit=config.rate_limit_per_minute)

    app = FastAPI(title="Portal Preview", version="1.0.0")
    app.state.preview = AppState(
        config=config,
        settings=settings,
        webspace_manager=webspace_manager,
        repository=repository,
        providers=providers,
        event_dispatcher=event_dispatcher,
        kernel_factory=kernel_factory,
        renderer=renderer,
        rate_limiter=limiter,
    )
    LOGGER.info(
        "Preview app ready: %d webspace(s), %d page(s), environment '%s'",
        len(webspace_manager),
        len(repository),
        settings.environment,
    )

    from .api import logs, preview, status

    app.include_router(status.router)
    app.include_router(preview.router)
    app.include_router(logs.router)

    return app


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_SETTINGS_PATH",
    "DEFAULT_ADMIN_RATE_LIMIT",
    "ServerConfig",
    "AppState",
    "create_app",
    "get_app_state",
    "RateLimitExceeded",
    "RateLimiter",
]
