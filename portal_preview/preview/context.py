"""Request-scoped access to the inbound request a preview is rendered for.

The preview API sets the context while it handles one request; the renderer
reads query/body parameters and the host from it. The value lives in a
:class:`~contextvars.ContextVar`, so concurrent requests never see each other.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

__all__ = [
    "RequestContext",
    "get_current_request",
    "request_context",
    "require_current_request",
]


@dataclass(frozen=True)
class RequestContext:
    host: str
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))
        object.__setattr__(self, "body", MappingProxyType(dict(self.body)))


_CURRENT_REQUEST: ContextVar[Optional[RequestContext]] = ContextVar(
    "portal_preview_current_request",
    default=None,
)


@contextmanager
def request_context(ctx: RequestContext) -> Iterator[RequestContext]:
    token = _CURRENT_REQUEST.set(ctx)
    try:
        yield ctx
    finally:
        _CURRENT_REQUEST.reset(token)


def get_current_request() -> Optional[RequestContext]:
    return _CURRENT_REQUEST.get()


def require_current_request() -> RequestContext:
    ctx = get_current_request()
    if ctx is None:
        raise RuntimeError("No request is being handled")
    return ctx
