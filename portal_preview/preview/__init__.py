"""Preview rendering of unpublished content."""

from .context import RequestContext, get_current_request, request_context, require_current_request
from .errors import (
    KernelDispatchError,
    PreviewRendererError,
    RenderErrorKind,
    RouteDefaultsProviderNotFoundError,
    TemplateNotFoundError,
    TemplateRenderError,
    UnexpectedRenderError,
    WebspaceLocalizationNotFoundError,
    WebspaceNotFoundError,
    classify_failure,
)
from .events import PRE_RENDER, EventDispatcher, PreRenderEvent
from .providers import (
    PageObjectProvider,
    PreviewObjectNotFoundError,
    PreviewObjectProvider,
    ProviderNotFoundError,
    ProviderRegistry,
)
from .renderer import PreviewRenderer

__all__ = [
    "PRE_RENDER",
    "EventDispatcher",
    "KernelDispatchError",
    "PageObjectProvider",
    "PreRenderEvent",
    "PreviewObjectNotFoundError",
    "PreviewObjectProvider",
    "PreviewRenderer",
    "PreviewRendererError",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "RenderErrorKind",
    "RequestContext",
    "RouteDefaultsProviderNotFoundError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "UnexpectedRenderError",
    "WebspaceLocalizationNotFoundError",
    "WebspaceNotFoundError",
    "classify_failure",
    "get_current_request",
    "request_context",
    "require_current_request",
]
