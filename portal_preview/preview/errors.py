from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Type

from jinja2 import TemplateError, TemplateNotFound

__all__ = [
    "RenderErrorKind",
    "PreviewRendererError",
    "RouteDefaultsProviderNotFoundError",
    "WebspaceNotFoundError",
    "WebspaceLocalizationNotFoundError",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "UnexpectedRenderError",
    "KernelDispatchError",
    "classify_failure",
    "error_for_kind",
]


class RenderErrorKind(str, Enum):
    ROUTE_DEFAULTS_PROVIDER_NOT_FOUND = "route_defaults_provider_not_found"
    WEBSPACE_NOT_FOUND = "webspace_not_found"
    WEBSPACE_LOCALIZATION_NOT_FOUND = "webspace_localization_not_found"
    TEMPLATE_NOT_FOUND = "template_not_found"
    TEMPLATE_RENDER_ERROR = "template_render_error"
    UNEXPECTED = "unexpected"


class PreviewRendererError(RuntimeError):
    """Base class for failures while rendering a preview.

    Every error carries the arguments of the failing render call; errors
    raised for a kernel failure also keep the original exception as
    :attr:`cause`.
    """

    kind: RenderErrorKind = RenderErrorKind.UNEXPECTED
    code: int = 9900
    message = "Preview could not be rendered"

    def __init__(
        self,
        obj: Any,
        id: Any,
        webspace_key: str,
        locale: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        detail = self.message
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.object = obj
        self.id = id
        self.webspace_key = webspace_key
        self.locale = locale
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code,
            "message": str(self),
            "id": self.id,
            "webspace": self.webspace_key,
            "locale": self.locale,
        }


class RouteDefaultsProviderNotFoundError(PreviewRendererError):
    kind = RenderErrorKind.ROUTE_DEFAULTS_PROVIDER_NOT_FOUND
    code = 9901
    message = "No route defaults provider supports this object"


class WebspaceNotFoundError(PreviewRendererError):
    kind = RenderErrorKind.WEBSPACE_NOT_FOUND
    code = 9902
    message = "Webspace not found"


class WebspaceLocalizationNotFoundError(PreviewRendererError):
    kind = RenderErrorKind.WEBSPACE_LOCALIZATION_NOT_FOUND
    code = 9903
    message = "Webspace does not define the requested localization"


class TemplateNotFoundError(PreviewRendererError):
    kind = RenderErrorKind.TEMPLATE_NOT_FOUND
    code = 9904
    message = "Template not found"


class TemplateRenderError(PreviewRendererError):
    kind = RenderErrorKind.TEMPLATE_RENDER_ERROR
    code = 9905
    message = "Template could not be rendered"


class UnexpectedRenderError(PreviewRendererError):
    kind = RenderErrorKind.UNEXPECTED
    code = 9906
    message = "Unexpected error while rendering preview"


_ERRORS: Dict[RenderErrorKind, Type[PreviewRendererError]] = {
    error.kind: error
    for error in (
        RouteDefaultsProviderNotFoundError,
        WebspaceNotFoundError,
        WebspaceLocalizationNotFoundError,
        TemplateNotFoundError,
        TemplateRenderError,
        UnexpectedRenderError,
    )
}


def error_for_kind(kind: RenderErrorKind) -> Type[PreviewRendererError]:
    return _ERRORS[kind]


def classify_failure(exc: BaseException) -> RenderErrorKind:
    """Tag a failure raised while the website kernel handled a request."""

    # TemplateNotFound is a TemplateError, so it has to be checked first.
    # Loader failures therefore count as a missing template; checking
    # TemplateError first would report them as render errors instead.
    if isinstance(exc, (TemplateNotFound, ValueError)):
        return RenderErrorKind.TEMPLATE_NOT_FOUND
    if isinstance(exc, TemplateError):
        return RenderErrorKind.TEMPLATE_RENDER_ERROR
    return RenderErrorKind.UNEXPECTED


class KernelDispatchError(Exception):
    """A kernel failure tagged with its :class:`RenderErrorKind`."""

    def __init__(self, kind: RenderErrorKind, cause: BaseException) -> None:
        super().__init__(f"{kind.value}: {cause}")
        self.kind = kind
        self.cause = cause
        self.__cause__ = cause
