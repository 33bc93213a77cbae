from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from fastapi import HTTPException, status
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    Undefined,
    select_autoescape,
)

from .http import MAIN_REQUEST, PreviewRequest, Response

LOGGER = logging.getLogger(__name__)

BUNDLED_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
DEBUG_ENVIRONMENTS = frozenset({"dev", "test"})
ATTRIBUTES_KEY = "_sulu"
CONTENT_BLOCK = "content"

Controller = Callable[[PreviewRequest, Environment, int], Response]

__all__ = [
    "ATTRIBUTES_KEY",
    "BUNDLED_TEMPLATE_DIR",
    "ContentController",
    "Controller",
    "WebsiteKernel",
    "create_template_environment",
]


def create_template_environment(template_dirs: Iterable[Path], debug: bool = False) -> Environment:
    """Jinja2 environment searching ``template_dirs`` before the bundled templates."""

    loaders = [FileSystemLoader(str(path)) for path in template_dirs]
    loaders.append(FileSystemLoader(str(BUNDLED_TEMPLATE_DIR)))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined if debug else Undefined,
        auto_reload=debug,
    )


class ContentController:
    """Renders a content structure with the template named by its ``view``."""

    def __call__(self, request: PreviewRequest, templates: Environment, request_type: int) -> Response:
        attributes = request.attributes
        view = attributes.get("view")
        if not view:
            raise ValueError("Route defaults do not define a view")

        name = f"{view}.html"
        try:
            template = templates.get_template(name)
        except TemplateNotFound as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Template '{name}' not found") from exc

        structure = attributes.get("structure", attributes.get("object"))
        context: Dict[str, Any] = {
            "page": structure,
            "content": getattr(structure, "data", {}),
            "attributes": attributes.get(ATTRIBUTES_KEY),
            "preview": bool(attributes.get("preview", False)),
            "locale": request.locale,
            "query": request.query,
            "headers": request.headers,
            "main_request": request_type == MAIN_REQUEST,
        }

        if attributes.get("partial"):
            block = template.blocks.get(CONTENT_BLOCK)
            if block is None:
                raise ValueError(f"Template '{name}' has no '{CONTENT_BLOCK}' block to render partially")
            body = "".join(block(template.new_context(context)))
        else:
            body = template.render(context)
        return Response(content=body)


class WebsiteKernel:
    """Dispatches :class:`PreviewRequest` objects to website controllers."""

    def __init__(
        self,
        environment: str,
        templates: Environment,
        controllers: Optional[Mapping[str, Controller]] = None,
    ) -> None:
        self.environment = environment
        self.templates = templates
        self._controllers: Dict[str, Controller] = dict(controllers or {"content": ContentController()})

    @property
    def debug(self) -> bool:
        return self.environment in DEBUG_ENVIRONMENTS

    def handle(self, request: PreviewRequest, request_type: int = MAIN_REQUEST, catch: bool = True) -> Response:
        """Handle ``request``; with ``catch`` disabled every failure propagates."""

        try:
            return self._handle_raw(request, request_type)
        except Exception as exc:
            if not catch:
                raise
            return self._handle_exception(exc)

    def _handle_raw(self, request: PreviewRequest, request_type: int) -> Response:
        name = request.attributes.get("_controller")
        controller = self._controllers.get(name) if name else None
        if controller is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No controller found for '{name}'",
            )
        return controller(request, self.templates, request_type)

    def _handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, HTTPException):
            status_code = exc.status_code
            detail = str(exc.detail)
        elif isinstance(exc, TemplateNotFound):
            status_code = status.HTTP_404_NOT_FOUND
            detail = f"Template '{exc.name}' not found"
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            detail = f"{type(exc).__name__}: {exc}"
        LOGGER.exception("Website request failed with status %s", status_code)
        try:
            body = self.templates.get_template("error.html").render(
                status_code=status_code,
                detail=detail if self.debug or status_code < 500 else "Internal Server Error",
            )
        except TemplateNotFound:
            body = detail
        return Response(content=body, status_code=status_code)
