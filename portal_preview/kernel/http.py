from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from starlette.datastructures import MutableHeaders

MAIN_REQUEST = 1
SUB_REQUEST = 2

__all__ = ["MAIN_REQUEST", "SUB_REQUEST", "PreviewRequest", "Response"]


@dataclass
class PreviewRequest:
    """In-process request handed to the website kernel.

    ``attributes`` holds the route defaults; controllers read their
    arguments from it.
    """

    query: Dict[str, Any] = field(default_factory=dict)
    request: Dict[str, Any] = field(default_factory=dict)
    attributes: Dict[str, Any] = field(default_factory=dict)
    locale: Optional[str] = None
    headers: MutableHeaders = field(default_factory=MutableHeaders)

    def set_locale(self, locale: str) -> None:
        self.locale = locale


@dataclass
class Response:
    content: str
    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=lambda: {"content-type": "text/html; charset=utf-8"})
