from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

__all__ = ["Page"]


@dataclass
class Page:
    """A localized content page as stored by the repository."""

    id: str
    webspace_key: str
    locale: str
    title: str = ""
    template: str = "default"
    data: Dict[str, Any] = field(default_factory=dict)
    published: bool = False
