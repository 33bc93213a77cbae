from __future__ import annotations

import threading
from typing import Dict, Iterable, Optional, Tuple, TYPE_CHECKING

from .models import Page

if TYPE_CHECKING:  # pragma: no cover
    from ..models.config import PreviewSettings

__all__ = ["ContentRepository"]


class ContentRepository:
    """Thread-safe in-memory page store keyed by ``(id, locale)``."""

    def __init__(self, pages: Iterable[Page] = ()) -> None:
        self._pages: Dict[Tuple[str, str], Page] = {}
        self._lock = threading.Lock()
        for page in pages:
            self.add(page)

    @classmethod
    def from_settings(cls, settings: "PreviewSettings") -> "ContentRepository":
        return cls(
            Page(
                id=item.id,
                webspace_key=item.webspace,
                locale=item.locale,
                title=item.title,
                template=item.template,
                data=dict(item.data),
                published=item.published,
            )
            for item in settings.content
        )

    def add(self, page: Page) -> None:
        with self._lock:
            self._pages[(page.id, page.locale)] = page

    def find(self, page_id: str, locale: str) -> Optional[Page]:
        with self._lock:
            return self._pages.get((str(page_id), locale))

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)
