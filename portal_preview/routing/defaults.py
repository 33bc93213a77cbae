from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from ..content import ContentRepository, Page

LOGGER = logging.getLogger(__name__)

__all__ = [
    "RouteDefaultsProvider",
    "RouteDefaultsProviderRegistry",
    "PageRouteDefaultsProvider",
]


class RouteDefaultsProvider(Protocol):
    """Provides the controller defaults used to render an entity."""

    def supports(self, entity_class: type) -> bool:
        ...

    def get_by_entity(
        self,
        entity_class: type,
        id: Any,
        locale: str,
        obj: Any = None,
    ) -> Dict[str, Any]:
        ...


class RouteDefaultsProviderRegistry:
    """Aggregate provider that delegates by entity class."""

    def __init__(self) -> None:
        self._providers: Dict[type, RouteDefaultsProvider] = {}

    def register(self, entity_class: type, provider: RouteDefaultsProvider) -> None:
        if entity_class in self._providers:
            raise ValueError(f"A route defaults provider for {entity_class.__name__} is already registered")
        self._providers[entity_class] = provider

    def supports(self, entity_class: type) -> bool:
        provider = self._providers.get(entity_class)
        return provider is not None and provider.supports(entity_class)

    def get_by_entity(
        self,
        entity_class: type,
        id: Any,
        locale: str,
        obj: Any = None,
    ) -> Dict[str, Any]:
        try:
            provider = self._providers[entity_class]
        except KeyError as exc:
            raise LookupError(f"No route defaults provider for {entity_class.__name__}") from exc
        return provider.get_by_entity(entity_class, id, locale, obj)


class PageRouteDefaultsProvider:
    """Route defaults for :class:`~portal_preview.content.Page` objects."""

    def __init__(self, repository: ContentRepository) -> None:
        self._repository = repository

    def supports(self, entity_class: type) -> bool:
        return issubclass(entity_class, Page)

    def get_by_entity(
        self,
        entity_class: type,
        id: Any,
        locale: str,
        obj: Optional[Page] = None,
    ) -> Dict[str, Any]:
        page = obj if obj is not None else self._repository.find(str(id), locale)
        if page is None:
            LOGGER.debug("No page %s/%s to build route defaults for", id, locale)
            return {}
        return {
            "_controller": "content",
            "view": f"pages/{page.template}",
            "structure": page,
        }
