from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Mapping, Protocol

from ..config import deep_merge
from ..content import ContentRepository, Page

__all__ = [
    "PageObjectProvider",
    "PreviewObjectProvider",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "PreviewObjectNotFoundError",
]


class ProviderNotFoundError(LookupError):
    """Raised when no preview object provider is registered for a key."""


class PreviewObjectNotFoundError(LookupError):
    """Raised when a provider cannot load the requested object."""


class PreviewObjectProvider(Protocol):
    """Loads objects for preview and applies unpublished changes to them."""

    def get_object(self, id: str, locale: str) -> Any:
        ...

    def get_id(self, obj: Any) -> str:
        ...

    def set_values(self, obj: Any, locale: str, data: Mapping[str, Any]) -> None:
        ...

    def set_context(self, obj: Any, locale: str, context: Mapping[str, Any]) -> Any:
        ...


class PageObjectProvider:
    """Preview provider for repository pages.

    Objects handed out are deep copies, so preview changes never reach the
    repository.
    """

    def __init__(self, repository: ContentRepository) -> None:
        self._repository = repository

    def get_object(self, id: str, locale: str) -> Page:
        page = self._repository.find(id, locale)
        if page is None:
            raise PreviewObjectNotFoundError(f"Page '{id}' does not exist in locale '{locale}'")
        return copy.deepcopy(page)

    def get_id(self, obj: Page) -> str:
        return obj.id

    def set_values(self, obj: Page, locale: str, data: Mapping[str, Any]) -> None:
        values = dict(data)
        if "title" in values:
            obj.title = str(values.pop("title"))
        obj.data = deep_merge(obj.data, values)
        obj.locale = locale

    def set_context(self, obj: Page, locale: str, context: Mapping[str, Any]) -> Page:
        template = context.get("template")
        if template:
            obj.template = str(template)
        return obj


class ProviderRegistry:
    def __init__(self, providers: Iterable[tuple[str, PreviewObjectProvider]] = ()) -> None:
        self._providers: Dict[str, PreviewObjectProvider] = {}
        for key, provider in providers:
            self.register(key, provider)

    def register(self, key: str, provider: PreviewObjectProvider) -> None:
        if key in self._providers:
            raise ValueError(f"Preview provider '{key}' is already registered")
        self._providers[key] = provider

    def get(self, key: str) -> PreviewObjectProvider:
        try:
            return self._providers[key]
        except KeyError as exc:
            raise ProviderNotFoundError(f"No preview provider registered for '{key}'") from exc

    def __contains__(self, key: str) -> bool:
        return key in self._providers
