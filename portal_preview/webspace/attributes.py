from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .models import Localization, Portal, PortalInformation, Webspace

__all__ = ["RequestAttributes"]


def _readonly(value: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class RequestAttributes:
    """Webspace/portal context a website request is handled in.

    Instances are immutable; use :meth:`merge` to derive a changed copy.
    """

    webspace: Optional[Webspace] = None
    locale: Optional[str] = None
    localization: Optional[Localization] = None
    portal: Optional[Portal] = None
    portal_url: Optional[str] = None
    resource_locator_prefix: str = ""
    get_parameters: Mapping[str, Any] = field(default_factory=dict)
    post_parameters: Mapping[str, Any] = field(default_factory=dict)
    analytics_key: Optional[str] = None
    portal_information: Optional[PortalInformation] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "get_parameters", _readonly(self.get_parameters))
        object.__setattr__(self, "post_parameters", _readonly(self.post_parameters))

    def get(self, name: str, default: Any = None) -> Any:
        if name not in self._names():
            return default
        value = getattr(self, name)
        return default if value is None else value

    def merge(self, **changes: Any) -> "RequestAttributes":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self._names()}

    @classmethod
    def _names(cls) -> tuple[str, ...]:
        return tuple(item.name for item in fields(cls))
