from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import List, Optional

MATCH_TYPE_FULL = 1
MATCH_TYPE_PARTIAL = 2
MATCH_TYPE_REDIRECT = 3

LOCALIZATION_PLACEHOLDER = "{localization}"

__all__ = [
    "MATCH_TYPE_FULL",
    "MATCH_TYPE_PARTIAL",
    "MATCH_TYPE_REDIRECT",
    "LOCALIZATION_PLACEHOLDER",
    "Localization",
    "Url",
    "Environment",
    "Portal",
    "Webspace",
    "PortalInformation",
]


@dataclass
class Localization:
    """A language (optionally with country) served by a webspace or portal."""

    language: str
    country: Optional[str] = None
    default: bool = False
    x_default: bool = False

    @property
    def locale(self) -> str:
        if self.country:
            return f"{self.language}_{self.country}"
        return self.language

    @property
    def dashed(self) -> str:
        if self.country:
            return f"{self.language}-{self.country.lower()}"
        return self.language

    def __str__(self) -> str:
        return self.locale


@dataclass
class Url:
    url: str
    environment: str
    language: Optional[str] = None
    country: Optional[str] = None

    def matches(self, localization: Localization) -> bool:
        if self.language is None:
            return False
        return self.language == localization.language and (self.country or None) == (
            localization.country or None
        )


@dataclass
class Environment:
    type: str
    urls: List[Url] = field(default_factory=list)


@dataclass
class Portal:
    key: str
    name: str
    localizations: List[Localization] = field(default_factory=list)
    default_localization: Optional[Localization] = None
    x_default_localization: Optional[Localization] = None
    environments: List[Environment] = field(default_factory=list)
    webspace: Optional["Webspace"] = field(default=None, repr=False, compare=False)

    def get_environment(self, type_: str) -> Optional[Environment]:
        for environment in self.environments:
            if environment.type == type_:
                return environment
        return None


@dataclass
class Webspace:
    key: str
    name: str
    localizations: List[Localization] = field(default_factory=list)
    portals: List[Portal] = field(default_factory=list)
    theme: Optional[str] = None

    def get_localization(self, locale: str) -> Optional[Localization]:
        for localization in self.localizations:
            if localization.locale == locale:
                return localization
        return None

    @property
    def default_localization(self) -> Optional[Localization]:
        for localization in self.localizations:
            if localization.default:
                return localization
        return self.localizations[0] if self.localizations else None

    def duplicate(self) -> "Webspace":
        """Return a copy that can be modified without touching this webspace."""

        clone = copy.copy(self)
        clone.localizations = list(self.localizations)
        clone.portals = list(self.portals)
        return clone


@dataclass
class PortalInformation:
    """The result of matching a URL against the configured portals."""

    type: int
    webspace: Webspace
    portal: Optional[Portal]
    localization: Optional[Localization]
    url: str
    main: bool = False

    @property
    def host(self) -> str:
        return self.url.split("/", 1)[0]

    @property
    def prefix(self) -> str:
        _, sep, path = self.url.partition("/")
        if not sep or not path.strip("/"):
            return ""
        return path.strip("/") + "/"

    @property
    def webspace_key(self) -> str:
        return self.webspace.key

    @property
    def portal_key(self) -> Optional[str]:
        return self.portal.key if self.portal is not None else None
