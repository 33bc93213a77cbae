from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

from .models import (
    LOCALIZATION_PLACEHOLDER,
    MATCH_TYPE_FULL,
    Environment,
    Localization,
    Portal,
    PortalInformation,
    Url,
    Webspace,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..models.config import LocalizationConfig, PreviewSettings, WebspaceConfig

LOGGER = logging.getLogger(__name__)

__all__ = ["WebspaceManager"]


def _build_localizations(items: Iterable["LocalizationConfig"]) -> List[Localization]:
    localizations = [
        Localization(language=item.language, country=item.country, default=item.default)
        for item in items
    ]
    if localizations and not any(item.default for item in localizations):
        localizations[0].default = True
    return localizations


def _build_webspace(config: "WebspaceConfig") -> Webspace:
    webspace = Webspace(
        key=config.key,
        name=config.name or config.key,
        localizations=_build_localizations(config.localizations),
        theme=config.theme,
    )
    for portal_config in config.portals:
        if portal_config.localizations:
            localizations = _build_localizations(portal_config.localizations)
        else:
            localizations = [
                Localization(item.language, item.country, default=item.default)
                for item in webspace.localizations
            ]
        default = next((item for item in localizations if item.default), None)
        portal = Portal(
            key=portal_config.key,
            name=portal_config.name or portal_config.key,
            localizations=localizations,
            default_localization=default,
            x_default_localization=default,
            environments=[
                Environment(
                    type=environment.type,
                    urls=[
                        Url(
                            url=url.url,
                            environment=environment.type,
                            language=url.language,
                            country=url.country,
                        )
                        for url in environment.urls
                    ],
                )
                for environment in portal_config.environments
            ],
            webspace=webspace,
        )
        webspace.portals.append(portal)
    return webspace


class WebspaceManager:
    """Read-only lookup over the configured webspaces and their portals."""

    def __init__(self, webspaces: Iterable[Webspace] = ()) -> None:
        self._webspaces: Dict[str, Webspace] = {}
        for webspace in webspaces:
            if webspace.key in self._webspaces:
                raise ValueError(f"Webspace '{webspace.key}' is configured twice")
            self._webspaces[webspace.key] = webspace

    @classmethod
    def from_settings(cls, settings: "PreviewSettings") -> "WebspaceManager":
        return cls(_build_webspace(item) for item in settings.webspaces)

    def __contains__(self, key: str) -> bool:
        return key in self._webspaces

    def __len__(self) -> int:
        return len(self._webspaces)

    def list(self) -> List[Webspace]:
        return list(self._webspaces.values())

    def find_webspace_by_key(self, key: str) -> Optional[Webspace]:
        return self._webspaces.get(key)

    def get_portal_informations(self, environment: str) -> List[PortalInformation]:
        """All portal informations for ``environment`` in configuration order."""

        informations: List[PortalInformation] = []
        for webspace in self._webspaces.values():
            for portal in webspace.portals:
                portal_environment = portal.get_environment(environment)
                if portal_environment is None:
                    continue
                for url in portal_environment.urls:
                    informations.extend(self._expand_url(webspace, portal, url))
        return informations

    def find_portal_informations_by_webspace_key_and_locale(
        self,
        webspace_key: str,
        locale: str,
        environment: str,
    ) -> List[PortalInformation]:
        return [
            information
            for information in self.get_portal_informations(environment)
            if information.webspace.key == webspace_key
            and information.localization is not None
            and information.localization.locale == locale
        ]

    @staticmethod
    def _expand_url(webspace: Webspace, portal: Portal, url: Url) -> List[PortalInformation]:
        if LOCALIZATION_PLACEHOLDER in url.url:
            return [
                PortalInformation(
                    type=MATCH_TYPE_FULL,
                    webspace=webspace,
                    portal=portal,
                    localization=localization,
                    url=url.url.replace(LOCALIZATION_PLACEHOLDER, localization.dashed),
                )
                for localization in portal.localizations
            ]

        if url.language is not None:
            for localization in portal.localizations:
                if url.matches(localization):
                    return [
                        PortalInformation(
                            type=MATCH_TYPE_FULL,
                            webspace=webspace,
                            portal=portal,
                            localization=localization,
                            url=url.url,
                        )
                    ]
            LOGGER.warning(
                "Url '%s' of portal '%s' names language '%s' which the portal does not serve",
                url.url,
                portal.key,
                url.language,
            )
            return []

        return [
            PortalInformation(
                type=MATCH_TYPE_FULL,
                webspace=webspace,
                portal=portal,
                localization=portal.default_localization,
                url=url.url,
                main=True,
            )
        ]
