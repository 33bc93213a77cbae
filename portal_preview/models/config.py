from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

_LANGUAGE_PATTERN = r"^[a-z]{2,3}$"
_ENVIRONMENT_PATTERN = r"^[a-z][a-z0-9_-]*$"


class LocalizationConfig(BaseModel):
    """A language/country pair declared by a webspace or portal."""

    language: str = Field(..., pattern=_LANGUAGE_PATTERN, description="ISO language code")
    country: Optional[str] = Field(default=None, description="Optional country code, e.g. 'at'")
    default: bool = Field(False, description="Default localization of the webspace/portal")


class UrlConfig(BaseModel):
    url: str = Field(..., min_length=1, description="Host and optional path, may contain {localization}")
    language: Optional[str] = Field(default=None, pattern=_LANGUAGE_PATTERN)
    country: Optional[str] = None


class EnvironmentConfig(BaseModel):
    type: str = Field(..., pattern=_ENVIRONMENT_PATTERN, description="Environment name, e.g. 'prod'")
    urls: List[UrlConfig] = Field(default_factory=list)


class PortalConfig(BaseModel):
    key: str = Field(..., min_length=1)
    name: Optional[str] = None
    localizations: List[LocalizationConfig] = Field(default_factory=list)
    environments: List[EnvironmentConfig] = Field(default_factory=list)


class WebspaceConfig(BaseModel):
    """Webspace declaration: its languages and the portals that serve them."""

    key: str = Field(..., min_length=1)
    name: Optional[str] = None
    theme: Optional[str] = None
    localizations: List[LocalizationConfig] = Field(default_factory=list)
    portals: List[PortalConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_portal_localizations(self) -> "WebspaceConfig":
        known = {(item.language, item.country) for item in self.localizations}
        for portal in self.portals:
            for localization in portal.localizations:
                if (localization.language, localization.country) not in known:
                    raise ValueError(
                        f"Portal '{portal.key}' uses localization '{localization.language}' "
                        f"which webspace '{self.key}' does not declare"
                    )
        return self


class PageConfig(BaseModel):
    id: str = Field(..., min_length=1)
    webspace: str = Field(..., min_length=1)
    locale: str = Field(..., min_length=2)
    title: str = ""
    template: str = Field("default", min_length=1)
    published: bool = False
    data: Dict[str, Any] = Field(default_factory=dict)


class PreviewDefaults(BaseModel):
    analytics_key: Optional[str] = Field(
        default=None,
        description="Analytics key handed to templates while rendering previews",
    )


class PreviewSettings(BaseModel):
    """Settings read from ``preview.yaml``."""

    environment: str = Field("prod", pattern=_ENVIRONMENT_PATTERN)
    target_group_header: Optional[str] = Field(
        default="X-Target-Group",
        description="Header carrying the target group id to the website kernel",
    )
    preview_defaults: PreviewDefaults = Field(default_factory=PreviewDefaults)
    template_dirs: List[str] = Field(
        default_factory=list,
        description="Extra template directories, searched before the bundled templates",
    )
    webspaces: List[WebspaceConfig] = Field(default_factory=list)
    content: List[PageConfig] = Field(default_factory=list)


class PreviewRenderRequest(BaseModel):
    provider: str = Field("pages", description="Preview object provider key")
    id: str = Field(..., min_length=1)
    webspace: str = Field(..., min_length=1)
    locale: str = Field(..., min_length=2)
    partial: bool = False
    target_group_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict, description="Unpublished field values")
    context: Dict[str, Any] = Field(default_factory=dict, description="Context changes, e.g. template")


class PortalInformationResponse(BaseModel):
    url: str
    portal: Optional[str]
    locale: Optional[str]
    prefix: str
    main: bool


class WebspaceResponse(BaseModel):
    key: str
    name: str
    locales: List[str]
    portal_informations: List[PortalInformationResponse]
