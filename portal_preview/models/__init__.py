from .config import (
    EnvironmentConfig,
    LocalizationConfig,
    PageConfig,
    PortalConfig,
    PortalInformationResponse,
    PreviewDefaults,
    PreviewRenderRequest,
    PreviewSettings,
    UrlConfig,
    WebspaceConfig,
    WebspaceResponse,
)

__all__ = [
    "EnvironmentConfig",
    "LocalizationConfig",
    "PageConfig",
    "PortalConfig",
    "PortalInformationResponse",
    "PreviewDefaults",
    "PreviewRenderRequest",
    "PreviewSettings",
    "UrlConfig",
    "WebspaceConfig",
    "WebspaceResponse",
]
