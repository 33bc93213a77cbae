"""Webspace, portal and localization model with the lookups built on it."""

from .attributes import RequestAttributes
from .manager import WebspaceManager
from .models import (
    MATCH_TYPE_FULL,
    MATCH_TYPE_PARTIAL,
    MATCH_TYPE_REDIRECT,
    Environment,
    Localization,
    Portal,
    PortalInformation,
    Url,
    Webspace,
)

__all__ = [
    "MATCH_TYPE_FULL",
    "MATCH_TYPE_PARTIAL",
    "MATCH_TYPE_REDIRECT",
    "Environment",
    "Localization",
    "Portal",
    "PortalInformation",
    "RequestAttributes",
    "Url",
    "Webspace",
    "WebspaceManager",
]
