from __future__ import annotations

import copy
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from starlette.exceptions import HTTPException

from ..kernel import ATTRIBUTES_KEY, MAIN_REQUEST, KernelFactory, PreviewRequest, Response
from ..routing import RouteDefaultsProvider
from ..webspace import (
    MATCH_TYPE_FULL,
    Environment,
    Portal,
    PortalInformation,
    RequestAttributes,
    Url,
    WebspaceManager,
)
from .context import RequestContext, get_current_request
from .errors import (
    KernelDispatchError,
    RouteDefaultsProviderNotFoundError,
    WebspaceLocalizationNotFoundError,
    WebspaceNotFoundError,
    classify_failure,
    error_for_kind,
)
from .events import PRE_RENDER, EventDispatcher, PreRenderEvent

_LOGGER = logging.getLogger(__name__)

__all__ = ["PreviewRenderer"]


class PreviewRenderer:
    """Renders unpublished content objects through the website kernel.

    The renderer builds a :class:`PreviewRequest` carrying the webspace and
    portal context for the object, announces it with a
    :data:`~portal_preview.preview.events.PRE_RENDER` event and lets the
    kernel of the configured environment handle it. Kernel failures are
    reported as :class:`~portal_preview.preview.errors.PreviewRendererError`.
    """

    def __init__(
        self,
        route_defaults_provider: RouteDefaultsProvider,
        kernel_factory: KernelFactory,
        webspace_manager: WebspaceManager,
        event_dispatcher: EventDispatcher,
        preview_defaults: Mapping[str, Any],
        environment: str,
        target_group_header: Optional[str] = None,
        request_context: Callable[[], Optional[RequestContext]] = get_current_request,
    ) -> None:
        self._route_defaults_provider = route_defaults_provider
        self._kernel_factory = kernel_factory
        self._webspace_manager = webspace_manager
        self._event_dispatcher = event_dispatcher
        self._preview_defaults = MappingProxyType(dict(preview_defaults))
        self._environment = environment
        self._target_group_header = target_group_header
        self._request_context = request_context

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def target_group_header(self) -> Optional[str]:
        return self._target_group_header

    def render(
        self,
        obj: Any,
        id: Any,
        webspace_key: str,
        locale: str,
        partial: bool = False,
        target_group_id: Optional[str] = None,
    ) -> str:
        entity_class = type(obj)
        if not self._route_defaults_provider.supports(entity_class):
            raise RouteDefaultsProviderNotFoundError(obj, id, webspace_key, locale)

        portal_informations = self._webspace_manager.find_portal_informations_by_webspace_key_and_locale(
            webspace_key,
            locale,
            self._environment,
        )
        if portal_informations:
            portal_information = portal_informations[0]
        else:
            portal_information = self.synthesize_portal_information(obj, id, webspace_key, locale)

        webspace = portal_information.webspace
        localization = webspace.get_localization(locale)

        query: Dict[str, Any] = {}
        body: Dict[str, Any] = {}
        current_request = self._request_context()
        if current_request is not None:
            query = dict(current_request.query)
            body = dict(current_request.body)

        attributes = RequestAttributes(
            webspace=webspace,
            locale=locale,
            localization=localization,
            portal=portal_information.portal,
            portal_url=portal_information.url,
            resource_locator_prefix=portal_information.prefix,
            get_parameters=query,
            post_parameters=body,
            analytics_key=self._preview_defaults.get("analytics_key"),
            portal_information=portal_information,
        )

        defaults = dict(self._route_defaults_provider.get_by_entity(entity_class, id, locale, obj))

        # controller arguments
        defaults["object"] = obj
        defaults["preview"] = True
        defaults["partial"] = partial
        defaults[ATTRIBUTES_KEY] = attributes

        request = PreviewRequest(query=query, request=body, attributes=defaults)
        request.set_locale(locale)

        if self._target_group_header and target_group_id:
            request.headers[self._target_group_header] = str(target_group_id)

        self._event_dispatcher.dispatch(PRE_RENDER, PreRenderEvent(attributes))

        try:
            response = self._handle(request)
        except KernelDispatchError as exc:
            _LOGGER.warning(
                "Preview of %s '%s' in %s/%s failed (%s): %s",
                entity_class.__name__,
                id,
                webspace_key,
                locale,
                exc.kind.value,
                exc.cause,
            )
            raise error_for_kind(exc.kind)(obj, id, webspace_key, locale, exc.cause) from exc.cause

        return str(response.content)

    def _handle(self, request: PreviewRequest) -> Response:
        """Let the kernel handle ``request``; failures leave tagged by kind."""

        kernel = self._kernel_factory.create(self._environment)
        try:
            try:
                return kernel.handle(request, MAIN_REQUEST, False)
            except HTTPException as exc:
                if exc.__cause__ is not None:
                    raise exc.__cause__
                raise
        except Exception as exc:
            raise KernelDispatchError(classify_failure(exc), exc) from exc

    def synthesize_portal_information(
        self,
        obj: Any,
        id: Any,
        webspace_key: str,
        locale: str,
    ) -> PortalInformation:
        """Build a portal information for a locale that no portal serves.

        A webspace may declare localizations none of its portals use; the
        preview still has to render them, so a single-portal copy of the
        webspace is created for the host of the current request.
        """

        webspace = self._webspace_manager.find_webspace_by_key(webspace_key)
        if webspace is None:
            raise WebspaceNotFoundError(obj, id, webspace_key, locale)

        current_request = self._request_context()
        if current_request is None:
            raise RuntimeError("A portal information can only be synthesized while a request is handled")
        domain = current_request.host

        webspace = webspace.duplicate()
        localization = webspace.get_localization(locale)
        if localization is None:
            raise WebspaceLocalizationNotFoundError(obj, id, webspace_key, locale)

        localization = copy.copy(localization)
        localization.x_default = True

        portal = Portal(
            key=webspace.key,
            name=webspace.name,
            localizations=[localization],
            default_localization=localization,
            x_default_localization=localization,
            environments=[
                Environment(type=self._environment, urls=[Url(url=domain, environment=self._environment)])
            ],
            webspace=webspace,
        )
        webspace.portals = [portal]

        _LOGGER.info(
            "No portal serves %s/%s in '%s', previewing with a synthesized portal on %s",
            webspace_key,
            locale,
            self._environment,
            domain,
        )
        return PortalInformation(
            type=MATCH_TYPE_FULL,
            webspace=webspace,
            portal=portal,
            localization=localization,
            url=domain,
        )
