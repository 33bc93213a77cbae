from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi import HTTPException
from jinja2 import TemplateNotFound, TemplateSyntaxError

from portal_preview.content import Page
from portal_preview.kernel import ATTRIBUTES_KEY, MAIN_REQUEST, KernelFactory, PreviewRequest, Response
from portal_preview.preview import (
    PRE_RENDER,
    EventDispatcher,
    PreRenderEvent,
    PreviewRenderer,
    RenderErrorKind,
    RequestContext,
    RouteDefaultsProviderNotFoundError,
    TemplateNotFoundError,
    TemplateRenderError,
    UnexpectedRenderError,
    WebspaceLocalizationNotFoundError,
    WebspaceNotFoundError,
    request_context,
)
from portal_preview.webspace import (
    MATCH_TYPE_FULL,
    Environment,
    Localization,
    Portal,
    RequestAttributes,
    Url,
    Webspace,
    WebspaceManager,
)


class Article:
    def __init__(self, title: str = "") -> None:
        self.title = title


class FakeRouteDefaults:
    def __init__(self, supported: tuple[type, ...] = (Page,), defaults: Optional[Dict[str, Any]] = None) -> None:
        self.supported = supported
        self.defaults = defaults if defaults is not None else {"_controller": "content", "view": "pages/default"}
        self.calls: List[tuple] = []

    def supports(self, entity_class: type) -> bool:
        return entity_class in self.supported

    def get_by_entity(self, entity_class: type, id: Any, locale: str, obj: Any = None) -> Dict[str, Any]:
        self.calls.append((entity_class, id, locale, obj))
        return dict(self.defaults)


class FakeKernel:
    def __init__(self, content: str = "<html>preview</html>", error: Optional[BaseException] = None) -> None:
        self.content = content
        self.error = error
        self.requests: List[PreviewRequest] = []
        self.calls: List[tuple] = []

    def handle(self, request: PreviewRequest, request_type: int = MAIN_REQUEST, catch: bool = True) -> Response:
        self.requests.append(request)
        self.calls.append((request_type, catch))
        if self.error is not None:
            raise self.error
        return Response(content=self.content)


class SpyWebspaceManager(WebspaceManager):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.lookups: List[tuple] = []

    def find_portal_informations_by_webspace_key_and_locale(self, webspace_key, locale, environment):  # type: ignore[no-untyped-def]
        self.lookups.append((webspace_key, locale, environment))
        return super().find_portal_informations_by_webspace_key_and_locale(webspace_key, locale, environment)


def _webspace() -> Webspace:
    en = Localization("en", default=True)
    de = Localization("de")
    fr = Localization("fr")
    portal = Portal(
        key="corp-portal",
        name="Corporate Portal",
        localizations=[Localization("en", default=True), Localization("de")],
        environments=[
            Environment(
                "prod",
                [Url("corp.example.com/{localization}", "prod"), Url("www.corp.example.com/{localization}", "prod")],
            )
        ],
    )
    portal.default_localization = portal.localizations[0]
    return Webspace("corp", "Corporate", [en, de, fr], [portal])


def _renderer(
    kernel: Optional[FakeKernel] = None,
    route_defaults: Optional[FakeRouteDefaults] = None,
    manager: Optional[WebspaceManager] = None,
    dispatcher: Optional[EventDispatcher] = None,
    target_group_header: Optional[str] = "X-Target-Group",
    request_context: Optional[Callable[[], Optional[RequestContext]]] = None,
) -> PreviewRenderer:
    kernel = kernel or FakeKernel()
    kwargs: Dict[str, Any] = {}
    if request_context is not None:
        kwargs["request_context"] = request_context
    return PreviewRenderer(
        route_defaults or FakeRouteDefaults(),
        KernelFactory(builder=lambda environment: kernel),
        manager or SpyWebspaceManager([_webspace()]),
        dispatcher or EventDispatcher(),
        {"analytics_key": "UA-1"},
        "prod",
        target_group_header,
        **kwargs,
    )


def _page(locale: str = "en") -> Page:
    return Page(id="42", webspace_key="corp", locale=locale, title="Hello")


def test_render_returns_kernel_body_unchanged() -> None:
    kernel = FakeKernel(content="<h1>Hello</h1>\n")

    content = _renderer(kernel=kernel).render(_page(), 42, "corp", "en")

    assert content == "<h1>Hello</h1>\n"
    assert kernel.calls == [(MAIN_REQUEST, False)]
    assert kernel.requests[0].locale == "en"


def test_unsupported_object_fails_before_lookup_and_dispatch() -> None:
    kernel = FakeKernel()
    manager = SpyWebspaceManager([_webspace()])
    renderer = _renderer(kernel=kernel, manager=manager)
    article = Article()

    with pytest.raises(RouteDefaultsProviderNotFoundError) as excinfo:
        renderer.render(article, 1, "corp", "en")

    assert excinfo.value.kind is RenderErrorKind.ROUTE_DEFAULTS_PROVIDER_NOT_FOUND
    assert excinfo.value.object is article
    assert (excinfo.value.id, excinfo.value.webspace_key, excinfo.value.locale) == (1, "corp", "en")
    assert manager.lookups == []
    assert kernel.requests == []


def test_first_portal_information_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    kernel = FakeKernel()
    manager = SpyWebspaceManager([_webspace()])
    renderer = _renderer(kernel=kernel, manager=manager)

    def _fail(*args: Any) -> None:
        raise AssertionError("synthesis must not run when a portal exists")

    monkeypatch.setattr(renderer, "synthesize_portal_information", _fail)
    renderer.render(_page(), 42, "corp", "en")

    attributes: RequestAttributes = kernel.requests[0].attributes[ATTRIBUTES_KEY]
    assert manager.lookups == [("corp", "en", "prod")]
    assert attributes.portal_url == "corp.example.com/en"
    assert attributes.resource_locator_prefix == "en/"
    assert attributes.portal is not None and attributes.portal.key == "corp-portal"
    assert attributes.localization is not None and attributes.localization.locale == "en"
    assert attributes.analytics_key == "UA-1"
    assert attributes.webspace is not None and attributes.webspace.key == "corp"


def test_missing_portal_synthesizes_one_from_ambient_host() -> None:
    kernel = FakeKernel()
    webspace = _webspace()
    manager = SpyWebspaceManager([webspace])
    renderer = _renderer(kernel=kernel, manager=manager)

    with request_context(RequestContext(host="preview.local")):
        renderer.render(_page("fr"), 42, "corp", "fr")

    attributes: RequestAttributes = kernel.requests[0].attributes[ATTRIBUTES_KEY]
    information = attributes.portal_information
    assert information is not None
    assert information.type == MATCH_TYPE_FULL
    assert information.url == "preview.local"
    assert information.localization is not None
    assert information.localization.locale == "fr"
    assert information.localization.x_default is True
    synthesized = information.webspace
    assert len(synthesized.portals) == 1
    (portal,) = synthesized.portals
    assert portal.key == "corp" and portal.name == "Corporate"
    assert portal.default_localization is information.localization
    assert portal.x_default_localization is information.localization
    assert len(portal.environments) == 1
    (environment,) = portal.environments
    assert environment.type == "prod"
    assert [(url.url, url.environment) for url in environment.urls] == [("preview.local", "prod")]
    assert attributes.localization is not None and attributes.localization.locale == "fr"

    # the configured webspace is left untouched
    assert [item.key for item in webspace.portals] == ["corp-portal"]
    assert webspace.get_localization("fr").x_default is False  # type: ignore[union-attr]
    assert manager.find_webspace_by_key("corp") is webspace


def test_synthesis_with_unknown_webspace() -> None:
    renderer = _renderer()

    with pytest.raises(WebspaceNotFoundError) as excinfo:
        renderer.synthesize_portal_information(_page(), 42, "missing", "en")

    assert excinfo.value.webspace_key == "missing"


def test_render_with_unknown_webspace_fails_without_ambient_request() -> None:
    kernel = FakeKernel()

    with pytest.raises(WebspaceNotFoundError):
        _renderer(kernel=kernel).render(_page(), 42, "missing", "en")

    assert kernel.requests == []


def test_synthesis_with_unknown_localization() -> None:
    renderer = _renderer()

    with request_context(RequestContext(host="preview.local")):
        with pytest.raises(WebspaceLocalizationNotFoundError) as excinfo:
            renderer.synthesize_portal_information(_page(), 42, "corp", "it")

    assert excinfo.value.locale == "it"


def test_synthesis_requires_ambient_request() -> None:
    with pytest.raises(RuntimeError):
        _renderer().synthesize_portal_information(_page("fr"), 42, "corp", "fr")


def test_route_defaults_are_merged_with_controller_arguments() -> None:
    kernel = FakeKernel()
    route_defaults = FakeRouteDefaults(
        defaults={"_controller": "content", "view": "pages/default", "object": "stale", "preview": False, "extra": 1}
    )
    page = _page()

    _renderer(kernel=kernel, route_defaults=route_defaults).render(page, 42, "corp", "en", partial=True)

    attributes = kernel.requests[0].attributes
    assert set(attributes) == {"_controller", "view", "object", "preview", "extra", "partial", ATTRIBUTES_KEY}
    assert attributes["object"] is page
    assert attributes["preview"] is True
    assert attributes["partial"] is True
    assert attributes["extra"] == 1
    assert isinstance(attributes[ATTRIBUTES_KEY], RequestAttributes)
    assert route_defaults.calls == [(Page, 42, "en", page)]


@pytest.mark.parametrize(
    ("header", "target_group_id", "expected"),
    [
        ("X-Target-Group", "5", "5"),
        ("X-Target-Group", None, None),
        ("X-Target-Group", "", None),
        (None, "5", None),
        ("", "5", None),
    ],
)
def test_target_group_header(header: Optional[str], target_group_id: Optional[str], expected: Optional[str]) -> None:
    kernel = FakeKernel()

    _renderer(kernel=kernel, target_group_header=header).render(
        _page(), 42, "corp", "en", target_group_id=target_group_id
    )

    assert kernel.requests[0].headers.get("x-target-group") == expected


def test_without_ambient_request_parameters_are_empty() -> None:
    kernel = FakeKernel()

    content = _renderer(kernel=kernel).render(_page(), 42, "corp", "en")

    request = kernel.requests[0]
    assert content == "<html>preview</html>"
    assert request.query == {} and request.request == {}
    attributes: RequestAttributes = request.attributes[ATTRIBUTES_KEY]
    assert dict(attributes.get_parameters) == {} and dict(attributes.post_parameters) == {}


def test_ambient_request_parameters_are_forwarded() -> None:
    kernel = FakeKernel()
    ambient = RequestContext(host="cms.local", query={"page": "2"}, body={"title": "Draft"})

    _renderer(kernel=kernel, request_context=lambda: ambient).render(_page(), 42, "corp", "en")

    request = kernel.requests[0]
    assert request.query == {"page": "2"}
    assert request.request == {"title": "Draft"}
    attributes: RequestAttributes = request.attributes[ATTRIBUTES_KEY]
    assert dict(attributes.get_parameters) == {"page": "2"}
    assert dict(attributes.post_parameters) == {"title": "Draft"}


def test_pre_render_event_is_dispatched_before_kernel() -> None:
    kernel = FakeKernel()
    dispatcher = EventDispatcher()
    seen: List[tuple] = []

    def _listener(event: PreRenderEvent) -> None:
        seen.append((event.attributes.locale, len(kernel.requests)))

    dispatcher.add_listener(PRE_RENDER, _listener)
    _renderer(kernel=kernel, dispatcher=dispatcher).render(_page(), 42, "corp", "en")

    assert seen == [("en", 0)]
    assert len(kernel.requests) == 1


def _wrapped(cause: Exception) -> HTTPException:
    try:
        raise HTTPException(status_code=404, detail="not found") from cause
    except HTTPException as exc:
        return exc


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ValueError("no content block"), TemplateNotFoundError),
        (TemplateNotFound("pages/missing.html"), TemplateNotFoundError),
        (TemplateSyntaxError("unexpected end of template", 3), TemplateRenderError),
        (RuntimeError("boom"), UnexpectedRenderError),
        (HTTPException(status_code=404, detail="no controller"), UnexpectedRenderError),
        (_wrapped(TemplateNotFound("pages/missing.html")), TemplateNotFoundError),
        (_wrapped(TemplateSyntaxError("bad", 1)), TemplateRenderError),
    ],
)
def test_kernel_failures_are_classified(error: Exception, expected: type) -> None:
    page = _page()
    renderer = _renderer(kernel=FakeKernel(error=error))

    with pytest.raises(expected) as excinfo:
        renderer.render(page, 42, "corp", "en")

    raised = excinfo.value
    assert (raised.object, raised.id, raised.webspace_key, raised.locale) == (page, 42, "corp", "en")
    inner = error.__cause__ if isinstance(error, HTTPException) and error.__cause__ else error
    assert raised.cause is inner
    assert raised.__cause__ is inner


def test_kernel_is_created_once_per_environment() -> None:
    built: List[str] = []
    kernel = FakeKernel()

    def _builder(environment: str) -> FakeKernel:
        built.append(environment)
        return kernel

    renderer = PreviewRenderer(
        FakeRouteDefaults(),
        KernelFactory(builder=_builder),
        WebspaceManager([_webspace()]),
        EventDispatcher(),
        {},
        "prod",
    )
    renderer.render(_page(), 42, "corp", "en")
    renderer.render(_page(), 42, "corp", "de")

    assert built == ["prod"]
    assert len(kernel.requests) == 2
    attributes: RequestAttributes = kernel.requests[0].attributes[ATTRIBUTES_KEY]
    assert attributes.analytics_key is None
