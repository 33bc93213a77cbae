from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from ..app import AppState, get_app_state
from ..models import PreviewRenderRequest
from ..preview import (
    PreviewObjectNotFoundError,
    PreviewRendererError,
    ProviderNotFoundError,
    RenderErrorKind,
    RequestContext,
    request_context,
)
from .dependencies import enforce_rate_limit, verify_admin_token

router = APIRouter(tags=["preview"])

_ERROR_STATUS = {
    RenderErrorKind.ROUTE_DEFAULTS_PROVIDER_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    RenderErrorKind.WEBSPACE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RenderErrorKind.WEBSPACE_LOCALIZATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RenderErrorKind.TEMPLATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RenderErrorKind.TEMPLATE_RENDER_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RenderErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _context_for(request: Request, payload: PreviewRenderRequest) -> RequestContext:
    return RequestContext(
        host=request.url.hostname or "localhost",
        query=dict(request.query_params),
        body=payload.model_dump(mode="json"),
    )


@router.post("/preview/render", response_class=HTMLResponse)
async def render_preview(
    payload: PreviewRenderRequest,
    request: Request,
    state: AppState = Depends(get_app_state),
    token: Optional[str] = Depends(verify_admin_token),
) -> HTMLResponse:
    enforce_rate_limit(state, request, f"preview:{payload.webspace}", token)

    try:
        provider = state.providers.get(payload.provider)
        obj = provider.get_object(payload.id, payload.locale)
    except (ProviderNotFoundError, PreviewObjectNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    if payload.context:
        obj = provider.set_context(obj, payload.locale, payload.context)
    if payload.data:
        provider.set_values(obj, payload.locale, payload.data)

    try:
        with request_context(_context_for(request, payload)):
            content = state.renderer.render(
                obj,
                provider.get_id(obj),
                payload.webspace,
                payload.locale,
                partial=payload.partial,
                target_group_id=payload.target_group_id,
            )
    except PreviewRendererError as exc:
        raise HTTPException(status_code=_ERROR_STATUS[exc.kind], detail=exc.as_dict()) from exc

    state.last_rendered = f"{payload.provider}:{payload.id}:{payload.locale}"
    return HTMLResponse(
        content,
        headers={
            "Cache-Control": "no-store",
            "X-Preview-Webspace": payload.webspace,
            "X-Preview-Locale": payload.locale,
        },
    )
