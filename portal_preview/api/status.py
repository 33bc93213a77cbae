from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..app import AppState, get_app_state
from ..models import PortalInformationResponse, WebspaceResponse

router = APIRouter(tags=["status"])


class HealthResponse(BaseModel):
    ok: bool
    environment: str
    webspace_count: int
    page_count: int
    last_rendered: Optional[str] = None


@router.get("/health", response_model=HealthResponse)
async def health(state: AppState = Depends(get_app_state)) -> HealthResponse:
    return HealthResponse(
        ok=True,
        environment=state.settings.environment,
        webspace_count=len(state.webspace_manager),
        page_count=len(state.repository),
        last_rendered=state.last_rendered,
    )


@router.get("/webspaces", response_model=List[WebspaceResponse])
async def webspaces(state: AppState = Depends(get_app_state)) -> List[WebspaceResponse]:
    informations = state.webspace_manager.get_portal_informations(state.settings.environment)
    result: List[WebspaceResponse] = []
    for webspace in state.webspace_manager.list():
        result.append(
            WebspaceResponse(
                key=webspace.key,
                name=webspace.name,
                locales=[localization.locale for localization in webspace.localizations],
                portal_informations=[
                    PortalInformationResponse(
                        url=information.url,
                        portal=information.portal_key,
                        locale=information.localization.locale if information.localization else None,
                        prefix=information.prefix,
                        main=information.main,
                    )
                    for information in informations
                    if information.webspace_key == webspace.key
                ],
            )
        )
    return result
