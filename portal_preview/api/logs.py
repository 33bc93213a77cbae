from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Deque, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..app import AppState, get_app_state
from .dependencies import logs_guard

router = APIRouter(tags=["logs"])


class LogTailResponse(BaseModel):
    path: Optional[str]
    webspace: Optional[str] = None
    lines: List[str]


def _tail(path: Path, limit: int, needle: Optional[str]) -> List[str]:
    lines: Deque[str] = deque(maxlen=limit)
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            line = raw.rstrip("\n")
            if needle is None or needle in line:
                lines.append(line)
    return list(lines)


@router.get("/logs/tail", response_model=LogTailResponse, dependencies=[Depends(logs_guard)])
async def tail_logs(
    limit: int = Query(100, ge=1, le=1000, description="Number of log lines to return"),
    webspace: Optional[str] = Query(None, description="Only return preview lines for this webspace key"),
    state: AppState = Depends(get_app_state),
) -> LogTailResponse:
    path = state.log_file
    if path is None or not path.exists():
        return LogTailResponse(path=str(path) if path else None, webspace=webspace, lines=[])

    # Matches the "webspace=<key>" field written by the pre-render listener.
    needle = f"webspace={webspace} " if webspace else None
    return LogTailResponse(path=str(path), webspace=webspace, lines=_tail(path, limit, needle))
