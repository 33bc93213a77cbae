from __future__ import annotations

import math
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from ..app import AppState, RateLimitExceeded, get_app_state


def verify_admin_token(
    request: Request,
    state: AppState = Depends(get_app_state),
) -> Optional[str]:
    """Return the ``x-admin-token`` header, enforcing it when one is configured."""

    expected = state.config.admin_token
    provided = request.headers.get("x-admin-token")
    if expected and (not provided or not secrets.compare_digest(provided, expected)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication token")
    return provided


def enforce_rate_limit(state: AppState, request: Request, scope: str, token: Optional[str] = None) -> None:
    """Count one request against ``scope`` for the calling editor.

    Editors are told apart by their admin token, falling back to the client
    host, so one editor hammering a webspace does not lock out the others.
    """

    client = token or (request.client.host if request.client else "anonymous")
    try:
        state.rate_limiter.hit(f"{scope}:{client}")
    except RateLimitExceeded as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded for {scope}",
            headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
        ) from exc


def logs_guard(
    request: Request,
    state: AppState = Depends(get_app_state),
    token: Optional[str] = Depends(verify_admin_token),
) -> Optional[str]:
    enforce_rate_limit(state, request, "logs", token)
    return token
