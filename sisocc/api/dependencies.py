"""FastAPI dependencies for the authenticated actor.

Token verification happens upstream.  The gateway forwards the
authenticated user id in ``X-Actor-Id`` and the granted permissions,
comma separated, in ``X-Actor-Permissions``.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Header, HTTPException, Request

from sisocc.domain.audit import RequestContext

DELETE_PERMISSION = "delete"


def get_request_context(
    request: Request,
    x_actor_id: str | None = Header(default=None),
) -> RequestContext:
    if not x_actor_id or not x_actor_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return RequestContext(
        actor_id=x_actor_id.strip(),
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def require_permission(permission: str) -> Callable[..., None]:
    """Dependency factory rejecting actors that lack *permission*."""

    def check(x_actor_permissions: str | None = Header(default=None)) -> None:
        granted = {p.strip().lower() for p in (x_actor_permissions or "").split(",")}
        if permission.lower() not in granted:
            raise HTTPException(status_code=403, detail="Permission denied")

    return check
