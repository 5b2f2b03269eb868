"""Session endpoints used by the frontend to gate pages."""

from fastapi import APIRouter, Query

from carelink.auth.routing import resolve_redirect
from carelink.auth.session import OptionalSession
from carelink.schemas.session import RouteDecisionOut, SessionOut

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionOut)
async def current_session(session: OptionalSession) -> SessionOut:
    """Who the caller is and which dashboard belongs to them."""
    if session is None:
        return SessionOut(authenticated=False)

    return SessionOut(
        authenticated=True,
        user_id=session.user_id,
        role=session.role.value,
        dashboard_path=session.dashboard_path,
    )


@router.get("/route", response_model=RouteDecisionOut)
async def route_decision(
    session: OptionalSession,
    path: str = Query(..., description="Page path being requested"),
    from_path: str | None = Query(None, alias="from", description="Page that redirected here"),
) -> RouteDecisionOut:
    """Tell the frontend whether to render `path` or redirect elsewhere."""
    return RouteDecisionOut(path=path, redirect=resolve_redirect(path, session, from_path))
