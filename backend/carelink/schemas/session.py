"""Pydantic schemas for session and routing responses."""

from pydantic import BaseModel


class SessionOut(BaseModel):
    """Who the caller is, as seen by the API."""

    authenticated: bool
    user_id: str | None = None
    role: str | None = None
    dashboard_path: str | None = None


class RouteDecisionOut(BaseModel):
    """Where a page request should go."""

    path: str
    redirect: str | None = None
