"""Page access rules: which paths are public and where to redirect."""

from urllib.parse import urlencode

from carelink.auth.roles import Role
from carelink.auth.session import SessionContext

PUBLIC_PATHS = (
    "/",
    "/login",
    "/signup",
    "/emergency-contacts",
    "/report-emergency",
    "/auth/callback",
    "/auth/reset-password",
)

AUTH_PAGES = ("/login", "/signup")


def is_public_path(path: str) -> bool:
    """Public pages, their sub-pages, API and framework assets, static files."""
    if path.startswith(("/api/", "/_next/")) or "." in path:
        return True
    return any(path == public or path.startswith(f"{public}/") for public in PUBLIC_PATHS)


def is_dashboard_path(path: str) -> bool:
    return path == "/dashboard" or path.startswith("/dashboard/") or "/dashboard/" in path


def resolve_redirect(
    path: str,
    session: SessionContext | None,
    from_path: str | None = None,
) -> str | None:
    """
    Decide where a page request should go.

    Returns the redirect target, or None when the request may proceed.
    """
    if session is None:
        if is_public_path(path):
            return None
        return f"/login?{urlencode({'from': path})}"

    if path in AUTH_PAGES:
        # Coming back from a dashboard means the dashboard bounced us here.
        if from_path and is_dashboard_path(from_path):
            return "/"
        return session.dashboard_path

    if path == "/dashboard":
        return session.dashboard_path

    if path.startswith("/dashboard/healthcare") and session.role is not Role.HEALTHCARE_PROVIDER:
        return session.dashboard_path

    return None
