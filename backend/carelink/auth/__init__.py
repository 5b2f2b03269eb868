"""Session context, roles and page access rules."""

from carelink.auth.roles import Role, dashboard_path, parse_role
from carelink.auth.session import SessionContext

__all__ = ["Role", "SessionContext", "dashboard_path", "parse_role"]
