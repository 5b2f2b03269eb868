"""User roles and role-name normalization."""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles the application distinguishes between."""

    PATIENT = "patient"
    HEALTHCARE_PROVIDER = "healthcare_provider"


# Spellings seen in identity-provider metadata, after lowercasing and
# folding spaces/hyphens to underscores.
_ROLE_ALIASES: dict[str, Role] = {
    "patient": Role.PATIENT,
    "public": Role.PATIENT,
    "healthcare": Role.HEALTHCARE_PROVIDER,
    "healthcare_provider": Role.HEALTHCARE_PROVIDER,
}

DASHBOARD_PATHS: dict[Role, str] = {
    Role.PATIENT: "/dashboard/patient",
    Role.HEALTHCARE_PROVIDER: "/dashboard/healthcare",
}


def parse_role(value: object) -> Role:
    """
    Map an external role string to a `Role`.

    Unknown or missing values fail closed to `Role.PATIENT`, so an account
    never gains provider access through an unexpected spelling.
    """
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return Role.PATIENT

    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    role = _ROLE_ALIASES.get(key)
    if role is None:
        logger.debug(f"Unrecognized role {value!r}, defaulting to patient")
        return Role.PATIENT
    return role


def dashboard_path(role: Role) -> str:
    """Dashboard page for a role."""
    return DASHBOARD_PATHS[role]
