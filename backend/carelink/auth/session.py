"""Session context built from identity-provider access tokens.

The identity provider issues HS256 JWTs. The claims this service reads:
  - sub                 : account id
  - user_metadata.role  : role string chosen at sign-up (any known spelling)
  - exp / aud           : verified by PyJWT

The token is taken from the `Authorization: Bearer` header and falls back to
the access-token cookie. Every route receives the resulting `SessionContext`
through FastAPI dependencies instead of re-reading tokens itself.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from carelink.auth.roles import Role, dashboard_path, parse_role
from carelink.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class SessionContext:
    """Read-only identity of the caller."""

    user_id: str
    role: Role

    @property
    def is_provider(self) -> bool:
        return self.role is Role.HEALTHCARE_PROVIDER

    @property
    def dashboard_path(self) -> str:
        return dashboard_path(self.role)


def decode_token(token: str) -> dict[str, Any] | None:
    """Verify a token and return its claims, or None if invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options={"verify_aud": settings.auth_jwt_audience is not None},
        )
    except ExpiredSignatureError:
        logger.debug("Access token has expired")
        return None
    except InvalidTokenError as e:
        logger.debug(f"Invalid access token: {e}")
        return None


def session_from_claims(claims: dict[str, Any]) -> SessionContext | None:
    """Build a session from verified claims; None without a subject."""
    user_id = claims.get("sub")
    if not user_id:
        return None

    metadata = claims.get("user_metadata") or {}
    role = parse_role(metadata.get("role") if isinstance(metadata, dict) else None)
    return SessionContext(user_id=str(user_id), role=role)


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return request.cookies.get(settings.auth_access_cookie_name)


async def get_optional_session(request: Request) -> SessionContext | None:
    """Dependency: the caller's session, or None when anonymous."""
    token = _extract_token(request)
    if not token:
        return None

    claims = decode_token(token)
    if claims is None:
        return None
    return session_from_claims(claims)


async def get_session(
    session: Annotated[SessionContext | None, Depends(get_optional_session)],
) -> SessionContext:
    """Dependency: the caller's session; 401 when anonymous."""
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


async def require_provider(
    session: Annotated[SessionContext, Depends(get_session)],
) -> SessionContext:
    """Dependency: the caller must be a healthcare provider; 403 otherwise."""
    if not session.is_provider:
        logger.info(f"User {session.user_id} denied provider-only route")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Healthcare provider role required",
        )
    return session


OptionalSession = Annotated[SessionContext | None, Depends(get_optional_session)]
CurrentSession = Annotated[SessionContext, Depends(get_session)]
ProviderSession = Annotated[SessionContext, Depends(require_provider)]
