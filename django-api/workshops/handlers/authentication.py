"""Bearer token authentication against Supabase-issued JWTs."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from django.conf import settings
from jose import JWTError, jwt
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClubPrincipal:
    """Authenticated caller as described by the access token."""

    user_id: UUID
    email: str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)

    is_authenticated = True
    is_anonymous = False

    def has_any_role(self, roles: frozenset[str]) -> bool:
        return bool(self.roles & roles)


def _principal_from_claims(claims: dict) -> ClubPrincipal:
    try:
        user_id = UUID(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise exceptions.AuthenticationFailed("Invalid token subject") from exc

    app_metadata = claims.get("app_metadata") or {}
    roles = app_metadata.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return ClubPrincipal(
        user_id=user_id,
        email=claims.get("email"),
        roles=frozenset(roles),
    )


class SupabaseJWTAuthentication(authentication.BaseAuthentication):
    """Authenticate ``Authorization: Bearer <jwt>`` headers."""

    keyword = "Bearer"

    def authenticate(self, request: Request) -> tuple[ClubPrincipal, str] | None:
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed("Invalid authorization header")

        token = header[1].decode()
        try:
            claims = jwt.decode(
                token,
                settings.SUPABASE_JWT_SECRET,
                algorithms=[settings.SUPABASE_JWT_ALGORITHM],
                audience=settings.SUPABASE_JWT_AUDIENCE,
            )
        except JWTError as exc:
            logger.info("Rejected access token: %s", exc)
            raise exceptions.AuthenticationFailed("Invalid or expired token") from exc

        return _principal_from_claims(claims), token

    def authenticate_header(self, request: Request) -> str:
        return self.keyword
