"""
Authentication and Authorization for the member directory.

Sign-in (LinkedIn OAuth) happens at the external identity provider; this
module only verifies the bearer JWTs it issues.

Supports:
- JWT decoding (and local minting for development and tests)
- Identity resolution: bearer token -> UserIdentity(id, role)
- Role-based authorization dependencies
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from memberdir.core.config import get_settings
from memberdir.core.database import get_session
from memberdir.core.errors import Forbidden, Unauthenticated
from memberdir.models.profile import Profile
from memberdir_shared.schemas.common import Role

log = structlog.get_logger()
settings = get_settings()

bearer_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: str,
    email: Optional[str] = None,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT shaped like the identity provider's access tokens."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated()
    token = authorization[7:].strip()
    if not token:
        raise Unauthenticated()
    return token


def _verified_claims(token: str) -> dict:
    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid or expired session")
    if not payload.get("sub"):
        raise Unauthenticated("Invalid or expired session")
    return payload


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserIdentity:
    """The authenticated caller. Role is the only authorization differentiator."""

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


async def resolve_identity(token: str, session: AsyncSession) -> UserIdentity:
    """Map a bearer token to the caller's identity.

    The role comes from the caller's profile; a caller who has not been
    provisioned yet is a plain user. Any verification failure is a hard stop.
    """
    payload = _verified_claims(token)
    user_id = payload["sub"]
    profile = await session.get(Profile, user_id)
    role = Role(profile.role) if profile else Role.USER
    return UserIdentity(id=user_id, role=role)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def get_token_claims(
    authorization: Optional[str] = Depends(bearer_header),
) -> dict:
    """Verified token claims (used when provisioning a profile from the token)."""
    return _verified_claims(_bearer_token(authorization))


async def get_identity(
    authorization: Optional[str] = Depends(bearer_header),
    session: AsyncSession = Depends(get_session),
) -> UserIdentity:
    """Main authentication dependency."""
    identity = await resolve_identity(_bearer_token(authorization), session)
    structlog.contextvars.bind_contextvars(user_id=identity.id)
    return identity


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks)
# ---------------------------------------------------------------------------

def ensure_admin(identity: UserIdentity) -> None:
    if not identity.is_admin:
        log.info("auth.admin_required", user_id=identity.id)
        raise Forbidden("Administrator access required")


async def require_admin(
    identity: UserIdentity = Depends(get_identity),
) -> UserIdentity:
    """Requires administrator role."""
    ensure_admin(identity)
    return identity
