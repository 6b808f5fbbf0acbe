"""Request identity: who is calling and which cart or orders they own.

A valid ``Authorization: Bearer <jwt>`` makes the caller a member; otherwise
an ``x-session-id`` header makes them a guest. Route dependencies
``require_owner``, ``require_member`` and ``require_admin`` enforce the
level of access an endpoint needs.
"""

from dataclasses import dataclass, field

import jwt
import structlog
from fastapi import Depends, Header

from storefront.config import get_settings
from storefront.errors import Forbidden, Unauthorized
from storefront.shared.owner import ADMIN_ROLE, Guest, Member, Owner

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    owner: Owner | None = None
    claims: dict = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        return self.owner.user_id if isinstance(self.owner, Member) else None

    @property
    def role(self) -> str | None:
        return self.claims.get("role")

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def owner_fields(self) -> dict:
        """``user_id``/``session_id`` keyword arguments for a command."""
        return self.owner.as_fields()


def decode_token(token: str) -> dict:
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token", reason=str(exc))
        raise Unauthorized("Invalid or expired token") from None

    if not claims.get("userId"):
        raise Unauthorized("Invalid or expired token")
    return claims


def resolve_identity(
    authorization: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
) -> Identity:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise Unauthorized("Invalid authorization header")
        claims = decode_token(token.strip())
        return Identity(owner=Member(user_id=str(claims["userId"])), claims=claims)

    if x_session_id:
        return Identity(owner=Guest(session_id=x_session_id))

    return Identity()


def require_owner(identity: Identity = Depends(resolve_identity)) -> Identity:
    if identity.owner is None:
        raise Unauthorized("User ID or session ID is required")
    return identity


def require_member(identity: Identity = Depends(resolve_identity)) -> Identity:
    if not isinstance(identity.owner, Member):
        raise Unauthorized("Authentication required")
    return identity


def require_admin(identity: Identity = Depends(require_member)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin access required")
    return identity
