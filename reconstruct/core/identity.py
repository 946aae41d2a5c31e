"""Bearer identity gate.

Two credential shapes reach the API:

* ``Bearer <jwt>``: a signed access token carrying the user id. This is the
  primary scheme; the user row is loaded to obtain name and email.
* ``Bearer <name>:<email>``: a legacy pseudo-token sent by older mobile
  builds. It is not verified in any way, so anyone who knows a user's name
  and email can act as them. Routes that accept it are marked deprecated and
  the form can be disabled with ``LEGACY_TOKEN_AUTH_ENABLED=false``.
"""
import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.config import get_settings
from reconstruct.core.errors import AuthenticationFailure, AuthorizationMismatch, NotFound
from reconstruct.core.security import user_id_from_token
from reconstruct.db.session import get_db
from reconstruct.models.user import User

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    name: str
    email: str

    def owns(self, user_name: str | None, email: str | None) -> bool:
        return user_name == self.name and email == self.email


def bearer_token(authorization: str | None) -> str:
    """Extract the credential from an Authorization header or reject the request."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationFailure("Authentication required")
    return authorization[len(BEARER_PREFIX):].strip()


def parse_legacy_token(token: str) -> Identity:
    """Split a name:email pseudo-token on its first colon."""
    user_name, _, email = token.partition(":")
    if not user_name or not email:
        raise AuthenticationFailure("Invalid authentication format. Expected: Bearer username:email")
    return Identity(name=user_name, email=email)


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve a signed bearer token to its user row."""
    token = bearer_token(authorization)
    user_id = user_id_from_token(token)
    if user_id is None:
        raise AuthenticationFailure("Invalid token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def get_token_identity(
    user: Annotated[User, Depends(get_current_user)],
) -> Identity:
    return Identity(name=user.name, email=user.email)


async def get_legacy_identity(
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Accept the deprecated name:email pseudo-token."""
    token = bearer_token(authorization)
    if not get_settings().legacy_token_auth_enabled:
        raise AuthenticationFailure("Legacy username:email tokens are disabled; sign in for a token")
    identity = parse_legacy_token(token)
    logger.warning("Legacy pseudo-token used for %s", identity.email)
    return identity


def ensure_owner(identity: Identity, user_name: str | None, email: str | None, what: str = "tasks") -> None:
    """Reject a mutation whose body names a different user than the credential."""
    if not identity.owns(user_name, email):
        raise AuthorizationMismatch(f"Authorization mismatch: Cannot save {what} for another user")
