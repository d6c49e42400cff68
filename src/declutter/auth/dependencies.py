"""FastAPI auth dependencies.

These are used as Depends() in route handlers to turn the request's
`Authorization: Bearer <token>` header into a CurrentUser.

CurrentUser is built fresh for every request and handed down explicitly
to services. Nothing about the caller is kept between requests.
"""

import re
from typing import Iterable, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.tokens import TokenStore
from declutter.db.engine import get_db
from declutter.db.models import ROLE_CUSTOMER, STAFF_ROLES, User
from declutter.errors import AuthenticationError, AuthorizationError

_BEARER_RE = re.compile(r"^Bearer\s+(\S+)\s*$", re.IGNORECASE)


class CurrentUser:
    """The authenticated caller of one request.

    Services take this instead of a bare user id so role and ownership
    checks don't need another query.
    """

    def __init__(
        self,
        id: int,
        role: str,
        email: str = "",
        name: str = "",
        token: Optional[str] = None,
    ):
        self.id = id
        self.role = role
        self.email = email
        self.name = name
        self.token = token

    @classmethod
    def from_user(cls, user: User, token: Optional[str] = None) -> "CurrentUser":
        return cls(
            id=user.id,
            role=user.role,
            email=user.email,
            name=user.name,
            token=token,
        )

    @property
    def is_customer(self) -> bool:
        return self.role == ROLE_CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def __repr__(self) -> str:
        return f"CurrentUser(id={self.id!r}, role={self.role!r})"


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an Authorization header, or None if malformed."""
    if not authorization:
        return None
    match = _BEARER_RE.match(authorization)
    return match.group(1) if match else None


def ensure_role(caller: CurrentUser, allowed_roles: Iterable[str]) -> CurrentUser:
    """Raise AuthorizationError unless the caller's role is allowed."""
    if caller.role not in tuple(allowed_roles):
        raise AuthorizationError("Insufficient permissions")
    return caller


async def authenticate(
    authorization: Optional[str], db: AsyncSession
) -> CurrentUser:
    """Resolve a raw Authorization header to a caller or raise 401."""
    token = parse_bearer(authorization)
    if not token:
        raise AuthenticationError("Unauthorized")
    user = await TokenStore(db).resolve(token)
    if not user:
        raise AuthenticationError("Unauthorized")
    return CurrentUser.from_user(user, token=token)


async def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Optional[CurrentUser]:
    """Soft auth — None when the header is absent or the token doesn't resolve.

    Used by endpoints that anonymous visitors may call (quote submission).
    """
    try:
        return await authenticate(authorization, db)
    except AuthenticationError:
        return None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Hard auth — 401 unless a valid, unexpired token is presented."""
    return await authenticate(authorization, db)


def require_roles(*allowed_roles: str):
    """Build a dependency that authenticates and then checks the role.

    Usage:
        @router.get("/employees")
        async def list_employees(caller = Depends(require_roles("manager"))):
    """

    async def _dependency(
        caller: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        return ensure_role(caller, allowed_roles)

    return _dependency
