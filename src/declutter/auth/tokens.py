"""Opaque bearer tokens backed by the auth_tokens table.

Tokens are 64 hex chars (256 bits from `secrets`). Nothing is encoded in
them: the database row is the session. That makes logout a DELETE and
means every request does one indexed lookup.

Expired rows are not purged on lookup — resolve() simply filters on
expires_at > now. TokenReaper (services/token_reaper.py) and the
`declutter purge-tokens` command clean them up.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.config import settings
from declutter.db.models import AuthToken, User


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenStore:
    """Issue, resolve and revoke session tokens."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue(self, user_id: int, ttl: Optional[timedelta] = None) -> str:
        """Create a new token for a user. Other sessions stay valid.

        Flushes but does not commit — the caller owns the transaction.
        """
        token = secrets.token_hex(32)
        expires_at = _now() + (ttl or timedelta(hours=settings.token_ttl_hours))
        self.db.add(AuthToken(token=token, user_id=user_id, expires_at=expires_at))
        await self.db.flush()
        return token

    async def resolve(self, token: str) -> Optional[User]:
        """Return the token's user, or None if the token is unknown or expired.

        Both cases return None so callers can't tell them apart.
        """
        if not token:
            return None
        result = await self.db.execute(
            select(User)
            .join(AuthToken, AuthToken.user_id == User.id)
            .where(AuthToken.token == token, AuthToken.expires_at > _now())
        )
        return result.scalars().first()

    async def revoke(self, token: str) -> None:
        """Delete a token. Unknown or already-revoked tokens are fine."""
        await self.db.execute(delete(AuthToken).where(AuthToken.token == token))
        await self.db.commit()

    async def purge_expired(self) -> int:
        """Delete every expired token. Returns how many rows went away."""
        result = await self.db.execute(
            delete(AuthToken).where(AuthToken.expires_at <= _now())
        )
        await self.db.commit()
        return result.rowcount or 0
