"""Auth service — login, registration and role changes.

Routes call this; this calls the database. Every failure is one of the
errors in declutter.errors so the HTTP layer can map it without knowing
what went wrong inside.

Login is scoped by portal: a manager's credentials typed into the
customer login are rejected the same way a wrong password is.
"""

import re
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from declutter.auth.dependencies import CurrentUser, ensure_role
from declutter.auth.password import hash_password, verify_password
from declutter.auth.tokens import TokenStore
from declutter.config import settings
from declutter.db.models import (
    COOKIE_CONSENT_VALUES,
    ROLE_CUSTOMER,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    ROLES,
    User,
)
from declutter.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z0-9-]{2,}$")

INVALID_CREDENTIALS = "Invalid email or password"


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def check_password_strength(password: str) -> None:
    if len(password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters"
        )


class AuthService:
    """Credential checks, account creation and guarded role elevation."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tokens = TokenStore(db)

    # ─── Login ──────────────────────────────────────────

    async def login(self, email: str, password: str, role: str) -> tuple[str, User]:
        """Verify credentials for one portal and issue a token.

        Unknown email, wrong portal and wrong password all raise the same
        AuthenticationError so the response doesn't reveal which accounts exist.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        result = await self.db.execute(
            select(User).where(User.email == email, User.role == role)
        )
        user = result.scalars().first()

        if not user or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", role=role)
            raise AuthenticationError(INVALID_CREDENTIALS)

        token = await self.tokens.issue(user.id)
        await self.db.commit()
        logger.info("auth.login", user_id=user.id, role=role)
        return token, user

    # ─── Registration ───────────────────────────────────

    async def create_user(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        role: str,
        phone: Optional[str] = None,
        cookie_consent: Optional[str] = None,
    ) -> User:
        """Validate and insert a user row (flushed, not committed)."""
        if not email or not password or not name:
            raise ValidationError("Email, password, and name are required")
        await self._ensure_email_free(email)
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        check_password_strength(password)

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            phone=phone or None,
            role=role,
            cookie_consent=(
                cookie_consent
                if cookie_consent in COOKIE_CONSENT_VALUES
                else "pending"
            ),
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email.
            await self.db.rollback()
            raise ConflictError("Email already registered") from None
        return user

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        phone: Optional[str] = None,
        cookie_consent: Optional[str] = None,
        role: str = ROLE_CUSTOMER,
    ) -> tuple[str, User]:
        """Create a customer (or manager) account and log it in.

        Nothing is written and no token is issued when validation fails.
        """
        if role not in (ROLE_CUSTOMER, ROLE_MANAGER):
            raise ValidationError("Invalid role")

        user = await self.create_user(
            email=email,
            password=password,
            name=name,
            role=role,
            phone=phone,
            cookie_consent=cookie_consent,
        )
        token = await self.tokens.issue(user.id)
        await self.db.commit()
        logger.info("auth.registered", user_id=user.id, role=role)
        return token, user

    async def _ensure_email_free(self, email: str) -> None:
        # Case-sensitive exact match.
        result = await self.db.execute(select(User.id).where(User.email == email))
        if result.first() is not None:
            raise ConflictError("Email already registered")

    # ─── Session ────────────────────────────────────────

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def logout(self, token: Optional[str]) -> None:
        if token:
            await self.tokens.revoke(token)

    # ─── Role elevation ─────────────────────────────────

    async def set_role(
        self, caller: CurrentUser, target_id: int, new_role: str
    ) -> User:
        """Change a user's role. Manager only.

        Demoting a manager counts the managers first, in the same
        transaction as the update (rows locked where the database supports
        FOR UPDATE). If that manager is the last one the change is refused
        and nothing is written.
        """
        ensure_role(caller, (ROLE_MANAGER,))
        if new_role not in ROLES:
            raise ValidationError("Invalid role")

        user = await self.db.get(User, target_id)
        if not user:
            raise NotFoundError("User not found")

        old_role = user.role
        if old_role == new_role:
            return user

        try:
            if old_role == ROLE_MANAGER:
                managers = await self._count_managers_locked()
                if managers <= 1:
                    raise ValidationError("Cannot remove the last manager")

            user.role = new_role
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "auth.role_changed",
            user_id=target_id,
            old_role=old_role,
            new_role=new_role,
            by=caller.id,
        )
        return user

    async def _count_managers_locked(self) -> int:
        locked = await self.db.execute(
            select(User.id).where(User.role == ROLE_MANAGER).with_for_update()
        )
        return len(locked.scalars().all())

    # ─── Staff ──────────────────────────────────────────

    async def create_employee(
        self,
        caller: CurrentUser,
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        phone: Optional[str] = None,
    ) -> User:
        """Manager creates an employee account (no token is issued)."""
        ensure_role(caller, (ROLE_MANAGER,))
        user = await self.create_user(
            email=email,
            password=password,
            name=name,
            role=ROLE_EMPLOYEE,
            phone=phone,
        )
        await self.db.commit()
        logger.info("auth.employee_created", user_id=user.id, by=caller.id)
        return user
