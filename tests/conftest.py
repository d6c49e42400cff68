"""Test fixtures — a fresh in-memory database per test.

Pattern for async SQLAlchemy + FastAPI without a database server:

1. Each test gets its own aiosqlite in-memory engine. StaticPool keeps a
   single connection open so every session sees the same database.
2. Foreign keys are enforced, as on PostgreSQL. Tables are created with
   Base.metadata.create_all and vanish with the engine when the test ends.
3. get_db is overridden so every request opens a session on that engine.
   Services commit for real; nothing leaks because the database itself
   disappears.

Settings are read at import time, so the env overrides come first.
"""

import itertools
import os

os.environ.setdefault("DECLUTTER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DECLUTTER_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DECLUTTER_TOKEN_REAP_INTERVAL_SECONDS", "0")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from declutter.auth.tokens import TokenStore  # noqa: E402
from declutter.db.engine import enable_sqlite_foreign_keys, get_db  # noqa: E402
from declutter.db.models import (  # noqa: E402
    ROLE_CUSTOMER,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    Base,
)
from declutter.main import app  # noqa: E402
from declutter.services.auth_service import AuthService  # noqa: E402

PASSWORD = "correct-horse"


@pytest_asyncio.fixture()
async def session_factory():
    """Session factory bound to a brand-new in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for arranging and inspecting data directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client running the real app against the test database.

    Auth is NOT overridden: requests authenticate with real bearer tokens
    issued by the make_user fixture.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def make_user(session_factory):
    """Factory: create a user with a live token, return (user, auth headers)."""
    counter = itertools.count(1)

    async def _make(role: str = ROLE_CUSTOMER, email: str | None = None, name: str | None = None):
        n = next(counter)
        async with session_factory() as db:
            user = await AuthService(db).create_user(
                email=email or f"{role}{n}@example.com",
                password=PASSWORD,
                name=name or f"{role.title()} {n}",
                role=role,
            )
            token = await TokenStore(db).issue(user.id)
            await db.commit()
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest_asyncio.fixture()
async def customer(make_user):
    return await make_user(ROLE_CUSTOMER)


@pytest_asyncio.fixture()
async def other_customer(make_user):
    return await make_user(ROLE_CUSTOMER)


@pytest_asyncio.fixture()
async def employee(make_user):
    return await make_user(ROLE_EMPLOYEE)


@pytest_asyncio.fixture()
async def manager(make_user):
    return await make_user(ROLE_MANAGER)


def quote_body(**overrides) -> dict:
    body = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "service_type": "Full home declutter",
    }
    body.update(overrides)
    return body


def job_body(customer_id: int, **overrides) -> dict:
    body = {
        "customer_id": customer_id,
        "title": "Garage clear-out",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
    }
    body.update(overrides)
    return body
