"""TokenStore tests — issue, resolve, revoke, purge."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from declutter.auth.tokens import TokenStore
from declutter.db.models import AuthToken


async def _token_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(AuthToken))).scalar_one()


@pytest.mark.asyncio
async def test_issue_and_resolve(db_session, customer):
    user, _ = customer
    store = TokenStore(db_session)

    token = await store.issue(user.id)
    await db_session.commit()

    assert len(token) == 64
    int(token, 16)  # hex

    resolved = await store.resolve(token)
    assert resolved is not None
    assert resolved.id == user.id


@pytest.mark.asyncio
async def test_resolve_unknown_and_empty(db_session):
    store = TokenStore(db_session)
    assert await store.resolve("deadbeef") is None
    assert await store.resolve("") is None


@pytest.mark.asyncio
async def test_expired_token_does_not_resolve(db_session, customer):
    user, _ = customer
    store = TokenStore(db_session)

    token = await store.issue(user.id, ttl=timedelta(seconds=-5))
    await db_session.commit()

    assert await store.resolve(token) is None


@pytest.mark.asyncio
async def test_tokens_are_unique_per_issue(db_session, customer):
    user, _ = customer
    store = TokenStore(db_session)

    tokens = {await store.issue(user.id) for _ in range(5)}
    await db_session.commit()

    assert len(tokens) == 5
    for token in tokens:
        assert (await store.resolve(token)).id == user.id


@pytest.mark.asyncio
async def test_revoke_is_idempotent(db_session, customer):
    user, _ = customer
    store = TokenStore(db_session)
    token = await store.issue(user.id)
    await db_session.commit()

    await store.revoke(token)
    await store.revoke(token)
    await store.revoke("never-issued")

    assert await store.resolve(token) is None


@pytest.mark.asyncio
async def test_purge_expired_keeps_live_tokens(db_session, customer):
    user, _ = customer
    store = TokenStore(db_session)
    before = await _token_count(db_session)  # the fixture's own live token

    live = await store.issue(user.id)
    await store.issue(user.id, ttl=timedelta(hours=-1))
    await store.issue(user.id, ttl=timedelta(minutes=-1))
    await db_session.commit()

    purged = await store.purge_expired()

    assert purged == 2
    assert await _token_count(db_session) == before + 1
    assert (await store.resolve(live)).id == user.id
