"""Declutter admin CLI — database setup and account administration.

Usage:
    declutter init-db                                  # Create missing tables
    declutter create-manager boss@example.com --name "Pat"
    declutter set-role 42 employee                     # Change a user's role
    declutter purge-tokens                             # Delete expired sessions
    declutter serve --reload                           # Run the API with uvicorn
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from declutter import __version__

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="declutter")
def main():
    """Declutter Portal administration."""


@main.command("init-db")
def init_db():
    """Create any tables that don't exist yet."""
    from declutter.db.engine import create_schema

    _run(create_schema())
    click.secho("Database schema is up to date", fg="green")


@main.command("create-manager")
@click.argument("email")
@click.option("--name", "-n", required=True, help="Display name")
@click.option("--phone", default=None)
@click.password_option(help="Password (prompted if omitted)")
def create_manager(email: str, name: str, phone: Optional[str], password: str):
    """Create a manager account.

    Works even when self-service manager registration is disabled, so the
    first manager can always be bootstrapped from the shell.
    """
    from declutter.errors import PortalError

    async def _create():
        from declutter.db.engine import async_session_factory
        from declutter.db.models import ROLE_MANAGER
        from declutter.services.auth_service import AuthService

        async with async_session_factory() as db:
            user = await AuthService(db).create_user(
                email=email, password=password, name=name,
                role=ROLE_MANAGER, phone=phone,
            )
            await db.commit()
            return user.id

    try:
        user_id = _run(_create())
    except PortalError as e:
        _fail(e.message)
    click.secho(f"Manager #{user_id} created ({email})", fg="green")


@main.command("set-role")
@click.argument("user_id", type=int)
@click.argument("role", type=click.Choice(["customer", "employee", "manager"]))
def set_role(user_id: int, role: str):
    """Change USER_ID's role. The last manager can't be demoted."""
    from declutter.errors import PortalError

    async def _set():
        from declutter.auth.dependencies import CurrentUser
        from declutter.db.engine import async_session_factory
        from declutter.db.models import ROLE_MANAGER
        from declutter.services.auth_service import AuthService

        # Shell access stands in for a manager session.
        operator = CurrentUser(id=0, role=ROLE_MANAGER, name="cli")
        async with async_session_factory() as db:
            user = await AuthService(db).set_role(operator, user_id, role)
            return user.email

    try:
        email = _run(_set())
    except PortalError as e:
        _fail(e.message)
    click.secho(f"{email} is now {role}", fg="green")


@main.command("purge-tokens")
def purge_tokens():
    """Delete expired session tokens once (the server also does this hourly)."""
    from declutter.services.token_reaper import TokenReaper

    purged = _run(TokenReaper().sweep())
    click.echo(f"Purged {purged} expired token(s)")


@main.command()
@click.option("--host", default=None, help="Bind address (default: DECLUTTER_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: DECLUTTER_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from declutter.config import settings

    uvicorn.run(
        "declutter.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
