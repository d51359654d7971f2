"""userauth CLI — operator tasks that don't go through HTTP.

Usage:
    userauth init-db                         # Create the users table
    userauth create-user alice               # Register (password prompted)
    userauth issue-token admin --ttl 3600    # Mint a bearer token

Learn: The admin name is reserved on the HTTP API, so an account for it
can only be created here. issue-token lets an operator holding the signing
secret mint a token directly, e.g. to bootstrap the first admin session.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import timedelta
from typing import Optional

import click

from userauth import __version__
from userauth.auth.dependencies import get_password_hasher, get_token_issuer
from userauth.config import settings
from userauth.errors import UserAuthError


def _run(coro):
    return asyncio.run(coro)


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


async def _init_db(database_url: str) -> None:
    from userauth.db.engine import make_engine
    from userauth.db.models import Base

    engine = make_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


async def _create_user(database_url: str, name: str, password: str):
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from userauth.db.engine import make_engine
    from userauth.services.auth_service import AuthService
    from userauth.services.user_store import SqlAlchemyUserStore

    engine = make_engine(database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session:
            svc = AuthService(
                store=SqlAlchemyUserStore(session),
                hasher=get_password_hasher(),
                issuer=get_token_issuer(),
                admin_name=settings.admin_name,
            )
            return await svc.register(name, password, allow_reserved=True)
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="userauth")
def main():
    """userauth — manage accounts and tokens."""


@main.command("init-db")
@click.option("--database-url", default=None, help="Override USERAUTH_DATABASE_URL")
def init_db(database_url: Optional[str]):
    """Create database tables."""
    _run(_init_db(database_url or settings.database_url))
    click.secho("Tables created.", fg="green")


@main.command("create-user")
@click.argument("name")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--database-url", default=None, help="Override USERAUTH_DATABASE_URL")
def create_user(name: str, password: str, database_url: Optional[str]):
    """Register a user directly in the database."""
    try:
        user = _run(_create_user(database_url or settings.database_url, name, password))
    except UserAuthError as e:
        _fail(e.message)
    click.secho(f"Created user {user.name} ({user.id})", fg="green")


@main.command("issue-token")
@click.argument("identity")
@click.option("--ttl", type=int, default=None, help="Lifetime in seconds (default from settings)")
def issue_token(identity: str, ttl: Optional[int]):
    """Mint a bearer token for IDENTITY."""
    try:
        issuer = get_token_issuer()
    except UserAuthError as e:
        _fail(e.message)
    lifetime = timedelta(seconds=ttl) if ttl is not None else None
    click.echo(issuer.issue(identity, ttl=lifetime))


if __name__ == "__main__":
    main()
