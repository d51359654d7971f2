"""User persistence — the only I/O the auth core depends on.

Learn: AuthService talks to the UserStore protocol, not to SQLAlchemy.
SqlAlchemyUserStore is the production implementation; it wraps the
per-request AsyncSession that FastAPI injects and translates driver
errors into the service's error taxonomy. No retries here: a failed
call surfaces as PersistenceError straight away.
"""

from typing import Optional, Protocol, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.db.models import User
from userauth.errors import ConflictError, PersistenceError

logger = structlog.get_logger()


class UserStore(Protocol):
    async def create(self, user: User) -> User: ...

    async def find_by_name(self, name: str) -> Optional[User]: ...

    async def find_all(self) -> Sequence[User]: ...


class SqlAlchemyUserStore:
    """UserStore backed by an AsyncSession (one per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user: User) -> User:
        self.db.add(user)
        try:
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(f"User '{user.name}' already exists") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("store.create_failed", error_type=type(e).__name__)
            raise PersistenceError() from e
        return user

    async def find_by_name(self, name: str) -> Optional[User]:
        try:
            result = await self.db.execute(select(User).where(User.name == name))
        except SQLAlchemyError as e:
            logger.error("store.lookup_failed", error_type=type(e).__name__)
            raise PersistenceError() from e
        return result.scalars().first()

    async def find_all(self) -> list[User]:
        try:
            result = await self.db.execute(select(User).order_by(User.created_at, User.name))
        except SQLAlchemyError as e:
            logger.error("store.list_failed", error_type=type(e).__name__)
            raise PersistenceError() from e
        return list(result.scalars().all())
