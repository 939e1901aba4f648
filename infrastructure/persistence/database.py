import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from infrastructure.persistence.models.exchange_rate import Base

logger = logging.getLogger(__name__)

_AFTER_COMMIT = 'after_commit'


def run_after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """Queue a coroutine function to run once the session's unit of work commits."""
    session.info.setdefault(_AFTER_COMMIT, []).append(callback)


class Database:
    def __init__(self, db_url: str, echo: bool = False):
        url = make_url(db_url)
        engine_kwargs: dict = {'echo': echo}

        # An in-memory SQLite database only lives as long as its connection
        if url.get_backend_name() == 'sqlite' and url.database in (None, '', ':memory:'):
            engine_kwargs['poolclass'] = StaticPool
            engine_kwargs['connect_args'] = {'check_same_thread': False}

        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            autoflush=True,
            expire_on_commit=False
        )

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info('Exchange rate tables ready')

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text('SELECT 1'))

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        One unit of work: commit on success, roll back on any error.

        Callbacks queued with run_after_commit run after a successful commit
        and are dropped on rollback.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                session.info.pop(_AFTER_COMMIT, None)
                raise

            for callback in session.info.pop(_AFTER_COMMIT, []):
                await callback()
