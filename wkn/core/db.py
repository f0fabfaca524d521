from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from wkn.core.config import settings
from wkn.core.errors import StorageError

logger = logging.getLogger(__name__)


def build_engine(url: str) -> AsyncEngine:
    # SQLite connections are cheap and bound to a thread; don't pool them.
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, poolclass=NullPool)
    return create_async_engine(
        url,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL_ASYNC)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def execute(db: AsyncSession, statement: Any, parameters: dict | None = None) -> list[dict]:
    """
    Run one parameterized statement and return its rows as column-name mappings.

    `statement` may be a SQLAlchemy construct or a raw SQL string with
    `:name` placeholders. Statements that return no rows yield [].
    """
    if isinstance(statement, str):
        statement = text(statement)
    elif getattr(statement, "is_update", False) or getattr(statement, "is_delete", False):
        # bulk DML; no identity map to keep in sync
        statement = statement.execution_options(synchronize_session=False)
    try:
        if parameters:
            res = await db.execute(statement, parameters)
        else:
            res = await db.execute(statement)
    except SQLAlchemyError as e:
        logger.error("statement failed: %s", e)
        raise StorageError(str(e)) from e
    if not getattr(res, "returns_rows", True):
        return []
    return [dict(row) for row in res.mappings().all()]


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Transaction boundary for multi-statement writes.

    Commits when the block exits cleanly, rolls back on any error. Database
    failures surface as StorageError.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("transaction rolled back: %s", e)
        raise StorageError(str(e)) from e
    except BaseException:
        await db.rollback()
        raise
