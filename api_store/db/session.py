import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from api_store.core.config import Settings
from api_store.core.errors import DatabaseError, PoolError

logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Builds the pooled engine. Pool options only apply to server databases."""
    url = settings.database_url
    options = {"echo": settings.DB_ECHO}
    if url.startswith("postgresql"):
        options.update(pool_size=settings.DB_POOL_SIZE, pool_timeout=settings.DB_POOL_TIMEOUT, pool_pre_ping=True)
    logger.info(f"Creating database engine (pool_size={settings.DB_POOL_SIZE})")
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    session_factory = request.app.state.session_factory
    async with session_factory() as db:
        try:
            yield db
        finally:
            await db.close()


async def _store_error(db: AsyncSession, e: sa_exc.SQLAlchemyError) -> DatabaseError:
    await db.rollback()
    if isinstance(e, sa_exc.TimeoutError):
        logger.error(f"Connection pool exhausted: {e}")
        return PoolError("Database connection pool exhausted")
    logger.error(f"Transaction rolled back: {e}")
    return DatabaseError(f"Database error: {e}")


@asynccontextmanager
async def transactional(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Runs the enclosed statements as one unit of work.

    Commits on success. Any failure rolls the whole unit back; SQLAlchemy
    errors surface as DatabaseError (PoolError when no connection was available).
    """
    try:
        yield db
        await db.commit()
    except sa_exc.SQLAlchemyError as e:
        raise await _store_error(db, e) from e
    except BaseException:
        await db.rollback()
        raise


@asynccontextmanager
async def reading(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Runs read-only statements. Nothing is committed; errors are mapped as in ``transactional``."""
    try:
        yield db
    except sa_exc.SQLAlchemyError as e:
        raise await _store_error(db, e) from e
