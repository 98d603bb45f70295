from typing import Any, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select


def dialect_name(db: AsyncSession) -> str:
    return db.bind.dialect.name


async def insert_ignore(db: AsyncSession, model: Any, **values: Any) -> bool:
    """Inserts a row unless its primary key already exists. Returns True when a row was written."""
    dialect = postgresql if dialect_name(db) == "postgresql" else sqlite
    stmt = dialect.insert(model).values(**values).on_conflict_do_nothing()
    result = await db.execute(stmt)
    return result.rowcount > 0


async def get_for_update(db: AsyncSession, model: Any, *criteria: Any) -> Optional[Any]:
    """Fetches one row and holds a row lock on it until the transaction ends (PostgreSQL only)."""
    stmt = select(model).where(*criteria)
    if dialect_name(db) == "postgresql":
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return result.scalars().first()
