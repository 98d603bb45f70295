from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.db.base import utcnow
from api_store.models.api_key import ApiKey, ApiUsageLog


async def create_api_key_in_db(db: AsyncSession, api_key: ApiKey) -> None:
    """Stores a new API key"""
    db.add(api_key)
    await db.flush()


async def get_active_keys(db: AsyncSession, email: str) -> List[ApiKey]:
    """Gets the active keys of a user, newest first"""
    result = await db.execute(
        select(ApiKey)
        .where(ApiKey.email == email, ApiKey.is_active.is_(True))
        .order_by(ApiKey.generated_at.desc())
    )
    return result.scalars().all()


async def get_active_key_by_hash(db: AsyncSession, key_hash: str) -> Optional[ApiKey]:
    result = await db.execute(select(ApiKey).where(ApiKey.key_hash == key_hash, ApiKey.is_active.is_(True)))
    return result.scalars().first()


async def get_key_by_id(db: AsyncSession, key_id: str) -> Optional[ApiKey]:
    result = await db.execute(select(ApiKey).where(ApiKey.id == key_id))
    return result.scalars().first()


async def deactivate_key(db: AsyncSession, email: str, key_id: str) -> bool:
    """Revokes one active key owned by the user"""
    result = await db.execute(
        update(ApiKey)
        .where(ApiKey.id == key_id, ApiKey.email == email, ApiKey.is_active.is_(True))
        .values(is_active=False)
    )
    return result.rowcount > 0


async def deactivate_all_keys(db: AsyncSession, email: str) -> int:
    result = await db.execute(
        update(ApiKey).where(ApiKey.email == email, ApiKey.is_active.is_(True)).values(is_active=False)
    )
    return result.rowcount


async def record_usage(db: AsyncSession, key_id: str) -> None:
    await db.execute(
        update(ApiKey)
        .where(ApiKey.id == key_id)
        .values(last_used=utcnow(), usage_count=ApiKey.usage_count + 1)
    )


async def create_usage_log_in_db(db: AsyncSession, log: ApiUsageLog) -> None:
    db.add(log)
    await db.flush()


async def get_usage_logs(db: AsyncSession, key_id: str, limit: int = 100) -> List[ApiUsageLog]:
    """Gets the latest usage logs of a key"""
    result = await db.execute(
        select(ApiUsageLog)
        .where(ApiUsageLog.key_id == key_id)
        .order_by(ApiUsageLog.timestamp.desc())
        .limit(limit)
    )
    return result.scalars().all()
