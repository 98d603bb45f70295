from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.user import UserPreferences
from api_store.repo.base import insert_ignore


async def ensure_preferences(db: AsyncSession, email: str) -> None:
    """Creates an empty preferences row unless one exists"""
    await insert_ignore(db, UserPreferences, email=email, hidden_defaults="", credit_balance=0)


async def get_hidden_defaults(db: AsyncSession, email: str) -> Optional[str]:
    result = await db.execute(select(UserPreferences.hidden_defaults).where(UserPreferences.email == email))
    return result.scalars().first()


async def set_hidden_defaults(db: AsyncSession, email: str, hidden_defaults: str) -> None:
    await db.execute(
        update(UserPreferences).where(UserPreferences.email == email).values(hidden_defaults=hidden_defaults)
    )


async def get_credit_balance(db: AsyncSession, email: str) -> Optional[int]:
    result = await db.execute(select(UserPreferences.credit_balance).where(UserPreferences.email == email))
    return result.scalars().first()


async def add_credit(db: AsyncSession, email: str, amount: int) -> int:
    """Atomically adds amount to the balance and returns the new value"""
    await db.execute(
        update(UserPreferences)
        .where(UserPreferences.email == email)
        .values(credit_balance=UserPreferences.credit_balance + amount)
    )
    result = await db.execute(
        select(UserPreferences.credit_balance).where(UserPreferences.email == email)
    )
    return result.scalar_one()


async def set_default_tenant(db: AsyncSession, email: str, tenant_id: str) -> None:
    await db.execute(
        update(UserPreferences).where(UserPreferences.email == email).values(default_tenant_id=tenant_id)
    )
