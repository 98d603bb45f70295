from typing import List

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.domain import Domain

SYSTEM_EMAIL = "system"


async def get_authorized_domains(db: AsyncSession) -> List[str]:
    """Verified domains plus system domains, deduplicated and sorted"""
    result = await db.execute(
        select(Domain.domain)
        .where(or_(Domain.verified.is_(True), Domain.email == SYSTEM_EMAIL))
        .distinct()
        .order_by(Domain.domain)
    )
    return result.scalars().all()


async def count_system_domains(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Domain).where(Domain.email == SYSTEM_EMAIL))
    return result.scalar_one()


async def add_system_domain(db: AsyncSession, domain: str) -> None:
    db.add(Domain(email=SYSTEM_EMAIL, domain=domain, verified=True))
    await db.flush()
