from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.reference_data import ReferenceData


async def create_reference_data_in_db(db: AsyncSession, item: ReferenceData) -> None:
    db.add(item)
    await db.flush()


async def get_reference_data_by_email(db: AsyncSession, email: str) -> List[ReferenceData]:
    """Gets a user's reference documents, newest first"""
    result = await db.execute(
        select(ReferenceData).where(ReferenceData.email == email).order_by(ReferenceData.created_at.desc())
    )
    return result.scalars().all()
