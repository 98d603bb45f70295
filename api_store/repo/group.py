from typing import List, Optional

from sqlalchemy import delete, exists, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.endpoint import Endpoint
from api_store.models.group import ApiGroup, UserGroup
from api_store.repo.base import get_for_update, insert_ignore


async def get_group_by_id(db: AsyncSession, group_id: str) -> Optional[ApiGroup]:
    """Gets a group by id"""
    result = await db.execute(select(ApiGroup).where(ApiGroup.id == group_id))
    return result.scalars().first()


async def get_default_groups(db: AsyncSession) -> List[ApiGroup]:
    """Gets every system default group"""
    result = await db.execute(select(ApiGroup).where(ApiGroup.is_default.is_(True)).order_by(ApiGroup.name))
    return result.scalars().all()


async def count_default_groups(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(ApiGroup).where(ApiGroup.is_default.is_(True)))
    return result.scalar_one()


async def get_groups_for_email(db: AsyncSession, email: str) -> List[ApiGroup]:
    """Gets the groups associated with a user"""
    result = await db.execute(
        select(ApiGroup)
        .join(UserGroup, UserGroup.group_id == ApiGroup.id)
        .where(UserGroup.email == email)
        .order_by(ApiGroup.name)
    )
    return result.scalars().all()


async def insert_group(
    db: AsyncSession, *, id: str, name: str, description: str, base_url: str, is_default: bool = False
) -> None:
    """Inserts a group row"""
    db.add(ApiGroup(id=id, name=name, description=description, base_url=base_url, is_default=is_default))
    await db.flush()


async def update_custom_group(db: AsyncSession, *, id: str, name: str, description: str, base_url: str) -> bool:
    """Overwrites the mutable fields of a non-default group"""
    result = await db.execute(
        update(ApiGroup)
        .where(ApiGroup.id == id, ApiGroup.is_default.is_(False))
        .values(name=name, description=description, base_url=base_url)
    )
    return result.rowcount > 0


async def add_user_group(db: AsyncSession, email: str, group_id: str) -> bool:
    """Associates a group with a user unless already associated"""
    return await insert_ignore(db, UserGroup, email=email, group_id=group_id)


async def has_user_group(db: AsyncSession, email: str, group_id: str) -> bool:
    result = await db.execute(
        select(exists().where(UserGroup.email == email, UserGroup.group_id == group_id))
    )
    return result.scalar()


async def count_user_groups(db: AsyncSession, email: str) -> int:
    result = await db.execute(select(func.count()).select_from(UserGroup).where(UserGroup.email == email))
    return result.scalar_one()


async def get_user_group_ids(db: AsyncSession, email: str) -> List[str]:
    result = await db.execute(select(UserGroup.group_id).where(UserGroup.email == email))
    return result.scalars().all()


async def delete_user_group(db: AsyncSession, email: str, group_id: str) -> bool:
    """Removes one user-group association"""
    result = await db.execute(delete(UserGroup).where(UserGroup.email == email, UserGroup.group_id == group_id))
    return result.rowcount > 0


async def delete_user_groups_for_email(db: AsyncSession, email: str) -> int:
    """Removes every group association of a user"""
    result = await db.execute(delete(UserGroup).where(UserGroup.email == email))
    return result.rowcount


async def delete_group_if_orphaned(db: AsyncSession, group_id: str) -> bool:
    """
    Deletes a non-default group that no user and no endpoint references any more.
    The group row stays locked between the reference check and the delete.
    """
    group = await get_for_update(db, ApiGroup, ApiGroup.id == group_id)
    if group is None or group.is_default:
        return False
    result = await db.execute(
        delete(ApiGroup).where(
            ApiGroup.id == group_id,
            ApiGroup.is_default.is_(False),
            ~exists().where(UserGroup.group_id == group_id),
            ~exists().where(Endpoint.group_id == group_id),
        )
    )
    return result.rowcount > 0


async def get_orphaned_group_ids(db: AsyncSession, group_ids: Optional[List[str]] = None) -> List[str]:
    """Non-default groups without user associations and without endpoints"""
    stmt = select(ApiGroup.id).where(
        ApiGroup.is_default.is_(False),
        ~exists().where(UserGroup.group_id == ApiGroup.id),
        ~exists().where(Endpoint.group_id == ApiGroup.id),
    )
    if group_ids is not None:
        stmt = stmt.where(ApiGroup.id.in_(group_ids))
    result = await db.execute(stmt)
    return result.scalars().all()


async def delete_groups(db: AsyncSession, group_ids: List[str]) -> int:
    """Deletes non-default groups by id"""
    if not group_ids:
        return 0
    result = await db.execute(
        delete(ApiGroup).where(ApiGroup.id.in_(group_ids), ApiGroup.is_default.is_(False))
    )
    return result.rowcount


async def get_group_base_url(db: AsyncSession, group_id: str) -> Optional[str]:
    result = await db.execute(select(ApiGroup.base_url).where(ApiGroup.id == group_id))
    return result.scalars().first()


async def is_default_group(db: AsyncSession, group_id: str) -> bool:
    """True only for an existing group flagged as system default"""
    result = await db.execute(select(ApiGroup.is_default).where(ApiGroup.id == group_id))
    return bool(result.scalars().first())
