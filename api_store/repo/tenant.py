from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from api_store.models.tenant import Tenant, TenantUser
from api_store.models.user import UserPreferences


async def get_default_tenant(db: AsyncSession, email: str) -> Optional[Tenant]:
    """Gets the tenant referenced by the user's preferences"""
    result = await db.execute(
        select(Tenant)
        .join(UserPreferences, UserPreferences.default_tenant_id == Tenant.id)
        .where(UserPreferences.email == email)
    )
    return result.scalars().first()


async def create_tenant_in_db(db: AsyncSession, tenant: Tenant, owner_email: str) -> None:
    """Creates a tenant with its owner membership"""
    db.add(tenant)
    await db.flush()
    db.add(TenantUser(tenant_id=tenant.id, email=owner_email, role="owner"))
    await db.flush()
