import logging

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.preferences as preferences_repo
import api_store.repo.tenant as tenant_repo
from api_store.db.session import transactional
from api_store.models.tenant import Tenant
from api_store.utils.identifiers import generate_uuid

logger = logging.getLogger(__name__)


async def get_or_create_personal_tenant(db: AsyncSession, email: str) -> Tenant:
    """Returns the user's default tenant, creating a personal one owned by the user on first use."""
    async with transactional(db):
        tenant = await tenant_repo.get_default_tenant(db, email)
        if tenant is not None:
            return tenant

        tenant = Tenant(id=generate_uuid(), name=email, credit_balance=0)
        await tenant_repo.create_tenant_in_db(db, tenant, owner_email=email)
        await preferences_repo.ensure_preferences(db, email)
        await preferences_repo.set_default_tenant(db, email, tenant.id)

    logger.info(f"Created personal tenant {tenant.id} for {email}")
    return tenant
