import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.domain as domain_repo
from api_store.db.session import reading, transactional

logger = logging.getLogger(__name__)

SYSTEM_DOMAINS = [
    "https://studio.cvenom.com",
    "https://app.api0.ai",
    "http://localhost:3000",
    "http://localhost:5173",
]


async def initialize_system_domains(db: AsyncSession) -> bool:
    """Seeds the system origins once. Returns True when they were inserted."""
    async with transactional(db):
        if await domain_repo.count_system_domains(db) > 0:
            return False
        for domain in SYSTEM_DOMAINS:
            await domain_repo.add_system_domain(db, domain)
    logger.info(f"Initialized {len(SYSTEM_DOMAINS)} system domains")
    return True


async def get_all_authorized_domains(db: AsyncSession) -> List[str]:
    """Origins allowed to call the service. Falls back to the system list when none are stored."""
    async with reading(db):
        domains = await domain_repo.get_authorized_domains(db)
    if not domains:
        logger.warning("No authorized domains stored, using the built-in list")
        return list(SYSTEM_DOMAINS)
    return list(domains)
