import logging
from pathlib import Path
from typing import List

import yaml
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.endpoint as endpoint_repo
import api_store.repo.group as group_repo
from api_store.core.errors import DatabaseError
from api_store.db.session import transactional
from api_store.schemas.catalog import ApiGroup, ApiStorage
from api_store.services import catalog as catalog_service

logger = logging.getLogger(__name__)

DEFAULT_USER_EMAIL = "default@example.com"


def load_default_api_groups(path: str) -> List[ApiGroup]:
    """Reads the bundled default catalog. A missing file yields an empty catalog."""
    file_path = Path(path)
    if not file_path.exists():
        logger.warning(f"Default endpoints file not found: {path}")
        return []
    with file_path.open(encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}
    storage = ApiStorage.model_validate(document)
    logger.info(f"Loaded {len(storage.api_groups)} default API groups from {path}")
    return storage.api_groups


async def initialize_if_empty(db: AsyncSession, default_api_groups: List[ApiGroup]) -> bool:
    """
    Seeds the default catalog when no default group exists yet.
    Returns True when rows were written. A concurrent seeder losing the race
    on the primary keys is treated as already seeded.
    """
    groups = [catalog_service.prepare_api_group(g) for g in default_api_groups]
    try:
        async with transactional(db):
            if await group_repo.count_default_groups(db) > 0:
                logger.info("Default API groups already present, skipping seeding")
                return False
            for group in groups:
                await group_repo.insert_group(
                    db,
                    id=group.id,
                    name=group.name,
                    description=group.description,
                    base_url=group.base_url,
                    is_default=True,
                )
                await group_repo.add_user_group(db, DEFAULT_USER_EMAIL, group.id)
                for endpoint in group.endpoints:
                    await endpoint_repo.insert_endpoint(db, endpoint, group_id=group.id, is_default=True)
                    await endpoint_repo.insert_parameters(db, endpoint.id, endpoint.parameters)
                    await endpoint_repo.add_user_endpoint(db, DEFAULT_USER_EMAIL, endpoint.id)
    except DatabaseError as e:
        if isinstance(e.__cause__, IntegrityError):
            logger.info("Default API groups were seeded concurrently")
            return False
        raise

    logger.info(f"Seeded {len(groups)} default API groups")
    return True
