"""
Bulk replacement of a user's catalog.

Cleanup of the user's previous catalog is best effort: the aggressive
strategy is tried first, then the conservative one, each in its own
transaction. If both fail the import still runs on top of the old data.
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.endpoint as endpoint_repo
import api_store.repo.group as group_repo
from api_store.core.errors import DatabaseError
from api_store.db.session import transactional
from api_store.messaging.producers import CATALOG_TOPIC, send_event
from api_store.schemas.catalog import ApiGroup
from api_store.services import catalog as catalog_service

logger = logging.getLogger(__name__)


async def force_clean_user_data(db: AsyncSession, email: str) -> None:
    """Set-based cleanup: drops every association of the user, then the rows left unreferenced."""
    endpoint_ids = await endpoint_repo.get_user_endpoint_ids(db, email)
    group_ids = await group_repo.get_user_group_ids(db, email)

    await endpoint_repo.delete_user_endpoints_for_email(db, email)
    await group_repo.delete_user_groups_for_email(db, email)

    orphaned_endpoints = await endpoint_repo.get_orphaned_endpoint_ids(db, endpoint_ids)
    await endpoint_repo.delete_endpoints(db, orphaned_endpoints)
    orphaned_groups = await group_repo.get_orphaned_group_ids(db, group_ids)
    await group_repo.delete_groups(db, orphaned_groups)
    logger.debug(
        f"Aggressive cleanup for {email}: {len(orphaned_endpoints)} endpoints, {len(orphaned_groups)} groups deleted"
    )


async def fallback_clean_user_data(db: AsyncSession, email: str) -> None:
    """Row-by-row cleanup, re-checking every row under a lock before deleting it."""
    for group_id in await group_repo.get_user_group_ids(db, email):
        await catalog_service.remove_api_group_for_user(db, email, group_id)

    # Endpoints whose group association was already gone
    for endpoint_id in await endpoint_repo.get_user_endpoint_ids(db, email):
        await endpoint_repo.delete_user_endpoint(db, email, endpoint_id)
        await endpoint_repo.delete_endpoint_if_orphaned(db, endpoint_id)


CLEANUP_STRATEGIES = (
    ("aggressive", force_clean_user_data),
    ("conservative", fallback_clean_user_data),
)


async def clean_user_data(db: AsyncSession, email: str) -> Optional[str]:
    """Runs the cleanup strategies in order. Returns the name of the one that succeeded, or None."""
    for name, strategy in CLEANUP_STRATEGIES:
        try:
            async with transactional(db):
                await strategy(db, email)
            logger.info(f"Cleaned catalog of {email} with {name} strategy")
            return name
        except DatabaseError as e:
            logger.warning(f"{name.capitalize()} cleanup failed for {email}: {e}")
    logger.error(f"All cleanup strategies failed for {email}, importing over existing data")
    return None


async def replace_user_api_groups(db: AsyncSession, email: str, api_groups: List[ApiGroup]) -> int:
    """Replaces the user's whole catalog with api_groups. Returns the number of endpoints imported."""
    for api_group in api_groups:
        catalog_service.validate_api_group(api_group, email)
    groups = [catalog_service.prepare_api_group(api_group) for api_group in api_groups]

    logger.info(f"Replacing catalog of {email} with {len(groups)} groups")
    await clean_user_data(db, email)

    imported_count = 0
    async with transactional(db):
        for group in groups:
            imported_count += await catalog_service.save_api_group(db, email, group)

    logger.info(f"Imported {imported_count} endpoints in {len(groups)} groups for {email}")
    await send_event(
        CATALOG_TOPIC,
        "catalog_replaced",
        {"email": email, "group_count": len(groups), "imported_count": imported_count},
    )
    return imported_count
