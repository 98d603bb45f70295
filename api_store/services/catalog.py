"""
Catalog consistency engine.

Groups, endpoints and parameters are shared rows: a row may be associated with
many users through ``user_groups``/``user_endpoints``. Rows flagged
``is_default`` belong to the system catalog and are never updated or deleted
here. Non-default rows are deleted as soon as the last association goes away.

Each public coroutine runs as a single transaction through ``transactional``.
Helpers without a leading ``get_``/``add_``/``delete_`` prefix (``save_api_group``,
``remove_api_group_for_user``) expect the caller to own the transaction.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

import api_store.repo.endpoint as endpoint_repo
import api_store.repo.group as group_repo
from api_store.core.errors import CatalogValidationError, DefaultGroupError, ForbiddenError
from api_store.db.session import reading, transactional
from api_store.messaging.producers import CATALOG_TOPIC, send_event
from api_store.models.endpoint import Endpoint as EndpointRow
from api_store.models.group import ApiGroup as ApiGroupRow
from api_store.schemas.catalog import ApiGroup, Endpoint, Parameter
from api_store.services import preferences as preferences_service
from api_store.utils.identifiers import generate_id_from_text

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.example.com"


# Validation and normalization (always before a transaction opens)

def validate_endpoint(endpoint: Endpoint, email: Optional[str] = None) -> None:
    if not endpoint.text or not endpoint.text.strip():
        raise CatalogValidationError("Endpoint text cannot be empty", email=email)
    names = [p.name for p in endpoint.parameters]
    if any(not name.strip() for name in names):
        raise CatalogValidationError(f"Parameter name cannot be empty in endpoint '{endpoint.text}'", email=email)
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise CatalogValidationError(
            f"Duplicate parameter names in endpoint '{endpoint.text}': {', '.join(duplicates)}",
            email=email,
        )


def validate_api_group(api_group: ApiGroup, email: Optional[str] = None) -> None:
    if not api_group.name or not api_group.name.strip():
        raise CatalogValidationError("API group name cannot be empty", email=email, group_id=api_group.id or None)
    if not api_group.base_url or not api_group.base_url.strip():
        raise CatalogValidationError("API group base URL cannot be empty", email=email, group_id=api_group.id or None)
    for endpoint in api_group.endpoints:
        validate_endpoint(endpoint, email)


def prepare_api_group(api_group: ApiGroup) -> ApiGroup:
    """Returns a copy with missing ids generated and endpoint base URLs inherited from the group."""
    group = api_group.model_copy(deep=True)
    if not group.id:
        group.id = generate_id_from_text(group.name)
    for endpoint in group.endpoints:
        if not endpoint.id:
            endpoint.id = generate_id_from_text(endpoint.text)
        if not endpoint.base_url:
            endpoint.base_url = group.base_url
        endpoint.group_id = group.id
    return group


# Row-level building blocks

async def save_endpoint(db: AsyncSession, email: str, endpoint: Endpoint, group_id: str) -> str:
    """
    Upserts one endpoint for a user and returns "created", "updated" or "unchanged".
    Default endpoints keep their row and parameters and only gain the association.
    """
    existing = await endpoint_repo.get_endpoint_by_id(db, endpoint.id)
    if existing is None:
        await endpoint_repo.insert_endpoint(db, endpoint, group_id=group_id)
        action = "created"
    elif existing.is_default:
        action = "unchanged"
    else:
        await endpoint_repo.update_custom_endpoint(db, endpoint, group_id=group_id)
        action = "updated"

    await endpoint_repo.add_user_endpoint(db, email, endpoint.id)

    if action != "unchanged":
        await endpoint_repo.replace_parameters(db, endpoint.id, endpoint.parameters)
    return action


async def save_api_group(db: AsyncSession, email: str, api_group: ApiGroup) -> int:
    """Upserts a prepared group with its endpoints for a user. Returns the endpoint count."""
    existing = await group_repo.get_group_by_id(db, api_group.id)
    if existing is None:
        await group_repo.insert_group(
            db,
            id=api_group.id,
            name=api_group.name,
            description=api_group.description,
            base_url=api_group.base_url,
        )
    elif not existing.is_default:
        await group_repo.update_custom_group(
            db,
            id=api_group.id,
            name=api_group.name,
            description=api_group.description,
            base_url=api_group.base_url,
        )

    await group_repo.add_user_group(db, email, api_group.id)

    for endpoint in api_group.endpoints:
        await save_endpoint(db, email, endpoint, api_group.id)
    return len(api_group.endpoints)


async def remove_api_group_for_user(db: AsyncSession, email: str, group_id: str) -> bool:
    """
    Drops a user's association with a group and its endpoints, then deletes
    whatever non-default rows nobody references any more.
    """
    if not await group_repo.has_user_group(db, email, group_id):
        return False

    endpoint_ids = await endpoint_repo.get_user_endpoint_ids(db, email, group_id)
    await group_repo.delete_user_group(db, email, group_id)
    for endpoint_id in endpoint_ids:
        await endpoint_repo.delete_user_endpoint(db, email, endpoint_id)

    for endpoint_id in endpoint_ids:
        if await endpoint_repo.delete_endpoint_if_orphaned(db, endpoint_id):
            logger.debug(f"Deleted orphaned endpoint {endpoint_id}")

    if await group_repo.delete_group_if_orphaned(db, group_id):
        logger.debug(f"Deleted orphaned group {group_id}")
    return True


def _endpoint_to_schema(endpoint: EndpointRow, parameters: Dict[str, List[Parameter]]) -> Endpoint:
    return Endpoint(
        id=endpoint.id,
        text=endpoint.text,
        description=endpoint.description,
        verb=endpoint.verb,
        base_url=endpoint.base_url,
        path=endpoint.path,
        group_id=endpoint.group_id,
        parameters=parameters.get(endpoint.id, []),
    )


def _to_schema(group: ApiGroupRow, endpoints: List[EndpointRow], parameters: Dict[str, List[Parameter]]) -> ApiGroup:
    return ApiGroup(
        id=group.id,
        name=group.name,
        description=group.description,
        base_url=group.base_url,
        endpoints=[_endpoint_to_schema(e, parameters) for e in endpoints],
    )


async def _load_user_catalog(db: AsyncSession, email: str) -> List[ApiGroup]:
    groups = await group_repo.get_groups_for_email(db, email)
    endpoints_by_group = {
        group.id: await endpoint_repo.get_user_endpoints_by_group(db, email, group.id) for group in groups
    }
    parameters = await endpoint_repo.get_parameters(
        db, [e.id for endpoints in endpoints_by_group.values() for e in endpoints]
    )
    return [_to_schema(group, endpoints_by_group[group.id], parameters) for group in groups]


async def _load_default_catalog(db: AsyncSession) -> List[ApiGroup]:
    groups = await group_repo.get_default_groups(db)
    endpoints_by_group = {}
    for group in groups:
        endpoints = await endpoint_repo.get_endpoints_by_group(db, group.id)
        endpoints_by_group[group.id] = [e for e in endpoints if e.is_default]
    parameters = await endpoint_repo.get_parameters(
        db, [e.id for endpoints in endpoints_by_group.values() for e in endpoints]
    )
    return [_to_schema(group, endpoints_by_group[group.id], parameters) for group in groups]


async def _provision_defaults(db: AsyncSession, email: str) -> None:
    for group in await group_repo.get_default_groups(db):
        await group_repo.add_user_group(db, email, group.id)
        for endpoint in await endpoint_repo.get_endpoints_by_group(db, group.id):
            if endpoint.is_default:
                await endpoint_repo.add_user_endpoint(db, email, endpoint.id)


# Mutations

async def add_user_api_group(db: AsyncSession, email: str, api_group: ApiGroup) -> int:
    """Creates or updates one group with its endpoints for a user. Returns the endpoint count."""
    validate_api_group(api_group, email)
    group = prepare_api_group(api_group)
    logger.info(f"Saving API group {group.id} for {email} ({len(group.endpoints)} endpoints)")

    async with transactional(db):
        count = await save_api_group(db, email, group)

    await send_event(CATALOG_TOPIC, "api_group_saved", {"email": email, "group_id": group.id})
    return count


async def update_user_api_group(db: AsyncSession, email: str, group_id: str, api_group: ApiGroup) -> int:
    """Replaces one of the user's custom groups with the given payload. Default groups are rejected."""
    validate_api_group(api_group, email)
    payload = api_group.model_copy(update={"id": group_id})
    group = prepare_api_group(payload)
    logger.info(f"Updating API group {group_id} for {email}")

    async with transactional(db):
        existing = await group_repo.get_group_by_id(db, group_id)
        if existing is not None and existing.is_default:
            raise DefaultGroupError("Cannot modify default API groups", email=email, group_id=group_id)
        await remove_api_group_for_user(db, email, group_id)
        count = await save_api_group(db, email, group)

    await send_event(CATALOG_TOPIC, "api_group_saved", {"email": email, "group_id": group_id})
    return count


async def delete_user_api_group(db: AsyncSession, email: str, group_id: str) -> bool:
    """
    Removes a group from a user's catalog.

    Returns False when the user had no association with the group.
    Raises DefaultGroupError, without touching any row, for default groups.
    """
    logger.info(f"Deleting API group {group_id} for {email}")
    async with transactional(db):
        if await group_repo.is_default_group(db, group_id):
            raise DefaultGroupError("Cannot delete default API groups", email=email, group_id=group_id)
        removed = await remove_api_group_for_user(db, email, group_id)

    if removed:
        await send_event(CATALOG_TOPIC, "api_group_deleted", {"email": email, "group_id": group_id})
    else:
        logger.info(f"User {email} has no association with group {group_id}")
    return removed


async def manage_single_endpoint(db: AsyncSession, email: str, group_id: str, endpoint: Endpoint) -> str:
    """
    Creates or updates one endpoint inside a group the user already holds.
    Returns "created", "updated" or "unchanged" (for default endpoints).
    """
    validate_endpoint(endpoint, email)
    endpoint = endpoint.model_copy(deep=True)
    if not endpoint.id:
        endpoint.id = generate_id_from_text(endpoint.text)
    endpoint.group_id = group_id

    async with transactional(db):
        if not await group_repo.has_user_group(db, email, group_id):
            raise ForbiddenError("User does not have access to this API group", email=email, group_id=group_id)
        if not endpoint.base_url:
            endpoint.base_url = await group_repo.get_group_base_url(db, group_id) or DEFAULT_BASE_URL
        action = await save_endpoint(db, email, endpoint, group_id)

    logger.info(f"Endpoint {endpoint.id} {action} in group {group_id} for {email}")
    await send_event(
        CATALOG_TOPIC, "endpoint_saved", {"email": email, "group_id": group_id, "endpoint_id": endpoint.id}
    )
    return action


async def delete_user_endpoint(db: AsyncSession, email: str, endpoint_id: str) -> bool:
    """Removes an endpoint from a user's catalog. Returns False when it was not associated."""
    async with transactional(db):
        if not await endpoint_repo.delete_user_endpoint(db, email, endpoint_id):
            logger.info(f"User {email} has no association with endpoint {endpoint_id}")
            return False
        deleted = await endpoint_repo.delete_endpoint_if_orphaned(db, endpoint_id)

    logger.info(f"Removed endpoint {endpoint_id} for {email} (row deleted: {deleted})")
    await send_event(CATALOG_TOPIC, "endpoint_deleted", {"email": email, "endpoint_id": endpoint_id})
    return True


async def sweep_orphans(db: AsyncSession) -> Dict[str, int]:
    """Deletes every non-default endpoint and group that nothing references."""
    async with transactional(db):
        endpoint_ids = await endpoint_repo.get_orphaned_endpoint_ids(db)
        endpoints = await endpoint_repo.delete_endpoints(db, endpoint_ids)
        group_ids = await group_repo.get_orphaned_group_ids(db)
        groups = await group_repo.delete_groups(db, group_ids)
    if endpoints or groups:
        logger.info(f"Swept {endpoints} orphaned endpoints and {groups} orphaned groups")
    return {"endpoints": endpoints, "groups": groups}


# Reads

async def get_or_create_user_api_groups(db: AsyncSession, email: str) -> List[ApiGroup]:
    """Returns the user's catalog, associating the default catalog on first access."""
    async with transactional(db):
        if await group_repo.count_user_groups(db, email) == 0:
            logger.info(f"Provisioning default API groups for {email}")
            await _provision_defaults(db, email)
        return await _load_user_catalog(db, email)


async def get_api_groups_by_email(db: AsyncSession, email: str) -> List[ApiGroup]:
    """Read-only: the user's catalog, or the default catalog when the user has none."""
    async with reading(db):
        if await group_repo.count_user_groups(db, email) > 0:
            return await _load_user_catalog(db, email)
        return await _load_default_catalog(db)


async def get_api_groups_with_preferences(db: AsyncSession, email: str) -> List[ApiGroup]:
    """The user's catalog without hidden default endpoints. Groups left empty are dropped."""
    groups = await get_api_groups_by_email(db, email)
    hidden = set(await preferences_service.get_hidden_defaults(db, email))
    if not hidden:
        return groups

    visible = []
    for group in groups:
        endpoints = [e for e in group.endpoints if e.id not in hidden]
        if endpoints:
            visible.append(group.model_copy(update={"endpoints": endpoints}))
    return visible


async def get_default_api_groups(db: AsyncSession) -> List[ApiGroup]:
    async with reading(db):
        return await _load_default_catalog(db)


async def get_endpoints_by_group_id(db: AsyncSession, group_id: str) -> List[Endpoint]:
    async with reading(db):
        endpoints = await endpoint_repo.get_endpoints_by_group(db, group_id)
        parameters = await endpoint_repo.get_parameters(db, [e.id for e in endpoints])
    return [_endpoint_to_schema(e, parameters) for e in endpoints]


async def get_group_base_url(db: AsyncSession, group_id: str) -> Optional[str]:
    async with reading(db):
        return await group_repo.get_group_base_url(db, group_id)


async def check_is_default_group(db: AsyncSession, group_id: str) -> bool:
    async with reading(db):
        return await group_repo.is_default_group(db, group_id)
