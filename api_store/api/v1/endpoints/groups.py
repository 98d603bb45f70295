from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.catalog import (
    ApiGroupRequest,
    ApiGroupResponse,
    ApiGroupsResponse,
    DeleteResponse,
    Endpoint,
)
from api_store.services import catalog as catalog_service

router = APIRouter()


@router.get("/defaults", response_model=ApiGroupsResponse)
async def read_default_groups(db: AsyncSession = Depends(get_db)) -> Any:
    """The system default catalog."""
    return ApiGroupsResponse(api_groups=await catalog_service.get_default_api_groups(db))


@router.get("/by-id/{group_id}/endpoints", response_model=List[Endpoint])
async def read_group_endpoints(*, db: AsyncSession = Depends(get_db), group_id: str) -> Any:
    if await catalog_service.get_group_base_url(db, group_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"API group {group_id} not found")
    return await catalog_service.get_endpoints_by_group_id(db, group_id)


@router.get("/{email}", response_model=ApiGroupsResponse)
async def read_user_groups(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    """
    The user's catalog. The default catalog is associated with the user on first access.
    """
    return ApiGroupsResponse(api_groups=await catalog_service.get_or_create_user_api_groups(db, email))


@router.get("/{email}/visible", response_model=ApiGroupsResponse)
async def read_visible_groups(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    """The user's catalog without the default endpoints the user has hidden."""
    return ApiGroupsResponse(api_groups=await catalog_service.get_api_groups_with_preferences(db, email))


@router.post("", response_model=ApiGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(*, db: AsyncSession = Depends(get_db), group_in: ApiGroupRequest) -> Any:
    """Creates or updates a group. The response carries the group id, generated from the name when missing."""
    api_group = catalog_service.prepare_api_group(group_in.api_group)
    count = await catalog_service.add_user_api_group(db, group_in.email, api_group)
    return ApiGroupResponse(
        success=True,
        message=f"API group saved with {count} endpoints",
        group_id=api_group.id,
        endpoint_count=count,
    )


@router.put("/{group_id}", response_model=ApiGroupResponse)
async def update_group(*, db: AsyncSession = Depends(get_db), group_id: str, group_in: ApiGroupRequest) -> Any:
    """Replaces one of the user's custom groups. Default groups cannot be modified."""
    count = await catalog_service.update_user_api_group(db, group_in.email, group_id, group_in.api_group)
    return ApiGroupResponse(
        success=True,
        message=f"API group updated with {count} endpoints",
        group_id=group_id,
        endpoint_count=count,
    )


@router.delete("/{email}/{group_id}", response_model=DeleteResponse)
async def delete_group(*, db: AsyncSession = Depends(get_db), email: str, group_id: str) -> Any:
    if not await catalog_service.delete_user_api_group(db, email, group_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"API group {group_id} not found for {email}",
        )
    return DeleteResponse(success=True, message="API group deleted successfully")
