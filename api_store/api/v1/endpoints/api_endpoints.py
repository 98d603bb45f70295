from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.catalog import DeleteResponse, EndpointRequest, EndpointResponse
from api_store.services import catalog as catalog_service
from api_store.utils.identifiers import generate_id_from_text

router = APIRouter()


@router.post("", response_model=EndpointResponse)
async def manage_endpoint(*, db: AsyncSession = Depends(get_db), endpoint_in: EndpointRequest) -> Any:
    """Creates or updates one endpoint inside a group the user holds."""
    endpoint = endpoint_in.endpoint
    if not endpoint.id and endpoint.text.strip():
        endpoint = endpoint.model_copy(update={"id": generate_id_from_text(endpoint.text)})

    action = await catalog_service.manage_single_endpoint(db, endpoint_in.email, endpoint_in.group_id, endpoint)
    return EndpointResponse(success=True, message=f"Endpoint {action}", endpoint_id=endpoint.id, action=action)


@router.delete("/{email}/{endpoint_id}", response_model=DeleteResponse)
async def delete_endpoint(*, db: AsyncSession = Depends(get_db), email: str, endpoint_id: str) -> Any:
    if not await catalog_service.delete_user_endpoint(db, email, endpoint_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Endpoint {endpoint_id} not found for {email}",
        )
    return DeleteResponse(success=True, message="Endpoint deleted successfully")
