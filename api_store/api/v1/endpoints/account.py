from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.account import (
    ReferenceData,
    ReferenceDataCreate,
    ReferenceDataUploadRequest,
    ReferenceDataUploadResponse,
    Tenant,
)
from api_store.services import reference_data as reference_data_service
from api_store.services import tenant as tenant_service

router = APIRouter()


@router.get("/tenants/{email}", response_model=Tenant)
async def read_personal_tenant(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    return await tenant_service.get_or_create_personal_tenant(db, email)


@router.post("/reference-data", response_model=ReferenceData, status_code=status.HTTP_201_CREATED)
async def create_reference_data(*, db: AsyncSession = Depends(get_db), data_in: ReferenceDataCreate) -> Any:
    return await reference_data_service.save_reference_data(db, obj_in=data_in)


@router.post("/reference-data/upload", response_model=ReferenceDataUploadResponse)
async def upload_reference_data(*, db: AsyncSession = Depends(get_db), upload_in: ReferenceDataUploadRequest) -> Any:
    """
    Stores an uploaded reference document. The file content is base64 encoded;
    non-JSON files are converted by the formatter service.
    """
    item = await reference_data_service.upload_reference_data(
        db, upload_in.email, upload_in.file_name, upload_in.file_content
    )
    return ReferenceDataUploadResponse(success=True, message="Reference data uploaded successfully", data=item)


@router.get("/reference-data/{email}", response_model=List[ReferenceData])
async def read_reference_data(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    return await reference_data_service.get_reference_data(db, email)
