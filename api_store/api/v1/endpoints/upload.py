from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.catalog import UploadRequest, UploadResponse
from api_store.services import replace as replace_service
from api_store.utils.documents import load_uploaded_document

router = APIRouter()


@router.post("", response_model=UploadResponse)
async def upload_catalog(*, db: AsyncSession = Depends(get_db), upload_in: UploadRequest) -> Any:
    """
    Replaces the user's catalog with an uploaded YAML or JSON document.
    The file content is base64 encoded.
    """
    storage = await load_uploaded_document(upload_in.file_name, upload_in.file_content)
    imported_count = await replace_service.replace_user_api_groups(db, upload_in.email, storage.api_groups)
    return UploadResponse(
        success=True,
        message=f"Successfully imported {imported_count} endpoints",
        imported_count=imported_count,
        group_count=len(storage.api_groups),
    )
