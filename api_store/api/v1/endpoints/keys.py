from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.api_key import (
    GenerateApiKeyRequest,
    GenerateApiKeyResponse,
    KeyPreference,
    KeyUsage,
    RevokeApiKeyRequest,
    ValidateApiKeyRequest,
    ValidateApiKeyResponse,
)
from api_store.schemas.catalog import DeleteResponse
from api_store.services import api_key as api_key_service

router = APIRouter()


@router.post("", response_model=GenerateApiKeyResponse, status_code=status.HTTP_201_CREATED)
async def generate_key(*, db: AsyncSession = Depends(get_db), key_in: GenerateApiKeyRequest) -> Any:
    """Generates a key. The plain key is only returned by this call."""
    api_key, key_prefix, key_id = await api_key_service.generate_api_key(db, key_in.email, key_in.key_name)
    return GenerateApiKeyResponse(
        success=True,
        message="API key generated successfully",
        api_key=api_key,
        key_prefix=key_prefix,
        key_id=key_id,
    )


@router.get("/{email}", response_model=KeyPreference)
async def read_keys_status(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    return await api_key_service.get_api_keys_status(db, email)


@router.post("/revoke", response_model=DeleteResponse)
async def revoke_key(*, db: AsyncSession = Depends(get_db), revoke_in: RevokeApiKeyRequest) -> Any:
    if not await api_key_service.revoke_api_key(db, revoke_in.email, revoke_in.key_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="API key not found or already revoked")
    return DeleteResponse(success=True, message="API key revoked successfully")


@router.delete("/{email}", response_model=DeleteResponse)
async def revoke_all_keys(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    count = await api_key_service.revoke_all_api_keys(db, email)
    return DeleteResponse(success=True, message=f"Revoked {count} API keys")


@router.post("/validate", response_model=ValidateApiKeyResponse)
async def validate_key(*, db: AsyncSession = Depends(get_db), validate_in: ValidateApiKeyRequest) -> Any:
    owner = await api_key_service.validate_api_key(db, validate_in.api_key)
    if owner is None:
        return ValidateApiKeyResponse(valid=False)
    email, key_id = owner
    await api_key_service.record_api_key_usage(db, key_id)
    return ValidateApiKeyResponse(valid=True, email=email, key_id=key_id)


@router.get("/{key_id}/usage", response_model=KeyUsage)
async def read_key_usage(*, db: AsyncSession = Depends(get_db), key_id: str) -> Any:
    usage = await api_key_service.get_api_key_usage(db, key_id)
    if usage is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"API key {key_id} not found")
    return usage
