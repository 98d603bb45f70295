from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.account import UpdatePreferencesRequest, UserPreferencesOut
from api_store.schemas.catalog import DeleteResponse
from api_store.services import preferences as preferences_service

router = APIRouter()


@router.get("/{email}", response_model=UserPreferencesOut)
async def read_preferences(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    return await preferences_service.get_user_preferences(db, email)


@router.post("", response_model=UserPreferencesOut)
async def update_preferences(*, db: AsyncSession = Depends(get_db), preferences_in: UpdatePreferencesRequest) -> Any:
    return await preferences_service.update_user_preferences(
        db, preferences_in.email, preferences_in.action, preferences_in.endpoint_id
    )


@router.delete("/{email}", response_model=DeleteResponse)
async def reset_preferences(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    await preferences_service.reset_user_preferences(db, email)
    return DeleteResponse(success=True, message="Preferences reset successfully")
