from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.api_key import ApiUsageLogCreate, ApiUsageLogEntry, CreditBalanceResponse, CreditBalanceUpdate
from api_store.services import api_key as api_key_service
from api_store.services import usage as usage_service

router = APIRouter()


@router.get("/credits/{email}", response_model=CreditBalanceResponse)
async def read_balance(*, db: AsyncSession = Depends(get_db), email: str) -> Any:
    return CreditBalanceResponse(email=email, balance=await api_key_service.get_credit_balance(db, email))


@router.post("/credits", response_model=CreditBalanceResponse)
async def update_balance(*, db: AsyncSession = Depends(get_db), balance_in: CreditBalanceUpdate) -> Any:
    balance = await api_key_service.update_credit_balance(db, balance_in.email, balance_in.amount)
    return CreditBalanceResponse(email=balance_in.email, balance=balance)


@router.post("/usage", status_code=status.HTTP_201_CREATED)
async def log_usage(*, db: AsyncSession = Depends(get_db), log_in: ApiUsageLogCreate) -> Any:
    log_id = await usage_service.log_api_usage(db, log_in)
    return {"success": True, "log_id": log_id}


@router.get("/usage/{key_id}", response_model=List[ApiUsageLogEntry])
async def read_usage_logs(*, db: AsyncSession = Depends(get_db), key_id: str, limit: int = 100) -> Any:
    return await usage_service.get_api_usage_logs(db, key_id, limit)
