from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api_store.db.session import get_db
from api_store.schemas.system import AuthorizedDomains, HealthStatus
from api_store.services import domain as domain_service
from api_store.services import health as health_service

router = APIRouter()


@router.get("/domains", response_model=AuthorizedDomains)
async def read_authorized_domains(db: AsyncSession = Depends(get_db)) -> Any:
    return AuthorizedDomains(domains=await domain_service.get_all_authorized_domains(db))


@router.get("/health", response_model=HealthStatus)
async def health(db: AsyncSession = Depends(get_db)) -> Any:
    healthy = await health_service.check_database(db)
    body = HealthStatus(
        status="healthy" if healthy else "unhealthy",
        database="connected" if healthy else "disconnected",
        timestamp=datetime.now(timezone.utc),
    )
    if not healthy:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump(mode="json"))
    return body
