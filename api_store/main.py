import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import api_store.models.all  # noqa: F401
from api_store.api.v1.router import api_router
from api_store.core.config import settings
from api_store.core.errors import (
    CatalogValidationError,
    DatabaseError,
    ForbiddenError,
    FormatterError,
    PoolError,
    StoreError,
)
from api_store.core.logging import setup_logging
from api_store.db.base import Base
from api_store.db.session import create_engine, create_session_factory
from api_store.messaging.producers import close_kafka_producer
from api_store.services import domain as domain_service
from api_store.services import seed as seed_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    engine = create_engine(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    if settings.AUTO_CREATE_SCHEMA:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    default_groups = seed_service.load_default_api_groups(settings.DEFAULT_ENDPOINTS_PATH)
    async with app.state.session_factory() as db:
        await seed_service.initialize_if_empty(db, default_groups)
        await domain_service.initialize_system_domains(db)
    logger.info(f"{settings.PROJECT_NAME} started")

    yield

    await close_kafka_producer()
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, exc: StoreError) -> JSONResponse:
    content = {"success": False, "message": message}
    if exc.email:
        content["email"] = exc.email
    if exc.group_id:
        content["group_id"] = exc.group_id
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if isinstance(exc, CatalogValidationError):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc)
    if isinstance(exc, ForbiddenError):
        return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc)
    if isinstance(exc, FormatterError):
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc.message, exc)
    # Persistence details stay in the log
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    if isinstance(exc, PoolError):
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Service temporarily unavailable", exc)
    if isinstance(exc, DatabaseError):
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error", exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error", exc)


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
