from fastapi import APIRouter

from api_store.api.v1.endpoints import account, api_endpoints, credits, groups, keys, preferences, system, upload

api_router = APIRouter()
api_router.include_router(groups.router, prefix="/groups", tags=["groups"])
api_router.include_router(api_endpoints.router, prefix="/endpoints", tags=["endpoints"])
api_router.include_router(upload.router, prefix="/upload", tags=["upload"])
api_router.include_router(keys.router, prefix="/keys", tags=["keys"])
api_router.include_router(credits.router, tags=["credits"])
api_router.include_router(preferences.router, prefix="/preferences", tags=["preferences"])
api_router.include_router(account.router, tags=["account"])
api_router.include_router(system.router, tags=["system"])
