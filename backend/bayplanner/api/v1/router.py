"""API v1 router aggregating all sub-routers."""

from fastapi import APIRouter, Depends

from bayplanner.api.v1.bays import router as bays_router
from bayplanner.api.v1.projects import router as projects_router
from bayplanner.api.v1.schedules import router as schedules_router
from bayplanner.api.v1.timeline import router as timeline_router
from bayplanner.core.auth import verify_api_key
from bayplanner.core.rate_limit import rate_limit_default

# Public router (no authentication required)
api_v1_router = APIRouter()


@api_v1_router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint returning 200 OK."""
    return {"status": "ok"}


# Authenticated router with default rate limiting.
# Schedule writes additionally go through the stricter write limit.
_authenticated = APIRouter(dependencies=[Depends(verify_api_key), Depends(rate_limit_default)])
_authenticated.include_router(bays_router)
_authenticated.include_router(projects_router)
_authenticated.include_router(schedules_router)
_authenticated.include_router(timeline_router)

api_v1_router.include_router(_authenticated)
