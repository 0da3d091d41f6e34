"""
🧭 Glacier • API v1 Router Aggregator
====================================

Exports the combined `router` (ready to include) and a `build_v1_router()`
factory for custom mount points.

Quick usage
-----------
    from glacier.api.v1.routers import router as api_v1_router
    app.include_router(api_v1_router, prefix=settings.API_PREFIX)

Notes
-----
- This layer is a pure aggregator; authorisation and cache headers are decided
  by the child routers.
"""

from fastapi import APIRouter

from .glacier import router as glacier_router


def build_v1_router() -> APIRouter:
    """
    Compose the API v1 surface into a single `APIRouter`.

    Returns
    -------
    fastapi.APIRouter
        A router that includes the glacier content endpoints (no extra prefix).
    """
    r = APIRouter()
    r.include_router(glacier_router)
    return r


router = build_v1_router()

__all__ = ["router", "build_v1_router", "glacier_router"]
