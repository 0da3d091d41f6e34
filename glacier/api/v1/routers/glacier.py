from __future__ import annotations

"""
Glacier • Content delivery (Export & Thumbnail)
===============================================

Streams stored film content straight from the glacier storage root.

Route Index
-----------
- GET /film/{film}/export/{export}        → Export bytes (requires `?authorisation=<token>`)
- GET /film/{film}/thumbnail/{thumbnail}  → Thumbnail bytes (public, `max-age=600`)

Query
-----
- `authorisation` – capability token whose `resourceId` names the owning film
- `download`      – presence-only flag; adds `Content-Disposition: attachment`

Notes
-----
- `{film}` is informational. Ownership is read from the resource record, so a
  mismatching path segment cannot widen access.
- All endpoints answer 503 until `GLACIER_PATH` and `GLACIER_DOWNLOAD_SECRET`
  are configured.
"""

from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from glacier.api.http_utils import query_flag, query_values
from glacier.core.config import settings
from glacier.core.exceptions import ServiceUnavailableException
from glacier.db.session import get_async_db
from glacier.repositories.resources import ResourceRepositoryProtocol, SQLResourceRepository
from glacier.schemas.resources import ResourceKind
from glacier.services.stream_service import ResourceStreamer, check_requirements
from glacier.services.streaming import FileStreamResponse

router = APIRouter(tags=["Glacier"])
__all__ = ["router", "get_resource_repository", "get_streamer"]

_BINARY_RESPONSE: Dict[Union[int, str], Dict[str, Any]] = {
    200: {
        "description": "Resource bytes",
        "content": {"application/octet-stream": {"schema": {"type": "string", "format": "binary"}}},
    },
    400: {"description": '"id" must be a number'},
    404: {"description": "No such resource"},
    503: {"description": "Glacier storage is not configured"},
}


# ─────────────────────────────────────────────────────────────────────────────
# 🧩 Dependencies
# ─────────────────────────────────────────────────────────────────────────────
async def get_resource_repository(
    db: AsyncSession = Depends(get_async_db),
) -> ResourceRepositoryProtocol:
    return SQLResourceRepository(db)


def get_streamer() -> ResourceStreamer:
    """Build the streamer from settings, or 503 while requirements are unmet."""
    secret = settings.download_secret
    if check_requirements(settings.GLACIER_PATH, secret):
        raise ServiceUnavailableException("Glacier storage is not configured")
    return ResourceStreamer(
        storage_root=settings.GLACIER_PATH,
        secret=secret,
        algorithms=(settings.GLACIER_TOKEN_ALGORITHM,),
        chunk_size=settings.GLACIER_STREAM_CHUNK_SIZE,
    )


# ─────────────────────────────────────────────────────────────────────────────
# 🎞️ Export (token protected)
# ─────────────────────────────────────────────────────────────────────────────
@router.get(
    "/film/{film}/export/{export}",
    summary="Stream a film export",
    responses={**_BINARY_RESPONSE, 401: {"description": "Missing, invalid or mismatched token"}},
)
async def get_export(
    request: Request,
    film: str = Path(..., description="Owning film id (informational)"),
    export: str = Path(..., description="Export id"),
    streamer: ResourceStreamer = Depends(get_streamer),
    repository: ResourceRepositoryProtocol = Depends(get_resource_repository),
) -> FileStreamResponse:
    return await streamer.stream(
        ResourceKind.EXPORT,
        export,
        repository=repository,
        tokens=query_values(request, "authorisation"),
        download=query_flag(request, "download"),
    )


# ─────────────────────────────────────────────────────────────────────────────
# 🖼️ Thumbnail (public)
# ─────────────────────────────────────────────────────────────────────────────
@router.get(
    "/film/{film}/thumbnail/{thumbnail}",
    summary="Stream a film thumbnail",
    responses=_BINARY_RESPONSE,
)
async def get_thumbnail(
    request: Request,
    film: str = Path(..., description="Owning film id (informational)"),
    thumbnail: str = Path(..., description="Thumbnail id"),
    streamer: ResourceStreamer = Depends(get_streamer),
    repository: ResourceRepositoryProtocol = Depends(get_resource_repository),
) -> FileStreamResponse:
    return await streamer.stream(
        ResourceKind.THUMBNAIL,
        thumbnail,
        repository=repository,
        tokens=query_values(request, "authorisation"),
        download=query_flag(request, "download"),
    )
