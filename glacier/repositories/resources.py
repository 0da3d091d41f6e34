from __future__ import annotations

"""Resource metadata repository.

Resolves `(kind, id)` to the metadata the delivery pipeline needs. This is the
single place where resource existence is decided: `None` means "no record"
and every later stage may assume the resource exists.
"""

from typing import Callable, Dict, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from glacier.db.models.export import Export
from glacier.db.models.thumbnail import Thumbnail
from glacier.schemas.resources import ResourceKind, ResourceMeta, require_all_kinds

# Primary keys are 32-bit integers; larger ids cannot have a row.
MAX_RESOURCE_ID = 2**31 - 1


class ResourceRepositoryProtocol:
    async def find_by_id(self, kind: ResourceKind, resource_id: int) -> Optional[ResourceMeta]:
        raise NotImplementedError


def _export_lookup(resource_id: int) -> Select:
    return select(Export.filename, Export.mime, Export.film_id).where(Export.id == resource_id)


def _thumbnail_lookup(resource_id: int) -> Select:
    return select(Thumbnail.mime, Thumbnail.film_id).where(Thumbnail.id == resource_id)


_LOOKUPS: Dict[ResourceKind, Callable[[int], Select]] = require_all_kinds(
    {
        ResourceKind.EXPORT: _export_lookup,
        ResourceKind.THUMBNAIL: _thumbnail_lookup,
    },
    "metadata lookups",
)


class SQLResourceRepository(ResourceRepositoryProtocol):
    """Read-only metadata lookups over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, kind: ResourceKind, resource_id: int) -> Optional[ResourceMeta]:
        if resource_id < 0 or resource_id > MAX_RESOURCE_ID:
            return None
        result = await self.session.execute(_LOOKUPS[kind](resource_id).limit(1))
        row = result.first()
        if row is None:
            return None
        return ResourceMeta(**row._mapping)


__all__ = ["ResourceRepositoryProtocol", "SQLResourceRepository", "MAX_RESOURCE_ID"]
