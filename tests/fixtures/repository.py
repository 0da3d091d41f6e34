# tests/fixtures/repository.py
"""
🧪 In-memory metadata store for delivery tests.
Records every lookup so tests can assert call order and count.
"""

from glacier.repositories.resources import ResourceRepositoryProtocol
from glacier.schemas.resources import ResourceKind, ResourceMeta

__all__ = ["FakeRepository", "default_records"]


class FakeRepository(ResourceRepositoryProtocol):
    def __init__(self, records=None, *, raise_on_lookup: Exception | None = None):
        self.records = dict(records or {})
        self.calls = []
        self._raise = raise_on_lookup

    async def find_by_id(self, kind, resource_id):
        self.calls.append((kind, resource_id))
        if self._raise:
            raise self._raise
        return self.records.get((kind, resource_id))


def default_records():
    """Film 7 owns export 42 (named), export 43 (no file on disk) and thumbnail 5."""
    return {
        (ResourceKind.EXPORT, 42): ResourceMeta(film_id=7, mime="video/mp4", filename="Glacier Run.mp4"),
        (ResourceKind.EXPORT, 43): ResourceMeta(film_id=7, mime="video/mp4", filename="missing.mp4"),
        (ResourceKind.EXPORT, 44): ResourceMeta(film_id=7),
        (ResourceKind.THUMBNAIL, 5): ResourceMeta(film_id=7, mime="image/jpeg"),
    }
