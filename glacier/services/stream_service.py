from __future__ import annotations

"""
Glacier • Resource streaming service
====================================

`ResourceStreamer.stream()` turns `(kind, raw id, tokens, download flag)` into
a streaming response, running the delivery pipeline in a fixed order:

  1. validate the id                  → 400 (`"id" must be a number`)
  2. look up metadata                 → 404
  3. authorise (protected kinds only) → 401
  4. cache directive for the kind
  5. storage path for the kind
  6. attachment filename (`?download` only)
  7. stream bytes                     → 500 when the file cannot be served

Nothing is sent to the client before step 7 starts, so every failure up to
that point becomes a clean problem response. The service holds configuration
only; the metadata store is passed per call.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

from glacier.core.exceptions import (
    InternalFaultException,
    ResourceNotFoundException,
    UnauthorizedException,
)
from glacier.core.jwt import DEFAULT_ALGORITHMS
from glacier.repositories.resources import ResourceRepositoryProtocol
from glacier.schemas.resources import ResourceKind
from glacier.services.resource_policy import (
    authorize,
    cache_control,
    cache_duration,
    resolve_path,
    validate_request,
)
from glacier.services.streaming import (
    DEFAULT_CHUNK_SIZE,
    FileStreamResponse,
    StreamOutcome,
    StreamStorageError,
    stream_file,
)


# ─────────────────────────────────────────────────────────────
# 🩺 Requirements
# ─────────────────────────────────────────────────────────────
def check_requirements(
    storage_root: Optional[Union[str, Path]],
    secret: Optional[str],
) -> List[str]:
    """Return human-readable reasons the glacier endpoints cannot serve.

    An empty list means the storage root exists and a download secret is set.
    """
    problems: List[str] = []
    if not storage_root:
        problems.append("GLACIER_PATH is not set")
    elif not Path(storage_root).is_dir():
        problems.append(f"GLACIER_PATH does not exist or is not a directory: {storage_root}")
    if not secret:
        problems.append("GLACIER_DOWNLOAD_SECRET is not set")
    return problems


def _outcome_logger(kind: ResourceKind, resource_id: int, film_id: int):
    log = logger.bind(kind=kind.value, id=resource_id, film_id=film_id)

    def _log(outcome: StreamOutcome, error: Optional[BaseException]) -> None:
        if outcome is StreamOutcome.IO_FAILURE:
            log.opt(exception=error).error("Glacier stream failed while reading content")
        elif outcome is StreamOutcome.CLIENT_CLOSED:
            log.debug("Glacier stream closed by client")
        else:
            log.debug("Glacier stream completed")

    return _log


# ─────────────────────────────────────────────────────────────
# 🚚 Streamer
# ─────────────────────────────────────────────────────────────
class ResourceStreamer:
    """Serves Export and Thumbnail content from a glacier storage root."""

    def __init__(
        self,
        *,
        storage_root: Union[str, Path],
        secret: Optional[str],
        algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.storage_root = Path(storage_root)
        self.secret = secret
        self.algorithms = tuple(algorithms)
        self.chunk_size = chunk_size

    async def stream(
        self,
        kind: ResourceKind,
        raw_id: Optional[str],
        *,
        repository: ResourceRepositoryProtocol,
        tokens: Sequence[str] = (),
        download: bool = False,
    ) -> FileStreamResponse:
        resource_id, auth_required = validate_request(kind, raw_id)

        meta = await repository.find_by_id(kind, resource_id)
        if meta is None:
            logger.bind(kind=kind.value, id=resource_id).debug("Glacier resource not found")
            raise ResourceNotFoundException()

        if auth_required and not authorize(
            kind, meta, tokens, secret=self.secret, algorithms=self.algorithms
        ):
            logger.bind(kind=kind.value, id=resource_id).debug("Glacier resource request not authorised")
            raise UnauthorizedException()

        cache = cache_control(cache_duration(kind))
        path = resolve_path(kind, resource_id, root=self.storage_root, film_id=meta.film_id)
        filename = meta.filename if download else None

        try:
            response = await stream_file(
                path,
                meta.mime,
                filename,
                chunk_size=self.chunk_size,
                on_outcome=_outcome_logger(kind, resource_id, meta.film_id),
            )
        except StreamStorageError as e:
            logger.bind(kind=kind.value, id=resource_id, film_id=meta.film_id, path=str(e.path)).error(
                "Glacier content cannot be served: {}", e.reason
            )
            raise InternalFaultException()

        if cache is not None:
            response.headers["Cache-Control"] = cache
        return response


__all__ = ["ResourceStreamer", "check_requirements"]
