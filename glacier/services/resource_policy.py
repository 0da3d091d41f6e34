from __future__ import annotations

"""
Glacier • Resource policy
=========================

Static, per-kind policy for the delivery pipeline and the pure functions that
apply it. Nothing here performs I/O beyond token signature checks.

Tables
------
- `AUTH_REQUIRED`   kind -> bool
- `CACHE_DURATION`  kind -> Optional[int] seconds (`None`: no caching header)
- `CONTENT_DIRS`    kind -> storage subdirectory

Every table is checked against `ResourceKind` at import time, so a new kind
cannot ship with a silent default.
"""

import re
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from loguru import logger

from glacier.core.exceptions import BadRequestException, InternalFaultException
from glacier.core.jwt import DEFAULT_ALGORITHMS, verify_download_token
from glacier.schemas.resources import (
    DownloadClaims,
    ResourceKind,
    ResourceMeta,
    require_all_kinds,
)

AUTH_REQUIRED: Dict[ResourceKind, bool] = require_all_kinds(
    {
        ResourceKind.EXPORT: True,
        ResourceKind.THUMBNAIL: False,
    },
    "AUTH_REQUIRED",
)

CACHE_DURATION: Dict[ResourceKind, Optional[int]] = require_all_kinds(
    {
        ResourceKind.EXPORT: None,
        ResourceKind.THUMBNAIL: 600,
    },
    "CACHE_DURATION",
)

CONTENT_DIRS: Dict[ResourceKind, str] = require_all_kinds(
    {
        ResourceKind.EXPORT: "exports",
        ResourceKind.THUMBNAIL: "thumbs",
    },
    "CONTENT_DIRS",
)

INVALID_ID_MESSAGE = '"id" must be a number'
_ID_RE = re.compile(r"[0-9]+")


# ─────────────────────────────────────────────────────────────
# 1) Request validation
# ─────────────────────────────────────────────────────────────
def validate_request(kind: ResourceKind, raw_id: Optional[str]) -> Tuple[int, bool]:
    """Parse the path id and return `(id, auth_required)`.

    Only plain ASCII decimal digits are accepted; signs, decimals, whitespace
    and unicode digits are a `BadRequestException`.
    """
    if raw_id is None or not _ID_RE.fullmatch(raw_id):
        raise BadRequestException(INVALID_ID_MESSAGE)
    try:
        resource_id = int(raw_id)
    except ValueError:  # beyond the interpreter's int-string limit
        raise BadRequestException(INVALID_ID_MESSAGE)

    try:
        auth_required = AUTH_REQUIRED[kind]
    except KeyError:
        logger.bind(kind=kind.value, id=resource_id).error("No authorisation requirement for resource kind")
        raise InternalFaultException()
    return resource_id, auth_required


# ─────────────────────────────────────────────────────────────
# 2) Authorisation
# ─────────────────────────────────────────────────────────────
def claims_match(claims: DownloadClaims, meta: ResourceMeta) -> bool:
    """A token grants access to resources owned by the film it names."""
    return claims.resource_id == meta.film_id


def _authorize_export(
    meta: ResourceMeta,
    tokens: Sequence[str],
    secret: Optional[str],
    algorithms: Sequence[str],
) -> bool:
    # `?authorisation=a&authorisation=b` is not a token
    if len(tokens) != 1:
        return False
    claims = verify_download_token(tokens[0], secret, algorithms=algorithms)
    if claims is None:
        return False
    return claims_match(claims, meta)


_AUTH_CHECKS: Dict[
    ResourceKind,
    Callable[[ResourceMeta, Sequence[str], Optional[str], Sequence[str]], bool],
] = {
    ResourceKind.EXPORT: _authorize_export,
}

_unchecked = [k.name for k, required in AUTH_REQUIRED.items() if required and k not in _AUTH_CHECKS]
if _unchecked:
    raise RuntimeError(f"No authorisation check for protected kind(s): {', '.join(_unchecked)}")


def authorize(
    kind: ResourceKind,
    meta: ResourceMeta,
    tokens: Sequence[str],
    *,
    secret: Optional[str],
    algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
) -> bool:
    """Decide whether the request may read the resource.

    Kinds without an authorisation requirement are always allowed. Protected
    kinds run their check; a missing check is a code defect, not a denial.
    """
    if not AUTH_REQUIRED[kind]:
        return True
    check = _AUTH_CHECKS.get(kind)
    if check is None:
        logger.bind(kind=kind.value, film_id=meta.film_id).error("No authorisation check for resource kind")
        raise InternalFaultException()
    return check(meta, tokens, secret, algorithms)


# ─────────────────────────────────────────────────────────────
# 3) Caching
# ─────────────────────────────────────────────────────────────
def cache_duration(kind: ResourceKind) -> Optional[int]:
    """Seconds a client may cache the resource, or None for no directive."""
    return CACHE_DURATION[kind]


def cache_control(seconds: Optional[int]) -> Optional[str]:
    """`Cache-Control` value for a cache duration (None means omit the header)."""
    if seconds is None or seconds <= 0:
        return None
    return f"max-age={seconds}"


# ─────────────────────────────────────────────────────────────
# 4) Content location
# ─────────────────────────────────────────────────────────────
def resolve_path(
    kind: ResourceKind,
    resource_id: int,
    *,
    root: Union[str, Path],
    film_id: Optional[int] = None,
) -> Path:
    """Return `<root>/<kind dir>/<id>` for a validated resource."""
    subdir = CONTENT_DIRS.get(kind)
    if subdir is None:
        logger.bind(kind=kind.value, id=resource_id, film_id=film_id).error(
            "Failed to generate glacier content path"
        )
        raise InternalFaultException()
    return Path(root) / subdir / str(resource_id)


__all__ = [
    "AUTH_REQUIRED",
    "CACHE_DURATION",
    "CONTENT_DIRS",
    "INVALID_ID_MESSAGE",
    "validate_request",
    "claims_match",
    "authorize",
    "cache_duration",
    "cache_control",
    "resolve_path",
]
