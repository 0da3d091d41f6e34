from __future__ import annotations

"""
Glacier resource schemas.

- `ResourceKind`   closed set of servable binary kinds
- `ResourceMeta`   per-request metadata snapshot from the store
- `DownloadClaims` decoded claims of an export capability token
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class ResourceKind(str, Enum):
    """Servable resource kinds. Every policy table is keyed by these members."""

    EXPORT = "export"
    THUMBNAIL = "thumbnail"


class ResourceMeta(BaseModel):
    """Metadata needed to authorise and stream one resource."""

    model_config = ConfigDict(frozen=True)

    film_id: int
    mime: Optional[str] = None
    filename: Optional[str] = None  # exports only


class DownloadClaims(BaseModel):
    """Claims carried by an export download token.

    `resourceId` is the id of the film the bearer may download exports of.
    It must be a real integer; `"7"` or `true` are rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    resource_id: StrictInt = Field(alias="resourceId")
    sub: Optional[str] = None
    jti: Optional[str] = None
    exp: Optional[Union[int, float]] = None
    iat: Optional[Union[int, float]] = None
    nbf: Optional[Union[int, float]] = None


def require_all_kinds(table: dict, name: str) -> dict:
    """Fail at import time when a per-kind table misses a `ResourceKind` member."""
    missing = [k.name for k in ResourceKind if k not in table]
    if missing:
        raise RuntimeError(f"{name} has no entry for resource kind(s): {', '.join(missing)}")
    return table


__all__ = ["ResourceKind", "ResourceMeta", "DownloadClaims", "require_all_kinds"]
