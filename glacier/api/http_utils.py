from __future__ import annotations

"""
Glacier · HTTP Utilities
========================

Shared helpers for API routers:

- Safe filename sanitization (ASCII fallback for Content-Disposition)
- Query-string helpers that keep repeated and presence-only parameters
  distinguishable

All helpers are side-effect free.
"""

import re
from typing import List, Optional

from starlette.requests import Request

__all__ = [
    "sanitize_filename",
    "query_values",
    "query_flag",
]


def sanitize_filename(name: Optional[str], fallback: str = "download.bin") -> str:
    """Return a safe filename limited to ``[A-Za-z0-9._-]`` and underscores for spaces.

    Steps
    -----
    - Strip leading/trailing whitespace
    - Replace any run of whitespace with a single underscore
    - Remove any characters outside ``A-Za-z0-9._-``
    - If empty, fall back to ``fallback``

    Examples
    --------
    >>> sanitize_filename("  My File (Final).mp4  ")
    'My_File_Final.mp4'
    >>> sanitize_filename("", fallback="file.bin")
    'file.bin'
    """
    s = (name or "").strip()
    if not s:
        return fallback
    s = re.sub(r"\s+", "_", s)
    s = re.sub(r"[^A-Za-z0-9._-]", "", s)
    return s or fallback


def query_values(request: Request, name: str) -> List[str]:
    """Every value supplied for query parameter `name` (empty list when absent)."""
    return request.query_params.getlist(name)


def query_flag(request: Request, name: str) -> bool:
    """True when `name` appears in the query string, with or without a value.

    `?download`, `?download=` and `?download=0` all count as present.
    """
    return name in request.query_params
