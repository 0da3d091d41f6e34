# glacier/core/security.py
from __future__ import annotations

"""
Glacier • download token minting
================================
Issues the capability tokens consumed by the export endpoint. A token names
the film (`resourceId`) whose exports the bearer may download; it carries
`iat`/`nbf`/`exp` and a random `jti` for log correlation.

Decoding is delegated to `glacier.core.jwt`.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from jose import jwt


def create_download_token(
    resource_id: int,
    secret: str,
    *,
    algorithm: str = "HS256",
    expires_minutes: Optional[int] = 60,
    subject: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a signed download token for the film `resource_id`.

    `expires_minutes=None` mints a token without `exp`.

    Returns
    -------
    dict with `token`, `jti` and `expires_at` (None when no expiry).
    """
    if isinstance(resource_id, bool) or not isinstance(resource_id, int) or resource_id < 0:
        raise ValueError("resource_id must be a non-negative integer")
    if not secret:
        raise ValueError("a signing secret is required")

    now = datetime.now(timezone.utc)
    jti = str(uuid4())
    payload: Dict[str, Any] = {
        "resourceId": resource_id,
        "iat": now,
        "nbf": now,
        "jti": jti,
    }
    expire = None
    if expires_minutes is not None:
        expire = now + timedelta(minutes=expires_minutes)
        payload["exp"] = expire
    if subject:
        payload["sub"] = subject

    token = jwt.encode(payload, secret, algorithm=algorithm)
    return {"token": token, "jti": jti, "expires_at": expire}


__all__ = ["create_download_token"]
