# glacier/core/jwt.py
from __future__ import annotations

"""
Glacier • download token verification
=====================================
- `verify_download_token` checks signature, algorithm and the standard
  `exp`/`nbf`/`iat` claims, then validates the claim structure
- Every failure collapses to `None`; callers cannot tell a forged token from
  an expired or malformed one
- Pure function: the secret and allowed algorithms are parameters

Notes
-----
- Token *creation* lives in `glacier.core.security`.
- There is no revocation lane; validity is purely cryptographic + structural.
"""

from typing import Optional, Sequence

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger
from pydantic import ValidationError

from glacier.schemas.resources import DownloadClaims

DEFAULT_ALGORITHMS: tuple[str, ...] = ("HS256",)


# ─────────────────────────────────────────────────────────────
# 🔓 Decode & validate an export download token
# ─────────────────────────────────────────────────────────────
def verify_download_token(
    token: object,
    secret: Optional[str],
    *,
    algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
) -> Optional[DownloadClaims]:
    """Return the token's claims, or None if the token is not acceptable.

    Rejected uniformly
    ------------------
    - non-string or empty token, missing secret
    - bad signature or an algorithm outside `algorithms`
    - expired / not-yet-valid tokens
    - payload without an integer `resourceId`
    """
    if not isinstance(token, str) or not token or not secret:
        return None

    try:
        payload = jwt.decode(token, secret, algorithms=list(algorithms))
    except ExpiredSignatureError:
        logger.debug("Download token expired.")
        return None
    except JWTError as e:
        logger.debug("Download token rejected: {}", e)
        return None

    try:
        return DownloadClaims.model_validate(payload)
    except ValidationError:
        logger.debug("Download token payload has an invalid structure.")
        return None


__all__ = ["verify_download_token", "DEFAULT_ALGORITHMS"]
