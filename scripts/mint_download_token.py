#!/usr/bin/env python3
"""
Mint an export download token for a film.

The token is signed with `GLACIER_DOWNLOAD_SECRET` (env or .env) using
`GLACIER_TOKEN_ALGORITHM`, and grants `?download`/streaming access to every
export owned by the film.

Usage:
  python scripts/mint_download_token.py 7
  python scripts/mint_download_token.py 7 --expires-minutes 15 --subject ops
  python scripts/mint_download_token.py 7 --no-expiry --url-for 42
"""

import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from glacier.core.config import settings  # noqa: E402
from glacier.core.security import create_download_token  # noqa: E402


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Mint a glacier export download token")
    p.add_argument("film_id", type=int, help="Film id the token grants access to")
    p.add_argument(
        "--expires-minutes",
        type=int,
        default=settings.GLACIER_TOKEN_EXPIRE_MINUTES,
        help="Token lifetime (default: GLACIER_TOKEN_EXPIRE_MINUTES)",
    )
    p.add_argument("--no-expiry", action="store_true", help="Mint a token without `exp`")
    p.add_argument("--subject", default=None, help="Optional `sub` claim (who it was issued to)")
    p.add_argument("--url-for", type=int, metavar="EXPORT_ID", help="Also print the export URL")
    p.add_argument("--base", default=os.environ.get("API_BASE", "http://localhost:8000"))
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    secret = settings.download_secret
    if not secret:
        print("GLACIER_DOWNLOAD_SECRET is not set", file=sys.stderr)
        return 2
    try:
        minted = create_download_token(
            args.film_id,
            secret,
            algorithm=settings.GLACIER_TOKEN_ALGORITHM,
            expires_minutes=None if args.no_expiry else args.expires_minutes,
            subject=args.subject,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(minted["token"])
    if minted["expires_at"] is not None:
        print(f"expires_at: {minted['expires_at'].isoformat()}", file=sys.stderr)
    if args.url_for is not None:
        base = args.base.rstrip("/") + settings.API_PREFIX
        print(f"{base}/film/{args.film_id}/export/{args.url_for}?authorisation={minted['token']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
