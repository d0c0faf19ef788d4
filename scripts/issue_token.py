#!/usr/bin/env python3
"""
Mint a bearer token for calling the booking RPC endpoints locally.

Usage:
  python3 scripts/issue_token.py user1
  python3 scripts/issue_token.py barber1 --barber --expires-minutes 120

The token is signed with JWT_SECRET / JWT_ALGORITHM from the environment or .env.
"""

from __future__ import annotations

import argparse
import sys
from datetime import timedelta
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from booking_service.core.config import settings
from booking_service.infrastructure.auth.token_verifier import JwtTokenVerifier


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Issue a booking service bearer token.")
    parser.add_argument("user_id", help="value of the sub claim")
    parser.add_argument("--barber", action="store_true", help="set is_barber=true")
    parser.add_argument("--expires-minutes", type=int, default=60, help="0 for a token without exp")
    args = parser.parse_args(argv)

    verifier = JwtTokenVerifier(secret=settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    expires_in = timedelta(minutes=args.expires_minutes) if args.expires_minutes > 0 else None
    print(verifier.issue(args.user_id, is_barber=args.barber, expires_in=expires_in))
    return 0


if __name__ == "__main__":
    sys.exit(main())
