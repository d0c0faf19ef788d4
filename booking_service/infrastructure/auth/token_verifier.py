from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt import PyJWTError

from booking_service.application.exceptions import AuthenticationError
from booking_service.domain.entities.caller import CallerIdentity


logger = logging.getLogger(__name__)


def extract_bearer_token(authorization_header: str | None) -> str:
    """Token from an ``Authorization: Bearer <token>`` header."""
    if not authorization_header:
        raise AuthenticationError("missing token")
    parts = authorization_header.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthenticationError("invalid token")
    return parts[1]


class JwtTokenVerifier:
    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._algorithm = algorithm

    def verify(self, token: str) -> CallerIdentity:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_aud": False},
            )
        except PyJWTError as e:
            logger.warning("Rejected bearer token", extra={"reason": str(e)})
            raise AuthenticationError(f"invalid token: {e}") from e

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("no user ID in token")
        return CallerIdentity(user_id=str(user_id), is_barber=bool(payload.get("is_barber", False)))

    def issue(self, user_id: str, is_barber: bool = False, expires_in: timedelta | None = None) -> str:
        """Mint a token carrying ``sub`` and ``is_barber``. Used by local tooling and tests."""
        claims: dict[str, Any] = {"sub": user_id, "is_barber": is_barber}
        if expires_in is not None:
            claims["exp"] = datetime.now(timezone.utc) + expires_in
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)
