from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException

from booking_service.application.exceptions import AuthenticationError, PermissionDeniedError
from booking_service.domain.entities.caller import CallerIdentity
from booking_service.infrastructure.auth.token_verifier import JwtTokenVerifier, extract_bearer_token
from booking_service.wiring.dependencies import get_token_verifier


logger = logging.getLogger(__name__)


def get_caller(
    authorization: str | None = Header(None),
    verifier: JwtTokenVerifier = Depends(get_token_verifier),
) -> CallerIdentity:
    """Resolve the caller once per request from the bearer token."""
    try:
        return verifier.verify(extract_bearer_token(authorization))
    except AuthenticationError as e:
        raise HTTPException(
            status_code=401,
            detail=f"authentication error: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def ensure_can_act_for_user(caller: CallerIdentity, user_id: str) -> None:
    if not caller.can_act_for(user_id):
        logger.warning(
            "Access denied",
            extra={"user_id": caller.user_id, "reason": f"acting for {user_id}"},
        )
        raise PermissionDeniedError("not allowed to access another user's bookings")


def ensure_barber(caller: CallerIdentity) -> None:
    if not caller.is_barber:
        logger.warning("Access denied", extra={"user_id": caller.user_id, "reason": "barber only"})
        raise PermissionDeniedError("only barbers may query barber bookings")
