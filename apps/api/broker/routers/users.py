"""User entry endpoint.

Anonymous access is allowed. If user authentication is ever required, the
caller's identity should be verified before a token is handed out."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..core.errors import InvalidInputError, UpstreamRejectedError, UpstreamUnavailableError
from ..dependencies import get_broker
from ..schemas.broker import UserCreateRequest, UserTokenResponse
from ..services.broker import SessionBroker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/users", response_model=UserTokenResponse)
async def create_user(
    payload: UserCreateRequest | None = None,
    broker: SessionBroker = Depends(get_broker),
) -> UserTokenResponse:
    """Return a presence token that identifies the user to everyone else online."""

    name = payload.name if payload else None
    try:
        token = await broker.issue_user_token(name)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (UpstreamRejectedError, UpstreamUnavailableError) as exc:
        logger.error("Presence token generation failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not issue a presence token",
        ) from exc

    return UserTokenResponse(token=token)
