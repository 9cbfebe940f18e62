"""Chat session create and join endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..core.errors import ChatNotFoundError, UpstreamRejectedError, UpstreamUnavailableError
from ..dependencies import get_broker
from ..schemas.broker import ChatCreateRequest, ChatResponse
from ..services.broker import ChatCredentials, SessionBroker

router = APIRouter()


def _to_response(credentials: ChatCredentials) -> ChatResponse:
    return ChatResponse(
        api_key=credentials.api_key,
        session_id=credentials.session_id,
        token=credentials.token,
    )


@router.post("/chats", response_model=ChatResponse)
async def create_chat(
    payload: ChatCreateRequest | None = None,
    broker: SessionBroker = Depends(get_broker),
) -> ChatResponse:
    """Start a new one-to-one chat session."""

    invitee = payload.invitee if payload else None
    try:
        credentials = await broker.create_chat(invitee)
    except (UpstreamRejectedError, UpstreamUnavailableError) as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat sessions are temporarily unavailable",
        ) from exc

    return _to_response(credentials)


@router.get("/chats", response_model=ChatResponse)
async def join_chat(
    session_id: str | None = Query(default=None, alias="sessionId"),
    broker: SessionBroker = Depends(get_broker),
) -> ChatResponse:
    """Join an existing chat session. Missing and unknown ids both yield 404."""

    try:
        credentials = await broker.join_chat(session_id)
    except ChatNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat sessions are temporarily unavailable",
        ) from exc

    return _to_response(credentials)
