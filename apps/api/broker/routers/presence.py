"""Presence configuration endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_broker
from ..schemas.broker import PresenceResponse
from ..services.broker import SessionBroker

router = APIRouter()


@router.get("/presence", response_model=PresenceResponse)
async def get_presence(broker: SessionBroker = Depends(get_broker)) -> PresenceResponse:
    """Return the API key and presence session id. Tokens come from ``POST /users``."""

    info = broker.get_presence_info()
    return PresenceResponse(api_key=info.api_key, session_id=info.session_id)
