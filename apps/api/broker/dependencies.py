"""FastAPI dependencies."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from .services.broker import SessionBroker


def get_broker(request: Request) -> SessionBroker:
    """Return the broker installed on the application at startup."""

    broker = getattr(request.app.state, "broker", None)
    if broker is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Broker is not ready")
    return broker
