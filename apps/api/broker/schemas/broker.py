"""Data contracts for the presence, user, and chat endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialize with the camelCase keys the browser client expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PresenceResponse(CamelModel):
    api_key: str = Field(..., description="Provider API key")
    session_id: str = Field(..., description="Presence session ID")


class UserCreateRequest(BaseModel):
    name: str | None = Field(default=None, description="Display name shown to other users")


class UserTokenResponse(BaseModel):
    token: str = Field(..., description="Subscriber token for the presence session")


class ChatCreateRequest(BaseModel):
    invitee: str | None = Field(default=None, description="Reserved; not used yet")


class ChatResponse(CamelModel):
    api_key: str = Field(..., description="Provider API key")
    session_id: str = Field(..., description="Chat session ID")
    token: str = Field(..., description="Publisher token for the chat session")
