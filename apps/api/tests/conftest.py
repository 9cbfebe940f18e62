"""Shared doubles for broker tests."""
from __future__ import annotations

import pytest

from broker.core.config import Settings
from broker.core.errors import UpstreamRejectedError, UpstreamUnavailableError
from broker.services.broker import PresenceSession, SessionBroker
from broker.services.provider import TokenRole

PRESENCE_ID = "presence-1"
API_KEY = "test-key"
# Same bound the OpenTok SDK enforces on connection data.
MAX_TOKEN_DATA_LENGTH = 1000


class FakeProvider:
    """In-memory provider that knows which sessions exist and counts every call."""

    def __init__(self, presence_id: str = PRESENCE_ID) -> None:
        self.sessions: set[str] = {presence_id}
        self.create_calls = 0
        self.token_calls: list[dict] = []
        self.fail_create = False
        self.fail_tokens = False

    @property
    def calls(self) -> int:
        return self.create_calls + len(self.token_calls)

    async def create_session(self) -> str:
        self.create_calls += 1
        if self.fail_create:
            raise UpstreamUnavailableError("provider down")
        session_id = f"chat-{self.create_calls}"
        self.sessions.add(session_id)
        return session_id

    async def generate_token(
        self,
        session_id: str,
        *,
        role: TokenRole = TokenRole.PUBLISHER,
        data: str | None = None,
    ) -> str:
        self.token_calls.append({"session_id": session_id, "role": role, "data": data})
        if self.fail_tokens:
            raise UpstreamUnavailableError("provider down")
        if data and len(data) > MAX_TOKEN_DATA_LENGTH:
            raise UpstreamRejectedError("Connection data must be less than 1000 characters")
        if session_id not in self.sessions:
            raise UpstreamRejectedError(f"Session ID {session_id} is not valid")
        return f"T1==token-{len(self.token_calls)}"


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def broker(fake_provider: FakeProvider) -> SessionBroker:
    return SessionBroker(fake_provider, api_key=API_KEY, presence=PresenceSession(PRESENCE_ID))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_key=API_KEY,
        api_secret="test-secret",
        presence_session=PRESENCE_ID,
        cors_allow_origins=[],
    )
