"""Session broker: presence lookup, user tokens, and chat create/join.

The broker mediates between HTTP clients and the provider's session/token
API. It keeps no per-request state; the only shared values are the API key
and the presence session handle, both fixed at construction."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from ..core.errors import ChatNotFoundError, InvalidInputError, UpstreamRejectedError
from .provider import SessionProvider, TokenRole

logger = logging.getLogger(__name__)

DEFAULT_MAX_NAME_LENGTH = 100


@dataclass(frozen=True, slots=True)
class PresenceSession:
    """Handle on the single shared presence session."""

    session_id: str


@dataclass(slots=True)
class PresenceInfo:
    api_key: str
    session_id: str


@dataclass(slots=True)
class ChatCredentials:
    api_key: str
    session_id: str
    token: str


class SessionBroker:
    """Issue provider tokens for the presence session and for one-to-one chats."""

    def __init__(
        self,
        provider: SessionProvider,
        *,
        api_key: str,
        presence: PresenceSession,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ) -> None:
        self._provider = provider
        self._api_key = api_key
        self._presence = presence
        self._max_name_length = max_name_length

    @property
    def presence(self) -> PresenceSession:
        return self._presence

    def get_presence_info(self) -> PresenceInfo:
        """Return the API key and presence session id. Mints nothing."""

        return PresenceInfo(api_key=self._api_key, session_id=self._presence.session_id)

    async def issue_user_token(self, name: str | None) -> str:
        """Return a subscriber token for the presence session that carries ``name``.

        Names are not checked for uniqueness; two users may share one.
        """

        if not name or len(name) > self._max_name_length:
            logger.warning("Rejected user name of length %d", len(name or ""))
            raise InvalidInputError(f"name must be between 1 and {self._max_name_length} characters")

        return await self._provider.generate_token(
            self._presence.session_id,
            role=TokenRole.SUBSCRIBER,
            data=json.dumps({"name": name}, ensure_ascii=False),
        )

    async def create_chat(self, invitee: str | None = None) -> ChatCredentials:
        """Create a fresh provider session and a publisher token for its creator.

        ``invitee`` is accepted for future authorization checks and ignored.
        """

        _ = invitee
        session_id = await self._provider.create_session()
        token = await self._provider.generate_token(session_id, role=TokenRole.PUBLISHER)
        logger.info("Created chat session %s", session_id)
        return ChatCredentials(api_key=self._api_key, session_id=session_id, token=token)

    async def join_chat(self, session_id: str | None) -> ChatCredentials:
        """Mint a publisher token for an existing chat session.

        A missing id and one the provider rejects raise the same
        ``ChatNotFoundError`` so callers cannot probe which ids exist.
        """

        if not session_id:
            raise ChatNotFoundError("Chat not found")

        try:
            token = await self._provider.generate_token(session_id, role=TokenRole.PUBLISHER)
        except UpstreamRejectedError as exc:
            logger.warning("Provider rejected chat session id: %s", exc)
            raise ChatNotFoundError("Chat not found") from exc

        return ChatCredentials(api_key=self._api_key, session_id=session_id, token=token)

    async def check_presence_session(self) -> None:
        """Mint a throwaway subscriber token against the configured presence id.

        Tokens are signed locally, so this only catches a malformed id or one
        issued for another API key; it does not prove the session still exists.
        Raises ``UpstreamRejectedError`` when the id is refused.
        """

        await self._provider.generate_token(self._presence.session_id, role=TokenRole.SUBSCRIBER)
