"""Session provider abstraction.

The broker only ever talks to the remote session-granting service through
``SessionProvider``. ``OpenTokProvider`` is the production adapter around the
OpenTok SDK; the SDK is blocking, so every call runs in the default executor
and is bounded by a timeout."""
from __future__ import annotations

import asyncio
import enum
import logging
import time
from functools import partial
from typing import Any, Callable, Protocol, TypeVar

from opentok import Client, MediaModes, Roles
from opentok.exceptions import OpenTokException

from ..core.config import Settings
from ..core.errors import UpstreamRejectedError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TokenRole(str, enum.Enum):
    SUBSCRIBER = "subscriber"
    PUBLISHER = "publisher"


class SessionProvider(Protocol):
    """What the broker needs from the remote provider."""

    async def create_session(self) -> str:
        """Create a brand-new session and return its identifier."""

    async def generate_token(
        self,
        session_id: str,
        *,
        role: TokenRole = TokenRole.PUBLISHER,
        data: str | None = None,
    ) -> str:
        """Mint a token scoped to ``session_id``; raise ``UpstreamRejectedError`` for bad ids."""


class OpenTokProvider:
    """``SessionProvider`` backed by an OpenTok SDK client."""

    def __init__(
        self,
        client: Any,
        *,
        timeout_seconds: float = 10.0,
        token_ttl_seconds: int = 86400,
        media_mode: str = "relayed",
    ) -> None:
        self._client = client
        self._timeout = timeout_seconds
        self._token_ttl = token_ttl_seconds
        self._media_mode = MediaModes[media_mode]

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenTokProvider":
        return cls(
            Client(settings.api_key, settings.api_secret),
            timeout_seconds=settings.provider_timeout_seconds,
            token_ttl_seconds=settings.token_ttl_seconds,
            media_mode=settings.chat_media_mode,
        )

    async def create_session(self) -> str:
        try:
            session = await self._call(partial(self._client.create_session, media_mode=self._media_mode))
        except asyncio.TimeoutError as exc:
            logger.error("Provider session creation timed out after %.1fs", self._timeout)
            raise UpstreamUnavailableError("Session creation timed out") from exc
        except Exception as exc:  # noqa: BLE001 - SDK and transport faults look alike to callers
            logger.exception("Provider session creation failed: %s", exc)
            raise UpstreamUnavailableError("Session creation failed") from exc

        session_id = getattr(session, "session_id", None)
        if not session_id:
            raise UpstreamUnavailableError("Provider returned a session without an id")
        return session_id

    async def generate_token(
        self,
        session_id: str,
        *,
        role: TokenRole = TokenRole.PUBLISHER,
        data: str | None = None,
    ) -> str:
        mint = partial(
            self._client.generate_token,
            session_id,
            role=Roles(role.value),
            expire_time=int(time.time()) + self._token_ttl,
            data=data,
        )
        try:
            return await self._call(mint)
        except OpenTokException as exc:
            raise UpstreamRejectedError(str(exc)) from exc
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError("Token generation timed out") from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Provider token generation failed: %s", exc)
            raise UpstreamUnavailableError("Token generation failed") from exc

    async def _call(self, func: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(loop.run_in_executor(None, func), timeout=self._timeout)
