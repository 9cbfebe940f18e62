"""Create a provider session to use as PRESENCE_SESSION.

Run once per deployment and export the printed id before starting the API.
"""
from __future__ import annotations

import asyncio
import sys

from broker.core.config import get_settings
from broker.core.errors import UpstreamUnavailableError
from broker.services.provider import OpenTokProvider


async def create_presence_session() -> str:
    """Create a new session with the configured credentials and return its id."""

    settings = get_settings()
    if not settings.api_key or not settings.api_secret:
        raise SystemExit("You must specify API_KEY and API_SECRET environment variables")

    provider = OpenTokProvider.from_settings(settings)
    return await provider.create_session()


async def main() -> None:
    try:
        session_id = await create_presence_session()
    except UpstreamUnavailableError as exc:
        print(f"Could not create a presence session: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(f"PRESENCE_SESSION={session_id}")


if __name__ == "__main__":
    asyncio.run(main())
