"""Tests for presence lookup, user tokens, and chat create/join."""
from __future__ import annotations

import json

import pytest

from broker.core.errors import (
    ChatNotFoundError,
    InvalidInputError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from broker.services.broker import PresenceSession, SessionBroker
from broker.services.provider import TokenRole

from conftest import API_KEY, PRESENCE_ID, FakeProvider


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name",
    [
        "A",
        "Alice",
        " ",
        "x" * 100,
        "\U0001F642" * 100,
        '"' * 100,
        "\x01" * 100,
        'Bob "the builder"',
        "back\\slash",
        "Zoë 🙂",
        '", "admin": true',
    ],
)
async def test_issue_user_token_accepts_valid_names(broker, fake_provider, name):
    token = await broker.issue_user_token(name)

    assert token
    [call] = fake_provider.token_calls
    assert call["session_id"] == PRESENCE_ID
    assert call["role"] is TokenRole.SUBSCRIBER
    assert json.loads(call["data"]) == {"name": name}


@pytest.mark.asyncio
@pytest.mark.parametrize("name", [None, "", "x" * 101, "y" * 1000])
async def test_issue_user_token_rejects_bad_names_without_provider_calls(broker, fake_provider, name):
    with pytest.raises(InvalidInputError) as exc:
        await broker.issue_user_token(name)

    assert "100" in str(exc.value)
    assert fake_provider.calls == 0


@pytest.mark.asyncio
async def test_issue_user_token_honours_custom_length_bound(fake_provider):
    broker = SessionBroker(
        fake_provider, api_key=API_KEY, presence=PresenceSession(PRESENCE_ID), max_name_length=5
    )

    assert await broker.issue_user_token("abcde")
    with pytest.raises(InvalidInputError):
        await broker.issue_user_token("abcdef")


@pytest.mark.asyncio
async def test_issue_user_token_surfaces_provider_fault():
    provider = FakeProvider(presence_id="some-other-session")
    broker = SessionBroker(provider, api_key=API_KEY, presence=PresenceSession(PRESENCE_ID))

    with pytest.raises(UpstreamRejectedError):
        await broker.issue_user_token("Alice")


def test_get_presence_info_is_idempotent_and_free(broker, fake_provider):
    results = [broker.get_presence_info() for _ in range(5)]

    assert all(result == results[0] for result in results)
    assert results[0].api_key == API_KEY
    assert results[0].session_id == PRESENCE_ID
    assert fake_provider.calls == 0


@pytest.mark.asyncio
async def test_create_chat_returns_fresh_sessions(broker, fake_provider):
    first = await broker.create_chat()
    second = await broker.create_chat(invitee="bob")

    assert first.session_id != second.session_id
    assert PRESENCE_ID not in {first.session_id, second.session_id}
    assert first.api_key == API_KEY
    assert first.token and second.token
    assert fake_provider.create_calls == 2
    assert {call["role"] for call in fake_provider.token_calls} == {TokenRole.PUBLISHER}


@pytest.mark.asyncio
async def test_create_chat_propagates_provider_failure(broker, fake_provider):
    fake_provider.fail_create = True

    with pytest.raises(UpstreamUnavailableError):
        await broker.create_chat()

    assert fake_provider.token_calls == []


@pytest.mark.asyncio
async def test_join_chat_echoes_session_id(broker):
    created = await broker.create_chat()

    joined = await broker.join_chat(created.session_id)

    assert joined.session_id == created.session_id
    assert joined.api_key == API_KEY
    assert joined.token
    assert joined.token != created.token


@pytest.mark.asyncio
@pytest.mark.parametrize("session_id", [None, ""])
async def test_join_chat_missing_id_is_not_found(broker, fake_provider, session_id):
    with pytest.raises(ChatNotFoundError):
        await broker.join_chat(session_id)

    assert fake_provider.calls == 0


@pytest.mark.asyncio
async def test_join_chat_unknown_id_is_not_found(broker):
    with pytest.raises(ChatNotFoundError) as exc:
        await broker.join_chat("bogus")

    assert isinstance(exc.value.__cause__, UpstreamRejectedError)
    assert str(exc.value) == "Chat not found"


@pytest.mark.asyncio
async def test_check_presence_session(broker, fake_provider):
    await broker.check_presence_session()
    assert fake_provider.token_calls[0]["role"] is TokenRole.SUBSCRIBER

    stale = SessionBroker(
        FakeProvider(presence_id="rotated"), api_key=API_KEY, presence=PresenceSession(PRESENCE_ID)
    )
    with pytest.raises(UpstreamRejectedError):
        await stale.check_presence_session()


@pytest.mark.asyncio
async def test_issue_user_token_keeps_metadata_unescaped(broker, fake_provider):
    await broker.issue_user_token("\U0001F642" * 100)

    [call] = fake_provider.token_calls
    assert "\\u" not in call["data"]
    assert len(call["data"]) <= 1000
