"""Tests for the credential store adapter."""

import pytest

from digest.credentials import CredentialStore, MemoryStorage, credential_key, mask_secret


@pytest.mark.asyncio
async def test_set_then_get_round_trip_trims(storage: MemoryStorage, make_prompt) -> None:
    prompt = make_prompt()
    store = CredentialStore(storage, prompt)

    await store.set_secret("openai", "  abc123  ")

    assert await store.get_secret("openai") == "abc123"
    assert await storage.get("openai_api_key") == "abc123"
    assert prompt.messages == []


@pytest.mark.asyncio
async def test_stored_value_is_trimmed_on_read(make_prompt) -> None:
    storage = MemoryStorage({"gemini_api_key": "\tkey-1 \n"})
    store = CredentialStore(storage, make_prompt())

    assert await store.get_secret("gemini") == "key-1"


@pytest.mark.asyncio
async def test_missing_secret_prompts_and_persists(storage: MemoryStorage, make_prompt) -> None:
    prompt = make_prompt(" sk-new ")
    store = CredentialStore(storage, prompt)

    secret = await store.get_secret("openai", "OpenAI")

    assert secret == "sk-new"
    assert prompt.messages == ["Please enter your OpenAI API key:"]
    assert await storage.get("openai_api_key") == "sk-new"


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", [None, "", "   "])
async def test_dismissed_prompt_returns_none(
    storage: MemoryStorage, make_prompt, answer: str | None
) -> None:
    store = CredentialStore(storage, make_prompt(answer))

    assert await store.get_secret("openai") is None
    assert await storage.get("openai_api_key") is None


@pytest.mark.asyncio
async def test_reset_always_prompts_and_overwrites(make_prompt) -> None:
    storage = MemoryStorage({"openai_api_key": "old"})
    prompt = make_prompt("new")
    store = CredentialStore(storage, prompt)
    assert await store.get_secret("openai") == "old"

    assert await store.reset_secret("openai", "OpenAI") is True

    assert len(prompt.messages) == 1
    assert await store.get_secret("openai") == "new"
    assert await storage.get("openai_api_key") == "new"


@pytest.mark.asyncio
async def test_reset_dismissed_keeps_existing_key(make_prompt) -> None:
    storage = MemoryStorage({"openai_api_key": "old"})
    store = CredentialStore(storage, make_prompt(None))

    assert await store.reset_secret("openai") is False
    assert await store.get_secret("openai") == "old"


def test_credential_key() -> None:
    assert credential_key("openai") == "openai_api_key"


def test_mask_secret_never_returns_full_value() -> None:
    assert mask_secret("sk-1234567890abcdef") == "sk-...ef"
    assert mask_secret("short") == "*****"
