from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config import settings
from services import llm_client
from services.llm_client import (
    EmptyCompletionError,
    LLMConfigurationError,
    LLMResponseError,
    chat_json,
    check_llm_health,
    extract_json_candidate,
    is_retryable_error,
    parse_json_object,
)


class _StatusError(Exception):
    def __init__(self, status_code):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _fake_client(side_effect):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=side_effect)
    return client


@pytest.fixture(autouse=True)
def fast_backoff():
    with patch.object(settings, "LLM_BACKOFF_BASE_SECONDS", 0.0), patch.object(settings, "LLM_MAX_ATTEMPTS", 3):
        yield


def test_extract_json_candidate_strips_surrounding_text():
    assert extract_json_candidate('Sure! {"a": {"b": 1}} hope that helps') == '{"a": {"b": 1}}'
    assert extract_json_candidate("no braces") == "no braces"


def test_parse_json_object_rejects_non_objects():
    assert parse_json_object('```json\n{"ok": true}\n```') == {"ok": True}
    with pytest.raises(LLMResponseError):
        parse_json_object("[1, 2, 3]")
    with pytest.raises(LLMResponseError):
        parse_json_object("{broken")


def test_retryable_error_classification():
    assert is_retryable_error(_StatusError(429))
    assert is_retryable_error(_StatusError(503))
    assert is_retryable_error(RuntimeError("connection reset"))
    assert not is_retryable_error(_StatusError(400))
    assert not is_retryable_error(_StatusError(401))
    assert not is_retryable_error(LLMConfigurationError("Missing OPENROUTER_API_KEY"))


@pytest.mark.asyncio
async def test_chat_json_retries_transient_errors():
    client = _fake_client([_StatusError(429), _StatusError(502), _completion('{"ok": true}')])

    with patch("services.llm_client.create_llm_client", return_value=client):
        result = await chat_json("system", "user", model="openai/gpt-4o")

    assert result == '{"ok": true}'
    assert client.chat.completions.create.await_count == 3
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "openai/gpt-4o"
    assert kwargs["temperature"] == settings.LLM_TEMPERATURE
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}


@pytest.mark.asyncio
async def test_chat_json_backoff_doubles_from_base_delay():
    client = _fake_client([_StatusError(503), _StatusError(503), _completion('{"ok": true}')])
    sleep = AsyncMock()

    with patch.object(settings, "LLM_BACKOFF_BASE_SECONDS", 0.4), patch(
        "services.llm_client._backoff_sleep", new=sleep
    ), patch("services.llm_client.create_llm_client", return_value=client):
        result = await chat_json("system", "user")

    assert result == '{"ok": true}'
    assert [call.args[0] for call in sleep.await_args_list] == pytest.approx([0.4, 0.8])


@pytest.mark.asyncio
async def test_chat_json_gives_up_after_max_attempts():
    client = _fake_client([_StatusError(500)] * 5)

    with patch("services.llm_client.create_llm_client", return_value=client):
        with pytest.raises(_StatusError):
            await chat_json("system", "user")

    assert client.chat.completions.create.await_count == 3


@pytest.mark.asyncio
async def test_chat_json_does_not_retry_client_errors():
    client = _fake_client([_StatusError(400), _completion("{}")])

    with patch("services.llm_client.create_llm_client", return_value=client):
        with pytest.raises(_StatusError):
            await chat_json("system", "user")

    assert client.chat.completions.create.await_count == 1


@pytest.mark.asyncio
async def test_chat_json_uses_default_model_and_rejects_empty_content():
    client = _fake_client([_completion(None)] * 3)

    with patch("services.llm_client.create_llm_client", return_value=client):
        with pytest.raises(EmptyCompletionError):
            await chat_json("system", "user")

    assert client.chat.completions.create.await_args.kwargs["model"] == settings.LLM_MODEL


def test_create_llm_client_requires_key():
    with patch.object(settings, "LLM_PROVIDER", "openrouter"), patch.object(settings, "OPENROUTER_API_KEY", ""):
        with pytest.raises(LLMConfigurationError, match="Missing OPENROUTER_API_KEY"):
            llm_client.create_llm_client()

    with patch.object(settings, "LLM_PROVIDER", "openai"), patch.object(settings, "OPENAI_API_KEY", None):
        with pytest.raises(LLMConfigurationError, match="Missing OPENAI_API_KEY"):
            llm_client.create_llm_client()


def test_create_llm_client_sets_openrouter_headers():
    with patch.object(settings, "LLM_PROVIDER", "openrouter"), patch.object(settings, "OPENROUTER_API_KEY", "sk-or-test"):
        client = llm_client.create_llm_client()

    assert str(client.base_url).startswith(settings.OPENROUTER_BASE_URL.rstrip("/"))
    assert client.max_retries == 0
    assert client.default_headers["X-Title"] == settings.APP_TITLE


@pytest.mark.asyncio
async def test_check_llm_health():
    with patch("services.llm_client.chat_json", new=AsyncMock(return_value='{"status": "ok"}')):
        assert await check_llm_health() is True
    with patch("services.llm_client.chat_json", new=AsyncMock(side_effect=LLMConfigurationError("no key"))):
        assert await check_llm_health() is False
