"""Hosted LLM client returning JSON, with bounded exponential backoff."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from config import llm_provider, require_llm_api_key, settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

SUPPORTED_MODELS: List[Dict[str, str]] = [
    {"id": "anthropic/claude-3.5-sonnet", "name": "Claude 3.5 Sonnet", "provider": "Anthropic"},
    {"id": "anthropic/claude-3-haiku", "name": "Claude 3 Haiku", "provider": "Anthropic"},
    {"id": "openai/gpt-4o", "name": "GPT-4o", "provider": "OpenAI"},
    {"id": "openai/gpt-4o-mini", "name": "GPT-4o Mini", "provider": "OpenAI"},
    {"id": "google/gemini-pro-1.5", "name": "Gemini Pro 1.5", "provider": "Google"},
    {"id": "meta-llama/llama-3.1-70b-instruct", "name": "Llama 3.1 70B", "provider": "Meta"},
    {"id": "deepseek/deepseek-chat", "name": "DeepSeek Chat", "provider": "DeepSeek"},
]


class LLMConfigurationError(RuntimeError):
    """No usable API key/provider configuration."""


class LLMResponseError(ValueError):
    """The model answered, but not with a usable JSON object."""


class EmptyCompletionError(RuntimeError):
    """The completion carried no text content."""


def create_llm_client() -> AsyncOpenAI:
    """Build an OpenAI-compatible client for the configured provider."""
    try:
        api_key = require_llm_api_key()
    except ValueError as exc:
        raise LLMConfigurationError(str(exc)) from exc

    # Retries are handled by chat_json so the backoff policy stays in one place.
    if llm_provider() == "openrouter":
        return AsyncOpenAI(
            api_key=api_key,
            base_url=settings.OPENROUTER_BASE_URL,
            max_retries=0,
            default_headers={
                "HTTP-Referer": settings.APP_URL,
                "X-Title": settings.APP_TITLE,
            },
        )
    return AsyncOpenAI(api_key=api_key, base_url=settings.OPENAI_BASE_URL, max_retries=0)


def _status_code(exc: BaseException) -> Optional[int]:
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def is_retryable_error(exc: BaseException) -> bool:
    """Transient failures are retried; client errors other than 429 are not."""
    if isinstance(exc, LLMConfigurationError):
        return False
    status = _status_code(exc)
    if status is None:
        return True
    return status in RETRYABLE_STATUS_CODES


def extract_json_candidate(text: str) -> str:
    """Slice the outermost {...} span out of model text, if any."""
    start_index = text.find("{")
    end_index = text.rfind("}")
    if start_index >= 0 and end_index >= start_index:
        return text[start_index:end_index + 1]
    return text


def parse_json_object(text: str) -> Dict[str, Any]:
    """Parse model output into a JSON object or raise LLMResponseError."""
    try:
        parsed = json.loads(extract_json_candidate(text or ""))
    except json.JSONDecodeError as exc:
        raise LLMResponseError(f"LLM returned malformed JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise LLMResponseError("LLM returned JSON that is not an object")
    return parsed


async def _complete_once(client: AsyncOpenAI, system: str, user: str, model_name: str) -> str:
    completion = await client.chat.completions.create(
        model=model_name,
        temperature=settings.LLM_TEMPERATURE,
        response_format={"type": "json_object"},
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    )
    content = completion.choices[0].message.content if completion.choices else None
    if not isinstance(content, str):
        raise EmptyCompletionError("LLM returned empty or invalid content")
    return content


async def _backoff_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def chat_json(system: str, user: str, model: Optional[str] = None) -> str:
    """
    Run one JSON-mode chat completion and return the raw content string.

    Transient errors (no HTTP status, or 429/5xx) are retried with exponential
    backoff up to LLM_MAX_ATTEMPTS; anything else propagates immediately.
    """
    client = create_llm_client()
    model_name = model or settings.LLM_MODEL

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(int(settings.LLM_MAX_ATTEMPTS), 1)),
        wait=wait_exponential(multiplier=max(float(settings.LLM_BACKOFF_BASE_SECONDS), 0.0), exp_base=2),
        retry=retry_if_exception(is_retryable_error),
        reraise=True,
        sleep=_backoff_sleep,
        before_sleep=lambda state: logger.warning(
            "LLM call failed (attempt %s/%s, model=%s): %s",
            state.attempt_number,
            settings.LLM_MAX_ATTEMPTS,
            model_name,
            state.outcome.exception() if state.outcome else None,
        ),
    )
    async for attempt in retrying:
        with attempt:
            return await _complete_once(client, system, user, model_name)
    raise RuntimeError("unreachable")  # pragma: no cover


async def check_llm_health() -> bool:
    """Return True when the provider answers a trivial JSON prompt."""
    try:
        await chat_json("You are a helpful assistant.", 'Respond with {"status": "ok"}')
        return True
    except Exception as exc:
        logger.error("LLM health check failed: %s", exc)
        return False
