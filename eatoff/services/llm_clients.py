from __future__ import annotations

import json
from typing import AsyncIterator

import httpx
import structlog

from eatoff.core.config import settings

logger = structlog.get_logger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"


class LLMError(Exception):
    pass


def build_payload(messages: list[dict[str, str]], stream: bool) -> dict:
    payload = {
        "model": settings.OPENAI_MODEL,
        "messages": messages,
        "temperature": settings.LLM_TEMPERATURE,
        "stream": stream,
    }
    if settings.LLM_MAX_TOKENS > 0:
        payload["max_tokens"] = settings.LLM_MAX_TOKENS
    return payload


def parse_stream_line(line: str) -> str | None:
    """Content delta carried by one provider SSE line, if any."""
    line = line.strip()
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    data = line[len(SSE_DATA_PREFIX):].strip()
    if not data or data == SSE_DONE:
        return None
    try:
        chunk = json.loads(data)
    except json.JSONDecodeError as exc:
        raise LLMError(f"Malformed stream chunk: {data[:80]}") from exc
    choices = chunk.get("choices") or []
    if not choices:
        return None
    return (choices[0].get("delta") or {}).get("content") or None


def _endpoint() -> tuple[str, dict[str, str]]:
    if not settings.OPENAI_API_KEY:
        raise LLMError("Missing API key for LLM provider")
    url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
        "Content-Type": "application/json",
    }
    return url, headers


async def stream_reply(messages: list[dict[str, str]]) -> AsyncIterator[str]:
    url, headers = _endpoint()
    payload = build_payload(messages, stream=True)
    try:
        async with httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SEC) as client:
            async with client.stream("POST", url, json=payload, headers=headers) as response:
                response.raise_for_status()
                async for line in response.aiter_lines():
                    content = parse_stream_line(line)
                    if content:
                        yield content
    except httpx.HTTPError as exc:
        logger.error("llm_request_failed", model=settings.OPENAI_MODEL, error=str(exc))
        raise LLMError(f"LLM request failed: {exc}") from exc

