"""Minimal client for an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from summarize.errors import ModelError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 120.0

MODELS = ("gpt-4o-mini", "gpt-4o", "gpt-4.1-mini", "gpt-4.1")
DEFAULT_MODEL = MODELS[0]


class ChatClient:
    def __init__(
        self, *, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self._api_key = api_key
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_env(cls, base_url: str | None = None) -> ChatClient:
        """Build a client from `OPENAI_API_KEY` and, if set, `OPENAI_BASE_URL`."""
        api_key = os.environ.get("OPENAI_API_KEY", "").strip()
        if not api_key:
            raise ModelError("OPENAI_API_KEY is not set (use --dry-run to skip the model call)")
        base = base_url or os.environ.get("OPENAI_BASE_URL") or DEFAULT_BASE_URL
        return cls(api_key=api_key, base_url=base)

    async def complete(self, model: str, prompt: str) -> str:
        """Send `prompt` as a single system message and return the reply text."""
        url = f"{self._base_url}/chat/completions"
        payload = {"model": model, "messages": [{"role": "system", "content": prompt}]}
        logger.debug("Calling %s with model %s, prompt of %d chars", url, model, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as c:
                r = await c.post(
                    url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                r.raise_for_status()
                data: dict[str, Any] = r.json()
        except httpx.HTTPStatusError as e:
            raise ModelError(f"model request failed: {e}") from e
        except httpx.HTTPError as e:
            raise ModelError(f"failed to call model: {e}") from e
        except ValueError as e:
            raise ModelError(f"unexpected response from model: {e}") from e

        return _extract_content(data)


def _extract_content(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ModelError(f"unexpected response: {data!r}") from e
    if not isinstance(content, str) or not content:
        raise ModelError("no content received")
    return content
