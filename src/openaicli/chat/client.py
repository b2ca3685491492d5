"""Boundary to the remote chat-completion service."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import requests

from openaicli.errors import CompletionServiceError
from openaicli.logging import get_logger

from .models import Message, Role

logger = get_logger(__name__)


class CompletionClient(Protocol):
    def complete(
        self,
        model: str,
        messages: Sequence[Message] | None,
        max_tokens: int,
        *,
        prompt: Message,
    ) -> Message:
        """Return exactly one assistant message.

        ``messages`` is the effective context, or ``None`` when history is
        not sent; ``prompt`` is the current user message.
        """
        ...


def _normalize_base_url(value: str) -> str:
    """Strip ``/v1`` or endpoint suffixes from an OpenAI-style base URL."""

    raw = (value or "").strip().rstrip("/")
    for suffix in ("/v1/chat/completions", "/v1"):
        if raw.endswith(suffix):
            raw = raw[: -len(suffix)].rstrip("/")
            break
    return raw


def _truncate_text(value: str, *, limit: int = 500) -> str:
    text = (value or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class OpenAIChatClient:
    """``POST /v1/chat/completions`` adapter built on :mod:`requests`."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com",
        timeout: float = 60.0,
    ) -> None:
        self.base_url = _normalize_base_url(base_url)
        self.timeout = timeout
        self._headers = {"Authorization": f"Bearer {api_key}"}

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"

    def complete(
        self,
        model: str,
        messages: Sequence[Message] | None,
        max_tokens: int,
        *,
        prompt: Message,
    ) -> Message:
        context = list(messages) if messages is not None else [prompt]
        payload: dict[str, Any] = {
            "model": model,
            "messages": [message.to_payload() for message in context],
            "max_tokens": max_tokens,
        }

        try:
            response = requests.post(self.url, json=payload, headers=self._headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            response_obj = getattr(exc, "response", None)
            status_code = getattr(response_obj, "status_code", None)
            detail = _truncate_text(str(getattr(response_obj, "text", "") or ""))
            logger.warning("Completion request failed (%s, status=%s): %s", self.url, status_code, detail or exc)
            raise CompletionServiceError(
                f"completion request failed with status {status_code}: {detail or exc}",
                status_code=status_code,
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning("Completion request failed (%s): %s", self.url, exc)
            raise CompletionServiceError(f"{type(exc).__name__}: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionServiceError(f"completion response was not JSON: {exc}") from exc

        return Message(Role.ASSISTANT, _extract_content(data))


def _extract_content(data: Any) -> str:
    choices = data.get("choices") if isinstance(data, dict) else None
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message_obj = choices[0].get("message")
        if isinstance(message_obj, dict):
            content = message_obj.get("content")
            if isinstance(content, str):
                return content
    raise CompletionServiceError("completion response did not contain choices[0].message.content")
