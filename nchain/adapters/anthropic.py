"""Anthropic Claude chat adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..types import Message
from .base import BaseAdapter


class AnthropicAdapter(BaseAdapter):
    name = "anthropic"
    AVAILABLE_MODELS = {
        "claude-3-5-sonnet": "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku": "claude-3-5-haiku-20241022",
        "claude-3-opus": "claude-3-opus-20240229",
        "claude-3-sonnet": "claude-3-sonnet-20240229",
        "claude-3-haiku": "claude-3-haiku-20240307",
    }
    DEFAULT_MODEL = "claude-3-haiku"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 4096,
        client: Any = None,
    ) -> None:
        super().__init__(model)
        if client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError:
                raise ImportError("pip install anthropic") from None
            client = AsyncAnthropic(api_key=api_key, base_url=base_url)
        self._client = client
        self._max_tokens = max_tokens

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str:
        # Anthropic takes the system prompt out of band
        resp = await self._client.messages.create(
            model=self.model,
            max_tokens=self._max_tokens,
            system=system_prompt,
            messages=[m for m in self._to_dicts(messages) if m["role"] != "system"],
        )
        text = next((block.text for block in resp.content if block.type == "text"), "")
        return text.strip()
