"""OpenAI chat adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..types import Message
from .base import BaseAdapter


class OpenAIAdapter(BaseAdapter):
    name = "openai"
    AVAILABLE_MODELS = {
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
        "gpt-4-turbo": "gpt-4-turbo",
        "gpt-4": "gpt-4",
    }
    DEFAULT_MODEL = "gpt-4o-mini"

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
                from openai import AsyncOpenAI
            except ImportError:
                raise ImportError("pip install openai") from None
            client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._client = client
        self._max_tokens = max_tokens

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str:
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "system", "content": system_prompt}, *self._to_dicts(messages)],
            max_tokens=self._max_tokens,
        )
        return (resp.choices[0].message.content or "").strip()
