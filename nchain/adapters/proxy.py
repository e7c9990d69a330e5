"""Adapter for an internally proxied chat-completion endpoint.

Responses are cached for a day, keyed on the user-role content only, and a
failed request is retried once, blindly, after a fixed delay.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from ..cache import DAY, ResponseCache
from ..errors import AdapterHTTPError
from ..types import Message
from .base import BaseAdapter, RetryConfig

logger = logging.getLogger(__name__)


def user_content_hash(payload: Sequence[dict[str, str]]) -> str:
    text = "\n".join(m["content"].strip() for m in payload if m["role"] == "user")
    return hashlib.md5(text.encode("utf-8")).hexdigest()[:8]


class ProxyAdapter(BaseAdapter):
    name = "proxy"
    AVAILABLE_MODELS = {
        "llama3-8b": "llama3-8b",
        "llama3-70b": "llama3-70b",
        "gpt-3.5-turbo": "gpt-3.5-turbo",
        "gpt-4-turbo": "gpt-4-turbo",
        "gpt-4o": "gpt-4o",
        "gpt-4o-mini": "gpt-4o-mini",
    }
    DEFAULT_MODEL = "llama3-8b"

    def __init__(
        self,
        endpoint: str,
        token: str | None = None,
        *,
        model: str | None = None,
        feature: str = "nchain",
        cache: ResponseCache | None = None,
        cache_ttl: float = DAY,
        retry: RetryConfig | None = None,
        timeout: float = 120.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(model)
        self.endpoint = endpoint
        self._token = token
        self._feature = feature
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._retry = retry or RetryConfig()
        self._timeout = timeout
        self._session = session

    def cache_key(self, payload: Sequence[dict[str, str]]) -> str:
        return f"{self.model}_{user_content_hash(payload)}"

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str:
        payload = [{"role": "system", "content": system_prompt}, *self._to_dicts(messages)]
        if self._cache is None:
            data = await self._with_retry(payload)
        else:
            data = await self._cache.remember(
                self.cache_key(payload), self._cache_ttl, lambda: self._with_retry(payload)
            )
        return data["choices"][0]["message"]["content"].strip()

    async def _with_retry(self, payload: list[dict[str, str]]) -> dict[str, Any]:
        last_err: Exception | None = None
        for attempt in range(self._retry.max_retries + 1):
            try:
                return await self._request(payload)
            except Exception as e:
                last_err = e
                if attempt < self._retry.max_retries:
                    logger.warning(
                        "Proxy chat request failed (%s), retrying in %.1fs", e, self._retry.delay
                    )
                    await asyncio.sleep(self._retry.delay)
        raise last_err

    async def _request(self, payload: list[dict[str, str]]) -> dict[str, Any]:
        body = {"feature": self._feature, "model": self.model, "payload": json.dumps(payload)}
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        session = self._session
        owns_session = session is None
        if session is None:
            session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
        try:
            async with session.post(self.endpoint, json=body, headers=headers) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise AdapterHTTPError(self.name, resp.status, text or str(resp.reason))
                return await resp.json()
        finally:
            if owns_session:
                await session.close()
