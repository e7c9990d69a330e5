"""Base adapter - model alias catalog shared by every backend."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from ..errors import UnknownModelError
from ..types import Message


@dataclass
class RetryConfig:
    max_retries: int = 1
    delay: float = 5.0


class BaseAdapter:
    """Subclass, fill in the catalog and implement ``chat``."""

    name: ClassVar[str] = "base"
    AVAILABLE_MODELS: ClassVar[dict[str, str]] = {}
    DEFAULT_MODEL: ClassVar[str] = ""

    def __init__(self, model: str | None = None) -> None:
        self.available_models: dict[str, str] = dict(self.AVAILABLE_MODELS)
        self._alias = ""
        self.use(model or self.DEFAULT_MODEL)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._alias!r})"

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def model(self) -> str:
        return self.available_models[self._alias]

    def use(self, model: str) -> BaseAdapter:
        if model not in self.available_models:
            raise UnknownModelError(self.name, model)
        self._alias = model
        return self

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str:
        raise NotImplementedError

    @staticmethod
    def _to_dicts(messages: Sequence[Message]) -> list[dict[str, str]]:
        return [m.to_dict() for m in messages]
