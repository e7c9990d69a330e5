"""Prompt - builder for one outbound user message and its response."""

from __future__ import annotations

import json
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .types import Message, UserInput, join_input

ARTIFACT_TOKEN = re.compile(r"{{([\w-]+)}}")
_NON_WORD = re.compile(r"[^\w]+")


@dataclass
class PromptActions:
    """Callbacks a Thread binds into each Prompt it creates."""

    send: Callable[[Message], Awaitable[str]]
    on_response: Callable[["Prompt"], None]
    on_artifact: Callable[[str, str], None]
    get_artifact: Callable[[str], Any]


def slugify(name: str) -> str:
    return _NON_WORD.sub("_", name.strip().lower()).strip("_")


class Prompt:
    def __init__(self, actions: PromptActions) -> None:
        self._actions = actions
        self._content = ""
        self._key = ""
        self._executed = False
        self._incognito = False
        self._response: str | None = None
        self._label = "Prompt"

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, value: str) -> None:
        self.set_label(value)

    @property
    def response(self) -> str | None:
        return self._response

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_incognito(self) -> bool:
        return self._incognito

    @property
    def message(self) -> Message:
        """The user message with ``{{key}}`` tokens resolved against current artifacts."""
        return Message(role="user", content=self._replace_artifacts(self._content))

    def incognito(self) -> Prompt:
        self._incognito = True
        return self

    def prompt(self, value: UserInput) -> Prompt:
        self._content = join_input(value)
        return self

    def section(self, name: str, content: UserInput) -> Prompt:
        slug = slugify(name)
        self._content += f"\n\n<{slug}>\n{join_input(content)}\n</{slug}>\n\n"
        return self

    def save_as(self, key: str) -> Prompt:
        self._key = key
        return self

    def set_label(self, value: str) -> Prompt:
        self._label = value
        return self

    def _replace_artifacts(self, content: str) -> str:
        def resolve(match: re.Match[str]) -> str:
            artifact = self._actions.get_artifact(match.group(1))
            if artifact is None:
                return match.group(0)
            if isinstance(artifact, str):
                return artifact
            return json.dumps(artifact)

        return ARTIFACT_TOKEN.sub(resolve, content)

    async def send(self) -> str:
        response = await self._actions.send(self.message)
        self._response = response
        self._executed = True
        self._actions.on_response(self)
        if self._key:
            self._actions.on_artifact(self._key, response)
        return response

    def reset(self) -> None:
        self._executed = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self._key,
            "label": self._label,
            "is_incognito": self._incognito,
            "executed": self._executed,
            "message": {"role": "user", "content": self._content},
            "response": self._response,
        }
