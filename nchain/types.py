"""Message and adapter types."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, Union, runtime_checkable

Role = Literal["user", "assistant", "system"]

UserInput = Union[str, Sequence[str]]


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def join_input(value: UserInput) -> str:
    """Collapse a string or a sequence of lines into one newline-joined string."""
    if isinstance(value, str):
        return value
    return "\n".join(value)


@runtime_checkable
class Adapter(Protocol):
    available_models: Mapping[str, str]

    @property
    def model(self) -> str: ...

    def use(self, model: str) -> Adapter: ...

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str: ...
