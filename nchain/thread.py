"""Thread - sequential prompt orchestrator.

A Thread owns a queue of pending steps, the conversation history, an artifact
store and the adapter registry. Builder calls only enqueue work; ``process()``
drains the queue in order, each step seeing the history and artifacts left by
the steps before it. Executed steps are never re-run, so ``process()`` can be
called repeatedly (or with ``max_steps``) to resume a partially drained queue.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Literal, Union

from .collection import Collection
from .debugger import Debugger
from .errors import (
    AdapterNotFoundError,
    ArtifactNotFoundError,
    EmptyResultError,
    NChainError,
    NoPriorStepError,
)
from .formatter import format_value
from .prompt import Prompt, PromptActions
from .schema import Validation
from .types import Adapter, Message, Role, UserInput, join_input

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI Assistant."

ThreadHook = Callable[["Thread"], Union[Awaitable[Any], Any]]


class _QueueItemDict:
    def to_dict(self) -> dict[str, Any]:
        content = self.content
        if isinstance(content, Prompt):
            content = content.to_dict()
        elif callable(content):
            content = getattr(content, "__name__", repr(content))
        data = {"type": self.type, "label": self.label, "executed": self.executed, "content": content}
        if self.type == "hook":
            data["result"] = self.result
        return data


@dataclass
class PromptItem(_QueueItemDict):
    content: Prompt
    label: str
    executed: bool = False
    type: Literal["prompt"] = "prompt"


@dataclass
class SystemItem(_QueueItemDict):
    content: str
    label: str = "System Prompt"
    executed: bool = False
    type: Literal["system"] = "system"


@dataclass
class SwitchAdapterItem(_QueueItemDict):
    content: str
    label: str
    executed: bool = False
    type: Literal["switch_adapter"] = "switch_adapter"


@dataclass
class HookItem(_QueueItemDict):
    content: ThreadHook
    label: str
    executed: bool = False
    result: Any = None
    type: Literal["hook"] = "hook"


QueueItem = Union[PromptItem, SystemItem, SwitchAdapterItem, HookItem]


class Thread:
    def __init__(
        self,
        adapter: str,
        adapters: Mapping[str, Adapter],
        *,
        debugger: Debugger | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        format_adapter: str | None = None,
    ) -> None:
        if adapter not in adapters:
            raise AdapterNotFoundError(adapter)
        self._adapters = dict(adapters)
        self._adapter_name = adapter
        self._adapter = self._adapters[adapter]
        self._debugger = debugger
        self._history: Collection[Message] = Collection("history", debugger)
        self._queue: Collection[QueueItem] = Collection("queue", debugger)
        # Artifacts are readable from any prompt as "{{key}}".
        self._artifacts: dict[str, Any] = {}
        self._system_prompt = system_prompt
        self._format_adapter = format_adapter or ("fast" if "fast" in adapters else adapter)
        self._formatter: Callable[[Any], Awaitable[Any]] | None = None
        self._formatted = False
        self._last_result: Any = None
        self._result: Any = None

    # -- State --

    @property
    def history(self) -> Collection[Message]:
        return self._history

    @property
    def adapter(self) -> Adapter:
        return self._adapter

    @property
    def adapter_name(self) -> str:
        return self._adapter_name

    @property
    def adapters(self) -> dict[str, Adapter]:
        return dict(self._adapters)

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def artifacts(self) -> dict[str, Any]:
        return dict(self._artifacts)

    def get_queue(self) -> tuple[QueueItem, ...]:
        return self._queue.entries

    def incognito(self, enabled: bool = True) -> Thread:
        self._history.incognito = enabled
        return self

    def get(self, rel_position: int = 1, role: Role = "assistant") -> Message | None:
        """Return the ``rel_position``-th most recent history message with ``role``."""
        messages = [m for m in self._history if m.role == role]
        return messages[-rel_position] if 0 < rel_position <= len(messages) else None

    # -- Artifacts --

    def insert(self, key: str, value: Any) -> Thread:
        self._artifacts[key] = value
        if self._debugger is not None:
            self._debugger.dispatch("set_artifact", {"key": key, "value": value})
        return self

    def get_artifact(self, key: str, default: Any = None) -> Any:
        return self._artifacts.get(key, default)

    # -- Queue builders --

    def system(self, prompt: UserInput) -> Thread:
        self._queue.filter(lambda item: item.type != "system")
        self._queue.unshift(SystemItem(content=join_input(prompt)))
        return self

    def prompt(self, value: UserInput | Callable[[Prompt], Any]) -> Thread:
        prompt = Prompt(
            PromptActions(
                send=self._send,
                on_response=self._record,
                on_artifact=lambda key, response: self.insert(key, response),
                get_artifact=self.get_artifact,
            )
        )
        if callable(value):
            value(prompt)
        else:
            prompt.prompt(value)
        self._queue.push(PromptItem(content=prompt, label=prompt.label))
        return self

    def use(self, adapter: str) -> Thread:
        """Switch adapters once the queue reaches this point, not immediately."""
        self._queue.push(SwitchAdapterItem(content=adapter, label=f"Use {adapter}"))
        return self

    def hook(self, label: str, hook: ThreadHook) -> Thread:
        self._queue.push(HookItem(content=hook, label=label))
        return self

    def retry(self) -> Thread:
        """Mark the most recently executed prompt or hook as pending again."""
        for item in reversed(self._queue.entries):
            if not item.executed:
                continue
            if item.type == "prompt":
                item.content.reset()
            elif item.type == "hook":
                item.result = None
            else:
                continue
            item.executed = False
            return self
        raise NoPriorStepError()

    def format(self, schema: Validation[Any]) -> Thread:
        """Pass the final result through ``format_value`` against ``schema``."""

        async def formatter(value: Any) -> Any:
            return await format_value(self._spawn(), value, schema)

        self._formatter = formatter
        self._formatted = False
        return self

    async def get_formatted_artifact(self, key: str, schema: Validation[Any]) -> Any:
        artifact = self.get_artifact(key)
        if artifact is None:
            raise ArtifactNotFoundError(key)
        return await format_value(self._spawn(), artifact, schema)

    def get_result(self, schema: Validation[Any] | None = None) -> Any:
        """Return the last result; with ``schema``, validate it into that type first."""
        value = self._result if self._result is not None else self._last_result
        if schema is None:
            return value
        if value is None:
            raise EmptyResultError()
        return schema.parse(value)

    # -- Execution --

    async def process(self, return_key: str | None = None, max_steps: int | None = None) -> Any:
        steps = 0
        index = 0
        # Index-based so steps enqueued by hooks during this run are picked up.
        while index < len(self._queue):
            item = self._queue.get(index)
            index += 1
            if item is None or item.executed:
                continue
            if max_steps is not None and steps >= max_steps:
                break

            result = await self._execute(item)
            if result is not None:
                self._last_result = result
            steps += 1
            item.executed = True

        if self._formatter is not None:
            if steps or not self._formatted:
                if self._last_result is None:
                    raise EmptyResultError()
                self._result = await self._formatter(self._last_result)
                self._formatted = True
            return self._result

        if return_key:
            return self.get_artifact(return_key)

        if self._last_result is None:
            raise EmptyResultError()
        self._result = self._last_result
        return self._result

    async def _execute(self, item: QueueItem) -> Any:
        logger.debug("Executing %s step %r", item.type, item.label)
        if item.type == "prompt":
            return await item.content.send()
        if item.type == "hook":
            result = item.content(self)
            if inspect.isawaitable(result):
                result = await result
            item.result = result
            return result
        if item.type == "system":
            self._system_prompt = item.content
            return None
        if item.type == "switch_adapter":
            name = item.content
            if name not in self._adapters:
                raise AdapterNotFoundError(name)
            self._adapter = self._adapters[name]
            self._adapter_name = name
            return None
        raise NChainError("UNKNOWN_QUEUE_ITEM", f"Unknown queue item type: {item.type}")

    # -- Prompt bindings --

    async def _send(self, message: Message) -> str:
        return await self._adapter.chat([*self._history.entries, message], self._system_prompt)

    def _record(self, prompt: Prompt) -> None:
        if prompt.is_incognito or prompt.response is None:
            return
        self._history.push(
            Message(role="user", content=prompt.message.content),
            Message(role="assistant", content=prompt.response),
        )

    def _spawn(self) -> Thread:
        return Thread(self._format_adapter, self._adapters, debugger=self._debugger)
