"""
Pytest Configuration and Fixtures
"""

from collections.abc import Sequence

import pytest

from nchain import BaseAdapter, Debugger, Message, Thread


class ScriptedAdapter(BaseAdapter):
    """Adapter that replays canned responses and records every call."""

    name = "scripted"
    AVAILABLE_MODELS = {"default": "scripted-default", "large": "scripted-large"}
    DEFAULT_MODEL = "default"

    def __init__(self, *responses: str, model: str | None = None) -> None:
        super().__init__(model)
        self.responses = list(responses) or ["ok"]
        self.calls: list[tuple[list[Message], str]] = []

    async def chat(self, messages: Sequence[Message], system_prompt: str) -> str:
        self.calls.append((list(messages), system_prompt))
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        return self.responses[index]

    @property
    def last_user_message(self) -> str:
        return self.calls[-1][0][-1].content


@pytest.fixture
def adapter() -> ScriptedAdapter:
    return ScriptedAdapter("first", "second", "third")


@pytest.fixture
def debugger() -> Debugger:
    return Debugger()


@pytest.fixture
def records(debugger):
    """Collect every record dispatched through the debugger fixture."""
    collected = []
    debugger.attach(collected.append)
    return collected


@pytest.fixture
def thread(adapter) -> Thread:
    return Thread("fast", {"fast": adapter, "smart": ScriptedAdapter("smart answer")})


@pytest.fixture
def make_adapter():
    """Factory for additional scripted adapters."""
    return ScriptedAdapter
