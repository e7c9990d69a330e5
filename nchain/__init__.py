"""
nchain - prompt orchestration for chat-completion backends.

A Thread queues prompts, system-prompt changes, adapter switches and hooks,
then ``process()`` runs them in order::

    thread = (
        Thread("fast", {"fast": OpenAIAdapter(), "smart": OpenAIAdapter(model="gpt-4o")})
        .insert("notes", notes)
        .prompt(lambda p: p.prompt("Summarize these notes").section("Notes", "{{notes}}").save_as("summary"))
        .use("smart")
        .prompt("Rewrite {{summary}} as three bullet points")
        .format(v.array(v.string("A bullet point")))
    )
    bullets = await thread.process()
"""

from .adapters import AnthropicAdapter, BaseAdapter, OpenAIAdapter, ProxyAdapter, RetryConfig
from .cache import ResponseCache
from .collection import Collection, CollectionChange, CollectionEvent
from .config import NChainConfig
from .debug_server import DebugServer
from .debugger import Debugger, DebugRecord
from .errors import (
    AdapterHTTPError,
    AdapterNotFoundError,
    ArtifactNotFoundError,
    EmptyResultError,
    NChainError,
    NoPriorStepError,
    SchemaParseError,
    UnknownModelError,
)
from .formatter import format_value
from .prompt import Prompt, PromptActions
from .schema import ModelSchema, Schema, SchemaFactory, Validation, v
from .thread import (
    DEFAULT_SYSTEM_PROMPT,
    HookItem,
    PromptItem,
    QueueItem,
    SwitchAdapterItem,
    SystemItem,
    Thread,
)
from .types import Adapter, Message, Role, UserInput

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "Thread", "QueueItem", "PromptItem", "SystemItem", "SwitchAdapterItem", "HookItem",
    "DEFAULT_SYSTEM_PROMPT", "Prompt", "PromptActions", "Collection", "CollectionChange",
    "CollectionEvent",
    # Schema
    "Schema", "SchemaFactory", "ModelSchema", "Validation", "v", "format_value",
    # Adapters
    "Adapter", "BaseAdapter", "RetryConfig", "OpenAIAdapter", "AnthropicAdapter", "ProxyAdapter",
    "ResponseCache",
    # Types / config / telemetry
    "Message", "Role", "UserInput", "NChainConfig", "Debugger", "DebugRecord", "DebugServer",
    # Errors
    "NChainError", "AdapterNotFoundError", "NoPriorStepError", "EmptyResultError",
    "SchemaParseError", "ArtifactNotFoundError", "UnknownModelError", "AdapterHTTPError",
]
