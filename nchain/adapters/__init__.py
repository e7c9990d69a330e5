"""Chat backends implementing the Adapter protocol."""

from .anthropic import AnthropicAdapter
from .base import BaseAdapter, RetryConfig
from .openai import OpenAIAdapter
from .proxy import ProxyAdapter

__all__ = [
    "BaseAdapter", "RetryConfig",
    "OpenAIAdapter", "AnthropicAdapter", "ProxyAdapter",
]
