"""Thread presets - "smart" / "fast" adapter registries per backend."""

from __future__ import annotations

from .adapters import AnthropicAdapter, OpenAIAdapter, ProxyAdapter, RetryConfig
from .cache import ResponseCache
from .config import NChainConfig
from .debugger import Debugger
from .errors import NChainError
from .thread import Thread


def create_proxy_thread(
    model: str = "fast",
    config: NChainConfig | None = None,
    debugger: Debugger | None = None,
) -> Thread:
    config = config or NChainConfig.from_env()
    if not config.proxy_endpoint:
        raise NChainError("CONFIG", "proxy_endpoint is not configured")
    cache = ResponseCache(config.cache_dir)
    kw = dict(
        token=config.proxy_token,
        feature=config.proxy_feature,
        cache=cache,
        cache_ttl=config.cache_ttl,
        retry=RetryConfig(max_retries=1, delay=config.retry_delay),
    )
    return Thread(
        model,
        {
            "smart": ProxyAdapter(config.proxy_endpoint, model="llama3-70b", **kw),
            "fast": ProxyAdapter(config.proxy_endpoint, model="llama3-8b", **kw),
        },
        debugger=debugger,
        system_prompt=config.system_prompt,
    )


def create_openai_thread(
    model: str = "fast",
    config: NChainConfig | None = None,
    debugger: Debugger | None = None,
) -> Thread:
    config = config or NChainConfig.from_env()
    return Thread(
        model,
        {
            "smart": OpenAIAdapter(config.openai_api_key, model="gpt-4o"),
            "fast": OpenAIAdapter(config.openai_api_key, model="gpt-4o-mini"),
        },
        debugger=debugger,
        system_prompt=config.system_prompt,
    )


def create_anthropic_thread(
    model: str = "fast",
    config: NChainConfig | None = None,
    debugger: Debugger | None = None,
) -> Thread:
    config = config or NChainConfig.from_env()
    return Thread(
        model,
        {
            "smart": AnthropicAdapter(config.anthropic_api_key, model="claude-3-5-sonnet"),
            "fast": AnthropicAdapter(config.anthropic_api_key, model="claude-3-haiku"),
        },
        debugger=debugger,
        system_prompt=config.system_prompt,
    )
