"""
Configuration model

Settings for adapters, the response cache and the debug server, loadable
from the environment.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from .cache import DAY
from .thread import DEFAULT_SYSTEM_PROMPT


class NChainConfig(BaseModel):
    """nchain configuration"""

    openai_api_key: str | None = Field(None, description="OpenAI API key")
    anthropic_api_key: str | None = Field(None, description="Anthropic API key")
    proxy_endpoint: str | None = Field(None, description="Proxied chat endpoint URL")
    proxy_token: str | None = Field(None, description="Bearer token for the proxied endpoint")
    proxy_feature: str = Field("nchain", description="Feature name reported to the proxy")
    cache_dir: Path | None = Field(None, description="Response cache directory")
    cache_ttl: float = Field(DAY, gt=0, description="Response cache TTL in seconds")
    retry_delay: float = Field(5.0, ge=0, description="Delay before the proxy's single retry")
    debug_host: str = Field("localhost", description="Debug WebSocket host")
    debug_port: int = Field(1414, description="Debug WebSocket port")
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, description="Default system prompt")

    @classmethod
    def from_env(cls) -> NChainConfig:
        values: dict[str, str] = {}
        env = {
            "openai_api_key": "OPENAI_API_KEY",
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "proxy_endpoint": "NCHAIN_PROXY_ENDPOINT",
            "proxy_token": "NCHAIN_PROXY_TOKEN",
            "proxy_feature": "NCHAIN_PROXY_FEATURE",
            "cache_dir": "NCHAIN_CACHE_DIR",
            "cache_ttl": "NCHAIN_CACHE_TTL",
            "retry_delay": "NCHAIN_RETRY_DELAY",
            "debug_host": "NCHAIN_DEBUG_HOST",
            "debug_port": "NCHAIN_DEBUG_PORT",
            "system_prompt": "NCHAIN_SYSTEM_PROMPT",
        }
        for field, var in env.items():
            value = os.getenv(var)
            if value:
                values[field] = value
        return cls.model_validate(values)
