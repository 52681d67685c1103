"""
searchchat Application - configuration and the agent context

Usage:
    from searchchat.app import AgentContext, load_settings

    context = AgentContext.from_settings(load_settings("config.yaml"))
    result = await context.agent.invoke("東京の天気は？")

The context is constructed explicitly and handed to the server's app
factory; tests build one from fakes with AgentContext(settings, agent).
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    DEFAULT_REGION,
    DEFAULT_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SEARCHCHAT_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


def _load_config(path: str) -> dict:
    """Read YAML config file with ${VAR} environment variable substitution."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    # Replace ${VAR} with environment variable values
    def _replace_env(match):
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(
                f"Environment variable '{var_name}' not set "
                f"(referenced in config file '{path}')"
            )
        return value

    resolved = re.sub(r"\$\{(\w+)\}", _replace_env, raw)
    return yaml.safe_load(resolved) or {}


@dataclass
class LLMSettings:
    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    region: Optional[str] = DEFAULT_REGION
    temperature: float = 0.7
    max_tokens: int = 4096


@dataclass
class SearchSettings:
    api_key: Optional[str] = None
    max_results: int = 5
    timeout: float = 30.0


@dataclass
class AgentSettings:
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_iterations: int = 10
    request_timeout: Optional[float] = None
    stream_idle_timeout: Optional[float] = None


@dataclass
class ServerSettings:
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )


@dataclass
class Settings:
    """Typed view of config.yaml"""
    llm: LLMSettings = field(default_factory=LLMSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    agent: AgentSettings = field(default_factory=AgentSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "Settings":
        """Build settings from a parsed config dict, unknown keys rejected."""
        try:
            settings = cls(
                llm=LLMSettings(**(cfg.get("llm") or {})),
                search=SearchSettings(**(cfg.get("search") or {})),
                agent=AgentSettings(**(cfg.get("agent") or {})),
                server=ServerSettings(**(cfg.get("server") or {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid config: {e}") from e

        if not settings.llm.provider or not settings.llm.model:
            raise ValueError("Missing required config fields: 'llm.provider' and 'llm.model'")
        if not settings.search.api_key:
            settings.search.api_key = os.environ.get("TAVILY_API_KEY")
        return settings


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from *path* (default: $SEARCHCHAT_CONFIG or config.yaml).

    A missing file is not an error: built-in defaults are used.
    """
    path = path or os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    if os.path.exists(path):
        logger.info(f"Loading config from {path}")
        return Settings.from_dict(_load_config(path))
    logger.warning(f"Config not found: {path}. Using built-in defaults.")
    return Settings.from_dict({})


@dataclass
class AgentContext:
    """
    Everything a request handler needs, built once at startup.

    Attributes:
        settings: Loaded settings.
        agent: The chat agent (real or a test double).
        search_client: Web search client the agent's tool is bound to.
    """
    settings: Settings
    agent: Any
    search_client: Optional[Any] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgentContext":
        """Wire the LLM client, search tool and agent from settings."""
        from .agent import Agent
        from .llm import LiteLLMClient, LLMConfig
        from .tools import TavilySearchClient, create_tavily_search_tool

        llm = settings.llm
        extra: Dict[str, Any] = {}
        if llm.provider.lower() == "bedrock" and llm.region:
            extra["aws_region_name"] = llm.region

        llm_client = LiteLLMClient(
            config=LLMConfig(
                model=llm.model,
                api_key=llm.api_key,
                base_url=llm.base_url,
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
                extra=extra,
            ),
            provider_name=llm.provider,
        )
        logger.info(f"LLM client: provider={llm.provider}, model={llm.model}")

        search_client = TavilySearchClient(
            api_key=settings.search.api_key,
            timeout=settings.search.timeout,
        )
        if not settings.search.api_key:
            logger.warning("TAVILY_API_KEY is not set. The web search tool will return errors.")

        agent = Agent(
            llm_client=llm_client,
            system_prompt=settings.agent.system_prompt,
            tools=[create_tavily_search_tool(search_client, settings.search.max_results)],
            max_iterations=settings.agent.max_iterations,
        )
        return cls(settings=settings, agent=agent, search_client=search_client)
