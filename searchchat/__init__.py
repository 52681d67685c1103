"""
searchchat - Chat front-end for a web-search-augmented LLM agent

The server streams the agent's text deltas as Server-Sent Events; the
client reassembles them into chat messages.

Quick Start:
    # Server
    $ searchchat-server --config config.yaml

    # Terminal client
    $ searchchat-chat --url http://localhost:8000

Programmatic use:
    from searchchat import AgentContext, load_settings, create_api

    context = AgentContext.from_settings(load_settings())
    api = create_api(context)
"""

from .app import AgentContext, Settings, load_settings
from .server.app import create_api

__version__ = "0.1.0"

__all__ = [
    "AgentContext",
    "Settings",
    "load_settings",
    "create_api",
]
