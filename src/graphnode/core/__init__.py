"""Core configuration for the graph node."""

from __future__ import annotations

from .settings import (
    ConfigurationError,
    GraphNodeSettings,
    configure_settings,
    get_flag_env,
    get_settings,
    parse_subgraph_spec,
)

__all__ = [
    "ConfigurationError",
    "GraphNodeSettings",
    "configure_settings",
    "get_flag_env",
    "get_settings",
    "parse_subgraph_spec",
]
