"""Environment-driven configuration for the graph node."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


def get_flag_env(
    flag_name: str,
    *,
    default: str = "",
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Return environment value for ``flag_name`` with lowercase fallback.

    Emits a deprecation warning when the lowercase variant is used.
    """

    env = os.environ if environ is None else environ
    value = env.get(flag_name)
    if value is None:
        lower_key = flag_name.lower()
        value = env.get(lower_key)
        if value is not None:
            logger.warning(
                "Using deprecated lowercase environment variable %s; prefer %s",
                lower_key,
                flag_name,
            )
    return value if value is not None else default


def _parse_bool(name: str, raw: str) -> bool:
    token = raw.strip().lower()
    if token in _TRUE_VALUES:
        return True
    if token in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: str, *, minimum: int = 0) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def parse_subgraph_spec(spec: str) -> Tuple[str, str]:
    """Split a ``name:link`` deployment spec at the first colon."""
    name, sep, link = spec.strip().partition(":")
    if not sep or not name.strip() or not link.strip():
        raise ConfigurationError(
            f"Subgraph must be given as NAME:LINK, got {spec!r}"
        )
    return name.strip(), link.strip()


def _parse_subgraphs(raw: str) -> Tuple[Tuple[str, str], ...]:
    specs = [token for token in raw.split(",") if token.strip()]
    return tuple(parse_subgraph_spec(token) for token in specs)


@dataclass(frozen=True)
class GraphNodeSettings:
    """Settings shared by the servers, the runner and the subgraph provider."""

    http_host: str = "0.0.0.0"
    http_port: int = 8000
    ipfs_url: str = "http://127.0.0.1:5001"
    ipfs_timeout: float = 30.0
    log_level: str = "INFO"
    graphiql_enabled: bool = True
    admin_enabled: bool = True
    default_first: int = 100
    max_first: int = 1000
    subgraphs: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.default_first > self.max_first:
            raise ConfigurationError(
                f"default_first ({self.default_first}) exceeds max_first ({self.max_first})"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GraphNodeSettings":
        def env(name: str, default: str) -> str:
            return get_flag_env(name, default=default, environ=environ)

        defaults = cls()
        return cls(
            http_host=env("GRAPH_NODE_HTTP_HOST", defaults.http_host),
            http_port=_parse_int(
                "GRAPH_NODE_HTTP_PORT", env("GRAPH_NODE_HTTP_PORT", str(defaults.http_port)), minimum=1
            ),
            ipfs_url=env("GRAPH_NODE_IPFS_URL", defaults.ipfs_url).rstrip("/"),
            ipfs_timeout=_parse_float(
                "GRAPH_NODE_IPFS_TIMEOUT", env("GRAPH_NODE_IPFS_TIMEOUT", str(defaults.ipfs_timeout))
            ),
            log_level=env("GRAPH_NODE_LOG_LEVEL", defaults.log_level).upper(),
            graphiql_enabled=_parse_bool(
                "GRAPH_NODE_GRAPHIQL", env("GRAPH_NODE_GRAPHIQL", "true")
            ),
            admin_enabled=_parse_bool("GRAPH_NODE_ADMIN", env("GRAPH_NODE_ADMIN", "true")),
            default_first=_parse_int(
                "GRAPH_NODE_DEFAULT_FIRST",
                env("GRAPH_NODE_DEFAULT_FIRST", str(defaults.default_first)),
                minimum=1,
            ),
            max_first=_parse_int(
                "GRAPH_NODE_MAX_FIRST", env("GRAPH_NODE_MAX_FIRST", str(defaults.max_first)), minimum=1
            ),
            subgraphs=_parse_subgraphs(env("GRAPH_NODE_SUBGRAPHS", "")),
        )

    def with_overrides(self, **overrides: Any) -> "GraphNodeSettings":
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


_settings: Optional[GraphNodeSettings] = None


def get_settings() -> GraphNodeSettings:
    global _settings
    if _settings is None:
        _settings = GraphNodeSettings.from_env()
    return _settings


def configure_settings(settings: GraphNodeSettings) -> None:
    global _settings
    _settings = settings


__all__ = [
    "ConfigurationError",
    "GraphNodeSettings",
    "configure_settings",
    "get_flag_env",
    "get_settings",
    "parse_subgraph_spec",
]
