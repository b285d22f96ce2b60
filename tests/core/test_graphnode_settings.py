from __future__ import annotations

import logging

import pytest

from graphnode.core import settings as settings_module
from graphnode.core.settings import (
    ConfigurationError,
    GraphNodeSettings,
    configure_settings,
    get_flag_env,
    get_settings,
    parse_subgraph_spec,
)


def test_defaults_from_empty_environment():
    settings = GraphNodeSettings.from_env({})
    assert settings == GraphNodeSettings()
    assert settings.http_port == 8000
    assert settings.ipfs_url == "http://127.0.0.1:5001"
    assert settings.subgraphs == ()


def test_values_from_environment():
    settings = GraphNodeSettings.from_env(
        {
            "GRAPH_NODE_HTTP_HOST": "127.0.0.1",
            "GRAPH_NODE_HTTP_PORT": "9000",
            "GRAPH_NODE_IPFS_URL": "http://ipfs:5001/",
            "GRAPH_NODE_IPFS_TIMEOUT": "2.5",
            "GRAPH_NODE_LOG_LEVEL": "debug",
            "GRAPH_NODE_GRAPHIQL": "off",
            "GRAPH_NODE_ADMIN": "0",
            "GRAPH_NODE_DEFAULT_FIRST": "10",
            "GRAPH_NODE_MAX_FIRST": "50",
            "GRAPH_NODE_SUBGRAPHS": "a:/ipfs/QmA, org/b:/ipfs/QmB",
        }
    )
    assert settings.http_host == "127.0.0.1"
    assert settings.http_port == 9000
    assert settings.ipfs_url == "http://ipfs:5001"
    assert settings.ipfs_timeout == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.graphiql_enabled is False
    assert settings.admin_enabled is False
    assert (settings.default_first, settings.max_first) == (10, 50)
    assert settings.subgraphs == (("a", "/ipfs/QmA"), ("org/b", "/ipfs/QmB"))


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"GRAPH_NODE_HTTP_PORT": "http"}, "GRAPH_NODE_HTTP_PORT must be an integer"),
        ({"GRAPH_NODE_HTTP_PORT": "0"}, "GRAPH_NODE_HTTP_PORT must be >= 1"),
        ({"GRAPH_NODE_IPFS_TIMEOUT": "-1"}, "GRAPH_NODE_IPFS_TIMEOUT must be positive"),
        ({"GRAPH_NODE_IPFS_TIMEOUT": "soon"}, "GRAPH_NODE_IPFS_TIMEOUT must be a number"),
        ({"GRAPH_NODE_GRAPHIQL": "maybe"}, "GRAPH_NODE_GRAPHIQL must be a boolean"),
        ({"GRAPH_NODE_DEFAULT_FIRST": "2000"}, r"default_first \(2000\) exceeds max_first"),
        ({"GRAPH_NODE_SUBGRAPHS": "no-link"}, "Subgraph must be given as NAME:LINK"),
    ],
)
def test_invalid_environment(environ, message):
    with pytest.raises(ConfigurationError, match=message):
        GraphNodeSettings.from_env(environ)


def test_lowercase_flags_are_deprecated(caplog):
    with caplog.at_level(logging.WARNING, logger="graphnode.core.settings"):
        value = get_flag_env("GRAPH_NODE_HTTP_HOST", environ={"graph_node_http_host": "::"})
    assert value == "::"
    assert "deprecated lowercase environment variable" in caplog.text


def test_parse_subgraph_spec_splits_at_first_colon():
    assert parse_subgraph_spec(" name : /ipfs/Qm:x ") == ("name", "/ipfs/Qm:x")
    with pytest.raises(ConfigurationError):
        parse_subgraph_spec(":/ipfs/Qm")


def test_with_overrides_skips_none():
    settings = GraphNodeSettings()
    assert settings.with_overrides(http_port=None) is settings
    assert settings.with_overrides(http_port=1234).http_port == 1234


def test_configured_settings_are_shared(monkeypatch):
    monkeypatch.setattr(settings_module, "_settings", None)
    configured = GraphNodeSettings(http_port=1)
    configure_settings(configured)
    assert get_settings() is configured
