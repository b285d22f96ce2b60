"""Tests for the command line entry point."""

from __future__ import annotations

import os

import pytest

from graphnode import __main__ as cli
from graphnode.core.settings import GraphNodeSettings


@pytest.fixture(autouse=True)
def _environment(monkeypatch):
    for name in list(os.environ):
        if name.upper().startswith("GRAPH_NODE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("GRAPH_NODE_SUBGRAPHS", "env:/ipfs/QmEnv")


def test_flags_override_environment():
    settings = cli.load_settings(
        [
            "--http-port",
            "9001",
            "--ipfs",
            "http://ipfs:5001/",
            "--subgraph",
            "a:/ipfs/QmA",
            "--subgraph",
            "b:/ipfs/QmB",
            "--log-level",
            "debug",
        ]
    )
    assert settings.http_port == 9001
    assert settings.ipfs_url == "http://ipfs:5001"
    assert settings.log_level == "DEBUG"
    assert settings.subgraphs == (("env", "/ipfs/QmEnv"), ("a", "/ipfs/QmA"), ("b", "/ipfs/QmB"))


def test_environment_is_used_without_flags():
    settings = cli.load_settings([])
    assert settings.http_port == GraphNodeSettings().http_port
    assert settings.subgraphs == (("env", "/ipfs/QmEnv"),)


def test_invalid_configuration_exits(monkeypatch):
    monkeypatch.setenv("GRAPH_NODE_HTTP_PORT", "port")
    with pytest.raises(SystemExit, match="GRAPH_NODE_HTTP_PORT must be an integer"):
        cli.main([])


def test_main_runs_the_server(monkeypatch):
    import uvicorn

    calls = []
    monkeypatch.setattr(cli, "configure_logging", lambda level: calls.append(("logging", level)))
    monkeypatch.setattr(cli, "configure_settings", lambda settings: None)
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(("run", kwargs)))

    cli.main(["--http-port", "9002"])

    assert calls == [
        ("logging", "INFO"),
        ("run", {"host": "0.0.0.0", "port": 9002, "log_level": "info"}),
    ]
