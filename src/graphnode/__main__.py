from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from graphnode.core.settings import (
    ConfigurationError,
    GraphNodeSettings,
    configure_settings,
    parse_subgraph_spec,
)
from graphnode.telemetry import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graph-node",
        description="Serve GraphQL queries and subscriptions for deployed subgraphs.",
    )
    parser.add_argument("--http-host", help="interface to bind the HTTP server to")
    parser.add_argument("--http-port", type=int, help="port of the HTTP and WebSocket server")
    parser.add_argument("--ipfs", dest="ipfs_url", metavar="URL", help="HTTP API URL of an IPFS node")
    parser.add_argument(
        "--subgraph",
        dest="subgraphs",
        action="append",
        metavar="NAME:LINK",
        help="deploy the subgraph at LINK under NAME on startup (repeatable)",
    )
    parser.add_argument("--log-level", help="logging level, e.g. DEBUG or INFO")
    return parser


def load_settings(argv: Optional[Sequence[str]] = None) -> GraphNodeSettings:
    """Settings from the environment with command line flags applied on top."""
    args = build_parser().parse_args(argv)
    settings = GraphNodeSettings.from_env()
    subgraphs: Optional[List] = None
    if args.subgraphs:
        subgraphs = list(settings.subgraphs) + [parse_subgraph_spec(spec) for spec in args.subgraphs]
    return settings.with_overrides(
        http_host=args.http_host,
        http_port=args.http_port,
        ipfs_url=args.ipfs_url.rstrip("/") if args.ipfs_url else None,
        log_level=args.log_level.upper() if args.log_level else None,
        subgraphs=tuple(subgraphs) if subgraphs is not None else None,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        settings = load_settings(argv)
    except ConfigurationError as exc:
        raise SystemExit(f"graph-node: {exc}") from exc

    configure_logging(settings.log_level)
    configure_settings(settings)
    logger = logging.getLogger(__name__)

    from graphnode.server import create_app
    import uvicorn

    app = create_app(settings)
    logger.info("Starting server on %s:%s...", settings.http_host, settings.http_port)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
