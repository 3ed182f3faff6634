"""CLI entrypoint for running the prthread webhook service."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from prthread.config import ConfigError, PrthreadConfig, load_effective_config, resolve_slack_token
from prthread.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _add_config_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", default="config.json", help="Path to YAML or JSON configuration")
    cmd.add_argument("--env-file", default=".env", help="Optional dotenv file loaded before reading the Slack token")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mirror Azure DevOps pull requests into Slack threads")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the webhook HTTP server")
    _add_config_flags(serve)
    serve.add_argument("--host", help="Bind host (overrides server.host)")
    serve.add_argument("--port", type=int, help="Bind port (overrides server.port)")

    check = sub.add_parser("check-config", help="Validate configuration and print the project routing table")
    _add_config_flags(check)

    return parser


def _load_config(args: argparse.Namespace) -> PrthreadConfig:
    override: dict = {}
    server: dict = {}
    if getattr(args, "host", None):
        server["host"] = args.host
    if getattr(args, "port", None):
        server["port"] = args.port
    if server:
        override["server"] = server
    return load_effective_config(args.config, runtime_override=override)


def _log_routing_table(config: PrthreadConfig) -> None:
    if not config.projects:
        logger.warning("No project routing configured; every notification will be dropped")
        return
    for project, route in sorted(config.projects.items()):
        logger.info("Project %r -> channel %s", project, route.channel_id)


def _run_check_config(args: argparse.Namespace) -> int:
    config = _load_config(args)
    _log_routing_table(config)
    print(f"{len(config.projects)} project(s) configured")
    for project, route in sorted(config.projects.items()):
        print(f"{project}\t{route.channel_id}")
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    config = _load_config(args)
    if args.env_file and Path(args.env_file).exists():
        load_dotenv(args.env_file)
    token = resolve_slack_token(config, os.environ)
    _log_routing_table(config)

    import uvicorn

    from prthread.connectors import SlackThreadSink, build_slack_client
    from prthread.webapp import create_app

    sink = SlackThreadSink(build_slack_client(token, timeout_seconds=config.slack.timeout_seconds))
    app = create_app(config, sink)
    logger.info("Server listening on %s:%s", config.server.host, config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=args.log_level.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.command == "serve":
            return _run_serve(args)
        if args.command == "check-config":
            return _run_check_config(args)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
