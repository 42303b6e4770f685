# src/route_registry/cli.py

from __future__ import annotations

import argparse
import asyncio
import logging
from importlib import metadata
from typing import Optional, Sequence

from src.config.config_manager import ConfigManager, ConfigurationError
from src.core import RoutesManager
from src.utils.error_handling import TechnicalError

DIST_NAME = "route-registry"
FALLBACK_VERSION = "1.0.0"


def _version() -> str:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="route-registry",
        description="Configured route registry utilities",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit.")
    parser.add_argument("--config", default="config", help="Configuration directory.")
    parser.add_argument("--env", default="dev", help="Deployment environment.")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("validate-config", help="Load and validate configuration.")
    subparsers.add_parser("list-routes", help="Load routes and print their keys.")

    show = subparsers.add_parser("show-route", help="Print one route as JSON.")
    show.add_argument("channel")
    show.add_argument("transaction")
    show.add_argument(
        "--mask",
        action="append",
        default=[],
        metavar="FIELD",
        help="Mask the named field in the output (repeatable).",
    )
    return parser


def _load_config(config_dir: str, environment: str) -> ConfigManager:
    manager = ConfigManager(
        config_path=config_dir,
        environment=environment,
        enable_hot_reload=False,
    )
    logging_config = manager.get_logging_config()
    logging.basicConfig(level=logging_config.level, format=logging_config.format)
    return manager


def _validate_config(config_dir: str, environment: str) -> None:
    _load_config(config_dir, environment)


async def _list_routes_command(args: argparse.Namespace) -> int:
    manager = await RoutesManager.create(_load_config(args.config, args.env))
    for route in await manager.list_routes():
        print(f"{route.channel}-{route.transaction}")
    return 0


async def _show_route_command(args: argparse.Namespace) -> int:
    manager = await RoutesManager.create(_load_config(args.config, args.env))
    route = await manager.get_route(args.channel, args.transaction)
    if route is None:
        print(f"Route {args.channel}-{args.transaction} not found")
        return 1
    data = manager.serializer.mask_fields(route.to_dict(), args.mask)
    print(manager.serializer.dumps(data, indent=2))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        print(f"{DIST_NAME} {_version()}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "validate-config":
            _validate_config(args.config, args.env)
            print("Configuration is valid")
            return 0
        if args.command == "list-routes":
            return asyncio.run(_list_routes_command(args))
        if args.command == "show-route":
            return asyncio.run(_show_route_command(args))
    except (ConfigurationError, TechnicalError) as e:
        print(f"Error: {e}")
        return 2

    parser.error(f"Unknown command: {args.command}")


if __name__ == '__main__':
    raise SystemExit(main())
