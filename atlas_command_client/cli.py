"""Command-line interface for atlas-command-client."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from . import constants
from .client import AtlasCommandHttpClient
from .components import components_to_record, validate_entity_components
from .config import AtlasConfig, load_config, save_config
from .errors import AtlasClientError, ComponentValidationError
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlas-command", description="Client for the Atlas Command API"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--base-url", help="Override the configured API base URL")
    parser.add_argument("--token", help="Override the configured bearer token")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )
    subparsers.add_parser(
        "configure", help="Write --base-url/--token into the configuration file"
    )
    subparsers.add_parser("health", help="Query the service health endpoint")

    entities_parser = subparsers.add_parser("entities", help="List entities")
    entities_parser.add_argument("--limit", type=int, default=100)
    entities_parser.add_argument("--offset", type=int, default=0)

    entity_parser = subparsers.add_parser("entity", help="Show a single entity")
    entity_parser.add_argument("entity_id")

    tasks_parser = subparsers.add_parser("tasks", help="List tasks")
    tasks_parser.add_argument("--limit", type=int, default=25)
    tasks_parser.add_argument("--status")
    tasks_parser.add_argument("--offset", type=int, default=0)

    task_parser = subparsers.add_parser("task", help="Show a single task")
    task_parser.add_argument("task_id")

    changed_parser = subparsers.add_parser(
        "changed-since", help="List records changed after an ISO 8601 timestamp"
    )
    changed_parser.add_argument("since")
    changed_parser.add_argument("--limit-per-type", type=int)

    check_parser = subparsers.add_parser(
        "check-components",
        help="Validate and normalize an entity components JSON file without sending it",
    )
    check_parser.add_argument("path", type=Path)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.base_url:
        config.atlas.base_url = args.base_url
    if args.token:
        config.atlas.token = args.token

    configure_logging(
        config.logging.level,
        log_path=config.logging.path,
        log_network=config.logging.log_network,
    )

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                if key == "token" and value:
                    value = "***"
                print(f"{key} = {value}")
            print()
        return 0

    if args.command == "configure":
        return _configure(config, args)

    if args.command == "check-components":
        return _check_components(args.path)

    calls: dict[str, Callable[[AtlasCommandHttpClient], Awaitable[Any]]] = {
        "health": lambda client: client.get_health(),
        "entities": lambda client: client.list_entities(args.limit, args.offset),
        "entity": lambda client: client.get_entity(args.entity_id),
        "tasks": lambda client: client.list_tasks(args.limit, args.status, args.offset),
        "task": lambda client: client.get_task(args.task_id),
        "changed-since": lambda client: client.get_changed_since(
            args.since, args.limit_per_type
        ),
    }

    call = calls.get(args.command)
    if call is None:
        LOGGER.error("Unknown command: %s", args.command)
        return 1

    try:
        result = asyncio.run(_run(config, call))
    except (AtlasClientError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
        LOGGER.error("Request failed: %s", str(exc) or type(exc).__name__)
        return 1

    _print_json(result)
    return 0


async def _run(
    config: AtlasConfig, call: Callable[[AtlasCommandHttpClient], Awaitable[Any]]
) -> Any:
    async with AtlasCommandHttpClient.from_config(config.atlas) as client:
        return await call(client)


def _configure(config: AtlasConfig, args: argparse.Namespace) -> int:
    if not args.base_url and not args.token:
        LOGGER.error("configure requires --base-url and/or --token")
        return 1
    if args.base_url:
        config.raw.set("atlas", "base_url", args.base_url)
    if args.token:
        config.raw.set("atlas", "token", args.token)
    save_config(config)
    LOGGER.info("Configuration written to %s", config.path)
    return 0


def _check_components(path: Path) -> int:
    try:
        components = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        LOGGER.error("Cannot read components from %s: %s", path, exc)
        return 1

    if not isinstance(components, dict):
        LOGGER.error("Components file must contain a JSON object")
        return 1

    try:
        validate_entity_components(components)
    except ComponentValidationError as exc:
        LOGGER.error("%s", exc)
        return 1

    _print_json(components_to_record(components))
    return 0


def _print_json(value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    print(json.dumps(value, indent=2, sort_keys=True))


if __name__ == "__main__":
    sys.exit(main())
