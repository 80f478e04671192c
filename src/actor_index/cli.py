"""Command-line entrypoint for building and querying the actor index."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from actor_index.config import CliOverrides, load_effective_config
from actor_index.index import EntryFormatError, WorldDiscoveryError
from actor_index.models import ActorIndexEntry
from actor_index.service import ActorIndexService, create_service

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2
BUILD_SUMMARY_LIMIT = 10
AUDIT_DEFAULT_LIMIT = 50
AUDIT_MAX_LIMIT = 500


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for startup configuration and subcommands."""
    parser = argparse.ArgumentParser(prog="actor-index")
    parser.add_argument("--config", required=False, default=None)
    parser.add_argument("--data-root", required=False, default=None)
    parser.add_argument("--worlds-subdir", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--max-workers", type=int, required=False, default=None)
    parser.add_argument("--actor-type", action="append", required=False, default=None)
    parser.add_argument("--no-persist", action="store_true")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="Show data availability and index counters.")
    commands.add_parser("worlds", help="List discovered worlds.")
    commands.add_parser("build", help="Rebuild the index from disk.")
    search = commands.add_parser("search", help="Find an actor by name in the saved index.")
    search.add_argument("name")
    search.add_argument("--all", action="store_true", help="Return every match.")
    show = commands.add_parser("show", help="Find an actor and summarize its record.")
    show.add_argument("name")
    audit = commands.add_parser("audit", help="Show recent audit events.")
    audit.add_argument("--since", default=None, help="ISO-8601 UTC lower bound.")
    audit.add_argument("--limit", type=int, default=AUDIT_DEFAULT_LIMIT)
    return parser


def run(service: ActorIndexService, args: argparse.Namespace) -> tuple[int, dict[str, object]]:
    """Execute one subcommand and return the exit code and response envelope."""
    if args.command == "status":
        try:
            service.load_persisted()
        except EntryFormatError as error:
            return EXIT_ERROR, error_response(code="INDEX_CORRUPT", message=str(error))
        result = asdict(service.status())
        result["config"] = service.config.to_public_dict()
        return EXIT_OK, success_response(result)
    if args.command == "audit":
        limit = min(max(args.limit, 1), AUDIT_MAX_LIMIT)
        return EXIT_OK, success_response(
            {"events": service.read_audit(since=args.since, limit=limit)}
        )

    if not service.is_available():
        return EXIT_ERROR, error_response(
            code="DATA_UNAVAILABLE",
            message=f"Data root is not a readable directory: {service.paths.data_root}",
        )

    try:
        if args.command == "worlds":
            worlds = service.list_worlds()
            return EXIT_OK, success_response(
                {
                    "worlds": [
                        {"id": world.id, "name": world.name, "path": str(world.storage_path)}
                        for world in worlds
                    ]
                }
            )
        if args.command == "build":
            entries = service.build_index()
            snapshot = service.snapshot()
            return EXIT_OK, success_response(
                {
                    "entry_count": len(entries),
                    "world_count": snapshot.world_count,
                    "built_at": snapshot.built_at,
                    "sample": [_entry_dict(entry) for entry in entries[:BUILD_SUMMARY_LIMIT]],
                    "failures": [asdict(failure) for failure in snapshot.failures],
                }
            )
    except WorldDiscoveryError as error:
        return EXIT_ERROR, error_response(code="DISCOVERY_FAILED", message=str(error))

    try:
        service.load_persisted()
    except EntryFormatError as error:
        return EXIT_ERROR, error_response(code="INDEX_CORRUPT", message=str(error))

    if args.command == "search":
        if args.all:
            matches = service.search_actors(args.name)
            return EXIT_OK if matches else EXIT_NOT_FOUND, success_response(
                {"matches": [_entry_dict(entry) for entry in matches]}
            )
        match = service.search_actor(args.name)
        return EXIT_OK if match else EXIT_NOT_FOUND, success_response(
            {"match": _entry_dict(match) if match is not None else None}
        )

    lookup = service.get_actor(args.name)
    if lookup is None:
        return EXIT_NOT_FOUND, success_response({"actor": None})
    return EXIT_OK, success_response(
        {"entry": _entry_dict(lookup.entry), "actor": asdict(lookup.details)}
    )


def success_response(result: dict[str, object]) -> dict[str, object]:
    """Build success envelope."""
    return {"ok": True, "result": result}


def error_response(code: str, message: str) -> dict[str, object]:
    """Build explicit error envelope."""
    return {"ok": False, "result": {}, "error": {"code": code, "message": message}}


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the actor-index command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    stream = out_stream or sys.stdout
    overrides = CliOverrides(
        data_root=Path(args.data_root) if args.data_root is not None else None,
        worlds_subdir=args.worlds_subdir,
        data_dir=Path(args.data_dir) if args.data_dir is not None else None,
        actor_types=tuple(args.actor_type) if args.actor_type is not None else None,
        max_workers=args.max_workers,
        persist_index=False if args.no_persist else None,
    )
    try:
        config = load_effective_config(
            working_dir=Path.cwd(),
            config_path=Path(args.config) if args.config is not None else None,
            overrides=overrides,
        )
    except ValueError as error:
        code, response = EXIT_ERROR, error_response(code="INVALID_CONFIG", message=str(error))
    else:
        code, response = run(create_service(config), args)
    stream.write(f"{json.dumps(response, sort_keys=True)}\n")
    stream.flush()
    return code


def _entry_dict(entry: ActorIndexEntry) -> dict[str, object]:
    return {"name": entry.name, "world": entry.world, "storage_ref": entry.storage_ref}


if __name__ == "__main__":
    raise SystemExit(main())
