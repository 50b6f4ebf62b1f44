#!/usr/bin/env python
"""
Operator harness for a configured sync target bucket.
Usage: python -m syncstore.cli <command> [args]

Connection settings come from the SYNC_* environment variables (or .env).
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from syncstore.config import load_config
from syncstore.core.logging import log_context
from syncstore.core.retry import RetryConfig, run_with_backoff
from syncstore.target import MinioSyncTarget, check_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="syncstore",
        description="Operator harness for a configured sync target bucket.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("check", help="Probe the configured bucket")

    ls = commands.add_parser("ls", help="List items under a directory path")
    ls.add_argument("path", nargs="?", default="")

    stat = commands.add_parser("stat", help="Show the status of one item")
    stat.add_argument("path")

    get = commands.add_parser("get", help="Print an item, or download it with --out")
    get.add_argument("path")
    get.add_argument("--out", help="Local file to write instead of printing")

    put = commands.add_parser("put", help="Upload a local file")
    put.add_argument("path")
    put.add_argument("file")

    rm = commands.add_parser("rm", help="Delete one or more items")
    rm.add_argument("paths", nargs="+")

    mv = commands.add_parser("mv", help="Rename an item")
    mv.add_argument("old_path")
    mv.add_argument("new_path")

    clear = commands.add_parser("clear-root", help="Delete every object in the bucket")
    clear.add_argument("--yes", action="store_true", help="Confirm the wipe")

    return parser


def run(args: argparse.Namespace) -> int:
    config = load_config()

    if args.command == "check":
        result = check_config(config)
        if result.ok:
            print(f"OK: bucket {config.bucket} is reachable at {config.endpoint_url()}")
            return 0
        print(f"FAILED: {result.error_message}")
        return 1

    target = MinioSyncTarget(config)
    try:
        return _run_driver_command(args, target)
    finally:
        target.close()


def _run_driver_command(args: argparse.Namespace, target: MinioSyncTarget) -> int:
    driver = target.file_api()
    policy = RetryConfig.from_repeat_count(driver.request_repeat_count())

    def call(func, *call_args, **call_kwargs):
        return run_with_backoff(func, policy, *call_args, logger=target.logger, **call_kwargs)

    with log_context(target.logger, command=args.command):
        if args.command == "ls":
            result = call(driver.list, args.path)
            for item in result.items:
                print(item.path)
            print(f"\n{len(result.items)} item(s)")
        elif args.command == "stat":
            item = call(driver.stat, args.path)
            if item is None:
                print(f"Not found: {args.path}")
                return 1
            print(item.to_dict())
        elif args.command == "get":
            if args.out:
                output = call(driver.get, args.path, {"target": "file", "path": args.out})
            else:
                output = call(driver.get, args.path)
            if output is None:
                print(f"Not found: {args.path}")
                return 1
            print(output)
        elif args.command == "put":
            call(driver.put, args.path, None, {"source": "file", "path": args.file})
            print(f"Uploaded {args.file} -> {args.path}")
        elif args.command == "rm":
            if len(args.paths) == 1:
                call(driver.delete, args.paths[0])
            else:
                call(driver.batch_deletes, args.paths)
            print(f"Deleted {len(args.paths)} item(s)")
        elif args.command == "mv":
            call(driver.move, args.old_path, args.new_path)
            print(f"Moved {args.old_path} -> {args.new_path}")
        elif args.command == "clear-root":
            if not args.yes:
                print("Refusing to wipe the bucket without --yes")
                return 1
            call(driver.clear_root)
            print(f"Cleared bucket {target.config.bucket}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        return run(args)
    except Exception as exc:  # noqa: BLE001 - report and exit non-zero
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
