# SPDX-License-Identifier: MIT
# Copyright (c) 2025 rcc-client contributors

"""Command line access to a configuration binding.

Usage:
    python -m rcc_client --server http://rcc:8088 --project demo --env prod get db.host
    python -m rcc_client keys
    python -m rcc_client watch

Flags that are not given fall back to the RCC_* environment variables.
"""

import argparse
import json
import sys
import threading

from .client import Client
from .conf import Conf
from .exceptions import RccError
from .logger import create_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcc_client",
        description="Read and watch configuration from a configuration authority",
    )
    parser.add_argument("--server", dest="server_url", help="Authority base URL (RCC_SERVER_URL)")
    parser.add_argument("--project", dest="project_name", help="Project name (RCC_PROJECT_NAME)")
    parser.add_argument("--env", dest="env_name", help="Environment name (RCC_ENV_NAME)")
    parser.add_argument("--password", dest="api_password", help="API password (RCC_API_PASSWORD)")
    parser.add_argument("--version-name", dest="version_name", help="Named version (RCC_VERSION_NAME)")
    parser.add_argument("--cache-dir", dest="cache_dir", help="Cache directory (RCC_CACHE_DIR)")
    parser.add_argument(
        "--poll-interval", dest="poll_interval_seconds", type=float, help="Seconds between version checks"
    )
    parser.add_argument(
        "--no-cache", dest="enable_cache", action="store_false", default=None, help="Disable the disk cache"
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Print one value")
    get_parser.add_argument("key")
    get_parser.add_argument("--default", default="", help="Value printed when the key is absent")

    subparsers.add_parser("keys", help="Print all keys, sorted")
    subparsers.add_parser("watch", help="Print change events as JSON lines until interrupted")
    return parser


def _conf_from_args(args: argparse.Namespace, enable_callback: bool) -> Conf:
    return Conf.from_env(
        server_url=args.server_url,
        project_name=args.project_name,
        env_name=args.env_name,
        api_password=args.api_password,
        version_name=args.version_name,
        cache_dir=args.cache_dir,
        poll_interval_seconds=args.poll_interval_seconds,
        enable_cache=args.enable_cache,
        enable_callback=enable_callback or None,
    )


def _print_event(event) -> None:
    for change in event:
        print(json.dumps({"version_id": event.version_id, **change.to_dict()}), flush=True)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = create_logger(level=args.log_level, silent=False, name="rcc_client.cli")

    try:
        conf = _conf_from_args(args, enable_callback=args.command == "watch")
        client = Client(conf, logger=logger)
        client.start()
    except RccError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "get":
            print(client.get_value(args.key, args.default))
        elif args.command == "keys":
            for key in sorted(client.get_all_keys()):
                print(key)
        elif args.command == "watch":
            watcher = client.watch(_print_event)
            try:
                threading.Event().wait()
            except KeyboardInterrupt:
                pass
            client.stop()
            watcher.join(timeout=5)
            return 0
    finally:
        if client.is_running:
            client.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
