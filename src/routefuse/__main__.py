"""Dry run: discover routers under a path and print the route table they would produce."""

import argparse
import json
import sys
from collections.abc import Sequence

from fastapi import FastAPI

from routefuse.constants import routefuse_settings
from routefuse.custom_exceptions import DirectoryReadError
from routefuse.fuse import fuse_routes_sync
from routefuse.introspection import extract_routes
from routefuse.logs import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="routefuse", description=__doc__)
    parser.add_argument("project_path", help="Root of the project to scan")
    parser.add_argument(
        "--exclude",
        default=routefuse_settings.exclude_filter,
        help="Space-separated file and folder names to skip",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = routefuse_settings.model_copy(update={"log_json": args.json_logs or routefuse_settings.log_json})
    setup_logging(settings)

    # a bare app, so only discovered routes end up in the table
    app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
    try:
        fuse_routes_sync(app, args.project_path, args.exclude, enable_introspection=False)
    except DirectoryReadError as exc:
        print(f"routefuse: {exc}", file=sys.stderr)
        return 1

    table = [descriptor.model_dump() for descriptor in extract_routes(app.routes)]
    print(json.dumps(table, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
