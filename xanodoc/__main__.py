"""Entry point: python -m xanodoc

  python -m xanodoc repo <export.yaml|json> [-o DIR] [--clean]
  python -m xanodoc oas <openapi.json> [-o DIR] [--tables]

``--tables`` pulls table schemas from the metadata API using XANO_URL,
XANO_TOKEN and XANO_WORKSPACE_ID.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

import httpx

from .codegen import OUTPUT_DIR, write_outputs
from .fetcher import FetchContext, fetch_table_schemas_sync
from .loader import load_export, load_oas
from .oas import build_artifacts, enrich_oas
from .repo_builder import build_repository

logger = logging.getLogger("xanodoc")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xanodoc")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    repo = sub.add_parser("repo", help="build a browsable repo from a workspace export")
    repo.add_argument("input", type=Path)
    repo.add_argument("-o", "--output", type=Path, default=OUTPUT_DIR / "repo")
    repo.add_argument("--clean", action="store_true", help="empty the output directory first")

    oas = sub.add_parser("oas", help="enrich a raw OpenAPI document")
    oas.add_argument("input", type=Path)
    oas.add_argument("-o", "--output", type=Path, default=OUTPUT_DIR / "oas")
    oas.add_argument("--tables", action="store_true", help="add table schemas from the metadata API")
    return parser


def _fetch_context_from_env() -> FetchContext:
    missing = [k for k in ("XANO_URL", "XANO_TOKEN", "XANO_WORKSPACE_ID") if not os.environ.get(k)]
    if missing:
        raise ValueError(f"Missing environment variables: {', '.join(missing)}")
    return FetchContext(
        base_url=os.environ["XANO_URL"],
        token=os.environ["XANO_TOKEN"],
        workspace_id=os.environ["XANO_WORKSPACE_ID"],
    )


def run_repo(args: argparse.Namespace) -> None:
    export = load_export(args.input)
    outputs = build_repository(export)
    count = write_outputs(outputs, args.output, clear=args.clean)
    print(f"Generated {args.output} ({count} files)")


def run_oas(args: argparse.Namespace) -> None:
    raw = load_oas(args.input)
    table_schemas = fetch_table_schemas_sync(_fetch_context_from_env()) if args.tables else {}
    enriched = enrich_oas(raw, table_schemas)
    count = write_outputs(build_artifacts(enriched), args.output)
    print(f"Generated {args.output} ({count} files)")


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "repo":
            run_repo(args)
        else:
            run_oas(args)
    except (OSError, ValueError, httpx.HTTPError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
