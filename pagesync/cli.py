"""Command-line entry point.

Usage:
  python -m pagesync deploy --directory dist --branch main --commit-hash abc123
  python -m pagesync scan dist

`deploy` prints the deployment result as JSON on stdout. `scan` prints
the manifest that would be submitted, without contacting the store.
Logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import Optional

from pagesync.core.config import Settings, get_settings
from pagesync.core.logging import configure_structlog, set_run_id
from pagesync.errors import PagesyncError
from pagesync.sync.deployment import build_manifest
from pagesync.sync.pipeline import deploy
from pagesync.sync.scanner import scan_directory
from pagesync.sync.types import GitMetadata

logger = logging.getLogger("pagesync")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pagesync",
        description="Upload a static build directory and create a Pages deployment.",
    )
    ap.add_argument("--debug", action="store_true", help="Human-readable debug logs")
    sub = ap.add_subparsers(dest="command", required=True)

    dp = sub.add_parser("deploy", help="Upload assets and create a deployment")
    dp.add_argument("--directory", help="Build output directory (PAGESYNC_DIRECTORY)")
    dp.add_argument("--account-id", help="Account identifier (PAGESYNC_ACCOUNT_ID)")
    dp.add_argument("--project-name", help="Pages project (PAGESYNC_PROJECT_NAME)")
    dp.add_argument("--api-token", help="Bearer API token (PAGESYNC_API_TOKEN)")
    dp.add_argument("--branch", required=True, help="Git branch being deployed")
    dp.add_argument("--commit-hash", required=True, help="Git commit SHA")
    dp.add_argument("--commit-message", default="", help="Commit message or PR title")
    dp.add_argument("--commit-dirty", action="store_true", help="Working tree had local changes")

    sp = sub.add_parser("scan", help="Print the manifest for a directory")
    sp.add_argument("directory", help="Directory to scan")

    return ap


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return *settings* with any CLI flags layered on top."""
    overrides = {
        field: getattr(args, field)
        for field in ("directory", "account_id", "project_name", "api_token")
        if getattr(args, field, None)
    }
    if args.debug:
        overrides["debug"] = True
    return settings.model_copy(update=overrides)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)

    configure_structlog(debug=settings.debug)
    set_run_id(uuid.uuid4().hex[:12])

    try:
        if args.command == "scan":
            return _scan(args.directory, settings)
        return _deploy(args, settings)
    except (PagesyncError, OSError) as exc:
        logger.error("%s", exc)
        return 1


def _scan(directory: str, settings: Settings) -> int:
    files = scan_directory(directory, workers=settings.hash_workers)
    print(json.dumps(build_manifest(files), indent=2))
    return 0


def _deploy(args: argparse.Namespace, settings: Settings) -> int:
    missing = settings.missing_credentials()
    if missing:
        logger.error("Missing required settings: %s", ", ".join(missing))
        return 2

    git = GitMetadata(
        branch=args.branch,
        commit_hash=args.commit_hash,
        commit_message=args.commit_message,
        commit_dirty=args.commit_dirty,
    )
    result = asyncio.run(deploy(settings, git))
    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
