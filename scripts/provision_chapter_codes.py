#!/usr/bin/env python3
"""Generate unlock codes for locked webtoon chapters and sync them remotely.

Reads the content descriptor (``config.json``) and the local code mapping
(``chapter-codes-local.json``), uploads codes for newly locked chapters and
deletes codes of chapters that are no longer locked.

Exit codes:
    0  nothing to do, or every remote call succeeded (or no endpoint configured)
    1  configuration error (unreadable/invalid content descriptor, bad timeout)
    2  an upload or delete call reported failure
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from manga_automation.codes.local_store import DEFAULT_CODES_FILENAME
from manga_automation.codes.reconciler import reconcile_chapter_codes
from manga_automation.codes.remote_store import RemoteStoreClient
from manga_automation.config import load_remote_store_config_from_env
from manga_automation.content import load_content_config
from manga_automation.logging_setup import setup_logging

logger = logging.getLogger("manga_automation.scripts.provision_chapter_codes")

DEFAULT_CONTENT_CONFIG = "config.json"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python scripts/provision_chapter_codes.py",
        description=(
            "Provision unlock codes for locked chapters and reconcile them with the remote store. "
            "Exit codes: 0=ok/nothing to do, 1=configuration error, 2=remote call failed."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(DEFAULT_CONTENT_CONFIG),
        help=f"Content descriptor JSON (default: {DEFAULT_CONTENT_CONFIG})",
    )
    parser.add_argument(
        "--codes-file",
        type=Path,
        default=Path(DEFAULT_CODES_FILENAME),
        help=f"Local chapter -> code mapping (default: {DEFAULT_CODES_FILENAME})",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Optional KEY=VALUE file used to populate missing environment variables",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Optional log file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug console output")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        content = load_content_config(args.config)
        remote_config = load_remote_store_config_from_env(env_file=args.env_file)
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        report = reconcile_chapter_codes(
            content,
            store_path=args.codes_file,
            client=RemoteStoreClient(remote_config),
        )
    except (OSError, ValueError) as exc:
        # Unreadable or malformed local code mapping.
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(json.dumps({"repo_name": content.repo_name, **report.as_dict()}, sort_keys=True))
    return 2 if report.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
