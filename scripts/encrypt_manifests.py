#!/usr/bin/env python3
"""Encrypt the page URLs of newly changed manifest.json files.

Changed files come from ``git diff --name-only <base> <head>`` (or stdin with
``--stdin``). Manifests that are already encrypted are left untouched.

Exit codes:
    0  nothing to do, or every manifest was encrypted/skipped
    1  configuration error (e.g. SECRET_TOKEN not set)
    2  at least one manifest failed to process
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from manga_automation.config import load_encryption_config_from_env
from manga_automation.crypto.field_cipher import derive_key
from manga_automation.logging_setup import setup_logging
from manga_automation.manifests.encryptor import (
    EncryptionSummary,
    encrypt_manifests,
    select_manifest_candidates,
)
from manga_automation.manifests.git_changes import (
    DEFAULT_BASE_REV,
    DEFAULT_HEAD_REV,
    changed_files,
    parse_name_only,
)

logger = logging.getLogger("manga_automation.scripts.encrypt_manifests")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python scripts/encrypt_manifests.py",
        description=(
            "Encrypt pages of manifest.json files changed in the last commit. "
            "Exit codes: 0=ok/nothing to do, 1=configuration error, 2=some manifests failed."
        ),
    )
    parser.add_argument(
        "--repo-root",
        type=Path,
        default=Path.cwd(),
        help="Repository root (default: current directory)",
    )
    parser.add_argument("--base", default=DEFAULT_BASE_REV, help="Base revision for git diff")
    parser.add_argument("--head", default=DEFAULT_HEAD_REV, help="Head revision for git diff")
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read the changed-file list from stdin instead of running git diff",
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
        config = load_encryption_config_from_env(env_file=args.env_file)
        key = derive_key(config.secret_token)
    except (RuntimeError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    logger.info("Secret token loaded (%d chars)", len(config.secret_token))

    repo_root = args.repo_root.resolve()
    if args.stdin:
        changed = parse_name_only(sys.stdin.read())
    else:
        changed = changed_files(repo_root, base=args.base, head=args.head)

    manifests = select_manifest_candidates(changed, repo_root=repo_root)
    logger.info("Changed files: %d", len(changed))
    logger.info("Manifest files detected: %d", len(manifests))

    if not manifests:
        logger.info("No new manifests to encrypt")
        print(json.dumps(EncryptionSummary().as_dict(), sort_keys=True))
        return 0

    for rel in manifests:
        logger.info("  - %s", rel)

    summary = encrypt_manifests(manifests, key, repo_root=repo_root)
    logger.info("Encrypted: %d/%d manifest(s)", summary.encrypted, summary.total)

    print(json.dumps(summary.as_dict(), sort_keys=True))
    return 2 if summary.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
