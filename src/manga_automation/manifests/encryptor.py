"""Encrypt the ``pages`` of manifest documents in place.

A manifest is selected when its path ends with ``manifest.json``, is not a
dot-path and still exists on disk. Each selected document gets every entry of
``pages`` replaced by an ``iv:ciphertext`` token, ``encrypted`` set to true and
``encryption_version`` stamped. A document whose first page already looks like
a token is left untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from manga_automation.crypto.field_cipher import encrypt_text, is_encrypted
from manga_automation.storage.stable_json import write_json

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = "manifest.json"
ENCRYPTION_VERSION = "1.0"


class ManifestOutcome(str, Enum):
    ENCRYPTED = "encrypted"
    ALREADY_ENCRYPTED = "already_encrypted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ManifestResult:
    path: str
    outcome: ManifestOutcome
    page_count: int = 0
    detail: str | None = None


@dataclass(slots=True)
class EncryptionSummary:
    results: list[ManifestResult] = field(default_factory=list)

    def count(self, outcome: ManifestOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def encrypted(self) -> int:
        return self.count(ManifestOutcome.ENCRYPTED)

    @property
    def failed(self) -> int:
        return self.count(ManifestOutcome.FAILED)

    @property
    def total(self) -> int:
        return len(self.results)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "encrypted": self.encrypted,
            "already_encrypted": self.count(ManifestOutcome.ALREADY_ENCRYPTED),
            "skipped": self.count(ManifestOutcome.SKIPPED),
            "failed": self.failed,
            "failed_paths": [r.path for r in self.results if r.outcome is ManifestOutcome.FAILED],
        }


def is_manifest_candidate(path: str, *, repo_root: Path) -> bool:
    if not path.endswith(MANIFEST_SUFFIX):
        return False
    if path.startswith("."):
        return False
    # Diff entries for deleted files are dropped here.
    return (repo_root / path).is_file()


def select_manifest_candidates(paths: Iterable[str], *, repo_root: Path) -> list[str]:
    selected: list[str] = []
    seen: set[str] = set()
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        if is_manifest_candidate(path, repo_root=repo_root):
            selected.append(path)
    return selected


def encrypt_pages(pages: list[Any], key: bytes) -> list[str]:
    return [encrypt_text(page, key) for page in pages]


def encrypt_manifest(path: str | Path, key: bytes) -> ManifestResult:
    """Encrypt one manifest file; never raises for per-file problems."""

    p = Path(path)
    logger.info("Processing: %s", p)

    try:
        manifest = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Error processing %s: %s", p, exc)
        return ManifestResult(str(path), ManifestOutcome.FAILED, detail=str(exc))

    pages = manifest.get("pages") if isinstance(manifest, dict) else None
    if not isinstance(pages, list):
        logger.warning("No pages array found in %s - skipping", p)
        return ManifestResult(str(path), ManifestOutcome.SKIPPED, detail="no pages array")

    first_page = pages[0] if pages else ""
    if is_encrypted(first_page):
        logger.info("Already encrypted - skipping %s", p)
        return ManifestResult(str(path), ManifestOutcome.ALREADY_ENCRYPTED, page_count=len(pages))

    logger.info("Encrypting %d page(s)", len(pages))
    try:
        manifest["pages"] = encrypt_pages(pages, key)
    except (TypeError, ValueError) as exc:
        logger.error("Error processing %s: %s", p, exc)
        return ManifestResult(str(path), ManifestOutcome.FAILED, detail=str(exc))

    manifest["encrypted"] = True
    manifest["encryption_version"] = ENCRYPTION_VERSION

    try:
        write_json(p, manifest, sort_keys=False)
    except OSError as exc:
        logger.error("Error writing %s: %s", p, exc)
        return ManifestResult(str(path), ManifestOutcome.FAILED, detail=str(exc))

    logger.info("Encrypted successfully: %s", p)
    return ManifestResult(str(path), ManifestOutcome.ENCRYPTED, page_count=len(pages))


def encrypt_manifests(
    paths: Iterable[str],
    key: bytes,
    *,
    repo_root: Path | None = None,
) -> EncryptionSummary:
    root = repo_root or Path.cwd()
    summary = EncryptionSummary()
    for rel in paths:
        summary.results.append(encrypt_manifest(root / rel, key))
    return summary
