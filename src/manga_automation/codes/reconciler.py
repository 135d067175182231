"""Reconcile locked chapters with the persisted chapter -> code mapping.

Persistence rules:

- new codes are uploaded first and written to the local mapping only when the
  upload succeeded; unconfirmed codes are reported but never persisted;
- removed chapters are dropped from the local mapping and saved whatever the
  outcome of the remote delete.

An upload failure therefore leaves the mapping file untouched unless the
same run also removes chapters.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from manga_automation.codes.generator import generate_random_code
from manga_automation.codes.local_store import load_codes, save_codes
from manga_automation.codes.remote_store import (
    ChapterCode,
    RemoteResult,
    RemoteStatus,
    RemoteStoreClient,
)
from manga_automation.content import ContentConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    unchanged: dict[str, str]
    new: list[ChapterCode]
    removed: list[str]


@dataclass(slots=True)
class ReconciliationReport:
    no_op: bool = False
    reason: str | None = None
    unchanged: list[str] = field(default_factory=list)
    new: list[ChapterCode] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    existing_count: int = 0
    upload: RemoteResult | None = None
    delete: RemoteResult | None = None
    persisted_new: bool = False
    codes: dict[str, str] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return any(
            r is not None and r.status is RemoteStatus.FAILED for r in (self.upload, self.delete)
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "no_op": self.no_op,
            "reason": self.reason,
            "new": [c.chapter for c in self.new],
            "existing": self.existing_count,
            "removed": list(self.removed),
            "total": len(self.unchanged) + len(self.new),
            "upload_status": self.upload.status.value if self.upload else None,
            "delete_status": self.delete.status.value if self.delete else None,
            "persisted_new": self.persisted_new,
        }


def _unique(chapters: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for ch in chapters:
        if ch in seen:
            continue
        seen.add(ch)
        ordered.append(ch)
    return ordered


def plan_reconciliation(
    locked_chapters: Iterable[str],
    existing: Mapping[str, str],
    *,
    generate: Callable[[], str] = generate_random_code,
) -> ReconciliationPlan:
    desired = _unique(locked_chapters)
    desired_set = set(desired)

    unchanged: dict[str, str] = {}
    new: list[ChapterCode] = []
    for chapter in desired:
        code = existing.get(chapter)
        if code:
            unchanged[chapter] = code
        else:
            new.append(ChapterCode(chapter=chapter, code=generate()))

    removed = [ch for ch in existing if ch not in desired_set]
    return ReconciliationPlan(unchanged=unchanged, new=new, removed=removed)


def reconcile_chapter_codes(
    content: ContentConfig,
    *,
    store_path: Path,
    client: RemoteStoreClient,
    generate: Callable[[], str] = generate_random_code,
) -> ReconciliationReport:
    if not content.uses_chapter_locks:
        logger.info("Type: %s - skipping code generation", content.type)
        return ReconciliationReport(no_op=True, reason=f"type={content.type}")

    logger.info("Type: webtoon - generating chapter codes...")
    if not content.locked_chapters:
        logger.info("No locked chapters found")
        return ReconciliationReport(no_op=True, reason="no locked chapters")

    existing = load_codes(store_path)
    plan = plan_reconciliation(content.locked_chapters, existing, generate=generate)

    report = ReconciliationReport(
        unchanged=list(plan.unchanged),
        new=list(plan.new),
        removed=list(plan.removed),
        existing_count=len(existing),
    )

    for chapter, code in plan.unchanged.items():
        logger.info("%s: code already exists", chapter)
        logger.debug("%s: plain code %s", chapter, code)
    for item in plan.new:
        logger.info("%s: NEW code generated: %s", item.chapter, item.code)

    # Local state only ever holds codes the remote store has confirmed.
    confirmed = dict(existing)

    if plan.new:
        report.upload = client.upload_codes(content.repo_name, plan.new)
        if report.upload.ok:
            confirmed.update({c.chapter: c.code for c in plan.new})
            save_codes(store_path, confirmed)
            report.persisted_new = True
            logger.info("Remote store updated; local mapping saved")
        else:
            logger.warning(
                "New codes not saved locally (upload %s): %s",
                report.upload.status.value,
                ", ".join(c.chapter for c in plan.new),
            )

    if plan.removed:
        logger.info("Chapters no longer locked: %s", ", ".join(plan.removed))
        report.delete = client.delete_codes(content.repo_name, plan.removed)
        if not report.delete.ok:
            logger.warning(
                "Removing chapters locally despite delete status %s", report.delete.status.value
            )
        for chapter in plan.removed:
            confirmed.pop(chapter, None)
        save_codes(store_path, confirmed)

    report.codes = confirmed
    logger.info(
        "Stats: new=%d existing=%d removed=%d total=%d",
        len(plan.new),
        len(existing),
        len(plan.removed),
        len(plan.unchanged) + len(plan.new),
    )
    return report
