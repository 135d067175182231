"""Client for the key-value worker that validates chapter unlock codes.

Request body::

    {"action": "uploadCodes", "repoName": ..., "codes": [{"chapter": ..., "code": ...}]}
    {"action": "deleteCodes", "repoName": ..., "chapters": [...]}

Response body::

    {"success": bool, "uploaded"?: int, "updated"?: int, "deleted"?: int, "message"?: str}

Every call is a single attempt. Application-level success is the ``success``
flag of the response, not the HTTP status.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from manga_automation.config import RemoteStoreConfig

logger = logging.getLogger(__name__)

USER_AGENT = "manga-automation-codes/0.1"


@dataclass(frozen=True, slots=True)
class ChapterCode:
    chapter: str
    code: str

    def as_payload(self) -> dict[str, str]:
        return {"chapter": self.chapter, "code": self.code}


class RemoteStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True, slots=True)
class RemoteResult:
    status: RemoteStatus
    message: str | None = None
    uploaded: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def ok(self) -> bool:
        return self.status is RemoteStatus.OK


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class RemoteStoreClient:
    def __init__(self, config: RemoteStoreConfig):
        self.config = config

    def _post(self, payload: dict[str, Any]) -> tuple[dict[str, Any] | None, str | None]:
        try:
            response = requests.post(
                str(self.config.worker_url),
                json=payload,
                headers={"User-Agent": USER_AGENT},
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            return None, f"request error: {exc}"

        try:
            body = response.json()
        except ValueError as exc:
            return None, f"parse error (http_status={response.status_code}): {exc}"

        if not isinstance(body, dict):
            return None, f"parse error (http_status={response.status_code}): expected JSON object"
        return body, None

    def upload_codes(self, repo_name: str, codes: Sequence[ChapterCode]) -> RemoteResult:
        if not self.config.configured:
            logger.warning("CLOUDFLARE_WORKER_URL not configured; register codes manually")
            print("Manual codes:")
            for item in codes:
                print(f"   {repo_name} | {item.chapter} | {item.code}")
            return RemoteResult(RemoteStatus.NOT_CONFIGURED, message="endpoint not configured")

        if not codes:
            return RemoteResult(RemoteStatus.OK)

        logger.info("Uploading %d code(s) to the remote store...", len(codes))
        body, error = self._post(
            {
                "action": "uploadCodes",
                "repoName": repo_name,
                "codes": [c.as_payload() for c in codes],
            }
        )
        if body is None:
            logger.error("Upload failed: %s", error)
            return RemoteResult(RemoteStatus.FAILED, message=error)

        if not body.get("success"):
            message = str(body.get("message") or "remote store reported failure")
            logger.error("Upload failed: %s", message)
            return RemoteResult(RemoteStatus.FAILED, message=message)

        result = RemoteResult(
            RemoteStatus.OK,
            message=body.get("message"),
            uploaded=_as_int(body.get("uploaded")),
            updated=_as_int(body.get("updated")),
        )
        logger.info("Uploaded: %d new, %d updated", result.uploaded, result.updated)
        return result

    def delete_codes(self, repo_name: str, chapters: Sequence[str]) -> RemoteResult:
        if not self.config.configured:
            logger.warning(
                "CLOUDFLARE_WORKER_URL not configured; remove codes for %s manually",
                ", ".join(chapters),
            )
            return RemoteResult(RemoteStatus.NOT_CONFIGURED, message="endpoint not configured")

        if not chapters:
            return RemoteResult(RemoteStatus.OK)

        logger.info("Deleting %d code(s) from the remote store...", len(chapters))
        body, error = self._post(
            {
                "action": "deleteCodes",
                "repoName": repo_name,
                "chapters": list(chapters),
            }
        )
        if body is None:
            logger.error("Delete failed: %s", error)
            return RemoteResult(RemoteStatus.FAILED, message=error)

        if not body.get("success"):
            message = str(body.get("message") or "remote store reported failure")
            logger.error("Delete failed: %s", message)
            return RemoteResult(RemoteStatus.FAILED, message=message)

        result = RemoteResult(
            RemoteStatus.OK,
            message=body.get("message"),
            deleted=_as_int(body.get("deleted")),
        )
        logger.info("Deleted %d code(s)", result.deleted)
        return result
