"""Per-run content descriptor (``config.json`` of a content repository)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from manga_automation.storage.stable_json import read_json

CONTENT_TYPES = ("manga", "webtoon")
DEFAULT_CONTENT_TYPE = "manga"


@dataclass(frozen=True, slots=True)
class ContentConfig:
    type: str = DEFAULT_CONTENT_TYPE
    repo_name: str = ""
    locked_chapters: tuple[str, ...] = field(default_factory=tuple)

    @property
    def uses_chapter_locks(self) -> bool:
        return self.type == "webtoon"


def _validate_content_minimal(data: Any) -> None:
    # Runtime validation stays dependency-free; the JSON Schema in
    # schemas/content_config.schema.json is enforced in tests.
    if not isinstance(data, dict):
        raise ValueError("content config must be a JSON object")

    content_type = data.get("type", DEFAULT_CONTENT_TYPE)
    if content_type not in CONTENT_TYPES:
        raise ValueError(
            f"content config type must be one of {CONTENT_TYPES}, got {content_type!r}"
        )

    locked = data.get("lockedChapters", [])
    if not isinstance(locked, list):
        raise ValueError("content config lockedChapters must be an array")
    for i, chapter in enumerate(locked):
        if not isinstance(chapter, str) or not chapter.strip():
            raise ValueError(f"lockedChapters[{i}] must be a non-empty string")
        if chapter != chapter.strip():
            raise ValueError(f"lockedChapters[{i}] has surrounding whitespace: {chapter!r}")

    repo_name = data.get("repoName")
    if content_type == "webtoon":
        if not isinstance(repo_name, str) or not repo_name.strip():
            raise ValueError("content config repoName must be a non-empty string for webtoon")
        if repo_name != repo_name.strip():
            raise ValueError(f"content config repoName has surrounding whitespace: {repo_name!r}")
    elif repo_name is not None and not isinstance(repo_name, str):
        raise ValueError("content config repoName must be a string")


def content_config_from_dict(data: Any) -> ContentConfig:
    _validate_content_minimal(data)
    return ContentConfig(
        type=str(data.get("type", DEFAULT_CONTENT_TYPE)),
        repo_name=str(data.get("repoName") or ""),
        locked_chapters=tuple(data.get("lockedChapters", [])),
    )


def load_content_config(path: str | Path) -> ContentConfig:
    return content_config_from_dict(read_json(path))
