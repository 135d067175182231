from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BASE_REV = "HEAD~1"
DEFAULT_HEAD_REV = "HEAD"


def _normalize_path(path: str) -> str:
    return path.strip().replace("\\", "/")


def parse_name_only(output: str) -> list[str]:
    """Split ``git diff --name-only`` output into paths.

    NUL-separated output (``-z``) is split on NUL; anything else is read one
    path per line.
    """

    entries = output.split("\0") if "\0" in output else output.splitlines()
    paths = [_normalize_path(entry) for entry in entries]
    return [p for p in paths if p]


def changed_files(
    repo_root: Path,
    *,
    base: str = DEFAULT_BASE_REV,
    head: str = DEFAULT_HEAD_REV,
) -> list[str]:
    """List paths changed between ``base`` and ``head``.

    Returns an empty list when git cannot answer (first commit, not a
    repository, git not installed).
    """

    try:
        result = subprocess.run(
            ["git", "-c", "core.quotePath=false", "diff", "--name-only", "-z", base, head],
            cwd=str(repo_root),
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        detail = getattr(exc, "stderr", None) or str(exc)
        logger.warning("Could not detect git changes: %s", str(detail).strip())
        logger.info("This might be the first commit; nothing to compare against")
        return []

    files = parse_name_only(result.stdout)
    if not files:
        logger.info("No changes detected between %s and %s", base, head)
    return files
