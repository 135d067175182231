from __future__ import annotations

import subprocess
import sys
from pathlib import Path

# Repo-relative paths linted in CI, in command-line order; each must exist.
SCOPED_PATHS: tuple[str, ...] = (
    "src/manga_automation",
    "scripts/encrypt_manifests.py",
    "scripts/provision_chapter_codes.py",
    "tools/ci/lint_scoped.py",
    "tests",
)


def _repo_root() -> Path:
    # tools/ci/lint_scoped.py -> tools/ci -> tools -> repo root
    return Path(__file__).resolve().parents[2]


def _resolve_scoped_paths(repo_root: Path) -> list[str]:
    missing = [rel for rel in SCOPED_PATHS if not (repo_root / rel).exists()]
    if missing:
        raise FileNotFoundError(f"Missing lint paths: {', '.join(missing)}")
    return list(SCOPED_PATHS)


def main(argv: list[str] | None = None) -> int:
    _ = argv  # no args; fixed path list
    repo_root = _repo_root()

    print("Scoped ruff lint (manga_automation)")

    try:
        paths = _resolve_scoped_paths(repo_root)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    cmd = [sys.executable, "-m", "ruff", "check", *paths]
    print("Command:")
    print("  " + " ".join(cmd))

    completed = subprocess.run(cmd, cwd=str(repo_root), check=False)
    return int(completed.returncode)


if __name__ == "__main__":
    raise SystemExit(main())
