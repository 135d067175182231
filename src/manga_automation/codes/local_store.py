from __future__ import annotations

import logging
from pathlib import Path

from manga_automation.storage.stable_json import read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_CODES_FILENAME = "chapter-codes-local.json"


def load_codes(path: Path) -> dict[str, str]:
    """Read the local chapter -> code mapping; a missing file is an empty mapping."""

    if not path.exists():
        return {}
    data = read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"expected JSON object in {path}")
    codes: dict[str, str] = {}
    for chapter, code in data.items():
        if not isinstance(code, str):
            logger.warning("Ignoring non-string code for %s in %s", chapter, path)
            continue
        codes[str(chapter)] = code
    return codes


def save_codes(path: Path, codes: dict[str, str]) -> None:
    write_json(path, codes, make_parents=True)
    logger.debug("Saved %d code(s) to %s", len(codes), path)
