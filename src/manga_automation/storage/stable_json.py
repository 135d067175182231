from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any


def read_json(path: str | Path) -> Any:
    """Read JSON from disk (UTF-8) and parse."""

    p = Path(path)
    return json.loads(p.read_text(encoding="utf-8"))


def dumps_json(
    data: Any,
    *,
    indent: int = 2,
    sort_keys: bool = True,
    ensure_ascii: bool = False,
) -> str:
    return (
        json.dumps(
            data,
            indent=indent,
            sort_keys=sort_keys,
            ensure_ascii=ensure_ascii,
        )
        + "\n"
    )


def _target_mode(p: Path) -> int:
    """Mode for the replacement file: the existing file's, else the umask default."""

    try:
        return stat.S_IMODE(p.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_json(
    path: str | Path,
    data: Any,
    *,
    make_parents: bool = False,
    indent: int = 2,
    sort_keys: bool = True,
    ensure_ascii: bool = False,
) -> None:
    """Write JSON (UTF-8, LF newlines, trailing newline) as a full overwrite.

    The document is written to a sibling temporary file and moved over ``path``
    with ``os.replace``, so readers see either the old or the new content. The
    permission bits of an existing file are kept.
    """

    p = Path(path)
    if make_parents:
        p.parent.mkdir(parents=True, exist_ok=True)

    text = dumps_json(data, indent=indent, sort_keys=sort_keys, ensure_ascii=ensure_ascii)
    mode = _target_mode(p)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=p.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, p)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
