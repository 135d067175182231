from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from manga_automation.config import ENV_FILE_ENV, SECRET_TOKEN_ENV
from manga_automation.crypto.field_cipher import decrypt_text, derive_key, is_encrypted
from manga_automation.logging_setup import ROOT_LOGGER_NAME

from tests.fixtures import TEST_SECRET_TOKEN, plain_manifest


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def _secret(monkeypatch) -> None:
    monkeypatch.setenv(SECRET_TOKEN_ENV, TEST_SECRET_TOKEN)
    monkeypatch.delenv(ENV_FILE_ENV, raising=False)


def _make_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    chapter = repo / "series" / "chapter-001"
    chapter.mkdir(parents=True)
    (chapter / "manifest.json").write_text(json.dumps(plain_manifest(), indent=2), encoding="utf-8")
    return repo


def _last_json_line(out: str) -> dict:
    return json.loads(out.strip().splitlines()[-1])


def test_encrypts_manifests_from_git_diff(monkeypatch, tmp_path: Path, capsys) -> None:
    from scripts import encrypt_manifests

    repo = _make_repo(tmp_path)
    seen: dict[str, object] = {}

    def _fake_changed_files(repo_root, *, base, head):  # noqa: ANN001
        seen.update(repo_root=repo_root, base=base, head=head)
        return ["series/chapter-001/manifest.json", "series/chapter-001/001.webp"]

    monkeypatch.setattr(encrypt_manifests, "changed_files", _fake_changed_files)

    rc = encrypt_manifests.main(["--repo-root", str(repo), "--base", "abc", "--head", "def"])
    assert rc == 0
    assert seen == {"repo_root": repo.resolve(), "base": "abc", "head": "def"}

    out = json.loads((repo / "series" / "chapter-001" / "manifest.json").read_text("utf-8"))
    assert out["encrypted"] is True
    assert all(is_encrypted(p) for p in out["pages"])
    key = derive_key(TEST_SECRET_TOKEN)
    assert [decrypt_text(p, key) for p in out["pages"]] == plain_manifest()["pages"]

    summary = _last_json_line(capsys.readouterr().out)
    assert summary["encrypted"] == 1
    assert summary["failed"] == 0


def test_reads_changed_files_from_stdin(monkeypatch, tmp_path: Path) -> None:
    from scripts import encrypt_manifests

    repo = _make_repo(tmp_path)

    def _should_not_run(*_args, **_kwargs):  # noqa: ANN001
        raise AssertionError("git diff should not be called with --stdin")

    monkeypatch.setattr(encrypt_manifests, "changed_files", _should_not_run)
    monkeypatch.setattr("sys.stdin", io.StringIO("series/chapter-001/manifest.json\n"))

    assert encrypt_manifests.main(["--repo-root", str(repo), "--stdin"]) == 0
    out = json.loads((repo / "series" / "chapter-001" / "manifest.json").read_text("utf-8"))
    assert out["encrypted"] is True


def test_nothing_to_do_exits_0(monkeypatch, tmp_path: Path, capsys) -> None:
    from scripts import encrypt_manifests

    repo = _make_repo(tmp_path)
    monkeypatch.setattr(encrypt_manifests, "changed_files", lambda *_a, **_k: [])

    assert encrypt_manifests.main(["--repo-root", str(repo)]) == 0
    assert _last_json_line(capsys.readouterr().out)["total"] == 0


def test_failed_manifest_exits_2(monkeypatch, tmp_path: Path) -> None:
    from scripts import encrypt_manifests

    repo = _make_repo(tmp_path)
    broken = repo / "series" / "chapter-002" / "manifest.json"
    broken.parent.mkdir(parents=True)
    broken.write_text("{broken", encoding="utf-8")

    monkeypatch.setattr(
        encrypt_manifests,
        "changed_files",
        lambda *_a, **_k: ["series/chapter-001/manifest.json", "series/chapter-002/manifest.json"],
    )

    assert encrypt_manifests.main(["--repo-root", str(repo)]) == 2
    # The good manifest is still encrypted.
    out = json.loads((repo / "series" / "chapter-001" / "manifest.json").read_text("utf-8"))
    assert out["encrypted"] is True
    assert broken.read_text(encoding="utf-8") == "{broken"


def test_missing_secret_exits_1_without_touching_files(monkeypatch, tmp_path: Path) -> None:
    from scripts import encrypt_manifests

    repo = _make_repo(tmp_path)
    manifest = repo / "series" / "chapter-001" / "manifest.json"
    before = manifest.read_bytes()
    monkeypatch.delenv(SECRET_TOKEN_ENV)
    monkeypatch.setattr(
        encrypt_manifests, "changed_files", lambda *_a, **_k: ["series/chapter-001/manifest.json"]
    )

    assert encrypt_manifests.main(["--repo-root", str(repo)]) == 1
    assert manifest.read_bytes() == before


def test_help_works() -> None:
    from scripts import encrypt_manifests

    with pytest.raises(SystemExit) as excinfo:
        encrypt_manifests.main(["--help"])
    assert excinfo.value.code == 0
