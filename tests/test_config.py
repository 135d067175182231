from __future__ import annotations

import hashlib
import os
from pathlib import Path

import pytest

from manga_automation.config import (
    DEFAULT_TIMEOUT_SECONDS,
    ENV_FILE_ENV,
    SECRET_TOKEN_ENV,
    TIMEOUT_ENV,
    WORKER_URL_ENV,
    load_encryption_config_from_env,
    load_env_file,
    load_remote_store_config_from_env,
)
from manga_automation.crypto.field_cipher import derive_key


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    # setenv first so monkeypatch also undoes values written by load_env_file.
    for name in (SECRET_TOKEN_ENV, WORKER_URL_ENV, TIMEOUT_ENV, ENV_FILE_ENV):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_missing_secret_token_is_a_startup_error() -> None:
    with pytest.raises(RuntimeError, match=SECRET_TOKEN_ENV):
        load_encryption_config_from_env()


def test_blank_secret_token_is_a_startup_error(monkeypatch) -> None:
    monkeypatch.setenv(SECRET_TOKEN_ENV, "   ")
    with pytest.raises(RuntimeError):
        load_encryption_config_from_env()


def test_secret_token_loaded_and_not_in_repr(monkeypatch) -> None:
    monkeypatch.setenv(SECRET_TOKEN_ENV, "s3cr3t-value")
    config = load_encryption_config_from_env()
    assert config.secret_token == "s3cr3t-value"
    assert "s3cr3t-value" not in repr(config)


def test_secret_token_is_used_verbatim(monkeypatch) -> None:
    monkeypatch.setenv(SECRET_TOKEN_ENV, "tok\n")
    config = load_encryption_config_from_env()
    assert config.secret_token == "tok\n"
    assert derive_key(config.secret_token) == hashlib.sha256(b"tok\n").digest()


def test_remote_store_config_defaults() -> None:
    config = load_remote_store_config_from_env()
    assert config.worker_url is None
    assert not config.configured
    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


def test_remote_store_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv(WORKER_URL_ENV, "https://worker.example.dev")
    monkeypatch.setenv(TIMEOUT_ENV, "7.5")
    config = load_remote_store_config_from_env()
    assert config.configured
    assert config.worker_url == "https://worker.example.dev"
    assert config.timeout_seconds == 7.5


@pytest.mark.parametrize("raw", ["abc", "0", "-3"])
def test_invalid_timeout_is_rejected(monkeypatch, raw: str) -> None:
    monkeypatch.setenv(TIMEOUT_ENV, raw)
    with pytest.raises(ValueError, match=TIMEOUT_ENV):
        load_remote_store_config_from_env()


def test_env_file_populates_missing_values_only(monkeypatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# comment",
                "export SECRET_TOKEN='from-file'",
                'CLOUDFLARE_WORKER_URL: "https://file.example.dev"',
                "UNRELATED_KEY=ignored",
                "not a kv line",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(WORKER_URL_ENV, "https://already-set.example.dev")

    load_env_file(str(env_file))

    assert os.environ[SECRET_TOKEN_ENV] == "from-file"
    assert os.environ[WORKER_URL_ENV] == "https://already-set.example.dev"
    assert "UNRELATED_KEY" not in os.environ


def test_env_file_via_environment_variable(monkeypatch, tmp_path: Path) -> None:
    env_file = tmp_path / "automation.env"
    env_file.write_text("SECRET_TOKEN=via-env-file\n", encoding="utf-8")
    monkeypatch.setenv(ENV_FILE_ENV, str(env_file))

    assert load_encryption_config_from_env().secret_token == "via-env-file"


def test_missing_env_file_is_ignored(tmp_path: Path) -> None:
    load_env_file(str(tmp_path / "does-not-exist.env"))
