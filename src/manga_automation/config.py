from __future__ import annotations

import os
import re
from dataclasses import dataclass

SECRET_TOKEN_ENV = "SECRET_TOKEN"
WORKER_URL_ENV = "CLOUDFLARE_WORKER_URL"
TIMEOUT_ENV = "REMOTE_STORE_TIMEOUT_SECONDS"
ENV_FILE_ENV = "MANGA_AUTOMATION_ENV_FILE"

DEFAULT_TIMEOUT_SECONDS = 30.0

_KNOWN_KEYS = {
    SECRET_TOKEN_ENV,
    WORKER_URL_ENV,
    TIMEOUT_ENV,
}


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {raw!r}")
    return value


@dataclass(frozen=True, slots=True)
class EncryptionConfig:
    secret_token: str

    def __repr__(self) -> str:
        return f"EncryptionConfig(secret_token=<{len(self.secret_token)} chars>)"


@dataclass(frozen=True, slots=True)
class RemoteStoreConfig:
    worker_url: str | None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def configured(self) -> bool:
        return bool(self.worker_url)


def load_env_file(path: str) -> None:
    """Populate missing known variables from a local env file.

    Supports common formats:
      - KEY=VALUE
      - export KEY=VALUE
      - KEY: VALUE

    Never overwrites already-set environment variables. A missing file is
    ignored.
    """

    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            text = f.read()
    except OSError:
        return

    def parse_value(raw: str) -> str:
        v = raw.strip()
        if len(v) >= 2 and ((v[0] == v[-1] == '"') or (v[0] == v[-1] == "'")):
            v = v[1:-1]
        return v.strip()

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        m = re.match(r"^(?:export\s+)?([A-Z0-9_]+)\s*=\s*(.*)$", line)
        if not m:
            m = re.match(r"^([A-Z0-9_]+)\s*:\s*(.*)$", line)
        if not m:
            continue

        key, value = m.group(1), m.group(2)
        if key not in _KNOWN_KEYS:
            continue
        if os.getenv(key):
            continue

        parsed = parse_value(value)
        if parsed:
            os.environ[key] = parsed


def _maybe_load_env_files(env_file: str | None) -> None:
    if env_file:
        load_env_file(env_file)
    from_env = os.getenv(ENV_FILE_ENV)
    if from_env:
        load_env_file(from_env)


def load_encryption_config_from_env(*, env_file: str | None = None) -> EncryptionConfig:
    _maybe_load_env_files(env_file)

    # Used verbatim: the key is derived from the exact bytes consumers hash.
    token = os.getenv(SECRET_TOKEN_ENV)
    if token is None or not token.strip():
        raise RuntimeError(
            f"Missing required environment variable: {SECRET_TOKEN_ENV} "
            "(manifest encryption refuses to run without a configured secret)"
        )
    return EncryptionConfig(secret_token=token)


def load_remote_store_config_from_env(*, env_file: str | None = None) -> RemoteStoreConfig:
    _maybe_load_env_files(env_file)

    return RemoteStoreConfig(
        worker_url=_env(WORKER_URL_ENV),
        timeout_seconds=_env_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_SECONDS),
    )
