"""Automation for manga/webtoon content repositories.

Two independent pipelines live here:

- manifest encryption: page URLs of newly changed ``manifest.json`` files are
  encrypted in place;
- chapter code provisioning: unlock codes for locked chapters are generated and
  kept in sync with a remote key-value store.
"""

__version__ = "0.1.0"

__all__: list[str] = [
    "codes",
    "config",
    "content",
    "crypto",
    "logging_setup",
    "manifests",
    "storage",
]
