"""Detection and in-place encryption of changed ``manifest.json`` files."""

__all__: list[str] = [
    "encryptor",
    "git_changes",
]
