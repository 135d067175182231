"""Chapter unlock-code generation and synchronization with the remote store."""

__all__: list[str] = [
    "generator",
    "local_store",
    "reconciler",
    "remote_store",
]
