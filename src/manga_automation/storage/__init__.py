"""Local JSON persistence helpers."""

__all__: list[str] = [
    "stable_json",
]
