"""Field-level encryption of manifest values."""

__all__: list[str] = [
    "field_cipher",
]
