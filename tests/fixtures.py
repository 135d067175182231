from __future__ import annotations

import copy

# A chapter manifest as produced by the uploader, before encryption.
PLAIN_MANIFEST: dict = {
    "chapter": "chapter-001",
    "title": "Chapter 1",
    "pages": [
        "https://cdn.example.com/series/chapter-001/001.webp",
        "https://cdn.example.com/series/chapter-001/002.webp",
        "https://cdn.example.com/series/chapter-001/003.webp",
    ],
}

TEST_SECRET_TOKEN = "test-secret-token-not-for-production"


def plain_manifest() -> dict:
    """Return a deep copy of the shared plain manifest.

    Tests should treat fixtures as immutable; a deep copy prevents accidental mutation.
    """

    return copy.deepcopy(PLAIN_MANIFEST)
