from __future__ import annotations

import secrets
import string

CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
DEFAULT_CODE_LENGTH = 16


def generate_random_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return ``length`` characters drawn uniformly from :data:`CODE_ALPHABET`.

    Uses the OS CSPRNG via :mod:`secrets`. Uniqueness against previously
    issued codes is not checked (62**16 possible codes).
    """

    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
