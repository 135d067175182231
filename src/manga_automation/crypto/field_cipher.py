"""AES-256-CBC encryption of individual string values.

Token format::

    <iv as 32 hex chars>:<ciphertext as hex>

Every call to :func:`encrypt_text` draws a fresh 16-byte IV. The key is the
SHA-256 digest of the configured secret token.
"""

from __future__ import annotations

import hashlib
import os
import re

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_SIZE_BYTES = 32
IV_SIZE_BYTES = 16

TOKEN_RE = re.compile(r"^[0-9a-fA-F]{32}:[0-9a-fA-F]+$")


def derive_key(token: str) -> bytes:
    if not token:
        raise ValueError("secret token must be a non-empty string")
    return hashlib.sha256(token.encode("utf-8")).digest()


def _check_key(key: bytes) -> None:
    if len(key) != KEY_SIZE_BYTES:
        raise ValueError(f"key must be {KEY_SIZE_BYTES} bytes, got {len(key)}")


def encrypt_text(text: str, key: bytes) -> str:
    if not isinstance(text, str):
        raise TypeError(f"expected str value, got {type(text).__name__}")
    _check_key(key)

    iv = os.urandom(IV_SIZE_BYTES)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(text.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt_text(token: str, key: bytes) -> str:
    """Inverse of :func:`encrypt_text`.

    Raises ``ValueError`` for tokens that are malformed or do not decrypt
    under ``key``.
    """

    if not is_encrypted(token):
        raise ValueError("value is not an encrypted token")
    _check_key(key)

    iv_hex, ct_hex = token.split(":", 1)
    ciphertext = bytes.fromhex(ct_hex)
    if not ciphertext or len(ciphertext) % IV_SIZE_BYTES:
        raise ValueError("ciphertext length is not a multiple of the block size")

    decryptor = Cipher(algorithms.AES(key), modes.CBC(bytes.fromhex(iv_hex))).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    plaintext = unpadder.update(padded) + unpadder.finalize()
    return plaintext.decode("utf-8")


def is_encrypted(value: object) -> bool:
    # Syntactic check only; says nothing about decryptability.
    return isinstance(value, str) and TOKEN_RE.fullmatch(value) is not None
