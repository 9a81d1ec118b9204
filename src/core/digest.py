# SPDX-License-Identifier: MIT
"""Synchronous digests and checksums used by the token formats.

Both helpers run in hot validation paths, so they never await anything. The
SHA-256 prefix must match the encryption service bit for bit because the
service re-derives the same value from the decrypted plaintext.
"""

from __future__ import annotations

import hashlib
from typing import Iterator

from constants import CHECKSUM_MODULUS, HASH_PREFIX_CHARS


def utf16_units(text: str) -> Iterator[int]:
    """Yield the UTF-16 code units of ``text``.

    Character codes in the wire formats are UTF-16 code units, so characters
    outside the Basic Multilingual Plane contribute their surrogate pair.
    """

    encoded = text.encode("utf-16-le", "surrogatepass")
    for index in range(0, len(encoded), 2):
        yield encoded[index] | (encoded[index + 1] << 8)


def sha256_16(text: str) -> str:
    """Return the first 16 hex characters of SHA-256 over ``text``."""

    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:HASH_PREFIX_CHARS]


def payload_checksum(payload: str) -> str:
    """Return the 4 hex digit checksum of a v1 ``payload`` segment.

    The checksum is the sum of character codes modulo 65536. It detects
    corruption; it does not prevent deliberate tampering.
    """

    total = sum(utf16_units(payload)) % CHECKSUM_MODULUS
    return f"{total:04x}"


__all__ = ["utf16_units", "sha256_16", "payload_checksum"]
