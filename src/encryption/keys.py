# SPDX-License-Identifier: MIT
"""Key providers for the token cipher service.

The symmetric key is never module state: a provider is constructed by the
caller and injected into :class:`encryption.service.TokenCipherService`.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod


class KeyProvider(ABC):
    """Source of the 256-bit AES-GCM key."""

    @abstractmethod
    def get_key(self) -> bytes:
        """Return the raw 32-byte key."""


class PassphraseKeyProvider(KeyProvider):
    """Derive the key as the SHA-256 digest of an operator passphrase.

    Matches the derivation used by the deployed encryption service, so a
    token issued there decrypts here given the same passphrase.
    """

    def __init__(self, passphrase: str) -> None:
        if not passphrase:
            raise ValueError("passphrase must not be empty")
        self._key = hashlib.sha256(passphrase.encode("utf-8")).digest()

    def get_key(self) -> bytes:
        return self._key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(passphrase=***)"


__all__ = ["KeyProvider", "PassphraseKeyProvider"]
