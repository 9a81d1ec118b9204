"""Delegation of v2/v2e token encryption to the external service."""

from .client import EncryptionClient, decode_secure, encode_secure
from .keys import KeyProvider, PassphraseKeyProvider
from .service import TokenCipherService

__all__ = [
    "EncryptionClient",
    "encode_secure",
    "decode_secure",
    "KeyProvider",
    "PassphraseKeyProvider",
    "TokenCipherService",
]
