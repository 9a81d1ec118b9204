"""Project-wide constants for the token formats.

Values here are part of the wire format. Keep this file minimal and free of
side effects.
"""

from __future__ import annotations

TOKEN_PREFIX = "fx"

# Numeric fields are rounded to this many decimal places before encoding.
FLOAT_PRECISION = 4

CHECKSUM_MODULUS = 65536

# Obfuscation key for ``ENC:`` payloads. Not a secret.
XOR_KEY = "ARTE_SECURE_2024"
OBFUSCATED_MARKER = "ENC:"

BASE91_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    "!#$%&()*+,-./:;<=>?@[]^_`{|}~"
)

# Alphabet for fresh legacy seeds (no 0, O, I or l).
SEED_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
SEED_LENGTH = 48

ZLIB_LEVEL = 9
AES_IV_BYTES = 12
HASH_PREFIX_CHARS = 16

DEFAULT_ENCRYPT_ENDPOINT = "https://arte-encrypt.mvhikhn.workers.dev"
DEFAULT_DECRYPT_ENDPOINT = "https://arte-decrypt.mvhikhn.workers.dev"

__all__ = [
    "TOKEN_PREFIX",
    "FLOAT_PRECISION",
    "CHECKSUM_MODULUS",
    "XOR_KEY",
    "OBFUSCATED_MARKER",
    "BASE91_ALPHABET",
    "SEED_ALPHABET",
    "SEED_LENGTH",
    "ZLIB_LEVEL",
    "AES_IV_BYTES",
    "HASH_PREFIX_CHARS",
    "DEFAULT_ENCRYPT_ENDPOINT",
    "DEFAULT_DECRYPT_ENDPOINT",
]
