"""Core primitives shared by every token format.

Exports:
    create_seeded_random: Build the deterministic generator for a token.
    token_to_seed: Derive the 32-bit seed for a token.
    generate_token: Draw a fresh legacy seed token.
    sha256_16: Synchronous 16 hex character SHA-256 prefix.
    payload_checksum: Checksum of a v1 payload segment.
    round_floats: Round numeric fields to the codec precision.
    SchemaRegistry: Lookup of per-type parameter schemas.
    get_schema: Schema lookup against the default registry.
    is_default: Compare a value with its registered default.
"""

from .canonical import round_floats
from .digest import payload_checksum, sha256_16
from .schema_registry import SchemaRegistry, get_schema, is_default
from .seeding import create_seeded_random, generate_token, token_to_seed

__all__ = [
    "create_seeded_random",
    "token_to_seed",
    "generate_token",
    "sha256_16",
    "payload_checksum",
    "round_floats",
    "SchemaRegistry",
    "get_schema",
    "is_default",
]
