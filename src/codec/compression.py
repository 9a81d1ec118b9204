# SPDX-License-Identifier: MIT
"""v4 schema-driven compression pipeline.

Encoding runs five independently testable steps::

    round floats -> strip defaults -> {"p": params, "m": provenance}
        -> MessagePack -> zlib (level 9) -> base91 | base64url

The MessagePack envelope is keyed rather than positional, so tokens survive
schema growth. Decoding reverses the steps and merges the schema defaults
back underneath the stripped map.
"""

from __future__ import annotations

import base64
import binascii
import zlib
from typing import Any, Mapping

import msgpack

from constants import ZLIB_LEVEL
from core.canonical import round_floats, sort_keys_deep
from core.schema_registry import DEFAULT_REGISTRY, SchemaRegistry, is_default
from errors import DecodeFailureError
from models import Provenance

from .base91 import decode_base91, encode_base91

_MISSING = object()


def strip_defaults(
    artwork_type: str,
    params: Mapping[str, Any],
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dict[str, Any]:
    """Return ``params`` without the fields equal to their schema default.

    Fields with no registered default are always kept.
    """

    defaults = registry.get_schema(artwork_type).defaults
    stripped: dict[str, Any] = {}
    for key, value in params.items():
        default = defaults.get(key, _MISSING)
        if default is _MISSING or not is_default(value, default):
            stripped[key] = value
    return stripped


def restore_defaults(
    artwork_type: str,
    stripped: Mapping[str, Any],
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dict[str, Any]:
    """Return ``stripped`` merged over the schema defaults."""

    defaults = registry.get_schema(artwork_type).defaults
    return {**defaults, **stripped}


def pack_payload(
    stripped: Mapping[str, Any], provenance: Provenance | None = None
) -> bytes:
    """Serialise the ``{"p": ..., "m": ...}`` envelope with MessagePack.

    Keys are sorted so equal parameter sets always pack to identical bytes.
    """

    envelope: dict[str, Any] = {"p": sort_keys_deep(dict(stripped))}
    if provenance is not None:
        envelope["m"] = provenance.to_wire()
    return msgpack.packb(envelope, use_bin_type=True)


def unpack_payload(binary: bytes) -> tuple[dict[str, Any], Provenance | None]:
    """Return the stripped params and provenance stored in ``binary``.

    Raises:
        DecodeFailureError: If the envelope is truncated or malformed.
    """

    try:
        envelope = msgpack.unpackb(binary, raw=False)
    except (msgpack.UnpackException, ValueError, TypeError) as exc:
        raise DecodeFailureError(f"Malformed binary payload: {exc}") from exc
    if not isinstance(envelope, dict) or not isinstance(envelope.get("p"), dict):
        raise DecodeFailureError("Binary payload is missing the params map")
    meta = envelope.get("m")
    if meta is None:
        return envelope["p"], None
    try:
        return envelope["p"], Provenance.model_validate(meta)
    except ValueError as exc:
        raise DecodeFailureError(f"Invalid provenance block: {exc}") from exc


def compress_binary(data: bytes) -> bytes:
    """Deflate ``data`` at maximum effort inside a zlib container."""

    return zlib.compress(data, ZLIB_LEVEL)


def decompress_binary(data: bytes) -> bytes:
    """Inflate a zlib container produced by :func:`compress_binary`."""

    try:
        return zlib.decompress(data)
    except zlib.error as exc:
        raise DecodeFailureError(f"Corrupt compressed payload: {exc}") from exc


def encode_base64url(data: bytes) -> str:
    """Return unpadded URL-safe base64 for ``data``."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def decode_base64url(text: str) -> bytes:
    """Decode unpadded URL-safe base64, restoring the padding first."""

    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeFailureError(f"Invalid base64url payload: {exc}") from exc


def _compress(
    artwork_type: str,
    params: Mapping[str, Any],
    provenance: Provenance | None,
    registry: SchemaRegistry,
) -> bytes:
    rounded = round_floats(dict(params))
    stripped = strip_defaults(artwork_type, rounded, registry)
    return compress_binary(pack_payload(stripped, provenance))


def _decompress(
    artwork_type: str, compressed: bytes, registry: SchemaRegistry
) -> tuple[dict[str, Any], Provenance | None]:
    stripped, provenance = unpack_payload(decompress_binary(compressed))
    return restore_defaults(artwork_type, stripped, registry), provenance


def compress_v4(
    artwork_type: str,
    params: Mapping[str, Any],
    provenance: Provenance | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> str:
    """Return the base91 payload of a self-contained v4 token."""

    return encode_base91(_compress(artwork_type, params, provenance, registry))


def compress_v4_for_encrypt(
    artwork_type: str,
    params: Mapping[str, Any],
    provenance: Provenance | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> str:
    """Return a base64url payload for wrapping by the encryption service."""

    return encode_base64url(_compress(artwork_type, params, provenance, registry))


def decompress_v4(
    artwork_type: str,
    encoded: str,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> tuple[dict[str, Any], Provenance | None]:
    """Decode a base91 v4 payload into params and optional provenance."""

    try:
        compressed = decode_base91(encoded)
    except ValueError as exc:
        raise DecodeFailureError(str(exc)) from exc
    return _decompress(artwork_type, compressed, registry)


def decompress_v4_from_encrypt(
    artwork_type: str,
    encoded: str,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> tuple[dict[str, Any], Provenance | None]:
    """Decode a base64url payload returned by the decryption service."""

    return _decompress(artwork_type, decode_base64url(encoded), registry)


__all__ = [
    "strip_defaults",
    "restore_defaults",
    "pack_payload",
    "unpack_payload",
    "compress_binary",
    "decompress_binary",
    "encode_base64url",
    "decode_base64url",
    "compress_v4",
    "compress_v4_for_encrypt",
    "decompress_v4",
    "decompress_v4_from_encrypt",
]
