# SPDX-License-Identifier: MIT
"""Token envelope: version detection, integrity checks and decode dispatch.

Decoding walks a fixed sequence of states::

    Unparsed -> TypeDetected -> VersionRecognized -> IntegrityOk -> Decoded

No state is re-entered. A rejection at any step raises a
:class:`errors.TokenError` subclass tagged with its
:class:`errors.RejectionReason`; :func:`try_decode` folds both terminal states
into a :class:`models.DecodeOutcome`.

Recognition priority is ``-v1-``, ``-v4.``, ``-v2e.``/``-v2.`` and finally the
legacy seed shape ``fx-<type>-<seed>``.
"""

from __future__ import annotations

import base64
import json
import re
import time
from typing import Any, Mapping

import logfire
from pydantic import ValidationError

from constants import OBFUSCATED_MARKER, TOKEN_PREFIX, XOR_KEY
from core.canonical import compact_json, round_floats
from core.digest import payload_checksum
from core.schema_registry import DEFAULT_REGISTRY, SchemaRegistry
from errors import (
    ChecksumMismatchError,
    DecodeFailureError,
    ServiceUnavailableError,
    TokenError,
    TypeMismatchError,
    UnknownFormatError,
)
from generation.generators import generate_params
from models import (
    ArtworkType,
    DecodedToken,
    DecodeOutcome,
    Provenance,
    TokenInfo,
    TokenVersion,
)
from observability import telemetry

from .base91 import is_base91
from .compression import compress_v4, decompress_v4
from .param_codecs import get_codec

_HEAD = f"{TOKEN_PREFIX}-"
_SEED_RE = re.compile(r"[A-Za-z0-9]+")
_CHECKSUM_RE = re.compile(r"[0-9a-f]{4}")
_HASH_RE = re.compile(r"[0-9a-f]+")
_XOR_KEY_BYTES = XOR_KEY.encode("ascii")


def _resolve_type(artwork_type: ArtworkType | str) -> ArtworkType:
    value = (
        artwork_type.value if isinstance(artwork_type, ArtworkType) else artwork_type
    )
    resolved = ArtworkType.parse(value)
    if resolved is ArtworkType.UNKNOWN:
        raise UnknownFormatError(f"Unknown artwork type '{artwork_type}'")
    return resolved


def _split_head(token: str) -> tuple[str, str]:
    """Return the raw type segment and the body of ``token``."""

    if not token.startswith(_HEAD):
        raise UnknownFormatError(f"Token must start with '{_HEAD}'")
    raw_type, sep, body = token[len(_HEAD) :].partition("-")
    if not sep or not raw_type or not body:
        raise UnknownFormatError("Token must have the form fx-<type>-<payload>")
    return raw_type, body


def parse_artwork_type(token: str) -> ArtworkType:
    """Return the artwork type named by ``token`` or ``ArtworkType.UNKNOWN``."""

    try:
        raw_type, _ = _split_head(token.strip())
    except UnknownFormatError:
        return ArtworkType.UNKNOWN
    return ArtworkType.parse(raw_type)


def _verify_checksum(payload: str, checksum: str) -> None:
    actual = payload_checksum(payload)
    if actual != checksum:
        raise ChecksumMismatchError(
            f"Checksum mismatch: token says {checksum}, payload gives {actual}"
        )


def _parse_v1(raw_type: str, kind: ArtworkType, segment: str) -> TokenInfo:
    payload, sep, checksum = segment.rpartition("-")
    if not sep:
        payload, checksum = segment, ""
    if not payload:
        raise UnknownFormatError("v1 token must have one payload segment")
    if sep and not _CHECKSUM_RE.fullmatch(checksum):
        raise UnknownFormatError("v1 checksum must be 4 lowercase hex digits")
    if "-" in payload:
        # A dash inside a checksummed payload is corruption, not a new shape.
        _verify_checksum(payload, checksum)
        raise UnknownFormatError("v1 token must have one payload segment")
    return TokenInfo(
        raw_type=raw_type,
        type=kind,
        version=TokenVersion.V1,
        payload=payload,
        checksum=checksum or None,
    )


def _parse_v2(
    raw_type: str, kind: ArtworkType, version: TokenVersion, segment: str
) -> TokenInfo:
    digest, sep, data = segment.partition(".")
    if not sep or not _HASH_RE.fullmatch(digest) or not data:
        raise UnknownFormatError(
            f"{version.value} token must have the form <hash>.<ciphertext>"
        )
    return TokenInfo(
        raw_type=raw_type, type=kind, version=version, payload=data, checksum=digest
    )


def detect_version(token: str) -> TokenInfo:
    """Return the structural facts of ``token`` without decoding its payload.

    Raises:
        UnknownFormatError: If the token matches none of the known shapes or
            names an unknown artwork type.
        ChecksumMismatchError: If a v1 payload holds a stray dash and its
            checksum does not verify.
    """

    raw_type, body = _split_head(token.strip())
    kind = ArtworkType.parse(raw_type)
    if kind is ArtworkType.UNKNOWN:
        raise UnknownFormatError(f"Unknown artwork type '{raw_type}'")
    if body.startswith("v1-"):
        return _parse_v1(raw_type, kind, body[3:])
    if body.startswith("v4."):
        payload = body[3:]
        if not payload or not is_base91(payload):
            raise UnknownFormatError("v4 payload must be non-empty base91 text")
        return TokenInfo(
            raw_type=raw_type, type=kind, version=TokenVersion.V4, payload=payload
        )
    for version in (TokenVersion.V2E, TokenVersion.V2):
        marker = f"{version.value}."
        if body.startswith(marker):
            return _parse_v2(raw_type, kind, version, body[len(marker) :])
    if not _SEED_RE.fullmatch(body):
        raise UnknownFormatError("Legacy seed must be alphanumeric")
    return TokenInfo(
        raw_type=raw_type, type=kind, version=TokenVersion.LEGACY, payload=body
    )


def verify_integrity(info: TokenInfo) -> None:
    """Recompute the v1 checksum when the token carries one.

    Raises:
        ChecksumMismatchError: If the recomputed checksum differs.
    """

    if info.version is not TokenVersion.V1 or info.checksum is None:
        return
    _verify_checksum(info.payload, info.checksum)


def check(token: str, expected_type: ArtworkType | str | None = None) -> TokenInfo:
    """Return the token's structure after the shape, type and checksum checks.

    Raises:
        UnknownFormatError: If the token shape is not recognised.
        TypeMismatchError: If ``expected_type`` is given and differs.
        ChecksumMismatchError: If a present checksum does not verify.
    """

    info = detect_version(token)
    if expected_type is not None:
        expected = _resolve_type(expected_type)
        if info.type is not expected:
            raise TypeMismatchError(expected.value, info.type.value)
    verify_integrity(info)
    return info


def validate(token: str, expected_type: ArtworkType | str | None = None) -> bool:
    """Return ``True`` when ``token`` passes :func:`check`."""

    try:
        check(token, expected_type)
    except TokenError:
        return False
    return True


def is_encrypted_token(token: str) -> bool:
    """Return ``True`` for tokens only the encryption service can open."""

    try:
        return detect_version(token).version.is_encrypted
    except TokenError:
        return False


def _xor(data: bytes) -> bytes:
    size = len(_XOR_KEY_BYTES)
    return bytes(byte ^ _XOR_KEY_BYTES[i % size] for i, byte in enumerate(data))


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.b64decode(padded, validate=True)


def encode_v1_payload(data: list[Any], obfuscate: bool = False) -> str:
    """Return the v1 payload segment for the positional array ``data``."""

    plain = base64.b64encode(compact_json(data).encode("utf-8")).decode("ascii")
    if not obfuscate:
        return plain
    masked = base64.b64encode(_xor(plain.encode("ascii"))).decode("ascii")
    return f"{OBFUSCATED_MARKER}{masked}"


def decode_v1_payload(payload: str) -> Any:
    """Return the JSON value stored in a v1 payload segment.

    Raises:
        DecodeFailureError: If a base64, XOR or JSON layer is malformed.
    """

    try:
        if payload.startswith(OBFUSCATED_MARKER):
            masked = _b64decode(payload[len(OBFUSCATED_MARKER) :])
            plain = _xor(masked).decode("ascii")
        else:
            plain = payload
        return json.loads(_b64decode(plain).decode("utf-8"))
    except (ValueError, RecursionError) as exc:
        raise DecodeFailureError(f"Malformed v1 payload: {exc}") from exc


def encode_params(
    artwork_type: ArtworkType | str,
    params: Mapping[str, Any],
    version: TokenVersion | str = TokenVersion.V1,
    *,
    obfuscate: bool = False,
    provenance: Provenance | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> str:
    """Return a token encoding ``params`` for ``artwork_type``.

    Args:
        artwork_type: Type named in the token prefix.
        params: Parameter set to encode. Floats are rounded to four places.
        version: ``v1`` for the positional format or ``v4`` for the
            schema-compressed format.
        obfuscate: Apply the ``ENC:`` XOR layer to a v1 payload.
        provenance: Authorship metadata, v4 only.
        registry: Schema registry used for default stripping.

    Raises:
        UnknownFormatError: If ``artwork_type`` is unknown.
        ValueError: If the version cannot be produced locally or the options
            do not apply to it.
    """

    kind = _resolve_type(artwork_type)
    target = TokenVersion(version)
    if target is TokenVersion.V1:
        if provenance is not None:
            raise ValueError("Provenance can only be attached to v4 tokens")
        array = get_codec(kind).encode(round_floats(dict(params)))
        payload = encode_v1_payload(array, obfuscate=obfuscate)
        token = f"{_HEAD}{kind.value}-v1-{payload}-{payload_checksum(payload)}"
    elif target is TokenVersion.V4:
        if obfuscate:
            raise ValueError("Obfuscation only applies to v1 tokens")
        payload = compress_v4(kind.value, params, provenance, registry)
        token = f"{_HEAD}{kind.value}-v4.{payload}"
    else:
        raise ValueError(
            f"{target.value} tokens are issued by the encryption service"
        )
    telemetry.record_encode(target.value)
    logfire.debug(
        "Encoded token",
        artwork_type=kind.value,
        version=target.value,
        length=len(token),
    )
    return token


def _decode_payload(
    info: TokenInfo, token: str, registry: SchemaRegistry
) -> tuple[dict[str, Any], Provenance | None]:
    if info.version is TokenVersion.LEGACY:
        return generate_params(info.type, token), None
    if info.version is TokenVersion.V1:
        data = decode_v1_payload(info.payload)
        return get_codec(info.type).decode(data, token), None
    if info.version is TokenVersion.V4:
        params, provenance = decompress_v4(info.type.value, info.payload, registry)
        if not params.get("token"):
            params["token"] = token
        return params, provenance
    raise ServiceUnavailableError(
        f"{info.version.value} tokens require the decryption service"
    )


def _decode_info(
    info: TokenInfo, token: str, registry: SchemaRegistry
) -> DecodedToken:
    try:
        params, provenance = _decode_payload(info, token, registry)
    except RecursionError as exc:
        raise DecodeFailureError("Payload is nested too deeply") from exc
    try:
        return DecodedToken(
            type=info.type,
            version=info.version,
            params=params,
            provenance=provenance,
        )
    except ValidationError as exc:
        raise DecodeFailureError(f"Decoded parameters are invalid: {exc}") from exc


def decode_token(
    token: str,
    expected_type: ArtworkType | str | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> DecodedToken:
    """Decode ``token`` into its parameter set.

    Encrypted ``v2``/``v2e`` tokens need the decryption service; use
    :func:`encryption.client.decode_secure` for them.

    Raises:
        TokenError: Tagged with the reason the token was rejected.
    """

    token = token.strip()
    started = time.perf_counter()
    info: TokenInfo | None = None
    with logfire.span("decode_token"):
        try:
            info = check(token, expected_type)
            result = _decode_info(info, token, registry)
        except TokenError as exc:
            telemetry.record_rejection(
                exc.reason.value, info.version.value if info else None
            )
            logfire.warning(
                "Token rejected", reason=exc.reason.value, error=exc.message
            )
            raise
    telemetry.record_decode(
        info.version.value, latency=time.perf_counter() - started
    )
    logfire.debug(
        "Decoded token", artwork_type=info.type.value, version=info.version.value
    )
    return result


def decode_params(
    token: str,
    expected_type: ArtworkType | str | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> dict[str, Any]:
    """Return only the parameter set of ``token``."""

    return decode_token(token, expected_type, registry).params


def try_decode(
    token: str,
    expected_type: ArtworkType | str | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> DecodeOutcome:
    """Decode ``token`` and report the terminal state instead of raising."""

    try:
        result = decode_token(token, expected_type, registry)
    except TokenError as exc:
        return DecodeOutcome(state="rejected", reason=exc.reason, message=exc.message)
    return DecodeOutcome(state="decoded", result=result)


__all__ = [
    "parse_artwork_type",
    "detect_version",
    "verify_integrity",
    "check",
    "validate",
    "is_encrypted_token",
    "encode_v1_payload",
    "decode_v1_payload",
    "encode_params",
    "decode_token",
    "decode_params",
    "try_decode",
]
