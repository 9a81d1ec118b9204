"""Token codecs for every coexisting wire format.

Exports:
    detect_version: Structural facts of a token without decoding it.
    validate: Shape, type and checksum check returning a boolean.
    encode_params: Issue a v1 or v4 token for a parameter set.
    decode_token: Decode a token into a :class:`models.DecodedToken`.
    decode_params: Decode a token into its parameter set.
    try_decode: Decode a token into a :class:`models.DecodeOutcome`.
    compress_v4: Schema-compressed base91 payload.
    decompress_v4: Inverse of :func:`compress_v4`.
    get_codec: Positional v1 codec for an artwork type.
"""

from .compression import compress_v4, decompress_v4
from .envelope import (
    check,
    decode_params,
    decode_token,
    detect_version,
    encode_params,
    parse_artwork_type,
    try_decode,
    validate,
)
from .param_codecs import get_codec

__all__ = [
    "check",
    "detect_version",
    "parse_artwork_type",
    "validate",
    "encode_params",
    "decode_token",
    "decode_params",
    "try_decode",
    "compress_v4",
    "decompress_v4",
    "get_codec",
]
