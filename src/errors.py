# SPDX-License-Identifier: MIT
"""Exception taxonomy for token decoding and encryption delegation.

Every rejection carries a :class:`RejectionReason` so callers can distinguish
a malformed token from one whose shape is fine but whose content is corrupt.
"""

from __future__ import annotations

from enum import Enum


class RejectionReason(str, Enum):
    """Why a token was rejected."""

    UNKNOWN_FORMAT = "unknown_format"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    DECODE_FAILURE = "decode_failure"
    SERVICE_UNAVAILABLE = "service_unavailable"


class TokenError(ValueError):
    """Base class for all token failures."""

    reason: RejectionReason = RejectionReason.DECODE_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownFormatError(TokenError):
    """Token does not match any recognised shape."""

    reason = RejectionReason.UNKNOWN_FORMAT


class ChecksumMismatchError(TokenError):
    """Payload checksum or hash does not match; corrupted or tampered."""

    reason = RejectionReason.CHECKSUM_MISMATCH


class TypeMismatchError(TokenError):
    """Token names a different artwork type than the one expected."""

    reason = RejectionReason.TYPE_MISMATCH

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Expected a '{expected}' token but got '{actual}'")
        self.expected = expected
        self.actual = actual


class DecodeFailureError(TokenError):
    """Envelope is well formed but the version-specific decode failed."""

    reason = RejectionReason.DECODE_FAILURE


class ServiceUnavailableError(TokenError):
    """The encryption service could not be reached or refused the call."""

    reason = RejectionReason.SERVICE_UNAVAILABLE


__all__ = [
    "RejectionReason",
    "TokenError",
    "UnknownFormatError",
    "ChecksumMismatchError",
    "TypeMismatchError",
    "DecodeFailureError",
    "ServiceUnavailableError",
]
