# SPDX-License-Identifier: MIT
"""Pydantic models describing tokens, decoded results and configuration.

These definitions act as the contract between the codec, the encryption
delegation client, the command-line interface and any rendering layer that
consumes decoded parameter sets.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from constants import DEFAULT_DECRYPT_ENDPOINT, DEFAULT_ENCRYPT_ENDPOINT
from errors import RejectionReason


class StrictModel(BaseModel):
    """Base model with strict settings to prevent shape drift."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class ArtworkType(str, Enum):
    """Known artwork types plus an explicit ``unknown`` variant."""

    FLOW = "flow"
    GRID = "grid"
    MOSAIC = "mosaic"
    ROTATED = "rotated"
    TREE = "tree"
    TEXT = "text"
    TEXTDESIGN = "textdesign"
    LAMB = "lamb"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "ArtworkType":
        """Return the member named ``value`` or ``UNKNOWN``."""

        if value is None:
            return cls.UNKNOWN
        try:
            member = cls(value)
        except ValueError:
            return cls.UNKNOWN
        return member

    @classmethod
    def known(cls) -> list["ArtworkType"]:
        """Return every concrete artwork type."""

        return [member for member in cls if member is not cls.UNKNOWN]


class TokenVersion(str, Enum):
    """Coexisting token wire formats."""

    LEGACY = "legacy"
    V1 = "v1"
    V2 = "v2"
    V2E = "v2e"
    V4 = "v4"

    @property
    def is_encrypted(self) -> bool:
        """Return ``True`` for formats only the encryption service can open."""

        return self in (TokenVersion.V2, TokenVersion.V2E)


class ParamSchema(StrictModel):
    """Ordered field names and default values for one artwork type."""

    keys: tuple[str, ...] = Field(
        default=(), description="Field names in registration order."
    )
    defaults: dict[str, Any] = Field(
        default_factory=dict,
        description="Values omitted from v4 payloads when unchanged.",
    )


class Provenance(StrictModel):
    """Authorship metadata attached to a v4 token.

    Provenance never participates in seed derivation.
    """

    creator: Annotated[str, Field(description="Name of the buyer or creator.")]
    timestamp: Annotated[int, Field(ge=0, description="Unix timestamp.")]
    location: str | None = Field(None, description="Optional location.")
    feeling: Annotated[str, Field(description="One-line artistic statement.")]
    artist: Annotated[str, Field(description="Name of the artist.")]
    artworkType: Annotated[  # noqa: N815 - wire field name
        str, Field(min_length=1, description="Artwork type identifier.")
    ]

    def to_wire(self) -> dict[str, Any]:
        """Return the mapping stored inside a v4 payload."""

        return self.model_dump(exclude_none=True)


class TokenInfo(StrictModel):
    """Structural facts extracted from a token without decoding it."""

    raw_type: str = Field(description="Type segment exactly as written.")
    type: ArtworkType
    version: TokenVersion
    payload: str = Field(description="Version-specific payload segment.")
    checksum: str | None = Field(
        None, description="Checksum or hash segment when the format has one."
    )


class DecodedToken(StrictModel):
    """Successful decode result."""

    type: ArtworkType
    version: TokenVersion
    params: dict[str, Any]
    provenance: Provenance | None = None

    @field_validator("params")
    @classmethod
    def _require_token(cls, value: dict[str, Any]) -> dict[str, Any]:
        """Ensure the parameter set keeps the seed-bearing ``token`` field."""

        if not value.get("token"):
            raise ValueError("decoded params must include a token field")
        return value


class DecodeOutcome(StrictModel):
    """Terminal state of the decode state machine."""

    state: Literal["decoded", "rejected"]
    reason: RejectionReason | None = None
    message: str | None = None
    result: DecodedToken | None = None

    @property
    def ok(self) -> bool:
        """Return ``True`` when the token decoded."""

        return self.state == "decoded"


class EncryptRequest(StrictModel):
    """Body sent to the encryption endpoint."""

    type: Annotated[str, Field(min_length=1)]
    data: Annotated[str, Field(min_length=1)]
    hash: Annotated[str, Field(min_length=1)]


class EncryptResponse(BaseModel):
    """Body returned by the encryption endpoint."""

    token: str | None = None
    error: str | None = None


class DecryptRequest(StrictModel):
    """Body sent to the decryption endpoint."""

    token: Annotated[str, Field(min_length=1)]


class DecryptResponse(BaseModel):
    """Body returned by the decryption endpoint."""

    type: str | None = None
    data: str | None = None
    error: str | None = None


class AppConfig(StrictModel):
    """Top-level application configuration read from ``config/app.yaml``."""

    log_level: Annotated[
        str, Field(min_length=1, description="Logging verbosity level.")
    ] = "INFO"
    encrypt_endpoint: Annotated[
        str, Field(min_length=1, description="URL of the encryption service.")
    ] = DEFAULT_ENCRYPT_ENDPOINT
    decrypt_endpoint: Annotated[
        str, Field(min_length=1, description="URL of the decryption service.")
    ] = DEFAULT_DECRYPT_ENDPOINT
    request_timeout: float = Field(
        10.0, gt=0, description="Per-request timeout in seconds."
    )
    default_version: Literal["v1", "v4"] = Field(
        "v4", description="Token format produced by ``encode`` by default."
    )
    obfuscate: bool = Field(
        False, description="Obfuscate v1 payloads with the XOR layer."
    )


__all__ = [
    "StrictModel",
    "ArtworkType",
    "TokenVersion",
    "ParamSchema",
    "Provenance",
    "TokenInfo",
    "DecodedToken",
    "DecodeOutcome",
    "EncryptRequest",
    "EncryptResponse",
    "DecryptRequest",
    "DecryptResponse",
    "AppConfig",
]
