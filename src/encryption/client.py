# SPDX-License-Identifier: MIT
"""Async client for the token encryption service.

The codec compresses locally and delegates only the opaque encryption step.
Network failures surface as :class:`errors.ServiceUnavailableError`; there is
no local fallback that would issue an unencrypted token in place of an
encrypted one. Timeouts are configured by the caller, retries are left to it.
"""

from __future__ import annotations

import time
from typing import Any, Mapping

import httpx
import logfire
from pydantic import ValidationError

from codec.compression import compress_v4_for_encrypt, decompress_v4_from_encrypt
from codec.envelope import check, decode_token
from core.digest import sha256_16
from core.schema_registry import DEFAULT_REGISTRY, SchemaRegistry
from errors import (
    ChecksumMismatchError,
    DecodeFailureError,
    ServiceUnavailableError,
    TokenError,
    UnknownFormatError,
)
from models import (
    ArtworkType,
    DecodedToken,
    DecryptRequest,
    DecryptResponse,
    EncryptRequest,
    EncryptResponse,
    Provenance,
    TokenVersion,
)
from observability import telemetry


class EncryptionClient:
    """Talk to the encrypt and decrypt endpoints over HTTP.

    Use as an async context manager, or call :meth:`aclose` when done. An
    ``httpx`` transport can be injected to route calls elsewhere, such as to a
    :class:`encryption.service.TokenCipherService` in tests.
    """

    def __init__(
        self,
        encrypt_endpoint: str,
        decrypt_endpoint: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.encrypt_endpoint = encrypt_endpoint
        self.decrypt_endpoint = decrypt_endpoint
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: Any, transport: httpx.AsyncBaseTransport | None = None
    ) -> "EncryptionClient":
        """Build a client from :class:`runtime.settings.Settings`."""

        return cls(
            settings.encrypt_endpoint,
            settings.decrypt_endpoint,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "EncryptionClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying connection pool."""

        await self._client.aclose()

    async def _post(self, url: str, payload: Mapping[str, Any]) -> httpx.Response:
        start = time.perf_counter()
        try:
            response = await self._client.post(url, json=dict(payload))
        except httpx.HTTPError as exc:
            logfire.error(
                "Encryption service call failed",
                url=url,
                error=type(exc).__name__,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            raise ServiceUnavailableError(
                f"Encryption service unreachable: {exc}"
            ) from exc
        logfire.debug(
            "Encryption service replied",
            url=url,
            status=response.status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return response

    @staticmethod
    def _body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise ServiceUnavailableError(
                f"Encryption service returned a non-JSON reply "
                f"(HTTP {response.status_code})"
            ) from exc
        if not isinstance(body, dict):
            raise ServiceUnavailableError("Encryption service reply is not an object")
        return body

    async def encrypt(self, request: EncryptRequest) -> str:
        """Return the service-issued token for ``request``.

        Raises:
            ServiceUnavailableError: If the call fails or the service refuses.
        """

        with logfire.span("encryption.encrypt", artwork_type=request.type):
            response = await self._post(self.encrypt_endpoint, request.model_dump())
            try:
                reply = EncryptResponse.model_validate(self._body(response))
            except ValidationError as exc:
                raise ServiceUnavailableError(f"Unexpected reply: {exc}") from exc
            if reply.error or response.is_error or not reply.token:
                raise ServiceUnavailableError(
                    reply.error or f"Encryption service error: {response.status_code}"
                )
            return reply.token

    async def decrypt(self, token: str) -> DecryptResponse:
        """Return the decrypted payload of ``token``.

        Raises:
            ChecksumMismatchError: If the service reports a hash mismatch.
            DecodeFailureError: If the service cannot decrypt the token.
            ServiceUnavailableError: If the call itself fails.
        """

        with logfire.span("encryption.decrypt"):
            payload = DecryptRequest(token=token).model_dump()
            response = await self._post(self.decrypt_endpoint, payload)
            body = self._body(response)
            try:
                reply = DecryptResponse.model_validate(body)
            except ValidationError as exc:
                raise ServiceUnavailableError(f"Unexpected reply: {exc}") from exc
            if reply.error:
                if "hash mismatch" in reply.error:
                    raise ChecksumMismatchError(reply.error)
                if response.status_code >= 500:
                    raise ServiceUnavailableError(reply.error)
                raise DecodeFailureError(reply.error)
            if response.is_error or not reply.data:
                raise ServiceUnavailableError(
                    f"Decryption service error: {response.status_code}"
                )
            return reply


async def encode_secure(
    artwork_type: ArtworkType | str,
    params: Mapping[str, Any],
    client: EncryptionClient,
    *,
    provenance: Provenance | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> str:
    """Compress ``params`` locally and have the service encrypt them.

    Returns a ``v2e`` token. Service failures propagate unchanged.
    """

    kind = ArtworkType.parse(
        artwork_type.value if isinstance(artwork_type, ArtworkType) else artwork_type
    )
    if kind is ArtworkType.UNKNOWN:
        raise UnknownFormatError(f"Unknown artwork type '{artwork_type}'")
    data = compress_v4_for_encrypt(kind.value, params, provenance, registry)
    request = EncryptRequest(type=kind.value, data=data, hash=sha256_16(data))
    issued = await client.encrypt(request)
    token = issued.replace("-v2.", "-v2e.", 1)
    try:
        check(token, kind)
    except TokenError as exc:
        raise ServiceUnavailableError(
            f"Encryption service issued a malformed token: {exc.message}"
        ) from exc
    telemetry.record_encode(TokenVersion.V2E.value)
    return token


async def decode_secure(
    token: str,
    client: EncryptionClient,
    *,
    expected_type: ArtworkType | str | None = None,
    registry: SchemaRegistry = DEFAULT_REGISTRY,
) -> DecodedToken:
    """Decode any token, asking the service to open ``v2``/``v2e`` ones.

    The plaintext hash is re-checked locally against the token's hash segment
    before the payload is trusted.
    """

    token = token.strip()
    info = check(token, expected_type)
    if not info.version.is_encrypted:
        return decode_token(token, expected_type, registry)
    started = time.perf_counter()
    try:
        reply = await client.decrypt(token)
        data = reply.data or ""
        if sha256_16(data) != info.checksum:
            raise ChecksumMismatchError("Decrypted payload does not match token hash")
        params, provenance = decompress_v4_from_encrypt(
            info.type.value, data, registry
        )
    except TokenError as exc:
        telemetry.record_rejection(exc.reason.value, info.version.value)
        logfire.warning("Token rejected", reason=exc.reason.value, error=exc.message)
        raise
    if not params.get("token"):
        params["token"] = token
    telemetry.record_decode(info.version.value, latency=time.perf_counter() - started)
    return DecodedToken(
        type=info.type, version=info.version, params=params, provenance=provenance
    )


__all__ = ["EncryptionClient", "encode_secure", "decode_secure"]
