# SPDX-License-Identifier: MIT
"""Reference implementation of the token encryption service.

Mirrors the deployed HTTP service: AES-256-GCM with a fresh 96-bit IV per
call, the IV prefixed to the ciphertext, unpadded base64url text, and a
SHA-256 prefix re-check of the plaintext on decrypt. :meth:`handle` serves
both endpoints so the service can back an :class:`httpx.MockTransport`.
"""

from __future__ import annotations

import json
import re
import secrets

import httpx
import logfire
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import ValidationError

from codec.compression import decode_base64url, encode_base64url
from constants import AES_IV_BYTES, TOKEN_PREFIX
from core.digest import sha256_16
from errors import DecodeFailureError
from models import DecryptRequest, DecryptResponse, EncryptRequest, EncryptResponse

from .keys import KeyProvider

_TOKEN_RE = re.compile(rf"^{TOKEN_PREFIX}-(\w+)-v2e?\.([a-f0-9]+)\.(.+)$")

HASH_MISMATCH = "Token validation failed - hash mismatch"


class TokenCipherService:
    """Encrypt and decrypt token payloads with an injected key."""

    def __init__(self, key_provider: KeyProvider) -> None:
        self._key_provider = key_provider

    def _cipher(self) -> AESGCM:
        return AESGCM(self._key_provider.get_key())

    def encrypt(self, request: EncryptRequest) -> EncryptResponse:
        """Return a ``v2`` token wrapping ``request.data``."""

        iv = secrets.token_bytes(AES_IV_BYTES)
        sealed = self._cipher().encrypt(iv, request.data.encode("utf-8"), None)
        body = encode_base64url(iv + sealed)
        return EncryptResponse(
            token=f"{TOKEN_PREFIX}-{request.type}-v2.{request.hash}.{body}"
        )

    def decrypt(self, request: DecryptRequest) -> DecryptResponse:
        """Return the plaintext payload of ``request.token``.

        Failures are reported through ``error`` rather than raised.
        """

        match = _TOKEN_RE.match(request.token)
        if match is None:
            return DecryptResponse(error="Invalid token format")
        artwork_type, expected_hash, body = match.groups()
        try:
            combined = decode_base64url(body)
            iv, sealed = combined[:AES_IV_BYTES], combined[AES_IV_BYTES:]
            data = self._cipher().decrypt(iv, sealed, None).decode("utf-8")
        except (DecodeFailureError, InvalidTag, ValueError) as exc:
            logfire.warning("Decryption failed", error=type(exc).__name__)
            return DecryptResponse(error="Decryption failed")
        if sha256_16(data) != expected_hash:
            return DecryptResponse(error=HASH_MISMATCH)
        return DecryptResponse(type=artwork_type, data=data)

    def handle(self, request: httpx.Request) -> httpx.Response:
        """Serve ``POST .../encrypt`` and ``POST .../decrypt``."""

        if request.method != "POST":
            return httpx.Response(405, json={"error": "Method not allowed"})
        try:
            body = json.loads(request.content or b"{}")
        except ValueError:
            return httpx.Response(400, json={"error": "Invalid JSON body"})
        # Deployed endpoints are distinguished by host, local ones by path.
        path = request.url.path.rstrip("/") or request.url.host.split(".")[0]
        try:
            if path.endswith("encrypt"):
                reply = self.encrypt(EncryptRequest.model_validate(body))
            elif path.endswith("decrypt"):
                reply = self.decrypt(DecryptRequest.model_validate(body))
            else:
                return httpx.Response(404, json={"error": "Not found"})
        except ValidationError:
            return httpx.Response(400, json={"error": "Missing or invalid fields"})
        status = 400 if reply.error else 200
        return httpx.Response(status, json=reply.model_dump(exclude_none=True))


__all__ = ["TokenCipherService", "HASH_MISMATCH"]
