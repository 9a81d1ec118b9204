# SPDX-License-Identifier: MIT
"""Tests for the encryption service and its async client."""

from __future__ import annotations

import json

import httpx
import pytest

from codec.envelope import encode_params
from core.canonical import round_floats
from core.digest import sha256_16
from encryption import (
    EncryptionClient,
    PassphraseKeyProvider,
    TokenCipherService,
    decode_secure,
    encode_secure,
)
from encryption.service import HASH_MISMATCH
from errors import (
    ChecksumMismatchError,
    DecodeFailureError,
    ServiceUnavailableError,
    TypeMismatchError,
)
from generation.generators import generate_params
from models import DecryptRequest, EncryptRequest, Provenance, TokenVersion
from observability import telemetry

ENCRYPT_URL = "https://svc.test/encrypt"
DECRYPT_URL = "https://svc.test/decrypt"


def _service(passphrase: str = "correct horse") -> TokenCipherService:
    return TokenCipherService(PassphraseKeyProvider(passphrase))


def _client(handler) -> EncryptionClient:
    return EncryptionClient(
        ENCRYPT_URL, DECRYPT_URL, transport=httpx.MockTransport(handler)
    )


def test_passphrase_provider() -> None:
    provider = PassphraseKeyProvider("secret")
    assert len(provider.get_key()) == 32
    assert "secret" not in repr(provider)
    with pytest.raises(ValueError):
        PassphraseKeyProvider("")


def test_service_round_trip() -> None:
    service = _service()
    request = EncryptRequest(type="flow", data="abc", hash=sha256_16("abc"))
    issued = service.encrypt(request)
    assert issued.token.startswith(f"fx-flow-v2.{sha256_16('abc')}.")
    reply = service.decrypt(DecryptRequest(token=issued.token))
    assert (reply.type, reply.data, reply.error) == ("flow", "abc", None)


def test_service_uses_fresh_iv() -> None:
    service = _service()
    request = EncryptRequest(type="flow", data="abc", hash=sha256_16("abc"))
    assert service.encrypt(request).token != service.encrypt(request).token


def test_service_rejects_hash_mismatch() -> None:
    service = _service()
    issued = service.encrypt(EncryptRequest(type="flow", data="abc", hash="0" * 16))
    assert service.decrypt(DecryptRequest(token=issued.token)).error == HASH_MISMATCH


def test_service_rejects_wrong_key_and_bad_format() -> None:
    issued = _service("one").encrypt(
        EncryptRequest(type="flow", data="abc", hash=sha256_16("abc"))
    )
    assert _service("two").decrypt(DecryptRequest(token=issued.token)).error == (
        "Decryption failed"
    )
    assert _service().decrypt(DecryptRequest(token="fx-flow-ABC")).error == (
        "Invalid token format"
    )


def test_service_http_surface() -> None:
    service = _service()
    get = service.handle(httpx.Request("GET", ENCRYPT_URL))
    assert get.status_code == 405
    bad_json = service.handle(httpx.Request("POST", ENCRYPT_URL, content=b"{"))
    assert bad_json.status_code == 400
    missing = service.handle(httpx.Request("POST", ENCRYPT_URL, json={"type": "flow"}))
    assert missing.status_code == 400
    unknown = service.handle(httpx.Request("POST", "https://svc.test/other", json={}))
    assert unknown.status_code == 404
    by_host = service.handle(
        httpx.Request(
            "POST",
            "https://arte-decrypt.example.dev",
            json={"token": "fx-flow-ABC"},
        )
    )
    assert by_host.status_code == 400
    assert json.loads(by_host.content)["error"] == "Invalid token format"


@pytest.mark.asyncio
async def test_encode_and_decode_secure() -> None:
    service = _service()
    params = generate_params("flow", "fx-flow-SECRET")
    provenance = Provenance(
        creator="Ada",
        timestamp=1700000000,
        feeling="quiet",
        artist="Grace",
        artworkType="flow",
    )
    async with _client(service.handle) as client:
        token = await encode_secure("flow", params, client, provenance=provenance)
        assert token.startswith("fx-flow-v2e.")
        result = await decode_secure(token, client, expected_type="flow")
    assert result.version is TokenVersion.V2E
    assert result.provenance == provenance
    expected = round_floats(params)
    assert {key: result.params[key] for key in expected} == expected
    assert telemetry.version_metrics("v2e").encoded == 1
    assert telemetry.version_metrics("v2e").decoded == 1


@pytest.mark.asyncio
async def test_decode_secure_accepts_plain_tokens() -> None:
    params = generate_params("grid", "fx-grid-PLAIN")
    token = encode_params("grid", params, "v4")

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("plain tokens must not reach the service")

    async with _client(handler) as client:
        result = await decode_secure(token, client)
    assert result.params["token"] == "fx-grid-PLAIN"


@pytest.mark.asyncio
async def test_decode_secure_checks_type_before_calling() -> None:
    async with _client(_service().handle) as client:
        with pytest.raises(TypeMismatchError):
            await decode_secure(
                "fx-flow-v2e.0123abcd.payload", client, expected_type="grid"
            )


@pytest.mark.asyncio
async def test_hash_mismatch_is_checksum_error() -> None:
    service = _service()
    async with _client(service.handle) as client:
        token = await encode_secure("lamb", {"cols": 20, "token": "t"}, client)
        prefix, _, rest = token.partition("v2e.")
        _, _, body = rest.partition(".")
        forged = f"{prefix}v2e.{'0' * 16}.{body}"
        with pytest.raises(ChecksumMismatchError):
            await decode_secure(forged, client)
    assert telemetry.rejection_counts() == {"checksum_mismatch": 1}


@pytest.mark.asyncio
async def test_corrupted_ciphertext_is_decode_failure() -> None:
    service = _service()
    async with _client(service.handle) as client:
        token = await encode_secure("lamb", {"cols": 20, "token": "t"}, client)
        head, _, body = token.rpartition(".")
        flipped = body[:5] + ("A" if body[5] != "A" else "B") + body[6:]
        with pytest.raises(DecodeFailureError):
            await decode_secure(f"{head}.{flipped}", client)


@pytest.mark.asyncio
async def test_local_hash_recheck() -> None:
    """A reply whose data does not hash to the token's hash is rejected."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"type": "flow", "data": "tampered"})

    async with _client(handler) as client:
        with pytest.raises(ChecksumMismatchError):
            await decode_secure("fx-flow-v2e.0123abcd.payload", client)


@pytest.mark.asyncio
async def test_network_failure_is_service_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(ServiceUnavailableError):
            await encode_secure("flow", {"token": "fx-flow-X"}, client)
        with pytest.raises(ServiceUnavailableError):
            await decode_secure("fx-flow-v2e.0123abcd.payload", client)


@pytest.mark.asyncio
async def test_server_errors_are_service_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("encrypt"):
            return httpx.Response(502, text="Bad gateway")
        return httpx.Response(500, json={"error": "Server error"})

    async with _client(handler) as client:
        with pytest.raises(ServiceUnavailableError):
            await encode_secure("flow", {"token": "fx-flow-X"}, client)
        with pytest.raises(ServiceUnavailableError):
            await decode_secure("fx-flow-v2e.0123abcd.payload", client)


@pytest.mark.asyncio
async def test_malformed_issued_token_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "not-a-token"})

    async with _client(handler) as client:
        with pytest.raises(ServiceUnavailableError):
            await encode_secure("flow", {"token": "fx-flow-X"}, client)


@pytest.mark.asyncio
async def test_client_from_settings() -> None:
    from runtime.environment import RuntimeEnv

    settings = RuntimeEnv.instance().settings
    client = EncryptionClient.from_settings(settings)
    assert client.encrypt_endpoint == settings.encrypt_endpoint
    assert client.decrypt_endpoint == settings.decrypt_endpoint
    await client.aclose()
