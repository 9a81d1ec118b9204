# SPDX-License-Identifier: MIT
"""Tests for token version detection, integrity checks and decoding."""

import base64
import re
from pathlib import Path

import pytest

from codec.envelope import (
    check,
    decode_params,
    decode_token,
    decode_v1_payload,
    detect_version,
    encode_params,
    encode_v1_payload,
    is_encrypted_token,
    parse_artwork_type,
    try_decode,
    validate,
)
from core.canonical import round_floats
from core.digest import payload_checksum
from errors import (
    ChecksumMismatchError,
    DecodeFailureError,
    RejectionReason,
    ServiceUnavailableError,
    TypeMismatchError,
    UnknownFormatError,
)
from generation.generators import generate_params
from models import ArtworkType, Provenance, TokenVersion
from observability import telemetry

DATA_DIR = Path(__file__).parent / "data"
V1_RE = re.compile(r"fx-mosaic-v1-[A-Za-z0-9+/=]+-[0-9a-f]{4}")
BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="


def _real_text_token() -> str:
    return (DATA_DIR / "text_v1_obfuscated.token").read_text(encoding="utf-8").strip()


def test_mosaic_v1_scenario(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    assert V1_RE.fullmatch(token)
    params = decode_params(token)
    assert params["color1"] == "#FF0000"
    assert params["token"] == "fx-mosaic-SEED123"
    assert params == mosaic_params


def test_single_character_tamper_is_detected(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    head = "fx-mosaic-v1-"
    payload, checksum = token[len(head) :].rsplit("-", 1)
    for index, char in enumerate(payload):
        shifted = (BASE64_CHARS.index(char) + 1) % len(BASE64_CHARS)
        for replacement in (BASE64_CHARS[shifted], "-"):
            body = payload[:index] + replacement + payload[index + 1 :]
            tampered = f"{head}{body}-{checksum}"
            with pytest.raises(ChecksumMismatchError):
                decode_token(tampered)
            assert try_decode(tampered).reason is RejectionReason.CHECKSUM_MISMATCH


def test_tampered_checksum_is_detected(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    bad = token[:-4] + ("0000" if not token.endswith("0000") else "0001")
    outcome = try_decode(bad)
    assert outcome.state == "rejected"
    assert outcome.reason is RejectionReason.CHECKSUM_MISMATCH


def test_type_constraint(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    assert validate(token, "mosaic")
    assert not validate(token, "flow")
    with pytest.raises(TypeMismatchError) as info:
        decode_token(token, expected_type=ArtworkType.FLOW)
    assert info.value.expected == "flow"
    assert info.value.actual == "mosaic"


def test_text_alias_is_a_distinct_type() -> None:
    token = encode_params("textdesign", generate_params("text", "fx-text-A"), "v4")
    assert token.startswith("fx-textdesign-v4.")
    assert not validate(token, "text")
    assert decode_token(token).type is ArtworkType.TEXTDESIGN


@pytest.mark.parametrize(
    "token",
    [
        "",
        "hello",
        "fx-",
        "fx-mosaic",
        "fx-mosaic-",
        "fx-banana-v1-YWJj-0126",
        "fx-mosaic-v1-",
        "fx-mosaic-v1-YWJj-12",
        "fx-mosaic-v1-YWJj-ABCD",
        "fx-mosaic-v1-YW-Jj-0191",
        "fx-mosaic-v4.",
        "fx-mosaic-v4.bad payload",
        "fx-mosaic-v2e.nothex.abc",
        "fx-mosaic-v2.abcd",
        "fx-mosaic-seed_with_underscore",
        "xx-mosaic-SEED",
    ],
)
def test_unknown_formats(token: str) -> None:
    with pytest.raises(UnknownFormatError):
        check(token)
    assert try_decode(token).reason is RejectionReason.UNKNOWN_FORMAT


def test_detect_version_priority() -> None:
    assert detect_version("fx-flow-v1-YWJj-0126").version is TokenVersion.V1
    assert detect_version("fx-flow-v4.ab-v1-cd").version is TokenVersion.V4
    assert detect_version("fx-flow-v2e.abc123.payload").version is TokenVersion.V2E
    assert detect_version("fx-flow-v2.abc123.payload").version is TokenVersion.V2
    legacy = detect_version("fx-flow-v3abc")
    assert legacy.version is TokenVersion.LEGACY
    assert legacy.payload == "v3abc"


def test_v1_without_checksum_is_accepted(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    bare = token.rsplit("-", 1)[0]
    info = check(bare)
    assert info.checksum is None
    assert decode_params(bare)["color1"] == "#FF0000"


def test_parse_artwork_type() -> None:
    assert parse_artwork_type("fx-grid-ABC") is ArtworkType.GRID
    assert parse_artwork_type("fx-nope-ABC") is ArtworkType.UNKNOWN
    assert parse_artwork_type("garbage") is ArtworkType.UNKNOWN


def test_legacy_token_decodes_through_generator() -> None:
    result = decode_token("fx-tree-ABC")
    assert result.version is TokenVersion.LEGACY
    assert result.params == generate_params("tree", "fx-tree-ABC")
    assert result.params["token"] == "fx-tree-ABC"


def test_obfuscated_v1_round_trip(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1", obfuscate=True)
    assert "-v1-ENC:" in token
    assert decode_params(token, "mosaic") == mosaic_params


def test_real_obfuscated_text_token() -> None:
    token = _real_text_token()
    info = check(token, "text")
    assert info.checksum == "5e06"
    assert payload_checksum(info.payload) == "5e06"

    params = decode_params(token)
    seed = "fx-text-SvAnY3BvkRvpTSz4dsUZZCCKh3hXF12iKBdSQPiyHUndcd"
    assert params["backgroundColor"] == "#001ef1"
    assert params["grainAmount"] == 35
    assert params["fontUrl"] == ""
    assert params["customFontFamily"] == "Inter"
    assert (params["canvasWidth"], params["canvasHeight"]) == (1132, 300)
    assert (params["exportWidth"], params["exportHeight"]) == (1600, 2000)
    assert params["layer1"]["text"] == "ZOHRAN"
    assert params["layer1"]["size"] == 62
    assert params["layer1"]["showHighlight"] is False
    assert params["layer2"]["y"] == 0.68
    assert params["layer3"]["x"] == 0.55
    assert params["layer3"]["size"] == 100
    assert params["token"] == seed
    assert params["colorSeed"] == seed


def test_v1_rounds_floats(mosaic_params) -> None:
    mosaic_params["noiseDensity"] = 0.123456789
    decoded = decode_params(encode_params("mosaic", mosaic_params, "v1"))
    assert decoded["noiseDensity"] == 0.1235


def test_v1_payload_helpers() -> None:
    payload = encode_v1_payload(["é", 1])
    assert decode_v1_payload(payload) == ["é", 1]
    assert decode_v1_payload(encode_v1_payload([1], obfuscate=True)) == [1]
    with pytest.raises(DecodeFailureError):
        decode_v1_payload("!!!!")


def test_undecodable_v1_payload_is_decode_failure() -> None:
    payload = "bm90IGpzb24="  # base64 of "not json"
    token = f"fx-flow-v1-{payload}-{payload_checksum(payload)}"
    with pytest.raises(DecodeFailureError):
        decode_token(token)


def test_deeply_nested_v1_payload_is_decode_failure() -> None:
    nested = "[" * 100_000 + "]" * 100_000
    payload = base64.b64encode(nested.encode("ascii")).decode("ascii")
    token = f"fx-mosaic-v1-{payload}-{payload_checksum(payload)}"
    outcome = try_decode(token)
    assert outcome.state == "rejected"
    assert outcome.reason is RejectionReason.DECODE_FAILURE


@pytest.mark.parametrize("kind", [kind.value for kind in ArtworkType.known()])
@pytest.mark.parametrize("version", ["v1", "v4"])
def test_round_trip_every_type(kind: str, version: str) -> None:
    params = generate_params(kind, f"fx-{kind}-ROUNDTRIP")
    decoded = decode_params(encode_params(kind, params, version), kind)
    expected = round_floats(params)
    assert {key: decoded[key] for key in expected} == expected


def test_v4_with_provenance() -> None:
    provenance = Provenance(
        creator="Ada",
        timestamp=1700000000,
        location="Lisbon",
        feeling="Wind over water",
        artist="Grace",
        artworkType="flow",
    )
    params = generate_params("flow", "fx-flow-PROV")
    token = encode_params("flow", params, "v4", provenance=provenance)
    result = decode_token(token)
    assert result.provenance == provenance
    assert result.params["token"] == "fx-flow-PROV"


def test_v4_without_token_field_keeps_envelope_token() -> None:
    token = encode_params("lamb", {"cols": 40, "rows": 60}, "v4")
    assert decode_params(token)["token"] == token


def test_v4_re_encode_is_stable() -> None:
    params = generate_params("grid", "fx-grid-STABLE")
    token = encode_params("grid", params, "v4")
    assert encode_params("grid", decode_params(token), "v4") == token


def test_invalid_option_combinations() -> None:
    params = {"token": "fx-flow-X"}
    provenance = Provenance(
        creator="a", timestamp=0, feeling="b", artist="c", artworkType="flow"
    )
    with pytest.raises(ValueError):
        encode_params("flow", params, "v1", provenance=provenance)
    with pytest.raises(ValueError):
        encode_params("flow", params, "v4", obfuscate=True)
    with pytest.raises(ValueError):
        encode_params("flow", params, "v2e")
    with pytest.raises(UnknownFormatError):
        encode_params("banana", params, "v1")


def test_encrypted_tokens_need_the_service() -> None:
    token = "fx-flow-v2e.0123456789abcdef.c2VjcmV0"
    assert is_encrypted_token(token)
    assert not is_encrypted_token("fx-flow-ABC")
    assert not is_encrypted_token("garbage")
    with pytest.raises(ServiceUnavailableError):
        decode_token(token)


def test_decode_records_telemetry(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    decode_token(token)
    try_decode("fx-mosaic-nope-")
    assert telemetry.version_metrics("v1").encoded == 1
    assert telemetry.version_metrics("v1").decoded == 1
    assert telemetry.rejection_counts() == {"unknown_format": 1}


def test_surrounding_whitespace_is_ignored(mosaic_params) -> None:
    token = encode_params("mosaic", mosaic_params, "v1")
    assert decode_params(f"  {token}\n") == mosaic_params
