# SPDX-License-Identifier: MIT
"""Property-based tests for the token codecs."""

from hypothesis import given, settings
from hypothesis import strategies as st

from codec.compression import restore_defaults, strip_defaults
from codec.envelope import decode_params, encode_params, validate
from core.canonical import round_floats
from core.schema_registry import get_schema
from core.seeding import create_seeded_random, token_to_seed

colours = st.from_regex(r"#[0-9a-f]{6}", fullmatch=True)
ratios = st.floats(min_value=0, max_value=1, allow_nan=False)
counts = st.integers(min_value=0, max_value=500)
seeds = st.from_regex(r"fx-mosaic-[A-Za-z0-9]{1,48}", fullmatch=True)

mosaic_params = st.fixed_dictionaries(
    {
        "color1": colours,
        "color2": colours,
        "color3": colours,
        "color4": colours,
        "initialRectMinSize": ratios,
        "initialRectMaxSize": ratios,
        "gridDivisionChance": ratios,
        "recursionChance": ratios,
        "minGridRows": counts,
        "maxGridRows": counts,
        "minGridCols": counts,
        "maxGridCols": counts,
        "splitRatioMin": ratios,
        "splitRatioMax": ratios,
        "marginMultiplier": ratios,
        "detailGridMin": counts,
        "detailGridMax": counts,
        "noiseDensity": ratios,
        "minRecursionSize": counts,
        "canvasWidth": counts,
        "canvasHeight": counts,
        "token": seeds,
        "colorSeed": seeds,
        "exportWidth": counts,
        "exportHeight": counts,
    }
)


@settings(max_examples=50)
@given(mosaic_params, st.sampled_from(["v1", "v4"]), st.booleans())
def test_round_trip(params, version, obfuscate) -> None:
    token = encode_params(
        "mosaic", params, version, obfuscate=obfuscate and version == "v1"
    )
    assert validate(token, "mosaic")
    assert decode_params(token, "mosaic") == round_floats(params)


@settings(max_examples=50)
@given(mosaic_params, st.sampled_from(["v1", "v4"]))
def test_re_encoding_is_idempotent(params, version) -> None:
    token = encode_params("mosaic", params, version)
    assert encode_params("mosaic", decode_params(token), version) == token


@given(mosaic_params)
def test_default_restoration(params) -> None:
    rounded = round_floats(params)
    restored = restore_defaults("mosaic", strip_defaults("mosaic", rounded))
    assert restored == rounded


@given(st.text(max_size=64))
def test_seed_derivation_is_total_and_deterministic(token) -> None:
    seed = token_to_seed(token)
    assert 0 <= seed <= 2**31
    assert token_to_seed(token) == seed
    assert create_seeded_random(token)() == create_seeded_random(token)()


def test_schema_defaults_cover_mosaic_canvas() -> None:
    defaults = get_schema("mosaic").defaults
    assert defaults["canvasWidth"] == 630
    assert defaults["exportHeight"] == 2000
