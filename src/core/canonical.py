# SPDX-License-Identifier: MIT
"""Utilities for deterministic serialisation of parameter sets."""

from __future__ import annotations

import json
from typing import Any

from constants import FLOAT_PRECISION


def _round_number(value: float, precision: int) -> int | float:
    """Return ``value`` rounded, with integral floats collapsed to ``int``."""

    if value.is_integer():
        return int(value)
    rounded = round(value, precision)
    return int(rounded) if rounded.is_integer() else rounded


def round_floats(value: Any, precision: int = FLOAT_PRECISION) -> Any:
    """Return ``value`` with every non-integer float rounded to ``precision``.

    Lists and mappings are processed recursively. Booleans and strings pass
    through untouched. Integral floats become ``int`` so ``1.0`` and ``1``
    serialise identically.
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return _round_number(value, precision)
    if isinstance(value, (list, tuple)):
        return [round_floats(item, precision) for item in value]
    if isinstance(value, dict):
        return {key: round_floats(item, precision) for key, item in value.items()}
    return value


def sort_keys_deep(value: Any) -> Any:
    """Return ``value`` with mapping keys ordered alphabetically."""

    if isinstance(value, list):
        return [sort_keys_deep(item) for item in value]
    if isinstance(value, dict):
        return {key: sort_keys_deep(value[key]) for key in sorted(value)}
    return value


def canonical_json(value: Any) -> str:
    """Return minified JSON for ``value`` after rounding and key sorting.

    Identical parameter sets always produce identical strings.
    """

    return compact_json(sort_keys_deep(round_floats(value)))


def compact_json(value: Any) -> str:
    """Return ``value`` as JSON without whitespace, keeping non-ASCII text."""

    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


__all__ = ["round_floats", "sort_keys_deep", "canonical_json", "compact_json"]
