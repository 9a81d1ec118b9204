# SPDX-License-Identifier: MIT
"""Parameter schemas for every artwork type.

Each schema lists the field names of a type and the defaults that v4 tokens
omit. ``keys`` order documents registration order; the v4 path is keyed, so
reordering or appending keys never breaks issued v4 tokens.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from models import ArtworkType, ParamSchema

from .canonical import canonical_json, round_floats

_CANVAS_DEFAULTS: dict[str, Any] = {
    "canvasWidth": 630,
    "canvasHeight": 790,
    "exportWidth": 1600,
    "exportHeight": 2000,
}

_TEXT_SCHEMA = ParamSchema(
    keys=(
        "text",
        "fontSize",
        "fontFamily",
        "fontWeight",
        "letterSpacing",
        "lineHeight",
        "textColor",
        "backgroundColor",
        "textAlign",
        "canvasWidth",
        "canvasHeight",
        "token",
        "exportWidth",
        "exportHeight",
        # Layered design fields; never stripped from v4 payloads.
        "grainAmount",
        "fontUrl",
        "customFontFamily",
        "layer1",
        "layer2",
        "layer3",
        "colorSeed",
    ),
    defaults={
        "fontWeight": 400,
        "letterSpacing": 0,
        "lineHeight": 1.2,
        "textAlign": "center",
        **_CANVAS_DEFAULTS,
    },
)

PARAM_SCHEMAS: Mapping[str, ParamSchema] = MappingProxyType(
    {
        ArtworkType.FLOW.value: ParamSchema(
            keys=(
                "numPoints",
                "backgroundFade",
                "scaleValue",
                "noiseSpeed",
                "movementDistance",
                "gaussianMean",
                "gaussianStd",
                "minIterations",
                "maxIterations",
                "circleSize",
                "strokeWeightMin",
                "strokeWeightMax",
                "angleMultiplier1",
                "angleMultiplier2",
                "canvasWidth",
                "canvasHeight",
                "targetWidth",
                "targetHeight",
                "color1",
                "color2",
                "color3",
                "color4",
                "color5",
                "exportWidth",
                "exportHeight",
                "isAnimating",
                "token",
                "colorSeed",
            ),
            defaults={
                **_CANVAS_DEFAULTS,
                "backgroundFade": 5,
                "targetWidth": 800,
                "targetHeight": 1000,
                "isAnimating": True,
            },
        ),
        ArtworkType.GRID.value: ParamSchema(
            keys=(
                "backgroundColor",
                "borderColor",
                "color1",
                "color2",
                "color3",
                "color4",
                "animationSpeed",
                "maxDepth",
                "minModuleSize",
                "subdivideChance",
                "crossSize",
                "minColumns",
                "maxColumns",
                "isAnimating",
                "canvasWidth",
                "canvasHeight",
                "token",
                "colorSeed",
                "exportWidth",
                "exportHeight",
            ),
            defaults={**_CANVAS_DEFAULTS, "isAnimating": True},
        ),
        ArtworkType.MOSAIC.value: ParamSchema(
            keys=(
                "color1",
                "color2",
                "color3",
                "color4",
                "initialRectMinSize",
                "initialRectMaxSize",
                "gridDivisionChance",
                "recursionChance",
                "minGridRows",
                "maxGridRows",
                "minGridCols",
                "maxGridCols",
                "splitRatioMin",
                "splitRatioMax",
                "marginMultiplier",
                "detailGridMin",
                "detailGridMax",
                "noiseDensity",
                "minRecursionSize",
                "canvasWidth",
                "canvasHeight",
                "token",
                "colorSeed",
                "exportWidth",
                "exportHeight",
            ),
            defaults={**_CANVAS_DEFAULTS, "initialRectMaxSize": 1.0},
        ),
        ArtworkType.ROTATED.value: ParamSchema(
            keys=(
                "color1",
                "color2",
                "color3",
                "color4",
                "backgroundColor",
                "offsetRatio",
                "marginRatio",
                "minCellCount",
                "maxCellCount",
                "minRecursionSize",
                "strokeWeight",
                "isAnimating",
                "canvasWidth",
                "canvasHeight",
                "token",
                "colorSeed",
                "exportWidth",
                "exportHeight",
            ),
            defaults={**_CANVAS_DEFAULTS, "isAnimating": True},
        ),
        ArtworkType.TREE.value: ParamSchema(
            keys=(
                "initialPaths",
                "initialVelocity",
                "branchProbability",
                "diameterShrink",
                "minDiameter",
                "bumpMultiplier",
                "velocityRetention",
                "speedMin",
                "speedMax",
                "finishedCircleSize",
                "strokeWeightMultiplier",
                "stemColor1",
                "stemColor2",
                "stemColor3",
                "tipColor1",
                "tipColor2",
                "tipColor3",
                "backgroundColor",
                "textContent",
                "textEnabled",
                "fontSize",
                "textColor",
                "textAlign",
                "textX",
                "textY",
                "lineHeight",
                "fontFamily",
                "fontUrl",
                "customFontFamily",
                "grainAmount",
                "canvasWidth",
                "canvasHeight",
                "token",
                "exportWidth",
                "exportHeight",
                "isAnimating",
            ),
            defaults={
                "initialPaths": 2,
                "initialVelocity": 10,
                "branchProbability": 0.2,
                "diameterShrink": 0.65,
                "minDiameter": 0.3,
                "bumpMultiplier": 0.2,
                "velocityRetention": 0.77,
                "speedMin": 5,
                "speedMax": 10,
                "finishedCircleSize": 12,
                "strokeWeightMultiplier": 1.1,
                "stemColor1": "#3d2817",
                "stemColor2": "#4a3319",
                "stemColor3": "#5c3d1f",
                "tipColor1": "#e8c4a0",
                "tipColor2": "#f0d4b8",
                "tipColor3": "#d9b89a",
                "backgroundColor": "#fafafa",
                "textContent": "",
                "textEnabled": False,
                "fontSize": 24,
                "textColor": "#333333",
                "textAlign": "center",
                "textX": 400,
                "textY": 50,
                "lineHeight": 1.5,
                "fontFamily": "Georgia, serif",
                "fontUrl": "",
                "customFontFamily": "",
                "grainAmount": 0,
                "canvasWidth": 400,
                "canvasHeight": 400,
                "exportWidth": 1600,
                "exportHeight": 2000,
                "isAnimating": True,
            },
        ),
        ArtworkType.TEXT.value: _TEXT_SCHEMA,
        ArtworkType.TEXTDESIGN.value: _TEXT_SCHEMA,
        ArtworkType.LAMB.value: ParamSchema(
            keys=(
                "cols",
                "rows",
                "wOff",
                "hOff",
                "noiseScale",
                "lifeStep",
                "weiRangeMax",
                "totalFrame",
                "canvasWidth",
                "canvasHeight",
                "token",
                "isAnimating",
            ),
            defaults={
                "wOff": 200,
                "hOff": 200,
                "lifeStep": 0.005,
                "totalFrame": 1000,
                "canvasWidth": 1200,
                "canvasHeight": 370,
                "isAnimating": True,
            },
        ),
    }
)

EMPTY_SCHEMA = ParamSchema()


class SchemaRegistry:
    """Read-only lookup of :class:`ParamSchema` by artwork type name."""

    def __init__(self, schemas: Mapping[str, ParamSchema] | None = None) -> None:
        self._schemas: Mapping[str, ParamSchema] = MappingProxyType(
            dict(PARAM_SCHEMAS if schemas is None else schemas)
        )

    def get_schema(self, artwork_type: str | ArtworkType) -> ParamSchema:
        """Return the schema for ``artwork_type`` or an empty schema."""

        key = (
            artwork_type.value
            if isinstance(artwork_type, ArtworkType)
            else artwork_type
        )
        return self._schemas.get(key, EMPTY_SCHEMA)

    def with_schema(self, artwork_type: str, schema: ParamSchema) -> "SchemaRegistry":
        """Return a new registry with ``schema`` registered for ``artwork_type``."""

        updated = dict(self._schemas)
        updated[artwork_type] = schema
        return SchemaRegistry(updated)

    def types(self) -> list[str]:
        """Return the registered type names."""

        return list(self._schemas)


DEFAULT_REGISTRY = SchemaRegistry()


def get_schema(artwork_type: str | ArtworkType) -> ParamSchema:
    """Return the schema for ``artwork_type`` from the default registry."""

    return DEFAULT_REGISTRY.get_schema(artwork_type)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_default(value: Any, default: Any) -> bool:
    """Return ``True`` when ``value`` equals the registered ``default``.

    Numbers compare after rounding to the codec precision, booleans never
    equal numbers, and lists or mappings compare structurally.
    """

    if isinstance(value, bool) or isinstance(default, bool):
        both_bool = isinstance(value, bool) and isinstance(default, bool)
        return both_bool and value == default
    if _is_number(value) and _is_number(default):
        return round_floats(value) == round_floats(default)
    sequences = (list, tuple)
    if isinstance(value, sequences) and isinstance(default, sequences):
        return canonical_json(value) == canonical_json(default)
    if isinstance(value, dict) and isinstance(default, dict):
        return canonical_json(value) == canonical_json(default)
    containers = (list, tuple, dict)
    if isinstance(value, containers) or isinstance(default, containers):
        return False
    if value is None or default is None:
        return value is None and default is None
    return type(value) is type(default) and value == default


__all__ = [
    "PARAM_SCHEMAS",
    "EMPTY_SCHEMA",
    "SchemaRegistry",
    "DEFAULT_REGISTRY",
    "get_schema",
    "is_default",
]
