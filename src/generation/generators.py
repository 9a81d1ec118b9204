# SPDX-License-Identifier: MIT
"""Deterministic parameter generators seeded from a token.

Each generator draws from :func:`core.seeding.create_seeded_random` in a fixed
order. The draw order is part of the legacy token format: a legacy token only
stores its seed, so reordering draws changes every artwork issued with one.
Desktop canvas sizes are always used.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping, Sequence

import logfire

from core.seeding import create_seeded_random, generate_token
from errors import UnknownFormatError
from models import ArtworkType

Rand = Callable[[], float]
Generator = Callable[[str], dict[str, Any]]

_CANVAS = {"canvasWidth": 630, "canvasHeight": 790}
_EXPORT = {"exportWidth": 1600, "exportHeight": 2000}

FLOW_PALETTES: Sequence[Mapping[str, Sequence[str]]] = (
    {
        "backgrounds": ("#000000", "#0a0a0a", "#0f0f0f", "#1a1a1a"),
        "strokes": (
            "#ffffff",
            "#f5f5f5",
            "#e8e8e8",
            "#d4d4d4",
            "#c0c0c0",
            "#faf8f3",
            "#f0ede6",
            "#e6e3dc",
        ),
    },
    {
        "backgrounds": ("#1a1614", "#2b2520", "#0d0c0b", "#1e1b18"),
        "strokes": (
            "#e8d5c4",
            "#f4e8d9",
            "#d4c0ab",
            "#c9b59a",
            "#f0e6d2",
            "#dcc8b3",
        ),
    },
    {
        "backgrounds": ("#0a0e27", "#1a1a2e", "#16213e", "#0f1419"),
        "strokes": (
            "#ff6b9d",
            "#c44569",
            "#f8b500",
            "#4a90e2",
            "#50c878",
            "#e94b3c",
        ),
    },
    {
        "backgrounds": ("#001f3f", "#0a2f51", "#001a33", "#0d2b45"),
        "strokes": ("#7fcdcd", "#41b3d3", "#84fab0", "#8fd3f4", "#a8e6cf"),
    },
    {
        "backgrounds": ("#2d1b2e", "#1a1423", "#2a1a2e", "#1e1326"),
        "strokes": ("#ff6b9d", "#ffa07a", "#ffb6c1", "#ffd700", "#ff8c94"),
    },
)

GRID_PALETTES = (
    ("#1B4332", "#52B788", "#2D6A4F", "#95D5B2", "#40916C", "#74C69D"),
    ("#001219", "#005f73", "#0a9396", "#94d2bd", "#e9d8a6", "#ee9b00"),
    ("#2b2d42", "#8d99ae", "#edf2f4", "#ef233c", "#d90429", "#2b2d42"),
)

MOSAIC_PALETTES = (
    ("#A8DADC", "#E63946", "#457B9D", "#1D3557"),
    ("#264653", "#2a9d8f", "#e9c46a", "#f4a261"),
    ("#cdb4db", "#ffc8dd", "#ffafcc", "#bde0fe"),
)

ROTATED_PALETTES = (
    ("#FF1493", "#FF69B4", "#FFB7C5", "#C71585", "#2C1810"),
    ("#ffbe0b", "#fb5607", "#ff006e", "#8338ec", "#3a86ff"),
    ("#000000", "#14213d", "#fca311", "#e5e5e5", "#ffffff"),
)

TREE_PALETTES = (
    ("#8B4513", "#A0522D", "#CD853F", "#FF69B4", "#FFB6C1", "#FFC0CB", "#000000"),
    ("#2f3e46", "#354f52", "#52796f", "#84a98c", "#cad2c5", "#f0f3bd", "#2f3e46"),
    ("#5f0f40", "#9a031e", "#fb8b24", "#e36414", "#0f4c5c", "#5f0f40", "#000000"),
)

TEXT_PALETTES = (
    ("#001ef1", "#FF9900", "#ff0000", "#fff4b8", "#D10000"),
    ("#2b2d42", "#8d99ae", "#edf2f4", "#ef233c", "#d90429"),
    ("#000000", "#ffffff", "#ff006e", "#8338ec", "#3a86ff"),
)


def _index(rand: Rand, count: int) -> int:
    return math.floor(rand() * count)


def _pick(rand: Rand, options: Sequence[Any]) -> Any:
    return options[_index(rand, len(options))]


def _uniform(rand: Rand, span: float, low: float) -> float:
    return rand() * span + low


def generate_flow(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, FLOW_PALETTES)
    # The background draw advances the stream even though flow never uses it.
    _pick(rand, palette["backgrounds"])
    colors = [_pick(rand, palette["strokes"]) for _ in range(5)]
    params: dict[str, Any] = {
        "numPoints": _index(rand, 300) + 250,
        "backgroundFade": 5,
        "scaleValue": _uniform(rand, 0.015, 0.002),
        "noiseSpeed": _uniform(rand, 0.001, 0.0002),
        "movementDistance": _index(rand, 8) + 4,
        "gaussianMean": _uniform(rand, 0.2, 0.4),
        "gaussianStd": _uniform(rand, 0.15, 0.08),
        "minIterations": _index(rand, 30) + 40,
        "maxIterations": _index(rand, 50) + 60,
        "circleSize": _index(rand, 4) + 1,
        "strokeWeightMin": _uniform(rand, 0.3, 0.1),
        "strokeWeightMax": _uniform(rand, 1.5, 0.5),
        "angleMultiplier1": _index(rand, 15) + 8,
        "angleMultiplier2": _index(rand, 15) + 8,
        **_CANVAS,
        "targetWidth": 800,
        "targetHeight": 1000,
    }
    for number, color in enumerate(colors, start=1):
        params[f"color{number}"] = color
    params.update(_EXPORT, isAnimating=True, token=token)
    return params


def generate_grid(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, GRID_PALETTES)
    return {
        "backgroundColor": palette[0],
        "borderColor": palette[1],
        "color1": palette[2],
        "color2": palette[3],
        "color3": palette[4],
        "color4": palette[5],
        "animationSpeed": _uniform(rand, 0.1, 0.02),
        "maxDepth": _index(rand, 3) + 1,
        "minModuleSize": _index(rand, 30) + 20,
        "subdivideChance": _uniform(rand, 0.5, 0.3),
        "crossSize": _uniform(rand, 0.5, 0.4),
        "minColumns": _index(rand, 4) + 3,
        "maxColumns": _index(rand, 8) + 6,
        **_CANVAS,
        "isAnimating": True,
        "token": token,
        **_EXPORT,
    }


def generate_mosaic(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, MOSAIC_PALETTES)
    return {
        "color1": palette[0],
        "color2": palette[1],
        "color3": palette[2],
        "color4": palette[3],
        "initialRectMinSize": _uniform(rand, 0.4, 0.6),
        "initialRectMaxSize": 1.0,
        "gridDivisionChance": _uniform(rand, 0.3, 0),
        "recursionChance": _uniform(rand, 0.3, 0),
        "minGridRows": _index(rand, 3) + 1,
        "maxGridRows": _index(rand, 4) + 2,
        "minGridCols": _index(rand, 3) + 2,
        "maxGridCols": _index(rand, 5) + 3,
        "splitRatioMin": _uniform(rand, 0.3, 0.1),
        "splitRatioMax": _uniform(rand, 0.4, 0.5),
        "marginMultiplier": _uniform(rand, 0.08, 0.01),
        "detailGridMin": _index(rand, 3) + 2,
        "detailGridMax": _index(rand, 4) + 4,
        "noiseDensity": _uniform(rand, 0.15, 0),
        "minRecursionSize": _index(rand, 20) + 10,
        **_CANVAS,
        "token": token,
        **_EXPORT,
    }


def generate_rotated(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, ROTATED_PALETTES)
    return {
        "color1": palette[0],
        "color2": palette[1],
        "color3": palette[2],
        "color4": palette[3],
        "backgroundColor": palette[4],
        "offsetRatio": _uniform(rand, 0.04, 0.005),
        "marginRatio": _uniform(rand, 0.4, 0.3),
        "minCellCount": _index(rand, 3) + 1,
        "maxCellCount": _index(rand, 5) + 4,
        "minRecursionSize": _uniform(rand, 0.04, 0.01),
        "strokeWeight": _uniform(rand, 4, 1),
        **_CANVAS,
        "token": token,
        **_EXPORT,
    }


def generate_tree(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, TREE_PALETTES)
    params: dict[str, Any] = {
        "initialPaths": _index(rand, 3) + 1,
        "initialVelocity": _uniform(rand, 5, 10),
        "branchProbability": _uniform(rand, 0.15, 0.1),
        "diameterShrink": _uniform(rand, 0.1, 0.6),
        "minDiameter": _uniform(rand, 0.2, 0.1),
        "bumpMultiplier": _uniform(rand, 0.2, 0.1),
        "velocityRetention": _uniform(rand, 0.2, 0.7),
        "speedMin": _uniform(rand, 3, 3),
        "speedMax": _uniform(rand, 5, 8),
        "finishedCircleSize": _uniform(rand, 8, 6),
        "strokeWeightMultiplier": _uniform(rand, 0.5, 1),
        "stemColor1": palette[0],
        "stemColor2": palette[1],
        "stemColor3": palette[2],
        "tipColor1": palette[3],
        "tipColor2": palette[4],
        "tipColor3": palette[5],
        "backgroundColor": palette[6],
        "textContent": "",
        "textEnabled": True,
        "fontSize": 24,
        "textColor": "#ff1f1f",
        "textAlign": "center",
        "textX": 311,
        "textY": 50,
        "lineHeight": 1.5,
        "fontFamily": "Georgia",
        "fontUrl": "https://fonts.googleapis.com/css2?family=...",
        "customFontFamily": "",
    }
    params["grainAmount"] = _index(rand, 50) + 20
    params.update(_CANVAS, token=token, **_EXPORT, isAnimating=True)
    return params


def _layer(
    text: str,
    x: float,
    y: float,
    size: int,
    palette: Sequence[str],
    **overrides: Any,
) -> dict[str, Any]:
    layer: dict[str, Any] = {
        "text": text,
        "x": x,
        "y": y,
        "size": size,
        "alignment": "center",
        "fill": palette[1],
        "extrudeDepth": 12,
        "extrudeX": 1.0,
        "extrudeY": 1.0,
        "extrudeStart": palette[4],
        "extrudeEnd": palette[4],
        "highlight": palette[3],
        "showHighlight": False,
        "outlineThickness": 4,
        "outlineColor": palette[4],
        "fontUrl": "",
    }
    layer.update(overrides)
    return layer


def generate_text(token: str) -> dict[str, Any]:
    rand = create_seeded_random(token)
    palette = _pick(rand, TEXT_PALETTES)
    grain = _index(rand, 30) + 10
    layer1 = _layer(
        "ZOHRAN",
        0.5,
        0.5,
        _index(rand, 40) + 50,
        palette,
        extrudeDepth=_index(rand, 10) + 2,
        extrudeX=_uniform(rand, 4, -2),
        extrudeY=_uniform(rand, 4, -2),
        extrudeStart=palette[2],
        extrudeEnd=palette[2],
        showHighlight=rand() > 0.5,
        outlineThickness=0,
        fontUrl="https://db.onlinewebfonts.com/t/05772fcddb0048a8a7d2279736c5790a.ttf",
    )
    return {
        "backgroundColor": palette[0],
        **_CANVAS,
        "grainAmount": grain,
        "fontUrl": "https://example.com/font.ttf",
        "customFontFamily": "Noto Sans Bengali",
        "layer1": layer1,
        "layer2": _layer("", 0.3, 0.68, 60, palette),
        "layer3": _layer("", 0.55, 0.68, 100, palette),
        "token": token,
        **_EXPORT,
    }


def generate_lamb(token: str) -> dict[str, Any]:
    """Draw lamb parameters on the step grid of their editable ranges."""

    rand = create_seeded_random(token)
    return {
        "cols": (_index(rand, 20) + 1) * 10,
        "rows": (_index(rand, 20) + 1) * 10,
        "wOff": 200,
        "hOff": 200,
        "noiseScale": round((_index(rand, 50) + 1) * 0.001, 3),
        "lifeStep": 0.005,
        "weiRangeMax": (_index(rand, 128) + 1) * 4,
        "totalFrame": 1000,
        "canvasWidth": 1200,
        "canvasHeight": 370,
        "token": token,
        "isAnimating": True,
    }


GENERATORS: Mapping[ArtworkType, Generator] = {
    ArtworkType.FLOW: generate_flow,
    ArtworkType.GRID: generate_grid,
    ArtworkType.MOSAIC: generate_mosaic,
    ArtworkType.ROTATED: generate_rotated,
    ArtworkType.TREE: generate_tree,
    ArtworkType.TEXT: generate_text,
    ArtworkType.TEXTDESIGN: generate_text,
    ArtworkType.LAMB: generate_lamb,
}


def generate_params(artwork_type: ArtworkType | str, token: str) -> dict[str, Any]:
    """Return the parameter set deterministically derived from ``token``.

    Raises:
        UnknownFormatError: If ``artwork_type`` has no generator.
    """

    kind = ArtworkType.parse(
        artwork_type.value if isinstance(artwork_type, ArtworkType) else artwork_type
    )
    generator = GENERATORS.get(kind)
    if generator is None:
        raise UnknownFormatError(f"No generator for artwork type '{artwork_type}'")
    return generator(token)


def random_params(artwork_type: ArtworkType | str) -> dict[str, Any]:
    """Return the parameters of a freshly drawn legacy token."""

    kind = ArtworkType.parse(
        artwork_type.value if isinstance(artwork_type, ArtworkType) else artwork_type
    )
    if kind is ArtworkType.UNKNOWN:
        raise UnknownFormatError(f"No generator for artwork type '{artwork_type}'")
    token = generate_token(kind.value)
    logfire.debug("Drew random parameters", artwork_type=kind.value)
    return {**generate_params(kind, token), "token": token}


__all__ = [
    "GENERATORS",
    "generate_flow",
    "generate_grid",
    "generate_mosaic",
    "generate_rotated",
    "generate_tree",
    "generate_text",
    "generate_lamb",
    "generate_params",
    "random_params",
]
