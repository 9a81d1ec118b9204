# SPDX-License-Identifier: MIT
"""Positional array codecs for v1 tokens.

Each artwork type maps its parameter set to a fixed-order array. The slot
order of a codec is part of the wire format: never reorder or insert slots.
New fields are appended at the end with a fallback that applies when older
tokens carry shorter arrays.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union

from errors import DecodeFailureError, UnknownFormatError
from models import ArtworkType

_NO_FALLBACK = object()


@dataclass(frozen=True)
class Slot:
    """One array position bound to a parameter name."""

    name: str
    fallback: Any = _NO_FALLBACK
    flag: bool = False

    def encode(self, params: Mapping[str, Any]) -> Any:
        value = params.get(self.name)
        if self.flag and value is not None:
            return 1 if value else 0
        return value

    def decode(self, value: Any, out: dict[str, Any]) -> None:
        if value is None:
            if self.fallback is _NO_FALLBACK:
                return
            value = self.fallback
        elif self.flag:
            value = bool(value)
        out[self.name] = value


@dataclass(frozen=True)
class Group:
    """A nested sub-array.

    With ``key`` set the group decodes into a sub-mapping under that key;
    otherwise its fields are merged into the parent mapping.
    """

    slots: tuple["Layout", ...]
    key: str | None = None

    def encode(self, params: Mapping[str, Any]) -> list[Any]:
        source = params.get(self.key) if self.key else params
        if source is None:
            source = {}
        return [slot.encode(source) for slot in self.slots]

    def decode(self, value: Any, out: dict[str, Any]) -> None:
        items = value if isinstance(value, list) else []
        target: dict[str, Any] = {} if self.key else out
        _decode_slots(self.slots, items, target)
        if self.key:
            out[self.key] = target


Layout = Union[Slot, Group]


def _decode_slots(
    slots: Sequence[Layout], data: Sequence[Any], out: dict[str, Any]
) -> None:
    for index, slot in enumerate(slots):
        slot.decode(data[index] if index < len(data) else None, out)


class ParamCodec(ABC):
    """Maps one artwork type's parameters to a positional array and back."""

    artwork_type: ArtworkType

    @abstractmethod
    def encode(self, params: Mapping[str, Any]) -> list[Any]:
        """Return the positional array for ``params``."""

    @abstractmethod
    def decode(self, data: Sequence[Any], fallback_token: str) -> dict[str, Any]:
        """Return the parameter set stored in ``data``.

        ``fallback_token`` is attached as ``token`` when the array has none.
        """


@dataclass
class SlotCodec(ParamCodec):
    """Codec driven by a declarative slot layout."""

    artwork_type: ArtworkType
    layout: tuple[Layout, ...] = field(default_factory=tuple)

    def encode(self, params: Mapping[str, Any]) -> list[Any]:
        return [slot.encode(params) for slot in self.layout]

    def decode(self, data: Sequence[Any], fallback_token: str) -> dict[str, Any]:
        if not isinstance(data, list):
            raise DecodeFailureError(
                f"{self.artwork_type.value} payload must be an array"
            )
        params: dict[str, Any] = {}
        _decode_slots(self.layout, data, params)
        params["token"] = params.get("token") or fallback_token
        return params


_EXPORT = (Slot("exportWidth", 1600), Slot("exportHeight", 2000))
_TAIL = (Slot("token"), Slot("colorSeed"))


def _names(*names: str) -> tuple[Slot, ...]:
    return tuple(Slot(name) for name in names)


def _canvas(width: int, height: int) -> tuple[Slot, ...]:
    return (Slot("canvasWidth", width), Slot("canvasHeight", height))


FLOW_CODEC = SlotCodec(
    ArtworkType.FLOW,
    (
        *_names(
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
        ),
        *_canvas(630, 790),
        Slot("targetWidth", 800),
        Slot("targetHeight", 1000),
        *_names("color1", "color2", "color3", "color4", "color5"),
        *_EXPORT,
        Slot("isAnimating", True, flag=True),
        *_TAIL,
    ),
)

GRID_CODEC = SlotCodec(
    ArtworkType.GRID,
    (
        *_names(
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
        ),
        Slot("isAnimating", True, flag=True),
        *_canvas(630, 790),
        *_EXPORT,
        *_TAIL,
    ),
)

MOSAIC_CODEC = SlotCodec(
    ArtworkType.MOSAIC,
    (
        *_names(
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
        ),
        *_canvas(630, 790),
        *_EXPORT,
        *_TAIL,
    ),
)

ROTATED_CODEC = SlotCodec(
    ArtworkType.ROTATED,
    (
        *_names(
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
        ),
        *_canvas(630, 790),
        *_EXPORT,
        *_TAIL,
        Slot("isAnimating", True, flag=True),
    ),
)

# Text-layout fields travel as one nested sub-array.
_TREE_TEXT = Group(
    (
        Slot("textContent", ""),
        Slot("textEnabled", False, flag=True),
        Slot("fontSize", 24),
        Slot("textColor", "#333333"),
        Slot("textAlign", "center"),
        Slot("textX", 400),
        Slot("textY", 50),
        Slot("lineHeight", 1.5),
        Slot("fontFamily", "Georgia, serif"),
        Slot("fontUrl", ""),
        Slot("customFontFamily", ""),
    )
)

TREE_CODEC = SlotCodec(
    ArtworkType.TREE,
    (
        *_names(
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
        ),
        _TREE_TEXT,
        Slot("grainAmount", 0),
        *_canvas(400, 400),
        *_EXPORT,
        Slot("isAnimating", True, flag=True),
        *_TAIL,
    ),
)

LAMB_CODEC = SlotCodec(
    ArtworkType.LAMB,
    (
        *_names("cols", "rows"),
        Slot("wOff", 200),
        Slot("hOff", 200),
        Slot("noiseScale"),
        Slot("lifeStep", 0.005),
        Slot("weiRangeMax"),
        Slot("totalFrame", 1000),
        *_canvas(1200, 370),
        Slot("token"),
        Slot("isAnimating", True, flag=True),
    ),
)


def _layer(key: str) -> Group:
    return Group(
        (
            *_names(
                "text",
                "x",
                "y",
                "size",
                "alignment",
                "fill",
                "extrudeDepth",
                "extrudeX",
                "extrudeY",
                "extrudeStart",
                "extrudeEnd",
                "highlight",
            ),
            Slot("showHighlight", False, flag=True),
            *_names("outlineThickness", "outlineColor", "fontUrl"),
        ),
        key=key,
    )


_TOKEN_SLOT = 11
_DUPLICATE_LAYER_SLOT = 10


@dataclass
class TextCodec(SlotCodec):
    """Layered typography codec.

    Some issued tokens carry four layer arrays, the second one repeated, which
    pushes ``token`` and ``colorSeed`` one slot to the right. They are
    recognised because the token slot holds an array instead of a string and
    are upgraded to the current layout before decoding.
    """

    def decode(self, data: Sequence[Any], fallback_token: str) -> dict[str, Any]:
        if is_duplicate_layer_layout(data):
            data = upgrade_text_layout(data)
        return super().decode(data, fallback_token)


def is_duplicate_layer_layout(data: Any) -> bool:
    """Return ``True`` when ``data`` uses the four-layer text layout."""

    return (
        isinstance(data, list)
        and len(data) > _TOKEN_SLOT
        and isinstance(data[_TOKEN_SLOT], list)
    )


def upgrade_text_layout(data: Sequence[Any]) -> list[Any]:
    """Return a four-layer text array rearranged into the current layout.

    The repeated layer sits at slot 10 and is dropped.
    """

    items = list(data)
    del items[_DUPLICATE_LAYER_SLOT]
    return items


TEXT_CODEC = TextCodec(
    ArtworkType.TEXT,
    (
        Slot("backgroundColor"),
        Slot("grainAmount", 0),
        Slot("fontUrl", ""),
        Slot("customFontFamily", ""),
        *_canvas(630, 790),
        *_EXPORT,
        _layer("layer1"),
        _layer("layer2"),
        _layer("layer3"),
        *_TAIL,
    ),
)

CODECS: Mapping[ArtworkType, ParamCodec] = {
    ArtworkType.FLOW: FLOW_CODEC,
    ArtworkType.GRID: GRID_CODEC,
    ArtworkType.MOSAIC: MOSAIC_CODEC,
    ArtworkType.ROTATED: ROTATED_CODEC,
    ArtworkType.TREE: TREE_CODEC,
    ArtworkType.TEXT: TEXT_CODEC,
    ArtworkType.TEXTDESIGN: TEXT_CODEC,
    ArtworkType.LAMB: LAMB_CODEC,
}


def get_codec(artwork_type: ArtworkType) -> ParamCodec:
    """Return the registered codec for ``artwork_type``.

    Raises:
        UnknownFormatError: If no codec exists for the type.
    """

    codec = CODECS.get(artwork_type)
    if codec is None:
        raise UnknownFormatError(f"No v1 codec for artwork type '{artwork_type}'")
    return codec


__all__ = [
    "Slot",
    "Group",
    "ParamCodec",
    "SlotCodec",
    "TextCodec",
    "is_duplicate_layer_layout",
    "upgrade_text_layout",
    "CODECS",
    "get_codec",
]
