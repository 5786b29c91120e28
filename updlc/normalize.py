"""Normalizers turning tolerant transform/color inputs into canonical values."""

import json
import re
from typing import Any, Mapping, Optional

from updlc.fields import COLOR_SOURCE_PATHS, coerce_number, first_defined, lookup
from updlc.game_model import (
    DEFAULT_POSITION,
    DEFAULT_ROTATION,
    DEFAULT_SCALE,
    WHITE,
    RGBColor,
    Transform,
    Vec3,
)

_HEX_SHORT_OR_LONG = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_HEX_WITH_ALPHA = re.compile(r"^#([0-9a-fA-F]{8})$")
_NUM = r"([-+]?(?:\d+\.?\d*|\.\d+))"
_RGB_FUNCTIONAL = re.compile(
    rf"^rgba?\(\s*{_NUM}\s*,\s*{_NUM}\s*,\s*{_NUM}\s*(?:,\s*{_NUM}\s*)?\)$",
    re.IGNORECASE,
)


def normalize_vec3(value: Any, default: Vec3) -> Vec3:
    if isinstance(value, (list, tuple)):
        axes = list(value[:3]) + [None] * (3 - min(len(value), 3))
        return Vec3(
            coerce_number(axes[0], default.x),
            coerce_number(axes[1], default.y),
            coerce_number(axes[2], default.z),
        )
    if isinstance(value, Mapping):
        return Vec3(
            coerce_number(value.get("x"), default.x),
            coerce_number(value.get("y"), default.y),
            coerce_number(value.get("z"), default.z),
        )
    return default


def normalize_transform(value: Any) -> Transform:
    """Normalize a transform given as JSON text, a mapping, or nothing.

    ``pos``/``position``, ``rot``/``rotation`` and ``scale`` are normalized
    independently; each may be an array of three or an ``{x, y, z}`` object.
    Unparseable text counts as absent. The result always holds three complete
    numeric triples.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = None
    if not isinstance(value, Mapping):
        return Transform()

    position = first_defined(value.get("pos"), value.get("position"))
    rotation = first_defined(value.get("rot"), value.get("rotation"))
    return Transform(
        position=normalize_vec3(position, DEFAULT_POSITION),
        rotation=normalize_vec3(rotation, DEFAULT_ROTATION),
        scale=normalize_vec3(value.get("scale"), DEFAULT_SCALE),
    )


def _clamp_unit(value: float) -> float:
    return float(min(1.0, max(0.0, value)))


def _parse_hex(value: Any) -> Optional[RGBColor]:
    if not isinstance(value, str):
        return None
    match = _HEX_SHORT_OR_LONG.match(value.strip())
    if match is None:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return _rgb_from_hex_digits(digits)


def _parse_hex_alpha_or_functional(value: Any) -> Optional[RGBColor]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    match = _HEX_WITH_ALPHA.match(text)
    if match is not None:
        return _rgb_from_hex_digits(match.group(1)[:6])
    match = _RGB_FUNCTIONAL.match(text)
    if match is not None:
        channels = [min(255.0, max(0.0, float(match.group(i)))) for i in (1, 2, 3)]
        return RGBColor(*(channel / 255.0 for channel in channels))
    return None


def _parse_rgb_object(value: Any) -> Optional[RGBColor]:
    if not isinstance(value, Mapping) or not all(key in value for key in ("r", "g", "b")):
        return None
    channels = [float(coerce_number(value.get(key), 0)) for key in ("r", "g", "b")]
    # One scale for the whole triple: any channel above 1 means 0-255.
    if any(channel > 1 for channel in channels):
        channels = [channel / 255.0 for channel in channels]
    return RGBColor(*(_clamp_unit(channel) for channel in channels))


def _rgb_from_hex_digits(digits: str) -> RGBColor:
    return RGBColor(
        int(digits[0:2], 16) / 255.0,
        int(digits[2:4], 16) / 255.0,
        int(digits[4:6], 16) / 255.0,
    )


COLOR_PARSERS = (
    _parse_hex,
    _parse_hex_alpha_or_functional,
    _parse_rgb_object,
)


def normalize_color(value: Any) -> RGBColor:
    """Parse a color; parsers run in :data:`COLOR_PARSERS` order, first hit wins."""
    for parser in COLOR_PARSERS:
        color = parser(value)
        if color is not None:
            return color
    return WHITE


def select_color_source(data: Any) -> Any:
    """Return the raw color value of a ``data`` bag, or ``None``."""
    return lookup(data, COLOR_SOURCE_PATHS)


def resolve_color(data: Any) -> RGBColor:
    return normalize_color(select_color_source(data))
