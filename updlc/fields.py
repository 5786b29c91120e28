"""Ordered field resolution over loosely-typed node data.

Flow producers store the same field in several places (``data``,
``data.inputs``, ``data.properties``). Every field the compiler reads is
resolved through an explicit tuple of dotted paths, tried in order, so the
fallback order of each field is a named constant that tests can pin down.
"""

import json
import math
from typing import Any, Mapping, Tuple

ENTITY_TYPE_PATHS = ("data.entityType", "data.inputs.entityType")
COMPONENT_TYPE_PATHS = ("data.componentType", "data.inputs.componentType")
TRANSFORM_PATHS = ("data.transform", "data.inputs.transform")
NETWORKED_PATHS = ("data.networked",)
ATTACHED_COMPONENT_PATHS = ("data.components", "data.inputs.components")

# Relative to a component/entity ``data`` bag.
COLOR_SOURCE_PATHS = (
    "color",
    "props.color",
    "props.material.color",
    "properties.color",
    "inputs.color",
    "inputs.props.color",
    "inputs.props.material.color",
    "inputs.properties.color",
)

COMPONENT_FIELD_ROOTS = ("data", "data.inputs", "data.properties", "data.props")


def component_field_paths(key: str) -> Tuple[str, ...]:
    return tuple(f"{root}.{key}" for root in COMPONENT_FIELD_ROOTS)


TRADING_PRICE_PATHS = component_field_paths("pricePerTon")
TRADING_RANGE_PATHS = component_field_paths("interactionRange")


def first_defined(*candidates: Any, default: Any = None) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return default


def resolve_path(value: Any, path: str) -> Any:
    current = value
    for part in path.split("."):
        if isinstance(current, str):
            current = _decode_json_object(current)
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def lookup(value: Any, paths: Tuple[str, ...], default: Any = None) -> Any:
    return first_defined(*(resolve_path(value, path) for path in paths), default=default)


def _decode_json_object(text: str) -> Any:
    stripped = text.strip()
    if not stripped.startswith("{"):
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        return None


def coerce_number(value: Any, default: float, *, positive: bool = False) -> float:
    """Best-effort numeric coercion; ``default`` whenever the value is unusable."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
        if number.is_integer() and "." not in value and "e" not in value.lower():
            number = int(number)
    else:
        return default
    if isinstance(number, float) and not math.isfinite(number):
        return default
    if positive and number <= 0:
        return default
    return number


def coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return default


def coerce_text(value: Any, default: str) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return default
    text = str(value)
    return text if text else default


def resolve_entity_type(node: Any) -> str:
    value = lookup(_as_mapping(node), ENTITY_TYPE_PATHS)
    return coerce_text(value, "static").strip().lower() or "static"


def resolve_component_type(node: Any) -> str:
    value = lookup(_as_mapping(node), COMPONENT_TYPE_PATHS)
    return coerce_text(value, "custom").strip().lower() or "custom"


def _as_mapping(node: Any) -> Any:
    as_mapping = getattr(node, "as_mapping", None)
    if as_mapping is not None:
        return as_mapping()
    return node
