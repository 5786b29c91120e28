import uuid
from typing import Any, Callable, List, Mapping

from updlc.fields import (
    coerce_bool,
    coerce_number,
    coerce_text,
    component_field_paths,
    lookup,
)
from updlc.game_model import Node

IdGenerator = Callable[[str], str]


def random_id(prefix: str) -> str:
    """Non-deterministic fallback id, e.g. ``entity_3f9a0c1b2``."""
    return f"{prefix}_{uuid.uuid4().hex[:9]}"


def sequential_ids(start: int = 1) -> IdGenerator:
    """Deterministic id generator: ``entity_1``, ``entity_2``, ..."""
    counter = [start - 1]

    def _next(prefix: str) -> str:
        counter[0] += 1
        return f"{prefix}_{counter[0]}"

    return _next


class ComponentParams:
    """Reads component fields from ``data``, ``data.inputs``,
    ``data.properties`` and ``data.props``, in that order. Never raises."""

    def __init__(self, node: Node):
        self._source = node.as_mapping()

    def raw(self, key: str) -> Any:
        return lookup(self._source, component_field_paths(key))

    def raw_from(self, paths) -> Any:
        return lookup(self._source, tuple(paths))

    def number(self, key: str, default: float, *, positive: bool = False) -> float:
        return coerce_number(self.raw(key), default, positive=positive)

    def number_from(self, paths, default: float, *, positive: bool = False) -> float:
        return coerce_number(self.raw_from(paths), default, positive=positive)

    def text(self, key: str, default: str) -> str:
        return coerce_text(self.raw(key), default)

    def flag(self, key: str, default: bool) -> bool:
        return coerce_bool(self.raw(key), default)

    def mapping(self, key: str) -> Mapping[str, Any]:
        value = self.raw(key)
        return value if isinstance(value, Mapping) else {}

    def string_list(self, key: str, default: List[str]) -> List[str]:
        value = self.raw(key)
        if isinstance(value, str):
            items = [part.strip() for part in value.split(",") if part.strip()]
            return items or list(default)
        if isinstance(value, (list, tuple)):
            items = [str(item) for item in value if item is not None]
            return items or list(default)
        return list(default)
