"""Text building for generated PlayCanvas scripts.

Every value interpolated into generated text goes through :func:`js_value`
(a JSON literal) or :func:`js_number`; generated variable names go through
:func:`js_identifier`. Node ids are therefore always emitted as quoted string
literals, never spliced raw into code.
"""

import json
import math
import re
import textwrap
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List

from updlc.errors import ScriptValueError

INDENT = "    "

RUNTIME_CONTRACT = """\
// Host-provided names referenced by generated scripts:
//   app      - application; entities are added to app.root
//   pc       - engine API (pc.Entity, pc.Color, pc.Vec3, pc.StandardMaterial, ...)
//   runtime  - runtime context:
//     entities : Map<string, Entity>      entity registry (set on create, deleted on destroy)
//     events?  : { on(name, fn), emit(name, payload) }
//     gateway? : { isConnected: boolean, send(message) }
//     actions? : Map<string, (ctx) => void>
//     data?    : Map<string, { value, scope, sync }>
//     components? : Map<string, { data, behavior }>
//     now?     : () => number              clock in ms, defaults to Date.now
"""

_UNSAFE_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_$]")


def js_value(value: Any) -> str:
    try:
        text = json.dumps(value, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ScriptValueError(
            f"Cannot embed value of type {type(value).__name__} in script: {exc}"
        ) from exc
    return (
        text.replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def js_number(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScriptValueError(f"Expected a number, got {type(value).__name__}.")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ScriptValueError(f"Cannot embed non-finite number {value!r}.")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def js_bool(value: bool) -> str:
    return "true" if value else "false"


def js_identifier(text: Any) -> str:
    ident = _UNSAFE_IDENTIFIER_CHARS.sub("_", str(text))
    if not ident or ident[0].isdigit():
        ident = f"_{ident}"
    return ident


def js_vec3_args(vec) -> str:
    return f"{js_number(vec.x)}, {js_number(vec.y)}, {js_number(vec.z)}"


class ScriptWriter:
    """Indented line builder; :meth:`render` joins lines with ``\\n``."""

    def __init__(self, level: int = 0):
        self._lines: List[str] = []
        self._level = level

    def line(self, text: str = "") -> "ScriptWriter":
        self._lines.append(f"{INDENT * self._level}{text}" if text else "")
        return self

    def lines(self, texts: Iterable[str]) -> "ScriptWriter":
        for text in texts:
            self.line(text)
        return self

    def block(self, text: str) -> "ScriptWriter":
        """Append a multi-line snippet, dedented and re-indented to the
        current level. Blank leading/trailing lines are dropped."""
        snippet = textwrap.dedent(text).strip("\n")
        if not snippet:
            return self
        return self.lines(snippet.split("\n"))

    @contextmanager
    def indent(self) -> Iterator["ScriptWriter"]:
        self._level += 1
        try:
            yield self
        finally:
            self._level -= 1

    def render(self) -> str:
        return "\n".join(line.rstrip() for line in self._lines)


def iife(body: str, *, header: str = "") -> str:
    """Wrap ``body`` in a self-invoking function block."""
    writer = ScriptWriter()
    if header:
        writer.line(header)
    writer.line("(function() {")
    with writer.indent():
        writer.block(body)
    writer.line("})();")
    return writer.render()


def js_comment(text: Any) -> str:
    """Single-line ``//`` comment text; line breaks are flattened."""
    return " ".join(str(text).split())
