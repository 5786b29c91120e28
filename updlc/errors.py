import contextvars
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple


_CURRENT_NODE: contextvars.ContextVar[Optional[Tuple[str, Optional[str]]]] = (
    contextvars.ContextVar("updlc_current_node", default=None)
)


def format_diagnostic(message: str) -> str:
    """Attach the category/id of the node being compiled, when known."""
    current = _CURRENT_NODE.get()
    if current is None:
        return message
    category, node_id = current
    return f"{message}\nNode: {category} {node_id or '<no id>'!r}"


@contextmanager
def compile_context(category: str, node_id: Optional[str]) -> Iterator[None]:
    token = _CURRENT_NODE.set((category, node_id))
    try:
        yield
    finally:
        _CURRENT_NODE.reset(token)


class UPDLError(Exception):
    """Base compiler error."""


class ConfigError(UPDLError):
    """Raised when compiler configuration is invalid."""


class ScriptValueError(UPDLError):
    """Raised when a value cannot be embedded into generated script text."""

    def __init__(self, message: str):
        super().__init__(format_diagnostic(message))
