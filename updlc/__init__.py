"""Public Python API for updlc.

The package compiles UPDL flows (loosely-typed scene graphs) into PlayCanvas
scene scripts for single-player and multiplayer builds. Compiler internals
live in ``updlc.compiler``.
"""

from importlib.metadata import PackageNotFoundError, version

from updlc.compiler import sequential_ids
from updlc.config import CompilerConfig, MultiplayerConfig
from updlc.errors import ConfigError, ScriptValueError, UPDLError
from updlc.exporter import (
    assemble_bundle,
    compile_flow,
    export_flow,
    game_data_to_dict,
    load_flow,
)
from updlc.extractor import NodeExtractor
from updlc.game_model import GameMode, MultiplayerGameData, ProcessedGameData
from updlc.handler_manager import HandlerManager

try:
    __version__: str = version("updlc")
except PackageNotFoundError:  # pragma: no cover - editable local fallback
    __version__ = "0.1.0"


def about(*, print_output: bool = True) -> str:
    """Return and optionally print the generated-script contract.

    Args:
        print_output: Whether to print the returned summary.

    Returns:
        Human-readable summary string.

    Example:
        >>> from updlc import about
        >>> "runtime.entities" in about(print_output=False)
        True
    """
    text = (
        f"updlc {__version__}\n"
        "Output: self-invoking script blocks run inside runScene(app, pc, runtime).\n"
        "Registry: entities are registered in runtime.entities and removed on destroy.\n"
        "Order: spaces -> lights -> entities -> components -> events -> actions -> data.\n"
        "Entities: transform -> network wiring -> attached components -> type behavior.\n"
        "Modes: multiplayer output extends the single-player result with network entities."
    )
    if print_output:
        print(text)
    return text


__all__ = [
    "__version__",
    "about",
    "CompilerConfig",
    "ConfigError",
    "GameMode",
    "HandlerManager",
    "MultiplayerConfig",
    "MultiplayerGameData",
    "NodeExtractor",
    "ProcessedGameData",
    "ScriptValueError",
    "UPDLError",
    "assemble_bundle",
    "compile_flow",
    "export_flow",
    "game_data_to_dict",
    "load_flow",
    "sequential_ids",
]
