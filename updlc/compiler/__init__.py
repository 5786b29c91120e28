"""Public compiler entry points.

Generator tables and defaults live in the submodules; the classes below are
the stable API used by :class:`updlc.handler_manager.HandlerManager`.
"""

from updlc.compiler.components import ComponentCompiler
from updlc.compiler.entities import EntityCompiler
from updlc.compiler.helpers import random_id, sequential_ids
from updlc.compiler.scene import (
    ActionCompiler,
    DataCompiler,
    EventCompiler,
    LightCompiler,
    SpaceCompiler,
)

__all__ = [
    "ActionCompiler",
    "ComponentCompiler",
    "DataCompiler",
    "EntityCompiler",
    "EventCompiler",
    "LightCompiler",
    "SpaceCompiler",
    "random_id",
    "sequential_ids",
]
