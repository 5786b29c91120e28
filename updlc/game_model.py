from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from updlc.fields import lookup

try:
    from enum import StrEnum  # type: ignore[attr-defined]
except ImportError:  # pragma: no cover - Python < 3.11 fallback
    class StrEnum(str, Enum):
        pass


class EntityType(StrEnum):
    PLAYER = "player"
    INTERACTIVE = "interactive"
    VEHICLE = "vehicle"
    SHIP = "ship"
    STATION = "station"
    ASTEROID = "asteroid"
    GATE = "gate"
    STATIC = "static"


class ComponentType(StrEnum):
    PHYSICS = "physics"
    NETWORKING = "networking"
    AUDIO = "audio"
    RENDER = "render"
    CUSTOM = "custom"
    INVENTORY = "inventory"
    TRADING = "trading"
    MINEABLE = "mineable"
    PORTAL = "portal"
    WEAPON = "weapon"


class NetworkEntityType(StrEnum):
    SHIP = "ship"
    STATION = "station"
    ASTEROID = "asteroid"
    GATE = "gate"


class GameMode(StrEnum):
    SINGLEPLAYER = "singleplayer"
    MULTIPLAYER = "multiplayer"


@dataclass(frozen=True)
class Node:
    """A graph element: an optional id, a loosely-typed ``data`` bag and any
    other top-level keys the producer attached (spaces keep ``name`` etc.)."""

    id: Optional[str]
    data: Mapping[str, Any]
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_raw(cls, value: Any) -> "Node":
        if isinstance(value, Node):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Node must be a mapping, got {type(value).__name__}.")
        node_id = value.get("id")
        data = value.get("data")
        return cls(
            id=None if node_id is None else str(node_id),
            data=data if isinstance(data, Mapping) else {},
            raw=value,
        )

    def lookup(self, paths: Tuple[str, ...], default: Any = None) -> Any:
        return lookup(self.as_mapping(), paths, default)

    def as_mapping(self) -> Mapping[str, Any]:
        if self.raw:
            return self.raw
        return {"id": self.id, "data": self.data}


@dataclass(frozen=True)
class Vec3:
    x: float
    y: float
    z: float

    def as_list(self) -> list:
        return [self.x, self.y, self.z]

    def as_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}


DEFAULT_POSITION = Vec3(0, 0, 0)
DEFAULT_ROTATION = Vec3(0, 0, 0)
DEFAULT_SCALE = Vec3(1, 1, 1)


@dataclass(frozen=True)
class Transform:
    position: Vec3 = DEFAULT_POSITION
    rotation: Vec3 = DEFAULT_ROTATION
    scale: Vec3 = DEFAULT_SCALE


@dataclass(frozen=True)
class RGBColor:
    r: float
    g: float
    b: float


WHITE = RGBColor(1.0, 1.0, 1.0)


@dataclass(frozen=True)
class ExtractedNodes:
    spaces: Tuple[Node, ...] = ()
    entities: Tuple[Node, ...] = ()
    components: Tuple[Node, ...] = ()
    events: Tuple[Node, ...] = ()
    actions: Tuple[Node, ...] = ()
    data: Tuple[Node, ...] = ()
    universo: Tuple[Node, ...] = ()
    lights: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class BuildOptions:
    game_mode: GameMode = GameMode.SINGLEPLAYER


@dataclass(frozen=True)
class CompiledArtifact:
    id: str
    script: str
    data: Node
    transform: Optional[Transform] = None


@dataclass(frozen=True)
class ProcessedGameData:
    entities: Tuple[CompiledArtifact, ...] = ()
    spaces: Tuple[CompiledArtifact, ...] = ()
    components: Tuple[CompiledArtifact, ...] = ()
    actions: Tuple[CompiledArtifact, ...] = ()
    events: Tuple[CompiledArtifact, ...] = ()
    lights: Tuple[CompiledArtifact, ...] = ()
    data: Tuple[CompiledArtifact, ...] = ()


@dataclass(frozen=True)
class NetworkVisual:
    model: str = "box"
    texture: Optional[str] = None
    color: Any = "#ffffff"


@dataclass(frozen=True)
class NetworkEntity:
    id: str
    type: NetworkEntityType
    transform: Transform
    visual: NetworkVisual
    networked: bool
    components: Tuple[Any, ...]
    entity_type: str
    position: Vec3
    scale: Vec3


@dataclass(frozen=True)
class AuthScreenData:
    collect_name: Any = True
    title: str = "Enter MMOOMM Space"
    description: str = "Enter your name to join the multiplayer space"
    placeholder: str = "Enter your name..."


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int
    room_name: str
    protocol: str


@dataclass(frozen=True)
class MultiplayerGameData(ProcessedGameData):
    network_entities: Tuple[NetworkEntity, ...] = ()
    player_spawn_point: Transform = Transform(position=Vec3(0, 5, 10))
    auth_screen_data: AuthScreenData = AuthScreenData()
    server_config: Optional[ServerConfig] = None
