from typing import Dict, FrozenSet

from updlc.game_model import ComponentType, EntityType, NetworkEntityType

NETWORKED_ENTITY_TYPES: FrozenSet[str] = frozenset(
    {"ship", "station", "player", "interactive", "vehicle"}
)

NETWORK_TYPE_BY_ENTITY_TYPE: Dict[str, NetworkEntityType] = {
    "ship": NetworkEntityType.SHIP,
    "player": NetworkEntityType.SHIP,
    "vehicle": NetworkEntityType.SHIP,
    "station": NetworkEntityType.STATION,
    "interactive": NetworkEntityType.STATION,
    "asteroid": NetworkEntityType.ASTEROID,
    "static": NetworkEntityType.ASTEROID,
    "gate": NetworkEntityType.GATE,
    "portal": NetworkEntityType.GATE,
}
DEFAULT_NETWORK_TYPE = NetworkEntityType.ASTEROID

DEFAULT_ENTITY_TYPE = EntityType.STATIC
DEFAULT_COMPONENT_TYPE = ComponentType.CUSTOM

DEFAULT_RESOURCE_TYPE = "asteroidMass"
DEFAULT_TARGET_WORLD = "konkordo"
DEFAULT_CURRENCY = "Inmo"

DEFAULT_SPAWN_POSITION = (0, 5, 10)
DEFAULT_LIGHT_POSITION = (0, 10, 0)

DEFAULT_SERVER_HOST = "localhost"
DEFAULT_SERVER_PORT = 2567
DEFAULT_ROOM_NAME = "mmoomm"
LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})


def entity_type_enum(value: str) -> EntityType:
    try:
        return EntityType(value)
    except ValueError:
        return DEFAULT_ENTITY_TYPE


def component_type_enum(value: str) -> ComponentType:
    try:
        return ComponentType(value)
    except ValueError:
        return DEFAULT_COMPONENT_TYPE


def network_type_for(entity_type: str) -> NetworkEntityType:
    return NETWORK_TYPE_BY_ENTITY_TYPE.get(entity_type, DEFAULT_NETWORK_TYPE)


def is_networked_type(entity_type: str) -> bool:
    return entity_type in NETWORKED_ENTITY_TYPES


__all__ = [
    "NETWORKED_ENTITY_TYPES",
    "NETWORK_TYPE_BY_ENTITY_TYPE",
    "DEFAULT_NETWORK_TYPE",
    "DEFAULT_ENTITY_TYPE",
    "DEFAULT_COMPONENT_TYPE",
    "DEFAULT_RESOURCE_TYPE",
    "DEFAULT_TARGET_WORLD",
    "DEFAULT_CURRENCY",
    "DEFAULT_SPAWN_POSITION",
    "DEFAULT_LIGHT_POSITION",
    "DEFAULT_SERVER_HOST",
    "DEFAULT_SERVER_PORT",
    "DEFAULT_ROOM_NAME",
    "LOCAL_HOSTS",
    "entity_type_enum",
    "component_type_enum",
    "network_type_for",
    "is_networked_type",
]
