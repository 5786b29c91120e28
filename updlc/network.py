"""Adapt entity nodes into the network wire shape used by the room server."""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from updlc.compiler.constants import is_networked_type, network_type_for
from updlc.compiler.helpers import IdGenerator, random_id
from updlc.fields import (
    ATTACHED_COMPONENT_PATHS,
    coerce_text,
    first_defined,
    resolve_component_type,
    resolve_entity_type,
)
from updlc.game_model import ComponentType, NetworkEntity, NetworkVisual, Node, Transform
from updlc.normalize import normalize_transform, select_color_source

logger = logging.getLogger(__name__)

DEFAULT_VISUAL_COLOR = "#ffffff"
DEFAULT_VISUAL_MODEL = "box"


def adapt_entities_for_network(
    entities: Iterable, id_generator: Optional[IdGenerator] = None
) -> Tuple[NetworkEntity, ...]:
    id_generator = id_generator or random_id
    adapted = tuple(adapt_entity(entity, id_generator) for entity in entities or ())
    logger.debug(
        "Adapted %d network entities (%d networked)",
        len(adapted),
        sum(1 for item in adapted if item.networked),
    )
    return adapted


def adapt_entity(entity, id_generator: IdGenerator) -> NetworkEntity:
    node = Node.from_raw(entity)
    entity_type = resolve_entity_type(node)
    transform = _network_transform(node)
    components = node.lookup(ATTACHED_COMPONENT_PATHS, ())
    if not isinstance(components, (list, tuple)):
        components = ()
    visual = NetworkVisual(
        model=coerce_text(node.lookup(("data.model", "data.inputs.model")), DEFAULT_VISUAL_MODEL),
        texture=coerce_text(node.lookup(("data.texture", "data.inputs.texture")), "") or None,
        color=_visual_color(node, components),
    )
    return NetworkEntity(
        id=node.id or id_generator("entity"),
        type=network_type_for(entity_type),
        transform=transform,
        visual=visual,
        networked=is_networked_type(entity_type),
        components=tuple(components),
        entity_type=entity_type,
        position=transform.position,
        scale=transform.scale,
    )


def _network_transform(node: Node) -> Transform:
    primary = node.lookup(("data.transform",))
    if isinstance(primary, Mapping) and first_defined(primary.get("position"), primary.get("pos")) is not None:
        return normalize_transform(primary)
    return normalize_transform(node.lookup(("data.inputs.transform",), primary))


def _visual_color(node: Node, components) -> Any:
    own = node.lookup(("data.color", "data.inputs.color"))
    if own is not None:
        return own
    for component in components:
        if not isinstance(component, Mapping):
            continue
        if resolve_component_type(component) != ComponentType.RENDER.value:
            continue
        source = select_color_source(component.get("data") or {})
        if source is not None:
            return source
        break
    return DEFAULT_VISUAL_COLOR


def network_entity_to_dict(entity: NetworkEntity) -> Dict[str, Any]:
    transform = transform_to_dict(entity.transform)
    return {
        "id": entity.id,
        "type": entity.type.value,
        "transform": transform,
        "visual": {
            "model": entity.visual.model,
            "texture": entity.visual.texture,
            "color": entity.visual.color,
        },
        "networked": entity.networked,
        "components": list(entity.components),
        "entityType": entity.entity_type,
        "position": entity.position.as_dict(),
        "scale": entity.scale.as_dict(),
    }


def transform_to_dict(transform: Transform) -> Dict[str, Any]:
    return {
        "position": transform.position.as_list(),
        "rotation": transform.rotation.as_list(),
        "scale": transform.scale.as_list(),
    }
