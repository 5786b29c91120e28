import logging
from typing import Any, Dict, List, Mapping, Optional

from updlc.game_model import ExtractedNodes, Node

logger = logging.getLogger(__name__)

# ExtractedNodes field -> key inside a space.
SPACE_NODE_LISTS = (
    ("entities", "entities"),
    ("components", "components"),
    ("events", "events"),
    ("actions", "actions"),
    ("data", "datas"),
    ("universo", "universo"),
)


class NodeExtractor:
    """Walk single-space and multi-scene flows into categorized node lists."""

    def extract(self, flow_data: Optional[Mapping[str, Any]]) -> ExtractedNodes:
        try:
            return self._extract(flow_data)
        except Exception:
            logger.exception("Failed to extract nodes from flow data; using an empty scene.")
            return ExtractedNodes()

    def _extract(self, flow_data: Optional[Mapping[str, Any]]) -> ExtractedNodes:
        buckets: Dict[str, List[Node]] = {
            name: [] for name in ("spaces", "lights", *(field for field, _ in SPACE_NODE_LISTS))
        }
        if flow_data is None:
            return ExtractedNodes()
        if not isinstance(flow_data, Mapping):
            raise TypeError(f"Flow data must be a mapping, got {type(flow_data).__name__}.")

        multi_scene = flow_data.get("multiScene")
        scenes = multi_scene.get("scenes") if isinstance(multi_scene, Mapping) else None
        if scenes:
            logger.debug("Extracting multi-scene flow with %d scenes", len(scenes))
            for scene in scenes:
                space = scene.get("spaceData") if isinstance(scene, Mapping) else None
                if space:
                    self._collect_space(space, buckets)

        single_space = flow_data.get("updlSpace")
        if single_space:
            logger.debug("Extracting single-space flow")
            self._collect_space(single_space, buckets)

        nodes = ExtractedNodes(**{name: tuple(items) for name, items in buckets.items()})
        logger.debug(
            "Extracted nodes: spaces=%d entities=%d components=%d events=%d "
            "actions=%d data=%d universo=%d lights=%d",
            len(nodes.spaces),
            len(nodes.entities),
            len(nodes.components),
            len(nodes.events),
            len(nodes.actions),
            len(nodes.data),
            len(nodes.universo),
            len(nodes.lights),
        )
        return nodes

    def _collect_space(self, space: Mapping[str, Any], buckets: Dict[str, List[Node]]) -> None:
        if not isinstance(space, Mapping):
            raise TypeError(f"Space must be a mapping, got {type(space).__name__}.")
        buckets["spaces"].append(Node.from_raw(space))
        for field, key in SPACE_NODE_LISTS:
            items = space.get(key)
            if items:
                buckets[field].extend(Node.from_raw(item) for item in items)

        lights = space.get("lights")
        if lights:
            if isinstance(lights, Mapping):
                lights = [lights]
            buckets["lights"].extend(Node.from_raw(light) for light in lights)
