import logging
from typing import Iterable, List, Optional

from updlc.compiler.components import ComponentCompiler
from updlc.compiler.constants import entity_type_enum
from updlc.compiler.entity_types import ENTITY_BEHAVIORS
from updlc.compiler.helpers import IdGenerator, random_id
from updlc.fields import (
    ATTACHED_COMPONENT_PATHS,
    NETWORKED_PATHS,
    TRANSFORM_PATHS,
    coerce_bool,
    resolve_entity_type,
)
from updlc.game_model import BuildOptions, Node
from updlc.js_writer import ScriptWriter, js_comment, js_value, js_vec3_args
from updlc.normalize import normalize_transform

logger = logging.getLogger(__name__)

ENTITY_VAR = "entity"


class EntityCompiler:
    """Compiles entity nodes into self-invoking PlayCanvas script blocks.

    Block layout, in order: transform, optional network wiring, attached
    components, entity-type behavior, scene/registry bookkeeping. Attachments
    precede type behavior so component settings take precedence over type
    defaults.
    """

    def __init__(
        self,
        component_compiler: Optional[ComponentCompiler] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        self._id_generator = id_generator or random_id
        self._components = component_compiler or ComponentCompiler(self._id_generator)

    def process(self, entities: Iterable, options: Optional[BuildOptions] = None) -> str:
        return "\n".join(self.compile(entity, options) for entity in entities or ())

    def compile(self, entity, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(entity)
        entity_type = resolve_entity_type(node)
        behavior_type = entity_type_enum(entity_type)
        transform = normalize_transform(node.lookup(TRANSFORM_PATHS))
        networked = coerce_bool(node.lookup(NETWORKED_PATHS), False)
        entity_id = node.id or self._id_generator("entity")
        components = node.lookup(ATTACHED_COMPONENT_PATHS, ())
        if not isinstance(components, (list, tuple)):
            components = ()

        writer = ScriptWriter()
        writer.line(f"// Entity: {js_comment(entity_id)} ({behavior_type.value})")
        writer.line("(function() {")
        with writer.indent():
            writer.line(f"const {ENTITY_VAR} = new pc.Entity({js_value(entity_id)});")
            writer.line()
            writer.line("// Transform")
            writer.line(f"{ENTITY_VAR}.setLocalPosition({js_vec3_args(transform.position)});")
            writer.line(f"{ENTITY_VAR}.setLocalEulerAngles({js_vec3_args(transform.rotation)});")
            writer.line(f"{ENTITY_VAR}.setLocalScale({js_vec3_args(transform.scale)});")

            if networked:
                writer.line()
                writer.block(self._network_wiring(entity_id, entity_type))

            fragments = self._attachments(components)
            if fragments:
                writer.line()
                writer.line("// Attached components")
                for fragment in fragments:
                    writer.block(fragment)

            writer.line()
            writer.line(f"// Entity type: {behavior_type.value}")
            writer.block(ENTITY_BEHAVIORS[behavior_type](entity_id))

            writer.line()
            writer.block(self._registration(entity_id))
        writer.line("})();")
        return writer.render()

    def _attachments(self, components) -> List[str]:
        fragments = []
        for component in components:
            fragment = self._components.attach(component, ENTITY_VAR)
            if fragment:
                fragments.append(fragment)
        return fragments

    def _network_wiring(self, entity_id: str, entity_type: str) -> str:
        return f"""
        // Network synchronization
        {ENTITY_VAR}.networked = true;
        {ENTITY_VAR}.networkId = {js_value(entity_id)};
        {ENTITY_VAR}.entityType = {js_value(entity_type)};
        {ENTITY_VAR}.on('position:change', (pos) => {{
            if (runtime.gateway && runtime.gateway.isConnected) {{
                runtime.gateway.send({{
                    type: 'entity_update',
                    id: {js_value(entity_id)},
                    position: pos,
                    timestamp: Date.now()
                }});
            }}
        }});
        """

    def _registration(self, entity_id: str) -> str:
        return f"""
        // Scene and registry bookkeeping
        app.root.addChild({ENTITY_VAR});
        runtime.entities.set({js_value(entity_id)}, {ENTITY_VAR});
        {ENTITY_VAR}.once('destroy', () => {{
            if (runtime.entities.get({js_value(entity_id)}) === {ENTITY_VAR}) {{
                runtime.entities.delete({js_value(entity_id)});
            }}
        }});
        """
