import logging
from typing import Callable, Dict, Iterable, Mapping, Optional

from updlc.compiler.attachments import ATTACHMENT_GENERATORS
from updlc.compiler.constants import component_type_enum
from updlc.compiler.helpers import ComponentParams, IdGenerator, random_id
from updlc.fields import resolve_component_type
from updlc.game_model import BuildOptions, ComponentType, Node
from updlc.js_writer import ScriptWriter, js_bool, js_comment, js_identifier, js_number, js_value

logger = logging.getLogger(__name__)

CreationGenerator = Callable[[str, ComponentParams], str]

# Local name each creation generator binds its component object to.
COMPONENT_VAR = "component"


def physics_component(component_id: str, params: ComponentParams) -> str:
    mass = params.number("mass", 1)
    friction = params.number("friction", 0.5)
    restitution = params.number("restitution", 0.3)
    return f"""
    const {COMPONENT_VAR} = {{
        mass: {js_number(mass)},
        friction: {js_number(friction)},
        restitution: {js_number(restitution)},

        applyToEntity(entity) {{
            if (!entity.collision) {{
                entity.addComponent('collision', {{ type: 'box' }});
            }}
            if (!entity.rigidbody) {{
                entity.addComponent('rigidbody', {{
                    type: pc.BODYTYPE_DYNAMIC,
                    mass: this.mass,
                    friction: this.friction,
                    restitution: this.restitution
                }});
            }}
        }}
    }};
    """


def networking_component(component_id: str, params: ComponentParams) -> str:
    sync_rate = params.number("syncRate", 20, positive=True)
    sync_position = params.flag("syncPosition", True)
    sync_rotation = params.flag("syncRotation", True)
    return f"""
    const {COMPONENT_VAR} = {{
        syncRate: {js_number(sync_rate)},
        syncPosition: {js_bool(sync_position)},
        syncRotation: {js_bool(sync_rotation)},

        applyToEntity(entity) {{
            const settings = this;
            entity.networking = {{
                lastSync: 0,

                sync() {{
                    const now = runtime.now ? runtime.now() : Date.now();
                    if (now - this.lastSync < 1000 / settings.syncRate) return false;
                    this.lastSync = now;
                    if (!runtime.gateway || !runtime.gateway.isConnected) return false;
                    const message = {{ type: 'entity_sync', entityId: entity.name, timestamp: now }};
                    if (settings.syncPosition) message.position = entity.getLocalPosition();
                    if (settings.syncRotation) message.rotation = entity.getLocalEulerAngles();
                    runtime.gateway.send(message);
                    return true;
                }}
            }};
        }}
    }};
    """


def audio_component(component_id: str, params: ComponentParams) -> str:
    volume = params.number("volume", 1)
    loop = params.flag("loop", False)
    spatial = params.flag("spatial", True)
    return f"""
    const {COMPONENT_VAR} = {{
        volume: {js_number(volume)},
        loop: {js_bool(loop)},
        spatial: {js_bool(spatial)},

        applyToEntity(entity) {{
            if (entity.sound) return;
            entity.addComponent('sound', {{
                volume: this.volume,
                positional: this.spatial,
                distanceModel: pc.DISTANCE_EXPONENTIAL
            }});
            entity.soundLoop = this.loop;
        }}
    }};
    """


def custom_component(component_id: str, params: ComponentParams) -> str:
    properties = params.mapping("properties")
    return f"""
    const {COMPONENT_VAR} = {{
        properties: {js_value(dict(properties))},

        applyToEntity(entity) {{
            entity.customComponents = entity.customComponents || {{}};
            entity.customComponents[{js_value(component_id)}] = this.properties;
        }}
    }};
    """


def _attachment_backed(component_type: ComponentType) -> CreationGenerator:
    attach = ATTACHMENT_GENERATORS[component_type]

    def generate(component_id: str, params: ComponentParams) -> str:
        writer = ScriptWriter()
        writer.line(f"const {COMPONENT_VAR} = {{")
        with writer.indent():
            writer.line(f"type: {js_value(component_type.value)},")
            writer.line("applyToEntity(entity) {")
            with writer.indent():
                writer.block(attach(component_id, params, "entity"))
            writer.line("}")
        writer.line("};")
        return writer.render()

    generate.__name__ = f"{component_type.value}_component"
    return generate


COMPONENT_GENERATORS: Dict[ComponentType, CreationGenerator] = {
    ComponentType.PHYSICS: physics_component,
    ComponentType.NETWORKING: networking_component,
    ComponentType.AUDIO: audio_component,
    ComponentType.RENDER: _attachment_backed(ComponentType.RENDER),
    ComponentType.CUSTOM: custom_component,
    ComponentType.INVENTORY: _attachment_backed(ComponentType.INVENTORY),
    ComponentType.TRADING: _attachment_backed(ComponentType.TRADING),
    ComponentType.MINEABLE: _attachment_backed(ComponentType.MINEABLE),
    ComponentType.PORTAL: _attachment_backed(ComponentType.PORTAL),
    ComponentType.WEAPON: _attachment_backed(ComponentType.WEAPON),
}


class ComponentCompiler:
    """Compiles component nodes into creation blocks and entity attachments.

    The creation table covers every :class:`ComponentType`; the attachment
    table only covers the types that can mutate an entity in place, so
    ``attach`` returns ``""`` for e.g. physics or audio components.
    """

    def __init__(self, id_generator: Optional[IdGenerator] = None):
        self._id_generator = id_generator or random_id

    def process(self, components: Iterable, options: Optional[BuildOptions] = None) -> str:
        blocks = [self._process_component(Node.from_raw(component)) for component in components or ()]
        return "\n".join(blocks)

    def attach(self, component, entity_var: str) -> str:
        if not isinstance(component, (Mapping, Node)):
            logger.debug("Skipping attached component that is not a node: %r", component)
            return ""
        node = Node.from_raw(component)
        component_type = component_type_enum(resolve_component_type(node))
        generator = ATTACHMENT_GENERATORS.get(component_type)
        if generator is None:
            logger.debug("No attachment for component %s of type %s", node.id, component_type.value)
            return ""
        component_id = node.id or self._id_generator("component")
        return generator(component_id, ComponentParams(node), js_identifier(entity_var))

    def _process_component(self, node: Node) -> str:
        component_type = component_type_enum(resolve_component_type(node))
        component_id = node.id or self._id_generator("component")
        params = ComponentParams(node)
        target_entity = params.text("targetEntity", "") or None
        properties = params.mapping("properties")

        writer = ScriptWriter()
        writer.line(f"// Component: {js_comment(component_id)} ({component_type.value})")
        writer.line("(function() {")
        with writer.indent():
            writer.line("const componentData = {")
            with writer.indent():
                writer.line(f"id: {js_value(component_id)},")
                writer.line(f"type: {js_value(component_type.value)},")
                writer.line(f"targetEntity: {js_value(target_entity)},")
                writer.line(f"properties: {js_value(dict(properties))}")
            writer.line("};")
            writer.block(COMPONENT_GENERATORS[component_type](component_id, params))
            writer.line("if (runtime.components) {")
            writer.line("    runtime.components.set(componentData.id, { data: componentData, behavior: component });")
            writer.line("}")
            writer.line("const target = componentData.targetEntity && runtime.entities.get(componentData.targetEntity);")
            writer.line("if (target) {")
            writer.line("    component.applyToEntity(target);")
            writer.line("}")
        writer.line("})();")
        return writer.render()
