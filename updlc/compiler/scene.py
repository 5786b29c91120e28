"""Scene-level peer compilers: spaces, lights, events, actions and data nodes.

All share one contract: ``process(nodes, options) -> str`` joins the
per-node output of ``process_one(node, options)``.
"""

from typing import Any, Iterable, Optional

from updlc.compiler.constants import DEFAULT_LIGHT_POSITION
from updlc.compiler.helpers import IdGenerator, random_id
from updlc.fields import coerce_bool, coerce_number, coerce_text, lookup
from updlc.game_model import BuildOptions, Node, Vec3
from updlc.js_writer import (
    ScriptWriter,
    iife,
    js_bool,
    js_comment,
    js_number,
    js_value,
    js_vec3_args,
)
from updlc.normalize import normalize_color, normalize_vec3

LIGHT_TYPES = {"directional", "point", "spot"}
ACTION_TYPES = {"teleport", "move", "destroy", "spawn", "log", "custom"}


def _field(node: Node, key: str) -> Any:
    return node.lookup((f"data.{key}", f"data.inputs.{key}", key))


class _PeerCompiler:
    category = "node"

    def __init__(self, id_generator: Optional[IdGenerator] = None):
        self._id_generator = id_generator or random_id

    def process(self, nodes: Iterable, options: Optional[BuildOptions] = None) -> str:
        return "\n".join(self.process_one(node, options) for node in nodes or ())

    def process_one(self, node, options: Optional[BuildOptions] = None) -> str:
        raise NotImplementedError

    def _node_id(self, node: Node) -> str:
        return node.id or self._id_generator(self.category)


class SpaceCompiler(_PeerCompiler):
    category = "space"

    def process(self, space, options: Optional[BuildOptions] = None) -> str:
        if space is None:
            return ""
        return self.process_one(space, options)

    def process_one(self, space, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(space)
        space_id = self._node_id(node)
        name = coerce_text(_field(node, "name"), "")
        description = coerce_text(_field(node, "description"), "")
        background = _field(node, "backgroundColor")
        ambient = _field(node, "ambientColor")

        writer = ScriptWriter()
        writer.line("runtime.space = {")
        with writer.indent():
            writer.line(f"id: {js_value(space_id)},")
            writer.line(f"name: {js_value(name)},")
            writer.line(f"description: {js_value(description)}")
        writer.line("};")
        if ambient is not None:
            color = normalize_color(ambient)
            writer.line(
                f"app.scene.ambientLight = new pc.Color({js_number(color.r)}, "
                f"{js_number(color.g)}, {js_number(color.b)});"
            )
        if background is not None:
            color = normalize_color(background)
            writer.line(
                f"runtime.clearColor = new pc.Color({js_number(color.r)}, "
                f"{js_number(color.g)}, {js_number(color.b)});"
            )
        gravity = _field(node, "gravity")
        if gravity is not None:
            vec = normalize_vec3(gravity, Vec3(0, -9.81, 0))
            writer.line("if (app.systems && app.systems.rigidbody) {")
            writer.line(f"    app.systems.rigidbody.gravity.set({js_vec3_args(vec)});")
            writer.line("}")
        return iife(writer.render(), header=f"// Space: {js_comment(space_id)}")


class LightCompiler(_PeerCompiler):
    category = "light"

    def process_one(self, light, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(light)
        light_id = self._node_id(node)
        light_type = coerce_text(
            node.lookup(("data.lightType", "data.inputs.lightType", "data.type", "type")),
            "directional",
        ).lower()
        if light_type not in LIGHT_TYPES:
            light_type = "directional"
        color = normalize_color(_field(node, "color"))
        intensity = coerce_number(_field(node, "intensity"), 1)
        light_range = coerce_number(_field(node, "distance"), 10, positive=True)
        position = normalize_vec3(_field(node, "position"), Vec3(*DEFAULT_LIGHT_POSITION))
        rotation = normalize_vec3(_field(node, "rotation"), Vec3(0, 0, 0))

        body = f"""
        const light = new pc.Entity({js_value(light_id)});
        light.addComponent('light', {{
            type: {js_value(light_type)},
            color: new pc.Color({js_number(color.r)}, {js_number(color.g)}, {js_number(color.b)}),
            intensity: {js_number(intensity)},
            range: {js_number(light_range)}
        }});
        light.setLocalPosition({js_vec3_args(position)});
        light.setLocalEulerAngles({js_vec3_args(rotation)});
        app.root.addChild(light);
        """
        return iife(body, header=f"// Light: {js_comment(light_id)} ({light_type})")


class EventCompiler(_PeerCompiler):
    category = "event"

    def process_one(self, event, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(event)
        event_id = self._node_id(node)
        event_type = coerce_text(_field(node, "eventType"), "click")
        source = coerce_text(_field(node, "source"), "") or None
        actions = _field(node, "actions")
        action_ids = []
        for item in actions if isinstance(actions, (list, tuple)) else ():
            action_id = item.get("id") if isinstance(item, dict) else item
            if action_id is not None:
                action_ids.append(str(action_id))

        body = f"""
        const eventData = {{
            id: {js_value(event_id)},
            type: {js_value(event_type)},
            source: {js_value(source)},
            actions: {js_value(action_ids)}
        }};
        if (runtime.events) {{
            runtime.events.on(eventData.type, (payload) => {{
                if (eventData.source && payload && payload.source !== eventData.source) return;
                eventData.actions.forEach((actionId) => {{
                    const action = runtime.actions && runtime.actions.get(actionId);
                    if (action) action(payload || {{}});
                }});
            }});
        }}
        """
        return iife(body, header=f"// Event: {js_comment(event_id)} ({js_comment(event_type)})")


class ActionCompiler(_PeerCompiler):
    category = "action"

    def process_one(self, action, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(action)
        action_id = self._node_id(node)
        action_type = coerce_text(_field(node, "actionType"), "custom").lower()
        if action_type not in ACTION_TYPES:
            action_type = "custom"
        target = coerce_text(_field(node, "target"), "") or None
        params = node.lookup(
            ("data.params", "data.parameters", "data.inputs.params", "data.inputs.parameters"), {}
        )
        if not isinstance(params, dict):
            params = {}

        body = f"""
        const actionData = {{
            id: {js_value(action_id)},
            type: {js_value(action_type)},
            target: {js_value(target)},
            params: {js_value(params)}
        }};
        {_ACTION_BODIES[action_type]}
        if (runtime.actions) {{
            runtime.actions.set(actionData.id, run);
        }}
        """
        return iife(body, header=f"// Action: {js_comment(action_id)} ({action_type})")


_TARGET_LOOKUP = "const target = actionData.target && runtime.entities.get(actionData.target);"

_ACTION_BODIES = {
    "teleport": f"""function run(ctx) {{
            {_TARGET_LOOKUP}
            if (!target) return false;
            const p = actionData.params;
            target.setPosition(p.x || 0, p.y || 0, p.z || 0);
            return true;
        }}""",
    "move": f"""function run(ctx) {{
            {_TARGET_LOOKUP}
            if (!target) return false;
            const p = actionData.params;
            target.translate(p.x || 0, p.y || 0, p.z || 0);
            return true;
        }}""",
    "destroy": f"""function run(ctx) {{
            {_TARGET_LOOKUP}
            if (!target) return false;
            target.destroy();
            return true;
        }}""",
    "spawn": """function run(ctx) {
            const spawned = new pc.Entity(actionData.params.name || actionData.id + '_spawn');
            spawned.addComponent('model', { type: actionData.params.primitive || 'box' });
            spawned.setPosition(actionData.params.x || 0, actionData.params.y || 0, actionData.params.z || 0);
            app.root.addChild(spawned);
            return true;
        }""",
    "log": """function run(ctx) {
            console.log('[Action]', actionData.id, actionData.params.message || '', ctx);
            return true;
        }""",
    "custom": """function run(ctx) {
            if (runtime.events) runtime.events.emit('custom_action', { action: actionData, context: ctx });
            return true;
        }""",
}


class DataCompiler(_PeerCompiler):
    category = "data"

    def process_one(self, data_node, options: Optional[BuildOptions] = None) -> str:
        node = Node.from_raw(data_node)
        data_id = self._node_id(node)
        key = coerce_text(_field(node, "key"), data_id)
        value = lookup(node.as_mapping(), ("data.value", "data.inputs.value"))
        scope = coerce_text(_field(node, "scope"), "local")
        sync = coerce_bool(_field(node, "sync"), False)

        body = f"""
        if (runtime.data) {{
            runtime.data.set({js_value(key)}, {{
                value: {js_value(value)},
                scope: {js_value(scope)},
                sync: {js_bool(sync)}
            }});
        }}
        """
        return iife(body, header=f"// Data: {js_comment(data_id)} ({js_comment(key)})")
