from updlc.compiler.attachments import ATTACHMENT_GENERATORS
from updlc.compiler.components import COMPONENT_GENERATORS, ComponentCompiler
from updlc.compiler.helpers import sequential_ids
from updlc.game_model import ComponentType


def component(component_id, component_type, **fields):
    data = {"componentType": component_type}
    data.update(fields)
    node = {"data": data}
    if component_id is not None:
        node["id"] = component_id
    return node


def test_generator_tables_cover_component_types():
    assert set(COMPONENT_GENERATORS) == set(ComponentType)
    assert set(ATTACHMENT_GENERATORS) == {
        ComponentType.RENDER,
        ComponentType.INVENTORY,
        ComponentType.TRADING,
        ComponentType.MINEABLE,
        ComponentType.PORTAL,
        ComponentType.WEAPON,
    }


def test_empty_component_list_gives_empty_script():
    assert ComponentCompiler().process([]) == ""


def test_creation_block_exposes_component_data():
    script = ComponentCompiler().process(
        [component("m1", "mineable", targetEntity="rock-1", resourceType="ore", maxYield=5)]
    )
    assert script.startswith("// Component: m1 (mineable)\n(function() {")
    assert 'id: "m1",' in script
    assert 'type: "mineable",' in script
    assert 'targetEntity: "rock-1",' in script
    assert 'resourceType: "ore",' in script
    assert "maxYield: 5," in script
    assert "hardness: 1," in script
    assert "component.applyToEntity(target);" in script


def test_component_type_is_case_insensitive_and_defaults_to_custom():
    compiler = ComponentCompiler()
    assert "// Component: r1 (render)" in compiler.process([component("r1", "Render")])
    assert "// Component: x1 (custom)" in compiler.process([component("x1", "laser")])
    assert "// Component: y1 (custom)" in compiler.process([{"id": "y1", "data": {}}])


def test_components_without_target_are_not_applied():
    script = ComponentCompiler().process([component("p1", "physics", mass=3)])
    assert "targetEntity: null," in script
    assert "mass: 3," in script
    assert "friction: 0.5," in script


def test_generators_read_inputs_properties_and_props():
    compiler = ComponentCompiler()
    script = compiler.attach(
        {
            "id": "t1",
            "data": {
                "componentType": "trading",
                "properties": {"pricePerTon": 25},
                "inputs": {"acceptedItems": "ore, ice"},
                "props": {"interactionRange": -5},
            },
        },
        "entity",
    )
    assert "pricePerTon: 25," in script
    assert "interactionRange: 15," in script
    assert 'acceptedItems: ["ore", "ice"],' in script
    assert 'currency: "Inmo",' in script


def test_attachment_defaults():
    compiler = ComponentCompiler()
    inventory = compiler.attach(component("i1", "inventory"), "entity")
    assert "maxCapacity: 20," in inventory
    assert "currentLoad: 0," in inventory

    portal = compiler.attach(component("g1", "portal"), "entity")
    assert 'targetWorld: "konkordo",' in portal
    assert "cooldownTime: 2000," in portal
    assert "(now - this.lastUsed) > this.cooldownTime" in portal

    weapon = compiler.attach(component("w1", "weapon", fireRate="0"), "entity")
    assert "fireRate: 2," in weapon
    assert "projectileSpeed: 50," in weapon
    assert "range: 100," in weapon


def test_attach_returns_empty_for_types_without_attachment():
    compiler = ComponentCompiler()
    assert compiler.attach(component("p1", "physics"), "entity") == ""
    assert compiler.attach(component("a1", "audio"), "entity") == ""
    assert compiler.attach(component("c1", "custom"), "entity") == ""


def test_attach_skips_entries_that_are_not_nodes():
    compiler = ComponentCompiler()
    assert compiler.attach("r1", "entity") == ""
    assert compiler.attach(None, "entity") == ""
    assert compiler.attach(["render"], "entity") == ""


def test_render_attachment_reads_properties_color():
    script = ComponentCompiler().attach(
        {"id": "r1", "data": {"componentType": "render", "properties": {"primitive": "sphere", "color": "#00ff00"}}},
        "entity",
    )
    assert "type: \"sphere\"" in script
    assert "material.diffuse.set(0, 1, 0);" in script


def test_attachment_targets_given_variable_in_a_scoped_block():
    script = ComponentCompiler().attach(component("r1", "render", color="#ff0000"), "ship")
    assert script.startswith("// Render component r1\n{")
    assert script.endswith("}")
    assert "if (!ship.model) {" in script
    assert "material.diffuse.set(1, 0, 0);" in script
    assert "ship.hasCustomMaterial = true;" in script


def test_mineable_destroys_once():
    script = ComponentCompiler().attach(component("m1", "mineable"), "entity")
    assert "if (this.isDestroyed) return false;" in script
    assert "if (this.currentYield <= 0) {" in script
    assert "if (this.isDestroyed) return;" in script
    assert "'resource_depleted'" in script


def test_missing_ids_use_injected_generator():
    compiler = ComponentCompiler(sequential_ids())
    script = compiler.process([component(None, "audio"), component(None, "audio")])
    assert "// Component: component_1 (audio)" in script
    assert "// Component: component_2 (audio)" in script


def test_ids_are_emitted_as_string_literals():
    script = ComponentCompiler().process([component('evil"); alert(1); ("', "custom")])
    assert 'id: "evil\\"); alert(1); (\\"",' in script
