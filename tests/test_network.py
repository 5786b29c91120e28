from updlc.compiler.helpers import sequential_ids
from updlc.game_model import NetworkEntityType, Vec3
from updlc.network import adapt_entities_for_network, network_entity_to_dict


def adapt_one(entity):
    (adapted,) = adapt_entities_for_network([entity], sequential_ids())
    return adapted


def test_networked_flag_follows_entity_type():
    assert adapt_one({"id": "s", "data": {"entityType": "ship"}}).networked is True
    assert adapt_one({"id": "v", "data": {"entityType": "vehicle"}}).networked is True
    assert adapt_one({"id": "a", "data": {"entityType": "asteroid", "networked": True}}).networked is False
    assert adapt_one({"id": "g", "data": {"entityType": "gate"}}).networked is False


def test_network_type_mapping():
    expected = {
        "ship": NetworkEntityType.SHIP,
        "player": NetworkEntityType.SHIP,
        "vehicle": NetworkEntityType.SHIP,
        "station": NetworkEntityType.STATION,
        "interactive": NetworkEntityType.STATION,
        "asteroid": NetworkEntityType.ASTEROID,
        "static": NetworkEntityType.ASTEROID,
        "gate": NetworkEntityType.GATE,
        "portal": NetworkEntityType.GATE,
        "crate": NetworkEntityType.ASTEROID,
    }
    for entity_type, network_type in expected.items():
        adapted = adapt_one({"id": entity_type, "data": {"entityType": entity_type}})
        assert adapted.type is network_type
        assert adapted.entity_type == entity_type


def test_visual_color_precedence():
    render = {"id": "r", "data": {"componentType": "Render", "props": {"material": {"color": "#00ff00"}}}}

    own = adapt_one({"id": "a", "data": {"color": "#111111", "components": [render]}})
    assert own.visual.color == "#111111"

    from_inputs = adapt_one({"id": "b", "data": {"inputs": {"color": "#222222"}}})
    assert from_inputs.visual.color == "#222222"

    from_render = adapt_one({"id": "c", "data": {"components": [{"id": "p", "data": {}}, render]}})
    assert from_render.visual.color == "#00ff00"

    fallback = adapt_one({"id": "d", "data": {}})
    assert fallback.visual.color == "#ffffff"
    assert fallback.visual.model == "box"
    assert fallback.visual.texture is None


def test_transform_falls_back_to_inputs_when_position_missing():
    adapted = adapt_one(
        {
            "id": "s",
            "data": {
                "transform": {"scale": {"x": 9, "y": 9, "z": 9}},
                "inputs": {"transform": {"position": {"x": 4, "y": 5, "z": 6}}},
            },
        }
    )
    assert adapted.position == Vec3(4, 5, 6)
    assert adapted.scale == Vec3(1, 1, 1)

    direct = adapt_one(
        {
            "id": "t",
            "data": {
                "transform": {"pos": [1, 2, 3]},
                "inputs": {"transform": {"position": {"x": 4, "y": 5, "z": 6}}},
            },
        }
    )
    assert direct.position == Vec3(1, 2, 3)


def test_missing_ids_are_generated():
    adapted = adapt_entities_for_network([{"data": {}}, {"data": {}}], sequential_ids())
    assert [item.id for item in adapted] == ["entity_1", "entity_2"]


def test_network_entity_wire_shape():
    components = [{"id": "r", "data": {"componentType": "render"}}]
    adapted = adapt_one(
        {
            "id": "ship-1",
            "data": {
                "entityType": "ship",
                "transform": {"position": {"x": 1, "y": 2, "z": 3}},
                "components": components,
                "model": "fighter",
            },
        }
    )
    payload = network_entity_to_dict(adapted)
    assert payload["id"] == "ship-1"
    assert payload["type"] == "ship"
    assert payload["entityType"] == "ship"
    assert payload["networked"] is True
    assert payload["transform"] == {
        "position": [1, 2, 3],
        "rotation": [0, 0, 0],
        "scale": [1, 1, 1],
    }
    assert payload["position"] == {"x": 1, "y": 2, "z": 3}
    assert payload["visual"] == {"model": "fighter", "texture": None, "color": "#ffffff"}
    assert payload["components"] == components
