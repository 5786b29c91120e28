import json
import shutil
import subprocess
import textwrap

import pytest

from updlc.exporter import export_flow

pytestmark = pytest.mark.skipif(shutil.which("node") is None, reason="node is not installed")


STUB_RUNTIME = """
class Color {
  constructor(r = 0, g = 0, b = 0) { this.set(r, g, b); }
  set(r, g, b) { this.r = r; this.g = g; this.b = b; }
}

class Vec3 {
  constructor(x = 0, y = 0, z = 0) { this.x = x; this.y = y; this.z = z; }
  clone() { return new Vec3(this.x, this.y, this.z); }
  distance(other) {
    return Math.hypot(this.x - other.x, this.y - other.y, this.z - other.z);
  }
}

class StandardMaterial {
  constructor() { this.diffuse = new Color(); this.emissive = new Color(); }
  update() {}
}

class Entity {
  constructor(name) {
    this.name = name;
    this.children = [];
    this.parent = null;
    this.destroyCount = 0;
    this._handlers = {};
    this._position = new Vec3();
  }
  addComponent(type, options) {
    this[type] = Object.assign({ on() {} }, options || {});
    return this[type];
  }
  addChild(child) { child.parent = this; this.children.push(child); }
  setLocalPosition(x, y, z) { this._position = new Vec3(x, y, z); }
  setPosition(x, y, z) { this._position = new Vec3(x, y, z); }
  setLocalEulerAngles() {}
  setLocalScale() {}
  getPosition() { return this._position.clone(); }
  on(name, fn) { (this._handlers[name] = this._handlers[name] || []).push(fn); }
  once(name, fn) { this.on(name, fn); }
  destroy() {
    this.destroyCount += 1;
    const handlers = this._handlers.destroy || [];
    this._handlers.destroy = [];
    handlers.forEach((fn) => fn());
  }
}

const pc = {
  Color, Vec3, StandardMaterial, Entity,
  BODYTYPE_DYNAMIC: 'dynamic',
  BODYTYPE_STATIC: 'static',
  DISTANCE_EXPONENTIAL: 'exponential',
};

const emitted = [];
const listeners = {};
let clock = 0;
const runtime = {
  entities: new Map(),
  actions: new Map(),
  data: new Map(),
  components: new Map(),
  now: () => clock,
  events: {
    on(name, fn) { (listeners[name] = listeners[name] || []).push(fn); },
    emit(name, payload) {
      emitted.push(name);
      (listeners[name] || []).forEach((fn) => fn(payload));
    },
  },
};
const app = { root: new Entity('root'), scene: {} };
"""


def mining_flow():
    return {
        "updlSpace": {
            "id": "space-1",
            "data": {"ambientColor": "#000000"},
            "entities": [
                {
                    "id": "ship-1",
                    "data": {
                        "entityType": "ship",
                        "networked": True,
                        "components": [
                            {"id": "r1", "data": {"componentType": "render", "color": "#ff0000"}}
                        ],
                    },
                },
                {
                    "id": "rock-1",
                    "data": {
                        "entityType": "asteroid",
                        "components": [
                            {"id": "m1", "data": {"componentType": "mineable", "maxYield": 2, "hardness": 1}}
                        ],
                    },
                },
                {
                    "id": "gate-1",
                    "data": {
                        "entityType": "gate",
                        "components": [
                            {"id": "p1", "data": {"componentType": "portal", "cooldownTime": 1000}}
                        ],
                    },
                },
            ],
            "components": [
                {
                    "id": "inv",
                    "data": {"componentType": "inventory", "targetEntity": "ship-1", "maxCapacity": 50},
                }
            ],
            "events": [{"id": "ev1", "data": {"eventType": "jump", "actions": ["tp"]}}],
            "actions": [
                {
                    "id": "tp",
                    "data": {"actionType": "teleport", "target": "ship-1", "params": {"x": 5, "y": 0, "z": 0}},
                }
            ],
            "datas": [{"id": "d1", "data": {"key": "score", "value": 10}}],
            "lights": [{"id": "sun", "data": {}}],
        }
    }


def run_scenario(tmp_path, scenario):
    export_flow(mining_flow(), tmp_path)
    runner = tmp_path / "runner.js"
    runner.write_text(
        STUB_RUNTIME
        + textwrap.dedent(
            f"""
            const {{ runScene }} = require({json.dumps(str(tmp_path / "game_scripts.js"))});
            runScene(app, pc, runtime);
            """
        )
        + textwrap.dedent(scenario),
        encoding="utf-8",
    )
    proc = subprocess.run(["node", str(runner)], check=True, capture_output=True, text=True)
    return json.loads(proc.stdout.strip().splitlines()[-1])


def test_scene_registers_entities_and_applies_components(tmp_path):
    result = run_scenario(
        tmp_path,
        """
        const ship = runtime.entities.get('ship-1');
        console.log(JSON.stringify({
          ids: Array.from(runtime.entities.keys()),
          rootChildren: app.root.children.map((child) => child.name),
          diffuse: [ship.model.material.diffuse.r, ship.model.material.diffuse.g, ship.model.material.diffuse.b],
          networkId: ship.networkId,
          maxCapacity: ship.inventory.maxCapacity,
          score: runtime.data.get('score').value,
          ambient: app.scene.ambientLight.r,
        }));
        """,
    )
    assert result["ids"] == ["ship-1", "rock-1", "gate-1"]
    assert result["rootChildren"] == ["sun", "ship-1", "rock-1", "gate-1"]
    assert result["diffuse"] == [1, 0, 0]
    assert result["networkId"] == "ship-1"
    assert result["maxCapacity"] == 50
    assert result["score"] == 10
    assert result["ambient"] == 0


def test_mineable_is_destroyed_exactly_once(tmp_path):
    result = run_scenario(
        tmp_path,
        """
        const rock = runtime.entities.get('rock-1');
        const hits = [rock.mineable.onHit(1), rock.mineable.onHit(1), rock.mineable.onHit(1)];
        console.log(JSON.stringify({
          hits,
          destroyCount: rock.destroyCount,
          registered: runtime.entities.has('rock-1'),
          depleted: emitted.filter((name) => name === 'resource_depleted').length,
        }));
        """,
    )
    assert result["hits"] == [False, True, False]
    assert result["destroyCount"] == 1
    assert result["registered"] is False
    assert result["depleted"] == 1


def test_portal_enforces_strict_cooldown(tmp_path):
    result = run_scenario(
        tmp_path,
        """
        const gate = runtime.entities.get('gate-1');
        const ship = runtime.entities.get('ship-1');
        const attempts = [];
        for (const now of [500, 5000, 5500, 6000, 6001]) {
          clock = now;
          attempts.push(gate.portal.transport(ship));
        }
        console.log(JSON.stringify({
          attempts,
          lastUsed: gate.portal.lastUsed,
          worldChanges: emitted.filter((name) => name === 'world_change').length,
        }));
        """,
    )
    assert result["attempts"] == [False, True, False, False, True]
    assert result["lastUsed"] == 6001
    assert result["worldChanges"] == 2


def test_events_run_registered_actions(tmp_path):
    result = run_scenario(
        tmp_path,
        """
        runtime.events.emit('jump', {});
        const ship = runtime.entities.get('ship-1');
        console.log(JSON.stringify({ x: ship.getPosition().x, actions: Array.from(runtime.actions.keys()) }));
        """,
    )
    assert result["x"] == 5
    assert result["actions"] == ["tp"]


def test_ship_laser_mines_nearest_asteroid_into_inventory(tmp_path):
    result = run_scenario(
        tmp_path,
        """
        const ship = runtime.entities.get('ship-1');
        const laser = ship.laserSystem;
        clock = 0;
        const first = laser.activate();
        const target = laser.currentTarget.name;
        clock = 1500;
        laser.update(0.016);
        const progress = laser.getStatus().progress;
        clock = 3000;
        laser.update(0.016);
        const afterFirstCycle = laser.state;
        const busy = laser.activate();
        clock = 3500;
        laser.update(0.016);
        const second = laser.activate();
        clock = 6500;
        laser.update(0.016);
        clock = 7000;
        laser.update(0.016);
        const third = laser.activate();
        console.log(JSON.stringify({
          first, target, progress, afterFirstCycle, busy, second, third,
          state: laser.state,
          items: ship.inventory.getItemList(),
          load: ship.inventory.getCapacityInfo().current,
          rockRegistered: runtime.entities.has('rock-1'),
          collected: emitted.filter((name) => name === 'resources_collected').length,
        }));
        """,
    )
    assert result["first"] is True
    assert result["target"] == "rock-1"
    assert result["progress"] == 0.5
    assert result["afterFirstCycle"] == "collecting"
    assert result["busy"] is False
    assert result["second"] is True
    assert result["third"] is False
    assert result["state"] == "idle"
    assert result["items"] == [{"type": "asteroidMass", "amount": 3}]
    assert result["load"] == 3
    assert result["rockRegistered"] is False
    assert result["collected"] == 2
