"""Entity-type behavior generators.

Attachment fragments run before these, so every default here is guarded:
a model, material or subsystem already set by an attached component wins.
"""

from typing import Callable, Dict

from updlc.game_model import EntityType
from updlc.js_writer import js_value

EntityBehavior = Callable[[str], str]


def _default_model(primitive: str) -> str:
    return f"""
    if (!entity.model) {{
        entity.addComponent('model', {{ type: '{primitive}' }});
    }}"""


def _default_material(r: float, g: float, b: float, emissive: str = "") -> str:
    emissive_line = f"\n        material.emissive.set({emissive});" if emissive else ""
    return f"""
    if (!entity.hasCustomMaterial) {{
        const material = new pc.StandardMaterial();
        material.diffuse.set({r}, {g}, {b});{emissive_line}
        material.update();
        entity.model.material = material;
    }}"""


def player_behavior(entity_id: str) -> str:
    return _default_model("capsule") + """
    if (!entity.collision) {
        entity.addComponent('collision', { type: 'capsule', radius: 0.5, height: 1.8 });
    }
    if (!entity.rigidbody) {
        entity.addComponent('rigidbody', { type: pc.BODYTYPE_DYNAMIC, mass: 70 });
    }
    entity.playerController = {
        speed: 5,
        jumpForce: 8,
        isGrounded: false,

        move(direction) {
            if (this.isGrounded) {
                entity.rigidbody.applyForce(direction.clone().scale(this.speed));
            }
        },

        jump() {
            if (this.isGrounded) {
                entity.rigidbody.applyImpulse(pc.Vec3.UP.clone().scale(this.jumpForce));
                this.isGrounded = false;
            }
        }
    };
"""


def interactive_behavior(entity_id: str) -> str:
    return _default_model("box") + f"""
    if (!entity.collision) {{
        entity.addComponent('collision', {{ type: 'box' }});
    }}
    entity.interaction = {{
        canInteract: true,

        onInteract(player) {{
            if (runtime.gateway && runtime.gateway.isConnected) {{
                runtime.gateway.send({{
                    type: 'entity_interaction',
                    entityId: {js_value(entity_id)},
                    playerId: player && player.networkId,
                    timestamp: Date.now()
                }});
            }}
            if (runtime.events) {{
                runtime.events.emit('entity_interaction', {{ entityId: {js_value(entity_id)} }});
            }}
        }}
    }};
"""


def vehicle_behavior(entity_id: str) -> str:
    return _default_model("box") + """
    if (!entity.collision) {
        entity.addComponent('collision', { type: 'box' });
    }
    if (!entity.rigidbody) {
        entity.addComponent('rigidbody', { type: pc.BODYTYPE_DYNAMIC, mass: 1000 });
    }
    entity.vehicleController = {
        speed: 0,
        maxSpeed: 20,
        acceleration: 5,

        accelerate() {
            this.speed = Math.min(this.speed + this.acceleration, this.maxSpeed);
            this.updateMovement();
        },

        brake() {
            this.speed = Math.max(this.speed - this.acceleration, 0);
            this.updateMovement();
        },

        updateMovement() {
            entity.rigidbody.linearVelocity = entity.forward.clone().scale(this.speed);
        }
    };
"""


def ship_behavior(entity_id: str) -> str:
    return _default_model("box") + _default_material(0.2, 0.8, 0.2, "0.1, 0.4, 0.1") + """
    if (!entity.collision) {
        entity.addComponent('collision', { type: 'box', halfExtents: new pc.Vec3(1, 0.5, 2) });
    }
    if (!entity.rigidbody) {
        entity.addComponent('rigidbody', {
            type: pc.BODYTYPE_DYNAMIC,
            mass: 100,
            linearDamping: 0.1,
            angularDamping: 0.1
        });
    }
    entity.shipController = {
        speed: 10,
        rotationSpeed: 60,
        thrustForce: 500,
        isThrusting: false,

        thrust(direction) {
            if (entity.rigidbody && entity.rigidbody.body) {
                entity.rigidbody.applyForce(direction.clone().scale(this.thrustForce));
            } else {
                const step = direction.clone().scale(this.speed * 0.016);
                entity.setPosition(entity.getPosition().clone().add(step));
            }
            this.isThrusting = true;
        },

        rotate(axis, angle) {
            if (entity.rigidbody && entity.rigidbody.body) {
                entity.rigidbody.applyTorque(axis.clone().scale(angle * this.rotationSpeed));
            }
        },

        stopThrust() {
            this.isThrusting = false;
        }
    };
    if (!entity.inventory) {
        entity.inventory = {
            maxCapacity: 20,
            currentLoad: 0,
            items: {},

            addItem(itemType, amount) {
                if (this.currentLoad + amount <= this.maxCapacity) {
                    this.items[itemType] = (this.items[itemType] || 0) + amount;
                    this.currentLoad += amount;
                    return true;
                }
                return false;
            },

            removeItem(itemType, amount) {
                if (this.items[itemType] && this.items[itemType] >= amount) {
                    this.items[itemType] -= amount;
                    this.currentLoad -= amount;
                    if (this.items[itemType] === 0) delete this.items[itemType];
                    return true;
                }
                return false;
            },

            getCapacityInfo() {
                return {
                    current: this.currentLoad,
                    max: this.maxCapacity,
                    free: this.maxCapacity - this.currentLoad,
                    percentage: (this.currentLoad / this.maxCapacity) * 100
                };
            },

            getItemList() {
                return Object.keys(this.items).map((itemType) => ({
                    type: itemType,
                    amount: this.items[itemType]
                }));
            }
        };
    }
""" + _laser_system()


def _laser_system() -> str:
    # idle -> targeting -> mining -> collecting -> idle, clocked by runtime.now().
    return """
    entity.laserSystem = {
        state: 'idle',
        currentTarget: null,
        miningStartTime: 0,
        collectStartTime: 0,
        cycleProgress: 0,
        config: {
            maxRange: 75,
            miningDuration: 3000,
            resourceYield: 1.5,
            collectDuration: 500
        },

        now() {
            return runtime.now ? runtime.now() : Date.now();
        },

        setState(newState) {
            this.state = newState;
            switch (newState) {
                case 'idle':
                    this.currentTarget = null;
                    this.miningStartTime = 0;
                    this.cycleProgress = 0;
                    break;
                case 'targeting':
                    this.findTarget();
                    break;
                case 'mining':
                    this.miningStartTime = this.now();
                    this.cycleProgress = 0;
                    break;
                case 'collecting':
                    this.collectStartTime = this.now();
                    this.collectResources();
                    break;
            }
        },

        findTarget() {
            let closest = null;
            let closestDistance = Infinity;
            runtime.entities.forEach((candidate) => {
                if (candidate === entity || !this.isValidTarget(candidate)) return;
                const distance = this.getDistanceToTarget(candidate);
                if (distance < closestDistance) {
                    closest = candidate;
                    closestDistance = distance;
                }
            });
            if (closest) {
                this.currentTarget = closest;
                this.setState('mining');
            } else {
                this.setState('idle');
            }
        },

        isValidTarget(target) {
            if (!target || !target.mineable || target.mineable.isDestroyed) return false;
            return this.getDistanceToTarget(target) <= this.config.maxRange;
        },

        getDistanceToTarget(target) {
            if (!target) return Infinity;
            return entity.getPosition().distance(target.getPosition());
        },

        collectResources() {
            const target = this.currentTarget;
            const inventory = entity.inventory;
            const amount = this.config.resourceYield;
            if (!target || !inventory || inventory.currentLoad + amount > inventory.maxCapacity) {
                this.setState('idle');
                return false;
            }
            const resourceType = target.mineable.resourceType || 'asteroidMass';
            if (!inventory.addItem(resourceType, amount)) {
                this.setState('idle');
                return false;
            }
            if (runtime.events) {
                runtime.events.emit('resources_collected', {
                    shipId: entity.name,
                    resourceType: resourceType,
                    amount: amount
                });
            }
            target.mineable.onHit(1);
            return true;
        },

        update(dt) {
            if (this.state === 'mining') {
                if (!this.isValidTarget(this.currentTarget)) {
                    this.setState('idle');
                    return;
                }
                const elapsed = this.now() - this.miningStartTime;
                this.cycleProgress = Math.min(elapsed / this.config.miningDuration, 1);
                if (elapsed >= this.config.miningDuration) {
                    this.setState('collecting');
                }
            } else if (this.state === 'collecting') {
                if (this.now() - this.collectStartTime >= this.config.collectDuration) {
                    this.setState('idle');
                }
            }
        },

        activate() {
            if (!this.canActivate()) return false;
            this.setState('targeting');
            return this.state === 'mining';
        },

        canActivate() {
            return this.state === 'idle';
        },

        getStatus() {
            return {
                state: this.state,
                progress: this.cycleProgress,
                hasTarget: !!this.currentTarget,
                targetDistance: this.currentTarget ? this.getDistanceToTarget(this.currentTarget) : null
            };
        }
    };
    if (app.on) {
        app.on('update', (dt) => entity.laserSystem.update(dt));
    }
"""


def station_behavior(entity_id: str) -> str:
    return _default_model("box") + _default_material(0.2, 0.5, 0.8) + f"""
    if (!entity.collision) {{
        entity.addComponent('collision', {{ type: 'box', halfExtents: new pc.Vec3(4, 2, 4) }});
    }}
    if (!entity.tradingPost) {{
        entity.tradingPost = {{
            isActive: true,
            pricePerTon: 10,
            interactionRange: 8,

            isShipInRange(ship) {{
                return entity.getPosition().distance(ship.getPosition()) <= this.interactionRange;
            }},

            trade(ship, itemType, amount) {{
                if (!this.isShipInRange(ship)) {{
                    return {{ success: false, message: 'Ship too far from station' }};
                }}
                if (ship.inventory && ship.inventory.removeItem(itemType, amount)) {{
                    const payment = amount * this.pricePerTon;
                    ship.currency = (ship.currency || 0) + payment;
                    return {{ success: true, payment: payment }};
                }}
                return {{ success: false, message: 'Trade failed' }};
            }}
        }};
    }}
    entity.interactionZone = {{
        checkShips() {{
            runtime.entities.forEach((other, otherId) => {{
                if (other === entity || !other.shipController) return;
                const inRange = entity.tradingPost.isShipInRange(other);
                if (inRange && other.nearStation !== entity) {{
                    other.nearStation = entity;
                    if (runtime.events) {{
                        runtime.events.emit('ship_near_station', {{ shipId: otherId, stationId: {js_value(entity_id)} }});
                    }}
                }} else if (!inRange && other.nearStation === entity) {{
                    other.nearStation = null;
                    if (runtime.events) {{
                        runtime.events.emit('ship_left_station', {{ shipId: otherId, stationId: {js_value(entity_id)} }});
                    }}
                }}
            }});
        }}
    }};
"""


def asteroid_behavior(entity_id: str) -> str:
    return _default_model("sphere") + _default_material(0.6, 0.5, 0.4) + """
    if (!entity.collision) {
        entity.addComponent('collision', { type: 'sphere', radius: 1 });
    }
    if (!entity.rigidbody) {
        entity.addComponent('rigidbody', { type: pc.BODYTYPE_STATIC, mass: 0 });
    }
    if (!entity.mineable) {
        entity.mineable = {
            resourceType: 'asteroidMass',
            maxYield: 2,
            currentYield: 2,
            hardness: 1,
            isDestroyed: false,

            onHit(damage) {
                if (this.isDestroyed) return false;
                this.currentYield -= (typeof damage === 'number' ? damage : 1) / this.hardness;
                if (this.currentYield <= 0) {
                    this.currentYield = 0;
                    this.destroy();
                    return true;
                }
                return false;
            },

            destroy() {
                if (this.isDestroyed) return;
                this.isDestroyed = true;
                entity.destroy();
            }
        };
    }
"""


def gate_behavior(entity_id: str) -> str:
    return _default_model("torus") + _default_material(1, 1, 0, "0.2, 0.2, 0") + f"""
    if (!entity.collision) {{
        entity.addComponent('collision', {{ type: 'box', halfExtents: new pc.Vec3(3, 3, 1) }});
    }}
    if (!entity.portal) {{
        entity.portal = {{
            targetWorld: 'konkordo',
            cooldownTime: 2000,
            isActive: true,
            lastUsed: 0,

            canUse(now) {{
                return this.isActive && (now - this.lastUsed) > this.cooldownTime;
            }},

            transport(ship) {{
                const now = runtime.now ? runtime.now() : Date.now();
                if (!this.canUse(now)) return false;
                this.lastUsed = now;
                if (runtime.events) {{
                    runtime.events.emit('world_change', {{
                        shipId: ship && ship.name,
                        toWorld: this.targetWorld,
                        gateId: {js_value(entity_id)}
                    }});
                }}
                return true;
            }}
        }};
    }}
    if (entity.collision.on) {{
        entity.collision.on('triggerenter', (other) => {{
            if (other.shipController) entity.portal.transport(other);
        }});
    }}
"""


def static_behavior(entity_id: str) -> str:
    return _default_model("box") + _default_material(0.7, 0.7, 0.7) + f"""
    if (!entity.collision) {{
        entity.addComponent('collision', {{ type: 'box' }});
    }}
    entity.staticData = {{
        isStatic: true,
        entityId: {js_value(entity_id)}
    }};
"""


ENTITY_BEHAVIORS: Dict[EntityType, EntityBehavior] = {
    EntityType.PLAYER: player_behavior,
    EntityType.INTERACTIVE: interactive_behavior,
    EntityType.VEHICLE: vehicle_behavior,
    EntityType.SHIP: ship_behavior,
    EntityType.STATION: station_behavior,
    EntityType.ASTEROID: asteroid_behavior,
    EntityType.GATE: gate_behavior,
    EntityType.STATIC: static_behavior,
}
