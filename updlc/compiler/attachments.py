"""Attachment generators: inline fragments that mutate an existing entity.

Each generator takes ``(component_id, params, entity_var)`` and returns the
fragment text. Fragments are wrapped in a bare ``{ ... }`` block so their
local names cannot collide with the entity script around them.
"""

from typing import Callable, Dict

from updlc.compiler.constants import (
    DEFAULT_CURRENCY,
    DEFAULT_RESOURCE_TYPE,
    DEFAULT_TARGET_WORLD,
)
from updlc.compiler.helpers import ComponentParams
from updlc.fields import TRADING_PRICE_PATHS, TRADING_RANGE_PATHS
from updlc.game_model import ComponentType
from updlc.js_writer import ScriptWriter, js_bool, js_comment, js_number, js_value
from updlc.normalize import resolve_color

AttachmentGenerator = Callable[[str, ComponentParams, str], str]


def _fragment(title: str, body: str) -> str:
    writer = ScriptWriter()
    writer.line(f"// {js_comment(title)}")
    writer.line("{")
    with writer.indent():
        writer.block(body)
    writer.line("}")
    return writer.render()


def render_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    primitive = params.text("primitive", "box")
    color = resolve_color(params.raw_from(("data",)) or {})
    e = entity_var
    return _fragment(
        f"Render component {component_id}",
        f"""
        if (!{e}.model) {{
            {e}.addComponent('model', {{ type: {js_value(primitive)} }});
        }}
        const material = new pc.StandardMaterial();
        material.diffuse.set({js_number(color.r)}, {js_number(color.g)}, {js_number(color.b)});
        material.update();
        {e}.model.material = material;
        {e}.hasCustomMaterial = true;
        """,
    )


def inventory_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    max_capacity = params.number("maxCapacity", 20, positive=True)
    current_load = params.number("currentLoad", 0)
    e = entity_var
    return _fragment(
        f"Inventory component {component_id}",
        f"""
        {e}.inventory = {{
            maxCapacity: {js_number(max_capacity)},
            currentLoad: {js_number(current_load)},
            items: {{}},

            addItem(itemType, amount) {{
                if (this.currentLoad + amount <= this.maxCapacity) {{
                    this.items[itemType] = (this.items[itemType] || 0) + amount;
                    this.currentLoad += amount;
                    return true;
                }}
                return false;
            }},

            removeItem(itemType, amount) {{
                if (this.items[itemType] && this.items[itemType] >= amount) {{
                    this.items[itemType] -= amount;
                    this.currentLoad -= amount;
                    if (this.items[itemType] === 0) delete this.items[itemType];
                    return true;
                }}
                return false;
            }},

            getCapacityInfo() {{
                return {{
                    current: this.currentLoad,
                    max: this.maxCapacity,
                    free: this.maxCapacity - this.currentLoad,
                    percentage: (this.currentLoad / this.maxCapacity) * 100
                }};
            }},

            getItemList() {{
                return Object.keys(this.items).map((itemType) => ({{
                    type: itemType,
                    amount: this.items[itemType]
                }}));
            }}
        }};
        """,
    )


def trading_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    price_per_ton = params.number_from(TRADING_PRICE_PATHS, 10, positive=True)
    interaction_range = params.number_from(TRADING_RANGE_PATHS, 15, positive=True)
    accepted_items = params.string_list("acceptedItems", [DEFAULT_RESOURCE_TYPE])
    currency = params.text("currency", DEFAULT_CURRENCY)
    e = entity_var
    return _fragment(
        f"Trading component {component_id}",
        f"""
        {e}.tradingPost = {{
            isActive: true,
            pricePerTon: {js_number(price_per_ton)},
            interactionRange: {js_number(interaction_range)},
            acceptedItems: {js_value(accepted_items)},
            currency: {js_value(currency)},

            isShipInRange(ship) {{
                return {e}.getPosition().distance(ship.getPosition()) <= this.interactionRange;
            }},

            trade(ship, itemType, amount) {{
                if (!this.isShipInRange(ship)) {{
                    return {{ success: false, message: 'Ship too far from station' }};
                }}
                if (this.acceptedItems.indexOf(itemType) === -1) {{
                    return {{ success: false, message: 'Item not accepted' }};
                }}
                if (!ship.inventory || !ship.inventory.items[itemType]) {{
                    return {{ success: false, message: 'No ' + itemType + ' in ship inventory' }};
                }}
                const tradeAmount = Math.min(amount, ship.inventory.items[itemType]);
                if (!ship.inventory.removeItem(itemType, tradeAmount)) {{
                    return {{ success: false, message: 'Trade failed' }};
                }}
                const payment = tradeAmount * this.pricePerTon;
                ship.currency = (ship.currency || 0) + payment;
                return {{
                    success: true,
                    amount: tradeAmount,
                    payment: payment,
                    message: 'Trade successful: +' + payment + ' ' + this.currency
                }};
            }},

            getTradingInfo() {{
                return {{
                    pricePerTon: this.pricePerTon,
                    acceptedItems: this.acceptedItems,
                    currency: this.currency,
                    interactionRange: this.interactionRange
                }};
            }}
        }};
        """,
    )


def mineable_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    resource_type = params.text("resourceType", DEFAULT_RESOURCE_TYPE)
    max_yield = params.number("maxYield", 2, positive=True)
    hardness = params.number("hardness", 1, positive=True)
    e = entity_var
    # Intact -> Destroyed; destroy() runs at most once.
    return _fragment(
        f"Mineable component {component_id}",
        f"""
        {e}.mineable = {{
            resourceType: {js_value(resource_type)},
            maxYield: {js_number(max_yield)},
            currentYield: {js_number(max_yield)},
            hardness: {js_number(hardness)},
            isDestroyed: false,

            onHit(damage) {{
                if (this.isDestroyed) return false;
                const amount = (typeof damage === 'number' ? damage : 1) / this.hardness;
                this.currentYield -= amount;
                if (this.currentYield <= 0) {{
                    this.currentYield = 0;
                    this.destroy();
                    return true;
                }}
                return false;
            }},

            destroy() {{
                if (this.isDestroyed) return;
                this.isDestroyed = true;
                if (runtime.events) {{
                    runtime.events.emit('resource_depleted', {{
                        entityId: {e}.name,
                        resourceType: this.resourceType,
                        amount: this.maxYield
                    }});
                }}
                {e}.destroy();
            }}
        }};
        """,
    )


def portal_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    target_world = params.text("targetWorld", DEFAULT_TARGET_WORLD)
    cooldown_time = params.number("cooldownTime", 2000)
    is_active = params.flag("isActive", True)
    e = entity_var
    return _fragment(
        f"Portal component {component_id}",
        f"""
        {e}.portal = {{
            targetWorld: {js_value(target_world)},
            cooldownTime: {js_number(cooldown_time)},
            isActive: {js_bool(is_active)},
            lastUsed: 0,

            canUse(now) {{
                return this.isActive && (now - this.lastUsed) > this.cooldownTime;
            }},

            transport(ship) {{
                const now = runtime.now ? runtime.now() : Date.now();
                if (!this.canUse(now)) {{
                    return false;
                }}
                this.lastUsed = now;
                if (runtime.events) {{
                    runtime.events.emit('world_change', {{
                        shipId: ship && ship.name,
                        toWorld: this.targetWorld,
                        portalId: {js_value(component_id)}
                    }});
                }}
                return true;
            }}
        }};
        """,
    )


def weapon_attachment(component_id: str, params: ComponentParams, entity_var: str) -> str:
    fire_rate = params.number("fireRate", 2, positive=True)
    damage = params.number("damage", 1)
    projectile_speed = params.number("projectileSpeed", 50, positive=True)
    weapon_range = params.number("range", 100, positive=True)
    e = entity_var
    return _fragment(
        f"Weapon component {component_id}",
        f"""
        {e}.weaponSystem = {{
            fireRate: {js_number(fire_rate)},
            damage: {js_number(damage)},
            projectileSpeed: {js_number(projectile_speed)},
            range: {js_number(weapon_range)},
            lastFireTime: 0,

            fire(direction) {{
                const now = runtime.now ? runtime.now() : Date.now();
                if (now - this.lastFireTime < 1000 / this.fireRate) {{
                    return false;
                }}
                this.lastFireTime = now;
                this.createProjectile(direction, now);
                return true;
            }},

            createProjectile(direction, now) {{
                const projectile = new pc.Entity('projectile_' + now);
                projectile.addComponent('model', {{ type: 'sphere' }});
                projectile.addComponent('collision', {{ type: 'sphere', radius: 0.1 }});
                projectile.addComponent('rigidbody', {{ type: pc.BODYTYPE_DYNAMIC, mass: 0.1 }});
                projectile.setPosition({e}.getPosition().clone().add({e}.forward.clone().scale(3)));
                projectile.rigidbody.linearVelocity = direction.clone().scale(this.projectileSpeed);
                projectile.weaponDamage = this.damage;
                app.root.addChild(projectile);
                setTimeout(() => {{
                    if (projectile.parent) projectile.destroy();
                }}, (this.range / this.projectileSpeed) * 1000);
            }}
        }};
        """,
    )


ATTACHMENT_GENERATORS: Dict[ComponentType, AttachmentGenerator] = {
    ComponentType.RENDER: render_attachment,
    ComponentType.INVENTORY: inventory_attachment,
    ComponentType.TRADING: trading_attachment,
    ComponentType.MINEABLE: mineable_attachment,
    ComponentType.PORTAL: portal_attachment,
    ComponentType.WEAPON: weapon_attachment,
}
