"""Weapon discharge resolution: hit rolls, damage split, cooldown and ammo."""

from __future__ import annotations

import random
from typing import Iterable, Tuple

from loguru import logger

from terminalvelocity.catalog import ShipType, Weapon
from terminalvelocity.combat.models import FireResult, Ship, WeaponState

MIN_HIT_CHANCE = 5.0
MAX_HIT_CHANCE = 95.0
RANGE_PENALTY_UNITS = 100.0  # 1% accuracy lost per 100 units beyond optimal range
EVASION_FACTOR = 2.0
ATTACKER_BONUS_FACTOR = 0.5
CRITICAL_CHANCE = 0.1
CRITICAL_MULTIPLIER = 1.5

WEAPON_TYPE_INFO = {
    "laser": "Energy weapon - Fast firing, no ammo, moderate energy cost",
    "missile": "Explosive weapon - High damage, limited ammo, good shield penetration",
    "plasma": "Balanced weapon - Good damage and shield penetration, moderate energy cost",
    "railgun": "Kinetic weapon - Very high damage, excellent shield penetration, high energy cost",
}


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def init_weapon_state(weapon: Weapon) -> WeaponState:
    """Create the per-encounter state for a freshly equipped weapon."""
    return WeaponState(weapon_id=weapon.id, current_ammo=weapon.ammo_capacity)


def can_fire(weapon: Weapon, state: WeaponState) -> Tuple[bool, str]:
    """Check cooldown and ammo gates.

    Energy cost is not gated; ships have an unlimited energy pool.

    Returns:
        (allowed, reason) where reason is empty when allowed
    """
    if state.cooldown_remaining > 0:
        return False, f"cooling down ({state.cooldown_remaining:.1f}s remaining)"
    if weapon.is_ammo_limited and state.current_ammo <= 0:
        return False, "out of ammo"
    return True, ""


def calculate_hit_chance(
    weapon: Weapon,
    attacker_type: ShipType,
    target_type: ShipType,
    distance: int,
) -> float:
    """Return the percentage chance to hit, always within [5, 95]."""
    range_penalty = max(0, distance - weapon.range_value) / RANGE_PENALTY_UNITS
    evasion_bonus = target_type.maneuverability * EVASION_FACTOR
    attacker_bonus = attacker_type.maneuverability * ATTACKER_BONUS_FACTOR
    hit_chance = weapon.accuracy - range_penalty - evasion_bonus + attacker_bonus
    return clamp(hit_chance, MIN_HIT_CHANCE, MAX_HIT_CHANCE)


def _apply_damage(target: Ship, damage: int, shield_penetration: float, result: FireResult) -> None:
    direct_damage = int(damage * shield_penetration)
    shield_damage = damage - direct_damage

    if target.shields > 0:
        if shield_damage >= target.shields:
            overflow = shield_damage - target.shields
            result.shield_damage = target.shields
            result.hull_damage = overflow + direct_damage
            target.shields = 0
        else:
            result.shield_damage = shield_damage
            result.hull_damage = direct_damage
            target.shields -= shield_damage
    else:
        result.hull_damage = damage

    if result.hull_damage > 0:
        target.hull = max(0, target.hull - result.hull_damage)


def _hit_message(weapon: Weapon, result: FireResult) -> str:
    if result.critical_hit:
        message = f"CRITICAL HIT! {weapon.name} dealt {result.damage} damage"
    else:
        message = f"{weapon.name} hit for {result.damage} damage"

    if result.shield_damage > 0 and result.hull_damage > 0:
        message += f" ({result.shield_damage} to shields, {result.hull_damage} to hull)"
    elif result.shield_damage > 0:
        message += f" (shields absorbed {result.shield_damage})"
    else:
        message += f" (hull damage: {result.hull_damage})"
    return message


def fire(
    weapon: Weapon,
    state: WeaponState,
    attacker: Ship,
    target: Ship,
    attacker_type: ShipType,
    target_type: ShipType,
    distance: int,
    rng: random.Random,
) -> FireResult:
    """Resolve one discharge of ``weapon`` from ``attacker`` at ``target``.

    Mutates ``target.shields``, ``target.hull`` and ``state``. When the weapon
    cannot fire, nothing is mutated and the result carries the reason.
    """
    result = FireResult()

    allowed, reason = can_fire(weapon, state)
    if not allowed:
        result.message = reason
        result.ammo_remaining = state.current_ammo
        return result

    result.fired = True
    hit_chance = calculate_hit_chance(weapon, attacker_type, target_type, distance)
    roll = rng.random() * 100

    if roll > hit_chance:
        result.message = f"{weapon.name} missed! ({hit_chance:.1f}% chance, rolled {roll:.1f})"
    else:
        result.hit = True
        damage = weapon.damage
        if rng.random() < CRITICAL_CHANCE:
            result.critical_hit = True
            damage = int(damage * CRITICAL_MULTIPLIER)
        result.damage = damage
        _apply_damage(target, damage, weapon.shield_penetration, result)
        result.message = _hit_message(weapon, result)

    state.cooldown_remaining = weapon.cooldown
    state.shots_fired += 1

    if weapon.is_ammo_limited:
        state.current_ammo = max(0, state.current_ammo - weapon.ammo_consumption)
    result.ammo_remaining = state.current_ammo

    logger.debug(
        f"{attacker.ship_id} fired {weapon.id} at {target.ship_id}: {result.message} "
        f"(target hull={target.hull}, shields={target.shields})"
    )
    return result


def update_cooldowns(states: Iterable[WeaponState], delta_time: float) -> None:
    """Advance every weapon's cooldown by ``delta_time`` seconds."""
    for state in states:
        if state.cooldown_remaining > 0:
            state.cooldown_remaining = max(0.0, state.cooldown_remaining - delta_time)


def reload_ammo(weapon: Weapon, state: WeaponState, amount: int) -> int:
    """Reload an ammo-limited weapon outside combat.

    Returns:
        Number of rounds actually loaded
    """
    if not weapon.is_ammo_limited or amount <= 0:
        return 0
    loaded = min(amount, weapon.ammo_capacity - state.current_ammo)
    loaded = max(0, loaded)
    state.current_ammo += loaded
    return loaded


def get_dps(weapon: Weapon) -> float:
    if weapon.cooldown == 0:
        return 0.0
    return weapon.damage / weapon.cooldown


def get_effective_range(weapon: Weapon, min_accuracy: float) -> int:
    """Distance at which base accuracy decays to ``min_accuracy``."""
    accuracy_drop = weapon.accuracy - min_accuracy
    if accuracy_drop <= 0:
        return weapon.range_value
    return weapon.range_value + int(accuracy_drop * RANGE_PENALTY_UNITS)


def describe_weapon_type(weapon_type: str) -> str:
    return WEAPON_TYPE_INFO.get(weapon_type, "Unknown weapon type")
