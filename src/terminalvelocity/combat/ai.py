"""Automated decision making for NPC combatants.

Each tick, ``decide_action`` runs a fixed pipeline for one NPC ship:

1. Morale drifts toward the current hull fraction
2. Retreat check (short-circuits everything else)
3. Target (re)selection every few seconds
4. Weapon selection against the current target
5. Evasion check
6. Formation keeping

The returned actions carry a priority in [0, 1]; the caller decides how and
when to execute them.
"""

from __future__ import annotations

import random
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from terminalvelocity.catalog import Registry, ShipType, Weapon
from terminalvelocity.combat.models import (
    AIAction,
    AIActionType,
    AILevel,
    AIState,
    Position,
    Ship,
)
from terminalvelocity.combat.weapons import calculate_hit_chance

# (aggression, accuracy multiplier, reaction time in seconds)
LEVEL_PRESETS: Dict[AILevel, Tuple[float, float, float]] = {
    AILevel.EASY: (0.3, 0.7, 2.0),
    AILevel.MEDIUM: (0.5, 0.85, 1.5),
    AILevel.HARD: (0.7, 0.95, 1.0),
    AILevel.EXPERT: (0.85, 1.0, 0.5),
    AILevel.ACE: (1.0, 1.1, 0.25),
}

LEVEL_NAMES = {
    AILevel.EASY: "Easy",
    AILevel.MEDIUM: "Medium",
    AILevel.HARD: "Hard",
    AILevel.EXPERT: "Expert",
    AILevel.ACE: "Ace",
}

TARGET_CHECK_INTERVAL = 3.0
DEFAULT_ENGAGEMENT_DISTANCE = 500
MORALE_DECAY = 0.05
MORALE_RECOVERY = 0.02
VETERAN_MORALE_FLOOR = 0.3
LONG_RANGE_MIN_HIT_CHANCE = 40.0

PRIORITY_RETREAT = 1.0
PRIORITY_TARGET = 0.8
PRIORITY_EVADE = 0.6
PRIORITY_FORMATION = 0.4


def new_ai_state(level: AILevel) -> AIState:
    """Create an AI state tuned for ``level``."""
    aggression, accuracy, reaction_time = LEVEL_PRESETS[level]
    return AIState(
        level=level,
        aggression=aggression,
        accuracy=accuracy,
        reaction_time=reaction_time,
    )


def ai_level_name(level: AILevel) -> str:
    return LEVEL_NAMES.get(level, "Unknown")


def apply_accuracy_modifier(ai: AIState, base_accuracy: float) -> float:
    return base_accuracy * ai.accuracy


def set_formation_position(ai: AIState, x: int, y: int) -> None:
    ai.formation = Position(x=x, y=y)


def clear_formation(ai: AIState) -> None:
    ai.formation = None


def _fraction(current: int, maximum: int) -> float:
    if maximum <= 0:
        return 0.0
    return current / maximum


# ----------------------------------------------------------------------
# Pipeline stages
# ----------------------------------------------------------------------

def update_morale(ai: AIState, self_ship: Ship, self_type: ShipType) -> None:
    """Drift morale toward the hull fraction; veterans never drop below 0.3."""
    target_morale = _fraction(self_ship.hull, self_type.max_hull)

    if ai.morale > target_morale:
        ai.morale = max(target_morale, ai.morale - MORALE_DECAY)
    elif ai.morale < target_morale:
        ai.morale = min(target_morale, ai.morale + MORALE_RECOVERY)

    if ai.level >= AILevel.HARD and ai.morale < VETERAN_MORALE_FLOOR:
        ai.morale = VETERAN_MORALE_FLOOR
    ai.morale = max(0.0, min(1.0, ai.morale))


def should_retreat(
    ai: AIState,
    self_ship: Ship,
    self_type: ShipType,
    enemies: Sequence[Ship],
) -> bool:
    if ai.is_retreating:
        return True
    if ai.morale < 0.3:
        return True

    hull_fraction = _fraction(self_ship.hull, self_type.max_hull)
    if hull_fraction < 0.2:
        return True
    if len(enemies) > 3 and hull_fraction < 0.5:
        return True

    if ai.level == AILevel.EASY:
        return hull_fraction < 0.4 and len(enemies) >= 2
    if ai.level == AILevel.MEDIUM:
        return hull_fraction < 0.3
    if ai.level == AILevel.HARD:
        return hull_fraction < 0.25
    # Expert and Ace fight on unless critical
    return hull_fraction < 0.15


def calculate_target_score(
    ai: AIState,
    target: Ship,
    target_type: ShipType,
    rng: random.Random,
) -> float:
    """Score a candidate target; weakened and dangerous ships score higher."""
    score = (1.0 - _fraction(target.hull, target_type.max_hull)) * 30.0
    score += (1.0 - _fraction(target.shields, target_type.max_shields)) * 20.0

    threat = len(target.weapons) * 10.0 + target_type.max_hull / 100.0
    score += threat * ai.aggression

    jitter = 15.0 if ai.level <= AILevel.MEDIUM else 5.0
    score += rng.random() * jitter
    return score


def select_target(
    ai: AIState,
    enemies: Sequence[Ship],
    enemy_types: Mapping[str, ShipType],
    rng: random.Random,
) -> Optional[Ship]:
    """Pick the best living enemy. Ties go to the earliest enemy in ``enemies``."""
    best_target: Optional[Ship] = None
    best_score = -1.0

    for enemy in enemies:
        if enemy.hull <= 0:
            continue
        enemy_type = enemy_types.get(enemy.type_id)
        if enemy_type is None:
            continue
        score = calculate_target_score(ai, enemy, enemy_type, rng)
        if score > best_score:
            best_score = score
            best_target = enemy

    return best_target


def should_fire_weapon(
    ai: AIState,
    weapon: Weapon,
    self_type: ShipType,
    target_type: ShipType,
    distance: int,
) -> bool:
    if distance <= weapon.range_value:
        return True
    if distance <= weapon.range_value * 2:
        if ai.level >= AILevel.HARD:
            hit_chance = calculate_hit_chance(weapon, self_type, target_type, distance)
            return hit_chance > LONG_RANGE_MIN_HIT_CHANCE
        return True
    return False


def calculate_weapon_priority(
    ai: AIState,
    weapon: Weapon,
    target: Ship,
    target_type: ShipType,
    distance: int,
) -> float:
    priority = 0.5
    priority += weapon.damage / 200.0

    if distance <= weapon.range_value:
        priority += 0.3

    if target.shields > target_type.max_shields / 2:
        # strong shields favour penetrating weapons
        priority += weapon.shield_penetration * 0.2
    else:
        priority += 0.1

    if weapon.weapon_type == "missile" and ai.level >= AILevel.MEDIUM:
        if _fraction(target.hull, target_type.max_hull) < 0.5:
            priority += 0.2
        else:
            priority -= 0.1

    return max(0.0, min(1.0, priority))


def select_weapons(
    ai: AIState,
    self_ship: Ship,
    self_type: ShipType,
    target: Ship,
    target_type: ShipType,
    distance: int,
    registry: Registry,
) -> List[AIAction]:
    actions: List[AIAction] = []
    for weapon_id in self_ship.weapons:
        weapon = registry.get_weapon(weapon_id)
        if weapon is None:
            logger.warning(f"AI ship {self_ship.ship_id} carries unknown weapon {weapon_id}")
            continue
        if distance > weapon.range_value * 2:
            continue
        if not should_fire_weapon(ai, weapon, self_type, target_type, distance):
            continue
        actions.append(
            AIAction(
                action_type=AIActionType.FIRE,
                priority=calculate_weapon_priority(ai, weapon, target, target_type, distance),
                target_id=target.ship_id,
                weapon_id=weapon.id,
            )
        )
    return actions


def should_evade(
    ai: AIState,
    self_ship: Ship,
    self_type: ShipType,
    rng: random.Random,
) -> bool:
    if _fraction(self_ship.hull, self_type.max_hull) < 0.3:
        return True
    if _fraction(self_ship.shields, self_type.max_shields) < 0.2:
        return True

    if ai.level >= AILevel.HARD:
        return rng.random() < 0.3
    if ai.level >= AILevel.MEDIUM:
        return rng.random() < 0.2
    return rng.random() < 0.1


def maintain_formation(ai: AIState, allies: Sequence[Ship]) -> Optional[AIAction]:
    if ai.formation is None or not allies:
        return None
    return AIAction(
        action_type=AIActionType.MOVE,
        priority=PRIORITY_FORMATION,
        position=Position(x=ai.formation.x, y=ai.formation.y),
    )


def _find_living(enemies: Sequence[Ship], ship_id: Optional[str]) -> Optional[Ship]:
    if ship_id is None:
        return None
    for enemy in enemies:
        if enemy.ship_id == ship_id and enemy.hull > 0:
            return enemy
    return None


def decide_action(
    ai: AIState,
    self_ship: Ship,
    self_type: ShipType,
    enemies: Sequence[Ship],
    enemy_types: Mapping[str, ShipType],
    allies: Sequence[Ship],
    delta_time: float,
    *,
    registry: Registry,
    rng: random.Random,
    distances: Optional[Mapping[str, int]] = None,
) -> List[AIAction]:
    """Run one decision tick for an NPC ship.

    Args:
        ai: Mutable AI state for this ship
        self_ship: The NPC's ship
        self_type: Reference data for the NPC's hull
        enemies: Visible hostile ships, in a stable order
        enemy_types: Ship type lookup keyed by ``Ship.type_id``
        allies: Friendly ships (used for formation keeping)
        delta_time: Seconds elapsed since the previous tick
        registry: Reference data for weapon lookups
        rng: Random source for target jitter and evasion rolls
        distances: Scalar distance to each enemy by ship id; missing
            entries use a medium-range default

    Returns:
        Actions for this tick
    """
    actions: List[AIAction] = []

    update_morale(ai, self_ship, self_type)

    if should_retreat(ai, self_ship, self_type, enemies):
        if not ai.is_retreating:
            logger.debug(
                f"AI {self_ship.ship_id} ({ai_level_name(ai.level)}) retreating: "
                f"hull={self_ship.hull}/{self_type.max_hull}, morale={ai.morale:.2f}"
            )
        ai.is_retreating = True
        actions.append(AIAction(action_type=AIActionType.RETREAT, priority=PRIORITY_RETREAT))
        return actions

    ai.last_target_check += delta_time
    current_target = _find_living(enemies, ai.current_target)
    if current_target is None or ai.last_target_check > TARGET_CHECK_INTERVAL:
        target = select_target(ai, enemies, enemy_types, rng)
        if target is not None:
            if target.ship_id != ai.current_target:
                logger.debug(f"AI {self_ship.ship_id} switching target to {target.ship_id}")
            ai.current_target = target.ship_id
            ai.last_target_check = 0.0
            current_target = target
            actions.append(
                AIAction(
                    action_type=AIActionType.TARGET,
                    priority=PRIORITY_TARGET,
                    target_id=target.ship_id,
                )
            )

    if current_target is None:
        return actions
    target_type = enemy_types.get(current_target.type_id)
    if target_type is None:
        return actions

    distance = DEFAULT_ENGAGEMENT_DISTANCE
    if distances is not None:
        distance = distances.get(current_target.ship_id, DEFAULT_ENGAGEMENT_DISTANCE)

    actions.extend(
        select_weapons(ai, self_ship, self_type, current_target, target_type, distance, registry)
    )

    if should_evade(ai, self_ship, self_type, rng):
        actions.append(AIAction(action_type=AIActionType.EVADE, priority=PRIORITY_EVADE))

    formation_action = maintain_formation(ai, allies)
    if formation_action is not None:
        actions.append(formation_action)

    return actions
