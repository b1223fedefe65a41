"""Seeded tick loop that pits two groups of AI ships against each other."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from loguru import logger

from terminalvelocity.catalog import Registry, ShipType
from terminalvelocity.combat.ai import DEFAULT_ENGAGEMENT_DISTANCE, decide_action, new_ai_state
from terminalvelocity.combat.finalization import DestructionOutcome, resolve_destruction
from terminalvelocity.combat.models import (
    AIActionType,
    AILevel,
    AIState,
    ReputationEvent,
    Ship,
    WeaponState,
)
from terminalvelocity.combat.weapons import fire, init_weapon_state, update_cooldowns

DEFAULT_MAX_TICKS = 60
DEFAULT_TICK_SECONDS = 1.0


@dataclass
class Combatant:
    """A ship in a skirmish together with its AI and weapon state."""

    ship: Ship
    ship_type: ShipType
    ai: AIState
    side: str
    # keyed by weapon id; duplicate mounts share one state
    weapon_states: Dict[str, WeaponState] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return not self.ship.is_destroyed and not self.ai.is_retreating


@dataclass
class SkirmishReport:
    ticks: int = 0
    destroyed: List[str] = field(default_factory=list)
    retreated: List[str] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    winner: Optional[str] = None
    outcomes: List[DestructionOutcome] = field(default_factory=list)


def build_combatant(ship: Ship, level: AILevel, side: str, registry: Registry) -> Combatant:
    """Wrap ``ship`` for a skirmish.

    Raises:
        ValueError: If the ship's hull type is not in the registry
    """
    ship_type = registry.get_ship_type(ship.type_id)
    if ship_type is None:
        raise ValueError(f"Unknown ship type: {ship.type_id}")

    weapon_states: Dict[str, WeaponState] = {}
    for weapon_id in ship.weapons:
        weapon = registry.get_weapon(weapon_id)
        if weapon is not None and weapon_id not in weapon_states:
            weapon_states[weapon_id] = init_weapon_state(weapon)

    return Combatant(
        ship=ship,
        ship_type=ship_type,
        ai=new_ai_state(level),
        side=side,
        weapon_states=weapon_states,
    )


def classify_kill(killer: Ship, victim: Ship, registry: Registry) -> ReputationEvent:
    """Reputation event for ``killer`` destroying ``victim``, judged by faction ties."""
    if victim.faction_id is None or killer.faction_id is None:
        return ReputationEvent.KILL_NEUTRAL
    victim_faction = registry.get_faction(victim.faction_id)
    if victim_faction is None:
        return ReputationEvent.KILL_NEUTRAL
    if victim_faction.is_hostile_to(killer.faction_id):
        return ReputationEvent.KILL_HOSTILE
    if victim.faction_id == killer.faction_id or victim_faction.is_allied_with(killer.faction_id):
        return ReputationEvent.KILL_ALLY
    return ReputationEvent.KILL_NEUTRAL


def _side_out(combatants: Sequence[Combatant], side: str) -> bool:
    return not any(c.is_active for c in combatants if c.side == side)


def _take_turn(
    actor: Combatant,
    combatants: Sequence[Combatant],
    tick_seconds: float,
    distance: int,
    registry: Registry,
    rng: random.Random,
    report: SkirmishReport,
    reputation: Dict[str, Dict[str, int]],
) -> None:
    opponents = [c for c in combatants if c.side != actor.side and c.is_active]
    if not opponents:
        return
    friends = [
        c.ship for c in combatants if c.side == actor.side and c is not actor and c.is_active
    ]
    enemy_types = {c.ship.type_id: c.ship_type for c in opponents}
    by_id = {c.ship.ship_id: c for c in opponents}

    actions = decide_action(
        actor.ai,
        actor.ship,
        actor.ship_type,
        [c.ship for c in opponents],
        enemy_types,
        friends,
        tick_seconds,
        registry=registry,
        rng=rng,
        distances={ship_id: distance for ship_id in by_id},
    )

    if any(action.action_type == AIActionType.RETREAT for action in actions):
        report.retreated.append(actor.ship.ship_id)
        report.log.append(f"[{report.ticks}] {actor.ship.ship_id} breaks off and retreats")
        return

    fire_actions = sorted(
        (a for a in actions if a.action_type == AIActionType.FIRE),
        key=lambda a: a.priority,
        reverse=True,
    )
    fired_this_tick = set()
    for action in fire_actions:
        if action.weapon_id in fired_this_tick:
            continue
        fired_this_tick.add(action.weapon_id)

        target = by_id.get(action.target_id)
        weapon = registry.get_weapon(action.weapon_id)
        state = actor.weapon_states.get(action.weapon_id)
        if target is None or weapon is None or state is None or target.ship.is_destroyed:
            continue

        result = fire(
            weapon,
            state,
            actor.ship,
            target.ship,
            actor.ship_type,
            target.ship_type,
            distance,
            rng,
        )
        if not result.fired:
            continue
        report.log.append(
            f"[{report.ticks}] {actor.ship.ship_id} -> {target.ship.ship_id}: {result.message}"
        )

        if target.ship.is_destroyed:
            report.destroyed.append(target.ship.ship_id)
            report.log.append(f"[{report.ticks}] {target.ship.ship_id} destroyed")
            event = classify_kill(actor.ship, target.ship, registry)
            outcome = resolve_destruction(
                target.ship,
                target.ship_type,
                event,
                reputation=reputation.get(actor.side, {}),
                registry=registry,
                rng=rng,
                was_hostile=event == ReputationEvent.KILL_HOSTILE,
            )
            reputation[actor.side] = outcome.reputation
            report.outcomes.append(outcome)


def run_skirmish(
    side_a: Sequence[Combatant],
    side_b: Sequence[Combatant],
    *,
    registry: Registry,
    rng: random.Random,
    max_ticks: int = DEFAULT_MAX_TICKS,
    tick_seconds: float = DEFAULT_TICK_SECONDS,
    distance: int = DEFAULT_ENGAGEMENT_DISTANCE,
) -> SkirmishReport:
    """Run AI ships against each other until one side is gone or time runs out.

    Ships act in order, side A first. Each active ship gets one decision per
    tick and each weapon fires at most once per tick, highest priority first.
    A side is out once all its ships are destroyed or retreating; the other
    side wins. If both sides are out, or ``max_ticks`` passes, there is no
    winner.

    Args:
        side_a: Ships on the first side (their ``side`` labels must match)
        side_b: Ships on the second side
        registry: Reference data
        rng: Random source for every draw in the run
        max_ticks: Upper bound on ticks simulated
        tick_seconds: Simulated seconds per tick
        distance: Engagement distance used for every shot

    Returns:
        SkirmishReport
    """
    combatants: List[Combatant] = list(side_a) + list(side_b)
    sides = [side_a[0].side if side_a else "a", side_b[0].side if side_b else "b"]
    report = SkirmishReport()
    reputation: Dict[str, Dict[str, int]] = {side: {} for side in sides}

    logger.info(
        f"Skirmish start: {len(side_a)} ship(s) on {sides[0]} vs "
        f"{len(side_b)} ship(s) on {sides[1]}, max_ticks={max_ticks}"
    )

    while report.ticks < max_ticks:
        if _side_out(combatants, sides[0]) or _side_out(combatants, sides[1]):
            break
        report.ticks += 1
        for combatant in combatants:
            update_cooldowns(combatant.weapon_states.values(), tick_seconds)
        for combatant in combatants:
            if combatant.is_active:
                _take_turn(
                    combatant,
                    combatants,
                    tick_seconds,
                    distance,
                    registry,
                    rng,
                    report,
                    reputation,
                )

    a_out = _side_out(combatants, sides[0])
    b_out = _side_out(combatants, sides[1])
    if a_out and not b_out:
        report.winner = sides[1]
    elif b_out and not a_out:
        report.winner = sides[0]

    logger.info(
        f"Skirmish over after {report.ticks} tick(s): winner={report.winner}, "
        f"destroyed={report.destroyed}, retreated={report.retreated}"
    )
    return report
