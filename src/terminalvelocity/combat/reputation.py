"""Faction reputation, bounties, legal status and reinforcement rules."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from loguru import logger

from terminalvelocity.catalog import Faction, Registry
from terminalvelocity.combat.models import (
    BountyInfo,
    HostilityLevel,
    LegalStatus,
    LegalStatusLevel,
    ReputationChange,
    ReputationEvent,
)

MIN_REPUTATION = -100
MAX_REPUTATION = 100

BASE_BOUNTY = 10000
BOUNTY_SHIP_VALUE_FACTOR = 0.2
BOUNTY_MULTIPLIERS: Dict[ReputationEvent, float] = {
    ReputationEvent.KILL_CIVILIAN: 3.0,
    ReputationEvent.KILL_ALLY: 2.0,
    ReputationEvent.KILL_NEUTRAL: 1.5,
    ReputationEvent.PIRATE_ACTION: 1.0,
}
BOUNTY_PAYOFF_MULTIPLIER = 1.5
DEFAULT_BOUNTY_DURATION = 7 * 24 * 3600

# Cumulative crimes x severity needed for each legal tier
LEGAL_THRESHOLDS = (
    (100, LegalStatusLevel.FUGITIVE),
    (50, LegalStatusLevel.WANTED),
    (10, LegalStatusLevel.OFFENDER),
)

LEGAL_STATUS_NAMES = {
    LegalStatusLevel.CLEAN: "Clean Record",
    LegalStatusLevel.OFFENDER: "Offender",
    LegalStatusLevel.WANTED: "Wanted",
    LegalStatusLevel.FUGITIVE: "Fugitive",
}


def _change(faction_id: str, amount: int, reason: str) -> ReputationChange:
    return ReputationChange(faction_id=faction_id, amount=amount, reason=reason)


def _kill_hostile(victim: Faction, attacker_reputation: int) -> List[ReputationChange]:
    amount = 5
    if attacker_reputation < 0:
        # earning trust
        amount += 2
    return [
        _change(enemy_id, amount, f"Destroyed {victim.short_name} vessel")
        for enemy_id in victim.enemies
    ]


def _kill_ally(victim: Faction, attacker_reputation: int) -> List[ReputationChange]:
    amount = -25
    if attacker_reputation > 25:
        # betrayal
        amount -= 10
    changes = [_change(victim.id, amount, f"Destroyed {victim.short_name} vessel (hostile act)")]
    changes.extend(
        _change(ally_id, -15, f"Attacked {victim.short_name} ally") for ally_id in victim.allies
    )
    changes.extend(
        _change(enemy_id, 2, f"Attacked {victim.short_name}") for enemy_id in victim.enemies
    )
    return changes


def _kill_neutral(victim: Faction) -> List[ReputationChange]:
    changes = [_change(victim.id, -15, f"Destroyed {victim.short_name} vessel (unprovoked)")]
    changes.extend(
        _change(ally_id, -5, f"Attacked {victim.short_name}") for ally_id in victim.allies
    )
    return changes


def _kill_civilian(victim: Faction, registry: Registry) -> List[ReputationChange]:
    changes = [
        _change(victim.id, -30, f"Destroyed {victim.short_name} civilian vessel (piracy)")
    ]
    for faction in registry.factions:
        if faction.id != victim.id and not faction.is_hostile_to(victim.id):
            changes.append(_change(faction.id, -10, "Piracy against civilians"))
    return changes


def calculate_combat_reputation(
    event: ReputationEvent,
    victim_faction_id: str,
    attacker_reputation: int,
    registry: Registry,
) -> List[ReputationChange]:
    """Compute every reputation delta caused by a combat event.

    Args:
        event: What the attacker did
        victim_faction_id: Faction of the ship that was attacked or defended
        attacker_reputation: Attacker's current standing with that faction
        registry: Faction lookup

    Returns:
        Ordered list of changes; empty for an unknown faction
    """
    victim = registry.get_faction(victim_faction_id)
    if victim is None:
        logger.warning(f"Reputation event {event.value} for unknown faction {victim_faction_id}")
        return []

    if event == ReputationEvent.KILL_HOSTILE:
        return _kill_hostile(victim, attacker_reputation)
    if event == ReputationEvent.KILL_ALLY:
        return _kill_ally(victim, attacker_reputation)
    if event == ReputationEvent.KILL_NEUTRAL:
        return _kill_neutral(victim)
    if event == ReputationEvent.KILL_CIVILIAN:
        return _kill_civilian(victim, registry)
    if event == ReputationEvent.DEFEND_ALLY:
        return [_change(victim.id, 10, f"Defended {victim.short_name} vessel")]
    if event == ReputationEvent.PIRATE_ACTION:
        return [_change(victim.id, -20, "Piracy")]
    if event == ReputationEvent.BOUNTY_PAID:
        return [_change(victim.id, 8, "Bounty collected")]
    return []


def apply_reputation_changes(
    reputation: Optional[Dict[str, int]],
    changes: Iterable[ReputationChange],
) -> Dict[str, int]:
    """Accumulate ``changes`` into ``reputation`` and clamp each to [-100, 100].

    The map is updated in place and returned; ``None`` starts a fresh map.
    """
    if reputation is None:
        reputation = {}
    for change in changes:
        updated = reputation.get(change.faction_id, 0) + change.amount
        reputation[change.faction_id] = max(MIN_REPUTATION, min(MAX_REPUTATION, updated))
    return reputation


def reputation_change_message(change: ReputationChange, registry: Registry) -> str:
    faction = registry.get_faction(change.faction_id)
    faction_name = faction.short_name if faction else change.faction_id
    direction = "decreased" if change.amount < 0 else "increased"
    return f"{faction_name} reputation {direction} by {abs(change.amount)}: {change.reason}"


def get_hostility_level(reputation: int) -> HostilityLevel:
    if reputation >= 75:
        return HostilityLevel.ALLIED
    if reputation >= 25:
        return HostilityLevel.FRIENDLY
    if reputation > -25:
        return HostilityLevel.NEUTRAL
    if reputation > -50:
        return HostilityLevel.UNFRIENDLY
    if reputation > -75:
        return HostilityLevel.HOSTILE
    return HostilityLevel.AT_WAR


# ----------------------------------------------------------------------
# Bounties and legal status
# ----------------------------------------------------------------------

def calculate_bounty_amount(event: ReputationEvent, ship_value: int) -> int:
    multiplier = BOUNTY_MULTIPLIERS.get(event)
    if multiplier is None:
        return 0
    return BASE_BOUNTY + int(ship_value * BOUNTY_SHIP_VALUE_FACTOR * multiplier)


def update_legal_status(status: LegalStatus, crime_severity: int, now: int = 0) -> LegalStatus:
    """Record a crime and escalate the legal tier if a threshold is crossed.

    The tier never drops here; clearing a record is a separate, explicit act.
    """
    status.crimes_count += 1
    if now:
        status.last_offense = now
    total_severity = status.crimes_count * crime_severity

    computed = LegalStatusLevel.CLEAN
    for threshold, level in LEGAL_THRESHOLDS:
        if total_severity >= threshold:
            computed = level
            break

    if computed > status.status:
        logger.debug(
            f"Legal status with {status.faction_id} escalated "
            f"{status.status.name.lower()} -> {computed.name.lower()}"
        )
        status.status = computed
    return status


def legal_status_name(status: LegalStatusLevel) -> str:
    return LEGAL_STATUS_NAMES.get(status, "Unknown")


def issue_bounty(
    status: LegalStatus,
    amount: int,
    reason: str,
    now: int,
    duration: int = DEFAULT_BOUNTY_DURATION,
) -> BountyInfo:
    """Attach a bounty to ``status``, stacking onto any bounty still active."""
    existing = status.active_bounty
    if existing is not None and is_bounty_active(existing, now):
        amount += existing.amount
    bounty = BountyInfo(
        faction_id=status.faction_id,
        amount=amount,
        reason=reason,
        expires=now + duration,
    )
    status.active_bounty = bounty
    return bounty


def is_bounty_active(bounty: Optional[BountyInfo], current_time: int) -> bool:
    if bounty is None:
        return False
    return bounty.expires > current_time


def get_active_bounties(statuses: Iterable[LegalStatus], current_time: int) -> List[BountyInfo]:
    return [
        status.active_bounty
        for status in statuses
        if status.active_bounty is not None and is_bounty_active(status.active_bounty, current_time)
    ]


def total_bounty_value(bounties: Iterable[BountyInfo]) -> int:
    return sum(bounty.amount for bounty in bounties)


def payoff_cost(bounty_amount: int) -> int:
    return int(bounty_amount * BOUNTY_PAYOFF_MULTIPLIER)


def can_pay_off_bounty(player_credits: int, bounty_amount: int) -> bool:
    return player_credits >= payoff_cost(bounty_amount)


# ----------------------------------------------------------------------
# Reinforcements
# ----------------------------------------------------------------------

def reinforcement_threshold(reputation: int) -> Optional[int]:
    """Combat turns before a faction dispatches help; None if it never will."""
    if reputation < -50:
        return 2
    if reputation < -25:
        return 4
    if reputation < 0:
        return 6
    return None


def will_faction_reinforce(
    faction_id: str,
    reputation: int,
    system_faction_id: str,
    combat_turns: int,
    registry: Registry,
) -> bool:
    """Whether ``faction_id`` sends ships against the player this turn.

    Only happens in the faction's own or allied territory.
    """
    faction = registry.get_faction(faction_id)
    if faction is None:
        return False

    in_territory = faction_id == system_faction_id
    if not in_territory and not faction.is_allied_with(system_faction_id):
        return False

    threshold = reinforcement_threshold(reputation)
    if threshold is None:
        return False
    return combat_turns >= threshold


def calculate_reinforcement_strength(
    faction_id: str,
    reputation: int,
    registry: Registry,
) -> int:
    """Number of ships dispatched (1-5), or 0 for an unknown faction."""
    faction = registry.get_faction(faction_id)
    if faction is None:
        return 0

    multiplier = 1.0
    if reputation < -75:
        multiplier = 2.0
    elif reputation < -50:
        multiplier = 1.5
    elif reputation < -25:
        multiplier = 1.2

    ships = int(faction.patrol_strength * multiplier / 3.0)
    return max(1, min(5, ships))


def get_reinforcement_delay(patrol_strength: int) -> int:
    """Turns until dispatched reinforcements arrive; strong navies are faster."""
    if patrol_strength >= 8:
        return 2
    if patrol_strength >= 6:
        return 3
    if patrol_strength >= 4:
        return 4
    return 5
