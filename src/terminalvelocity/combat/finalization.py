"""Aftermath processing when a ship is destroyed.

Bundles the steps a caller runs after a kill:
- reputation deltas across the faction graph
- bounty and legal-status escalation for criminal kills
- the salvage drop left by the wreck

Nothing here persists anything; the outcome lists what changed.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from loguru import logger

from terminalvelocity.catalog import Registry, ShipType
from terminalvelocity.combat.loot import generate_loot
from terminalvelocity.combat.models import (
    BountyInfo,
    LegalStatus,
    LootDrop,
    ReputationChange,
    ReputationEvent,
    Ship,
)
from terminalvelocity.combat.reputation import (
    apply_reputation_changes,
    calculate_bounty_amount,
    calculate_combat_reputation,
    issue_bounty,
    reputation_change_message,
    update_legal_status,
)

# Severity matches the size of the direct reputation penalty for each crime
CRIME_SEVERITY: Dict[ReputationEvent, int] = {
    ReputationEvent.KILL_CIVILIAN: 30,
    ReputationEvent.KILL_ALLY: 25,
    ReputationEvent.PIRATE_ACTION: 20,
    ReputationEvent.KILL_NEUTRAL: 15,
}


@dataclass
class DestructionOutcome:
    """Everything the caller must persist and report after a kill."""

    victim_id: str
    reputation_changes: List[ReputationChange] = field(default_factory=list)
    reputation: Dict[str, int] = field(default_factory=dict)
    bounty: Optional[BountyInfo] = None
    legal_status: Optional[LegalStatus] = None
    loot: LootDrop = field(default_factory=LootDrop)
    messages: List[str] = field(default_factory=list)


def resolve_destruction(
    victim: Ship,
    victim_type: ShipType,
    event: ReputationEvent,
    *,
    reputation: Mapping[str, int],
    registry: Registry,
    rng: random.Random,
    legal_status: Optional[LegalStatus] = None,
    was_hostile: bool = False,
    had_bounty: bool = False,
    bounty_amount: int = 0,
    now: int = 0,
) -> DestructionOutcome:
    """Compute the consequences of destroying ``victim``.

    Args:
        victim: The destroyed ship
        victim_type: Reference data for the destroyed hull
        event: How the kill is classified for reputation purposes
        reputation: The attacker's faction standings; not modified
        registry: Reference data
        rng: Random source for loot rolls
        legal_status: Attacker's record with the victim's faction, updated
            in place when the kill is a crime
        was_hostile: Whether the victim was hostile to the attacker
        had_bounty: Whether the victim carried a bounty
        bounty_amount: Bounty paid out for the victim
        now: Current unix time, used for bounty expiry

    Returns:
        DestructionOutcome
    """
    outcome = DestructionOutcome(victim_id=victim.ship_id, reputation=dict(reputation))

    if victim.faction_id is not None:
        attacker_reputation = outcome.reputation.get(victim.faction_id, 0)
        outcome.reputation_changes = calculate_combat_reputation(
            event, victim.faction_id, attacker_reputation, registry
        )
        apply_reputation_changes(outcome.reputation, outcome.reputation_changes)
        outcome.messages.extend(
            reputation_change_message(change, registry) for change in outcome.reputation_changes
        )

    bounty_value = calculate_bounty_amount(event, victim_type.price)
    if bounty_value > 0 and legal_status is not None:
        update_legal_status(legal_status, CRIME_SEVERITY[event], now)
        outcome.bounty = issue_bounty(
            legal_status, bounty_value, f"{event.value} ({victim.name or victim.ship_id})", now
        )
        outcome.legal_status = legal_status
        outcome.messages.append(
            f"Bounty of {outcome.bounty.amount} credits posted by {legal_status.faction_id}"
        )

    outcome.loot = generate_loot(
        victim,
        victim_type,
        was_hostile,
        had_bounty,
        bounty_amount,
        registry=registry,
        rng=rng,
    )
    outcome.messages.append(outcome.loot.message.rstrip())

    logger.info(
        f"Ship {victim.ship_id} destroyed ({event.value}): "
        f"{len(outcome.reputation_changes)} reputation changes, "
        f"bounty={outcome.bounty.amount if outcome.bounty else 0}, "
        f"loot value={outcome.loot.total_value}"
    )
    return outcome
