"""Combat subsystem for Terminal Velocity."""

from .models import (
    AIAction,
    AIActionType,
    AILevel,
    AIState,
    BountyInfo,
    FireResult,
    LegalStatus,
    LegalStatusLevel,
    LootDrop,
    ReputationChange,
    ReputationEvent,
    Ship,
    WeaponState,
)
from .weapons import calculate_hit_chance, can_fire, fire, update_cooldowns
from .ai import decide_action, new_ai_state
from .reputation import (
    apply_reputation_changes,
    calculate_bounty_amount,
    calculate_combat_reputation,
    update_legal_status,
)
from .loot import apply_loot, generate_loot
from .finalization import DestructionOutcome, resolve_destruction
from .skirmish import SkirmishReport, build_combatant, run_skirmish

__all__ = [
    "AIAction",
    "AIActionType",
    "AILevel",
    "AIState",
    "BountyInfo",
    "FireResult",
    "LegalStatus",
    "LegalStatusLevel",
    "LootDrop",
    "ReputationChange",
    "ReputationEvent",
    "Ship",
    "WeaponState",
    "calculate_hit_chance",
    "can_fire",
    "fire",
    "update_cooldowns",
    "decide_action",
    "new_ai_state",
    "apply_reputation_changes",
    "calculate_bounty_amount",
    "calculate_combat_reputation",
    "update_legal_status",
    "apply_loot",
    "generate_loot",
    "DestructionOutcome",
    "resolve_destruction",
    "SkirmishReport",
    "build_combatant",
    "run_skirmish",
]
