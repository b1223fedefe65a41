"""Data models for the combat subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional

from terminalvelocity.catalog import RareItem


class AILevel(IntEnum):
    """Difficulty tiers for NPC combatants, ordered weakest to strongest."""

    EASY = 0
    MEDIUM = 1
    HARD = 2
    EXPERT = 3
    ACE = 4

    @classmethod
    def from_str(cls, value: str) -> "AILevel":
        try:
            return cls[value.upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown AI level: {value}") from exc


class AIActionType(Enum):
    TARGET = "target"
    FIRE = "fire"
    EVADE = "evade"
    RETREAT = "retreat"
    MOVE = "move"


class ReputationEvent(Enum):
    """Combat events that move faction standing."""

    KILL_HOSTILE = "kill_hostile"
    KILL_NEUTRAL = "kill_neutral"
    KILL_ALLY = "kill_ally"
    KILL_CIVILIAN = "kill_civilian"
    DEFEND_ALLY = "defend_ally"
    PIRATE_ACTION = "pirate_action"
    BOUNTY_PAID = "bounty_paid"
    BOUNTY_CLEARED = "bounty_cleared"

    @classmethod
    def from_str(cls, value: str) -> "ReputationEvent":
        try:
            return cls(value.lower())
        except ValueError as exc:
            raise ValueError(f"Unknown reputation event: {value}") from exc


class HostilityLevel(Enum):
    AT_WAR = "at_war"
    HOSTILE = "hostile"
    UNFRIENDLY = "unfriendly"
    NEUTRAL = "neutral"
    FRIENDLY = "friendly"
    ALLIED = "allied"


class LegalStatusLevel(IntEnum):
    """Criminal record tiers. Only ever moves upward."""

    CLEAN = 0
    OFFENDER = 1
    WANTED = 2
    FUGITIVE = 3


@dataclass
class CargoItem:
    commodity_id: str
    quantity: int


@dataclass
class Ship:
    """Mutable combat entity owned by the caller."""

    ship_id: str
    type_id: str
    hull: int
    shields: int
    name: str = ""
    fuel: int = 0
    cargo: Dict[str, int] = field(default_factory=dict)
    weapons: List[str] = field(default_factory=list)
    outfits: List[str] = field(default_factory=list)
    faction_id: Optional[str] = None

    @property
    def is_destroyed(self) -> bool:
        return self.hull <= 0

    def cargo_used(self) -> int:
        return sum(self.cargo.values())

    def add_cargo(self, commodity_id: str, quantity: int) -> None:
        self.cargo[commodity_id] = self.cargo.get(commodity_id, 0) + quantity


@dataclass
class WeaponState:
    """Runtime state for one equipped weapon during an encounter."""

    weapon_id: str
    current_ammo: int = 0
    cooldown_remaining: float = 0.0
    shots_fired: int = 0

    @property
    def is_ready(self) -> bool:
        return self.cooldown_remaining <= 0

    @property
    def is_empty(self) -> bool:
        return self.current_ammo <= 0


@dataclass
class FireResult:
    """Outcome of a single weapon discharge."""

    hit: bool = False
    damage: int = 0
    shield_damage: int = 0
    hull_damage: int = 0
    critical_hit: bool = False
    ammo_remaining: int = 0
    fired: bool = False
    message: str = ""


@dataclass(frozen=True)
class Position:
    x: int
    y: int


@dataclass
class AIState:
    """Per-NPC tuning and decision memory, mutated every tick."""

    level: AILevel
    aggression: float
    accuracy: float
    reaction_time: float
    current_target: Optional[str] = None
    last_target_check: float = 0.0
    is_retreating: bool = False
    morale: float = 1.0
    formation: Optional[Position] = None


@dataclass
class AIAction:
    """An intent emitted by the AI; the caller sequences execution."""

    action_type: AIActionType
    priority: float
    target_id: Optional[str] = None
    weapon_id: Optional[str] = None
    position: Optional[Position] = None


@dataclass(frozen=True)
class ReputationChange:
    faction_id: str
    amount: int
    reason: str


@dataclass
class BountyInfo:
    faction_id: str
    amount: int
    reason: str
    expires: int


@dataclass
class LegalStatus:
    """Per-(player, faction) criminal record."""

    faction_id: str
    status: LegalStatusLevel = LegalStatusLevel.CLEAN
    crimes_count: int = 0
    last_offense: int = 0
    active_bounty: Optional[BountyInfo] = None


@dataclass
class LootDrop:
    """Everything recovered from a destroyed ship."""

    credits: int = 0
    cargo: List[CargoItem] = field(default_factory=list)
    outfits: List[str] = field(default_factory=list)
    weapons: List[str] = field(default_factory=list)
    rare_items: List[RareItem] = field(default_factory=list)
    total_value: int = 0
    message: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.credits or self.cargo or self.outfits or self.weapons or self.rare_items)


@dataclass
class SalvageResult:
    success: bool
    recovered_qty: int
    item_id: str
    message: str
