"""Salvage generation from destroyed ships.

Loot from a kill is made of:

- credits: 10-20% of the hull's list price, plus any bounty on the wreck
- cargo: one survival rate of 30-60% applied to every commodity aboard
- equipment: each outfit survives at 40%, each weapon at 30% (45% from hostiles)
- rare items: a single roll, 5% base, up to 40% for valuable hostile warships

Everything draws from the caller's ``random.Random`` so drops replay exactly
under a fixed seed.
"""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from loguru import logger

from terminalvelocity.catalog import RareItem, Registry, ShipType
from terminalvelocity.combat.models import CargoItem, LootDrop, SalvageResult, Ship

CREDIT_BASE_FRACTION = 0.1
CREDIT_SPREAD = 0.1
CARGO_SURVIVAL_BASE = 0.3
CARGO_SURVIVAL_SPREAD = 0.3
OUTFIT_SALVAGE_CHANCE = 0.4
WEAPON_SALVAGE_CHANCE = 0.3
HOSTILE_WEAPON_SALVAGE_CHANCE = 0.45
RESALE_FRACTION = 0.5

RARE_BASE_CHANCE = 0.05
RARE_CLASS_BONUS = {"military": 0.10, "capital": 0.15}
RARE_HOSTILE_BONUS = 0.08
RARE_VALUE_TIERS = ((500_000, 0.05), (1_000_000, 0.05))
RARE_MAX_CHANCE = 0.4

# (upper bound of the roll, rarity)
RARITY_ROLL_TABLE = (
    (0.05, "legendary"),
    (0.20, "epic"),
    (0.50, "rare"),
)
DEFAULT_RARITY = "uncommon"

CARGO_TONS_PER_UNIT = 1
WEAPON_TONS = 5
OUTFIT_TONS = 3
RARE_ITEM_TONS = 1

SPECIFIC_SALVAGE_CHANCE = 0.3


def rare_item_chance(ship_type: ShipType, was_hostile: bool) -> float:
    chance = RARE_BASE_CHANCE
    chance += RARE_CLASS_BONUS.get(ship_type.ship_class, 0.0)
    if was_hostile:
        # hostiles tend to carry contraband
        chance += RARE_HOSTILE_BONUS
    for price_floor, bonus in RARE_VALUE_TIERS:
        if ship_type.price > price_floor:
            chance += bonus
    return min(chance, RARE_MAX_CHANCE)


def roll_rarity(roll: float) -> str:
    for upper_bound, rarity in RARITY_ROLL_TABLE:
        if roll < upper_bound:
            return rarity
    return DEFAULT_RARITY


def generate_rare_item(registry: Registry, rng: random.Random) -> Optional[RareItem]:
    """Pick a rarity tier, then one item of that tier.

    Falls back to the whole rare list when the chosen tier has no items.
    """
    catalog = registry.rare_items
    if not catalog:
        return None
    rarity = roll_rarity(rng.random())
    eligible = registry.rare_items_by_rarity(rarity) or catalog
    return eligible[rng.randrange(len(eligible))]


def _resale_value(ids: List[str], lookup) -> int:
    total = 0
    for item_id in ids:
        item = lookup(item_id)
        if item is not None:
            total += int(item.price * RESALE_FRACTION)
    return total


def generate_loot(
    ship: Ship,
    ship_type: ShipType,
    was_hostile: bool,
    had_bounty: bool,
    bounty_amount: int,
    *,
    registry: Registry,
    rng: random.Random,
) -> LootDrop:
    """Build the salvage package left by a destroyed ship. Never raises.

    Args:
        ship: The destroyed ship (cargo and equipment source)
        ship_type: Reference data for its hull (price and class)
        was_hostile: Whether the ship was hostile to the victor
        had_bounty: Whether the ship carried a bounty
        bounty_amount: Bounty to pay out when ``had_bounty``
        registry: Lookup for equipment prices and rare items
        rng: Random source

    Returns:
        LootDrop, possibly empty
    """
    loot = LootDrop()

    loot.credits += int(ship_type.price * (CREDIT_BASE_FRACTION + rng.random() * CREDIT_SPREAD))
    if had_bounty and bounty_amount > 0:
        loot.credits += bounty_amount

    survival_rate = CARGO_SURVIVAL_BASE + rng.random() * CARGO_SURVIVAL_SPREAD
    for commodity_id, quantity in ship.cargo.items():
        recovered = int(quantity * survival_rate)
        if recovered > 0:
            loot.cargo.append(CargoItem(commodity_id=commodity_id, quantity=recovered))

    for outfit_id in ship.outfits:
        if rng.random() < OUTFIT_SALVAGE_CHANCE:
            loot.outfits.append(outfit_id)

    weapon_chance = HOSTILE_WEAPON_SALVAGE_CHANCE if was_hostile else WEAPON_SALVAGE_CHANCE
    for weapon_id in ship.weapons:
        if rng.random() < weapon_chance:
            loot.weapons.append(weapon_id)

    if rng.random() < rare_item_chance(ship_type, was_hostile):
        item = generate_rare_item(registry, rng)
        if item is not None:
            loot.rare_items.append(item)
            loot.credits += item.value // 2

    loot.total_value = (
        loot.credits
        + _resale_value(loot.outfits, registry.get_outfit)
        + _resale_value(loot.weapons, registry.get_weapon)
    )
    loot.message = format_loot_message(loot, had_bounty)

    logger.debug(
        f"Loot from {ship.ship_id}: {loot.credits} credits, {len(loot.cargo)} cargo lines, "
        f"{len(loot.weapons)} weapons, {len(loot.outfits)} outfits, "
        f"{len(loot.rare_items)} rare"
    )
    return loot


def format_loot_message(loot: LootDrop, had_bounty: bool) -> str:
    lines = ["Salvage recovered:"]
    if loot.credits > 0:
        lines.append(
            "  - Bounty collected + salvage credits" if had_bounty else "  - Credits from wreckage"
        )
    if loot.cargo:
        lines.append("  - Cargo containers")
    if loot.weapons:
        lines.append("  - Weapons")
    if loot.outfits:
        lines.append("  - Equipment outfits")
    for item in loot.rare_items:
        lines.append(f"  - RARE: {item.name} ({item.rarity})")
    return "\n".join(lines) + "\n"


def cargo_space_required(loot: LootDrop) -> int:
    total = sum(item.quantity for item in loot.cargo) * CARGO_TONS_PER_UNIT
    total += len(loot.weapons) * WEAPON_TONS
    total += len(loot.outfits) * OUTFIT_TONS
    total += len(loot.rare_items) * RARE_ITEM_TONS
    return total


def can_carry_loot(ship: Ship, ship_type: ShipType, loot: LootDrop) -> bool:
    available = ship_type.cargo_space - ship.cargo_used()
    return cargo_space_required(loot) <= available


def apply_loot(
    ship: Ship,
    ship_type: ShipType,
    loot: LootDrop,
    registry: Registry,
) -> Tuple[bool, str, int]:
    """Transfer a loot drop onto the collecting ship, all or nothing.

    Salvaged weapons and outfits are sold on the spot at half price.

    Returns:
        (applied, message, credits earned). Nothing changes when not applied.
    """
    if not can_carry_loot(ship, ship_type, loot):
        return False, "Insufficient cargo space for all salvage", 0

    for item in loot.cargo:
        ship.add_cargo(item.commodity_id, item.quantity)

    weapon_value = _resale_value(loot.weapons, registry.get_weapon)
    outfit_value = _resale_value(loot.outfits, registry.get_outfit)
    total_credits = loot.credits + weapon_value + outfit_value
    return True, format_loot_summary(loot, total_credits, registry), total_credits


def format_loot_summary(loot: LootDrop, total_credits: int, registry: Registry) -> str:
    lines = ["Salvage collected:", "", f"{format_credits(total_credits)} credits"]

    if loot.cargo:
        lines += ["", "Cargo recovered:"]
        for item in loot.cargo:
            commodity = registry.get_commodity(item.commodity_id)
            name = commodity.name if commodity else item.commodity_id
            lines.append(f"  {name} x{item.quantity}")

    if loot.weapons:
        lines += ["", "Weapons salvaged (sold):"]
        for weapon_id in loot.weapons:
            weapon = registry.get_weapon(weapon_id)
            if weapon is not None:
                lines.append(f"  {weapon.name}")

    if loot.outfits:
        lines += ["", "Outfits salvaged (sold):"]
        for outfit_id in loot.outfits:
            outfit = registry.get_outfit(outfit_id)
            if outfit is not None:
                lines.append(f"  {outfit.name}")

    if loot.rare_items:
        lines += ["", "RARE ITEMS:"]
        for item in loot.rare_items:
            lines.append(f"  [{item.rarity}] {item.name}")
            lines.append(f"    {item.description}")

    return "\n".join(lines) + "\n"


def salvage_specific_item(
    item_type: str,
    item_id: str,
    luck: float,
    rng: random.Random,
) -> SalvageResult:
    """Try to pull one named item out of a wreck. ``luck`` of 1.0 is a 30% chance."""
    success = rng.random() < SPECIFIC_SALVAGE_CHANCE * luck
    if success:
        return SalvageResult(
            success=True,
            recovered_qty=1,
            item_id=item_id,
            message=f"Successfully salvaged {item_type}",
        )
    return SalvageResult(
        success=False,
        recovered_qty=0,
        item_id=item_id,
        message="Salvage attempt failed - item too damaged",
    )


def calculate_salvage_time(loot: LootDrop) -> int:
    """Turns needed to collect a drop: 2 base, up to 5 for big hauls."""
    turns = 2
    if len(loot.cargo) > 5:
        turns += 1
    if len(loot.weapons) + len(loot.outfits) > 3:
        turns += 1
    if loot.rare_items:
        turns += 1
    return turns


def format_credits(amount: int) -> str:
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.2f}M"
    if amount >= 1000:
        return f"{amount / 1000:.1f}K"
    return str(amount)
