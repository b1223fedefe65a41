"""Reference data definitions and the registry used by the combat engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from terminalvelocity.utils.config import get_settings


class ShipType(BaseModel):
    """Statistics and capabilities for a hull design."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    price: int = Field(ge=0)
    max_hull: int = Field(gt=0)
    max_shields: int = Field(ge=0)
    shield_regen: int = Field(default=0, ge=0)
    max_fuel: int = Field(default=0, ge=0)
    cargo_space: int = Field(default=0, ge=0)
    speed: int = Field(default=0, ge=0)
    maneuverability: int = Field(default=0, ge=0)
    weapon_slots: int = Field(default=0, ge=0)
    ship_class: str = Field(default="shuttle", alias="class")


class Weapon(BaseModel):
    """Weapon definition as sold by outfitters."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    damage: int = Field(ge=0)
    range_value: int = Field(ge=0)
    range_category: str = "medium"
    weapon_type: str
    accuracy: int = Field(ge=0, le=100)
    price: int = Field(default=0, ge=0)
    cooldown: float = Field(default=0.0, ge=0.0)
    energy_cost: int = Field(default=0, ge=0)
    ammo_capacity: int = Field(default=0, ge=0)
    ammo_consumption: int = Field(default=0, ge=0)
    shield_penetration: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def is_ammo_limited(self) -> bool:
        return self.weapon_type == "missile" and self.ammo_capacity > 0


class Outfit(BaseModel):
    """Non-weapon ship equipment."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    outfit_type: str
    price: int = Field(default=0, ge=0)
    shield_bonus: int = 0
    hull_bonus: int = 0
    cargo_bonus: int = 0
    fuel_bonus: int = 0
    speed_bonus: int = 0


class Faction(BaseModel):
    """NPC government or organisation with declared alliances."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    short_name: str
    description: str = ""
    allies: List[str] = Field(default_factory=list)
    enemies: List[str] = Field(default_factory=list)
    patrol_strength: int = Field(default=5, ge=0, le=10)
    starting_rep: int = Field(default=0, ge=-100, le=100)

    def is_hostile_to(self, faction_id: str) -> bool:
        return faction_id in self.enemies

    def is_allied_with(self, faction_id: str) -> bool:
        return faction_id in self.allies


class Commodity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    base_price: int = Field(default=0, ge=0)


class RareItem(BaseModel):
    """Special salvage with a rarity tier."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    rarity: str
    value: int = Field(ge=0)
    item_type: str


class CatalogData(BaseModel):
    """On-disk catalog layout."""

    ship_types: List[ShipType] = Field(default_factory=list)
    weapons: List[Weapon] = Field(default_factory=list)
    outfits: List[Outfit] = Field(default_factory=list)
    factions: List[Faction] = Field(default_factory=list)
    commodities: List[Commodity] = Field(default_factory=list)
    rare_items: List[RareItem] = Field(default_factory=list)


def _index(items: Iterable[BaseModel]) -> Dict[str, BaseModel]:
    # dicts keep insertion order, so iteration follows declaration order
    return {item.id: item for item in items}


class Registry:
    """Read-only lookup of reference data, passed explicitly into engine calls.

    Lookups return None for unknown IDs instead of raising.
    """

    def __init__(
        self,
        *,
        ship_types: Iterable[ShipType] = (),
        weapons: Iterable[Weapon] = (),
        outfits: Iterable[Outfit] = (),
        factions: Iterable[Faction] = (),
        commodities: Iterable[Commodity] = (),
        rare_items: Iterable[RareItem] = (),
    ) -> None:
        self._ship_types: Dict[str, ShipType] = _index(ship_types)
        self._weapons: Dict[str, Weapon] = _index(weapons)
        self._outfits: Dict[str, Outfit] = _index(outfits)
        self._factions: Dict[str, Faction] = _index(factions)
        self._commodities: Dict[str, Commodity] = _index(commodities)
        self._rare_items: List[RareItem] = list(rare_items)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def standard(cls) -> "Registry":
        """Return the built-in catalog shipped with the game."""
        return cls(
            ship_types=STANDARD_SHIP_TYPES,
            weapons=STANDARD_WEAPONS,
            outfits=STANDARD_OUTFITS,
            factions=STANDARD_FACTIONS,
            commodities=STANDARD_COMMODITIES,
            rare_items=STANDARD_RARE_ITEMS,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Registry":
        """Build a registry from a catalog mapping.

        Raises:
            pydantic.ValidationError: If any entry fails validation
        """
        catalog = CatalogData.model_validate(data)
        return cls(
            ship_types=catalog.ship_types,
            weapons=catalog.weapons,
            outfits=catalog.outfits,
            factions=catalog.factions,
            commodities=catalog.commodities,
            rare_items=catalog.rare_items,
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "Registry":
        catalog_path = Path(path)
        with catalog_path.open(encoding="utf-8") as handle:
            data = json.load(handle)
        registry = cls.from_dict(data)
        logger.info(
            f"Loaded catalog from {catalog_path}: {len(registry._weapons)} weapons, "
            f"{len(registry._ship_types)} ship types, {len(registry._factions)} factions"
        )
        return registry

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_ship_type(self, ship_type_id: str) -> Optional[ShipType]:
        return self._ship_types.get(ship_type_id)

    def get_weapon(self, weapon_id: str) -> Optional[Weapon]:
        return self._weapons.get(weapon_id)

    def get_outfit(self, outfit_id: str) -> Optional[Outfit]:
        return self._outfits.get(outfit_id)

    def get_faction(self, faction_id: str) -> Optional[Faction]:
        return self._factions.get(faction_id)

    def get_commodity(self, commodity_id: str) -> Optional[Commodity]:
        return self._commodities.get(commodity_id)

    def get_rare_item(self, item_id: str) -> Optional[RareItem]:
        for item in self._rare_items:
            if item.id == item_id:
                return item
        return None

    @property
    def ship_types(self) -> List[ShipType]:
        return list(self._ship_types.values())

    @property
    def weapons(self) -> List[Weapon]:
        return list(self._weapons.values())

    @property
    def outfits(self) -> List[Outfit]:
        return list(self._outfits.values())

    @property
    def factions(self) -> List[Faction]:
        return list(self._factions.values())

    @property
    def rare_items(self) -> List[RareItem]:
        return list(self._rare_items)

    def rare_items_by_rarity(self, rarity: str) -> List[RareItem]:
        return [item for item in self._rare_items if item.rarity == rarity]


def load_registry(path: str | Path | None = None) -> Registry:
    """Load the catalog from ``path``, the configured path, or the built-in data.

    Args:
        path: Explicit catalog file. Overrides TV_CATALOG_PATH.

    Returns:
        Registry instance

    Raises:
        FileNotFoundError: If a catalog path was given but does not exist
    """
    catalog_path = Path(path) if path else get_settings().catalog_path
    if catalog_path is None:
        return Registry.standard()
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")
    return Registry.from_json(catalog_path)


# ----------------------------------------------------------------------
# Standard catalog
# ----------------------------------------------------------------------

STANDARD_SHIP_TYPES: List[ShipType] = [
    ShipType(id="shuttle", name="Shuttle", description="Basic short-range transport",
             price=25000, max_hull=100, max_shields=50, shield_regen=5, max_fuel=100,
             cargo_space=20, speed=3, maneuverability=5, weapon_slots=1, ship_class="shuttle"),
    ShipType(id="courier", name="Courier", description="Fast light cargo runner",
             price=50000, max_hull=150, max_shields=75, shield_regen=7, max_fuel=150,
             cargo_space=40, speed=7, maneuverability=8, weapon_slots=2, ship_class="shuttle"),
    ShipType(id="interceptor", name="Interceptor", description="Nimble patrol fighter",
             price=75000, max_hull=120, max_shields=100, shield_regen=10, max_fuel=120,
             cargo_space=10, speed=10, maneuverability=12, weapon_slots=3, ship_class="fighter"),
    ShipType(id="viper", name="Viper", description="Heavy fighter",
             price=120000, max_hull=200, max_shields=150, shield_regen=12, max_fuel=140,
             cargo_space=15, speed=8, maneuverability=10, weapon_slots=4, ship_class="fighter"),
    ShipType(id="hauler", name="Hauler", description="Medium freighter",
             price=150000, max_hull=300, max_shields=100, shield_regen=8, max_fuel=200,
             cargo_space=100, speed=3, maneuverability=3, weapon_slots=2, ship_class="freighter"),
    ShipType(id="bulk_freighter", name="Bulk Freighter", description="Slow bulk carrier",
             price=300000, max_hull=400, max_shields=150, shield_regen=10, max_fuel=250,
             cargo_space=200, speed=2, maneuverability=2, weapon_slots=3, ship_class="freighter"),
    ShipType(id="gunship", name="Gunship", description="Escort corvette",
             price=250000, max_hull=350, max_shields=200, shield_regen=15, max_fuel=180,
             cargo_space=50, speed=6, maneuverability=7, weapon_slots=5, ship_class="corvette"),
    ShipType(id="frigate", name="Frigate", description="Patrol warship",
             price=400000, max_hull=500, max_shields=300, shield_regen=20, max_fuel=200,
             cargo_space=60, speed=5, maneuverability=6, weapon_slots=6, ship_class="military"),
    ShipType(id="destroyer", name="Destroyer", description="Line warship",
             price=750000, max_hull=700, max_shields=500, shield_regen=30, max_fuel=250,
             cargo_space=80, speed=4, maneuverability=4, weapon_slots=8, ship_class="military"),
    ShipType(id="cruiser", name="Cruiser", description="Fleet command ship",
             price=1500000, max_hull=1000, max_shields=800, shield_regen=50, max_fuel=300,
             cargo_space=100, speed=3, maneuverability=3, weapon_slots=10, ship_class="military"),
    ShipType(id="battleship", name="Battleship", description="Capital ship of the line",
             price=3000000, max_hull=1500, max_shields=1200, shield_regen=75, max_fuel=350,
             cargo_space=120, speed=2, maneuverability=2, weapon_slots=12, ship_class="capital"),
]

STANDARD_WEAPONS: List[Weapon] = [
    Weapon(id="pulse_laser", name="Pulse Laser", damage=15, range_value=500, range_category="medium",
           weapon_type="laser", accuracy=85, price=5000, cooldown=0.5, energy_cost=10,
           shield_penetration=0.0),
    Weapon(id="beam_laser", name="Beam Laser", damage=25, range_value=600, range_category="medium",
           weapon_type="laser", accuracy=80, price=12000, cooldown=1.0, energy_cost=20,
           shield_penetration=0.1),
    Weapon(id="heavy_laser", name="Heavy Laser", damage=40, range_value=800, range_category="long",
           weapon_type="laser", accuracy=75, price=25000, cooldown=1.5, energy_cost=35,
           shield_penetration=0.15),
    Weapon(id="missile_launcher", name="Missile Launcher", damage=50, range_value=1000,
           range_category="long", weapon_type="missile", accuracy=70, price=15000, cooldown=2.0,
           ammo_capacity=20, ammo_consumption=1, shield_penetration=0.2),
    Weapon(id="torpedo_launcher", name="Torpedo Launcher", damage=80, range_value=1200,
           range_category="long", weapon_type="missile", accuracy=65, price=35000, cooldown=3.0,
           ammo_capacity=10, ammo_consumption=1, shield_penetration=0.4),
    Weapon(id="plasma_cannon", name="Plasma Cannon", damage=35, range_value=550,
           range_category="medium", weapon_type="plasma", accuracy=75, price=20000, cooldown=1.2,
           energy_cost=25, shield_penetration=0.25),
    Weapon(id="plasma_turret", name="Plasma Turret", damage=30, range_value=350,
           range_category="short", weapon_type="plasma", accuracy=90, price=18000, cooldown=0.8,
           energy_cost=18, shield_penetration=0.2),
    Weapon(id="railgun", name="Railgun", damage=60, range_value=900, range_category="long",
           weapon_type="railgun", accuracy=70, price=40000, cooldown=2.5, energy_cost=40,
           shield_penetration=0.35),
    Weapon(id="heavy_railgun", name="Heavy Railgun", damage=100, range_value=1000,
           range_category="long", weapon_type="railgun", accuracy=65, price=75000, cooldown=4.0,
           energy_cost=60, shield_penetration=0.5),
]

STANDARD_OUTFITS: List[Outfit] = [
    Outfit(id="shield_booster_mk1", name="Shield Booster Mk1", outfit_type="shield_booster",
           description="Increases maximum shield capacity", price=8000, shield_bonus=50),
    Outfit(id="shield_booster_mk2", name="Shield Booster Mk2", outfit_type="shield_booster",
           description="Advanced shield enhancement system", price=18000, shield_bonus=100),
    Outfit(id="shield_booster_mk3", name="Shield Booster Mk3", outfit_type="shield_booster",
           description="Military-grade shield amplifier", price=40000, shield_bonus=200),
    Outfit(id="hull_plating_mk1", name="Hull Plating Mk1", outfit_type="hull_reinforcement",
           description="Additional armor plating", price=6000, hull_bonus=50),
    Outfit(id="hull_plating_mk2", name="Hull Plating Mk2", outfit_type="hull_reinforcement",
           description="Composite armor enhancement", price=15000, hull_bonus=100),
    Outfit(id="hull_plating_mk3", name="Hull Plating Mk3", outfit_type="hull_reinforcement",
           description="Military-grade armor system", price=35000, hull_bonus=200),
    Outfit(id="cargo_pod_small", name="Small Cargo Pod", outfit_type="cargo_pod",
           description="Adds 10 tons of cargo space", price=5000, cargo_bonus=10),
    Outfit(id="cargo_pod_medium", name="Medium Cargo Pod", outfit_type="cargo_pod",
           description="Adds 20 tons of cargo space", price=12000, cargo_bonus=20),
    Outfit(id="cargo_pod_large", name="Large Cargo Pod", outfit_type="cargo_pod",
           description="Adds 40 tons of cargo space", price=25000, cargo_bonus=40),
    Outfit(id="fuel_tank_small", name="Small Fuel Tank", outfit_type="fuel_tank",
           description="Adds 50 units of fuel capacity", price=4000, fuel_bonus=50),
    Outfit(id="fuel_tank_medium", name="Medium Fuel Tank", outfit_type="fuel_tank",
           description="Adds 100 units of fuel capacity", price=9000, fuel_bonus=100),
    Outfit(id="fuel_tank_large", name="Large Fuel Tank", outfit_type="fuel_tank",
           description="Adds 200 units of fuel capacity", price=20000, fuel_bonus=200),
    Outfit(id="engine_upgrade_mk1", name="Engine Upgrade Mk1", outfit_type="engine",
           description="Increases ship speed", price=10000, speed_bonus=1),
    Outfit(id="engine_upgrade_mk2", name="Engine Upgrade Mk2", outfit_type="engine",
           description="Advanced thruster system", price=25000, speed_bonus=2),
    Outfit(id="engine_upgrade_mk3", name="Engine Upgrade Mk3", outfit_type="engine",
           description="Military-grade propulsion", price=50000, speed_bonus=3),
]

STANDARD_FACTIONS: List[Faction] = [
    Faction(id="united_earth_federation", name="United Earth Federation", short_name="UEF",
            description="The primary human government, controlling Earth and the core systems",
            allies=["republic_of_mars"], enemies=["crimson_collective"],
            patrol_strength=7, starting_rep=10),
    Faction(id="republic_of_mars", name="Republic of Mars", short_name="ROM",
            description="The independent Martian government, industrial powerhouse of the core",
            allies=["united_earth_federation"], enemies=[],
            patrol_strength=8, starting_rep=5),
    Faction(id="free_traders_guild", name="Free Traders Guild", short_name="FTG",
            description="A loose confederation of independent traders and merchant stations",
            allies=[], enemies=["crimson_collective"], patrol_strength=5, starting_rep=0),
    Faction(id="frontier_worlds", name="Frontier Worlds Alliance", short_name="FWA",
            description="Independent frontier colonies, loosely organized for mutual defense",
            allies=[], enemies=["crimson_collective"], patrol_strength=3, starting_rep=0),
    Faction(id="crimson_collective", name="Crimson Collective", short_name="Crimson",
            description="Pirate confederation and black marketeers operating in lawless space",
            allies=[],
            enemies=["united_earth_federation", "republic_of_mars", "free_traders_guild",
                     "frontier_worlds"],
            patrol_strength=6, starting_rep=-50),
    Faction(id="auroran_empire", name="Auroran Empire", short_name="Auroran",
            description="Mysterious alien civilization at the edge of known space",
            allies=[], enemies=[], patrol_strength=9, starting_rep=-10),
]

STANDARD_COMMODITIES: List[Commodity] = [
    Commodity(id="food", name="Food", base_price=50),
    Commodity(id="water", name="Water", base_price=30),
    Commodity(id="ore", name="Ore", base_price=80),
    Commodity(id="electronics", name="Electronics", base_price=300),
    Commodity(id="machinery", name="Machinery", base_price=250),
    Commodity(id="medicine", name="Medicine", base_price=400),
    Commodity(id="luxuries", name="Luxuries", base_price=600),
    Commodity(id="weapons", name="Weapons", base_price=700),
    Commodity(id="narcotics", name="Narcotics", base_price=900),
]

STANDARD_RARE_ITEMS: List[RareItem] = [
    RareItem(id="military_plans", name="Military Plans", rarity="rare", value=50000,
             item_type="data",
             description="Encrypted tactical data highly valued by certain factions"),
    RareItem(id="prototype_component", name="Prototype Component", rarity="epic", value=100000,
             item_type="component",
             description="Advanced technology component from experimental ships"),
    RareItem(id="ancient_artifact", name="Ancient Artifact", rarity="legendary", value=250000,
             item_type="artifact",
             description="Mysterious pre-colonial artifact of unknown origin"),
    RareItem(id="neural_processor", name="Neural Processor", rarity="epic", value=75000,
             item_type="contraband",
             description="AI-grade processor core, illegal in most systems"),
    RareItem(id="jump_drive_data", name="Jump Drive Data", rarity="rare", value=60000,
             item_type="data",
             description="Research data on experimental jump drive technology"),
    RareItem(id="fusion_core", name="Fusion Core", rarity="uncommon", value=25000,
             item_type="component",
             description="Compact fusion reactor core in working condition"),
]
