#!/usr/bin/env python3
"""CLI entry points for Terminal Velocity.

Provides commands for running a seeded AI skirmish and for browsing the
reference catalog.
"""

import argparse
import random
import sys
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from terminalvelocity.catalog import Registry, load_registry
from terminalvelocity.combat.models import AILevel, Ship
from terminalvelocity.combat.skirmish import build_combatant, run_skirmish
from terminalvelocity.utils.config import get_default_seed
from terminalvelocity.utils.logging_config import configure_logging

DEFAULT_LOADOUT = ["pulse_laser", "missile_launcher"]
DEFAULT_ATTACKER_FACTION = "united_earth_federation"
DEFAULT_DEFENDER_FACTION = "crimson_collective"


def _make_ship(
    ship_id: str,
    type_id: str,
    faction_id: str,
    loadout: List[str],
    registry: Registry,
) -> Ship:
    ship_type = registry.get_ship_type(type_id)
    if ship_type is None:
        raise ValueError(f"Unknown ship type: {type_id}")
    return Ship(
        ship_id=ship_id,
        type_id=type_id,
        name=f"{ship_type.name} {ship_id}",
        hull=ship_type.max_hull,
        shields=ship_type.max_shields,
        fuel=ship_type.max_fuel,
        weapons=loadout[: ship_type.weapon_slots],
        faction_id=faction_id,
    )


def cmd_skirmish(args: argparse.Namespace, registry: Registry) -> int:
    level = AILevel.from_str(args.level)
    seed = args.seed if args.seed is not None else get_default_seed()
    loadout = args.weapon or DEFAULT_LOADOUT

    attacker = _make_ship("A1", args.attacker, args.attacker_faction, loadout, registry)
    defender = _make_ship("B1", args.defender, args.defender_faction, loadout, registry)

    report = run_skirmish(
        [build_combatant(attacker, level, "attacker", registry)],
        [build_combatant(defender, level, "defender", registry)],
        registry=registry,
        rng=random.Random(seed),
        max_ticks=args.ticks,
    )

    print(f"Skirmish (seed {seed}, {level.name.lower()} AI): {args.attacker} vs {args.defender}")
    for line in report.log:
        print(line)
    for outcome in report.outcomes:
        for message in outcome.messages:
            print(message)
    print(f"Ticks: {report.ticks}")
    print(f"Destroyed: {', '.join(report.destroyed) or 'none'}")
    print(f"Retreated: {', '.join(report.retreated) or 'none'}")
    print(f"Winner: {report.winner or 'none'}")
    return 0


def cmd_catalog(args: argparse.Namespace, registry: Registry) -> int:
    if args.kind == "weapons":
        for weapon in registry.weapons:
            print(
                f"{weapon.id:<18} {weapon.weapon_type:<8} dmg={weapon.damage:<4} "
                f"range={weapon.range_value:<5} acc={weapon.accuracy}%"
            )
    elif args.kind == "ships":
        for ship_type in registry.ship_types:
            print(
                f"{ship_type.id:<16} {ship_type.ship_class:<10} hull={ship_type.max_hull:<5} "
                f"shields={ship_type.max_shields:<5} price={ship_type.price}"
            )
    else:
        for faction in registry.factions:
            allies = ", ".join(faction.allies) or "-"
            enemies = ", ".join(faction.enemies) or "-"
            print(f"{faction.short_name:<8} allies: {allies}; enemies: {enemies}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terminalvelocity",
        description="Terminal Velocity combat engine tools",
    )
    parser.add_argument("--log-level", help="Override TV_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    skirmish = subparsers.add_parser("skirmish", help="Run a seeded AI-vs-AI skirmish")
    skirmish.add_argument("--seed", type=int, help="Random seed (default: TV_DEFAULT_SEED)")
    skirmish.add_argument("--ticks", type=int, default=60, help="Maximum ticks to simulate")
    skirmish.add_argument(
        "--level",
        default="medium",
        choices=[level.name.lower() for level in AILevel],
        help="AI difficulty for both ships",
    )
    skirmish.add_argument("--attacker", default="interceptor", help="Attacker ship type")
    skirmish.add_argument("--defender", default="hauler", help="Defender ship type")
    skirmish.add_argument("--attacker-faction", default=DEFAULT_ATTACKER_FACTION)
    skirmish.add_argument("--defender-faction", default=DEFAULT_DEFENDER_FACTION)
    skirmish.add_argument(
        "--weapon",
        action="append",
        help="Weapon ID to mount on both ships (repeatable)",
    )
    skirmish.add_argument("--catalog", help="JSON catalog file (default: TV_CATALOG_PATH)")
    skirmish.set_defaults(handler=cmd_skirmish)

    catalog = subparsers.add_parser("catalog", help="List reference data")
    catalog.add_argument("kind", choices=["weapons", "ships", "factions"])
    catalog.add_argument("--catalog", help="JSON catalog file (default: TV_CATALOG_PATH)")
    catalog.set_defaults(handler=cmd_catalog)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the 'terminalvelocity' command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        registry = load_registry(args.catalog)
        return args.handler(args, registry)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        logger.error(f"Invalid catalog: {exc}")
        print("ERROR: catalog failed validation", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
