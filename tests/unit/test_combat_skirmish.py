"""Tests for combat.skirmish module."""

import random

import pytest

from terminalvelocity.combat.models import AILevel, ReputationEvent
from terminalvelocity.combat.skirmish import build_combatant, classify_kill, run_skirmish

UEF = "united_earth_federation"
CRIMSON = "crimson_collective"


def _duel(registry, make_ship, seed, level=AILevel.HARD, max_ticks=60):
    attacker = make_ship("A1", type_id="viper", weapons=["pulse_laser", "missile_launcher"],
                         faction_id=UEF)
    defender = make_ship("B1", type_id="interceptor", weapons=["beam_laser"],
                         faction_id=CRIMSON)
    return run_skirmish(
        [build_combatant(attacker, level, "attacker", registry)],
        [build_combatant(defender, level, "defender", registry)],
        registry=registry,
        rng=random.Random(seed),
        max_ticks=max_ticks,
    ), attacker, defender


class TestBuildCombatant:
    """Tests for build_combatant function."""

    def test_weapon_states(self, registry, make_ship):
        ship = make_ship(weapons=["missile_launcher", "pulse_laser", "nope"])
        combatant = build_combatant(ship, AILevel.ACE, "a", registry)
        assert set(combatant.weapon_states) == {"missile_launcher", "pulse_laser"}
        assert combatant.weapon_states["missile_launcher"].current_ammo == 20
        assert combatant.ai.level == AILevel.ACE
        assert combatant.is_active

    def test_unknown_ship_type(self, registry, make_ship):
        ship = make_ship()
        ship.type_id = "mothership"
        with pytest.raises(ValueError, match="Unknown ship type"):
            build_combatant(ship, AILevel.EASY, "a", registry)


class TestClassifyKill:
    """Tests for classify_kill function."""

    @pytest.mark.parametrize(
        "killer_faction, victim_faction, event",
        [
            (UEF, CRIMSON, ReputationEvent.KILL_HOSTILE),
            (UEF, "republic_of_mars", ReputationEvent.KILL_ALLY),
            (UEF, UEF, ReputationEvent.KILL_ALLY),
            (UEF, "free_traders_guild", ReputationEvent.KILL_NEUTRAL),
            (UEF, None, ReputationEvent.KILL_NEUTRAL),
            (None, CRIMSON, ReputationEvent.KILL_NEUTRAL),
        ],
    )
    def test_faction_ties(self, registry, make_ship, killer_faction, victim_faction, event):
        killer = make_ship("k", faction_id=killer_faction)
        victim = make_ship("v", faction_id=victim_faction)
        assert classify_kill(killer, victim, registry) == event


class TestRunSkirmish:
    """Tests for run_skirmish function."""

    def test_same_seed_same_fight(self, registry, make_ship):
        first, _, _ = _duel(registry, make_ship, seed=11)
        second, _, _ = _duel(registry, make_ship, seed=11)
        assert first.log == second.log
        assert first.winner == second.winner
        assert first.ticks == second.ticks

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_end_state_consistent(self, registry, make_ship, seed):
        """Test the report agrees with the ships' final state."""
        report, attacker, defender = _duel(registry, make_ship, seed=seed)
        assert 0 < report.ticks <= 60
        for ship in (attacker, defender):
            assert ship.hull >= 0
            assert ship.shields >= 0
            assert (ship.ship_id in report.destroyed) == ship.is_destroyed
        if report.winner == "attacker":
            assert "B1" in report.destroyed or "B1" in report.retreated
        elif report.winner == "defender":
            assert "A1" in report.destroyed or "A1" in report.retreated
        else:
            assert report.ticks == 60 or (report.destroyed or report.retreated)
        assert len(report.outcomes) == len(report.destroyed)

    def test_weapons_fire_at_most_once_per_tick(self, registry, make_ship):
        attacker = make_ship("A1", type_id="viper", weapons=["pulse_laser", "pulse_laser"])
        defender = make_ship("B1", type_id="battleship")
        side_a = [build_combatant(attacker, AILevel.ACE, "a", registry)]
        side_b = [build_combatant(defender, AILevel.ACE, "b", registry)]
        report = run_skirmish(side_a, side_b, registry=registry, rng=random.Random(3),
                              max_ticks=10)
        assert report.ticks == 10
        assert side_a[0].weapon_states["pulse_laser"].shots_fired <= report.ticks

    def test_crippled_defender_loses(self, registry, make_ship):
        """Test a defender on its last hull point is destroyed or flees."""
        attacker = make_ship("A1", type_id="battleship",
                             weapons=["heavy_railgun", "plasma_turret"], faction_id=UEF)
        defender = make_ship("B1", type_id="shuttle", hull=1, shields=0, faction_id=CRIMSON)
        report = run_skirmish(
            [build_combatant(attacker, AILevel.ACE, "a", registry)],
            [build_combatant(defender, AILevel.EASY, "b", registry)],
            registry=registry,
            rng=random.Random(5),
        )
        assert report.winner == "a"
        assert report.ticks == 1
        assert "B1" in report.destroyed or "B1" in report.retreated
        for outcome in report.outcomes:
            assert outcome.victim_id == "B1"
            assert outcome.reputation_changes

    def test_unarmed_ships_time_out(self, registry, make_ship):
        side_a = [build_combatant(make_ship("A1"), AILevel.MEDIUM, "a", registry)]
        side_b = [build_combatant(make_ship("B1"), AILevel.MEDIUM, "b", registry)]
        report = run_skirmish(side_a, side_b, registry=registry, rng=random.Random(1),
                              max_ticks=5)
        assert report.ticks == 5
        assert report.winner is None
        assert report.destroyed == []
        assert report.retreated == []

    def test_empty_side_forfeits(self, registry, make_ship):
        side_b = [build_combatant(make_ship("B1"), AILevel.MEDIUM, "b", registry)]
        report = run_skirmish([], side_b, registry=registry, rng=random.Random(1))
        assert report.ticks == 0
        assert report.winner == "b"
