"""Tests for combat.weapons module."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import forced_rng
from terminalvelocity.catalog import Registry, ShipType, Weapon
from terminalvelocity.combat.models import Ship, WeaponState
from terminalvelocity.combat.weapons import (
    calculate_hit_chance,
    can_fire,
    describe_weapon_type,
    fire,
    get_dps,
    get_effective_range,
    init_weapon_state,
    reload_ammo,
    update_cooldowns,
)

STANDARD = Registry.standard()
INTERCEPTOR = STANDARD.get_ship_type("interceptor")
HAULER = STANDARD.get_ship_type("hauler")
PULSE_LASER = STANDARD.get_weapon("pulse_laser")
MISSILE = STANDARD.get_weapon("missile_launcher")


def _weapon(**overrides) -> Weapon:
    fields = dict(
        id="test_cannon",
        name="Test Cannon",
        damage=100,
        range_value=500,
        weapon_type="plasma",
        accuracy=95,
        cooldown=1.0,
        shield_penetration=0.3,
    )
    fields.update(overrides)
    return Weapon(**fields)


def _ship(ship_id: str, hull: int, shields: int) -> Ship:
    return Ship(ship_id=ship_id, type_id="interceptor", hull=hull, shields=shields)


class TestCalculateHitChance:
    """Tests for calculate_hit_chance function."""

    def test_within_optimal_range(self):
        """Test no range penalty inside weapon range."""
        # 85 - 3*2 + 3*0.5
        assert calculate_hit_chance(PULSE_LASER, HAULER, HAULER, 500) == pytest.approx(80.5)

    def test_range_penalty(self):
        """Test 1% lost per 100 units past optimal range."""
        assert calculate_hit_chance(PULSE_LASER, HAULER, HAULER, 1500) == pytest.approx(70.5)

    def test_clamped_high(self):
        """Test hit chance never exceeds 95."""
        weapon = _weapon(accuracy=100)
        freighter = STANDARD.get_ship_type("bulk_freighter")
        assert calculate_hit_chance(weapon, INTERCEPTOR, freighter, 0) == 95.0

    def test_clamped_low(self):
        """Test hit chance never drops below 5."""
        weapon = _weapon(accuracy=10)
        assert calculate_hit_chance(weapon, HAULER, INTERCEPTOR, 10_000) == 5.0

    @given(
        accuracy=st.integers(min_value=0, max_value=100),
        near=st.integers(min_value=0, max_value=5000),
        extra=st.integers(min_value=0, max_value=5000),
    )
    def test_bounded_and_non_increasing_with_distance(self, accuracy, near, extra):
        """Test hit chance stays in [5, 95] and never rises with distance."""
        weapon = _weapon(accuracy=accuracy)
        closer = calculate_hit_chance(weapon, HAULER, INTERCEPTOR, near)
        farther = calculate_hit_chance(weapon, HAULER, INTERCEPTOR, near + extra)
        assert 5.0 <= closer <= 95.0
        assert 5.0 <= farther <= 95.0
        assert farther <= closer


class TestCanFire:
    """Tests for can_fire function."""

    def test_ready_weapon(self):
        state = init_weapon_state(PULSE_LASER)
        assert can_fire(PULSE_LASER, state) == (True, "")

    def test_cooling_down(self):
        """Test cooldown blocks firing and reports remaining time."""
        state = WeaponState(weapon_id="pulse_laser", cooldown_remaining=1.5)
        allowed, reason = can_fire(PULSE_LASER, state)
        assert not allowed
        assert reason == "cooling down (1.5s remaining)"

    def test_out_of_ammo(self):
        """Test empty missile launcher cannot fire."""
        state = WeaponState(weapon_id="missile_launcher", current_ammo=0)
        assert can_fire(MISSILE, state) == (False, "out of ammo")

    def test_energy_weapon_ignores_ammo(self):
        """Test lasers fire with zero ammo."""
        state = WeaponState(weapon_id="pulse_laser", current_ammo=0)
        assert can_fire(PULSE_LASER, state)[0]


class TestFire:
    """Tests for fire function."""

    def test_shield_overflow_scenario(self):
        """Test 100 damage at 0.3 penetration against 50 shields / 100 hull."""
        weapon = _weapon()
        state = init_weapon_state(weapon)
        attacker = _ship("attacker", 120, 100)
        target = _ship("target", 100, 50)

        result = fire(weapon, state, attacker, target, INTERCEPTOR, INTERCEPTOR, 100,
                      forced_rng(0.0, 0.5))

        assert result.fired
        assert result.hit
        assert not result.critical_hit
        assert result.damage == 100
        assert result.shield_damage == 50
        assert result.hull_damage == 50
        assert target.shields == 0
        assert target.hull == 50

    def test_shields_absorb(self):
        """Test strong shields take the shield portion and hull takes direct damage."""
        weapon = _weapon()
        target = _ship("target", 100, 500)
        result = fire(weapon, init_weapon_state(weapon), _ship("a", 1, 1), target,
                      INTERCEPTOR, INTERCEPTOR, 100, forced_rng(0.0, 0.5))
        assert result.shield_damage == 70
        assert result.hull_damage == 30
        assert result.shield_damage + result.hull_damage == result.damage
        assert target.shields == 430
        assert target.hull == 70

    def test_no_shields(self):
        """Test full damage goes to hull when shields are down."""
        weapon = _weapon()
        target = _ship("target", 150, 0)
        result = fire(weapon, init_weapon_state(weapon), _ship("a", 1, 1), target,
                      INTERCEPTOR, INTERCEPTOR, 100, forced_rng(0.0, 0.5))
        assert result.shield_damage == 0
        assert result.hull_damage == 100
        assert target.hull == 50

    def test_hull_floors_at_zero(self):
        weapon = _weapon()
        target = _ship("target", 20, 0)
        fire(weapon, init_weapon_state(weapon), _ship("a", 1, 1), target,
             INTERCEPTOR, INTERCEPTOR, 100, forced_rng(0.0, 0.5))
        assert target.hull == 0
        assert target.is_destroyed

    def test_critical_hit(self):
        """Test critical hits multiply damage by 1.5."""
        target = _ship("target", 500, 0)
        result = fire(MISSILE, init_weapon_state(MISSILE), _ship("a", 1, 1), target,
                      INTERCEPTOR, HAULER, 100, forced_rng(0.0, 0.05))
        assert result.critical_hit
        assert result.damage == 75
        assert result.message.startswith("CRITICAL HIT!")

    def test_miss_consumes_cooldown_and_ammo(self):
        """Test a miss still costs a shot, cooldown and ammo."""
        state = init_weapon_state(MISSILE)
        target = _ship("target", 100, 50)
        result = fire(MISSILE, state, _ship("a", 1, 1), target, HAULER, INTERCEPTOR, 100,
                      forced_rng(0.99))
        assert result.fired
        assert not result.hit
        assert "missed" in result.message
        assert target.hull == 100
        assert target.shields == 50
        assert state.cooldown_remaining == MISSILE.cooldown
        assert state.shots_fired == 1
        assert state.current_ammo == 19
        assert result.ammo_remaining == 19

    def test_blocked_fire_changes_nothing(self):
        """Test a cooling weapon does not roll or mutate anything."""
        state = WeaponState(weapon_id="pulse_laser", cooldown_remaining=0.3)
        target = _ship("target", 100, 50)
        rng = forced_rng()
        result = fire(PULSE_LASER, state, _ship("a", 1, 1), target, HAULER, HAULER, 100, rng)
        assert not result.fired
        assert result.message.startswith("cooling down")
        assert state.shots_fired == 0
        assert target.hull == 100
        rng.random.assert_not_called()

    @given(
        hull=st.integers(min_value=0, max_value=1000),
        shields=st.integers(min_value=0, max_value=1000),
        damage=st.integers(min_value=0, max_value=500),
        penetration=st.floats(min_value=0.0, max_value=1.0),
    )
    def test_hit_never_leaves_negative_values(self, hull, shields, damage, penetration):
        """Test hull and shields stay non-negative and damage is fully accounted."""
        weapon = _weapon(damage=damage, shield_penetration=penetration)
        target = _ship("target", hull, shields)
        result = fire(weapon, init_weapon_state(weapon), _ship("a", 1, 1), target,
                      INTERCEPTOR, INTERCEPTOR, 0, forced_rng(0.0, 0.5))
        assert target.hull >= 0
        assert target.shields >= 0
        assert result.shield_damage + result.hull_damage == result.damage


class TestCooldownsAndAmmo:
    """Tests for cooldown ticking and reloading."""

    def test_update_cooldowns(self):
        states = [
            WeaponState(weapon_id="a", cooldown_remaining=1.0),
            WeaponState(weapon_id="b", cooldown_remaining=0.2),
            WeaponState(weapon_id="c"),
        ]
        update_cooldowns(states, 0.4)
        assert states[0].cooldown_remaining == pytest.approx(0.6)
        assert states[1].cooldown_remaining == 0.0
        assert states[2].cooldown_remaining == 0.0
        assert states[1].is_ready

    def test_init_weapon_state(self):
        """Test ammo starts at capacity."""
        assert init_weapon_state(MISSILE).current_ammo == 20
        assert init_weapon_state(PULSE_LASER).current_ammo == 0

    def test_reload_caps_at_capacity(self):
        state = WeaponState(weapon_id="missile_launcher", current_ammo=15)
        assert reload_ammo(MISSILE, state, 10) == 5
        assert state.current_ammo == 20

    def test_reload_energy_weapon(self):
        """Test reloading a laser is a no-op."""
        state = init_weapon_state(PULSE_LASER)
        assert reload_ammo(PULSE_LASER, state, 10) == 0


class TestWeaponStats:
    """Tests for derived weapon statistics."""

    def test_dps(self):
        assert get_dps(PULSE_LASER) == pytest.approx(30.0)
        assert get_dps(_weapon(cooldown=0.0)) == 0.0

    def test_effective_range(self):
        assert get_effective_range(PULSE_LASER, 65) == 2500
        assert get_effective_range(PULSE_LASER, 90) == 500

    def test_describe_weapon_type(self):
        assert describe_weapon_type("railgun").startswith("Kinetic weapon")
        assert describe_weapon_type("slingshot") == "Unknown weapon type"


def test_ship_type_accepts_class_alias():
    """Test catalog JSON can use the 'class' key for ship class."""
    ship_type = ShipType.model_validate(
        {"id": "x", "name": "X", "price": 1, "max_hull": 10, "max_shields": 0, "class": "fighter"}
    )
    assert ship_type.ship_class == "fighter"
