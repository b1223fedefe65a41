"""Tests for the reference data registry."""

import json

import pytest
from pydantic import ValidationError

from terminalvelocity.catalog import Registry, load_registry


class TestStandardRegistry:
    """Tests for the built-in catalog."""

    def test_counts(self, registry):
        assert len(registry.ship_types) == 11
        assert len(registry.weapons) == 9
        assert len(registry.outfits) == 15
        assert len(registry.factions) == 6
        assert len(registry.rare_items) == 6

    def test_lookups(self, registry):
        assert registry.get_weapon("railgun").damage == 60
        assert registry.get_ship_type("cruiser").ship_class == "military"
        assert registry.get_outfit("cargo_pod_large").cargo_bonus == 40
        assert registry.get_commodity("narcotics").name == "Narcotics"
        assert registry.get_rare_item("ancient_artifact").rarity == "legendary"

    def test_unknown_ids_return_none(self, registry):
        assert registry.get_weapon("nope") is None
        assert registry.get_ship_type("nope") is None
        assert registry.get_faction("nope") is None
        assert registry.get_rare_item("nope") is None

    def test_faction_order_and_relations(self, registry):
        """Test factions iterate in declaration order."""
        ids = [faction.id for faction in registry.factions]
        assert ids[0] == "united_earth_federation"
        assert ids[-1] == "auroran_empire"
        uef = registry.get_faction("united_earth_federation")
        assert uef.is_allied_with("republic_of_mars")
        assert uef.is_hostile_to("crimson_collective")
        assert not uef.is_hostile_to("free_traders_guild")

    def test_ammo_limited(self, registry):
        assert registry.get_weapon("torpedo_launcher").is_ammo_limited
        assert not registry.get_weapon("heavy_laser").is_ammo_limited

    def test_rare_items_by_rarity(self, registry):
        epic = [item.id for item in registry.rare_items_by_rarity("epic")]
        assert epic == ["prototype_component", "neural_processor"]


class TestLoading:
    """Tests for loading catalogs from disk."""

    CATALOG = {
        "ship_types": [
            {"id": "skiff", "name": "Skiff", "price": 1000, "max_hull": 50,
             "max_shields": 10, "class": "shuttle"},
        ],
        "weapons": [
            {"id": "zapper", "name": "Zapper", "damage": 5, "range_value": 100,
             "weapon_type": "laser", "accuracy": 60},
        ],
        "factions": [
            {"id": "guild", "name": "Guild", "short_name": "G"},
        ],
    }

    def test_from_dict(self):
        registry = Registry.from_dict(self.CATALOG)
        assert registry.get_ship_type("skiff").max_hull == 50
        assert registry.get_weapon("zapper").cooldown == 0.0
        assert registry.rare_items == []

    def test_invalid_data(self):
        with pytest.raises(ValidationError):
            Registry.from_dict({"weapons": [{"id": "broken"}]})

    def test_out_of_range_accuracy(self):
        bad = {"weapons": [dict(self.CATALOG["weapons"][0], accuracy=150)]}
        with pytest.raises(ValidationError):
            Registry.from_dict(bad)

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(self.CATALOG), encoding="utf-8")
        registry = load_registry(path)
        assert registry.get_faction("guild").short_name == "G"

    def test_load_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(self.CATALOG), encoding="utf-8")
        monkeypatch.setenv("TV_CATALOG_PATH", str(path))
        assert load_registry().get_weapon("zapper") is not None

    def test_default_is_standard(self, monkeypatch):
        monkeypatch.delenv("TV_CATALOG_PATH", raising=False)
        assert len(load_registry().weapons) == 9

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_registry(tmp_path / "missing.json")
