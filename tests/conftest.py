"""Shared fixtures for the combat engine tests."""

from __future__ import annotations

import random
from typing import Callable, List, Optional
from unittest.mock import Mock

import pytest
from loguru import logger

from terminalvelocity.catalog import Registry
from terminalvelocity.combat.models import Ship


def forced_rng(*values: float, randrange: int = 0) -> Mock:
    """A random.Random stand-in whose ``random()`` returns ``values`` in order."""
    rng = Mock(spec=random.Random)
    rng.random.side_effect = list(values)
    rng.randrange.return_value = randrange
    return rng


@pytest.fixture
def registry() -> Registry:
    return Registry.standard()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def force_rng() -> Callable[..., Mock]:
    return forced_rng


@pytest.fixture
def make_ship(registry: Registry) -> Callable[..., Ship]:
    """Factory for ships at full strength unless hull/shields are given."""

    def _make(
        ship_id: str = "ship-1",
        type_id: str = "interceptor",
        hull: Optional[int] = None,
        shields: Optional[int] = None,
        weapons: Optional[List[str]] = None,
        faction_id: Optional[str] = None,
        **kwargs,
    ) -> Ship:
        ship_type = registry.get_ship_type(type_id)
        assert ship_type is not None, type_id
        return Ship(
            ship_id=ship_id,
            type_id=type_id,
            hull=ship_type.max_hull if hull is None else hull,
            shields=ship_type.max_shields if shields is None else shields,
            weapons=list(weapons or []),
            faction_id=faction_id,
            **kwargs,
        )

    return _make


@pytest.fixture
def reset_logging():
    """Drop sinks added by entry points so they don't outlive captured streams."""
    yield
    logger.remove()
