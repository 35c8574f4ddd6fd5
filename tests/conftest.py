"""Shared fixtures: catalogs, settings and ledgers."""

import random
from pathlib import Path

import pytest

from fishtycoon.catalog import (
    BOAT_PARTS,
    SKILLS,
    UPGRADES,
    Catalog,
    FishSpecies,
    LocationDefinition,
    default_catalog,
)
from fishtycoon.config import Settings
from fishtycoon.game.ledger import Ledger


class FixedRandom(random.Random):
    """Random source whose uniform draw is pinned to one value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def catalog() -> Catalog:
    return default_catalog()


@pytest.fixture
def pond_catalog() -> Catalog:
    """One location holding a single species worth 10."""
    minnow = FishSpecies(
        id="minnow", name="Minnow", chance=1.0, value=10, color="#6495ED",
        min_depth=10, max_depth=20, location_id="pond",
        min_weight=0.1, max_weight=0.3, min_length=3, max_length=8,
    )
    return Catalog(
        species=(minnow,),
        locations=(LocationDefinition("pond", "Pond", 0, ("minnow",), True),),
        upgrades=UPGRADES,
        skills=SKILLS,
        boat_parts=BOAT_PARTS,
    ).validate()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        cast_delay=0,
        splash_delay=0,
        reel_delay=0,
        settle_delay=0,
    )


@pytest.fixture
def ledger(catalog: Catalog) -> Ledger:
    return Ledger.new(catalog)


@pytest.fixture
def pond_ledger(pond_catalog: Catalog) -> Ledger:
    return Ledger.new(pond_catalog)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def pinned_rng() -> type[FixedRandom]:
    """Factory for random sources with a pinned draw: pinned_rng(0.0)."""
    return FixedRandom


@pytest.fixture
def events(ledger: Ledger) -> list:
    """Every event the default ledger emits during a test."""
    seen: list = []
    ledger.subscribe(seen.append)
    return seen
