"""Static game catalog: species, locations, upgrades, skills, boat parts.

The catalog is process-wide configuration: built once, validated at startup,
never mutated. Variants of the game differ only in the catalog they pass to
the core, so everything tunable about the content lives here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class CatalogError(Exception):
    """Raised when the catalog violates an invariant the core depends on."""


class Stat(str, Enum):
    """Effective scalars that upgrades and skills contribute to."""

    FISHING_POWER = "fishing_power"
    AUTO_FISH = "auto_fish"
    SELL_VALUE = "sell_value"
    LUCK = "luck"
    EFFICIENCY = "efficiency"
    XP = "xp"


class PartCategory(str, Enum):
    HULL = "hull"
    ENGINE = "engine"
    EQUIPMENT = "equipment"
    STORAGE = "storage"


# Boat option bonus keys
AUTO_FISH_BONUS = "auto_fish"
RARITY_BONUS = "rarity"
CAPACITY_BONUS = "capacity"


# --- Rarity ---

# (minimum chance, label), checked top to bottom
RARITY_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (0.5, "Common"),
    (0.2, "Rare"),
    (0.05, "Epic"),
    (0.0, "Legendary"),
)

RARITY_XP_MULTIPLIER: dict[str, float] = {
    "Common": 1.0,
    "Rare": 2.0,
    "Epic": 5.0,
    "Legendary": 20.0,
}

# How strongly luck inflates a species' weight, by rarity
RARITY_LUCK_FACTOR: dict[str, float] = {
    "Common": 0.0,
    "Rare": 1.0,
    "Epic": 2.0,
    "Legendary": 3.0,
}


def rarity_of(chance: float) -> str:
    """Map a base catch chance to its rarity label."""
    for threshold, label in RARITY_THRESHOLDS:
        if chance >= threshold:
            return label
    return RARITY_THRESHOLDS[-1][1]


# --- Records ---


@dataclass(frozen=True)
class FishSpecies:
    """One catchable species. Immutable after definition."""

    id: str
    name: str
    chance: float       # probability mass within its location
    value: int          # base sell value
    color: str
    min_depth: int
    max_depth: int
    location_id: str
    min_weight: float = 0.5   # kg
    max_weight: float = 2.0
    min_length: float = 10.0  # cm
    max_length: float = 30.0

    @property
    def rarity(self) -> str:
        return rarity_of(self.chance)


@dataclass(frozen=True)
class LocationDefinition:
    id: str
    name: str
    price: int
    species_ids: tuple[str, ...]
    unlocked_by_default: bool = False


@dataclass(frozen=True)
class UpgradeDefinition:
    """A purchasable upgrade. Cost and effect are pure functions of level."""

    id: str
    name: str
    description: str
    stat: Stat
    base_cost: int
    growth: float
    start_level: int
    effect_per_level: float
    max_level: int | None = None

    def cost(self, level: int) -> int:
        """Price of buying the next level when currently at `level`."""
        return math.floor(self.base_cost * self.growth ** (level - self.start_level))

    def effect(self, level: int) -> float:
        return max(0, level - self.start_level) * self.effect_per_level

    def is_maxed(self, level: int) -> bool:
        return self.max_level is not None and level >= self.max_level


@dataclass(frozen=True)
class SkillDefinition:
    id: str
    name: str
    stat: Stat
    bonus_per_level: float
    base_xp: int
    growth: float
    max_level: int = 50

    def xp_to_next(self, level: int) -> int:
        """XP needed to go from `level` to `level + 1`."""
        return math.floor(self.base_xp * self.growth ** (max(1, level) - 1))

    def bonus(self, level: int) -> float:
        """Bonus granted by levels gained beyond the first."""
        return max(0, level - 1) * self.bonus_per_level


@dataclass(frozen=True)
class BoatPartOption:
    id: str
    category: PartCategory
    name: str
    price: int
    bonuses: dict[str, float] = field(default_factory=dict)
    unlocked_by_default: bool = False


@dataclass(frozen=True)
class PrestigeRequirements:
    """Thresholds that must all hold before a prestige is allowed."""

    money: int = 100_000
    fish_caught: int = 1000
    locations_unlocked: int = 3
    encyclopedia_pct: float = 50.0


# --- Catalog ---


@dataclass
class Catalog:
    """All static definitions, with id lookups built once."""

    species: tuple[FishSpecies, ...]
    locations: tuple[LocationDefinition, ...]
    upgrades: tuple[UpgradeDefinition, ...]
    skills: tuple[SkillDefinition, ...]
    boat_parts: tuple[BoatPartOption, ...]
    prestige: PrestigeRequirements = field(default_factory=PrestigeRequirements)
    base_xp: int = 10

    _species_by_id: dict[str, FishSpecies] = field(init=False, repr=False)
    _species_by_name: dict[str, FishSpecies] = field(init=False, repr=False)
    _locations_by_id: dict[str, LocationDefinition] = field(init=False, repr=False)
    _upgrades_by_id: dict[str, UpgradeDefinition] = field(init=False, repr=False)
    _skills_by_id: dict[str, SkillDefinition] = field(init=False, repr=False)
    _parts_by_id: dict[str, BoatPartOption] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._species_by_id = {s.id: s for s in self.species}
        self._species_by_name = {s.name: s for s in self.species}
        self._locations_by_id = {loc.id: loc for loc in self.locations}
        self._upgrades_by_id = {u.id: u for u in self.upgrades}
        self._skills_by_id = {s.id: s for s in self.skills}
        self._parts_by_id = {p.id: p for p in self.boat_parts}

    # -- lookups (KeyError on unknown ids) --

    def get_species(self, species_id: str) -> FishSpecies:
        return self._species_by_id[species_id]

    def species_named(self, name: str) -> FishSpecies | None:
        return self._species_by_name.get(name)

    def get_location(self, location_id: str) -> LocationDefinition:
        return self._locations_by_id[location_id]

    def get_upgrade(self, upgrade_id: str) -> UpgradeDefinition:
        return self._upgrades_by_id[upgrade_id]

    def get_skill(self, skill_id: str) -> SkillDefinition:
        return self._skills_by_id[skill_id]

    def get_part(self, part_id: str) -> BoatPartOption:
        return self._parts_by_id[part_id]

    def has_location(self, location_id: str) -> bool:
        return location_id in self._locations_by_id

    def has_upgrade(self, upgrade_id: str) -> bool:
        return upgrade_id in self._upgrades_by_id

    def has_skill(self, skill_id: str) -> bool:
        return skill_id in self._skills_by_id

    def has_part(self, part_id: str) -> bool:
        return part_id in self._parts_by_id

    def species_for_location(self, location_id: str) -> list[FishSpecies]:
        location = self.get_location(location_id)
        return [self._species_by_id[sid] for sid in location.species_ids]

    def parts_in(self, category: PartCategory) -> list[BoatPartOption]:
        return [p for p in self.boat_parts if p.category == category]

    def default_part(self, category: PartCategory) -> BoatPartOption:
        for part in self.parts_in(category):
            if part.unlocked_by_default:
                return part
        raise CatalogError(f"No default option for boat category {category.value}")

    def upgrades_for(self, stat: Stat) -> list[UpgradeDefinition]:
        return [u for u in self.upgrades if u.stat == stat]

    def skills_for(self, stat: Stat) -> list[SkillDefinition]:
        return [s for s in self.skills if s.stat == stat]

    @property
    def starting_location(self) -> LocationDefinition:
        for location in self.locations:
            if location.unlocked_by_default:
                return location
        raise CatalogError("No location is unlocked by default")

    # -- validation --

    def validate(self) -> Catalog:
        """Check every invariant the core relies on. Returns self."""
        _check_unique("species id", (s.id for s in self.species))
        _check_unique("species name", (s.name for s in self.species))
        _check_unique("location id", (loc.id for loc in self.locations))
        _check_unique("upgrade id", (u.id for u in self.upgrades))
        _check_unique("skill id", (s.id for s in self.skills))
        _check_unique("boat part id", (p.id for p in self.boat_parts))

        for species in self.species:
            if not 0.0 <= species.chance <= 1.0:
                raise CatalogError(f"{species.id}: chance {species.chance} outside [0, 1]")
            if species.location_id not in self._locations_by_id:
                raise CatalogError(f"{species.id}: unknown location {species.location_id}")
            if species.min_weight > species.max_weight or species.min_length > species.max_length:
                raise CatalogError(f"{species.id}: inverted weight/length range")

        for location in self.locations:
            if not location.species_ids:
                raise CatalogError(f"Location {location.id} has no species")
            for species_id in location.species_ids:
                if species_id not in self._species_by_id:
                    raise CatalogError(f"Location {location.id}: unknown species {species_id}")
            if sum(self._species_by_id[sid].chance for sid in location.species_ids) <= 0:
                raise CatalogError(f"Location {location.id}: species chances sum to zero")

        self.starting_location  # noqa: B018 (raises if missing)
        for category in PartCategory:
            self.default_part(category)

        for upgrade in self.upgrades:
            if upgrade.growth <= 1.0 or upgrade.base_cost <= 0:
                raise CatalogError(f"Upgrade {upgrade.id}: cost must strictly increase")
        return self


def _check_unique(kind: str, values: Iterable[str]) -> None:
    seen: set[str] = set()
    for value in values:
        if value in seen:
            raise CatalogError(f"Duplicate {kind}: {value}")
        seen.add(value)


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

_COLORS = ("#6495ED", "#FFD700", "#9932CC", "#FF4500")
_DEPTHS = ((20, 50), (40, 70), (60, 90), (80, 100))
_CHANCES = (0.6, 0.3, 0.09, 0.01)

# location_id → ((species_id, name, value, (min_kg, max_kg), (min_cm, max_cm)), ...)
_SPECIES_TABLE: dict[str, tuple[tuple[str, str, int, tuple[float, float], tuple[float, float]], ...]] = {
    "lake": (
        ("bluegill", "Bluegill", 1, (0.1, 0.6), (10, 25)),
        ("perch", "Perch", 5, (0.2, 1.5), (15, 35)),
        ("pike", "Pike", 25, (1.5, 12.0), (40, 120)),
        ("golden_carp", "Golden Carp", 150, (3.0, 20.0), (50, 100)),
    ),
    "river": (
        ("trout", "Trout", 4, (0.3, 3.0), (20, 60)),
        ("salmon", "Salmon", 15, (2.0, 15.0), (50, 110)),
        ("sturgeon", "Sturgeon", 80, (10.0, 120.0), (100, 300)),
        ("river_dragon", "River Dragon", 500, (20.0, 80.0), (150, 250)),
    ),
    "ocean": (
        ("mackerel", "Mackerel", 10, (0.3, 2.0), (20, 50)),
        ("tuna", "Tuna", 40, (20.0, 250.0), (100, 250)),
        ("swordfish", "Swordfish", 200, (50.0, 500.0), (150, 450)),
        ("marlin", "Blue Marlin", 1200, (100.0, 800.0), (200, 500)),
    ),
    "abyss": (
        ("lanternfish", "Lanternfish", 30, (0.01, 0.1), (2, 15)),
        ("anglerfish", "Anglerfish", 120, (1.0, 50.0), (20, 120)),
        ("giant_squid", "Giant Squid", 600, (100.0, 300.0), (500, 1300)),
        ("leviathan", "Leviathan", 5000, (1000.0, 5000.0), (1000, 3000)),
    ),
}

_LOCATIONS: tuple[LocationDefinition, ...] = (
    LocationDefinition("lake", "Quiet Lake", 0, tuple(r[0] for r in _SPECIES_TABLE["lake"]), True),
    LocationDefinition("river", "Rushing River", 1_000, tuple(r[0] for r in _SPECIES_TABLE["river"])),
    LocationDefinition("ocean", "Open Ocean", 10_000, tuple(r[0] for r in _SPECIES_TABLE["ocean"])),
    LocationDefinition("abyss", "The Abyss", 50_000, tuple(r[0] for r in _SPECIES_TABLE["abyss"])),
)

UPGRADES: tuple[UpgradeDefinition, ...] = (
    UpgradeDefinition(
        id="rod", name="Better Fishing Rod", description="Catch more fish per cast",
        stat=Stat.FISHING_POWER, base_cost=50, growth=1.5, start_level=1,
        effect_per_level=1.0,
    ),
    UpgradeDefinition(
        id="boat", name="Boat Upgrade", description="Improves fishing speed",
        stat=Stat.EFFICIENCY, base_cost=50, growth=1.6, start_level=1,
        effect_per_level=0.05, max_level=5,
    ),
    UpgradeDefinition(
        id="auto", name="Auto-Fisher", description="Automatically catches fish over time",
        stat=Stat.AUTO_FISH, base_cost=200, growth=2.0, start_level=0,
        effect_per_level=0.2,
    ),
    UpgradeDefinition(
        id="lure", name="Better Lures", description="Increases chance of rare fish",
        stat=Stat.LUCK, base_cost=100, growth=1.7, start_level=1,
        effect_per_level=0.1,
    ),
)

SKILLS: tuple[SkillDefinition, ...] = (
    SkillDefinition("casting", "Casting", Stat.FISHING_POWER, 0.1, 50, 1.25),
    SkillDefinition("automation", "Automation", Stat.AUTO_FISH, 0.05, 80, 1.3),
    SkillDefinition("knowledge", "Fish Knowledge", Stat.SELL_VALUE, 0.05, 60, 1.25),
    SkillDefinition("luck", "Luck", Stat.LUCK, 0.03, 100, 1.35),
    SkillDefinition("efficiency", "Efficiency", Stat.EFFICIENCY, 0.02, 70, 1.3),
    SkillDefinition("patience", "Patience", Stat.XP, 0.05, 90, 1.3),
)

BOAT_PARTS: tuple[BoatPartOption, ...] = (
    # Hulls are cosmetic: they carry no bonus
    BoatPartOption("hull_wooden", PartCategory.HULL, "Wooden Hull", 0, unlocked_by_default=True),
    BoatPartOption("hull_fiberglass", PartCategory.HULL, "Fiberglass Hull", 2_500),
    BoatPartOption("hull_steel", PartCategory.HULL, "Steel Hull", 20_000),
    BoatPartOption("engine_oars", PartCategory.ENGINE, "Oars", 0, unlocked_by_default=True),
    BoatPartOption("engine_outboard", PartCategory.ENGINE, "Outboard Motor", 1_500, {AUTO_FISH_BONUS: 0.2}),
    BoatPartOption("engine_inboard", PartCategory.ENGINE, "Inboard Engine", 12_000, {AUTO_FISH_BONUS: 0.5}),
    BoatPartOption("engine_turbine", PartCategory.ENGINE, "Turbine Drive", 60_000, {AUTO_FISH_BONUS: 1.0}),
    BoatPartOption("equipment_basic", PartCategory.EQUIPMENT, "Basic Tackle", 0, unlocked_by_default=True),
    BoatPartOption("equipment_sonar", PartCategory.EQUIPMENT, "Fish Finder Sonar", 3_000, {RARITY_BONUS: 0.1}),
    BoatPartOption("equipment_radar", PartCategory.EQUIPMENT, "Deep Radar", 25_000, {RARITY_BONUS: 0.25}),
    BoatPartOption("storage_bucket", PartCategory.STORAGE, "Bucket", 0, unlocked_by_default=True),
    BoatPartOption("storage_cooler", PartCategory.STORAGE, "Cooler", 2_000, {CAPACITY_BONUS: 500}),
    BoatPartOption("storage_hold", PartCategory.STORAGE, "Refrigerated Hold", 15_000, {CAPACITY_BONUS: 2000}),
)


def _build_species() -> tuple[FishSpecies, ...]:
    species: list[FishSpecies] = []
    for location_id, rows in _SPECIES_TABLE.items():
        for index, (species_id, name, value, weight, length) in enumerate(rows):
            species.append(FishSpecies(
                id=species_id,
                name=name,
                chance=_CHANCES[index],
                value=value,
                color=_COLORS[index],
                min_depth=_DEPTHS[index][0],
                max_depth=_DEPTHS[index][1],
                location_id=location_id,
                min_weight=weight[0],
                max_weight=weight[1],
                min_length=length[0],
                max_length=length[1],
            ))
    return tuple(species)


def default_catalog() -> Catalog:
    """Return the validated built-in catalog."""
    return Catalog(
        species=_build_species(),
        locations=_LOCATIONS,
        upgrades=UPGRADES,
        skills=SKILLS,
        boat_parts=BOAT_PARTS,
    ).validate()
