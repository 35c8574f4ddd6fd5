"""Catch engine: resolves one fishing action into ledger mutations.

Timing and visuals belong to the caller (see scheduler.cast). This module only
decides how many fish, which species, their measurements, and the XP earned.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from fishtycoon.catalog import RARITY_XP_MULTIPLIER, CatalogError, FishSpecies
from fishtycoon.game import bonuses, chance
from fishtycoon.game.events import EventType
from fishtycoon.game.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaughtFish:
    species: FishSpecies
    weight: float
    length: float
    new_discovery: bool = False


@dataclass
class CatchResult:
    """Outcome of one catch action."""

    automatic: bool
    fish: list[CaughtFish] = field(default_factory=list)
    xp_awarded: int = 0
    level_ups: int = 0

    @property
    def count(self) -> int:
        return len(self.fish)

    def by_species(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for caught in self.fish:
            counts[caught.species.name] = counts.get(caught.species.name, 0) + 1
        return counts


def catch_amount(ledger: Ledger, *, automatic: bool) -> int:
    """Fish obtained by one action: ceil(auto rate) or floor(fishing power)."""
    if automatic:
        return bonuses.ceil_count(bonuses.effective_auto_fish_rate(ledger))
    return bonuses.floor_count(bonuses.effective_fishing_power(ledger))


def candidates(ledger: Ledger) -> list[tuple[FishSpecies, float]]:
    """Normalized, luck-adjusted candidates for the active location."""
    species = ledger.catalog.species_for_location(ledger.active_location_id)
    if not species:
        raise CatalogError(f"Location {ledger.active_location_id} has no species")
    return bonuses.adjusted_chances(ledger, species)


def roll_measurements(species: FishSpecies, rng: random.Random) -> tuple[float, float]:
    """Random (weight kg, length cm) within the species' configured ranges."""
    weight = round(rng.uniform(species.min_weight, species.max_weight), 2)
    length = round(rng.uniform(species.min_length, species.max_length), 1)
    return weight, length


def catch_one(
    ledger: Ledger,
    pool: list[tuple[FishSpecies, float]],
    rng: random.Random,
) -> CaughtFish:
    """Draw one species from `pool` and record it in inventory and encyclopedia."""
    species = chance.resolve(pool, rng.random())
    weight, length = roll_measurements(species, rng)
    first = ledger.record_catch(species, weight, length)
    return CaughtFish(species=species, weight=weight, length=length, new_discovery=first)


def xp_for(ledger: Ledger, species: FishSpecies) -> int:
    """base XP × rarity multiplier × (1 + patience), rounded."""
    multiplier = RARITY_XP_MULTIPLIER.get(species.rarity, 1.0)
    return round(ledger.catalog.base_xp * multiplier * bonuses.xp_multiplier(ledger))


def resolve_catch(
    ledger: Ledger,
    rng: random.Random,
    *,
    automatic: bool = False,
    award_xp: bool = True,
) -> CatchResult:
    """Resolve one manual or automatic catch action against the ledger."""
    result = CatchResult(automatic=automatic)
    amount = catch_amount(ledger, automatic=automatic)
    if amount <= 0:
        return result

    pool = candidates(ledger)
    skill_ids = [skill.id for skill in ledger.catalog.skills]

    for _ in range(amount):
        caught = catch_one(ledger, pool, rng)
        result.fish.append(caught)

        if award_xp and skill_ids:
            xp = xp_for(ledger, caught.species)
            result.xp_awarded += xp
            level_ups = ledger.award_xp(xp, rng.choice(skill_ids))
            if level_ups:
                result.level_ups += level_ups
                # A luck level-up changes the odds for the rest of the action
                pool = candidates(ledger)

    logger.debug(
        "%s catch: %d fish, %d xp",
        "Auto" if automatic else "Manual", result.count, result.xp_awarded,
    )
    ledger.notify(
        EventType.FISH_CAUGHT,
        automatic=automatic,
        count=result.count,
        species=result.by_species(),
    )
    return result
