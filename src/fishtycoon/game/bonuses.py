"""Bonus aggregator: pure functions from ledger state to effective scalars.

No I/O, no mutation. Every call recomputes from upgrade levels, skill levels,
prestige level and selected boat parts, so results never drift from their
sources. Bonuses add within a bracket and multiply across brackets; the order
matters numerically at high levels and must be preserved.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from fishtycoon.catalog import (
    AUTO_FISH_BONUS,
    RARITY_BONUS,
    RARITY_LUCK_FACTOR,
    FishSpecies,
    Stat,
)
from fishtycoon.game import chance, prestige

if TYPE_CHECKING:
    from fishtycoon.game.ledger import Ledger

# Efficiency never shortens a timed phase below this share of its base
MIN_DELAY_FACTOR = 0.5

# Absorbs float error before rounding to a whole count
# (e.g. 100 * 1.15 = 114.99999999999999, 0.6 + 1.2 + 0.2 = 2.0000000000000004)
_EPSILON = 1e-9


def floor_count(value: float) -> int:
    return math.floor(value + _EPSILON)


def ceil_count(value: float) -> int:
    return math.ceil(value - _EPSILON)


# --- Contributions ---


def upgrade_bonus(ledger: Ledger, stat: Stat) -> float:
    """Sum of upgrade effects contributing to `stat`."""
    return sum(
        definition.effect(ledger.upgrade_levels.get(definition.id, definition.start_level))
        for definition in ledger.catalog.upgrades_for(stat)
    )


def skill_bonus(ledger: Ledger, stat: Stat) -> float:
    """Sum of skill bonuses contributing to `stat`."""
    return sum(
        definition.bonus(ledger.skill_level(definition.id))
        for definition in ledger.catalog.skills_for(stat)
    )


def equipment_bonus(ledger: Ledger, key: str) -> float:
    """Sum of a bonus key over the currently selected boat options."""
    total = 0.0
    for option_id in ledger.boat.selected.values():
        if ledger.catalog.has_part(option_id):
            total += ledger.catalog.get_part(option_id).bonuses.get(key, 0.0)
    return total


def luck_bonus(ledger: Ledger) -> float:
    return (
        upgrade_bonus(ledger, Stat.LUCK)
        + skill_bonus(ledger, Stat.LUCK)
        + equipment_bonus(ledger, RARITY_BONUS)
    )


def efficiency_bonus(ledger: Ledger) -> float:
    return upgrade_bonus(ledger, Stat.EFFICIENCY) + skill_bonus(ledger, Stat.EFFICIENCY)


# --- Effective scalars ---


def effective_fishing_power(ledger: Ledger) -> float:
    """(1 + upgrades + prestige) × (1 + casting skill), floored to one decimal."""
    bonus = prestige.bonuses_for(ledger.prestige_level)
    additive = 1 + upgrade_bonus(ledger, Stat.FISHING_POWER) + bonus.fishing_power
    value = additive * (1 + skill_bonus(ledger, Stat.FISHING_POWER))
    return floor_count(value * 10) / 10


def effective_auto_fish_rate(ledger: Ledger) -> float:
    """auto-fisher × (1 + automation skill) + prestige + engine bonuses."""
    bonus = prestige.bonuses_for(ledger.prestige_level)
    base = upgrade_bonus(ledger, Stat.AUTO_FISH) * (1 + skill_bonus(ledger, Stat.AUTO_FISH))
    return base + bonus.auto_fishing + equipment_bonus(ledger, AUTO_FISH_BONUS)


def effective_sell_value(ledger: Ledger, base: int) -> int:
    """floor(base × (1 + knowledge skill) × (1 + prestige value bonus))."""
    bonus = prestige.bonuses_for(ledger.prestige_level)
    return floor_count(base * (1 + skill_bonus(ledger, Stat.SELL_VALUE)) * (1 + bonus.fish_value))


def effective_action_delay(ledger: Ledger, base: float) -> float:
    """Phase duration after efficiency, never below half of `base`."""
    return max(base * (1 - efficiency_bonus(ledger)), base * MIN_DELAY_FACTOR)


def xp_multiplier(ledger: Ledger) -> float:
    return 1 + skill_bonus(ledger, Stat.XP)


def adjusted_chances(
    ledger: Ledger,
    species: Sequence[FishSpecies],
) -> list[tuple[FishSpecies, float]]:
    """Luck-adjusted catch chances, renormalized to sum to 1.

    Each chance becomes chance × (1 + luck × rarity factor); the rarer the
    species, the more luck inflates it.
    """
    luck = luck_bonus(ledger)
    weights = [
        s.chance * (1 + luck * RARITY_LUCK_FACTOR.get(s.rarity, 0.0))
        for s in species
    ]
    return list(zip(species, chance.normalize(weights)))


# --- Display ---


@dataclass(frozen=True)
class BonusSummary:
    """Snapshot of every effective scalar, for display consumers."""

    fishing_power: float
    auto_fish_rate: float
    sell_multiplier: float
    luck: float
    efficiency: float
    xp_multiplier: float


def summarize(ledger: Ledger) -> BonusSummary:
    bonus = prestige.bonuses_for(ledger.prestige_level)
    return BonusSummary(
        fishing_power=effective_fishing_power(ledger),
        auto_fish_rate=effective_auto_fish_rate(ledger),
        sell_multiplier=(1 + skill_bonus(ledger, Stat.SELL_VALUE)) * (1 + bonus.fish_value),
        luck=luck_bonus(ledger),
        efficiency=efficiency_bonus(ledger),
        xp_multiplier=xp_multiplier(ledger),
    )
