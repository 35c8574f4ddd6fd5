"""Prestige math: bonuses and requirements as pure functions of level."""

from __future__ import annotations

from dataclasses import dataclass

from fishtycoon.catalog import PrestigeRequirements

FISHING_POWER_PER_LEVEL = 0.5
AUTO_FISHING_PER_LEVEL = 0.1
FISH_VALUE_PER_LEVEL = 0.25
STARTING_MONEY_PER_LEVEL = 100

# Skill levels carried through a prestige are bumped by this much
SKILL_FLOOR_BONUS = 1


@dataclass(frozen=True)
class PrestigeBonuses:
    fishing_power: float = 0.0
    auto_fishing: float = 0.0
    fish_value: float = 0.0
    starting_money: int = 0


def bonuses_for(level: int) -> PrestigeBonuses:
    """Bonuses granted at a prestige level. Never stored, always derived."""
    level = max(0, level)
    return PrestigeBonuses(
        fishing_power=level * FISHING_POWER_PER_LEVEL,
        auto_fishing=level * AUTO_FISHING_PER_LEVEL,
        fish_value=level * FISH_VALUE_PER_LEVEL,
        starting_money=level * STARTING_MONEY_PER_LEVEL,
    )


def requirements_for(base: PrestigeRequirements, level: int) -> PrestigeRequirements:
    """Thresholds to reach `level + 1`. Money and fish scale with level."""
    scale = max(0, level) + 1
    return PrestigeRequirements(
        money=base.money * scale,
        fish_caught=base.fish_caught * scale,
        locations_unlocked=base.locations_unlocked,
        encyclopedia_pct=base.encyclopedia_pct,
    )


@dataclass(frozen=True)
class PrestigeProgress:
    """Current standing against each prestige threshold."""

    required: PrestigeRequirements
    money: float
    fish_caught: int
    locations_unlocked: int
    encyclopedia_pct: float

    @property
    def money_met(self) -> bool:
        return self.money >= self.required.money

    @property
    def fish_met(self) -> bool:
        return self.fish_caught >= self.required.fish_caught

    @property
    def locations_met(self) -> bool:
        return self.locations_unlocked >= self.required.locations_unlocked

    @property
    def encyclopedia_met(self) -> bool:
        return self.encyclopedia_pct >= self.required.encyclopedia_pct

    @property
    def met(self) -> bool:
        return (
            self.money_met
            and self.fish_met
            and self.locations_met
            and self.encyclopedia_met
        )
