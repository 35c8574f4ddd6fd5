"""Offline backfill: bulk-simulate auto-fishing for time spent away.

The elapsed window is clamped, derated, and resolved catch by catch without
pacing. Species already stocked past the inventory cap are sold at base value
as they come in. The last-online stamp moves before any reward is applied, so
replaying the same window awards nothing.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from fishtycoon.catalog import CAPACITY_BONUS
from fishtycoon.config import Settings
from fishtycoon.game import bonuses, chance
from fishtycoon.game.catch import candidates, roll_measurements
from fishtycoon.game.events import EventType
from fishtycoon.game.ledger import Ledger

logger = logging.getLogger(__name__)

MS_PER_HOUR = 3_600_000


@dataclass(frozen=True)
class OfflineProgress:
    """What the player earned while away."""

    elapsed_ms: int = 0
    fish_gained: int = 0     # fish added to inventory
    auto_sold: int = 0       # fish sold on arrival because of the cap
    money_gained: int = 0

    @property
    def catches(self) -> int:
        return self.fish_gained + self.auto_sold

    @property
    def is_empty(self) -> bool:
        return self.catches == 0


def inventory_cap(ledger: Ledger, settings: Settings) -> int:
    """Per-species holding limit, raised by the selected storage option."""
    return settings.offline_inventory_cap + int(bonuses.equipment_bonus(ledger, CAPACITY_BONUS))


def offline_catches(ledger: Ledger, elapsed_ms: int, settings: Settings) -> int:
    """Number of catches earned over a (clamped) elapsed window."""
    max_ms = int(settings.offline_max_hours * MS_PER_HOUR)
    hours = min(elapsed_ms, max_ms) / MS_PER_HOUR
    rate = bonuses.effective_auto_fish_rate(ledger)
    return bonuses.floor_count(rate * settings.offline_efficiency * hours * 3600)


def backfill(
    ledger: Ledger,
    elapsed_ms: int,
    settings: Settings,
    rng: random.Random,
) -> OfflineProgress:
    """Resolve the catches earned over `elapsed_ms`. Does not touch the stamp."""
    if not settings.offline_enabled or elapsed_ms < settings.offline_min_elapsed_ms:
        return OfflineProgress(elapsed_ms=max(0, elapsed_ms))
    if bonuses.effective_auto_fish_rate(ledger) <= 0:
        return OfflineProgress(elapsed_ms=elapsed_ms)

    total = offline_catches(ledger, elapsed_ms, settings)
    if total <= 0:
        return OfflineProgress(elapsed_ms=elapsed_ms)

    cap = inventory_cap(ledger, settings)
    pool = candidates(ledger)
    kept = 0
    sold = 0
    money = 0

    with ledger.muted():
        for _ in range(total):
            species = chance.resolve(pool, rng.random())
            weight, length = roll_measurements(species, rng)
            if ledger.inventory.get(species.name, 0) >= cap:
                ledger.record_catch_sold(species, weight, length, species.value)
                sold += 1
                money += species.value
            else:
                ledger.record_catch(species, weight, length)
                kept += 1

    progress = OfflineProgress(
        elapsed_ms=elapsed_ms,
        fish_gained=kept,
        auto_sold=sold,
        money_gained=money,
    )
    logger.info(
        "Offline for %.1f min: %d catches (%d kept, %d auto-sold for %d)",
        elapsed_ms / 60_000, progress.catches, kept, sold, money,
    )
    ledger.notify(
        EventType.OFFLINE_PROGRESS,
        elapsed_ms=elapsed_ms,
        fish_gained=kept,
        auto_sold=sold,
        money_gained=money,
    )
    return progress


def apply_offline_progress(
    ledger: Ledger,
    now_ms: int,
    settings: Settings,
    rng: random.Random,
) -> OfflineProgress:
    """Backfill since the last-online stamp, moving the stamp to `now_ms` first."""
    last = ledger.last_online_time
    ledger.last_online_time = now_ms
    if last is None:
        return OfflineProgress()
    return backfill(ledger, now_ms - last, settings, rng)
