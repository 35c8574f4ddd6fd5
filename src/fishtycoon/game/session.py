"""GameSession: wires ledger, persistence, offline backfill and timers.

One session, one save slot, one ledger. Every tracked ledger mutation is
saved immediately; mutations that change a rate input also reconcile the
timers, and location changes, prestige and reset cancel every timer before
re-arming.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable

from fishtycoon.catalog import Catalog, default_catalog
from fishtycoon.config import Settings
from fishtycoon.game import bonuses
from fishtycoon.game.catch import CatchResult
from fishtycoon.game.events import RATE_EVENTS, TIMER_RESET_EVENTS, GameEvent
from fishtycoon.game.ledger import Ledger
from fishtycoon.game.offline import OfflineProgress, apply_offline_progress
from fishtycoon.game.scheduler import GameScheduler, PhaseListener
from fishtycoon.persistence import SaveStore

logger = logging.getLogger(__name__)


class GameSession:
    """Entry points for the presentation layer."""

    def __init__(
        self,
        settings: Settings,
        *,
        catalog: Catalog | None = None,
        store: SaveStore | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        on_phase: PhaseListener | None = None,
    ) -> None:
        self.settings = settings
        self.catalog = catalog or default_catalog()
        self._owns_store = store is None
        self.store = store or SaveStore(db_path=settings.data_dir / "saves.db")
        self.rng = rng or random.Random()
        self.clock = clock
        self.ledger = Ledger.new(self.catalog)
        self.last_offline = OfflineProgress()
        self.scheduler = GameScheduler(
            self.ledger, settings, rng=self.rng, on_phase=on_phase,
        )
        self.ledger.subscribe(self._on_event)

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> OfflineProgress:
        """Read the save slot, backfill time spent offline, and save."""
        ledger = self.store.load_ledger(self.settings.save_key, self.catalog)
        self.ledger.unsubscribe(self._on_event)
        self.ledger = ledger
        self.ledger.subscribe(self._on_event)
        self.scheduler.attach(ledger)

        self.last_offline = apply_offline_progress(
            ledger, self.now_ms(), self.settings, self.rng,
        )
        self.save()
        return self.last_offline

    def save(self) -> None:
        self.store.save(self.settings.save_key, self.ledger)

    def close(self) -> None:
        if self._owns_store:
            self.store.close()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm the periodic timers. Requires a running event loop."""
        self.scheduler.start()
        logger.info(
            "Session started: power=%.1f auto=%.2f/tick timers=%s",
            bonuses.effective_fishing_power(self.ledger),
            bonuses.effective_auto_fish_rate(self.ledger),
            ", ".join(self.scheduler.active_timers()) or "none",
        )

    def stop(self) -> None:
        """Cancel timers and stamp the session end for the next backfill."""
        self.scheduler.stop()
        self.ledger.last_online_time = self.now_ms()
        self.save()

    def _on_event(self, event: GameEvent) -> None:
        if event.type in TIMER_RESET_EVENTS:
            self.scheduler.cancel_all()
        if event.type in RATE_EVENTS or event.type in TIMER_RESET_EVENTS:
            self.scheduler.reconcile()
        self.ledger.last_online_time = self.now_ms()
        self.save()

    # ------------------------------------------------------------------
    # Player entry points
    # ------------------------------------------------------------------

    async def cast(self) -> CatchResult | None:
        return await self.scheduler.cast(automatic=False)

    def sell(self, name: str) -> int:
        return self.ledger.sell_fish(name)

    def sell_all(self) -> int:
        return self.ledger.sell_all()

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        return self.ledger.purchase_upgrade(upgrade_id)

    def unlock_location(self, location_id: str) -> bool:
        return self.ledger.unlock_location(location_id)

    def travel(self, location_id: str) -> bool:
        return self.ledger.set_active_location(location_id)

    def purchase_boat_option(self, option_id: str) -> bool:
        return self.ledger.purchase_boat_option(option_id)

    def select_boat_option(self, option_id: str) -> bool:
        return self.ledger.select_boat_option(option_id)

    def set_auto_sell(self, enabled: bool) -> bool:
        return self.ledger.set_auto_sell(enabled)

    def mark_email_read(self, email_id: str) -> bool:
        return self.ledger.mark_email_read(email_id)

    def can_prestige(self) -> bool:
        return self.ledger.can_prestige()

    def prestige(self) -> bool:
        """Perform a prestige. Confirmation is the caller's responsibility."""
        return self.ledger.perform_prestige()

    def reset(self) -> None:
        """Wipe all progress. Confirmation is the caller's responsibility."""
        self.ledger.reset_progress()
