"""Cooperative timers for auto-fishing, auto-selling and seasons.

Single-threaded asyncio: every wait is a scheduled sleep, never a blocking
call. The scheduler owns one task handle per timer name. `reconcile()` is the
only place timers are armed: it compares the wanted configuration with what
is running, cancels what no longer matches and starts what is missing, so
calling it repeatedly never stacks duplicate timers.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from fishtycoon.config import Settings
from fishtycoon.game import bonuses
from fishtycoon.game.catch import CatchResult, resolve_catch
from fishtycoon.game.ledger import Ledger

logger = logging.getLogger(__name__)

AUTO_FISH = "auto_fish"
AUTO_SELL = "auto_sell"
SEASON = "season"

SEASONS = ("spring", "summer", "autumn", "winter")


class CastPhase(str, Enum):
    """Visible phases of one catch action, in order."""

    CAST = "cast"
    SPLASH = "splash"
    RESOLVE = "resolve"
    REEL = "reel"
    IDLE = "idle"


PhaseListener = Callable[[CastPhase, bool], None]


@dataclass(frozen=True)
class TimerSpec:
    """What a running timer was armed with; equal specs are not re-armed."""

    name: str
    interval: float


class GameScheduler:
    """Owns the periodic timers and the phased cast action for one ledger."""

    def __init__(
        self,
        ledger: Ledger,
        settings: Settings,
        *,
        rng: random.Random | None = None,
        on_phase: PhaseListener | None = None,
        on_catch: Callable[[CatchResult], None] | None = None,
    ) -> None:
        self.ledger = ledger
        self.settings = settings
        self.rng = rng or random.Random()
        self.on_phase = on_phase
        self.on_catch = on_catch
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._specs: dict[str, TimerSpec] = {}
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Arm timers. Must be called with the event loop running."""
        self._started = True
        self.reconcile()

    def stop(self) -> None:
        self._started = False
        self.cancel_all()

    def attach(self, ledger: Ledger) -> None:
        """Point the scheduler at a different ledger, dropping old timers."""
        self.cancel_all()
        self.ledger = ledger
        self.reconcile()

    def active_timers(self) -> list[str]:
        return sorted(name for name, task in self._tasks.items() if not task.done())

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def wanted(self) -> dict[str, TimerSpec]:
        """Timers the current ledger state calls for."""
        specs: dict[str, TimerSpec] = {}
        if bonuses.effective_auto_fish_rate(self.ledger) > 0:
            specs[AUTO_FISH] = TimerSpec(AUTO_FISH, self.settings.auto_fish_interval)
        if self.ledger.auto_sell_enabled:
            specs[AUTO_SELL] = TimerSpec(AUTO_SELL, self.settings.auto_sell_interval)
        specs[SEASON] = TimerSpec(SEASON, self.settings.season_length)
        return specs

    def reconcile(self) -> None:
        """Cancel timers that no longer match and arm the missing ones."""
        if not self._started:
            return

        wanted = self.wanted()
        for name in list(self._tasks):
            task = self._tasks[name]
            if task.done() or self._specs.get(name) != wanted.get(name):
                self._cancel(name)

        for name, spec in wanted.items():
            if name not in self._tasks:
                self._arm(spec)

    def cancel_all(self) -> None:
        for name in list(self._tasks):
            self._cancel(name)

    def _arm(self, spec: TimerSpec) -> None:
        actions: dict[str, Callable[[], Awaitable[Any]]] = {
            AUTO_FISH: self._auto_fish_tick,
            AUTO_SELL: self._auto_sell_tick,
            SEASON: self._season_tick,
        }
        task = asyncio.create_task(
            self._run_timer(spec, actions[spec.name]),
            name=f"timer-{spec.name}",
        )
        task.add_done_callback(self._make_done_callback(spec.name))
        self._tasks[spec.name] = task
        self._specs[spec.name] = spec
        logger.debug("Armed %s every %.1fs", spec.name, spec.interval)

    def _cancel(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        self._specs.pop(name, None)
        if task is not None and not task.done():
            task.cancel()
            logger.debug("Cancelled %s", name)

    async def _run_timer(
        self,
        spec: TimerSpec,
        action: Callable[[], Awaitable[Any]],
    ) -> None:
        while True:
            await asyncio.sleep(spec.interval)
            await action()

    def _make_done_callback(self, name: str) -> Callable[[asyncio.Task[None]], None]:
        def _on_done(task: asyncio.Task[None]) -> None:
            if task.cancelled():
                return
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "Timer %s crashed: %s", name, exc,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )
        return _on_done

    async def _auto_fish_tick(self) -> None:
        if self.ledger.is_fishing:
            return
        await self.cast(automatic=True)

    async def _auto_sell_tick(self) -> None:
        gained = self.ledger.sell_all()
        if gained:
            logger.info("Auto-sold inventory for %d", gained)

    async def _season_tick(self) -> None:
        season = self.ledger.advance_season(len(SEASONS))
        logger.info("Season changed to %s", SEASONS[season])

    # ------------------------------------------------------------------
    # Phased cast
    # ------------------------------------------------------------------

    async def cast(self, *, automatic: bool = False) -> CatchResult | None:
        """Run one catch action: cast → splash → resolve → reel.

        Returns None without doing anything if a cast is already in flight.
        Other ledger mutations may interleave between phases.
        """
        ledger = self.ledger
        if ledger.is_fishing:
            return None

        ledger.is_fishing = True
        try:
            self._phase(CastPhase.CAST, automatic)
            await self._wait(self.settings.cast_delay)
            self._phase(CastPhase.SPLASH, automatic)
            await self._wait(self.settings.splash_delay)

            self._phase(CastPhase.RESOLVE, automatic)
            result = resolve_catch(
                ledger, self.rng,
                automatic=automatic,
                award_xp=self.settings.skills_enabled,
            )
            if self.on_catch is not None:
                self.on_catch(result)

            self._phase(CastPhase.REEL, automatic)
            await self._wait(self.settings.reel_delay)
            await self._wait(self.settings.settle_delay)
            return result
        finally:
            ledger.is_fishing = False
            self._phase(CastPhase.IDLE, automatic)

    async def _wait(self, base: float) -> None:
        delay = bonuses.effective_action_delay(self.ledger, base)
        if delay > 0:
            await asyncio.sleep(delay)

    def _phase(self, phase: CastPhase, automatic: bool) -> None:
        if self.on_phase is not None:
            self.on_phase(phase, automatic)
