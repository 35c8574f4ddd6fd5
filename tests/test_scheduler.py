"""Tests for GameScheduler timers and the phased cast."""

import asyncio
import random
from pathlib import Path

import pytest

from fishtycoon.config import Settings
from fishtycoon.game.ledger import Ledger
from fishtycoon.game.scheduler import AUTO_FISH, AUTO_SELL, SEASON, CastPhase, GameScheduler


@pytest.fixture
def fast_settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        auto_fish_interval=0.01,
        auto_sell_interval=0.01,
        season_length=60.0,
        cast_delay=0,
        splash_delay=0,
        reel_delay=0,
        settle_delay=0,
    )


@pytest.fixture
async def scheduler(pond_ledger: Ledger, fast_settings: Settings) -> GameScheduler:
    s = GameScheduler(pond_ledger, fast_settings, rng=random.Random(3))
    yield s
    s.stop()
    await asyncio.sleep(0)


def _timer_tasks() -> list[asyncio.Task]:
    return [
        t for t in asyncio.all_tasks()
        if t.get_name().startswith("timer-") and not t.done()
    ]


# --- Timers ---


class TestTimers:
    async def test_season_only_without_auto_rate(self, scheduler: GameScheduler) -> None:
        scheduler.start()
        assert scheduler.active_timers() == [SEASON]

    async def test_reconcile_before_start_arms_nothing(self, scheduler: GameScheduler) -> None:
        scheduler.reconcile()
        assert scheduler.active_timers() == []

    async def test_reconcile_picks_up_rate_change(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        scheduler.start()
        pond_ledger.upgrade_levels["auto"] = 1
        pond_ledger.auto_sell_enabled = True
        scheduler.reconcile()
        assert scheduler.active_timers() == [AUTO_FISH, AUTO_SELL, SEASON]

    async def test_reconcile_is_idempotent(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        """Repeated reconciles never stack duplicate timers."""
        pond_ledger.upgrade_levels["auto"] = 1
        scheduler.start()
        before = set(_timer_tasks())
        for _ in range(5):
            scheduler.reconcile()
        assert set(_timer_tasks()) == before
        assert len(before) == 2

    async def test_timer_removed_when_no_longer_wanted(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        pond_ledger.auto_sell_enabled = True
        scheduler.start()
        pond_ledger.auto_sell_enabled = False
        scheduler.reconcile()
        assert AUTO_SELL not in scheduler.active_timers()

    async def test_stop_cancels_everything(self, scheduler: GameScheduler) -> None:
        scheduler.start()
        scheduler.stop()
        await asyncio.sleep(0.01)
        assert scheduler.active_timers() == []
        assert _timer_tasks() == []

    async def test_auto_fish_timer_catches(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        pond_ledger.upgrade_levels["auto"] = 1
        scheduler.start()
        await asyncio.sleep(0.1)
        assert pond_ledger.total_fish_caught > 0

    async def test_auto_sell_timer_sells(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        pond_ledger.inventory["Minnow"] = 4
        pond_ledger.auto_sell_enabled = True
        scheduler.start()
        await asyncio.sleep(0.1)
        assert pond_ledger.inventory["Minnow"] == 0
        assert pond_ledger.money == 40

    async def test_attach_moves_timers_to_new_ledger(
        self, scheduler: GameScheduler, pond_ledger: Ledger,
    ) -> None:
        scheduler.start()
        other = Ledger.new(pond_ledger.catalog)
        other.upgrade_levels["auto"] = 1
        scheduler.attach(other)
        assert scheduler.ledger is other
        assert AUTO_FISH in scheduler.active_timers()


# --- Cast ---


class TestCast:
    async def test_phases_in_order(self, pond_ledger: Ledger, fast_settings: Settings) -> None:
        phases: list[CastPhase] = []
        scheduler = GameScheduler(
            pond_ledger, fast_settings,
            rng=random.Random(1),
            on_phase=lambda phase, automatic: phases.append(phase),
        )
        result = await scheduler.cast()
        assert result is not None and result.count == 1
        assert phases == [
            CastPhase.CAST, CastPhase.SPLASH, CastPhase.RESOLVE, CastPhase.REEL, CastPhase.IDLE,
        ]
        assert not pond_ledger.is_fishing

    async def test_overlapping_cast_is_rejected(
        self, pond_ledger: Ledger, fast_settings: Settings,
    ) -> None:
        settings = fast_settings.model_copy(update={"cast_delay": 0.05})
        scheduler = GameScheduler(pond_ledger, settings, rng=random.Random(1))
        first, second = await asyncio.gather(scheduler.cast(), scheduler.cast())
        assert first is not None
        assert second is None
        assert pond_ledger.total_fish_caught == 1

    async def test_skills_disabled_awards_no_xp(
        self, pond_ledger: Ledger, fast_settings: Settings,
    ) -> None:
        settings = fast_settings.model_copy(update={"skills_enabled": False})
        scheduler = GameScheduler(pond_ledger, settings, rng=random.Random(1))
        await scheduler.cast()
        assert pond_ledger.total_xp == 0
        assert pond_ledger.total_fish_caught == 1

    async def test_on_catch_callback(self, pond_ledger: Ledger, fast_settings: Settings) -> None:
        results = []
        scheduler = GameScheduler(
            pond_ledger, fast_settings, rng=random.Random(1), on_catch=results.append,
        )
        await scheduler.cast()
        assert len(results) == 1
        assert results[0].fish[0].species.name == "Minnow"

    async def test_is_fishing_cleared_after_error(
        self, pond_ledger: Ledger, fast_settings: Settings,
    ) -> None:
        def explode(result) -> None:
            raise RuntimeError("display failed")

        scheduler = GameScheduler(pond_ledger, fast_settings, on_catch=explode)
        with pytest.raises(RuntimeError):
            await scheduler.cast()
        assert not pond_ledger.is_fishing
