"""Tests for the catch engine."""

import random

import pytest

from fishtycoon.catalog import (
    BOAT_PARTS,
    SKILLS,
    UPGRADES,
    Catalog,
    CatalogError,
    LocationDefinition,
)
from fishtycoon.game.catch import catch_amount, resolve_catch, roll_measurements, xp_for
from fishtycoon.game.events import EventType
from fishtycoon.game.ledger import Ledger


# --- Amount ---


class TestCatchAmount:
    def test_manual_uses_floored_power(self, ledger: Ledger) -> None:
        ledger.upgrade_levels["rod"] = 3
        assert catch_amount(ledger, automatic=False) == 3

    def test_automatic_rounds_rate_up(self, ledger: Ledger) -> None:
        ledger.upgrade_levels["auto"] = 1
        assert catch_amount(ledger, automatic=True) == 1

    def test_automatic_without_rate_is_zero(self, ledger: Ledger) -> None:
        assert catch_amount(ledger, automatic=True) == 0

    @pytest.mark.parametrize(
        ("auto", "prestige_level", "engine", "expected"),
        [
            (3, 12, "engine_outboard", 2),  # 0.6 + 1.2 + 0.2 sums to 2.0000000000000004
            (1, 8, None, 1),
            (10, 0, None, 2),
            (0, 10, "engine_inboard", 2),
            (5, 5, "engine_turbine", 3),
        ],
    )
    def test_mixed_sources_round_to_true_count(
        self, ledger: Ledger, auto: int, prestige_level: int, engine: str | None, expected: int,
    ) -> None:
        """Whole-number rates built from several sources never gain a fish from float error."""
        ledger.upgrade_levels["auto"] = auto
        ledger.prestige_level = prestige_level
        if engine is not None:
            ledger.boat.unlocked.add(engine)
            ledger.select_boat_option(engine)
        assert catch_amount(ledger, automatic=True) == expected

    def test_automatic_action_catches_exact_count(self, ledger: Ledger, rng: random.Random) -> None:
        ledger.upgrade_levels["auto"] = 3
        ledger.prestige_level = 12
        ledger.boat.unlocked.add("engine_outboard")
        ledger.select_boat_option("engine_outboard")
        result = resolve_catch(ledger, rng, automatic=True, award_xp=False)
        assert result.count == 2

# --- Resolution ---


class TestResolveCatch:
    def test_manual_catch_updates_inventory(self, ledger: Ledger, rng: random.Random) -> None:
        result = resolve_catch(ledger, rng)
        assert result.count == 1
        caught = result.fish[0]
        assert ledger.inventory[caught.species.name] == 1
        assert ledger.total_fish_caught == 1
        assert ledger.encyclopedia[caught.species.id].discovered

    def test_first_catch_is_a_discovery(self, ledger: Ledger, pinned_rng) -> None:
        result = resolve_catch(ledger, pinned_rng(0.0))
        assert result.fish[0].species.id == "bluegill"
        assert result.fish[0].new_discovery
        assert ledger.encyclopedia_unlocked
        assert any(email.id == "discovery-bluegill" for email in ledger.emails)

    def test_repeat_catch_is_not_a_discovery(self, ledger: Ledger, pinned_rng) -> None:
        resolve_catch(ledger, pinned_rng(0.0))
        result = resolve_catch(ledger, pinned_rng(0.0))
        assert not result.fish[0].new_discovery
        assert ledger.encyclopedia["bluegill"].caught == 2

    def test_high_draw_lands_on_rarest(self, ledger: Ledger, pinned_rng) -> None:
        result = resolve_catch(ledger, pinned_rng(0.995))
        assert result.fish[0].species.id == "golden_carp"

    def test_power_catches_several_fish(self, ledger: Ledger, rng: random.Random) -> None:
        ledger.upgrade_levels["rod"] = 3
        result = resolve_catch(ledger, rng)
        assert result.count == 3
        assert ledger.total_fish_caught == 3
        assert sum(result.by_species().values()) == 3

    def test_no_auto_rate_is_silent(self, ledger: Ledger, events: list, rng: random.Random) -> None:
        result = resolve_catch(ledger, rng, automatic=True)
        assert result.count == 0
        assert ledger.total_fish_caught == 0
        assert events == []

    def test_one_fish_caught_event_per_action(
        self, ledger: Ledger, events: list, rng: random.Random,
    ) -> None:
        ledger.upgrade_levels["rod"] = 4
        resolve_catch(ledger, rng)
        caught = [e for e in events if e.type == EventType.FISH_CAUGHT]
        assert len(caught) == 1
        assert caught[0].data["count"] == 4
        assert caught[0].data["automatic"] is False


# --- Measurements and XP ---


class TestMeasurements:
    def test_within_species_range(self, pond_catalog: Catalog, rng: random.Random) -> None:
        minnow = pond_catalog.get_species("minnow")
        for _ in range(50):
            weight, length = roll_measurements(minnow, rng)
            assert minnow.min_weight <= weight <= minnow.max_weight
            assert minnow.min_length <= length <= minnow.max_length

    def test_best_records_kept(self, pond_ledger: Ledger, rng: random.Random) -> None:
        pond_ledger.upgrade_levels["rod"] = 6
        result = resolve_catch(pond_ledger, rng)
        entry = pond_ledger.encyclopedia["minnow"]
        assert entry.best_weight == max(f.weight for f in result.fish)
        assert entry.best_length == max(f.length for f in result.fish)


class TestXp:
    def test_rarity_multiplies_xp(self, ledger: Ledger) -> None:
        catalog = ledger.catalog
        assert xp_for(ledger, catalog.get_species("bluegill")) == 10
        assert xp_for(ledger, catalog.get_species("perch")) == 20
        assert xp_for(ledger, catalog.get_species("pike")) == 50
        assert xp_for(ledger, catalog.get_species("golden_carp")) == 200

    def test_catch_awards_xp(self, ledger: Ledger, pinned_rng) -> None:
        result = resolve_catch(ledger, pinned_rng(0.0))
        assert result.xp_awarded == 10
        assert ledger.total_xp == 10

    def test_xp_disabled(self, ledger: Ledger, rng: random.Random) -> None:
        result = resolve_catch(ledger, rng, award_xp=False)
        assert result.xp_awarded == 0
        assert ledger.total_xp == 0


class TestEmptyLocation:
    def test_raises_catalog_error(self, pond_catalog: Catalog, rng: random.Random) -> None:
        """An unvalidated catalog with an empty location fails loudly."""
        catalog = Catalog(
            species=pond_catalog.species,
            locations=pond_catalog.locations + (LocationDefinition("void", "Void", 0, ()),),
            upgrades=UPGRADES,
            skills=SKILLS,
            boat_parts=BOAT_PARTS,
        )
        ledger = Ledger.new(catalog)
        ledger.active_location_id = "void"
        with pytest.raises(CatalogError):
            resolve_catch(ledger, rng)
