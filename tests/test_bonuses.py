"""Tests for the bonus aggregator."""

import pytest

from fishtycoon.game import bonuses
from fishtycoon.game.ledger import Ledger
from fishtycoon.game.skills import SkillState


def _set_skill(ledger: Ledger, skill_id: str, level: int) -> None:
    ledger.skills[skill_id] = SkillState(level=level)


def _equip(ledger: Ledger, option_id: str) -> None:
    option = ledger.catalog.get_part(option_id)
    ledger.boat.unlocked.add(option_id)
    ledger.boat.selected[option.category] = option_id


class TestFreshLedger:
    def test_base_values(self, ledger: Ledger) -> None:
        """A new game carries no bonuses at all."""
        assert bonuses.effective_fishing_power(ledger) == 1.0
        assert bonuses.effective_auto_fish_rate(ledger) == 0.0
        assert bonuses.effective_sell_value(ledger, 10) == 10
        assert bonuses.effective_action_delay(ledger, 1.0) == 1.0
        assert bonuses.xp_multiplier(ledger) == 1.0
        assert bonuses.luck_bonus(ledger) == 0.0

    def test_adjusted_chances_match_base(self, ledger: Ledger) -> None:
        species = ledger.catalog.species_for_location("lake")
        adjusted = bonuses.adjusted_chances(ledger, species)
        for s, weight in adjusted:
            assert weight == pytest.approx(s.chance)


class TestFishingPower:
    def test_rod_prestige_and_casting_stack(self, ledger: Ledger) -> None:
        """(1 + 1 rod + 1.0 prestige) × (1 + 0.1 casting) = 3.3"""
        ledger.prestige_level = 2
        ledger.upgrade_levels["rod"] = 2
        _set_skill(ledger, "casting", 2)
        assert bonuses.effective_fishing_power(ledger) == 3.3

    def test_floored_to_one_decimal(self, ledger: Ledger) -> None:
        _set_skill(ledger, "casting", 2)
        ledger.upgrade_levels["rod"] = 3
        # 3 × 1.1 = 3.3000000000000003
        assert bonuses.effective_fishing_power(ledger) == 3.3


class TestAutoFishRate:
    def test_all_sources_combine(self, ledger: Ledger) -> None:
        """0.4 auto × 1.1 automation + 0.1 prestige + 0.2 outboard"""
        ledger.upgrade_levels["auto"] = 2
        _set_skill(ledger, "automation", 3)
        ledger.prestige_level = 1
        _equip(ledger, "engine_outboard")
        assert bonuses.effective_auto_fish_rate(ledger) == pytest.approx(0.74)

    def test_prestige_alone_enables_auto_fishing(self, ledger: Ledger) -> None:
        ledger.prestige_level = 1
        assert bonuses.effective_auto_fish_rate(ledger) == pytest.approx(0.1)

    def test_unselected_parts_do_not_count(self, ledger: Ledger) -> None:
        ledger.boat.unlocked.add("engine_turbine")
        assert bonuses.effective_auto_fish_rate(ledger) == 0.0


class TestSellValue:
    def test_knowledge_and_prestige_multiply(self, ledger: Ledger) -> None:
        _set_skill(ledger, "knowledge", 3)
        ledger.prestige_level = 2
        assert bonuses.effective_sell_value(ledger, 100) == 165

    def test_result_is_floored(self, ledger: Ledger) -> None:
        ledger.prestige_level = 1
        assert bonuses.effective_sell_value(ledger, 5) == 6


class TestActionDelay:
    def test_efficiency_shortens_delay(self, ledger: Ledger) -> None:
        ledger.upgrade_levels["boat"] = 5
        _set_skill(ledger, "efficiency", 11)
        assert bonuses.effective_action_delay(ledger, 1.0) == pytest.approx(0.6)

    def test_never_below_half(self, ledger: Ledger) -> None:
        ledger.upgrade_levels["boat"] = 5
        _set_skill(ledger, "efficiency", 26)
        assert bonuses.effective_action_delay(ledger, 1.0) == pytest.approx(0.5)


class TestAdjustedChances:
    def test_luck_favours_rare_species(self, ledger: Ledger) -> None:
        ledger.upgrade_levels["lure"] = 3
        species = ledger.catalog.species_for_location("lake")
        adjusted = dict((s.id, w) for s, w in bonuses.adjusted_chances(ledger, species))

        assert sum(adjusted.values()) == pytest.approx(1.0)
        assert adjusted["golden_carp"] > 0.01
        assert adjusted["bluegill"] < 0.6

    def test_sonar_adds_luck(self, ledger: Ledger) -> None:
        _equip(ledger, "equipment_sonar")
        assert bonuses.luck_bonus(ledger) == pytest.approx(0.1)


class TestSummary:
    def test_summary_matches_scalars(self, ledger: Ledger) -> None:
        ledger.prestige_level = 1
        summary = bonuses.summarize(ledger)
        assert summary.fishing_power == bonuses.effective_fishing_power(ledger)
        assert summary.sell_multiplier == pytest.approx(1.25)
        assert summary.auto_fish_rate == pytest.approx(0.1)


class TestPurity:
    def test_fishing_power_independent_of_call_order(self, ledger: Ledger) -> None:
        """Same levels give the same power however other calls and edits interleave."""
        ledger.upgrade_levels["rod"] = 4
        ledger.prestige_level = 3
        _set_skill(ledger, "casting", 5)
        first = bonuses.effective_fishing_power(ledger)

        bonuses.effective_auto_fish_rate(ledger)
        bonuses.summarize(ledger)
        bonuses.adjusted_chances(ledger, ledger.catalog.species_for_location("lake"))
        ledger.upgrade_levels["rod"] = 9
        _set_skill(ledger, "casting", 20)
        ledger.prestige_level = 0
        _equip(ledger, "engine_turbine")
        assert bonuses.effective_fishing_power(ledger) != first

        ledger.upgrade_levels["rod"] = 4
        ledger.prestige_level = 3
        _set_skill(ledger, "casting", 5)
        assert bonuses.effective_fishing_power(ledger) == first
        # (1 + 3 rod + 1.5 prestige) × (1 + 0.4 casting)
        assert first == 7.7
