"""Progression ledger: the single owner of all mutable game state.

Every mutator validates affordability before spending and returns False as a
silent no-op when the player cannot pay or the action does not apply.
Tracked mutations notify subscribers with a GameEvent; the session uses that
to persist and to re-arm timers.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from typing import Iterator

from fishtycoon.catalog import Catalog, FishSpecies, LocationDefinition, PartCategory
from fishtycoon.game import bonuses, prestige
from fishtycoon.game.events import EventType, GameEvent, Listener
from fishtycoon.game.skills import SkillState, apply_xp

logger = logging.getLogger(__name__)


@dataclass
class EncyclopediaEntry:
    """Discovery and best records for one species."""

    discovered: bool = False
    caught: int = 0
    best_weight: float = 0.0
    best_length: float = 0.0

    def record(self, weight: float, length: float) -> bool:
        """Register one catch. Returns True on first-ever discovery."""
        first = not self.discovered
        self.discovered = True
        self.caught += 1
        self.best_weight = max(self.best_weight, weight)
        self.best_length = max(self.best_length, length)
        return first


@dataclass
class Email:
    id: str
    subject: str
    body: str = ""
    read: bool = False
    timestamp: int = 0


@dataclass
class BoatCustomization:
    """Selected option per part category plus every option owned."""

    selected: dict[PartCategory, str] = field(default_factory=dict)
    unlocked: set[str] = field(default_factory=set)


@dataclass
class Ledger:
    """All progression state for one save slot."""

    catalog: Catalog = field(repr=False, compare=False)
    money: int = 0
    inventory: dict[str, int] = field(default_factory=dict)  # species name → count
    total_fish_caught: int = 0
    upgrade_levels: dict[str, int] = field(default_factory=dict)
    unlocked_locations: set[str] = field(default_factory=set)
    active_location_id: str = ""
    boat: BoatCustomization = field(default_factory=BoatCustomization)
    encyclopedia: dict[str, EncyclopediaEntry] = field(default_factory=dict)  # by species id
    encyclopedia_unlocked: bool = False
    last_online_time: int | None = None  # ms since epoch
    prestige_level: int = 0
    skills: dict[str, SkillState] = field(default_factory=dict)
    total_xp: int = 0
    emails: list[Email] = field(default_factory=list)
    auto_sell_enabled: bool = False
    season: int = 0

    # Transient, never persisted
    is_fishing: bool = field(default=False, compare=False)
    _listeners: list[Listener] = field(default_factory=list, compare=False, repr=False)
    _muted: int = field(default=0, compare=False, repr=False)
    _prestiging: bool = field(default=False, compare=False, repr=False)

    @classmethod
    def new(cls, catalog: Catalog, *, prestige_level: int = 0) -> Ledger:
        """Fresh initial state, including the starting bonuses of a prestige level."""
        start = catalog.starting_location
        return cls(
            catalog=catalog,
            money=prestige.bonuses_for(prestige_level).starting_money,
            upgrade_levels={u.id: u.start_level for u in catalog.upgrades},
            unlocked_locations={loc.id for loc in catalog.locations if loc.unlocked_by_default},
            active_location_id=start.id,
            boat=_default_boat(catalog),
            encyclopedia={s.id: EncyclopediaEntry() for s in catalog.species},
            prestige_level=prestige_level,
            skills={s.id: SkillState() for s in catalog.skills},
        )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, event_type: EventType, **data: object) -> None:
        """Emit a tracked-mutation event to every subscriber."""
        if self._muted:
            return
        event = GameEvent(type=event_type, data=data)
        for listener in list(self._listeners):
            listener(event)

    @contextmanager
    def muted(self) -> Iterator[None]:
        """Suppress notifications; the caller emits one summary event after."""
        self._muted += 1
        try:
            yield
        finally:
            self._muted -= 1

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def active_location(self) -> LocationDefinition:
        return self.catalog.get_location(self.active_location_id)

    def upgrade_level(self, upgrade_id: str) -> int:
        return self.upgrade_levels[upgrade_id]

    def upgrade_cost(self, upgrade_id: str) -> int:
        definition = self.catalog.get_upgrade(upgrade_id)
        return definition.cost(self.upgrade_levels[upgrade_id])

    def skill_level(self, skill_id: str) -> int:
        state = self.skills.get(skill_id)
        return state.level if state else 1

    def is_unlocked(self, location_id: str) -> bool:
        return location_id in self.unlocked_locations

    def discovered_count(self) -> int:
        return sum(1 for entry in self.encyclopedia.values() if entry.discovered)

    def encyclopedia_completion_pct(self) -> float:
        total = len(self.catalog.species)
        if total == 0:
            return 0.0
        return self.discovered_count() / total * 100

    def unread_emails(self) -> list[Email]:
        return [email for email in self.emails if not email.read]

    def prestige_progress(self) -> prestige.PrestigeProgress:
        return prestige.PrestigeProgress(
            required=prestige.requirements_for(self.catalog.prestige, self.prestige_level),
            money=self.money,
            fish_caught=self.total_fish_caught,
            locations_unlocked=len(self.unlocked_locations),
            encyclopedia_pct=self.encyclopedia_completion_pct(),
        )

    def can_prestige(self) -> bool:
        return self.prestige_progress().met

    # ------------------------------------------------------------------
    # Core-internal mutations (used by the catch engine and offline backfill)
    # ------------------------------------------------------------------

    def record_catch(self, species: FishSpecies, weight: float, length: float) -> bool:
        """Add one fish to inventory and encyclopedia. Returns True if newly discovered."""
        self.inventory[species.name] = self.inventory.get(species.name, 0) + 1
        self.total_fish_caught += 1

        entry = self.encyclopedia.setdefault(species.id, EncyclopediaEntry())
        first = entry.record(weight, length)
        if first:
            self.encyclopedia_unlocked = True
            logger.info("New species discovered: %s (%s)", species.name, species.rarity)
            self._send_email(
                f"discovery-{species.id}",
                f"New species: {species.name}",
                f"You caught your first {species.name} ({species.rarity}). "
                "It has been added to your encyclopedia.",
            )
            self.notify(EventType.SPECIES_DISCOVERED, species_id=species.id)
        return first

    def record_catch_sold(self, species: FishSpecies, weight: float, length: float, value: int) -> None:
        """Register a catch that goes straight to market instead of inventory."""
        self.record_catch(species, weight, length)
        self.inventory[species.name] -= 1
        self.money += value

    def award_xp(self, amount: int, skill_id: str) -> int:
        """Add XP to the total and to one skill. Returns levels gained."""
        if amount <= 0:
            return 0
        self.total_xp += amount
        state = self.skills.setdefault(skill_id, SkillState())
        definition = self.catalog.get_skill(skill_id)
        level_ups = apply_xp(definition, state, amount)
        if level_ups:
            logger.info(
                "Skill %s reached level %d (+%d)", definition.name, state.level, level_ups,
            )
            self.notify(EventType.SKILL_LEVEL_UP, skill_id=skill_id, level=state.level)
        return level_ups

    # ------------------------------------------------------------------
    # Player mutators
    # ------------------------------------------------------------------

    def purchase_upgrade(self, upgrade_id: str) -> bool:
        definition = self.catalog.get_upgrade(upgrade_id)
        level = self.upgrade_levels.get(upgrade_id, definition.start_level)
        if definition.is_maxed(level):
            logger.debug("Upgrade %s already at max level %d", upgrade_id, level)
            return False
        cost = definition.cost(level)
        if not self._spend(cost):
            return False
        self.upgrade_levels[upgrade_id] = level + 1
        logger.info("Purchased %s level %d for %d", definition.name, level + 1, cost)
        self.notify(EventType.UPGRADE_PURCHASED, upgrade_id=upgrade_id, level=level + 1, cost=cost)
        return True

    def sell_fish(self, name: str) -> int:
        """Sell every held fish of one species. Returns money gained."""
        count = self.inventory.get(name, 0)
        species = self.catalog.species_named(name)
        if count <= 0 or species is None:
            return 0
        gained = bonuses.effective_sell_value(self, species.value) * count
        self.inventory[name] = 0
        self.money += gained
        self.notify(EventType.FISH_SOLD, name=name, count=count, value=gained)
        return gained

    def sell_all(self) -> int:
        """Sell the whole inventory. Returns money gained."""
        gained = 0
        sold = 0
        for name, count in self.inventory.items():
            species = self.catalog.species_named(name)
            if count <= 0 or species is None:
                continue
            gained += bonuses.effective_sell_value(self, species.value) * count
            sold += count
            self.inventory[name] = 0
        if sold == 0:
            return 0
        self.money += gained
        self.notify(EventType.FISH_SOLD, name=None, count=sold, value=gained)
        return gained

    def unlock_location(self, location_id: str) -> bool:
        location = self.catalog.get_location(location_id)
        if location_id in self.unlocked_locations:
            return False
        if not self._spend(location.price):
            return False
        self.unlocked_locations.add(location_id)
        logger.info("Unlocked location %s for %d", location.name, location.price)
        self._send_email(
            f"location-{location_id}",
            f"Welcome to {location.name}",
            f"New waters await. {len(location.species_ids)} species live at {location.name}.",
        )
        self.notify(EventType.LOCATION_UNLOCKED, location_id=location_id)
        return True

    def set_active_location(self, location_id: str) -> bool:
        self.catalog.get_location(location_id)
        if location_id not in self.unlocked_locations or location_id == self.active_location_id:
            return False
        self.active_location_id = location_id
        self.notify(EventType.LOCATION_CHANGED, location_id=location_id)
        return True

    def purchase_boat_option(self, option_id: str) -> bool:
        option = self.catalog.get_part(option_id)
        if option_id in self.boat.unlocked:
            return False
        if not self._spend(option.price):
            return False
        self.boat.unlocked.add(option_id)
        logger.info("Purchased boat part %s for %d", option.name, option.price)
        self.notify(EventType.BOAT_PART_PURCHASED, option_id=option_id)
        return True

    def select_boat_option(self, option_id: str) -> bool:
        option = self.catalog.get_part(option_id)
        if option_id not in self.boat.unlocked:
            return False
        if self.boat.selected.get(option.category) == option_id:
            return False
        self.boat.selected[option.category] = option_id
        self.notify(EventType.BOAT_PART_SELECTED, option_id=option_id, category=option.category.value)
        return True

    def set_auto_sell(self, enabled: bool) -> bool:
        if self.auto_sell_enabled == enabled:
            return False
        self.auto_sell_enabled = enabled
        self.notify(EventType.AUTO_SELL_TOGGLED, enabled=enabled)
        return True

    def mark_email_read(self, email_id: str) -> bool:
        for email in self.emails:
            if email.id == email_id and not email.read:
                email.read = True
                self.notify(EventType.EMAIL_READ, email_id=email_id)
                return True
        return False

    def advance_season(self, seasons: int = 4) -> int:
        self.season = (self.season + 1) % seasons
        self.notify(EventType.SEASON_CHANGED, season=self.season)
        return self.season

    def perform_prestige(self) -> bool:
        """Trade current progress for the next prestige level.

        Encyclopedia data, lifetime totals, XP and emails survive. Skill
        levels survive bumped by a fixed floor bonus. Everything bought
        with money is reset to its initial value.
        """
        if self._prestiging or not self.can_prestige():
            return False

        self._prestiging = True
        try:
            new_level = self.prestige_level + 1
            fresh = Ledger.new(self.catalog, prestige_level=new_level)

            fresh.encyclopedia = self.encyclopedia
            fresh.encyclopedia_unlocked = self.encyclopedia_unlocked
            fresh.total_fish_caught = self.total_fish_caught
            fresh.total_xp = self.total_xp
            fresh.emails = self.emails
            fresh.last_online_time = self.last_online_time
            fresh.auto_sell_enabled = self.auto_sell_enabled
            fresh.season = self.season
            for skill_id, state in self.skills.items():
                definition = self.catalog.get_skill(skill_id)
                fresh.skills[skill_id] = SkillState(
                    level=min(definition.max_level, state.level + prestige.SKILL_FLOOR_BONUS),
                )

            self._replace_state(fresh)
            self._send_email(
                f"prestige-{new_level}",
                f"Prestige {new_level} reached",
                "Your boat and gear start over. Your knowledge stays.",
            )
        finally:
            self._prestiging = False

        logger.info("Prestige complete: now level %d", self.prestige_level)
        self.notify(EventType.PRESTIGE, level=self.prestige_level)
        return True

    def reset_progress(self) -> None:
        """Full reset: everything, including prestige and encyclopedia."""
        self._replace_state(Ledger.new(self.catalog))
        logger.info("Progress reset")
        self.notify(EventType.RESET)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _spend(self, cost: int) -> bool:
        if self.money < cost:
            logger.debug("Insufficient funds: have %d, need %d", self.money, cost)
            return False
        self.money -= cost
        return True

    def _send_email(self, email_id: str, subject: str, body: str) -> None:
        if any(email.id == email_id for email in self.emails):
            return
        self.emails.append(Email(
            id=email_id,
            subject=subject,
            body=body,
            timestamp=int(time.time() * 1000),
        ))
        self.notify(EventType.EMAIL_RECEIVED, email_id=email_id)

    def _replace_state(self, other: Ledger) -> None:
        """Copy every persisted field from `other`, keeping subscribers."""
        for f in fields(self):
            if f.name.startswith("_") or f.name in ("catalog", "is_fishing"):
                continue
            setattr(self, f.name, getattr(other, f.name))


def _default_boat(catalog: Catalog) -> BoatCustomization:
    selected: dict[PartCategory, str] = {}
    unlocked: set[str] = set()
    for category in PartCategory:
        part = catalog.default_part(category)
        selected[category] = part.id
    unlocked.update(p.id for p in catalog.boat_parts if p.unlocked_by_default)
    return BoatCustomization(selected=selected, unlocked=unlocked)
