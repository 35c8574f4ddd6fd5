"""Save persistence: snapshot codec plus a SQLite-backed key-value store.

Each save is one JSON blob under one key, overwritten whole on every write
(last write wins, no merging). Loading tolerates missing fields and drops ids
the catalog no longer knows; unparseable data raises InvalidSaveData, which
`SaveStore.load_ledger` turns into a fresh ledger.

Usage:
    store = SaveStore(db_path=settings.data_dir / "saves.db")
    ledger = store.load_ledger(settings.save_key, catalog)
    store.save(settings.save_key, ledger)
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from pydantic import ValidationError

from fishtycoon.catalog import Catalog, PartCategory
from fishtycoon.game import bonuses
from fishtycoon.game.ledger import BoatCustomization, Email, EncyclopediaEntry, Ledger
from fishtycoon.game.skills import SkillState
from fishtycoon.models import (
    BoatCustomizationRecord,
    EmailRecord,
    EncyclopediaRecord,
    LocationRecord,
    SaveSnapshot,
    SkillRecord,
    UpgradeRecord,
)

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS saves (
    key TEXT PRIMARY KEY,
    blob TEXT NOT NULL,
    updated_at REAL NOT NULL
)
"""


class InvalidSaveData(Exception):
    """Raised when a stored blob cannot be decoded into a ledger."""


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def to_snapshot(ledger: Ledger) -> SaveSnapshot:
    """Project the ledger onto its persisted shape."""
    catalog = ledger.catalog
    return SaveSnapshot(
        money=ledger.money,
        inventory=dict(ledger.inventory),
        total_fish_caught=ledger.total_fish_caught,
        fishing_power=bonuses.effective_fishing_power(ledger),
        auto_fishing_rate=bonuses.effective_auto_fish_rate(ledger),
        upgrades=[
            UpgradeRecord(id=upgrade_id, level=level, cost=ledger.upgrade_cost(upgrade_id))
            for upgrade_id, level in ledger.upgrade_levels.items()
        ],
        fishing_locations=[
            LocationRecord(id=loc.id, unlocked=loc.id in ledger.unlocked_locations)
            for loc in catalog.locations
        ],
        active_location_id=ledger.active_location_id,
        boat_customization=BoatCustomizationRecord(
            selected={category.value: option for category, option in ledger.boat.selected.items()},
            unlocked=sorted(ledger.boat.unlocked),
        ),
        encyclopedia={
            species_id: EncyclopediaRecord(
                discovered=entry.discovered,
                caught=entry.caught,
                best_weight=entry.best_weight,
                best_length=entry.best_length,
            )
            for species_id, entry in ledger.encyclopedia.items()
        },
        encyclopedia_unlocked=ledger.encyclopedia_unlocked,
        last_online_time=ledger.last_online_time,
        prestige_level=ledger.prestige_level,
        emails=[
            EmailRecord(
                id=email.id, subject=email.subject, body=email.body,
                read=email.read, timestamp=email.timestamp,
            )
            for email in ledger.emails
        ],
        fishing_skills={
            skill_id: SkillRecord(level=state.level, xp=state.xp)
            for skill_id, state in ledger.skills.items()
        },
        total_xp=ledger.total_xp,
        auto_sell=ledger.auto_sell_enabled,
        season=ledger.season,
    )


def from_snapshot(snapshot: SaveSnapshot, catalog: Catalog) -> Ledger:
    """Rebuild a ledger from a snapshot. Derived values are recomputed, not read."""
    ledger = Ledger.new(catalog, prestige_level=max(0, snapshot.prestige_level))
    ledger.money = int(snapshot.money)
    ledger.total_fish_caught = max(0, snapshot.total_fish_caught)
    ledger.inventory = {
        name: count
        for name, count in snapshot.inventory.items()
        if count >= 0 and catalog.species_named(name) is not None
    }

    for record in snapshot.upgrades:
        if catalog.has_upgrade(record.id):
            definition = catalog.get_upgrade(record.id)
            level = max(definition.start_level, record.level)
            if definition.max_level is not None:
                level = min(level, definition.max_level)
            ledger.upgrade_levels[record.id] = level

    for record in snapshot.fishing_locations:
        if record.unlocked and catalog.has_location(record.id):
            ledger.unlocked_locations.add(record.id)
    if snapshot.active_location_id in ledger.unlocked_locations:
        ledger.active_location_id = snapshot.active_location_id

    ledger.boat = _restore_boat(snapshot.boat_customization, ledger.boat, catalog)

    for species_id, record in snapshot.encyclopedia.items():
        if species_id in ledger.encyclopedia:
            ledger.encyclopedia[species_id] = EncyclopediaEntry(
                discovered=record.discovered,
                caught=max(0, record.caught),
                best_weight=record.best_weight,
                best_length=record.best_length,
            )
    ledger.encyclopedia_unlocked = snapshot.encyclopedia_unlocked or ledger.discovered_count() > 0

    for skill_id, record in snapshot.fishing_skills.items():
        if catalog.has_skill(skill_id):
            definition = catalog.get_skill(skill_id)
            ledger.skills[skill_id] = SkillState(
                level=min(definition.max_level, max(1, record.level)),
                xp=max(0, record.xp),
            )

    ledger.last_online_time = snapshot.last_online_time
    ledger.total_xp = max(0, snapshot.total_xp)
    ledger.emails = [
        Email(id=r.id, subject=r.subject, body=r.body, read=r.read, timestamp=r.timestamp)
        for r in snapshot.emails
    ]
    ledger.auto_sell_enabled = snapshot.auto_sell
    ledger.season = snapshot.season
    return ledger


def _restore_boat(
    record: BoatCustomizationRecord,
    default: BoatCustomization,
    catalog: Catalog,
) -> BoatCustomization:
    unlocked = set(default.unlocked)
    unlocked.update(option for option in record.unlocked if catalog.has_part(option))

    selected = dict(default.selected)
    for raw_category, option_id in record.selected.items():
        try:
            category = PartCategory(raw_category)
        except ValueError:
            continue
        if option_id in unlocked and catalog.get_part(option_id).category == category:
            selected[category] = option_id
    return BoatCustomization(selected=selected, unlocked=unlocked)


def encode(ledger: Ledger) -> str:
    """Serialize the ledger to its JSON blob."""
    return to_snapshot(ledger).model_dump_json(by_alias=True)


def decode(blob: str | bytes, catalog: Catalog) -> Ledger:
    """Parse a JSON blob into a ledger. Raises InvalidSaveData."""
    try:
        snapshot = SaveSnapshot.model_validate_json(blob)
    except ValidationError as exc:
        raise InvalidSaveData(str(exc)) from exc
    try:
        return from_snapshot(snapshot, catalog)
    except (ValueError, OverflowError) as exc:
        raise InvalidSaveData(f"Unusable save values: {exc}") from exc


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SaveStore:
    """Durable key-value store for save blobs, backed by SQLite."""

    def __init__(self, db_path: Path) -> None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._conn = sqlite3.connect(str(db_path), timeout=5.0)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute(_CREATE_TABLE)
        self._conn.commit()

    def close(self) -> None:
        """Close the SQLite connection."""
        self._conn.close()

    def __enter__(self) -> SaveStore:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def write_blob(self, key: str, blob: str) -> None:
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO saves (key, blob, updated_at) VALUES (?, ?, ?)",
                (key, blob, time.time()),
            )

    def read_blob(self, key: str) -> str | None:
        row = self._conn.execute(
            "SELECT blob FROM saves WHERE key = ?", (key,),
        ).fetchone()
        return row[0] if row else None

    def delete(self, key: str) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM saves WHERE key = ?", (key,))

    def save(self, key: str, ledger: Ledger) -> None:
        """Overwrite the stored snapshot for `key`."""
        self.write_blob(key, encode(ledger))
        logger.debug("Saved %s", key)

    def load(self, key: str, catalog: Catalog) -> Ledger | None:
        """Decode the stored ledger, or None when nothing is saved. Raises InvalidSaveData."""
        blob = self.read_blob(key)
        if blob is None:
            return None
        return decode(blob, catalog)

    def load_ledger(self, key: str, catalog: Catalog) -> Ledger:
        """Load a ledger, falling back to a fresh one if missing or corrupt."""
        try:
            ledger = self.load(key, catalog)
        except InvalidSaveData as exc:
            logger.warning("Save %s is corrupt, starting fresh: %s", key, exc)
            return Ledger.new(catalog)
        if ledger is None:
            logger.info("No save found for %s, starting fresh", key)
            return Ledger.new(catalog)
        logger.info(
            "Loaded %s: money=%s fish=%d prestige=%d",
            key, f"{ledger.money:,}", ledger.total_fish_caught, ledger.prestige_level,
        )
        return ledger
