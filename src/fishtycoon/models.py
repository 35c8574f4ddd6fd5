"""Pydantic models for the persisted save snapshot.

Field names follow the stored JSON keys (camelCase aliases). Every field has a
default so older saves missing newer keys still validate.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

SAVE_VERSION = 2

# Upper bound for any stored level; cost curves overflow floats well past it.
MAX_STORED_LEVEL = 1000


class SnapshotModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Sub-records ---


class UpgradeRecord(SnapshotModel):
    id: str
    level: int = Field(0, le=MAX_STORED_LEVEL)
    # Written for display consumers only; recomputed from level on load.
    cost: int = 0


class LocationRecord(SnapshotModel):
    id: str
    unlocked: bool = False


class BoatCustomizationRecord(SnapshotModel):
    selected: dict[str, str] = Field(default_factory=dict)  # category → option id
    unlocked: list[str] = Field(default_factory=list)


class EncyclopediaRecord(SnapshotModel):
    discovered: bool = False
    caught: int = 0
    best_weight: float = Field(0.0, alias="bestWeight", allow_inf_nan=False)
    best_length: float = Field(0.0, alias="bestLength", allow_inf_nan=False)


class SkillRecord(SnapshotModel):
    level: int = Field(1, le=MAX_STORED_LEVEL)
    xp: int = 0


class EmailRecord(SnapshotModel):
    id: str
    subject: str
    body: str = ""
    read: bool = False
    timestamp: int = 0


# --- Root ---


class SaveSnapshot(SnapshotModel):
    """Flattened, re-derivable projection of the whole progression ledger."""

    version: int = SAVE_VERSION
    money: float = Field(0, allow_inf_nan=False)
    inventory: dict[str, int] = Field(default_factory=dict)
    total_fish_caught: int = Field(0, alias="totalFishCaught")
    # Derived values, written for display consumers and never read back.
    fishing_power: float = Field(1.0, alias="fishingPower")
    auto_fishing_rate: float = Field(0.0, alias="autoFishingRate")
    upgrades: list[UpgradeRecord] = Field(default_factory=list)
    fishing_locations: list[LocationRecord] = Field(
        default_factory=list, alias="fishingLocations",
    )
    active_location_id: str | None = Field(None, alias="activeLocationId")
    boat_customization: BoatCustomizationRecord = Field(
        default_factory=BoatCustomizationRecord, alias="boatCustomization",
    )
    encyclopedia: dict[str, EncyclopediaRecord] = Field(default_factory=dict)
    encyclopedia_unlocked: bool = Field(False, alias="encyclopediaUnlocked")
    last_online_time: int | None = Field(None, alias="lastOnlineTime")
    prestige_level: int = Field(0, alias="prestigeLevel", le=MAX_STORED_LEVEL)
    emails: list[EmailRecord] = Field(default_factory=list)
    fishing_skills: dict[str, SkillRecord] = Field(
        default_factory=dict, alias="fishingSkills",
    )
    total_xp: int = Field(0, alias="totalXP")
    auto_sell: bool = Field(False, alias="autoSell")
    season: int = 0
