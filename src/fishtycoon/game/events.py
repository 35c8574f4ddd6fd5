"""Game events: typed notifications emitted by the progression ledger."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class EventType(str, Enum):
    """Tracked ledger mutations. Every one of them triggers a save."""

    FISH_CAUGHT = "fish_caught"
    FISH_SOLD = "fish_sold"
    SPECIES_DISCOVERED = "species_discovered"
    SKILL_LEVEL_UP = "skill_level_up"
    UPGRADE_PURCHASED = "upgrade_purchased"
    LOCATION_UNLOCKED = "location_unlocked"
    LOCATION_CHANGED = "location_changed"
    BOAT_PART_PURCHASED = "boat_part_purchased"
    BOAT_PART_SELECTED = "boat_part_selected"
    AUTO_SELL_TOGGLED = "auto_sell_toggled"
    EMAIL_RECEIVED = "email_received"
    EMAIL_READ = "email_read"
    SEASON_CHANGED = "season_changed"
    OFFLINE_PROGRESS = "offline_progress"
    PRESTIGE = "prestige"
    RESET = "reset"


# Events that change an input of the bonus aggregator's rates,
# so periodic timers must be re-armed after them.
RATE_EVENTS: frozenset[EventType] = frozenset({
    EventType.UPGRADE_PURCHASED,
    EventType.SKILL_LEVEL_UP,
    EventType.BOAT_PART_SELECTED,
    EventType.AUTO_SELL_TOGGLED,
    EventType.PRESTIGE,
    EventType.RESET,
})

# Events after which every timer tied to the old state is cancelled first.
TIMER_RESET_EVENTS: frozenset[EventType] = frozenset({
    EventType.LOCATION_CHANGED,
    EventType.PRESTIGE,
    EventType.RESET,
})


@dataclass(frozen=True)
class GameEvent:
    """A single mutation notification from the ledger."""

    type: EventType
    timestamp: float = field(default_factory=time.monotonic)
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.type.value


Listener = Callable[[GameEvent], None]
