"""Skill progression: XP accumulation and multi-level resolution."""

from __future__ import annotations

from dataclasses import dataclass

from fishtycoon.catalog import SkillDefinition


@dataclass
class SkillState:
    """Mutable progress of one skill. XP is progress toward the next level."""

    level: int = 1
    xp: int = 0


def xp_to_next(definition: SkillDefinition, state: SkillState) -> int | None:
    """XP still needed for the next level, or None at max level."""
    if state.level >= definition.max_level:
        return None
    return definition.xp_to_next(state.level) - state.xp


def apply_xp(definition: SkillDefinition, state: SkillState, gained: int) -> int:
    """Add XP and resolve every level-up it pays for. Returns levels gained."""
    if gained <= 0:
        return 0

    state.xp += gained
    level_ups = 0
    while state.level < definition.max_level:
        required = definition.xp_to_next(state.level)
        if state.xp < required:
            break
        state.xp -= required
        state.level += 1
        level_ups += 1
    return level_ups
