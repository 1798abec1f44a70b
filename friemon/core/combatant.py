"""Mutable per-battle state for one team member."""

from __future__ import annotations

import random
from typing import Any

from pydantic import BaseModel, Field

from friemon.core.characters import Character, Stat
from friemon.core.moves import (
    MAJOR_STATUSES,
    Move,
    StageStat,
    StatusCondition,
    get_move,
)
from friemon.core.typechart import ElementType
from friemon.utils.helpers import percent

MIN_STAGE = -6
MAX_STAGE = 6

# Permanent stat backing each stage-bearing battle stat
_STAGE_TO_STAT: dict[StageStat, Stat] = {
    StageStat.ATK: Stat.ATK,
    StageStat.DEF: Stat.DEF,
    StageStat.SP_ATK: Stat.SP_ATK,
    StageStat.SP_DEF: Stat.SP_DEF,
    StageStat.SPEED: Stat.SPEED,
}


def stage_multiplier(stage: int) -> float:
    """Multiplier for a stat stage in [-6, 6]."""
    if stage >= 0:
        return (2 + stage) / 2
    return 2 / (2 + abs(stage))


def _clamp_stage(stage: int) -> int:
    return max(MIN_STAGE, min(MAX_STAGE, stage))


class BattleStats(BaseModel):
    """Runtime state of one combatant: HP, stages, statuses and turn flags."""

    current_hp: int
    max_hp: int

    stages: dict[StageStat, int] = Field(default_factory=lambda: {s: 0 for s in StageStat})
    # Status -> turns remaining. 0 means it lasts until cured.
    statuses: dict[StatusCondition, int] = Field(default_factory=dict)

    # Single-turn flags
    flinched: bool = False
    confusion_resisted: bool = False

    # Counters
    protected_turns: int = 0
    trapped_turns: int = 0
    disabled_turns: int = 0
    disabled_move_id: int | None = None

    # Multi-turn moves
    charging_move_id: int | None = None
    charge_turns: int = 0
    must_recharge: bool = False

    last_move_id: int | None = None
    pp: dict[int, int] = Field(default_factory=dict)  # Move id -> PP left

    @property
    def fainted(self) -> bool:
        return self.current_hp == 0

    @property
    def hp_percent(self) -> float:
        return percent(self.current_hp, self.max_hp)

    @property
    def protected(self) -> bool:
        return self.protected_turns > 0

    @property
    def trapped(self) -> bool:
        return self.trapped_turns > 0

    @property
    def charging(self) -> bool:
        return self.charging_move_id is not None

    # -- HP ---------------------------------------------------------------

    def take_damage(self, amount: int) -> int:
        """Apply damage, return actual amount dealt. Clamps to 0."""
        actual = max(0, min(amount, self.current_hp))
        self.current_hp -= actual
        return actual

    def heal(self, amount: int) -> int:
        """Heal HP, return actual amount healed. Clamps to max_hp."""
        if self.fainted:
            return 0
        actual = max(0, min(amount, self.max_hp - self.current_hp))
        self.current_hp += actual
        return actual

    # -- Stat stages ------------------------------------------------------

    def stage(self, stat: StageStat) -> int:
        return self.stages.get(stat, 0)

    def modify_stage(self, stat: StageStat, delta: int) -> int:
        """Shift a stage, clamped to [-6, 6]. Returns the change actually applied."""
        old = self.stage(stat)
        new = _clamp_stage(old + delta)
        self.stages[stat] = new
        return new - old

    def stage_multiplier(self, stat: StageStat) -> float:
        return stage_multiplier(self.stage(stat))

    def reset_stages(self) -> None:
        self.stages = {s: 0 for s in StageStat}

    # -- Status -----------------------------------------------------------

    def has_status(self, status: StatusCondition) -> bool:
        return status in self.statuses

    @property
    def major_status(self) -> StatusCondition | None:
        for status in self.statuses:
            if status in MAJOR_STATUSES:
                return status
        return None

    def has_major_status(self) -> bool:
        return self.major_status is not None

    def add_status(self, status: StatusCondition, duration: int = 0) -> bool:
        """Apply a status. Returns False, changing nothing, if it cannot stack."""
        if status in self.statuses:
            return False
        if status in MAJOR_STATUSES and self.has_major_status():
            return False
        self.statuses[status] = max(0, duration)
        return True

    def remove_status(self, status: StatusCondition) -> None:
        self.statuses.pop(status, None)
        if status == StatusCondition.CONFUSE:
            self.confusion_resisted = False

    def clear_major_status(self) -> None:
        major = self.major_status
        if major is not None:
            self.remove_status(major)

    # -- PP ---------------------------------------------------------------

    def has_pp(self, move_id: int) -> bool:
        return self.pp.get(move_id, 0) > 0

    def use_pp(self, move_id: int) -> bool:
        if not self.has_pp(move_id):
            return False
        self.pp[move_id] -= 1
        return True

    def out_of_pp(self) -> bool:
        return all(left <= 0 for left in self.pp.values())

    # -- Turn housekeeping ------------------------------------------------

    def process_turn_end(self, rng: Any = None) -> list[StatusCondition]:
        """Advance every counter by one turn.

        Returns the statuses that wore off so the caller can narrate them.
        """
        rng = rng or random
        expired: list[StatusCondition] = []

        for status, turns in list(self.statuses.items()):
            if status == StatusCondition.FREEZE:
                if rng.random() < 0.2:
                    expired.append(status)
                continue
            if turns > 0:
                self.statuses[status] = turns - 1
                if turns - 1 <= 0:
                    expired.append(status)
        for status in expired:
            self.remove_status(status)

        self.flinched = False
        self.confusion_resisted = False

        self.protected_turns = max(0, self.protected_turns - 1)
        self.trapped_turns = max(0, self.trapped_turns - 1)
        self.disabled_turns = max(0, self.disabled_turns - 1)
        if self.disabled_turns == 0:
            self.disabled_move_id = None

        if self.charging:
            self.charge_turns = max(0, self.charge_turns - 1)

        return expired

    def clear_volatile(self) -> None:
        """Drop state that does not survive switching out."""
        self.flinched = False
        self.confusion_resisted = False
        self.protected_turns = 0
        self.charging_move_id = None
        self.charge_turns = 0
        self.must_recharge = False
        self.remove_status(StatusCondition.CONFUSE)


class Combatant(BaseModel):
    """A team member in battle: an immutable snapshot plus runtime state."""

    character: Character
    stats: BattleStats

    @classmethod
    def from_character(cls, character: Character) -> Combatant:
        max_hp = character.max_hp
        pp = {}
        for move_id in character.moves:
            move = get_move(move_id)
            if move is not None:
                pp[move_id] = move.pp
        return cls(
            character=character,
            stats=BattleStats(current_hp=max_hp, max_hp=max_hp, pp=pp),
        )

    @property
    def name(self) -> str:
        return self.character.display_name

    @property
    def level(self) -> int:
        return self.character.level

    @property
    def types(self) -> tuple[ElementType, ...]:
        return self.character.types

    @property
    def fainted(self) -> bool:
        return self.stats.fainted

    def knows_move(self, move_id: int) -> bool:
        return move_id in self.character.moves and get_move(move_id) is not None

    @property
    def moves(self) -> list[Move]:
        known = [get_move(move_id) for move_id in self.character.moves]
        return [m for m in known if m is not None]

    def raw_stat(self, stat: StageStat) -> int:
        """Unstaged stat value from the snapshot."""
        return self.character.stat(_STAGE_TO_STAT[stat])

    def effective_speed(self, use_stages: bool = True) -> float:
        """Speed after stages, halved while paralyzed."""
        speed: float = self.raw_stat(StageStat.SPEED)
        if use_stages:
            speed *= self.stats.stage_multiplier(StageStat.SPEED)
        if self.stats.has_status(StatusCondition.PARALYZE):
            speed *= 0.5
        return speed
