"""Character stat model, personalities and the base roster."""

from __future__ import annotations

import math
import random
import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from friemon.core.typechart import ElementType

MIN_LEVEL = 1
MAX_LEVEL = 100
MIN_IV = 1
MAX_IV = 31


class Stat(str, Enum):
    """The six permanent stats of a character."""

    HP = "hp"
    ATK = "atk"
    DEF = "def"
    SP_ATK = "sp_atk"
    SP_DEF = "sp_def"
    SPEED = "speed"


class Personality(str, Enum):
    """Personality tags. Each one nudges two stats up or down by 10%."""

    ALOOF = "aloof"
    STOIC = "stoic"
    MERRY = "merry"
    RESOLUTE = "resolute"
    SKEPTICAL = "skeptical"
    BROODING = "brooding"
    BRAVE = "brave"
    INSIGHTFUL = "insightful"
    PLAYFUL = "playful"
    RASH = "rash"


# Personality -> (boosted_stat, lowered_stat)
PERSONALITY_MODIFIERS: dict[Personality, tuple[Stat, Stat]] = {
    Personality.ALOOF: (Stat.SP_ATK, Stat.ATK),
    Personality.STOIC: (Stat.DEF, Stat.SPEED),
    Personality.MERRY: (Stat.SP_DEF, Stat.ATK),
    Personality.RESOLUTE: (Stat.ATK, Stat.SP_ATK),
    Personality.SKEPTICAL: (Stat.SP_DEF, Stat.SP_ATK),
    Personality.BROODING: (Stat.SP_ATK, Stat.SPEED),
    Personality.BRAVE: (Stat.ATK, Stat.SPEED),
    Personality.INSIGHTFUL: (Stat.SP_ATK, Stat.DEF),
    Personality.PLAYFUL: (Stat.SPEED, Stat.DEF),
    Personality.RASH: (Stat.ATK, Stat.SP_DEF),
}


def get_personality_multiplier(personality: Personality, stat: Stat) -> float:
    """Return the personality multiplier for a given stat (1.0, 1.1, or 0.9)."""
    mods = PERSONALITY_MODIFIERS.get(personality)
    if mods is None:
        return 1.0
    boosted, lowered = mods
    if stat == boosted:
        return 1.1
    if stat == lowered:
        return 0.9
    return 1.0


def random_personality() -> Personality:
    """Pick a random personality."""
    return random.choice(list(Personality))


def random_ivs() -> dict[Stat, int]:
    """Roll a fresh set of individual values, one per stat."""
    return {stat: random.randint(MIN_IV, MAX_IV) for stat in Stat}


def calc_stat(base: int, iv: int, level: int, multiplier: float = 1.0) -> int:
    """Effective value of a non-HP stat."""
    return math.floor(((2 * base + iv + 5) * level / 100 + 5) * multiplier)


def calc_max_hp(base: int, iv: int, level: int) -> int:
    """Maximum HP. Scales with level and has no flat +5 term."""
    return math.floor((2 * base + iv + 5) * level / 100) + level + 10


# ---------------------------------------------------------------------------
# Base roster
# ---------------------------------------------------------------------------

class BaseCharacter(BaseModel):
    """Static species data for a character."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    types: tuple[ElementType, ...]
    base_stats: dict[Stat, int]
    default_moves: tuple[int, ...] = ()


def _base(
    id: int,
    name: str,
    types: tuple[ElementType, ...],
    hp: int,
    atk: int,
    defense: int,
    sp_atk: int,
    sp_def: int,
    speed: int,
    moves: tuple[int, ...],
) -> BaseCharacter:
    return BaseCharacter(
        id=id,
        name=name,
        types=types,
        base_stats={
            Stat.HP: hp,
            Stat.ATK: atk,
            Stat.DEF: defense,
            Stat.SP_ATK: sp_atk,
            Stat.SP_DEF: sp_def,
            Stat.SPEED: speed,
        },
        default_moves=moves,
    )


_T = ElementType

# fmt: off
ROSTER: dict[int, BaseCharacter] = {c.id: c for c in [
    _base(1, "Himmel", (_T.FLYING, _T.FAIRY), 70, 155, 80, 90, 70, 135, (1, 11, 5, 4)),
    _base(2, "Frieren", (_T.ICE, _T.ELECTRIC), 70, 90, 55, 155, 135, 95, (18, 16, 17, 30)),
    _base(3, "Eisen", (_T.STEEL, _T.FIGHTING), 110, 125, 130, 80, 95, 60, (9, 1, 7, 27)),
    _base(4, "Heiter", (_T.NORMAL, _T.POISON), 135, 95, 100, 125, 110, 35, (6, 22, 25, 37)),
    _base(5, "Fern", (_T.WATER, _T.ELECTRIC), 70, 80, 55, 135, 60, 130, (14, 16, 18, 26)),
    _base(6, "Stark", (_T.FIRE, _T.STEEL), 110, 125, 70, 80, 70, 75, (10, 9, 33, 5)),
    _base(7, "Sein", (_T.GRASS, _T.POISON), 130, 85, 90, 95, 90, 40, (34, 15, 24, 22)),
    _base(8, "Übel", (_T.DARK,), 50, 65, 50, 135, 65, 115, (20, 12, 36, 26)),
    _base(9, "Land", (_T.GROUND, _T.GHOST), 55, 50, 80, 110, 105, 90, (7, 20, 30, 27)),
    _base(10, "Denken", (_T.PSYCHIC,), 110, 85, 80, 120, 85, 30, (17, 31, 21, 25)),
    _base(11, "Flamme", (_T.FIRE, _T.FAIRY), 100, 100, 90, 150, 140, 90, (13, 19, 23, 29)),
    _base(12, "Serie", (_T.NORMAL,), 70, 100, 60, 170, 170, 100, (31, 17, 13, 18)),
]}
# fmt: on


def get_base_character(character_id: int) -> BaseCharacter | None:
    """Look up a roster entry by species id."""
    return ROSTER.get(character_id)


# ---------------------------------------------------------------------------
# Character snapshot
# ---------------------------------------------------------------------------

class Character(BaseModel):
    """An owned character as handed to the battle engine.

    This is a snapshot supplied by the storage layer. The engine never
    mutates it; battle damage lives in the combatant's runtime state.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: int | str = ""
    character_id: int  # Species id in the roster
    name: str
    nickname: str | None = None

    level: int = Field(default=50, ge=MIN_LEVEL, le=MAX_LEVEL)
    types: tuple[ElementType, ...]
    base_stats: dict[Stat, int]
    ivs: dict[Stat, int]
    personality: Personality = Personality.ALOOF
    moves: tuple[int, ...] = ()

    @field_validator("types")
    @classmethod
    def _one_or_two_types(cls, v: tuple[ElementType, ...]) -> tuple[ElementType, ...]:
        if not 1 <= len(v) <= 2:
            raise ValueError("a character has one or two types")
        return v

    @field_validator("base_stats", "ivs")
    @classmethod
    def _all_stats_present(cls, v: dict[Stat, int]) -> dict[Stat, int]:
        missing = [s.value for s in Stat if s not in v]
        if missing:
            raise ValueError(f"missing stats: {', '.join(missing)}")
        return v

    @field_validator("ivs")
    @classmethod
    def _iv_range(cls, v: dict[Stat, int]) -> dict[Stat, int]:
        for stat, iv in v.items():
            if not MIN_IV <= iv <= MAX_IV:
                raise ValueError(f"IV for {stat.value} must be in [{MIN_IV}, {MAX_IV}]")
        return v

    @property
    def display_name(self) -> str:
        return self.nickname or self.name

    @property
    def max_hp(self) -> int:
        return calc_max_hp(self.base_stats[Stat.HP], self.ivs[Stat.HP], self.level)

    def stat(self, stat: Stat) -> int:
        """Effective value of ``stat`` at the character's level."""
        if stat == Stat.HP:
            return self.max_hp
        return calc_stat(
            self.base_stats[stat],
            self.ivs[stat],
            self.level,
            get_personality_multiplier(self.personality, stat),
        )

    @classmethod
    def from_base(
        cls,
        character_id: int,
        level: int = 50,
        owner_id: int | str = "",
        ivs: dict[Stat, int] | None = None,
        personality: Personality | None = None,
        moves: tuple[int, ...] | list[int] | None = None,
        nickname: str | None = None,
    ) -> Character:
        """Build a snapshot from the roster, rolling anything not supplied."""
        base = get_base_character(character_id)
        if base is None:
            raise ValueError(f"unknown character id {character_id}")
        return cls(
            owner_id=owner_id,
            character_id=base.id,
            name=base.name,
            nickname=nickname,
            level=level,
            types=base.types,
            base_stats=dict(base.base_stats),
            ivs=ivs if ivs is not None else random_ivs(),
            personality=personality if personality is not None else random_personality(),
            moves=tuple(moves) if moves is not None else base.default_moves,
        )
