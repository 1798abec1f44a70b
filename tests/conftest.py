"""Shared fixtures for Friemon tests."""

from datetime import datetime, timedelta, timezone

import pytest

from friemon.core.characters import Character, Personality, Stat
from friemon.core.typechart import ElementType


class ScriptedRandom:
    """Deterministic stand-in for the ``random`` module.

    ``randint`` pops scripted values first. Once they run out it returns
    the low bound for 1-based rolls (every accuracy check and chance roll
    succeeds, durations are as short as possible) and the high bound
    otherwise (the damage roll is always 100%). ``random`` returns a fixed
    value, by default high enough that no crit, paralysis skip, confusion
    self-hit or thaw happens.
    """

    def __init__(self, random_value: float = 0.99, randints: list[int] | None = None):
        self.random_value = random_value
        self.randints = list(randints or [])

    def random(self) -> float:
        return self.random_value

    def randint(self, a: int, b: int) -> int:
        if self.randints:
            return self.randints.pop(0)
        return a if a == 1 else b


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_character(
    name: str = "Tester",
    character_id: int = 100,
    types: tuple[ElementType, ...] = (ElementType.FIGHTING,),
    hp: int = 100,
    atk: int = 85,
    defense: int = 65,
    sp_atk: int = 85,
    sp_def: int = 65,
    speed: int = 85,
    level: int = 50,
    moves: tuple[int, ...] = (2,),
    personality: Personality = Personality.SKEPTICAL,
    iv: int = 15,
) -> Character:
    """Build a character with flat IVs and a personality neutral to Atk, Def and Speed."""
    return Character(
        owner_id="tester",
        character_id=character_id,
        name=name,
        level=level,
        types=types,
        base_stats={
            Stat.HP: hp,
            Stat.ATK: atk,
            Stat.DEF: defense,
            Stat.SP_ATK: sp_atk,
            Stat.SP_DEF: sp_def,
            Stat.SPEED: speed,
        },
        ivs={s: iv for s in Stat},
        personality=personality,
        moves=moves,
    )


@pytest.fixture
def rng():
    """Always hits, never crits, max damage roll."""
    return ScriptedRandom()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fighter():
    """Speed 100, Atk 100, Def 80, 170 HP at level 50."""
    return make_character(name="Stark", character_id=101)


@pytest.fixture
def slow_fighter():
    """Speed 90, otherwise identical to ``fighter``."""
    return make_character(name="Eisen", character_id=102, speed=75)
