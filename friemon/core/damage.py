"""Accuracy, critical hit and damage resolution for a single move use."""

from __future__ import annotations

import math
import random
from typing import Any

from pydantic import BaseModel

from friemon.core.combatant import Combatant
from friemon.core.moves import Move, MoveCategory, StageStat, StatusCondition
from friemon.core.settings import GameSettings
from friemon.core.typechart import get_effectiveness_text, get_type_effectiveness

# Crit ratio -> chance
CRIT_RATES: dict[int, float] = {
    1: 1 / 24,
    2: 1 / 8,
    3: 1 / 2,
    4: 1.0,
}

STAB_MULTIPLIER = 1.5
CRIT_MULTIPLIER = 1.5
CONFUSION_POWER = 40


class DamageResult(BaseModel):
    """Outcome of one move use against one target."""

    damage: int = 0
    hit: bool = True
    critical: bool = False
    effectiveness: float = 1.0
    effectiveness_text: str = ""

    # Only filled in when the matching narration setting is on
    accuracy_roll: int | None = None
    accuracy_threshold: int | None = None
    details: str = ""


def round_damage(value: float) -> int:
    """Round to the nearest integer; an exact .5 rounds down."""
    return math.ceil(value - 0.5)


def base_damage(level: int, power: int, attack: float, defense: float) -> float:
    return ((2 * level / 5 + 2) * power * attack / defense) / 50 + 2


def check_accuracy(
    attacker: Combatant,
    defender: Combatant,
    move: Move,
    settings: GameSettings,
    rng: Any = None,
) -> tuple[bool, int | None, int | None]:
    """Roll to hit. Returns (hit, roll, threshold); never-miss moves skip the roll."""
    if move.accuracy is None:
        return True, None, None
    rng = rng or random

    accuracy = float(move.accuracy)
    if settings.stat_stages_enabled:
        accuracy = (
            accuracy
            * attacker.stats.stage_multiplier(StageStat.ACCURACY)
            / defender.stats.stage_multiplier(StageStat.EVASION)
        )
    threshold = int(min(accuracy, 100))

    roll = rng.randint(1, 100)
    return roll <= threshold, roll, threshold


def check_critical_hit(move: Move, rng: Any = None) -> bool:
    rng = rng or random
    rate = CRIT_RATES.get(move.crit_ratio, CRIT_RATES[1])
    return rng.random() < rate


def _attack_defense_stats(move: Move) -> tuple[StageStat, StageStat]:
    if move.category == MoveCategory.PHYSICAL:
        return StageStat.ATK, StageStat.DEF
    return StageStat.SP_ATK, StageStat.SP_DEF


def calculate_damage(
    attacker: Combatant,
    defender: Combatant,
    move: Move,
    settings: GameSettings,
    rng: Any = None,
    power: int | None = None,
) -> DamageResult:
    """Resolve one use of ``move`` by ``attacker`` against ``defender``.

    ``power`` overrides the move's base power (spread moves hit softer).
    ``rng`` needs ``random()`` and ``randint()``; defaults to the
    ``random`` module.

    Formula:
        base = ((2 * level / 5 + 2) * power * A / D) / 50 + 2
        damage = base * STAB * type * crit * random(0.85..1.00)
    """
    rng = rng or random
    result = DamageResult()

    hit, roll, threshold = check_accuracy(attacker, defender, move, settings, rng)
    if settings.show_accuracy_rolls:
        result.accuracy_roll = roll
        result.accuracy_threshold = threshold
    if not hit:
        result.hit = False
        return result

    if move.category == MoveCategory.STATUS:
        return result

    fixed = move.fixed_damage
    if fixed is not None:
        result.damage = fixed
        return result

    move_power = move.power if power is None else power
    if move_power <= 0:
        return result

    atk_stat, def_stat = _attack_defense_stats(move)
    raw_attack = float(attacker.raw_stat(atk_stat))
    raw_defense = float(defender.raw_stat(def_stat))
    atk_stage = attacker.stats.stage(atk_stat)
    def_stage = defender.stats.stage(def_stat)

    if settings.critical_hits_enabled:
        result.critical = check_critical_hit(move, rng)

    attack = raw_attack
    defense = raw_defense
    if settings.stat_stages_enabled:
        # A critical hit ignores the attacker's drops and the defender's boosts
        if not (result.critical and atk_stage < 0):
            attack *= attacker.stats.stage_multiplier(atk_stat)
        if not (result.critical and def_stage > 0):
            defense *= defender.stats.stage_multiplier(def_stat)

    if (
        move.category == MoveCategory.PHYSICAL
        and settings.status_effects_enabled
        and attacker.stats.has_status(StatusCondition.BURN)
    ):
        attack *= 0.5

    base = base_damage(attacker.level, move_power, attack, max(1.0, defense))

    stab = STAB_MULTIPLIER if move.type in attacker.types else 1.0

    effectiveness = 1.0
    if settings.type_effectiveness_enabled:
        second = defender.types[1] if len(defender.types) > 1 else None
        effectiveness = get_type_effectiveness(move.type, defender.types[0], second)
        result.effectiveness = effectiveness
        result.effectiveness_text = get_effectiveness_text(effectiveness)

    crit_mult = CRIT_MULTIPLIER if result.critical else 1.0
    random_factor = rng.randint(85, 100) / 100

    final = base * stab * effectiveness * crit_mult * random_factor

    if effectiveness == 0:
        result.damage = 0
    else:
        result.damage = max(1, round_damage(final))

    if settings.show_damage_calculation:
        result.details = (
            f"Level: {attacker.level}, Power: {move_power}, Atk: {attack:.1f}, "
            f"Def: {defense:.1f}, STAB: {stab:.1f}x, Type: {effectiveness:.2f}x, "
            f"Crit: {crit_mult:.1f}x, Random: {random_factor * 100:.0f}%, Final: {final:.1f}"
        )

    return result


def confusion_damage(combatant: Combatant) -> int:
    """Damage taken when hitting itself in confusion.

    A typeless 40-power physical hit using the combatant's own unstaged
    Attack and Defense.
    """
    attack = combatant.raw_stat(StageStat.ATK)
    defense = max(1, combatant.raw_stat(StageStat.DEF))
    return max(1, math.floor(base_damage(combatant.level, CONFUSION_POWER, attack, defense)))
