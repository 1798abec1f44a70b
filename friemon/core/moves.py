"""Move model, effect primitives and the static move catalog."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from friemon.core.typechart import ElementType


class MoveCategory(str, Enum):
    """Move damage classification."""

    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"


class MoveTarget(str, Enum):
    """Who a move lands on."""

    SINGLE_FOE = "single_foe"
    ALL_FOES = "all_foes"
    USER = "user"
    SINGLE_ALLY = "single_ally"
    ALL_ALLIES = "all_allies"
    ANY = "any"


class StatusCondition(str, Enum):
    """Battle status conditions."""

    POISON = "poison"
    BURN = "burn"
    PARALYZE = "paralyze"
    SLEEP = "sleep"
    FREEZE = "freeze"
    CONFUSE = "confuse"


# Only one of these can be active at a time. Confusion stacks with any of them.
MAJOR_STATUSES: frozenset[StatusCondition] = frozenset({
    StatusCondition.POISON,
    StatusCondition.BURN,
    StatusCondition.PARALYZE,
    StatusCondition.SLEEP,
    StatusCondition.FREEZE,
})


class StageStat(str, Enum):
    """Stats that carry an in-battle stage modifier."""

    ATK = "atk"
    DEF = "def"
    SP_ATK = "sp_atk"
    SP_DEF = "sp_def"
    SPEED = "speed"
    ACCURACY = "accuracy"
    EVASION = "evasion"


# ---------------------------------------------------------------------------
# Effect primitives
# ---------------------------------------------------------------------------
# A move carries an ordered list of these for its primary effect and another
# for its chance-based secondary effect. They are applied in list order.
# ---------------------------------------------------------------------------

class _Effect(BaseModel):
    model_config = ConfigDict(frozen=True)


class InflictStatus(_Effect):
    """Give the target (or the user) a status condition."""

    kind: Literal["inflict_status"] = "inflict_status"
    status: StatusCondition
    chance: int = Field(default=100, ge=0, le=100)
    on_self: bool = False
    duration: int | None = None  # Fixed turn count; rolled when None
    replace: bool = False  # Clear an existing major status first


class ModifyStat(_Effect):
    """Raise or lower stat stages."""

    kind: Literal["modify_stat"] = "modify_stat"
    changes: dict[StageStat, int]
    chance: int = Field(default=100, ge=0, le=100)
    on_self: bool = False


class Recoil(_Effect):
    kind: Literal["recoil"] = "recoil"
    percent: int = Field(gt=0)  # Of damage dealt


class Drain(_Effect):
    kind: Literal["drain"] = "drain"
    percent: int = Field(gt=0)  # Of damage dealt


class FixedDamage(_Effect):
    kind: Literal["fixed_damage"] = "fixed_damage"
    amount: int = Field(gt=0)


class Flinch(_Effect):
    kind: Literal["flinch"] = "flinch"
    chance: int = Field(default=100, ge=0, le=100)


class Heal(_Effect):
    """Restore HP by a percentage of max HP, a fixed amount, or both."""

    kind: Literal["heal"] = "heal"
    percent: int = 0
    fixed: int = 0


class Protect(_Effect):
    kind: Literal["protect"] = "protect"
    turns: int = 1


class Recharge(_Effect):
    kind: Literal["recharge"] = "recharge"


class SelfDestruct(_Effect):
    kind: Literal["self_destruct"] = "self_destruct"


class Charge(_Effect):
    """Two-turn move: the first use only charges."""

    kind: Literal["charge"] = "charge"
    turns: int = 1


class Trap(_Effect):
    """Stop the target from switching out."""

    kind: Literal["trap"] = "trap"
    turns: int = 4


class Disable(_Effect):
    """Lock the target's last used move."""

    kind: Literal["disable"] = "disable"
    turns: int = 4


Effect = Annotated[
    Union[
        InflictStatus,
        ModifyStat,
        Recoil,
        Drain,
        FixedDamage,
        Flinch,
        Heal,
        Protect,
        Recharge,
        SelfDestruct,
        Charge,
        Trap,
        Disable,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Move model
# ---------------------------------------------------------------------------

class Move(BaseModel):
    """A move from the catalog. Immutable; PP usage lives on the combatant."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    type: ElementType
    category: MoveCategory = MoveCategory.PHYSICAL
    power: int = 0  # 0 for status moves
    accuracy: int | None = 100  # None means never misses
    pp: int = 20
    priority: int = 0
    crit_ratio: int = Field(default=1, ge=1, le=4)
    target: MoveTarget = MoveTarget.SINGLE_FOE
    affected_by_protect: bool = True
    description: str = ""

    effects: list[Effect] = Field(default_factory=list)
    secondary_effects: list[Effect] = Field(default_factory=list)
    secondary_chance: int = Field(default=100, ge=0, le=100)

    def find_effect(self, effect_type: type[_Effect]) -> _Effect | None:
        """Return the first primary effect of the given class, if any."""
        for effect in self.effects:
            if isinstance(effect, effect_type):
                return effect
        return None

    @property
    def fixed_damage(self) -> int | None:
        effect = self.find_effect(FixedDamage)
        return effect.amount if effect else None

    @property
    def charge_turns(self) -> int:
        effect = self.find_effect(Charge)
        return effect.turns if effect else 0

    @property
    def targets_user_side(self) -> bool:
        return self.target in (MoveTarget.USER, MoveTarget.SINGLE_ALLY, MoveTarget.ALL_ALLIES)


# Used when the chosen move has run out of PP.
STRUGGLE = Move(
    id=0,
    name="Struggle",
    type=ElementType.NORMAL,
    category=MoveCategory.PHYSICAL,
    power=50,
    accuracy=None,
    pp=1,
    description="An attack used only when no PP is left. Also hurts the user.",
    effects=[Recoil(percent=25)],
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

_P = MoveCategory.PHYSICAL
_S = MoveCategory.SPECIAL
_ST = MoveCategory.STATUS
_T = ElementType

_CATALOG: list[Move] = [
    Move(id=1, name="Sacred Sword", type=_T.FIGHTING, category=_P, power=90, pp=15,
         description="An attack that cuts the target with a holy blade."),
    Move(id=2, name="Tackle", type=_T.NORMAL, category=_P, power=40, pp=35,
         description="A physical attack in which the user charges and slams into the target."),
    Move(id=3, name="Scratch", type=_T.NORMAL, category=_P, power=40, pp=35,
         description="Hard, pointed, sharp claws rake the target to inflict damage."),
    Move(id=4, name="Quick Attack", type=_T.NORMAL, category=_P, power=40, pp=30, priority=1,
         description="The user lunges at the target at a speed that makes it almost invisible."),
    Move(id=5, name="Swords Dance", type=_T.NORMAL, category=_ST, accuracy=None, pp=20,
         target=MoveTarget.USER, affected_by_protect=False,
         description="A frenetic dance that sharply raises the user's Attack stat.",
         effects=[ModifyStat(changes={StageStat.ATK: 2}, on_self=True)]),
    Move(id=6, name="Body Slam", type=_T.NORMAL, category=_P, power=85, pp=15,
         description="The user drops onto the target with its full body weight. May paralyze.",
         secondary_effects=[InflictStatus(status=StatusCondition.PARALYZE)], secondary_chance=30),
    Move(id=7, name="Earthquake", type=_T.GROUND, category=_P, power=100, pp=10,
         target=MoveTarget.ALL_FOES,
         description="The user sets off an earthquake that strikes everyone around it."),
    Move(id=8, name="Rock Slide", type=_T.ROCK, category=_P, power=75, accuracy=90, pp=10,
         target=MoveTarget.ALL_FOES,
         description="Large boulders are hurled at the opposing side. May cause flinching.",
         secondary_effects=[Flinch()], secondary_chance=30),
    Move(id=9, name="Iron Head", type=_T.STEEL, category=_P, power=80, pp=15,
         description="The user slams the target with its steel-hard head. May cause flinching.",
         secondary_effects=[Flinch()], secondary_chance=30),
    Move(id=10, name="Flame Wheel", type=_T.FIRE, category=_P, power=60, pp=25,
         description="The user cloaks itself in fire and charges at the target. May burn.",
         secondary_effects=[InflictStatus(status=StatusCondition.BURN)], secondary_chance=10),
    Move(id=11, name="Aeroblast", type=_T.FLYING, category=_S, power=100, accuracy=95, pp=5,
         crit_ratio=2,
         description="A vortex of air is shot at the target. Critical hits land more easily."),
    Move(id=12, name="Air Cutter", type=_T.FLYING, category=_S, power=60, accuracy=95, pp=25,
         crit_ratio=2, target=MoveTarget.ALL_FOES,
         description="The user attacks with razor-like wind. Critical hits land more easily."),
    Move(id=13, name="Flamethrower", type=_T.FIRE, category=_S, power=90, pp=15,
         description="The target is scorched with an intense blast of fire. May burn.",
         secondary_effects=[InflictStatus(status=StatusCondition.BURN)], secondary_chance=10),
    Move(id=14, name="Hydro Pump", type=_T.WATER, category=_S, power=110, accuracy=80, pp=5,
         description="The target is blasted by a huge volume of water launched under great pressure."),
    Move(id=15, name="Solar Beam", type=_T.GRASS, category=_S, power=120, pp=10,
         description="A two-turn attack. The user gathers light, then blasts a beam on the next turn.",
         effects=[Charge()]),
    Move(id=16, name="Thunderbolt", type=_T.ELECTRIC, category=_S, power=90, pp=15,
         description="A strong electric blast crashes down on the target. May paralyze.",
         secondary_effects=[InflictStatus(status=StatusCondition.PARALYZE)], secondary_chance=10),
    Move(id=17, name="Psychic", type=_T.PSYCHIC, category=_S, power=90, pp=10,
         description="The target is hit by a strong telekinetic force. May lower Sp. Def.",
         secondary_effects=[ModifyStat(changes={StageStat.SP_DEF: -1})], secondary_chance=10),
    Move(id=18, name="Ice Beam", type=_T.ICE, category=_S, power=90, pp=10,
         description="The target is struck with an icy-cold beam of energy. May freeze.",
         secondary_effects=[InflictStatus(status=StatusCondition.FREEZE)], secondary_chance=10),
    Move(id=19, name="Dragon Pulse", type=_T.DRAGON, category=_S, power=85, pp=10,
         description="The target is attacked with a shock wave generated by the user's gaping mouth."),
    Move(id=20, name="Shadow Ball", type=_T.GHOST, category=_S, power=80, pp=15,
         description="The user hurls a shadowy blob at the target. May lower Sp. Def.",
         secondary_effects=[ModifyStat(changes={StageStat.SP_DEF: -1})], secondary_chance=20),
    Move(id=21, name="Thunder Wave", type=_T.ELECTRIC, category=_ST, accuracy=90, pp=20,
         description="A weak jolt of electricity that paralyzes the target.",
         effects=[InflictStatus(status=StatusCondition.PARALYZE)]),
    Move(id=22, name="Toxic", type=_T.POISON, category=_ST, accuracy=90, pp=10,
         description="A move that leaves the target poisoned.",
         effects=[InflictStatus(status=StatusCondition.POISON)]),
    Move(id=23, name="Will-O-Wisp", type=_T.FIRE, category=_ST, accuracy=85, pp=15,
         description="The user shoots a sinister, bluish-white flame at the target to inflict a burn.",
         effects=[InflictStatus(status=StatusCondition.BURN)]),
    Move(id=24, name="Sleep Powder", type=_T.GRASS, category=_ST, accuracy=75, pp=15,
         description="The user scatters a big cloud of sleep-inducing dust around the target.",
         effects=[InflictStatus(status=StatusCondition.SLEEP)]),
    Move(id=25, name="Recover", type=_T.NORMAL, category=_ST, accuracy=None, pp=5,
         target=MoveTarget.USER, affected_by_protect=False,
         description="The user restores its own HP by half of its max HP.",
         effects=[Heal(percent=50)]),
    Move(id=26, name="Double Team", type=_T.NORMAL, category=_ST, accuracy=None, pp=15,
         target=MoveTarget.USER, affected_by_protect=False,
         description="The user makes illusory copies of itself to raise its evasiveness.",
         effects=[ModifyStat(changes={StageStat.EVASION: 1}, on_self=True)]),
    Move(id=27, name="Protect", type=_T.NORMAL, category=_ST, accuracy=None, pp=10, priority=4,
         target=MoveTarget.USER, affected_by_protect=False,
         description="Enables the user to evade all attacks for the rest of the turn.",
         effects=[Protect()]),
    Move(id=28, name="Dragon Rage", type=_T.DRAGON, category=_S, pp=10,
         description="This attack hits the target with a shock wave that always inflicts 40 HP damage.",
         effects=[FixedDamage(amount=40)]),
    Move(id=29, name="Rest", type=_T.PSYCHIC, category=_ST, accuracy=None, pp=5,
         target=MoveTarget.USER, affected_by_protect=False,
         description="The user sleeps for two turns, fully restoring HP and curing its status.",
         effects=[
             Heal(percent=100),
             InflictStatus(status=StatusCondition.SLEEP, on_self=True, duration=2, replace=True),
         ]),
    Move(id=30, name="Confuse Ray", type=_T.GHOST, category=_ST, pp=10,
         description="The target is exposed to a sinister ray that triggers confusion.",
         effects=[InflictStatus(status=StatusCondition.CONFUSE)]),
    Move(id=31, name="Hyper Beam", type=_T.NORMAL, category=_S, power=150, accuracy=90, pp=5,
         description="The target is attacked with a powerful beam. The user can't move on the next turn.",
         effects=[Recharge()]),
    Move(id=32, name="Explosion", type=_T.NORMAL, category=_P, power=250, pp=5,
         description="The user explodes to inflict damage on the target. The user faints.",
         effects=[SelfDestruct()]),
    Move(id=33, name="Double-Edge", type=_T.NORMAL, category=_P, power=120, pp=15,
         description="A reckless, life-risking tackle that also hurts the user.",
         effects=[Recoil(percent=33)]),
    Move(id=34, name="Giga Drain", type=_T.GRASS, category=_S, power=75, pp=10,
         description="A nutrient-draining attack. Half the damage dealt is restored to the user.",
         effects=[Drain(percent=50)]),
    Move(id=35, name="Wrap", type=_T.NORMAL, category=_P, power=15, accuracy=90, pp=20,
         description="The target is wrapped and cannot switch out for four turns.",
         effects=[Trap(turns=4)]),
    Move(id=36, name="Disable", type=_T.NORMAL, category=_ST, pp=20,
         description="The target's last used move is disabled for four turns.",
         effects=[Disable(turns=4)]),
    Move(id=37, name="Life Dew", type=_T.WATER, category=_ST, accuracy=None, pp=10,
         target=MoveTarget.ALL_ALLIES, affected_by_protect=False,
         description="The user scatters mysterious water that restores HP to itself and its team.",
         effects=[Heal(percent=25)]),
]

MOVES: dict[int, Move] = {m.id: m for m in _CATALOG}


def get_move(move_id: int) -> Move | None:
    """Look up a move by id."""
    return MOVES.get(move_id)


def get_moves_by_type(move_type: ElementType) -> list[Move]:
    return [m for m in MOVES.values() if m.type == move_type]


def get_moves_by_category(category: MoveCategory) -> list[Move]:
    return [m for m in MOVES.values() if m.category == category]
