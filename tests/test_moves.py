"""Tests for the move model, effect primitives and the catalog."""

import pytest
from pydantic import ValidationError

from friemon.core.moves import (
    MAJOR_STATUSES,
    MOVES,
    STRUGGLE,
    Charge,
    FixedDamage,
    Flinch,
    InflictStatus,
    ModifyStat,
    Move,
    MoveCategory,
    MoveTarget,
    Recoil,
    StageStat,
    StatusCondition,
    get_move,
    get_moves_by_category,
    get_moves_by_type,
)
from friemon.core.typechart import ElementType


class TestEnums:
    def test_three_categories(self):
        assert {c.value for c in MoveCategory} == {"physical", "special", "status"}

    def test_major_statuses(self):
        assert StatusCondition.CONFUSE not in MAJOR_STATUSES
        assert MAJOR_STATUSES == {
            StatusCondition.POISON,
            StatusCondition.BURN,
            StatusCondition.PARALYZE,
            StatusCondition.SLEEP,
            StatusCondition.FREEZE,
        }

    def test_seven_stage_stats(self):
        assert len(StageStat) == 7


class TestCatalog:
    """Tests for the built-in move catalog."""

    def test_ids_are_contiguous(self):
        assert set(MOVES) == set(range(1, 38))

    def test_ids_match_keys(self):
        for move_id, move in MOVES.items():
            assert move.id == move_id

    def test_get_move(self):
        move = get_move(16)
        assert move is not None
        assert move.name == "Thunderbolt"
        assert move.type == ElementType.ELECTRIC
        assert move.category == MoveCategory.SPECIAL
        assert move.power == 90

    def test_get_unknown_move(self):
        assert get_move(999) is None
        assert get_move(0) is None

    def test_status_moves_have_no_power(self):
        for move in get_moves_by_category(MoveCategory.STATUS):
            assert move.power == 0

    def test_damaging_moves_have_power_or_fixed_damage(self):
        for move in MOVES.values():
            if move.category != MoveCategory.STATUS:
                assert move.power > 0 or move.fixed_damage is not None

    def test_get_moves_by_type(self):
        fire = get_moves_by_type(ElementType.FIRE)
        assert {m.name for m in fire} == {"Flame Wheel", "Flamethrower", "Will-O-Wisp"}

    def test_priorities(self):
        assert get_move(4).priority == 1  # Quick Attack
        assert get_move(27).priority == 4  # Protect
        assert get_move(2).priority == 0

    def test_spread_moves(self):
        spread = {m.name for m in MOVES.values() if m.target == MoveTarget.ALL_FOES}
        assert spread == {"Earthquake", "Rock Slide", "Air Cutter"}

    def test_self_moves_never_miss(self):
        for move in MOVES.values():
            if move.target == MoveTarget.USER:
                assert move.accuracy is None
                assert move.affected_by_protect is False

    def test_secondary_chances(self):
        body_slam = get_move(6)
        assert body_slam.secondary_chance == 30
        assert isinstance(body_slam.secondary_effects[0], InflictStatus)
        assert body_slam.secondary_effects[0].status == StatusCondition.PARALYZE

        rock_slide = get_move(8)
        assert rock_slide.secondary_chance == 30
        assert isinstance(rock_slide.secondary_effects[0], Flinch)

    def test_fixed_damage_move(self):
        assert get_move(28).fixed_damage == 40
        assert get_move(2).fixed_damage is None

    def test_charge_move(self):
        assert get_move(15).charge_turns == 1
        assert get_move(2).charge_turns == 0

    def test_rest(self):
        rest = get_move(29)
        sleep = rest.find_effect(InflictStatus)
        assert sleep.status == StatusCondition.SLEEP
        assert sleep.on_self and sleep.replace
        assert sleep.duration == 2


class TestStruggle:
    def test_not_in_catalog(self):
        assert STRUGGLE.id not in MOVES

    def test_never_misses_and_recoils(self):
        assert STRUGGLE.accuracy is None
        assert STRUGGLE.find_effect(Recoil).percent == 25


class TestMoveModel:
    """Tests for Move validation and effect parsing."""

    def test_effects_parse_from_dicts(self):
        move = Move.model_validate({
            "id": 500,
            "name": "Test Beam",
            "type": "psychic",
            "category": "special",
            "power": 60,
            "effects": [
                {"kind": "modify_stat", "changes": {"sp_atk": -1}, "on_self": True},
                {"kind": "charge", "turns": 2},
            ],
            "secondary_effects": [{"kind": "inflict_status", "status": "confuse"}],
            "secondary_chance": 20,
        })
        assert isinstance(move.effects[0], ModifyStat)
        assert move.effects[0].changes == {StageStat.SP_ATK: -1}
        assert isinstance(move.effects[1], Charge)
        assert move.charge_turns == 2
        assert move.secondary_effects[0].status == StatusCondition.CONFUSE

    def test_unknown_effect_kind_rejected(self):
        with pytest.raises(ValidationError):
            Move.model_validate({
                "id": 501, "name": "Bad", "type": "normal",
                "effects": [{"kind": "teleport"}],
            })

    def test_crit_ratio_bounds(self):
        with pytest.raises(ValidationError):
            Move(id=502, name="Bad", type=ElementType.NORMAL, crit_ratio=5)

    def test_effect_chance_bounds(self):
        with pytest.raises(ValidationError):
            InflictStatus(status=StatusCondition.BURN, chance=101)

    def test_fixed_damage_must_be_positive(self):
        with pytest.raises(ValidationError):
            FixedDamage(amount=0)

    def test_targets_user_side(self):
        assert get_move(25).targets_user_side is True  # Recover
        assert get_move(37).targets_user_side is True  # Life Dew
        assert get_move(2).targets_user_side is False

    def test_is_frozen(self):
        with pytest.raises(ValidationError):
            get_move(2).power = 200
