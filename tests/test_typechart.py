"""Tests for the elemental type chart."""

from friemon.core.typechart import (
    TYPE_CHART,
    ElementType,
    get_effectiveness_text,
    get_type_effectiveness,
)


class TestElementType:
    """Tests for the ElementType enum."""

    def test_all_18_types_present(self):
        assert len(ElementType) == 18

    def test_type_values_lowercase(self):
        for t in ElementType:
            assert t.value == t.value.lower()


class TestTypeChart:
    """Tests for the raw chart entries."""

    def test_chart_keys_are_known_types(self):
        known = {t.value for t in ElementType}
        for attack, row in TYPE_CHART.items():
            assert attack in known
            assert set(row) <= known

    def test_chart_only_holds_non_neutral_entries(self):
        for row in TYPE_CHART.values():
            for mult in row.values():
                assert mult in (0.0, 0.5, 2.0)

    def test_fire_beats_grass(self):
        assert get_type_effectiveness(ElementType.FIRE, ElementType.GRASS) == 2.0

    def test_water_resisted_by_grass(self):
        assert get_type_effectiveness(ElementType.WATER, ElementType.GRASS) == 0.5

    def test_ground_immune_to_electric(self):
        assert get_type_effectiveness(ElementType.ELECTRIC, ElementType.GROUND) == 0.0

    def test_ghost_immune_to_normal(self):
        assert get_type_effectiveness(ElementType.NORMAL, ElementType.GHOST) == 0.0

    def test_fairy_immune_to_dragon(self):
        assert get_type_effectiveness(ElementType.DRAGON, ElementType.FAIRY) == 0.0

    def test_unlisted_pair_is_neutral(self):
        assert get_type_effectiveness(ElementType.NORMAL, ElementType.WATER) == 1.0


class TestTypeEffectiveness:
    """Tests for dual-type stacking."""

    def test_double_weakness(self):
        assert get_type_effectiveness(ElementType.ICE, ElementType.GRASS, ElementType.FLYING) == 4.0

    def test_double_resistance(self):
        assert get_type_effectiveness(ElementType.FIRE, ElementType.WATER, ElementType.DRAGON) == 0.25

    def test_weakness_cancelled_by_resistance(self):
        # Ice is strong on Flying and weak on Water
        assert get_type_effectiveness(ElementType.ICE, ElementType.WATER, ElementType.FLYING) == 1.0

    def test_immunity_wins(self):
        assert get_type_effectiveness(ElementType.ELECTRIC, ElementType.WATER, ElementType.GROUND) == 0.0

    def test_repeated_type_counted_once(self):
        assert get_type_effectiveness(ElementType.FIRE, ElementType.GRASS, ElementType.GRASS) == 2.0

    def test_accepts_plain_strings(self):
        assert get_type_effectiveness("fire", "grass") == 2.0
        assert get_type_effectiveness("FIRE", "Grass") == 2.0


class TestEffectivenessText:
    def test_no_effect(self):
        assert get_effectiveness_text(0.0) == "It has no effect!"

    def test_super_effective(self):
        assert get_effectiveness_text(2.0) == "It's super effective!"
        assert get_effectiveness_text(4.0) == "It's super effective!"

    def test_not_very_effective(self):
        assert get_effectiveness_text(0.5) == "It's not very effective..."

    def test_neutral_is_silent(self):
        assert get_effectiveness_text(1.0) == ""
