"""Elemental types and the type effectiveness chart."""

from enum import Enum


class ElementType(str, Enum):
    """All 18 elemental types."""

    NORMAL = "normal"
    FIRE = "fire"
    WATER = "water"
    ELECTRIC = "electric"
    GRASS = "grass"
    ICE = "ice"
    FIGHTING = "fighting"
    POISON = "poison"
    GROUND = "ground"
    FLYING = "flying"
    PSYCHIC = "psychic"
    BUG = "bug"
    ROCK = "rock"
    GHOST = "ghost"
    DRAGON = "dragon"
    DARK = "dark"
    STEEL = "steel"
    FAIRY = "fairy"


# ---------------------------------------------------------------------------
# Type effectiveness chart
# ---------------------------------------------------------------------------
# TYPE_CHART[attacking_type][defending_type] = multiplier. Only non-neutral
# pairs are stored; a missing entry means 1.0.
# ---------------------------------------------------------------------------

TYPE_CHART: dict[str, dict[str, float]] = {t.value: {} for t in ElementType}

# fmt: off
_SUPER_EFFECTIVE: list[tuple[str, str]] = [
    ("fire", "grass"), ("fire", "ice"), ("fire", "bug"), ("fire", "steel"),
    ("water", "fire"), ("water", "ground"), ("water", "rock"),
    ("electric", "water"), ("electric", "flying"),
    ("grass", "water"), ("grass", "ground"), ("grass", "rock"),
    ("ice", "grass"), ("ice", "ground"), ("ice", "flying"), ("ice", "dragon"),
    ("fighting", "normal"), ("fighting", "ice"), ("fighting", "rock"),
    ("fighting", "dark"), ("fighting", "steel"),
    ("poison", "grass"), ("poison", "fairy"),
    ("ground", "fire"), ("ground", "electric"), ("ground", "poison"),
    ("ground", "rock"), ("ground", "steel"),
    ("flying", "grass"), ("flying", "fighting"), ("flying", "bug"),
    ("psychic", "fighting"), ("psychic", "poison"),
    ("bug", "grass"), ("bug", "psychic"), ("bug", "dark"),
    ("rock", "fire"), ("rock", "ice"), ("rock", "flying"), ("rock", "bug"),
    ("ghost", "psychic"), ("ghost", "ghost"),
    ("dragon", "dragon"),
    ("dark", "psychic"), ("dark", "ghost"),
    ("steel", "ice"), ("steel", "rock"), ("steel", "fairy"),
    ("fairy", "fighting"), ("fairy", "dragon"), ("fairy", "dark"),
]

_NOT_VERY_EFFECTIVE: list[tuple[str, str]] = [
    ("normal", "rock"), ("normal", "steel"),
    ("fire", "fire"), ("fire", "water"), ("fire", "rock"), ("fire", "dragon"),
    ("water", "water"), ("water", "grass"), ("water", "dragon"),
    ("electric", "electric"), ("electric", "grass"), ("electric", "dragon"),
    ("grass", "fire"), ("grass", "grass"), ("grass", "poison"),
    ("grass", "flying"), ("grass", "bug"), ("grass", "dragon"), ("grass", "steel"),
    ("ice", "fire"), ("ice", "water"), ("ice", "ice"), ("ice", "steel"),
    ("fighting", "poison"), ("fighting", "flying"), ("fighting", "psychic"),
    ("fighting", "bug"), ("fighting", "fairy"),
    ("poison", "poison"), ("poison", "ground"), ("poison", "rock"), ("poison", "ghost"),
    ("ground", "grass"), ("ground", "bug"),
    ("flying", "electric"), ("flying", "rock"), ("flying", "steel"),
    ("psychic", "psychic"), ("psychic", "steel"),
    ("bug", "fire"), ("bug", "fighting"), ("bug", "poison"),
    ("bug", "flying"), ("bug", "ghost"), ("bug", "steel"), ("bug", "fairy"),
    ("rock", "fighting"), ("rock", "ground"), ("rock", "steel"),
    ("ghost", "dark"),
    ("dragon", "steel"),
    ("dark", "fighting"), ("dark", "dark"), ("dark", "fairy"),
    ("steel", "fire"), ("steel", "water"), ("steel", "electric"), ("steel", "steel"),
    ("fairy", "fire"), ("fairy", "poison"), ("fairy", "steel"),
]

_IMMUNE: list[tuple[str, str]] = [
    ("normal", "ghost"),
    ("electric", "ground"),
    ("fighting", "ghost"),
    ("poison", "steel"),
    ("ground", "flying"),
    ("psychic", "dark"),
    ("ghost", "normal"),
    ("dragon", "fairy"),
]
# fmt: on

for _atk, _dfn in _SUPER_EFFECTIVE:
    TYPE_CHART[_atk][_dfn] = 2.0
for _atk, _dfn in _NOT_VERY_EFFECTIVE:
    TYPE_CHART[_atk][_dfn] = 0.5
for _atk, _dfn in _IMMUNE:
    TYPE_CHART[_atk][_dfn] = 0.0


def _type_key(t: ElementType | str) -> str:
    if isinstance(t, ElementType):
        return t.value
    return str(t).lower()


def get_type_effectiveness(
    attack_type: ElementType | str,
    defender_type1: ElementType | str,
    defender_type2: ElementType | str | None = None,
) -> float:
    """Calculate the combined type effectiveness multiplier.

    The second defending type is skipped when absent or equal to the first.
    Results can be 0x, 0.25x, 0.5x, 1x, 2x, or 4x.
    """
    row = TYPE_CHART.get(_type_key(attack_type), {})
    first = _type_key(defender_type1)
    mult = row.get(first, 1.0)
    if defender_type2 is not None:
        second = _type_key(defender_type2)
        if second != first:
            mult *= row.get(second, 1.0)
    return mult


def get_effectiveness_text(multiplier: float) -> str:
    """Narration line for an effectiveness multiplier, empty when neutral."""
    if multiplier == 0:
        return "It has no effect!"
    if multiplier > 1.0:
        return "It's super effective!"
    if multiplier < 1.0:
        return "It's not very effective..."
    return ""
