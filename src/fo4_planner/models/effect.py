"""Perk effect data models and fold operations.

Every perk rank carries an EffectBundle: a closed set of optional numeric
fields. An unset field means "this rank says nothing about it", which is
different from the field's neutral value once ranks are folded together
(see perk.VaryingRanks.values).

Folding a field across all held perks uses one of three operations:
  - SUM: additive bonuses (health, AP, carry weight, ...), neutral 0
  - PRODUCT: multipliers (sprint drain), neutral 1.0
  - OVERRIDE: the last value in canonical perk order wins (mod ranks)
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Iterable

from fo4_planner.models.constants import Attribute


class FoldKind(Enum):
    SUM = "sum"
    PRODUCT = "product"
    OVERRIDE = "override"


@dataclass(frozen=True, slots=True)
class EffectField:
    """How one EffectBundle field combines across ranks and perks."""
    name: str
    fold: FoldKind
    neutral: float | int


@dataclass(frozen=True, slots=True)
class StatIncrease:
    """A flat attribute increase granted by a perk (e.g. a bobblehead)."""
    attribute: Attribute
    increase: int = 1


@dataclass(frozen=True, slots=True)
class EffectBundle:
    """Numeric effects of one perk rank. None means "not set by this rank"."""
    hp_add: float | None = None
    ap_add: float | None = None
    carry_weight_add: int | None = None
    melee_damage_add: float | None = None
    buy_price_sub: float | None = None
    damage_resist_add: float | None = None
    energy_resist_add: float | None = None
    rad_resist_add: float | None = None
    sprint_drain_mul: float | None = None
    armor_mod_rank: int | None = None
    melee_mod_rank: int | None = None
    weapon_mod_rank: int | None = None
    science_mod_rank: int | None = None
    stat_increase: StatIncrease | None = None

    def get(self, name: str):
        return getattr(self, name)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


NO_EFFECTS = EffectBundle()


EFFECT_FIELDS: dict[str, EffectField] = {
    f.name: f
    for f in (
        EffectField("hp_add", FoldKind.SUM, 0.0),
        EffectField("ap_add", FoldKind.SUM, 0.0),
        EffectField("carry_weight_add", FoldKind.SUM, 0),
        EffectField("melee_damage_add", FoldKind.SUM, 0.0),
        EffectField("buy_price_sub", FoldKind.SUM, 0.0),
        EffectField("damage_resist_add", FoldKind.SUM, 0.0),
        EffectField("energy_resist_add", FoldKind.SUM, 0.0),
        EffectField("rad_resist_add", FoldKind.SUM, 0.0),
        EffectField("sprint_drain_mul", FoldKind.PRODUCT, 1.0),
        EffectField("armor_mod_rank", FoldKind.OVERRIDE, 0),
        EffectField("melee_mod_rank", FoldKind.OVERRIDE, 0),
        EffectField("weapon_mod_rank", FoldKind.OVERRIDE, 0),
        EffectField("science_mod_rank", FoldKind.OVERRIDE, 0),
    )
}

# stat_increase is structured, not numeric, and has its own fold
# (DerivedStats.stat_increase_for).
NUMERIC_EFFECT_NAMES = frozenset(EFFECT_FIELDS)
INT_EFFECT_NAMES = frozenset(
    {"carry_weight_add", "armor_mod_rank", "melee_mod_rank",
     "weapon_mod_rank", "science_mod_rank"}
)


def fold_sum(values: Iterable[float | int], neutral: float | int = 0):
    total = neutral
    for value in values:
        total = total + value
    return total


def fold_product(values: Iterable[float], neutral: float = 1.0) -> float:
    total = neutral
    for value in values:
        total = total * value
    return total


def fold_override(values: Iterable[float | int], neutral: float | int = 0):
    result = neutral
    for value in values:
        result = value
    return result


_FOLDS = {
    FoldKind.SUM: fold_sum,
    FoldKind.PRODUCT: fold_product,
    FoldKind.OVERRIDE: fold_override,
}


def fold_field(name: str, values: Iterable[float | int]):
    """Fold an ordered stream of values for *name* with its declared operation."""
    try:
        field = EFFECT_FIELDS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown effect field: {name}") from exc
    return _FOLDS[field.fold](values, field.neutral)
