"""Parse the effect fields of a dataset rank entry into an EffectBundle.

A rank entry mixes descriptive keys (description, level, count) with effect
keys. Effect keys must belong to the closed EffectBundle field set; an
unknown key is a dataset error, not something to ignore silently.

stat_increase is the one structured effect:
  {"attribute": "perception", "increase": 1}
"""

from fo4_planner.data.errors import DataValidationError
from fo4_planner.models.constants import ATTRIBUTE_BY_SLUG
from fo4_planner.models.effect import (
    INT_EFFECT_NAMES,
    NUMERIC_EFFECT_NAMES,
    EffectBundle,
    StatIncrease,
)


def parse_stat_increase(raw: object, context: str) -> StatIncrease:
    """Parse a stat_increase mapping."""
    if not isinstance(raw, dict):
        raise DataValidationError(f"{context}.stat_increase must be an object.")
    attribute = ATTRIBUTE_BY_SLUG.get(str(raw.get("attribute", "")).lower())
    if attribute is None:
        raise DataValidationError(
            f"{context}.stat_increase.attribute must be a S.P.E.C.I.A.L. name, "
            f"got {raw.get('attribute')!r}"
        )
    increase = raw.get("increase", 1)
    if isinstance(increase, bool) or not isinstance(increase, int) or increase < 1:
        raise DataValidationError(
            f"{context}.stat_increase.increase must be a positive integer."
        )
    return StatIncrease(attribute=attribute, increase=increase)


def _parse_number(name: str, raw: object, context: str) -> int | float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise DataValidationError(f"{context}.{name} must be a number, got {raw!r}")
    if name in INT_EFFECT_NAMES:
        if isinstance(raw, float) and not raw.is_integer():
            raise DataValidationError(f"{context}.{name} must be an integer.")
        return int(raw)
    return float(raw)


def parse_effects(raw: dict[str, object], context: str, reserved: frozenset[str]) -> EffectBundle:
    """Build an EffectBundle from every non-reserved key of *raw*."""
    values: dict[str, object] = {}
    for key, value in raw.items():
        if key in reserved:
            continue
        if key == "stat_increase":
            values[key] = parse_stat_increase(value, context)
        elif key in NUMERIC_EFFECT_NAMES:
            values[key] = _parse_number(key, value, context)
        else:
            raise DataValidationError(f"{context}: unknown effect field {key!r}")
    return EffectBundle(**values)
