"""Formula constants with typed accessors.

Every accessor takes a default so formulas keep working if a key is
missing; vanilla Fallout 4 values are available via GameSettings.defaults().
"""

from dataclasses import dataclass, field


# Vanilla Fallout 4 constants used by the derived stat formulas.
_VANILLA_DEFAULTS: dict[str, int | float] = {
    # Health: base + END * mult, plus (level_base + END * level_mult) per level
    "fHealthBase": 80.0,
    "fHealthEnduranceMult": 5.0,
    "fHealthLevelBase": 2.5,
    "fHealthLevelEnduranceMult": 0.5,
    # Action points: base + AGI * mult
    "fActionPointsBase": 60.0,
    "fActionPointsAgilityMult": 10.0,
    # Carry weight: base (Survival has its own) + STR * mult
    "iCarryWeightBase": 200,
    "iCarryWeightBaseSurvival": 75,
    "iCarryWeightStrengthMult": 10,
    # Barter: buy = max(min, (max - CHA * mult) / (1 + perk reductions))
    "fBarterBuyMax": 3.5,
    "fBarterBuyMin": 1.2,
    "fBarterCharismaMult": 0.15,
    "fBarterSellMax": 0.8,
    # Experience: 1 + INT * mult
    "fExperienceIntelligenceMult": 0.03,
    # Melee damage: 1 + STR * mult
    "fMeleeDamageStrengthMult": 0.1,
    # Sprint drain per second: (base - END * mult) * scale
    "fSprintDrainBase": 1.05,
    "fSprintDrainEnduranceMult": 0.05,
    "fSprintDrainScale": 12.0,
}


@dataclass
class GameSettings:
    """Typed accessor over formula constants."""

    _values: dict[str, int | float] = field(default_factory=dict)

    def get_float(self, key: str, default: float) -> float:
        """Get a float value, falling back to the provided default."""
        val = self._values.get(key)
        if val is None:
            return default
        return float(val)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer value, falling back to the provided default."""
        val = self._values.get(key)
        if val is None:
            return default
        return int(val)

    @classmethod
    def defaults(cls) -> "GameSettings":
        """Return vanilla Fallout 4 constants."""
        return cls(_values=dict(_VANILLA_DEFAULTS))
