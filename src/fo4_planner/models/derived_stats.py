"""Derived stat calculator.

Every stat is a pure function of a Character plus the perk catalog:
attribute-based base formulas (constants from GameSettings) combined with
the folded effects of held perks.

Perk effects are always folded in PerkId order so floating-point sums come
out the same on every run.

All arithmetic is Python float (double precision). The game itself works
in 32-bit floats, so a displayed value can differ from it in the last
single-precision digit.

Points terminology:
  raw         points allocated on the sheet (1-10)
  base        raw + bobblehead + S.P.E.C.I.A.L. book; gates SPECIAL perks
  total       base + perk-granted increases; drives the formulas
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator

from fo4_planner.catalog.perk_catalog import PerkCatalog
from fo4_planner.engine.build_config import BuildConfig
from fo4_planner.models.character import Character
from fo4_planner.models.constants import Attribute, Difficulty, PerkKind
from fo4_planner.models.effect import fold_field
from fo4_planner.models.game_settings import GameSettings
from fo4_planner.models.perk import PerkId


# Luck total points -> hits per critical, as (highest luck, hits) steps.
_HITS_PER_CRIT_STEPS: tuple[tuple[int, int], ...] = (
    (1, 14),
    (2, 12),
    (3, 10),
    (4, 9),
    (5, 8),
    (7, 7),
    (9, 6),
    (12, 5),
    (18, 4),
    (29, 3),
    (62, 2),
)

# Intelligence tier 1 at rank 2 and above grants +2 Perception.
_PERCEPTION_BONUS_PERK = PerkId.special(Attribute.INTELLIGENCE, 1)
_PERCEPTION_BONUS_RANK = 2
_PERCEPTION_BONUS = 2


class DerivedStats:
    """Computes derived stats for a Character against a catalog."""

    def __init__(
        self,
        catalog: PerkCatalog,
        gmst: GameSettings | None = None,
        config: BuildConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._gmst = gmst or GameSettings.defaults()
        self._config = config or BuildConfig()

    # --- Perk effect folds -------------------------------------------------

    def effect_values(self, character: Character, name: str) -> Iterator:
        """Per-perk contributions of effect *name*, in PerkId order."""
        for perk_id, rank in character.held_perks():
            definition = self._catalog.lookup_by_identity(perk_id)
            yield from definition.ranks.values(name, rank)

    def fold_effect(self, character: Character, name: str):
        return fold_field(name, self.effect_values(character, name))

    # --- Attribute points --------------------------------------------------

    def has_bobblehead(self, character: Character, attribute: Attribute) -> bool:
        return PerkId.bobblehead(attribute) in character.perks

    def total_base_points(self, character: Character, attribute: Attribute) -> int:
        """Raw points + bobblehead + book."""
        return (
            character.attributes[attribute]
            + int(self.has_bobblehead(character, attribute))
            + int(character.attribute_book == attribute)
        )

    def stat_increase_for(self, character: Character, attribute: Attribute) -> int:
        return sum(
            si.increase
            for si in self.effect_values(character, "stat_increase")
            if si.attribute == attribute
        )

    def total_points(self, character: Character, attribute: Attribute) -> int:
        """Base points plus perk-granted increases.

        The bobblehead is counted in base points and also grants its own
        stat increase, so it is subtracted once here.
        """
        bonus = 0
        if (
            attribute == Attribute.PERCEPTION
            and character.rank_of(_PERCEPTION_BONUS_PERK) >= _PERCEPTION_BONUS_RANK
        ):
            bonus = _PERCEPTION_BONUS
        return (
            self.total_base_points(character, attribute)
            + bonus
            + self.stat_increase_for(character, attribute)
            - int(self.has_bobblehead(character, attribute))
        )

    def assigned_attribute_points(self, character: Character) -> int:
        """Points allocated above the free 1 every attribute starts with."""
        return sum(
            value - self._config.attribute_min
            for value in character.attributes.values()
        )

    def remaining_initial_points(self, character: Character) -> int:
        return max(
            0,
            self._config.initial_assignable_points
            - self.assigned_attribute_points(character),
        )

    def level_up_assigned_attribute_points(self, character: Character) -> int:
        """Attribute points that had to come from level-ups."""
        return max(
            0,
            self.assigned_attribute_points(character)
            - self._config.initial_assignable_points,
        )

    def assigned_perk_points(self, character: Character) -> int:
        """Perk points spent; only SPECIAL perks are bought with them."""
        return sum(
            rank for perk_id, rank in character.perks.items()
            if perk_id.kind == PerkKind.SPECIAL
        )

    def level_up_assigned_points(self, character: Character) -> int:
        return (
            self.level_up_assigned_attribute_points(character)
            + self.assigned_perk_points(character)
        )

    def required_level(self, character: Character) -> int:
        """Lowest character level at which this build is reachable."""
        for_ranks = max(
            (
                self._catalog.lookup_by_identity(perk_id).ranks.required_level(rank)
                for perk_id, rank in character.held_perks()
            ),
            default=1,
        )
        for_points = self.level_up_assigned_points(character) + 1
        return max(1, for_ranks, for_points)

    # --- Vitals ------------------------------------------------------------

    def base_health(self, character: Character) -> float:
        """HP at level 1 = fHealthBase + END * fHealthEnduranceMult + perks."""
        endurance = self.total_points(character, Attribute.ENDURANCE)
        base = self._gmst.get_float("fHealthBase", 80.0)
        mult = self._gmst.get_float("fHealthEnduranceMult", 5.0)
        return base + endurance * mult + self.fold_effect(character, "hp_add")

    def health_per_level(self, character: Character) -> float:
        endurance = self.total_points(character, Attribute.ENDURANCE)
        base = self._gmst.get_float("fHealthLevelBase", 2.5)
        mult = self._gmst.get_float("fHealthLevelEnduranceMult", 0.5)
        return base + endurance * mult

    def health(self, character: Character) -> float:
        """HP at the build's required level."""
        level = self.required_level(character)
        return self.base_health(character) + self.health_per_level(character) * (level - 1)

    def base_action_points(self, character: Character) -> float:
        agility = self.total_points(character, Attribute.AGILITY)
        base = self._gmst.get_float("fActionPointsBase", 60.0)
        mult = self._gmst.get_float("fActionPointsAgilityMult", 10.0)
        return base + agility * mult + self.fold_effect(character, "ap_add")

    def carry_weight(self, character: Character) -> int:
        if character.difficulty == Difficulty.SURVIVAL:
            base = self._gmst.get_int("iCarryWeightBaseSurvival", 75)
        else:
            base = self._gmst.get_int("iCarryWeightBase", 200)
        strength = self.total_points(character, Attribute.STRENGTH)
        mult = self._gmst.get_int("iCarryWeightStrengthMult", 10)
        return base + strength * mult + self.fold_effect(character, "carry_weight_add")

    def sprint_time(self, character: Character) -> float:
        """Seconds of sprinting on a full AP bar."""
        endurance = self.total_points(character, Attribute.ENDURANCE)
        base = self._gmst.get_float("fSprintDrainBase", 1.05)
        mult = self._gmst.get_float("fSprintDrainEnduranceMult", 0.05)
        scale = self._gmst.get_float("fSprintDrainScale", 12.0)
        ap_per_sec = (
            (base - mult * endurance) * scale * self.fold_effect(character, "sprint_drain_mul")
        )
        if ap_per_sec <= 0:
            return math.inf
        return self.base_action_points(character) / ap_per_sec

    # --- Combat ------------------------------------------------------------

    def hits_per_crit(self, character: Character) -> int:
        luck = self.total_points(character, Attribute.LUCK)
        for highest, hits in _HITS_PER_CRIT_STEPS:
            if luck <= highest:
                return hits
        return 1

    def melee_damage_multiplier(self, character: Character) -> float:
        strength = self.total_points(character, Attribute.STRENGTH)
        mult = self._gmst.get_float("fMeleeDamageStrengthMult", 0.1)
        return 1.0 + strength * mult + self.fold_effect(character, "melee_damage_add")

    def damage_resistance(self, character: Character) -> float:
        return self.fold_effect(character, "damage_resist_add")

    def energy_resistance(self, character: Character) -> float:
        return self.fold_effect(character, "energy_resist_add")

    def rad_resistance(self, character: Character) -> float:
        return self.fold_effect(character, "rad_resist_add")

    # --- Economy and progression -------------------------------------------

    def buying_price_multiplier(self, character: Character) -> float:
        charisma = self.total_points(character, Attribute.CHARISMA)
        top = self._gmst.get_float("fBarterBuyMax", 3.5)
        mult = self._gmst.get_float("fBarterCharismaMult", 0.15)
        floor = self._gmst.get_float("fBarterBuyMin", 1.2)
        reduction = 1.0 + self.fold_effect(character, "buy_price_sub")
        return max(floor, (top - charisma * mult) / reduction)

    def selling_price_multiplier(self, character: Character) -> float:
        ceiling = self._gmst.get_float("fBarterSellMax", 0.8)
        return min(ceiling, 1.0 / self.buying_price_multiplier(character))

    def experience_multiplier(self, character: Character) -> float:
        intelligence = self.total_points(character, Attribute.INTELLIGENCE)
        mult = self._gmst.get_float("fExperienceIntelligenceMult", 0.03)
        return 1.0 + intelligence * mult

    def crafting_ranks(self, character: Character) -> dict[str, int]:
        """Highest unlocked mod rank per workbench category."""
        return {
            "armor": self.fold_effect(character, "armor_mod_rank"),
            "melee": self.fold_effect(character, "melee_mod_rank"),
            "weapon": self.fold_effect(character, "weapon_mod_rank"),
            "science": self.fold_effect(character, "science_mod_rank"),
        }


@dataclass
class CharacterStats:
    """Complete computed stat snapshot for a character build."""

    # Progression
    required_level: int = 1
    remaining_initial_points: int = 0

    # Vitals
    health: float = 0.0
    base_health: float = 0.0
    health_per_level: float = 0.0
    action_points: float = 0.0
    carry_weight: int = 0
    sprint_time: float = 0.0

    # Combat
    hits_per_crit: int = 14
    melee_damage_multiplier: float = 1.0
    damage_resistance: float = 0.0
    energy_resistance: float = 0.0
    rad_resistance: float = 0.0

    # Economy
    buying_price_multiplier: float = 0.0
    selling_price_multiplier: float = 0.0
    experience_multiplier: float = 1.0

    # Attribute totals, keyed by attribute
    base_points: dict[Attribute, int] = field(default_factory=dict)
    total_points: dict[Attribute, int] = field(default_factory=dict)

    # Workbench mod ranks
    crafting_ranks: dict[str, int] = field(default_factory=dict)


def compute_stats(
    character: Character,
    catalog: PerkCatalog,
    gmst: GameSettings | None = None,
    config: BuildConfig | None = None,
) -> CharacterStats:
    """Compute every derived stat for a build in one snapshot."""
    calc = DerivedStats(catalog, gmst, config)
    return CharacterStats(
        required_level=calc.required_level(character),
        remaining_initial_points=calc.remaining_initial_points(character),
        health=calc.health(character),
        base_health=calc.base_health(character),
        health_per_level=calc.health_per_level(character),
        action_points=calc.base_action_points(character),
        carry_weight=calc.carry_weight(character),
        sprint_time=calc.sprint_time(character),
        hits_per_crit=calc.hits_per_crit(character),
        melee_damage_multiplier=calc.melee_damage_multiplier(character),
        damage_resistance=calc.damage_resistance(character),
        energy_resistance=calc.energy_resistance(character),
        rad_resistance=calc.rad_resistance(character),
        buying_price_multiplier=calc.buying_price_multiplier(character),
        selling_price_multiplier=calc.selling_price_multiplier(character),
        experience_multiplier=calc.experience_multiplier(character),
        base_points={a: calc.total_base_points(character, a) for a in Attribute},
        total_points={a: calc.total_points(character, a) for a in Attribute},
        crafting_ranks=calc.crafting_ranks(character),
    )
