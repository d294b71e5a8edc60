"""Tests for the derived stat formulas.

Formula tests use synthetic perks and hand-built Characters; the
integration tests at the bottom drive the bundled dataset through
BuildEngine.
"""

import math

import pytest

from fo4_planner.engine.build_config import BuildConfig
from fo4_planner.engine.build_engine import BuildEngine
from fo4_planner.models.character import Character
from fo4_planner.models.constants import Attribute, Difficulty, PerkKind
from fo4_planner.models.derived_stats import DerivedStats, compute_stats
from fo4_planner.models.effect import StatIncrease
from fo4_planner.models.game_settings import GameSettings
from fo4_planner.models.perk import PerkId

from perk_factory import make_catalog, other, single, uniform, varying


A = Attribute

LUCK_CHARM = other("luck-charm")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _character(**points) -> Character:
    """Character with the given raw points; unspecified attributes stay at 1."""
    character = Character()
    for slug, value in points.items():
        character.attributes[Attribute[slug.upper()]] = value
    return character


def _luck_catalog():
    """Catalog with a 70-rank perk granting +1 Luck per rank."""
    charm = uniform(
        "Luck Charm", 70,
        stat_increase=StatIncrease(attribute=Attribute.LUCK, increase=1),
    )
    return make_catalog({LUCK_CHARM: charm})


def _with_luck(total: int) -> Character:
    character = Character()
    if total > 1:
        character.perks[LUCK_CHARM] = total - 1
    return character


# ===========================================================================
# Attribute points
# ===========================================================================


class TestAttributePoints:
    def test_fresh_build(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character()
        for attribute in Attribute:
            assert calc.total_base_points(character, attribute) == 1
            assert calc.total_points(character, attribute) == 1

    def test_bobblehead_counts_once(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(luck=10)
        character.perks[PerkId.bobblehead(A.LUCK)] = 1
        assert calc.total_base_points(character, A.LUCK) == 11
        assert calc.total_points(character, A.LUCK) == 11

    def test_book(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(endurance=4)
        character.attribute_book = A.ENDURANCE
        assert calc.total_base_points(character, A.ENDURANCE) == 5
        assert calc.total_base_points(character, A.LUCK) == 1

    def test_bobblehead_and_book(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(agility=9)
        character.attribute_book = A.AGILITY
        character.perks[PerkId.bobblehead(A.AGILITY)] = 1
        assert calc.total_base_points(character, A.AGILITY) == 11
        assert calc.total_points(character, A.AGILITY) == 11

    def test_perk_stat_increase_not_in_base(self):
        catalog = _luck_catalog()
        calc = DerivedStats(catalog)
        character = _with_luck(4)
        assert calc.total_base_points(character, A.LUCK) == 1
        assert calc.total_points(character, A.LUCK) == 4

    def test_perception_bonus_needs_rank_two(self):
        vans = varying("V.A.N.S.", [1, 14])
        catalog = make_catalog({PerkId.special(A.INTELLIGENCE, 1): vans})
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[PerkId.special(A.INTELLIGENCE, 1)] = 1
        assert calc.total_points(character, A.PERCEPTION) == 1
        character.perks[PerkId.special(A.INTELLIGENCE, 1)] = 2
        assert calc.total_points(character, A.PERCEPTION) == 3
        assert calc.total_base_points(character, A.PERCEPTION) == 1


# ===========================================================================
# Points spent and required level
# ===========================================================================


class TestProgression:
    def test_fresh_build(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character()
        assert calc.assigned_attribute_points(character) == 0
        assert calc.remaining_initial_points(character) == 21
        assert calc.required_level(character) == 1

    def test_initial_pool_is_free(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(
            strength=4, perception=4, endurance=4, charisma=4,
            intelligence=4, agility=4, luck=4,
        )
        assert calc.remaining_initial_points(character) == 0
        assert calc.level_up_assigned_attribute_points(character) == 0
        assert calc.required_level(character) == 1

    def test_points_beyond_pool_need_levels(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(
            strength=10, perception=10, endurance=5,
        )
        assert calc.assigned_attribute_points(character) == 22
        assert calc.remaining_initial_points(character) == 0
        assert calc.required_level(character) == 2

    def test_special_perk_ranks_cost_levels(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character()
        character.perks[PerkId.special(A.STRENGTH, 1)] = 1
        character.perks[PerkId.special(A.LUCK, 1)] = 1
        assert calc.assigned_perk_points(character) == 2
        assert calc.required_level(character) == 3

    def test_other_perks_are_free(self):
        catalog = make_catalog({other("hardy"): uniform("Hardy", 3)})
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[other("hardy")] = 3
        character.perks[PerkId.bobblehead(A.LUCK)] = 1
        assert calc.assigned_perk_points(character) == 0
        assert calc.required_level(character) == 1

    def test_rank_level_requirement(self):
        perk = varying("Iron Fist", [1, 9, 18])
        catalog = make_catalog({PerkId.special(A.STRENGTH, 1): perk})
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[PerkId.special(A.STRENGTH, 1)] = 3
        assert calc.required_level(character) == 18

    def test_config_pool(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog, config=BuildConfig(initial_assignable_points=0))
        character = _character(strength=3)
        assert calc.required_level(character) == 3


# ===========================================================================
# Vitals
# ===========================================================================


class TestVitals:
    def test_fresh_health(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character()
        assert calc.base_health(character) == pytest.approx(85.0)
        assert calc.health_per_level(character) == pytest.approx(3.0)
        assert calc.health(character) == pytest.approx(85.0)

    def test_health_at_required_level(self):
        lifegiver = varying("Lifegiver", [1, 8, 20], [{"hp_add": 20}, {"hp_add": 40}, {"hp_add": 60}])
        catalog = make_catalog({PerkId.special(A.ENDURANCE, 3): lifegiver})
        calc = DerivedStats(catalog)
        character = _character(endurance=3)
        character.perks[PerkId.special(A.ENDURANCE, 3)] = 2
        assert calc.base_health(character) == pytest.approx(80 + 15 + 40)
        assert calc.required_level(character) == 8
        assert calc.health(character) == pytest.approx(135 + 4.0 * 7)

    def test_uniform_hp_repeats(self):
        catalog = make_catalog({other("hardy"): uniform("Hardy", 3, hp_add=10.0, ap_add=5.0)})
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[other("hardy")] = 2
        assert calc.base_health(character) == pytest.approx(105.0)
        assert calc.base_action_points(character) == pytest.approx(80.0)

    def test_action_points(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        assert calc.base_action_points(_character(agility=6)) == pytest.approx(120.0)

    def test_carry_weight(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        assert calc.carry_weight(Character()) == 210
        assert calc.carry_weight(_character(strength=10)) == 300

    def test_carry_weight_survival(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character(difficulty=Difficulty.SURVIVAL)
        assert calc.carry_weight(character) == 85

    def test_carry_weight_perk(self):
        strong_back = varying(
            "Strong Back", [1, 10, 20], [{"carry_weight_add": 25}, {"carry_weight_add": 50}, {}]
        )
        catalog = make_catalog({PerkId.special(A.STRENGTH, 6): strong_back})
        calc = DerivedStats(catalog)
        character = _character(strength=6)
        character.perks[PerkId.special(A.STRENGTH, 6)] = 3
        assert calc.carry_weight(character) == 200 + 60 + 50

    def test_sprint_time(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        assert calc.sprint_time(Character()) == pytest.approx(70.0 / 12.0)

    def test_sprint_time_is_double_precision(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = _character(endurance=3)
        assert calc.sprint_time(character) == 70.0 / ((1.05 - 0.05 * 3) * 12.0)

    def test_sprint_drain_multiplier(self):
        catalog = make_catalog({other("legs"): single("Legs", sprint_drain_mul=0.5)})
        calc = DerivedStats(catalog)
        character = _character(agility=6)
        character.perks[other("legs")] = 1
        assert calc.sprint_time(character) == pytest.approx(120.0 / 6.0)

    def test_sprint_without_drain_is_unbounded(self):
        gmst = GameSettings(_values={"fSprintDrainBase": 0.05})
        calc = DerivedStats(make_catalog(), gmst)
        assert math.isinf(calc.sprint_time(Character()))


# ===========================================================================
# Combat
# ===========================================================================


class TestHitsPerCrit:
    @pytest.mark.parametrize("luck,hits", [
        (1, 14), (2, 12), (3, 10), (4, 9), (5, 8), (6, 7), (7, 7), (8, 6), (9, 6),
        (10, 5), (12, 5), (13, 4), (18, 4), (19, 3), (29, 3), (30, 2), (62, 2), (63, 1),
    ])
    def test_step_table(self, luck, hits):
        calc = DerivedStats(_luck_catalog())
        assert calc.hits_per_crit(_with_luck(luck)) == hits

    def test_monotonic(self):
        calc = DerivedStats(_luck_catalog())
        hits = [calc.hits_per_crit(_with_luck(luck)) for luck in range(1, 71)]
        assert all(a >= b for a, b in zip(hits, hits[1:]))


class TestCombat:
    def test_melee_damage(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        assert calc.melee_damage_multiplier(Character()) == pytest.approx(1.1)
        assert calc.melee_damage_multiplier(_character(strength=10)) == pytest.approx(2.0)

    def test_melee_damage_perk(self):
        big_leagues = varying("Big Leagues", [1, 7], [{"melee_damage_add": 0.2}, {"melee_damage_add": 0.4}])
        catalog = make_catalog({PerkId.special(A.STRENGTH, 2): big_leagues})
        calc = DerivedStats(catalog)
        character = _character(strength=2)
        character.perks[PerkId.special(A.STRENGTH, 2)] = 2
        assert calc.melee_damage_multiplier(character) == pytest.approx(1.6)

    def test_resistances_sum_across_perks(self):
        catalog = make_catalog({
            other("a"): single("Shield", energy_resist_add=20.0),
            other("b"): single("Mirror", energy_resist_add=10.0, damage_resist_add=5.0),
            other("c"): single("Lead", rad_resist_add=10.0),
        })
        calc = DerivedStats(catalog)
        character = Character()
        for key in ("a", "b", "c"):
            character.perks[other(key)] = 1
        assert calc.energy_resistance(character) == pytest.approx(30.0)
        assert calc.damage_resistance(character) == pytest.approx(5.0)
        assert calc.rad_resistance(character) == pytest.approx(10.0)

    def test_no_resistance(self, synthetic_catalog):
        assert DerivedStats(synthetic_catalog).damage_resistance(Character()) == 0.0


# ===========================================================================
# Economy and crafting
# ===========================================================================


class TestEconomy:
    def test_fresh_prices(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        character = Character()
        assert calc.buying_price_multiplier(character) == pytest.approx(3.35)
        assert calc.selling_price_multiplier(character) == pytest.approx(1 / 3.35)

    def test_price_reduction(self):
        catalog = make_catalog({other("caps"): single("Caps", buy_price_sub=0.2)})
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[other("caps")] = 1
        assert calc.buying_price_multiplier(character) == pytest.approx(3.35 / 1.2)

    def test_price_floor_and_sell_ceiling(self):
        catalog = make_catalog({other("caps"): single("Caps", buy_price_sub=1.0)})
        calc = DerivedStats(catalog)
        character = _character(charisma=10)
        character.perks[other("caps")] = 1
        assert calc.buying_price_multiplier(character) == pytest.approx(1.2)
        assert calc.selling_price_multiplier(character) == pytest.approx(0.8)

    def test_experience(self, synthetic_catalog):
        calc = DerivedStats(synthetic_catalog)
        assert calc.experience_multiplier(Character()) == pytest.approx(1.03)
        assert calc.experience_multiplier(_character(intelligence=10)) == pytest.approx(1.3)


class TestCrafting:
    def test_no_mods(self, synthetic_catalog):
        ranks = DerivedStats(synthetic_catalog).crafting_ranks(Character())
        assert ranks == {"armor": 0, "melee": 0, "weapon": 0, "science": 0}

    def test_override_follows_perk_order(self):
        catalog = make_catalog({
            other("a-mod"): single("A Mod", weapon_mod_rank=2),
            other("b-mod"): single("B Mod", weapon_mod_rank=1),
        })
        calc = DerivedStats(catalog)
        character = Character()
        character.perks[other("b-mod")] = 1
        character.perks[other("a-mod")] = 1
        assert calc.crafting_ranks(character)["weapon"] == 1


# ===========================================================================
# Integration: bundled dataset through BuildEngine
# ===========================================================================


class TestBundledStats:
    def test_fresh_build(self, bundled_catalog):
        stats = BuildEngine.new_build(bundled_catalog).stats()
        assert stats.required_level == 1
        assert stats.remaining_initial_points == 21
        assert stats.health == pytest.approx(85.0)
        assert stats.action_points == pytest.approx(70.0)
        assert stats.carry_weight == 210
        assert stats.hits_per_crit == 14
        assert stats.base_points == {a: 1 for a in Attribute}

    def test_gun_nut(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        engine.add_perk(bundled_catalog.resolve_perk_text("Gun Nut"), 3)
        stats = engine.stats()
        assert stats.crafting_ranks["weapon"] == 3
        assert stats.required_level == 25

    def test_toughness_and_refractor(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        engine.add_perk(bundled_catalog.resolve_perk_text("Toughness"), 5)
        engine.add_perk(bundled_catalog.resolve_perk_text("Refractor"), 3)
        stats = engine.stats()
        assert stats.damage_resistance == pytest.approx(50.0)
        assert stats.energy_resistance == pytest.approx(30.0)

    def test_vans_rank_two_raises_perception(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        engine.add_perk(bundled_catalog.resolve_perk_text("V.A.N.S."), 2)
        assert engine.total_points(A.PERCEPTION) == 3

    def test_moving_target_sprint(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        engine.add_perk(bundled_catalog.resolve_perk_text("Moving Target"), 3)
        assert engine.stats().sprint_time == pytest.approx(120.0 / 6.0)

    def test_compute_stats_matches_calculator(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        engine.set_attribute(A.LUCK, 11)
        stats = compute_stats(engine.state, bundled_catalog)
        assert stats.total_points[A.LUCK] == 11
        assert stats.hits_per_crit == 5

    def test_only_special_kind_costs_points(self, bundled_catalog):
        engine = BuildEngine.new_build(bundled_catalog)
        for perk_id, _ in bundled_catalog.items(PerkKind.MAGAZINE):
            engine.add_perk_by_id(perk_id, 1)
        assert engine.required_level() == 1
