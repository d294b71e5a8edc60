"""Tests for perk identity, rank structures and gender/difficulty text."""

import pytest

from fo4_planner.models.constants import Attribute, Difficulty, Gender, PerkKind
from fo4_planner.models.perk import (
    Difficultied,
    Gendered,
    PerkDef,
    PerkId,
    SingleRank,
    text_for,
    text_variants,
)

from perk_factory import single, uniform, varying


# ===========================================================================
# PerkId
# ===========================================================================


class TestPerkIdOrdering:
    def test_special_before_other_kinds(self):
        assert PerkId.special(Attribute.LUCK, 10) < PerkId.bobblehead(Attribute.STRENGTH)

    def test_attribute_order_before_tier(self):
        assert PerkId.special(Attribute.STRENGTH, 10) < PerkId.special(Attribute.PERCEPTION, 1)

    def test_tier_order(self):
        assert PerkId.special(Attribute.AGILITY, 2) < PerkId.special(Attribute.AGILITY, 10)

    def test_attribute_bobbleheads_before_skill_bobbleheads(self):
        assert PerkId.bobblehead(Attribute.LUCK) < PerkId.bobblehead("barter")

    def test_flat_kinds_sort_by_key(self):
        ids = [PerkId(PerkKind.OTHER, "b"), PerkId(PerkKind.OTHER, "a")]
        assert [str(i) for i in sorted(ids)] == ["other/a", "other/b"]

    def test_sorted_is_total(self):
        ids = [
            PerkId(PerkKind.MAGAZINE, "tesla-science"),
            PerkId.bobblehead("sneak"),
            PerkId.special(Attribute.ENDURANCE, 3),
            PerkId(PerkKind.COMPANION, "berserk"),
        ]
        assert [i.kind for i in sorted(ids)] == [
            PerkKind.SPECIAL, PerkKind.BOBBLEHEAD, PerkKind.MAGAZINE, PerkKind.COMPANION,
        ]


class TestPerkIdText:
    def test_special_str(self):
        assert str(PerkId.special(Attribute.INTELLIGENCE, 3)) == "special/intelligence/3"

    def test_flat_str(self):
        assert str(PerkId.bobblehead(Attribute.LUCK)) == "bobblehead/luck"

    @pytest.mark.parametrize("text", [
        "special/strength/1",
        "special/luck/10",
        "bobblehead/small-guns",
        "magazine/tesla-science",
        "other/well-rested",
    ])
    def test_parse_inverts_str(self, text):
        assert str(PerkId.parse(text)) == text

    @pytest.mark.parametrize("text", [
        "",
        "perk/strength",
        "special/strength",
        "special/strong/1",
        "special/strength/x",
        "special/strength/11",
        "magazine/",
        "magazine/a/b",
    ])
    def test_parse_rejects(self, text):
        with pytest.raises(ValueError):
            PerkId.parse(text)

    def test_special_tier_range(self):
        with pytest.raises(ValueError, match="1..10"):
            PerkId.special(Attribute.STRENGTH, 0)

    def test_attribute_of_special_bobblehead(self):
        assert PerkId.bobblehead(Attribute.CHARISMA).attribute == Attribute.CHARISMA

    def test_skill_bobblehead_has_no_attribute(self):
        assert PerkId.bobblehead("medicine").attribute is None

    def test_flat_kind_has_no_attribute(self):
        assert PerkId(PerkKind.MAGAZINE, "luck").attribute is None


# ===========================================================================
# Rank structures
# ===========================================================================


class TestSingleRank:
    def test_queries(self):
        ranks = single("Awareness").ranks
        assert ranks.max_rank == 1
        assert ranks.required_level(1) == 1
        assert ranks.highest_rank_within_level(1) == 1

    def test_values(self):
        ranks = single("Shield", energy_resist_add=20.0).ranks
        assert ranks.values("energy_resist_add", 1) == [20.0]
        assert ranks.values("hp_add", 1) == []


class TestUniformRanks:
    def test_value_repeats_per_held_rank(self):
        ranks = uniform("Hardy", 3, hp_add=10.0).ranks
        assert ranks.values("hp_add", 2) == [10.0, 10.0]

    def test_max_rank_is_count(self):
        ranks = uniform("Grognak", 10).ranks
        assert ranks.max_rank == 10
        assert ranks.highest_rank_within_level(1) == 10

    def test_single_rank_text(self):
        texts = list(uniform("Grognak", 10, description="Crit chance").ranks.rank_texts())
        assert texts == [(None, 1, "Crit chance")]


class TestVaryingRanks:
    def _strong_back(self):
        return varying(
            "Strong Back",
            [1, 10, 20, 30],
            [{"carry_weight_add": 25}, {"carry_weight_add": 50}, {}, {}],
        )

    def test_highest_setting_rank_wins(self):
        ranks = self._strong_back().ranks
        assert ranks.values("carry_weight_add", 2) == [50]

    def test_rank_without_field_inherits(self):
        ranks = self._strong_back().ranks
        assert ranks.values("carry_weight_add", 4) == [50]

    def test_unset_field(self):
        assert self._strong_back().ranks.values("hp_add", 4) == []

    def test_required_level(self):
        ranks = self._strong_back().ranks
        assert ranks.required_level(1) == 1
        assert ranks.required_level(3) == 20

    def test_required_level_out_of_range(self):
        with pytest.raises(ValueError, match="outside"):
            self._strong_back().ranks.required_level(5)

    @pytest.mark.parametrize("level,expected", [(1, 1), (9, 1), (10, 2), (29, 3), (50, 4)])
    def test_highest_rank_within_level(self, level, expected):
        assert self._strong_back().ranks.highest_rank_within_level(level) == expected

    def test_rank_texts_are_numbered(self):
        texts = list(self._strong_back().ranks.rank_texts())
        assert [(i, level) for i, level, _ in texts] == [(1, 1), (2, 10), (3, 20), (4, 30)]


# ===========================================================================
# Text variants and definitions
# ===========================================================================


class TestText:
    def test_gendered_defaults_to_male(self):
        assert text_for(Gendered(male="Lady Killer", female="Black Widow")) == "Lady Killer"

    def test_gendered_female(self):
        value = Gendered(male="Lady Killer", female="Black Widow")
        assert text_for(value, Gender.FEMALE) == "Black Widow"

    def test_difficultied(self):
        value = Difficultied(normal="Rest", survival="Rest and heal")
        assert text_for(value) == "Rest"
        assert text_for(value, difficulty=Difficulty.SURVIVAL) == "Rest and heal"
        assert text_for(value, difficulty=Difficulty.VERY_HARD) == "Rest"

    def test_difficultied_gendered(self):
        value = Difficultied(
            normal=Gendered(male="he", female="she"),
            survival="they",
        )
        assert text_for(value, Gender.FEMALE, Difficulty.NORMAL) == "she"
        assert text_for(value, Gender.FEMALE, Difficulty.SURVIVAL) == "they"

    def test_variants_are_unique(self):
        value = Difficultied(normal=Gendered(male="a", female="b"), survival="a")
        assert text_variants(value) == ("a", "b")


class TestPerkDef:
    def test_equality_by_name(self):
        assert single("Toughness") == single("Toughness", damage_resist_add=10.0)

    def test_inequality(self):
        assert single("Toughness") != single("Lead Belly")

    def test_hashable(self):
        assert len({single("Toughness"), single("Toughness")}) == 1

    def test_full_ordering_by_name(self):
        iron_fist, toughness = single("Iron Fist"), single("Toughness")
        assert iron_fist < toughness
        assert toughness > iron_fist
        assert iron_fist <= single("Iron Fist")
        assert toughness >= iron_fist
        assert sorted([toughness, iron_fist]) == [iron_fist, toughness]

    def test_display_name(self):
        perk = single(Gendered(male="Aquaboy", female="Aquagirl"))
        assert perk.display_name() == "Aquaboy"
        assert perk.display_name(Gender.FEMALE) == "Aquagirl"
        assert perk.names() == ("Aquaboy", "Aquagirl")

    def test_max_rank(self):
        assert PerkDef(name="x", ranks=SingleRank(description="x")).max_rank == 1
        assert varying("y", [1, 5, 9]).max_rank == 3
