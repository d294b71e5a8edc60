"""Fallout 4 attributes, genders, difficulties and perk kinds.

The seven S.P.E.C.I.A.L. attributes are a closed, totally ordered set.
Their enum order is the display and iteration order everywhere in the
planner.
"""

from enum import Enum, IntEnum


class Attribute(IntEnum):
    """The S.P.E.C.I.A.L. attributes, in sheet order."""
    STRENGTH = 0
    PERCEPTION = 1
    ENDURANCE = 2
    CHARISMA = 3
    INTELLIGENCE = 4
    AGILITY = 5
    LUCK = 6

    @property
    def display_name(self) -> str:
        return ATTRIBUTE_NAMES[self]

    @property
    def slug(self) -> str:
        return self.name.lower()


# Friendly display names
ATTRIBUTE_NAMES: dict[Attribute, str] = {
    Attribute.STRENGTH: "Strength",
    Attribute.PERCEPTION: "Perception",
    Attribute.ENDURANCE: "Endurance",
    Attribute.CHARISMA: "Charisma",
    Attribute.INTELLIGENCE: "Intelligence",
    Attribute.AGILITY: "Agility",
    Attribute.LUCK: "Luck",
}

ATTRIBUTE_BY_SLUG: dict[str, Attribute] = {a.slug: a for a in Attribute}

# Every attribute starts at 1 point; the rest of the sheet is bought.
ATTRIBUTE_MIN = 1
ATTRIBUTE_MAX = 10
PERK_TIERS = range(1, ATTRIBUTE_MAX + 1)


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


GENDER_SYNONYMS: dict[str, Gender] = {
    "male": Gender.MALE,
    "man": Gender.MALE,
    "boy": Gender.MALE,
    "guy": Gender.MALE,
    "gentleman": Gender.MALE,
    "he": Gender.MALE,
    "female": Gender.FEMALE,
    "woman": Gender.FEMALE,
    "girl": Gender.FEMALE,
    "lady": Gender.FEMALE,
    "she": Gender.FEMALE,
}

DEFAULT_GENDER = Gender.MALE


class Difficulty(Enum):
    VERY_EASY = "very_easy"
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    VERY_HARD = "very_hard"
    SURVIVAL = "survival"

    @property
    def display_name(self) -> str:
        return DIFFICULTY_NAMES[self]


DIFFICULTY_NAMES: dict[Difficulty, str] = {
    Difficulty.VERY_EASY: "Very Easy",
    Difficulty.EASY: "Easy",
    Difficulty.NORMAL: "Normal",
    Difficulty.HARD: "Hard",
    Difficulty.VERY_HARD: "Very Hard",
    Difficulty.SURVIVAL: "Survival",
}

DEFAULT_DIFFICULTY = Difficulty.NORMAL


class PerkKind(IntEnum):
    """Perk categories, in display order.

    Only SPECIAL perks are gated by attribute tiers and bought with perk
    points; the rest are granted by items, companions or quests.
    """
    SPECIAL = 0
    BOBBLEHEAD = 1
    MAGAZINE = 2
    COMPANION = 3
    FACTION = 4
    OTHER = 5

    @property
    def slug(self) -> str:
        return self.name.lower()


PERK_KIND_TITLES: dict[PerkKind, str] = {
    PerkKind.BOBBLEHEAD: "Bobbleheads",
    PerkKind.MAGAZINE: "Magazines",
    PerkKind.COMPANION: "Companions",
    PerkKind.FACTION: "Factions",
    PerkKind.OTHER: "Other Perks",
}

PERK_KIND_BY_SLUG: dict[str, PerkKind] = {k.slug: k for k in PerkKind}
