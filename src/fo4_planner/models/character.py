"""Character build data model.

Represents a player's build choices: S.P.E.C.I.A.L. allocation, the
S.P.E.C.I.A.L. book, held perks and their ranks, and display metadata.
This is the input to the derived stats calculator; BuildEngine owns the
validation of every change to it.
"""

from dataclasses import dataclass, field

from fo4_planner.models.constants import ATTRIBUTE_MIN, Attribute, Difficulty, Gender
from fo4_planner.models.perk import PerkId


def _default_attributes() -> dict[Attribute, int]:
    return {attribute: ATTRIBUTE_MIN for attribute in Attribute}


@dataclass
class Character:
    """A Fallout 4 character build."""

    # Identity and formula modifiers
    name: str | None = None
    gender: Gender | None = None
    difficulty: Difficulty | None = None

    # Raw S.P.E.C.I.A.L. allocation, 1-10 per attribute
    attributes: dict[Attribute, int] = field(default_factory=_default_attributes)

    # Attribute receiving the +1 from the S.P.E.C.I.A.L. book, if any
    attribute_book: Attribute | None = None

    # Held perks -> rank (>= 1); absent means rank 0
    perks: dict[PerkId, int] = field(default_factory=dict)

    def rank_of(self, perk_id: PerkId) -> int:
        return self.perks.get(perk_id, 0)

    def held_perks(self) -> list[tuple[PerkId, int]]:
        """Held perks in canonical PerkId order."""
        return sorted(self.perks.items())
