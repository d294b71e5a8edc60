"""Perk identity, definition and rank-structure models."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Iterator, Union

from fo4_planner.models.constants import (
    ATTRIBUTE_BY_SLUG,
    DEFAULT_DIFFICULTY,
    DEFAULT_GENDER,
    PERK_KIND_BY_SLUG,
    PERK_TIERS,
    Attribute,
    Difficulty,
    Gender,
    PerkKind,
)
from fo4_planner.models.effect import NO_EFFECTS, EffectBundle


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True, slots=True)
class PerkId:
    """Identity of a perk in the catalog.

    SPECIAL perks are keyed by attribute slug and tier (1-10). Bobbleheads
    are keyed by attribute slug or skill slug; every other kind by a slug
    of its name. Ordering is kind, then attribute, then tier, then key.
    """
    kind: PerkKind
    key: str
    tier: int = 0

    @classmethod
    def special(cls, attribute: Attribute, tier: int) -> PerkId:
        if tier not in PERK_TIERS:
            raise ValueError(f"SPECIAL perk tier must be 1..10, got {tier}")
        return cls(PerkKind.SPECIAL, Attribute(attribute).slug, tier)

    @classmethod
    def bobblehead(cls, key: Attribute | str) -> PerkId:
        if isinstance(key, Attribute):
            key = key.slug
        return cls(PerkKind.BOBBLEHEAD, key)

    @property
    def attribute(self) -> Attribute | None:
        """The attribute a SPECIAL perk or SPECIAL bobblehead belongs to."""
        if self.kind in (PerkKind.SPECIAL, PerkKind.BOBBLEHEAD):
            return ATTRIBUTE_BY_SLUG.get(self.key)
        return None

    @property
    def is_special(self) -> bool:
        return self.kind == PerkKind.SPECIAL

    def sort_key(self) -> tuple[int, int, int, str]:
        attribute = self.attribute
        order = int(attribute) if attribute is not None else len(Attribute)
        return (int(self.kind), order, self.tier, self.key)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PerkId):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        if self.kind == PerkKind.SPECIAL:
            return f"{self.kind.slug}/{self.key}/{self.tier}"
        return f"{self.kind.slug}/{self.key}"

    @classmethod
    def parse(cls, text: str) -> PerkId:
        """Inverse of str(): 'special/strength/3', 'bobblehead/luck', ..."""
        parts = text.strip().split("/")
        kind = PERK_KIND_BY_SLUG.get(parts[0]) if parts else None
        if kind is None:
            raise ValueError(f"Invalid perk id: {text!r}")
        if kind == PerkKind.SPECIAL:
            if len(parts) != 3 or parts[1] not in ATTRIBUTE_BY_SLUG:
                raise ValueError(f"Invalid SPECIAL perk id: {text!r}")
            try:
                tier = int(parts[2])
            except ValueError as exc:
                raise ValueError(f"Invalid SPECIAL perk tier: {text!r}") from exc
            return cls.special(ATTRIBUTE_BY_SLUG[parts[1]], tier)
        if len(parts) != 2 or not parts[1]:
            raise ValueError(f"Invalid perk id: {text!r}")
        return cls(kind, parts[1])


# ---------------------------------------------------------------------------
# Text that varies by gender and difficulty
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Gendered:
    male: str
    female: str

    def get(self, gender: Gender) -> str:
        return self.female if gender == Gender.FEMALE else self.male


@dataclass(frozen=True, slots=True)
class Difficultied:
    """Description that only differs between Survival and everything else."""
    normal: str | Gendered
    survival: str | Gendered

    def get(self, difficulty: Difficulty) -> str | Gendered:
        return self.survival if difficulty == Difficulty.SURVIVAL else self.normal


Name = Union[str, Gendered]
Description = Union[str, Gendered, Difficultied]


def text_for(
    value: Description,
    gender: Gender | None = None,
    difficulty: Difficulty | None = None,
) -> str:
    """Pick the variant of *value* for a gender/difficulty (defaults Male/Normal)."""
    if isinstance(value, Difficultied):
        value = value.get(difficulty or DEFAULT_DIFFICULTY)
    if isinstance(value, Gendered):
        value = value.get(gender or DEFAULT_GENDER)
    return value


def text_variants(value: Description) -> tuple[str, ...]:
    """All distinct strings *value* can render as, in a stable order."""
    if isinstance(value, Difficultied):
        found = text_variants(value.normal) + text_variants(value.survival)
    elif isinstance(value, Gendered):
        found = (value.male, value.female)
    else:
        found = (value,)
    return tuple(dict.fromkeys(found))


# ---------------------------------------------------------------------------
# Rank structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Rank:
    """One rank of a VaryingRanks perk."""
    description: Description
    required_level: int = 1
    effects: EffectBundle = NO_EFFECTS


@dataclass(frozen=True, slots=True)
class SingleRank:
    """A perk with exactly one rank."""
    description: Description
    effects: EffectBundle = NO_EFFECTS

    @property
    def max_rank(self) -> int:
        return 1

    def required_level(self, rank: int) -> int:
        return 1

    def highest_rank_within_level(self, level: int) -> int:
        return 1

    def values(self, name: str, rank: int) -> list:
        value = self.effects.get(name)
        return [] if value is None else [value]

    def rank_texts(self) -> Iterator[tuple[int | None, int, Description]]:
        yield None, 1, self.description


@dataclass(frozen=True, slots=True)
class UniformRanks:
    """N identical ranks; a field set once applies once per held rank."""
    count: int
    description: Description
    effects: EffectBundle = NO_EFFECTS

    @property
    def max_rank(self) -> int:
        return self.count

    def required_level(self, rank: int) -> int:
        return 1

    def highest_rank_within_level(self, level: int) -> int:
        return self.count

    def values(self, name: str, rank: int) -> list:
        value = self.effects.get(name)
        return [] if value is None else [value] * rank

    def rank_texts(self) -> Iterator[tuple[int | None, int, Description]]:
        yield None, 1, self.description


@dataclass(frozen=True, slots=True)
class VaryingRanks:
    """Ordered ranks, each with its own level requirement and effects.

    Effects are cumulative but do not stack: the highest held rank that
    sets a field decides its value. A rank that omits a field inherits it
    from the ranks below.
    """
    ranks: tuple[Rank, ...]

    @property
    def max_rank(self) -> int:
        return len(self.ranks)

    def required_level(self, rank: int) -> int:
        if rank < 1 or rank > len(self.ranks):
            raise ValueError(f"Rank {rank} is outside 1..{len(self.ranks)}")
        return self.ranks[rank - 1].required_level

    def highest_rank_within_level(self, level: int) -> int:
        return sum(1 for rank in self.ranks if rank.required_level <= level)

    def values(self, name: str, rank: int) -> list:
        for held in reversed(self.ranks[:rank]):
            value = held.effects.get(name)
            if value is not None:
                return [value]
        return []

    def rank_texts(self) -> Iterator[tuple[int | None, int, Description]]:
        for i, rank in enumerate(self.ranks):
            yield i + 1, rank.required_level, rank.description


RankStructure = Union[SingleRank, UniformRanks, VaryingRanks]


# ---------------------------------------------------------------------------
# Definition
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class PerkDef:
    """A perk definition. Compares, hashes and orders by name."""
    name: Name
    ranks: RankStructure

    @property
    def max_rank(self) -> int:
        return self.ranks.max_rank

    def display_name(self, gender: Gender | None = None) -> str:
        return text_for(self.name, gender)

    def names(self) -> tuple[str, ...]:
        return text_variants(self.name)

    def _key(self) -> tuple[str, ...]:
        return self.names()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PerkDef):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PerkDef):
            return NotImplemented
        return self._key() < other._key()

    def __repr__(self) -> str:
        return f"PerkDef({self.display_name()!r}, max_rank={self.max_rank})"
