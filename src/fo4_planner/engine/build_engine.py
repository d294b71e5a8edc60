"""Build engine: validates every change to a character build.

Wraps a Character and the perk catalog. Each mutator checks its input
first and only then applies the change, so a rejected command leaves the
build exactly as it was. Changes that can lower an attribute's base
points end with cascading invalidation: SPECIAL perks whose tier is no
longer reached are dropped.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from fo4_planner.catalog.perk_catalog import PerkCatalog
from fo4_planner.engine import snapshot
from fo4_planner.engine.build_config import BuildConfig
from fo4_planner.engine.errors import InvalidTarget, OutOfRange, RankOutOfRange
from fo4_planner.models.character import Character
from fo4_planner.models.constants import Attribute, Difficulty, Gender
from fo4_planner.models.derived_stats import CharacterStats, DerivedStats, compute_stats
from fo4_planner.models.game_settings import GameSettings
from fo4_planner.models.perk import PerkDef, PerkId


class BuildEngine:
    """Owns one Character and applies validated mutations to it.

    Consumes the catalog, GameSettings and BuildConfig without modifying
    any of them.
    """

    __slots__ = ("_state", "_catalog", "_gmst", "_config", "_derived")

    def __init__(
        self,
        catalog: PerkCatalog,
        gmst: GameSettings | None = None,
        config: BuildConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._gmst = gmst or GameSettings.defaults()
        self._config = config or BuildConfig()
        self._derived = DerivedStats(catalog, self._gmst, self._config)
        self._state = Character()

    # --- Factories ---------------------------------------------------------

    @classmethod
    def new_build(
        cls,
        catalog: PerkCatalog,
        gmst: GameSettings | None = None,
        config: BuildConfig | None = None,
    ) -> BuildEngine:
        """Create an engine holding a fresh build."""
        return cls(catalog, gmst, config)

    @classmethod
    def from_character(
        cls,
        character: Character,
        catalog: PerkCatalog,
        gmst: GameSettings | None = None,
        config: BuildConfig | None = None,
    ) -> BuildEngine:
        """Wrap a copy of an existing Character (re-validated via its snapshot)."""
        return cls.from_snapshot(snapshot.to_snapshot(character), catalog, gmst, config)

    @classmethod
    def from_snapshot(
        cls,
        payload: Mapping[str, Any],
        catalog: PerkCatalog,
        gmst: GameSettings | None = None,
        config: BuildConfig | None = None,
    ) -> BuildEngine:
        """Restore an engine from a saved snapshot; raises SnapshotError."""
        engine = cls(catalog, gmst, config)
        engine._state = snapshot.from_snapshot(payload, catalog, engine._config)
        return engine

    def copy(self) -> BuildEngine:
        """Deep-copy the engine for speculative changes."""
        clone = BuildEngine.__new__(BuildEngine)
        clone._catalog = self._catalog
        clone._gmst = self._gmst
        clone._config = self._config
        clone._derived = self._derived
        clone._state = copy.deepcopy(self._state)
        return clone

    # --- State -------------------------------------------------------------

    @property
    def state(self) -> Character:
        """Return a deep copy of the current build."""
        return copy.deepcopy(self._state)

    @property
    def catalog(self) -> PerkCatalog:
        return self._catalog

    @property
    def config(self) -> BuildConfig:
        return self._config

    @property
    def derived(self) -> DerivedStats:
        return self._derived

    def to_snapshot(self) -> snapshot.Snapshot:
        return snapshot.to_snapshot(self._state)

    # --- Metadata ----------------------------------------------------------

    def set_name(self, name: str | None) -> None:
        if name is not None:
            name = name.strip()
            if not name:
                raise ValueError("A build name cannot be empty")
        self._state.name = name

    def set_gender(self, gender: Gender | None) -> None:
        self._state.gender = gender

    def set_difficulty(self, difficulty: Difficulty | None) -> None:
        self._state.difficulty = difficulty

    # --- Attributes --------------------------------------------------------

    def set_attribute(self, attribute: Attribute, value: int) -> None:
        """Set the raw points of *attribute*.

        The bobblehead shorthand value (11) sets 10 points and also grants
        the attribute's bobblehead.
        """
        attribute = Attribute(attribute)
        cfg = self._config
        if value > cfg.bobblehead_shorthand:
            raise OutOfRange(
                f"Cannot allocate more than {cfg.attribute_max} points to any "
                f"S.P.E.C.I.A.L. stat"
            )
        if value < cfg.attribute_min:
            raise OutOfRange(
                f"S.P.E.C.I.A.L. stats cannot be less than {cfg.attribute_min}"
            )
        bobblehead: PerkId | None = None
        if value > cfg.attribute_max:
            bobblehead = self._catalog.bobblehead_for(attribute)
            value = cfg.attribute_max

        self._state.attributes[attribute] = value
        if bobblehead is not None:
            self._state.perks[bobblehead] = 1
        self._remove_invalid_perks()

    def set_attribute_book(self, attribute: Attribute | None) -> None:
        """Aim the S.P.E.C.I.A.L. book at *attribute*, or clear it with None."""
        if attribute is not None:
            attribute = Attribute(attribute)
            if self._state.attributes[attribute] >= self._config.attribute_max:
                raise InvalidTarget(
                    "The S.P.E.C.I.A.L. book cannot be used on a maxed-out stat"
                )
        self._state.attribute_book = attribute
        self._remove_invalid_perks()

    # --- Perks -------------------------------------------------------------

    def add_perk(self, definition: PerkDef, rank: int) -> None:
        """Hold *definition* at exactly *rank*; rank 0 removes it.

        Adding a SPECIAL perk raises its attribute's raw points, one at a
        time, until the perk's tier is reached.
        """
        perk_id = self._catalog.lookup_by_definition(definition)
        definition = self._catalog.lookup_by_identity(perk_id)
        if rank == 0:
            self.remove_perk(definition)
            return
        if rank < 0:
            raise OutOfRange(f"Perk rank cannot be negative, got {rank}")
        if rank > definition.max_rank:
            raise RankOutOfRange(
                definition.display_name(self._state.gender), rank, definition.max_rank
            )

        self._state.perks[perk_id] = rank
        if perk_id.is_special:
            attribute = perk_id.attribute
            while self._derived.total_base_points(self._state, attribute) < perk_id.tier:
                self._state.attributes[attribute] += 1

    def add_perk_by_id(self, perk_id: PerkId, rank: int) -> None:
        self.add_perk(self._catalog.lookup_by_identity(perk_id), rank)

    def remove_perk(self, definition: PerkDef) -> None:
        """Drop *definition*; not holding it is a no-op."""
        perk_id = self._catalog.lookup_by_definition(definition)
        if self._state.perks.pop(perk_id, None) is not None:
            self._remove_invalid_perks()

    def rank_of(self, definition: PerkDef) -> int:
        return self._state.rank_of(self._catalog.lookup_by_definition(definition))

    def reset(self) -> None:
        """Start over, keeping the build's name and difficulty."""
        self._state = Character(
            name=self._state.name,
            difficulty=self._state.difficulty,
        )

    def _remove_invalid_perks(self) -> None:
        """Drop SPECIAL perks whose tier exceeds their attribute's base points."""
        invalid = [
            perk_id for perk_id in self._state.perks
            if perk_id.is_special
            and self._derived.total_base_points(self._state, perk_id.attribute) < perk_id.tier
        ]
        for perk_id in invalid:
            del self._state.perks[perk_id]

    # --- Queries -----------------------------------------------------------

    def stats(self) -> CharacterStats:
        return compute_stats(self._state, self._catalog, self._gmst, self._config)

    def total_base_points(self, attribute: Attribute) -> int:
        return self._derived.total_base_points(self._state, attribute)

    def total_points(self, attribute: Attribute) -> int:
        return self._derived.total_points(self._state, attribute)

    def remaining_initial_points(self) -> int:
        return self._derived.remaining_initial_points(self._state)

    def required_level(self) -> int:
        return self._derived.required_level(self._state)

    def is_perk_available(self, perk_id: PerkId) -> bool:
        """True when a SPECIAL perk's tier is already unlocked."""
        if not perk_id.is_special:
            return True
        return self.total_base_points(perk_id.attribute) >= perk_id.tier
