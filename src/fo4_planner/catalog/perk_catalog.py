"""Read-only perk catalog: a bidirectional PerkId <-> PerkDef table.

Built once from the bundled dataset by the entry point and passed to every
component that needs it. Nothing mutates a catalog after build().

Invariants checked at build time (violations raise DataValidationError):
  - every attribute has SPECIAL perks for tiers 1..10
  - every attribute has a bobblehead
  - no two entries share an id, and no two perks share a name variant
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from fo4_planner.catalog import resolver
from fo4_planner.data import paths
from fo4_planner.data.errors import DataValidationError
from fo4_planner.data.json_loader import read_dataset
from fo4_planner.engine.errors import UnknownPerk
from fo4_planner.models.constants import PERK_TIERS, Attribute, PerkKind
from fo4_planner.models.perk import PerkDef, PerkId
from fo4_planner.parser.perk_parser import parse_dataset

logger = logging.getLogger(__name__)


class PerkCatalog:
    """Immutable bidirectional map between perk identities and definitions."""

    __slots__ = ("_by_id", "_by_def", "_definitions")

    def __init__(self, by_id: dict[PerkId, PerkDef]) -> None:
        self._by_id = dict(sorted(by_id.items()))
        self._by_def = {d: perk_id for perk_id, d in self._by_id.items()}
        self._definitions = tuple(self._by_id.values())

    # --- Factories ---------------------------------------------------------

    @classmethod
    def build(cls, entries: Iterable[tuple[PerkId, PerkDef]]) -> PerkCatalog:
        """Merge parsed entries into a catalog, validating its invariants."""
        by_id: dict[PerkId, PerkDef] = {}
        owner_by_name: dict[str, PerkId] = {}
        for perk_id, definition in entries:
            if perk_id in by_id:
                raise DataValidationError(f"Duplicate perk id: {perk_id}")
            if definition.max_rank < 1:
                raise DataValidationError(f"{perk_id} must have at least one rank")
            for name in definition.names():
                folded = name.lower()
                if folded in owner_by_name:
                    raise DataValidationError(
                        f"Duplicate perk name {name!r} ({owner_by_name[folded]} and {perk_id})"
                    )
                owner_by_name[folded] = perk_id
            by_id[perk_id] = definition

        for attribute in Attribute:
            missing = [t for t in PERK_TIERS if PerkId.special(attribute, t) not in by_id]
            if missing:
                raise DataValidationError(
                    f"{attribute.display_name} is missing perks for tiers {missing}"
                )
            if PerkId.bobblehead(attribute) not in by_id:
                raise DataValidationError(f"{attribute.display_name} has no bobblehead")

        return cls(by_id)

    @classmethod
    def load(cls, path: Path | str | None = None) -> PerkCatalog:
        """Load and validate the perk dataset (the bundled one by default)."""
        file_path = paths.get_perks_path(path)
        catalog = cls.build(parse_dataset(read_dataset(file_path)))
        logger.debug("Loaded %d perks from %s", len(catalog), file_path)
        return catalog

    # --- Lookups -----------------------------------------------------------

    def lookup_by_identity(self, perk_id: PerkId) -> PerkDef:
        try:
            return self._by_id[perk_id]
        except KeyError as exc:
            raise UnknownPerk(f"Unknown perk: {perk_id}") from exc

    def lookup_by_definition(self, definition: PerkDef) -> PerkId:
        try:
            return self._by_def[definition]
        except (KeyError, TypeError) as exc:
            raise UnknownPerk(f"Unknown perk: {definition!r}") from exc

    def get(self, perk_id: PerkId) -> PerkDef | None:
        return self._by_id.get(perk_id)

    def special_perk(self, attribute: Attribute, tier: int) -> PerkDef:
        return self.lookup_by_identity(PerkId.special(attribute, tier))

    def bobblehead_for(self, attribute: Attribute) -> PerkId:
        """Identity of the bobblehead that adds +1 to *attribute*."""
        perk_id = PerkId.bobblehead(attribute)
        if perk_id not in self._by_id:
            raise UnknownPerk(f"No bobblehead for {attribute.display_name}")
        return perk_id

    def items(self, kind: PerkKind | None = None) -> list[tuple[PerkId, PerkDef]]:
        """(id, definition) pairs in PerkId order, optionally of one kind."""
        return [
            (perk_id, d) for perk_id, d in self._by_id.items()
            if kind is None or perk_id.kind == kind
        ]

    def special_perks(self, attribute: Attribute) -> list[tuple[PerkId, PerkDef]]:
        """The ten tiered perks of *attribute*, tier 1 first."""
        ids = [PerkId.special(attribute, t) for t in PERK_TIERS]
        return [(perk_id, self._by_id[perk_id]) for perk_id in ids]

    def definitions(self) -> tuple[PerkDef, ...]:
        """All definitions in PerkId order; fuzzy ties go to the earliest."""
        return self._definitions

    # --- Text resolution ---------------------------------------------------

    def resolve_perk_text(
        self, text: str, threshold: float = resolver.MATCH_THRESHOLD
    ) -> PerkDef:
        return resolver.resolve_perk_text(self._definitions, text, threshold)

    def resolve_perk_and_rank(
        self, tokens, threshold: float = resolver.MATCH_THRESHOLD
    ) -> tuple[PerkDef, int | None]:
        return resolver.resolve_perk_and_rank(self._definitions, tokens, threshold)

    # --- Container protocol ------------------------------------------------

    def __contains__(self, perk_id: object) -> bool:
        return perk_id in self._by_id

    def __iter__(self) -> Iterator[PerkId]:
        return iter(self._by_id)

    def __len__(self) -> int:
        return len(self._by_id)
