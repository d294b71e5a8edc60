"""Convert a Character to and from a JSON-serializable snapshot.

Snapshot shape:

  {
    "name": "Nora",                        omitted when unset
    "gender": "female",                    omitted when unset
    "difficulty": "survival",              omitted when unset
    "attributes": {"strength": 3, ...},    always present, all seven
    "attribute_book": "luck",              omitted when unset
    "perks": {"special/strength/3": 2}     omitted when empty
  }

Decoding validates everything it reads against the catalog, so a decoded
Character satisfies the same invariants as one built through BuildEngine.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from fo4_planner.catalog.perk_catalog import PerkCatalog
from fo4_planner.engine.build_config import BuildConfig
from fo4_planner.engine.errors import SnapshotError
from fo4_planner.models.character import Character
from fo4_planner.models.constants import ATTRIBUTE_BY_SLUG, Attribute, Difficulty, Gender
from fo4_planner.models.derived_stats import DerivedStats
from fo4_planner.models.perk import PerkId

Snapshot = Dict[str, Any]

_KEYS = frozenset({"name", "gender", "difficulty", "attributes", "attribute_book", "perks"})


def to_snapshot(character: Character) -> Snapshot:
    """Return a JSON-serializable payload for *character*."""
    payload: Snapshot = {}
    if character.name is not None:
        payload["name"] = character.name
    if character.gender is not None:
        payload["gender"] = character.gender.value
    if character.difficulty is not None:
        payload["difficulty"] = character.difficulty.value
    payload["attributes"] = {a.slug: character.attributes[a] for a in Attribute}
    if character.attribute_book is not None:
        payload["attribute_book"] = character.attribute_book.slug
    if character.perks:
        payload["perks"] = {str(perk_id): rank for perk_id, rank in character.held_perks()}
    return payload


def from_snapshot(
    payload: Mapping[str, Any],
    catalog: PerkCatalog,
    config: BuildConfig | None = None,
) -> Character:
    """Rebuild a Character from *payload* or raise SnapshotError."""
    config = config or BuildConfig()
    if not isinstance(payload, Mapping):
        raise SnapshotError("Build data must be a JSON object.")
    unknown = set(payload) - _KEYS
    if unknown:
        raise SnapshotError(f"Build data has unknown keys: {sorted(unknown)}")

    character = Character()
    if payload.get("name") is not None:
        character.name = _require_str(payload["name"], "name")
    if payload.get("gender") is not None:
        character.gender = _require_enum(Gender, payload["gender"], "gender")
    if payload.get("difficulty") is not None:
        character.difficulty = _require_enum(Difficulty, payload["difficulty"], "difficulty")
    character.attributes = _parse_attributes(payload.get("attributes"), config)
    if payload.get("attribute_book") is not None:
        character.attribute_book = _require_attribute(
            payload["attribute_book"], "attribute_book"
        )
    character.perks = _parse_perks(payload.get("perks", {}), catalog)
    _check_tiers(character, DerivedStats(catalog, config=config))
    return character


def _require_str(value: Any, context: str) -> str:
    if not isinstance(value, str):
        raise SnapshotError(f"{context} must be a string.")
    return value


def _require_int(value: Any, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotError(f"{context} must be an integer.")
    return value


def _require_enum(enum_cls, value: Any, context: str):
    try:
        return enum_cls(_require_str(value, context))
    except ValueError as exc:
        raise SnapshotError(f"{context} has unknown value {value!r}") from exc


def _require_attribute(value: Any, context: str) -> Attribute:
    attribute = ATTRIBUTE_BY_SLUG.get(_require_str(value, context))
    if attribute is None:
        raise SnapshotError(f"{context} has unknown S.P.E.C.I.A.L. stat {value!r}")
    return attribute


def _parse_attributes(raw: Any, config: BuildConfig) -> dict[Attribute, int]:
    if not isinstance(raw, Mapping):
        raise SnapshotError("attributes must be an object.")
    attributes: dict[Attribute, int] = {}
    for key, value in raw.items():
        attribute = _require_attribute(key, "attributes")
        points = _require_int(value, f"attributes.{key}")
        if not config.attribute_min <= points <= config.attribute_max:
            raise SnapshotError(
                f"attributes.{key} must be between {config.attribute_min} "
                f"and {config.attribute_max}, got {points}"
            )
        attributes[attribute] = points
    missing = [a.slug for a in Attribute if a not in attributes]
    if missing:
        raise SnapshotError(f"attributes is missing {missing}")
    return {a: attributes[a] for a in Attribute}


def _parse_perks(raw: Any, catalog: PerkCatalog) -> dict[PerkId, int]:
    if not isinstance(raw, Mapping):
        raise SnapshotError("perks must be an object.")
    perks: dict[PerkId, int] = {}
    for key, value in raw.items():
        try:
            perk_id = PerkId.parse(_require_str(key, "perks"))
        except ValueError as exc:
            raise SnapshotError(str(exc)) from exc
        definition = catalog.get(perk_id)
        if definition is None:
            raise SnapshotError(f"Unknown perk: {perk_id}")
        rank = _require_int(value, f"perks.{key}")
        if not 1 <= rank <= definition.max_rank:
            raise SnapshotError(
                f"{definition.display_name()} rank must be between 1 and "
                f"{definition.max_rank}, got {rank}"
            )
        perks[perk_id] = rank
    return dict(sorted(perks.items()))


def _check_tiers(character: Character, derived: DerivedStats) -> None:
    """Every held SPECIAL perk must be unlocked by its attribute's base points."""
    for perk_id in character.perks:
        if not perk_id.is_special:
            continue
        attribute = perk_id.attribute
        base = derived.total_base_points(character, attribute)
        if base < perk_id.tier:
            raise SnapshotError(
                f"{perk_id} needs {attribute.display_name} {perk_id.tier}, build has {base}"
            )
