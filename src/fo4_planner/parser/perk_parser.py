"""Parse the bundled perk dataset into (PerkId, PerkDef) pairs.

Dataset layout (JSON):

  special      {attribute: [perk x 10]}    tier = list position + 1
  bobbleheads  {attribute-or-skill: perk}  always a single rank
  magazines    {slug: perk}
  companions   {slug: perk}
  factions     {slug: perk}
  other        {slug: perk}

A perk is {"name": NAME, "ranks": RANKS}. NAME is a string or
{"male": ..., "female": ...}. RANKS takes one of three shapes:

  [{"level": 1, "description": ..., <effects>}, ...]   VaryingRanks
  {"count": 3, "description": ..., <effects>}          UniformRanks
  {"description": ..., <effects>}                      SingleRank

Bobbleheads may put description and effects directly on the perk object
instead of under "ranks". Descriptions may vary by gender and by
{"normal": ..., "survival": ...}.
"""

from fo4_planner.data.errors import DataValidationError
from fo4_planner.models.constants import ATTRIBUTE_BY_SLUG, Attribute, PerkKind
from fo4_planner.models.perk import (
    Description,
    Difficultied,
    Gendered,
    Name,
    PerkDef,
    PerkId,
    Rank,
    RankStructure,
    SingleRank,
    UniformRanks,
    VaryingRanks,
)
from fo4_planner.parser.effect_parser import parse_effects


# Dataset section -> perk kind for the flat (non-tiered) sections.
FLAT_SECTIONS: dict[str, PerkKind] = {
    "bobbleheads": PerkKind.BOBBLEHEAD,
    "magazines": PerkKind.MAGAZINE,
    "companions": PerkKind.COMPANION,
    "factions": PerkKind.FACTION,
    "other": PerkKind.OTHER,
}

_RANK_KEYS = frozenset({"description", "desc", "level", "required_level", "count"})
_PERK_KEYS = frozenset({"name", "ranks"})


def _require_mapping(value: object, context: str) -> dict:
    if not isinstance(value, dict):
        raise DataValidationError(f"{context} must be an object/dict.")
    return value


def _require_text(value: object, context: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise DataValidationError(f"{context} must be a non-empty string.")
    return value


def _require_positive_int(value: object, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise DataValidationError(f"{context} must be a positive integer, got {value!r}")
    return value


def parse_gendered(raw: object, context: str) -> str | Gendered:
    if isinstance(raw, dict):
        if set(raw) != {"male", "female"}:
            raise DataValidationError(f"{context} must have exactly 'male' and 'female'.")
        return Gendered(
            male=_require_text(raw["male"], f"{context}.male"),
            female=_require_text(raw["female"], f"{context}.female"),
        )
    return _require_text(raw, context)


def parse_name(raw: object, context: str) -> Name:
    return parse_gendered(raw, f"{context}.name")


def parse_description(raw: object, context: str) -> Description:
    if isinstance(raw, dict) and set(raw) == {"normal", "survival"}:
        return Difficultied(
            normal=parse_gendered(raw["normal"], f"{context}.normal"),
            survival=parse_gendered(raw["survival"], f"{context}.survival"),
        )
    return parse_gendered(raw, context)


def _rank_description(raw: dict, context: str) -> Description:
    if "description" in raw:
        return parse_description(raw["description"], f"{context}.description")
    if "desc" in raw:
        return parse_description(raw["desc"], f"{context}.desc")
    raise DataValidationError(f"{context} is missing a description.")


def parse_rank(raw: object, context: str) -> Rank:
    entry = _require_mapping(raw, context)
    level = entry.get("required_level", entry.get("level", 1))
    return Rank(
        description=_rank_description(entry, context),
        required_level=_require_positive_int(level, f"{context}.level"),
        effects=parse_effects(entry, context, _RANK_KEYS),
    )


def parse_rank_structure(raw: object, context: str) -> RankStructure:
    """Pick the rank structure from the shape of *raw*."""
    if isinstance(raw, list):
        if not raw:
            raise DataValidationError(f"{context} must list at least one rank.")
        ranks = tuple(parse_rank(r, f"{context}[{i}]") for i, r in enumerate(raw))
        levels = [r.required_level for r in ranks]
        if levels != sorted(levels):
            raise DataValidationError(f"{context} rank levels must be non-decreasing.")
        return VaryingRanks(ranks=ranks)

    entry = _require_mapping(raw, context)
    if "level" in entry or "required_level" in entry:
        raise DataValidationError(f"{context}: only listed ranks may set a level.")
    description = _rank_description(entry, context)
    effects = parse_effects(entry, context, _RANK_KEYS)
    if "count" in entry:
        return UniformRanks(
            count=_require_positive_int(entry["count"], f"{context}.count"),
            description=description,
            effects=effects,
        )
    return SingleRank(description=description, effects=effects)


def parse_perk(raw: object, context: str, *, inline_ranks: bool = False) -> PerkDef:
    """Parse one perk object.

    With *inline_ranks*, a perk without a "ranks" key is read as a single
    rank whose description and effects sit next to the name.
    """
    entry = _require_mapping(raw, context)
    if "name" not in entry:
        raise DataValidationError(f"{context} is missing a name.")
    name = parse_name(entry["name"], context)
    if "ranks" in entry:
        extra = set(entry) - _PERK_KEYS
        if extra:
            raise DataValidationError(f"{context}: unexpected keys {sorted(extra)}")
        ranks = parse_rank_structure(entry["ranks"], f"{context}.ranks")
    elif inline_ranks:
        inline = {k: v for k, v in entry.items() if k != "name"}
        ranks = parse_rank_structure(inline, context)
        if not isinstance(ranks, SingleRank):
            raise DataValidationError(f"{context}: inline ranks must be a single rank.")
    else:
        raise DataValidationError(f"{context} is missing ranks.")
    return PerkDef(name=name, ranks=ranks)


def parse_special_section(raw: object) -> list[tuple[PerkId, PerkDef]]:
    """Parse {attribute: [10 perks]} into tiered SPECIAL perks."""
    section = _require_mapping(raw, "special")
    missing = [a.slug for a in Attribute if a.slug not in section]
    if missing:
        raise DataValidationError(f"special is missing attributes: {missing}")
    out: list[tuple[PerkId, PerkDef]] = []
    for slug, perks in section.items():
        attribute = ATTRIBUTE_BY_SLUG.get(slug)
        if attribute is None:
            raise DataValidationError(f"special: unknown attribute {slug!r}")
        if not isinstance(perks, list) or len(perks) != 10:
            raise DataValidationError(f"special.{slug} must list exactly 10 perks.")
        for i, perk in enumerate(perks):
            tier = i + 1
            out.append((
                PerkId.special(attribute, tier),
                parse_perk(perk, f"special.{slug}[{i}]"),
            ))
    return out


def parse_flat_section(name: str, raw: object) -> list[tuple[PerkId, PerkDef]]:
    """Parse a {slug: perk} section of the given kind."""
    kind = FLAT_SECTIONS[name]
    section = _require_mapping(raw, name)
    out: list[tuple[PerkId, PerkDef]] = []
    for slug, perk in section.items():
        if not isinstance(slug, str) or not slug or "/" in slug:
            raise DataValidationError(f"{name}: invalid key {slug!r}")
        perk_id = PerkId(kind, slug)
        definition = parse_perk(
            perk, f"{name}.{slug}", inline_ranks=(kind == PerkKind.BOBBLEHEAD)
        )
        if kind == PerkKind.BOBBLEHEAD and not isinstance(definition.ranks, SingleRank):
            raise DataValidationError(f"{name}.{slug} must have a single rank.")
        out.append((perk_id, definition))
    return out


def parse_dataset(raw: object) -> list[tuple[PerkId, PerkDef]]:
    """Parse the whole dataset, SPECIAL section first."""
    data = _require_mapping(raw, "dataset")
    unknown = set(data) - {"special"} - set(FLAT_SECTIONS)
    if unknown:
        raise DataValidationError(f"dataset: unknown sections {sorted(unknown)}")
    if "special" not in data:
        raise DataValidationError("dataset is missing the special section.")
    entries = parse_special_section(data["special"])
    for name in FLAT_SECTIONS:
        if name in data:
            entries.extend(parse_flat_section(name, data[name]))
    return entries
