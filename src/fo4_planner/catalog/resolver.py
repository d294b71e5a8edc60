"""Fuzzy resolution of user text into perks, attributes and difficulties.

Similarity of two strings is the mean of:
  - a blend over the whole strings, and
  - the best blend over any pair of single words,
where blend = (2 * Jaro-Winkler + normalized Levenshtein) / 3.

The word-pair half lets "nut" find "Gun Nut"; the whole-string half keeps
"gun nut" from tying with every other perk that contains "gun".
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence, TypeVar

from rapidfuzz.distance import JaroWinkler, Levenshtein

from fo4_planner.engine.errors import NoMatch
from fo4_planner.models.constants import (
    DIFFICULTY_NAMES,
    GENDER_SYNONYMS,
    Attribute,
    Difficulty,
    Gender,
)
from fo4_planner.models.perk import PerkDef

logger = logging.getLogger(__name__)

T = TypeVar("T")

MATCH_THRESHOLD = 0.6


def _blend(a: str, b: str) -> float:
    return (JaroWinkler.similarity(a, b) * 2.0 + Levenshtein.normalized_similarity(a, b)) / 3.0


def similarity(a: str, b: str) -> float:
    """Score two strings in [0, 1]; case-sensitive, callers lower-case first."""
    base = _blend(a, b)
    parts = max(
        (_blend(x, y) for x in a.split() for y in b.split()),
        default=0.0,
    )
    return (base + parts) / 2.0


def best_match(query: str, candidates: Iterable[tuple[str, T]]) -> tuple[T | None, float]:
    """Return the value whose text scores highest against *query*, and its score.

    The first candidate wins ties, so callers control tie-breaking through
    candidate order.
    """
    query = query.lower()
    best: T | None = None
    best_score = -1.0
    for text, value in candidates:
        score = similarity(query, text.lower())
        if score > best_score:
            best, best_score = value, score
    return best, best_score


def resolve(
    query: str,
    candidates: Iterable[tuple[str, T]],
    what: str,
    threshold: float = MATCH_THRESHOLD,
) -> T:
    """Resolve *query* against *candidates* or raise NoMatch."""
    value, score = best_match(query, candidates)
    logger.debug("Resolved %s %r -> %r (score %.3f)", what, query, value, score)
    if value is None or score < threshold:
        raise NoMatch(query, what)
    return value


def resolve_perk_text(
    definitions: Iterable[PerkDef],
    text: str,
    threshold: float = MATCH_THRESHOLD,
) -> PerkDef:
    """Resolve a perk name against every name variant of *definitions*."""
    candidates = ((name, d) for d in definitions for name in d.names())
    return resolve(text, candidates, "perk", threshold)


def resolve_perk_and_rank(
    definitions: Sequence[PerkDef],
    tokens: str | Sequence[str],
    threshold: float = MATCH_THRESHOLD,
) -> tuple[PerkDef, int | None]:
    """Resolve "gun nut 3" style input into (definition, explicit rank).

    A trailing integer is read as the rank when the words before it resolve
    on their own; otherwise the whole phrase is treated as a perk name.
    """
    if isinstance(tokens, str):
        tokens = tokens.split()
    tokens = [t for t in tokens if t]
    if not tokens:
        raise NoMatch("", "perk")
    if len(tokens) > 1:
        try:
            rank = int(tokens[-1])
        except ValueError:
            rank = None
        if rank is not None:
            try:
                return resolve_perk_text(definitions, " ".join(tokens[:-1]), threshold), rank
            except NoMatch:
                pass
    return resolve_perk_text(definitions, " ".join(tokens), threshold), None


def resolve_attribute_text(text: str, threshold: float = MATCH_THRESHOLD) -> Attribute:
    """Resolve an attribute by unambiguous prefix, then fuzzily."""
    lowered = text.strip().lower()
    if lowered:
        prefixed = [a for a in Attribute if a.display_name.lower().startswith(lowered)]
        if len(prefixed) == 1:
            return prefixed[0]
    candidates = ((a.display_name, a) for a in Attribute)
    return resolve(lowered, candidates, "S.P.E.C.I.A.L. stat", threshold)


def resolve_difficulty_text(text: str, threshold: float = MATCH_THRESHOLD) -> Difficulty:
    """Resolve a difficulty name ("survival", "very hard", "veryhard", ...)."""
    candidates: list[tuple[str, Difficulty]] = []
    for difficulty, name in DIFFICULTY_NAMES.items():
        candidates.append((name, difficulty))
        if " " in name:
            candidates.append((name.replace(" ", ""), difficulty))
    return resolve(text.strip(), candidates, "difficulty", threshold)


def resolve_gender_text(text: str) -> Gender:
    """Resolve a gender from a fixed synonym list; no fuzzy matching."""
    try:
        return GENDER_SYNONYMS[text.strip().lower()]
    except KeyError as exc:
        raise NoMatch(text, "gender") from exc
