"""Planner exceptions.

All of these are recoverable: the REPL reports the message and keeps the
build as it was before the failed command. They subclass ValueError so
callers that only care about "bad input" can catch that.
"""


class PlannerError(ValueError):
    """Base exception for build planning errors."""


class OutOfRange(PlannerError):
    """An attribute value outside 1..10 (11 being the bobblehead shorthand)."""


class RankOutOfRange(PlannerError):
    """A perk rank above the perk's maximum."""

    def __init__(self, perk_name: str, rank: int, max_rank: int) -> None:
        self.perk_name = perk_name
        self.rank = rank
        self.max_rank = max_rank
        noun = "rank" if max_rank == 1 else "ranks"
        super().__init__(f"{perk_name} only has {max_rank} {noun}")


class UnknownPerk(PlannerError):
    """A perk identity or definition that is not in the catalog."""


class NoMatch(PlannerError):
    """Free text that did not resolve to anything with enough confidence."""

    def __init__(self, query: str, what: str = "perk") -> None:
        self.query = query
        self.what = what
        super().__init__(f"Unknown {what}: {query}")


class InvalidTarget(PlannerError):
    """The S.P.E.C.I.A.L. book aimed at an attribute that is already maxed."""


class SnapshotError(PlannerError):
    """A build snapshot that cannot be decoded into a valid build."""
