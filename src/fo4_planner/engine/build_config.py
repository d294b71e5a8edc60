"""Configuration knobs for the build engine.

Defaults match vanilla Fallout 4: every attribute starts at 1 and the
player distributes 21 more points at creation.
"""

from dataclasses import dataclass


@dataclass(slots=True)
class BuildConfig:
    """Tuneable parameters that aren't part of the stat formulas."""

    initial_assignable_points: int = 21  # Points to spend at creation
    attribute_min: int = 1
    attribute_max: int = 10
    bobblehead_shorthand: int = 11       # "set luck 11" = 10 + Luck bobblehead
    match_threshold: float = 0.6         # Minimum fuzzy score for text input
