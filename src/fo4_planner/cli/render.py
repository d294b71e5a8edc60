"""Terminal rendering for the planner REPL.

Every formatter returns a string; the REPL decides when to print. Colors
come from colorama and are switched off entirely by a disabled Palette.
"""
from __future__ import annotations

import shutil
import textwrap

from colorama import Fore, Style

from fo4_planner.engine.build_engine import BuildEngine
from fo4_planner.models.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_GENDER,
    PERK_KIND_TITLES,
    PERK_TIERS,
    Attribute,
    PerkKind,
)
from fo4_planner.models.perk import PerkDef, PerkId, text_for

CLEAR_SCREEN = "\x1b[2J"
DEFAULT_WIDTH = 80


class Palette:
    """Wraps text in ANSI colors, or returns it untouched when disabled."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def paint(self, text: str, color: str) -> str:
        if not self.enabled or not text:
            return text
        return f"{color}{text}{Style.RESET_ALL}"

    def red(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTRED_EX)

    def green(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTGREEN_EX)

    def blue(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTBLUE_EX)

    def yellow(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTYELLOW_EX)

    def magenta(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTMAGENTA_EX)

    def grey(self, text: str) -> str:
        return self.paint(text, Fore.LIGHTBLACK_EX)


def terminal_width() -> int:
    return shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns


def format_number(value: float) -> str:
    """80.0 -> '80', 92.5 -> '92.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def percent(value: float) -> str:
    return f"{value * 100:.0f}%"


def wrap_description(text: str, width: int, indent: str = "  ") -> list[str]:
    """Word-wrap *text*, keeping its explicit line breaks."""
    lines: list[str] = []
    for paragraph in text.splitlines() or [""]:
        wrapped = textwrap.wrap(
            paragraph,
            width=max(width - 1, len(indent) + 10),
            initial_indent=indent,
            subsequent_indent=indent,
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [indent.rstrip()])
    return lines


# ---------------------------------------------------------------------------
# Build summary
# ---------------------------------------------------------------------------


def points_string(engine: BuildEngine, attribute: Attribute) -> str:
    """'7 + bobblehead + S.P.E.C.I.A.L. book' style allocation text."""
    state = engine.state
    text = str(state.attributes[attribute])
    if engine.derived.has_bobblehead(state, attribute):
        text += " + bobblehead"
    if state.attribute_book == attribute:
        text += " + S.P.E.C.I.A.L. book"
    return text


def _points_color(points: int) -> str:
    if points <= 1:
        return Fore.LIGHTBLACK_EX
    if points <= 3:
        return Fore.LIGHTYELLOW_EX
    if points <= 6:
        return Fore.LIGHTGREEN_EX
    if points <= 8:
        return Fore.LIGHTCYAN_EX
    if points <= 10:
        return Fore.LIGHTBLUE_EX
    return Fore.LIGHTMAGENTA_EX


def format_build(engine: BuildEngine, palette: Palette, show_sheet: bool = False) -> str:
    state = engine.state
    stats = engine.stats()
    lines: list[str] = []

    if state.name:
        bars = "-" * len(state.name)
        lines += [bars, state.name, bars]
    if state.difficulty is not None:
        lines.append(state.difficulty.display_name)
    if state.gender is not None:
        lines.append(f"Gender: {state.gender.display_name}")
    lines.append(f"Required Level: {stats.required_level}")
    if stats.remaining_initial_points > 0:
        lines.append(f"Remaining Points: {stats.remaining_initial_points}")
    lines.append(
        palette.red(f"Base Health: {format_number(stats.health)}")
        + " "
        + palette.grey(
            f"({format_number(stats.base_health)} + "
            f"{format_number(stats.health_per_level)}/lvl)"
        )
    )
    lines.append(palette.blue(f"Base AP: {format_number(stats.action_points)}"))
    lines.append(palette.green(f"{percent(stats.experience_multiplier)} XP"))
    lines.append(palette.magenta(f"Melee Damage: {percent(stats.melee_damage_multiplier)}"))
    lines.append(palette.yellow(f"Hits per Crit: {stats.hits_per_crit}"))
    lines.append(f"Carry Weight: {stats.carry_weight}")
    lines.append(
        f"Buy Prices: {percent(stats.buying_price_multiplier)} / "
        f"Sell Prices: {percent(stats.selling_price_multiplier)}"
    )
    lines.append(f"Sprint Time: {stats.sprint_time:.1f} s")
    if stats.damage_resistance or stats.energy_resistance or stats.rad_resistance:
        lines.append(
            f"Damage Resist: {format_number(stats.damage_resistance)} / "
            f"Energy Resist: {format_number(stats.energy_resistance)} / "
            f"Rad Resist: {format_number(stats.rad_resistance)}"
        )
    lines.append("")

    for attribute in Attribute:
        color = _points_color(stats.base_points[attribute])
        lines.append(
            f"{attribute.display_name:>12} "
            + palette.paint(points_string(engine, attribute), color)
        )

    if show_sheet:
        lines.append("")
        lines.extend(format_sheet(engine, palette))

    perk_lines = _held_perk_lines(engine, palette, show_sheet)
    if perk_lines:
        lines.append("")
        lines.extend(perk_lines)
    return "\n".join(lines) + "\n"


def _held_perk_lines(engine: BuildEngine, palette: Palette, show_sheet: bool) -> list[str]:
    """Held perks grouped under their attribute or kind; bobbleheads are shown as points."""
    state = engine.state
    lines: list[str] = []
    last_group = None
    for perk_id, rank in state.held_perks():
        if perk_id.kind == PerkKind.BOBBLEHEAD and perk_id.attribute is not None:
            continue
        if show_sheet and perk_id.is_special:
            continue
        group = (perk_id.kind, perk_id.attribute if perk_id.is_special else None)
        if group != last_group:
            title = (
                perk_id.attribute.display_name if perk_id.is_special
                else PERK_KIND_TITLES[perk_id.kind]
            )
            lines.append(palette.yellow(title))
            last_group = group
        definition = engine.catalog.lookup_by_identity(perk_id)
        name = definition.display_name(state.gender)
        lines.append(f"  {name} {rank}" if definition.max_rank > 1 else f"  {name}")
    return lines


def _column_width(engine: BuildEngine, attribute: Attribute) -> int:
    state = engine.state
    return max(
        len(definition.display_name(state.gender)) + (2 if perk_id in state.perks else 0)
        for perk_id, definition in engine.catalog.special_perks(attribute)
    )


def format_sheet(engine: BuildEngine, palette: Palette) -> list[str]:
    """The 10 x 7 grid of SPECIAL perks, held ones highlighted with their rank."""
    state = engine.state
    widths = {a: max(_column_width(engine, a), len(a.display_name)) for a in Attribute}
    lines = [
        "│".join(f"{a.display_name:<{widths[a]}}" for a in Attribute),
        "┼".join("─" * widths[a] for a in Attribute),
    ]
    for tier in PERK_TIERS:
        cells = []
        for attribute in Attribute:
            perk_id = PerkId.special(attribute, tier)
            definition = engine.catalog.lookup_by_identity(perk_id)
            text = definition.display_name(state.gender)
            rank = state.rank_of(perk_id)
            if rank:
                text = f"{text} {rank}"
                color = Fore.CYAN
            elif engine.total_points(attribute) >= tier:
                color = Fore.WHITE
            else:
                color = Fore.LIGHTBLACK_EX
            cells.append(palette.paint(f"{text:<{widths[attribute]}}", color))
        lines.append("│".join(cells))
    return lines


# ---------------------------------------------------------------------------
# Catalog listings
# ---------------------------------------------------------------------------


def format_special(engine: BuildEngine, attribute: Attribute, palette: Palette) -> str:
    """One attribute's ten perks, unlocked ones in white and held ones ranked."""
    state = engine.state
    base = engine.total_base_points(attribute)
    lines = [f"{palette.yellow(attribute.display_name)} ({points_string(engine, attribute)})"]
    for perk_id, definition in engine.catalog.special_perks(attribute):
        rank = state.rank_of(perk_id)
        if perk_id.tier > base:
            color = Fore.LIGHTBLACK_EX
        elif rank:
            color = Fore.LIGHTWHITE_EX
        else:
            color = Fore.WHITE
        name = palette.paint(definition.display_name(state.gender), color)
        suffix = f" ({rank})" if rank else ""
        lines.append(f"{perk_id.tier:2}: {name}{suffix}")
    return "\n".join(lines) + "\n"


def format_perk_names(engine: BuildEngine, kind: PerkKind, palette: Palette) -> str:
    """Every perk of *kind*; held ones in white, the rest greyed out."""
    state = engine.state
    lines = [palette.yellow(PERK_KIND_TITLES[kind])]
    for perk_id, definition in engine.catalog.items(kind):
        color = Fore.WHITE if perk_id in state.perks else Fore.LIGHTBLACK_EX
        lines.append("  " + palette.paint(definition.display_name(state.gender), color))
    return "\n".join(lines) + "\n"


def format_perk(
    engine: BuildEngine,
    definition: PerkDef,
    palette: Palette,
    width: int | None = None,
) -> str:
    """A perk's name, held rank and the description of every rank."""
    state = engine.state
    width = width or terminal_width()
    gender = state.gender or DEFAULT_GENDER
    difficulty = state.difficulty or DEFAULT_DIFFICULTY
    my_rank = engine.rank_of(definition)

    header = palette.yellow(definition.display_name(gender))
    if definition.max_rank > 1:
        header += " " + palette.grey(f"({my_rank}/{definition.max_rank})")
    lines = [header]
    for index, required_level, description in definition.ranks.rank_texts():
        held = index is not None and my_rank >= index
        if index is not None:
            rank_line = palette.paint(
                f"Rank {index}", Fore.LIGHTCYAN_EX if held else Fore.CYAN
            )
            if required_level > 1:
                rank_line += palette.grey(f" (Level {required_level})")
            lines.append(rank_line)
        desc_color = Fore.LIGHTWHITE_EX if held else Fore.WHITE
        text = text_for(description, gender, difficulty)
        lines.extend(palette.paint(line, desc_color) for line in wrap_description(text, width))
    return "\n".join(lines) + "\n"
