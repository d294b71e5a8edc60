"""Interactive REPL for the build planner.

Each input line is split on whitespace and parsed with an argparse
sub-command parser that raises CommandError instead of exiting. A command
either changes the build (and reports a short message) or shows a view
under the build summary. Planner and storage errors are reported in red
and leave the build unchanged.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Callable, TextIO

from fo4_planner.catalog import resolver
from fo4_planner.catalog.perk_catalog import PerkCatalog
from fo4_planner.cli import render
from fo4_planner.engine.build_engine import BuildEngine
from fo4_planner.engine.errors import NoMatch
from fo4_planner.models.constants import Attribute, PerkKind
from fo4_planner.models.perk import PerkDef
from fo4_planner.storage.build_store import BuildStore, BuildStoreError

logger = logging.getLogger(__name__)

HELP_HINT = 'Type "help" for usage information'


class CommandError(Exception):
    """A REPL line that could not be parsed into a command."""


class _CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing and exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise CommandError(message)

    def exit(self, status: int = 0, message: str | None = None) -> None:  # type: ignore[override]
        raise CommandError(message or "")


@dataclass(slots=True)
class CommandResult:
    """Outcome of one REPL line."""

    message: str = ""
    is_error: bool = False
    view: str = ""          # Extra output shown below the build summary
    exit: bool = False


# (names, arguments, help) for every command, in help order.
COMMANDS: list[tuple[tuple[str, ...], str, str]] = [
    (("set",), "<STAT> <VALUE>", "Set a S.P.E.C.I.A.L. stat (11 adds its bobblehead)"),
    (("add",), "<PERK> [RANK]", "Add a perk by name and rank"),
    (("remove",), "<PERK>", "Remove a perk"),
    (("perk",), "<PERK>", "Display a perk"),
    (("special",), "[STAT]", "Display all perks for a S.P.E.C.I.A.L. stat(s)"),
    (("bobbleheads",), "", "Display all perk bobbleheads"),
    (("magazines",), "", "Display all perk magazines"),
    (("companions",), "", "Display all companion perks"),
    (("factions",), "", "Display all faction perks"),
    (("other-perks",), "", "Display all other perks"),
    (("reset",), "", "Reset the build"),
    (("name",), "<NAME>", "Set the build's name"),
    (("gender",), "<GENDER>", "Set the build's gender (affects perk names)"),
    (("book",), "[STAT]", "Set which stat to allocate the S.P.E.C.I.A.L. book to"),
    (("difficulty", "diff"), "<DIFFICULTY>", "Set the difficulty (affects carry weight)"),
    (("level-limit", "ll"), "[LEVEL]", "Limit the maximum required level for added perks"),
    (("sheet",), "", "Toggle the build sheet display"),
    (("save",), "[NAME]", "Save the build"),
    (("load",), "<PATH>", "Load a build"),
    (("builds",), "", "List saved builds"),
    (("help",), "", "Show this message"),
    (("exit", "quit"), "", "Exit this tool"),
]

_KIND_COMMANDS: dict[str, PerkKind] = {
    "bobbleheads": PerkKind.BOBBLEHEAD,
    "magazines": PerkKind.MAGAZINE,
    "companions": PerkKind.COMPANION,
    "factions": PerkKind.FACTION,
    "other-perks": PerkKind.OTHER,
}


def build_command_parser() -> argparse.ArgumentParser:
    parser = _CommandParser(prog="", add_help=False)
    sub = parser.add_subparsers(dest="command", parser_class=_CommandParser)

    def add(names: tuple[str, ...], help_text: str) -> argparse.ArgumentParser:
        return sub.add_parser(names[0], aliases=list(names[1:]), add_help=False, help=help_text)

    for names, _args, help_text in COMMANDS:
        cmd = add(names, help_text)
        command = names[0]
        if command == "set":
            cmd.add_argument("stat")
            cmd.add_argument("value", type=int)
        elif command in ("add", "remove", "perk", "gender", "difficulty", "load"):
            cmd.add_argument("words", nargs="+")
        elif command in ("name", "save"):
            cmd.add_argument("words", nargs="*")
        elif command in ("special", "book"):
            cmd.add_argument("stat", nargs="?")
        elif command == "level-limit":
            cmd.add_argument("level", nargs="?", type=int)
    return parser


def _canonical_commands() -> dict[str, str]:
    return {alias: names[0] for names, _args, _help in COMMANDS for alias in names}


def format_help() -> str:
    lines = ["COMMANDS:"]
    for names, args, help_text in COMMANDS:
        usage = " / ".join(names) + (f" {args}" if args else "")
        lines.append(f"    {usage:<34} {help_text}")
    return "\n".join(lines) + "\n"


class PlannerSession:
    """One interactive planning session: a build plus REPL-only settings."""

    def __init__(
        self,
        catalog: PerkCatalog,
        store: BuildStore | None = None,
        palette: render.Palette | None = None,
    ) -> None:
        self.catalog = catalog
        self.engine = BuildEngine.new_build(catalog)
        self.store = store or BuildStore()
        self.palette = palette or render.Palette(enabled=False)
        self.level_limit: int | None = None
        self.show_sheet = False
        self._parser = build_command_parser()
        self._aliases = _canonical_commands()
        self._handlers: dict[str, Callable[[argparse.Namespace], CommandResult]] = {
            "set": self._cmd_set,
            "add": self._cmd_add,
            "remove": self._cmd_remove,
            "perk": self._cmd_perk,
            "special": self._cmd_special,
            "reset": self._cmd_reset,
            "name": self._cmd_name,
            "gender": self._cmd_gender,
            "book": self._cmd_book,
            "difficulty": self._cmd_difficulty,
            "level-limit": self._cmd_level_limit,
            "sheet": self._cmd_sheet,
            "save": self._cmd_save,
            "load": self._cmd_load,
            "builds": self._cmd_builds,
            "help": lambda args: CommandResult(view=format_help()),
            "exit": lambda args: CommandResult(exit=True),
        }
        for command, kind in _KIND_COMMANDS.items():
            self._handlers[command] = self._kind_handler(kind)

    # --- Dispatch ----------------------------------------------------------

    def run_command(self, line: str) -> CommandResult:
        """Parse and execute one REPL line."""
        tokens = line.split()
        if not tokens:
            return CommandResult(message=HELP_HINT)
        command = self._aliases.get(tokens[0].lower())
        if command is None:
            return CommandResult(
                message=f"Unknown command: {tokens[0]}\n{HELP_HINT}", is_error=True
            )
        tokens[0] = tokens[0].lower()
        try:
            args = self._parser.parse_args(tokens)
        except CommandError as exc:
            return CommandResult(message=str(exc).strip(), is_error=True)
        logger.debug("Running %s %r", command, vars(args))
        try:
            return self._handlers[command](args)
        except (ValueError, BuildStoreError) as exc:
            return CommandResult(message=str(exc), is_error=True)

    def render(self, result: CommandResult) -> str:
        """Screen contents after *result*: build summary, view, then message."""
        parts = [
            render.CLEAR_SCREEN,
            "\n",
            render.format_build(self.engine, self.palette, self.show_sheet),
        ]
        if result.view:
            parts += ["\n", result.view]
        if result.message:
            paint = self.palette.red if result.is_error else self.palette.green
            parts += ["\n", paint(result.message), "\n"]
        return "".join(parts)

    def load(self, ref: str) -> None:
        """Replace the current build with the saved build at *ref*."""
        payload = self.store.load(ref)
        self.engine = BuildEngine.from_snapshot(payload, self.catalog)
        self.level_limit = None

    # --- Helpers -----------------------------------------------------------

    @property
    def _threshold(self) -> float:
        return self.engine.config.match_threshold

    def _resolve_perk(self, words: list[str]) -> PerkDef:
        if not words:
            raise NoMatch("", "perk")
        return self.catalog.resolve_perk_text(" ".join(words), self._threshold)

    def _resolve_stat(self, text: str | None) -> Attribute | None:
        if text is None:
            return None
        return resolver.resolve_attribute_text(text, self._threshold)

    def _perk_name(self, definition: PerkDef) -> str:
        return definition.display_name(self.engine.state.gender)

    # --- Build changes -----------------------------------------------------

    def _cmd_set(self, args: argparse.Namespace) -> CommandResult:
        attribute = resolver.resolve_attribute_text(args.stat, self._threshold)
        self.engine.set_attribute(attribute, args.value)
        return CommandResult(message=f"Set {attribute.display_name} to {args.value}")

    def _cmd_add(self, args: argparse.Namespace) -> CommandResult:
        definition, rank = self.catalog.resolve_perk_and_rank(args.words, self._threshold)
        if rank is None:
            rank = definition.max_rank
        if self.level_limit is not None:
            rank = min(rank, definition.ranks.highest_rank_within_level(self.level_limit))
        self.engine.add_perk(definition, rank)
        name = self._perk_name(definition)
        if rank == 0:
            return CommandResult(message=f"Removed {name}")
        return CommandResult(message=f"Added {name} rank {rank}")

    def _cmd_remove(self, args: argparse.Namespace) -> CommandResult:
        definition = self._resolve_perk(args.words)
        self.engine.remove_perk(definition)
        return CommandResult(message=f"Removed {self._perk_name(definition)}")

    def _cmd_reset(self, args: argparse.Namespace) -> CommandResult:
        self.engine.reset()
        return CommandResult(message="Build reset!")

    def _cmd_name(self, args: argparse.Namespace) -> CommandResult:
        if not args.words:
            raise ValueError("Name cannot be empty")
        name = " ".join(args.words)
        self.engine.set_name(name)
        return CommandResult(message=f'Build name set to "{name}"')

    def _cmd_gender(self, args: argparse.Namespace) -> CommandResult:
        gender = resolver.resolve_gender_text(" ".join(args.words))
        self.engine.set_gender(gender)
        return CommandResult(message=f"Gender set to {gender.display_name}")

    def _cmd_book(self, args: argparse.Namespace) -> CommandResult:
        attribute = self._resolve_stat(args.stat)
        self.engine.set_attribute_book(attribute)
        if attribute is None:
            return CommandResult(message="S.P.E.C.I.A.L. book reset")
        return CommandResult(message=f"S.P.E.C.I.A.L. book set to {attribute.display_name}")

    def _cmd_difficulty(self, args: argparse.Namespace) -> CommandResult:
        difficulty = resolver.resolve_difficulty_text(" ".join(args.words), self._threshold)
        self.engine.set_difficulty(difficulty)
        return CommandResult(message=f"Difficulty set to {difficulty.display_name}")

    def _cmd_level_limit(self, args: argparse.Namespace) -> CommandResult:
        if args.level is not None and args.level < 1:
            raise ValueError("The level limit must be at least 1")
        self.level_limit = args.level
        if args.level is None:
            return CommandResult(message="Removed level limit")
        return CommandResult(message=f"Level limit set to {args.level}")

    def _cmd_sheet(self, args: argparse.Namespace) -> CommandResult:
        self.show_sheet = not self.show_sheet
        return CommandResult()

    # --- Persistence -------------------------------------------------------

    def _cmd_save(self, args: argparse.Namespace) -> CommandResult:
        if args.words:
            self.engine.set_name(" ".join(args.words))
        path = self.store.save(self.engine.to_snapshot())
        logger.debug("Build written to %s", path)
        return CommandResult(message="Build saved!")

    def _cmd_load(self, args: argparse.Namespace) -> CommandResult:
        self.load(" ".join(args.words))
        return CommandResult(message="Build loaded!")

    def _cmd_builds(self, args: argparse.Namespace) -> CommandResult:
        names = self.store.list_builds()
        lines = [self.palette.yellow(f"Saved builds ({self.store.base_dir})")]
        lines += [f"  {name}" for name in names] or ["  (none)"]
        return CommandResult(view="\n".join(lines) + "\n")

    # --- Views -------------------------------------------------------------

    def _cmd_perk(self, args: argparse.Namespace) -> CommandResult:
        definition = self._resolve_perk(args.words)
        return CommandResult(view=render.format_perk(self.engine, definition, self.palette))

    def _cmd_special(self, args: argparse.Namespace) -> CommandResult:
        attribute = self._resolve_stat(args.stat)
        attributes = [attribute] if attribute is not None else list(Attribute)
        views = [render.format_special(self.engine, a, self.palette) for a in attributes]
        return CommandResult(view="\n".join(views))

    def _kind_handler(self, kind: PerkKind) -> Callable[[argparse.Namespace], CommandResult]:
        def handler(args: argparse.Namespace) -> CommandResult:
            return CommandResult(view=render.format_perk_names(self.engine, kind, self.palette))
        return handler


def run_repl(
    session: PlannerSession,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> None:
    """Read commands from *stdin* until EOF or "exit"."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stdout.write("\n" + render.format_build(session.engine, session.palette, session.show_sheet))
    stdout.write(session.palette.blue(HELP_HINT) + "\n\n")
    stdout.flush()
    for line in stdin:
        result = session.run_command(line)
        if result.exit:
            break
        stdout.write(session.render(result))
        stdout.write("\n")
        stdout.flush()
