"""CLI entry point: python -m fo4_planner.cli [PATH ...] [--nocolor] [--data PATH] [-v]"""

from __future__ import annotations

import argparse
import logging
import sys

import colorama

from fo4_planner.catalog.perk_catalog import PerkCatalog
from fo4_planner.cli import render
from fo4_planner.cli.app import PlannerSession, run_repl
from fo4_planner.data.errors import DataError
from fo4_planner.storage.build_store import BuildStore, BuildStoreError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fallout 4 Character Planner")
    parser.add_argument("path", nargs="*", help="Saved build to open at startup")
    parser.add_argument("--nocolor", action="store_true", help="Run without terminal colors")
    parser.add_argument("--data", type=str, default=None, help="Path to an alternative perks.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        catalog = PerkCatalog.load(args.data)
    except DataError as exc:
        print(f"Failed to load perk data: {exc}", file=sys.stderr)
        return 1

    colorama.just_fix_windows_console()
    palette = render.Palette(enabled=not args.nocolor and sys.stdout.isatty())
    session = PlannerSession(catalog, BuildStore(), palette)

    if args.path:
        try:
            session.load(" ".join(args.path))
        except (ValueError, BuildStoreError) as exc:
            print(exc)
            print()
            print("Press ENTER to close")
            sys.stdin.readline()
            return 1
    else:
        sys.stdout.write(render.CLEAR_SCREEN)

    run_repl(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
