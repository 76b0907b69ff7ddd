# moddeps/modules/cli.py
"""
Command line front end for moddeps.
- Uses rich for colored output, tables and prompts.
- Finds the game's Mods folder (argument, config, or interactive choice),
  scans it, and exports the mod dependency graph as .dgml.

Usage examples:
  moddeps graph --mods-dir "~/GOG Games/Stardew Valley/game/Mods" --no-open
  moddeps g --no-group-content-packs -o deps.dgml
  moddeps scan --all
"""

from __future__ import annotations
import argparse
import os
import sys
import traceback
from collections import Counter
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from moddeps.modules import logger as _logger
from moddeps.modules.config import ModDepsConfig, config as _default_config
from moddeps.modules.dgml import DgmlWriteError, export_dgml
from moddeps.modules.game import MODS_FOLDER, GameScanner, normalize_user_path, validate_game_folder
from moddeps.modules.graph import GraphBuilder
from moddeps.modules.manifest import ModType
from moddeps.modules.scanner import ModScanner, ScanError
from moddeps.modules.viewer import ViewerError, convert_dgml_to_png, open_in_default_app

TYPE_STYLES = {
    ModType.SMAPI: "green",
    ModType.CONTENT_PACK: "cyan",
    ModType.XNB: "yellow",
    ModType.IGNORED: "dim",
    ModType.INVALID: "red",
}


def print_panel(console: Console, title: str, text: str, style: str = "green"):
    console.print(Panel(Text(text), title=title, style=style))


def make_console(no_color: bool, quiet: bool) -> Console:
    if no_color:
        return Console(color_system=None, force_terminal=False, markup=False, quiet=quiet)
    return Console(quiet=quiet)


class CLI:
    def __init__(self, console: Console, conf=None):
        self.console = console
        self.conf = conf or _default_config
        self.log = _logger.Logger("cli", conf=self.conf)

    # -----------------------
    # Mods folder resolution
    # -----------------------
    def resolve_mods_dir(self, args: argparse.Namespace) -> Optional[str]:
        if getattr(args, "mods_dir", None):
            return os.path.expanduser(args.mods_dir)
        if getattr(args, "game_path", None):
            return os.path.join(os.path.expanduser(args.game_path), MODS_FOLDER)
        configured = self.conf.getpath("moddeps", "mods_dir")
        if configured:
            return configured
        return self.choose_mods_dir()

    def choose_mods_dir(self) -> Optional[str]:
        """Interactively pick a detected game, or ask for its path."""
        console = self.console
        game_paths = GameScanner(conf=self.conf, logger=self.log).scan()
        if game_paths:
            console.print("Which game mods folder do you want to scan?")
            console.print()
            for i, path in enumerate(game_paths, start=1):
                console.print(f"[{i}] {os.path.join(path, MODS_FOLDER)}", markup=False)
            console.print(f"[{len(game_paths) + 1}] Enter a custom game path.", markup=False)
            console.print()
            choices = [str(i) for i in range(1, len(game_paths) + 2)]
            choice = int(Prompt.ask("Type the number next to your choice, then press enter.",
                                    choices=choices, console=console))
            if choice <= len(game_paths):
                return os.path.join(game_paths[choice - 1], MODS_FOLDER)
        else:
            console.print("Oops, couldn't find the game automatically.", style="yellow")

        while True:
            console.print()
            raw = Prompt.ask("Type the file path to the game directory (the one containing "
                             "'Stardew Valley.dll'), then press enter", console=console, default="",
                             show_default=False)
            if not raw.strip():
                console.print("You must specify a directory path to continue.", style="red")
                continue
            path = normalize_user_path(raw)
            problem = validate_game_folder(path)
            if problem:
                console.print(problem, style="red", markup=False)
                continue
            return os.path.join(path, MODS_FOLDER)

    # -----------------------
    # scan
    # -----------------------
    def scanner(self) -> ModScanner:
        return ModScanner(
            case_insensitive=self.conf.getboolean("moddeps", "case_insensitive_paths", fallback=True),
            logger=self.log,
        )

    def cmd_scan(self, args: argparse.Namespace) -> int:
        console = self.console
        mods_dir = self.resolve_mods_dir(args)
        try:
            folders = self.scanner().get_mod_folders(mods_dir)
        except ScanError as e:
            console.print(str(e), style="red", markup=False)
            return 1

        table = Table(title=Text(f"Mods in {mods_dir}"))
        table.add_column("Folder")
        table.add_column("Type")
        table.add_column("Unique ID")
        table.add_column("Owner")
        table.add_column("Error")
        for mod in folders:
            if mod.type is ModType.IGNORED and not args.all:
                continue
            owner = mod.manifest.owner_id if mod.manifest else None
            style = TYPE_STYLES.get(mod.type, "")
            table.add_row(Text(mod.relative_path), Text(mod.type.value, style=style),
                          Text(mod.unique_id or ""), Text(owner or ""), Text(mod.error or ""))
        console.print(table)
        self._print_counts(folders)
        return 0

    def _print_counts(self, folders):
        counts = Counter(m.type for m in folders)
        summary = ", ".join(f"{t.value}: {counts[t]}" for t in ModType if counts[t])
        self.console.print(f"{len(folders)} folders ({summary or 'none'})")

    # -----------------------
    # graph
    # -----------------------
    def cmd_graph(self, args: argparse.Namespace) -> int:
        console = self.console
        mods_dir = self.resolve_mods_dir(args)

        try:
            folders = self.scanner().get_mod_folders(mods_dir)
        except ScanError as e:
            console.print(str(e), style="red", markup=False)
            return 1
        mods = [m for m in folders if m.type.is_renderable]
        self._print_counts(folders)

        group = args.group_content_packs
        if group is None:
            group = self.conf.getboolean("moddeps", "group_content_packs", fallback=True)

        graph = GraphBuilder(logger=self.log).build(mods, group_content_packs=group)

        output = args.output or self.conf.get("moddeps", "output_file", fallback="mod-dependencies.dgml")
        file_path = os.path.abspath(os.path.expanduser(output))
        try:
            export_dgml(graph, file_path)
        except DgmlWriteError as e:
            console.print(str(e), style="red", markup=False)
            return 2

        console.print()
        print_panel(console, "moddeps",
                    f"Generated at {file_path}.\n{len(graph.nodes)} mods, {len(graph.links)} links")

        render = args.render or self.conf.getboolean("moddeps", "render_png", fallback=False)
        if render:
            converter = self.conf.get("moddeps", "dgml_image")
            try:
                convert_dgml_to_png(file_path, converter)
                console.print("PNG rendering started in the background.", style="blue")
            except ViewerError as e:
                console.print(str(e), style="yellow", markup=False)

        should_open = args.open
        if should_open is None:
            should_open = Confirm.ask("Do you want to open the DGML file in its default editor?",
                                      default=False, console=console)
        if should_open:
            try:
                open_in_default_app(file_path)
            except ViewerError as e:
                console.print(str(e), style="yellow", markup=False)
        return 0


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="moddeps", description="Export a mod dependency graph as DGML")
    ap.add_argument("--no-color", action="store_true", help="Disable color output")
    ap.add_argument("--quiet", action="store_true", help="Quiet mode; less output")
    ap.add_argument("--conf", help="Path to moddeps.conf")
    sub = ap.add_subparsers(dest="command", required=True)

    def add_location_args(p):
        p.add_argument("--mods-dir", help="Mods folder to scan")
        p.add_argument("--game-path", help="Game folder containing the Mods folder")

    # graph
    p_graph = sub.add_parser("graph", aliases=["g"], help="Export the dependency graph to a .dgml file")
    add_location_args(p_graph)
    p_graph.add_argument("-o", "--output", help="Output .dgml path")
    p_graph.add_argument("--group-content-packs", action=argparse.BooleanOptionalAction, default=None,
                         help="Draw content packs inside their owner mod instead of linking to it")
    p_graph.add_argument("--render", action="store_true", help="Also render a PNG with DgmlImage")
    p_graph.add_argument("--open", action=argparse.BooleanOptionalAction, default=None,
                         help="Open the generated file (asks when omitted)")

    # scan
    p_scan = sub.add_parser("scan", aliases=["s"], help="List scanned mod folders")
    add_location_args(p_scan)
    p_scan.add_argument("--all", action="store_true", help="Include ignored folders")

    return ap


def main(argv: Optional[List[str]] = None):
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_argparser()
    args = parser.parse_args(argv)

    conf = ModDepsConfig(locations=[args.conf]) if args.conf else _default_config
    console = make_console(args.no_color, args.quiet)
    cli = CLI(console=console, conf=conf)
    if args.conf and conf.loaded_from is None:
        console.print(f"Config file not found: {args.conf}; using defaults", style="yellow", markup=False)

    cmd = args.command
    try:
        if cmd in ("graph", "g"):
            return cli.cmd_graph(args)
        if cmd in ("scan", "s"):
            return cli.cmd_scan(args)
        console.print("Unknown command", style="red")
        return 2
    except KeyboardInterrupt:
        console.print("Cancelled", style="yellow")
        return 1
    except Exception as e:
        console.print(f"Unhandled CLI error: {e}", style="red", markup=False)
        cli.log.error(traceback.format_exc())
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
