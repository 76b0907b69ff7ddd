# moddeps/modules/game.py
"""
Game install discovery: default Steam/GOG/Xbox locations per platform, plus
helpers to clean up and validate a path typed by the user.
"""

from __future__ import annotations
import os
import sys
from typing import List, Optional

from moddeps.modules import logger as _logger
from moddeps.modules.config import config as _default_config

GAME_EXECUTABLES = ("Stardew Valley.dll", "Stardew Valley.exe", "StardewValley.exe", "StardewValley")
MODS_FOLDER = "Mods"


def detect_platform(platform: Optional[str] = None) -> str:
    """Return 'windows', 'macos' or 'linux'."""
    platform = platform or sys.platform
    if platform.startswith("win") or platform == "cygwin":
        return "windows"
    if platform == "darwin":
        return "macos"
    return "linux"


def default_game_paths(platform: Optional[str] = None) -> List[str]:
    home = os.path.expanduser("~")
    platform = detect_platform(platform)
    if platform == "windows":
        program_files_x86 = os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")
        program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
        return [
            os.path.join(program_files_x86, "Steam", "steamapps", "common", "Stardew Valley"),
            os.path.join(program_files_x86, "GalaxyClient", "Games", "Stardew Valley"),
            os.path.join(program_files_x86, "GOG Galaxy", "Games", "Stardew Valley"),
            os.path.join(program_files, "ModifiableWindowsApps", "Stardew Valley"),
        ]
    if platform == "macos":
        return [
            "/Applications/Stardew Valley.app/Contents/MacOS",
            os.path.join(home, "Library", "Application Support", "Steam", "steamapps", "common",
                         "Stardew Valley", "Contents", "MacOS"),
        ]
    return [
        os.path.join(home, "GOG Games", "Stardew Valley", "game"),
        os.path.join(home, ".steam", "steam", "steamapps", "common", "Stardew Valley"),
        os.path.join(home, ".local", "share", "Steam", "steamapps", "common", "Stardew Valley"),
        os.path.join(home, ".var", "app", "com.valvesoftware.Steam", "data", "Steam", "steamapps",
                     "common", "Stardew Valley"),
    ]


def looks_like_game_folder(path: str) -> bool:
    if not os.path.isdir(path):
        return False
    return any(os.path.isfile(os.path.join(path, exe)) for exe in GAME_EXECUTABLES)


def normalize_user_path(raw: str, platform: Optional[str] = None) -> str:
    """Clean up a path pasted by the user."""
    path = raw.strip()
    if detect_platform(platform) == "windows":
        # quotes escape spaces in Windows and aren't part of the path
        path = path.replace('"', "")
    else:
        # paths copied from a shell may have escaped spaces
        path = path.replace("\\ ", " ")

    if path.startswith("~/"):
        home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or os.path.expanduser("~")
        path = os.path.join(home, path[2:])

    if os.path.isfile(path):
        path = os.path.dirname(path)
    return path


def validate_game_folder(path: str) -> Optional[str]:
    """Return a problem description, or None if path is a game folder with a Mods folder."""
    if not os.path.isdir(path):
        return "That directory doesn't seem to exist."
    if not looks_like_game_folder(path):
        return "That directory doesn't seem to contain a valid install of Stardew Valley."
    if not os.path.isdir(os.path.join(path, MODS_FOLDER)):
        return "That looks like a valid Stardew Valley game folder, but it doesn't have a Mods folder."
    return None


class GameScanner:
    def __init__(self, conf=None, platform: Optional[str] = None, logger: Optional[_logger.Logger] = None):
        self.conf = conf or _default_config
        self.platform = platform
        self.log = logger or _logger.Logger("game")

    def candidate_paths(self) -> List[str]:
        paths = []
        configured = self.conf.getpath("moddeps", "game_path")
        if configured:
            paths.append(configured)
        paths.extend(default_game_paths(self.platform))
        return paths

    def scan(self) -> List[str]:
        """Installed game folders found on this machine, without duplicates."""
        found: List[str] = []
        seen = set()
        for path in self.candidate_paths():
            key = os.path.normcase(os.path.realpath(path))
            if key in seen:
                continue
            seen.add(key)
            if looks_like_game_folder(path):
                self.log.debug(f"Game found at {path}")
                found.append(path)
        return found

    def mods_folders(self) -> List[str]:
        return [os.path.join(p, MODS_FOLDER) for p in self.scan()]

    @staticmethod
    def looks_like_game_folder(path: str) -> bool:
        return looks_like_game_folder(path)
