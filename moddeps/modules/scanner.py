# moddeps/modules/scanner.py
"""
Mods folder scanner.

Walks a game's Mods folder and classifies every folder:
 - ignored: name starts with a dot
 - mod: has a manifest.json (SMAPI mod or content pack)
 - group: no files of its own, only subfolders (scanned recursively)
 - XNB mod: raw .xnb files with no manifest
 - invalid: empty, no manifest, or a manifest that can't be used
"""

from __future__ import annotations
import os
from typing import List, Optional

from moddeps.modules import logger as _logger
from moddeps.modules.manifest import ManifestError, ModFolder, ModType, load_manifest

MANIFEST_FILE = "manifest.json"

# OS/file manager junk that doesn't make a folder non-empty
IGNORABLE_FILES = {".ds_store", "thumbs.db", "desktop.ini"}


class ScanError(Exception):
    pass


class ModScanner:
    def __init__(self, case_insensitive: bool = True, logger: Optional[_logger.Logger] = None):
        self.case_insensitive = case_insensitive
        self.log = logger or _logger.Logger("scanner")

    # -----------------------
    # Public API
    # -----------------------
    def get_mod_folders(self, root: str) -> List[ModFolder]:
        """Scan root and return every folder found, in name order."""
        root = os.path.abspath(root)
        if not os.path.isdir(root):
            raise ScanError(f"Mods folder not found: {root}")

        self.log.info(f"Scanning mods in {root} ...")
        try:
            subfolders = self._subfolders(root)
        except OSError as e:
            raise ScanError(f"Can't read Mods folder {root}: {e.strerror or e}") from e

        found: List[ModFolder] = []
        for path in subfolders:
            found.extend(self._scan_folder(root, path))

        self.log.info(f"Scan done: {len(found)} folders")
        return found

    def get_installed_mods(self, root: str) -> List[ModFolder]:
        """Folders that can be drawn in the graph (not ignored or invalid)."""
        return [m for m in self.get_mod_folders(root) if m.type.is_renderable]

    # -----------------------
    # Folder classification
    # -----------------------
    def _scan_folder(self, root: str, path: str) -> List[ModFolder]:
        rel = os.path.relpath(path, root)
        name = os.path.basename(path)

        if name.startswith("."):
            return [ModFolder(path, rel, ModType.IGNORED, error="ignored folder because its name starts with a dot")]

        try:
            manifest_path = self._find_manifest(path)
            if manifest_path:
                return [self._read_mod(path, rel, manifest_path)]
            files = self._meaningful_files(path)
            subfolders = self._subfolders(path)
        except OSError as e:
            self.log.warning(f"{rel}: can't read folder: {e}")
            return [ModFolder(path, rel, ModType.INVALID, error=f"can't read folder: {e.strerror or e}")]

        if not files and subfolders:
            self.log.debug(f"{rel}: mod group, scanning subfolders")
            results: List[ModFolder] = []
            for sub in subfolders:
                results.extend(self._scan_folder(root, sub))
            return results

        if any(f.lower().endswith(".xnb") for f in files):
            return [ModFolder(path, rel, ModType.XNB, error="XNB mod without manifest.json")]

        if not files:
            return [ModFolder(path, rel, ModType.INVALID, error="empty folder")]

        return [ModFolder(path, rel, ModType.INVALID, error=f"folder doesn't contain a {MANIFEST_FILE}")]

    def _read_mod(self, path: str, rel: str, manifest_path: str) -> ModFolder:
        try:
            manifest = load_manifest(manifest_path)
        except ManifestError as e:
            self.log.warning(f"{rel}: invalid manifest: {e}")
            return ModFolder(path, rel, ModType.INVALID, error=str(e))

        if not manifest.unique_id:
            return ModFolder(path, rel, ModType.INVALID, manifest, error="manifest has no UniqueID field")

        has_dll = manifest.entry_dll is not None
        is_pack = manifest.content_pack_for is not None
        if has_dll and is_pack:
            return ModFolder(path, rel, ModType.INVALID, manifest,
                             error="manifest sets both EntryDll and ContentPackFor")
        if is_pack:
            return ModFolder(path, rel, ModType.CONTENT_PACK, manifest)
        if has_dll:
            return ModFolder(path, rel, ModType.SMAPI, manifest)
        return ModFolder(path, rel, ModType.INVALID, manifest,
                         error="manifest has no EntryDll or ContentPackFor field")

    # -----------------------
    # Filesystem helpers
    # -----------------------
    def _find_manifest(self, path: str) -> Optional[str]:
        exact = os.path.join(path, MANIFEST_FILE)
        if os.path.isfile(exact):
            return exact
        if not self.case_insensitive:
            return None
        for entry in os.listdir(path):
            candidate = os.path.join(path, entry)
            if entry.lower() == MANIFEST_FILE and os.path.isfile(candidate):
                return candidate
        return None

    @staticmethod
    def _subfolders(path: str) -> List[str]:
        entries = sorted(os.listdir(path), key=lambda e: (e.lower(), e))
        return [os.path.join(path, e) for e in entries if os.path.isdir(os.path.join(path, e))]

    @staticmethod
    def _meaningful_files(path: str) -> List[str]:
        files = []
        for entry in os.listdir(path):
            if not os.path.isfile(os.path.join(path, entry)):
                continue
            lowered = entry.lower()
            if lowered in IGNORABLE_FILES or entry.startswith("._"):
                continue
            files.append(entry)
        return sorted(files)


def get_installed_mods(root: str, case_insensitive: bool = True) -> List[ModFolder]:
    return ModScanner(case_insensitive=case_insensitive).get_installed_mods(root)
