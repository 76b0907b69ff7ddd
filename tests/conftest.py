"""Shared fixtures for moddeps tests."""

import json
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

import pytest

from moddeps.modules.config import ModDepsConfig
from moddeps.modules.manifest import (
    Manifest,
    ManifestContentPackFor,
    ManifestDependency,
    ModFolder,
    ModType,
)


class RecordingLogger:
    """Stand-in for Logger that keeps messages for assertions."""

    def __init__(self):
        self.records = []

    def _add(self, level, message):
        self.records.append((level, message))

    def debug(self, message):
        self._add("DEBUG", message)

    def info(self, message):
        self._add("INFO", message)

    def success(self, message):
        self._add("SUCCESS", message)

    def warning(self, message):
        self._add("WARNING", message)

    def error(self, message):
        self._add("ERROR", message)

    def messages(self, level):
        return [m for lvl, m in self.records if lvl == level]


@pytest.fixture
def log() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def empty_conf(tmp_path: Path) -> ModDepsConfig:
    """Config with built-in defaults only."""
    return ModDepsConfig(locations=[str(tmp_path / "absent.conf")])


@pytest.fixture
def make_folder() -> Callable[..., ModFolder]:
    """Build an in-memory ModFolder; deps are (id, is_required) pairs."""

    def _make(unique_id: Optional[str],
              name: Optional[str] = None,
              owner: Optional[str] = None,
              deps: Iterable[Tuple[Optional[str], bool]] = (),
              with_manifest: bool = True) -> ModFolder:
        if not with_manifest:
            return ModFolder(f"/mods/{name or unique_id}", name or unique_id or "broken", ModType.XNB)
        manifest = Manifest(
            unique_id=unique_id,
            name=name or unique_id,
            entry_dll=None if owner else f"{unique_id}.dll",
            content_pack_for=ManifestContentPackFor(owner) if owner else None,
            dependencies=[ManifestDependency(d, is_required=r) for d, r in deps],
        )
        mod_type = ModType.CONTENT_PACK if owner else ModType.SMAPI
        return ModFolder(f"/mods/{unique_id}", str(unique_id), mod_type, manifest)

    return _make


@pytest.fixture
def mods_root(tmp_path: Path) -> Path:
    root = tmp_path / "Mods"
    root.mkdir()
    return root


@pytest.fixture
def write_mod(mods_root: Path) -> Callable[..., Path]:
    """Create a mod folder under mods_root with the given manifest content."""

    def _write(rel: str, manifest=None, filename: str = "manifest.json", raw: Optional[str] = None) -> Path:
        folder = mods_root / rel
        folder.mkdir(parents=True, exist_ok=True)
        if raw is not None:
            (folder / filename).write_text(raw, encoding="utf-8")
        elif manifest is not None:
            (folder / filename).write_text(json.dumps(manifest), encoding="utf-8")
        return folder

    return _write
