# moddeps/modules/manifest.py
"""
Mod manifest model - reads manifest.json and describes a scanned mod folder.

A manifest.json looks like:

  {
    "Name": "Content Patcher",
    "Author": "Pathoschild",
    "Version": "2.0.0",
    "UniqueID": "Pathoschild.ContentPatcher",
    "EntryDll": "ContentPatcher.dll",
    "Dependencies": [
      {"UniqueID": "Pathoschild.Common", "IsRequired": false}
    ]
  }

Content packs declare "ContentPackFor": {"UniqueID": "<owner id>"} instead of
an EntryDll. Field names are matched case-insensitively.
"""

from __future__ import annotations
import json
import os
from enum import Enum
from typing import Any, Dict, List, Optional


class ManifestError(Exception):
    pass


class ModType(Enum):
    """Classification of a scanned mod folder; the value doubles as graph category."""
    SMAPI = "Smapi"
    CONTENT_PACK = "ContentPack"
    XNB = "Xnb"
    IGNORED = "Ignored"
    INVALID = "Invalid"

    @property
    def is_renderable(self) -> bool:
        return self not in (ModType.IGNORED, ModType.INVALID)


# -------------------------
# Field helpers
# -------------------------
def _field(data: Dict[str, Any], name: str, default: Any = None) -> Any:
    """Case-insensitive dict lookup."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return default


def _text(value: Any) -> Optional[str]:
    """Normalize a manifest string: blanks become None, numbers become text."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ManifestError(f"Expected text, got boolean {value!r}")
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        raise ManifestError(f"Expected text, got {type(value).__name__}")
    value = value.strip()
    return value or None


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip().lower()
    if value in ("true", "yes", "1", 1):
        return True
    if value in ("false", "no", "0", 0):
        return False
    raise ManifestError(f"Invalid boolean value: {value!r}")


def _version(value: Any) -> Optional[str]:
    # old manifests use {"MajorVersion": 1, "MinorVersion": 2, "PatchVersion": 3}
    if isinstance(value, dict):
        parts = [_field(value, key, 0) for key in ("MajorVersion", "MinorVersion", "PatchVersion")]
        version = ".".join(str(p) for p in parts)
        build = _text(_field(value, "Build"))
        return f"{version}-{build}" if build else version
    return _text(value)


# -------------------------
# Model
# -------------------------
class ManifestDependency:
    def __init__(self, unique_id: Optional[str], minimum_version: Optional[str] = None, is_required: bool = True):
        self.unique_id = unique_id
        self.minimum_version = minimum_version
        self.is_required = is_required

    def __repr__(self):
        return (f"ManifestDependency(unique_id={self.unique_id!r}, "
                f"minimum_version={self.minimum_version!r}, is_required={self.is_required!r})")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "UniqueID": self.unique_id,
            "MinimumVersion": self.minimum_version,
            "IsRequired": self.is_required,
        }


class ManifestContentPackFor:
    def __init__(self, unique_id: Optional[str], minimum_version: Optional[str] = None):
        self.unique_id = unique_id
        self.minimum_version = minimum_version

    def __repr__(self):
        return f"ManifestContentPackFor(unique_id={self.unique_id!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {"UniqueID": self.unique_id, "MinimumVersion": self.minimum_version}


class Manifest:
    def __init__(self,
                 unique_id: Optional[str],
                 name: Optional[str] = None,
                 author: Optional[str] = None,
                 version: Optional[str] = None,
                 description: Optional[str] = None,
                 entry_dll: Optional[str] = None,
                 content_pack_for: Optional[ManifestContentPackFor] = None,
                 dependencies: Optional[List[ManifestDependency]] = None,
                 update_keys: Optional[List[str]] = None,
                 minimum_api_version: Optional[str] = None):
        self.unique_id = unique_id
        self.name = name
        self.author = author
        self.version = version
        self.description = description
        self.entry_dll = entry_dll
        self.content_pack_for = content_pack_for
        self.dependencies = dependencies or []
        self.update_keys = update_keys or []
        self.minimum_api_version = minimum_api_version

    @property
    def owner_id(self) -> Optional[str]:
        """Unique ID of the mod consuming this content pack, if any."""
        if self.content_pack_for is None:
            return None
        return self.content_pack_for.unique_id

    def __repr__(self):
        return f"Manifest(unique_id={self.unique_id!r}, name={self.name!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "UniqueID": self.unique_id,
            "Name": self.name,
            "Author": self.author,
            "Version": self.version,
            "Description": self.description,
            "EntryDll": self.entry_dll,
            "ContentPackFor": self.content_pack_for.to_dict() if self.content_pack_for else None,
            "Dependencies": [d.to_dict() for d in self.dependencies],
            "UpdateKeys": list(self.update_keys),
            "MinimumApiVersion": self.minimum_api_version,
        }


# -------------------------
# Parsing
# -------------------------
def _parse_dependency(raw: Any) -> ManifestDependency:
    if not isinstance(raw, dict):
        raise ManifestError(f"Dependency entries must be objects, got {type(raw).__name__}")
    return ManifestDependency(
        unique_id=_text(_field(raw, "UniqueID")),
        minimum_version=_version(_field(raw, "MinimumVersion")),
        is_required=_flag(_field(raw, "IsRequired"), default=True),
    )


def parse_manifest(data: Any) -> Manifest:
    """Build a Manifest from decoded manifest.json content."""
    if not isinstance(data, dict):
        raise ManifestError("Manifest root must be a JSON object")

    content_pack_for = None
    raw_cpf = _field(data, "ContentPackFor")
    if raw_cpf is not None:
        if not isinstance(raw_cpf, dict):
            raise ManifestError("Field 'ContentPackFor' must be an object")
        content_pack_for = ManifestContentPackFor(
            unique_id=_text(_field(raw_cpf, "UniqueID")),
            minimum_version=_version(_field(raw_cpf, "MinimumVersion")),
        )

    raw_deps = _field(data, "Dependencies") or []
    if not isinstance(raw_deps, list):
        raise ManifestError("Field 'Dependencies' must be a list")

    raw_keys = _field(data, "UpdateKeys") or []
    if not isinstance(raw_keys, list):
        raise ManifestError("Field 'UpdateKeys' must be a list")

    return Manifest(
        unique_id=_text(_field(data, "UniqueID")),
        name=_text(_field(data, "Name")),
        author=_text(_field(data, "Author")),
        version=_version(_field(data, "Version")),
        description=_text(_field(data, "Description")),
        entry_dll=_text(_field(data, "EntryDll")),
        content_pack_for=content_pack_for,
        dependencies=[_parse_dependency(d) for d in raw_deps],
        update_keys=[k for k in (_text(k) for k in raw_keys) if k],
        minimum_api_version=_version(_field(data, "MinimumApiVersion")),
    )


def load_manifest(path: str) -> Manifest:
    """Read and parse a manifest.json file."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestError(f"Can't read {path}: {e}") from e
    except ValueError as e:
        raise ManifestError(f"Can't parse {path}: {e}") from e
    return parse_manifest(data)


# -------------------------
# Scanned folder
# -------------------------
class ModFolder:
    """A folder found while scanning the Mods directory."""

    def __init__(self,
                 directory: str,
                 relative_path: str,
                 mod_type: ModType,
                 manifest: Optional[Manifest] = None,
                 error: Optional[str] = None):
        self.directory = directory
        self.relative_path = relative_path
        self.type = mod_type
        self.manifest = manifest
        self.error = error

    @property
    def display_name(self) -> str:
        if self.manifest is not None and self.manifest.name:
            return self.manifest.name
        return self.relative_path

    @property
    def unique_id(self) -> Optional[str]:
        return self.manifest.unique_id if self.manifest is not None else None

    def __repr__(self):
        return f"ModFolder({self.relative_path!r}, type={self.type.value}, id={self.unique_id!r})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "directory": self.directory,
            "relative_path": self.relative_path.replace(os.sep, "/"),
            "type": self.type.value,
            "display_name": self.display_name,
            "unique_id": self.unique_id,
            "error": self.error,
        }
