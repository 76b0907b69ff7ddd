"""moddeps - export the dependency graph of installed game mods as DGML."""

__version__ = "0.1.0"
