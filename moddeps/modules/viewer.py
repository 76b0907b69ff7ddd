# moddeps/modules/viewer.py
import os
import subprocess
import sys
from typing import Optional

from moddeps.modules import logger as _logger

LOG = _logger.Logger("viewer")


class ViewerError(Exception):
    pass


def convert_dgml_to_png(file_path: str, converter: str, cwd: Optional[str] = None) -> subprocess.Popen:
    """
    Start DgmlImage to render a PNG next to the DGML file.
    The process is not awaited; large graphs can take a while.
    """
    if not os.path.isfile(converter):
        raise ViewerError(f"DGML converter not found: {converter}")

    LOG.info(f"Rendering {file_path} with {converter}")
    try:
        return subprocess.Popen([converter, file_path], cwd=cwd or os.getcwd())
    except OSError as e:
        LOG.error(f"Can't start converter {converter}: {e}")
        raise ViewerError(f"Can't start converter {converter}: {e}") from e


def open_in_default_app(file_path: str, platform: Optional[str] = None):
    """Open a file with the program registered for its type."""
    platform = platform or sys.platform
    LOG.info(f"Opening {file_path}")
    try:
        if platform.startswith("win"):
            os.startfile(file_path)  # type: ignore[attr-defined]
            return None
        opener = "open" if platform == "darwin" else "xdg-open"
        return subprocess.Popen([opener, file_path])
    except OSError as e:
        LOG.error(f"Can't open {file_path}: {e}")
        raise ViewerError(f"Can't open {file_path}: {e}") from e
