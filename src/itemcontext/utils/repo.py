"""
Locating the .itemcontext/ folder of a site checkout.

The CLI reads .itemcontext/config.yaml from the nearest enclosing directory
that has one, so it behaves the same from any subdirectory of the site.
"""

from pathlib import Path
from typing import Optional

CONFIG_DIR_NAME = ".itemcontext"


def find_config_root(start: Optional[Path] = None) -> Path:
    """
    Nearest directory at or above start that holds a .itemcontext/ folder.

    Falls back to start itself (or the working directory) when no enclosing
    directory has one; load_config then finds no file and uses the defaults.
    """
    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        if (directory / CONFIG_DIR_NAME).is_dir():
            return directory
    return origin
