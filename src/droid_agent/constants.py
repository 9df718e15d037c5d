"""Global constants."""

import pathlib


def _find_project_root() -> pathlib.Path:
    """Find the project root (directory containing profiles.json or .git).

    Search order:
      1. Walk up from cwd
      2. Walk up from the package source directory (editable install)
    Fallback: cwd
    """
    markers = ("profiles.json", ".git")

    def _search(start: pathlib.Path) -> pathlib.Path | None:
        for d in [start, *start.parents]:
            if any((d / m).exists() for m in markers):
                return d
        return None

    found = _search(pathlib.Path.cwd())
    if found:
        return found

    pkg_dir = pathlib.Path(__file__).resolve().parent  # src/droid_agent/
    found = _search(pkg_dir)
    if found:
        return found

    return pathlib.Path.cwd()


PROJECT_ROOT = _find_project_root()

PROFILES_FILE = str(PROJECT_ROOT / "profiles.json")

# Gesture granularity; each step takes roughly 5ms on device
DEFAULT_DRAG_STEPS = 10

DEFAULT_DISPLAY_WIDTH = 1080
DEFAULT_DISPLAY_HEIGHT = 2400

# Page-source attribute for which Android reports "no selection"
NO_SELECTION = -1
