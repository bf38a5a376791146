"""Directory scanning for the latest screenshot-like image.

Handles:
- Locating Desktop/Downloads (with XDG user-dirs fallback on Linux)
- Picking the newest image, preferring screenshot-named files
"""

import logging
import os
import stat
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import NotFoundError

log = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg"}
SCREENSHOT_MARKERS = ("screenshot", "screen shot")
USER_DIRS_FILE = Path(".config") / "user-dirs.dirs"


@dataclass(frozen=True)
class FileCandidate:
    """An image file in a watched directory."""

    path: str
    mod_time: datetime


def has_image_ext(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in IMAGE_EXTENSIONS


def is_screenshot_name(name: str) -> bool:
    lower = name.lower()
    return any(marker in lower for marker in SCREENSHOT_MARKERS)


def latest_image(directory: str) -> FileCandidate:
    """Find the best image candidate in a directory.

    The newest screenshot-named image wins; if there is none, the newest
    image of any name. On equal mtimes the later listing entry wins.

    Raises:
        NotFoundError: If the directory is missing or holds no image
        OSError: If the directory cannot be read
    """
    try:
        entries = list(os.scandir(directory))
    except FileNotFoundError:
        raise NotFoundError(f"directory not found: {directory}")

    tagged: Optional[tuple[float, FileCandidate]] = None
    untagged: Optional[tuple[float, FileCandidate]] = None

    for entry in entries:
        if not has_image_ext(entry.name):
            continue
        try:
            if entry.is_dir():
                continue
            st = entry.stat()
        except OSError:
            # Dangling symlink or vanished entry
            continue
        if not stat.S_ISREG(st.st_mode):
            continue

        candidate = FileCandidate(
            path=os.path.join(directory, entry.name),
            mod_time=datetime.fromtimestamp(st.st_mtime, timezone.utc),
        )
        if is_screenshot_name(entry.name):
            if tagged is None or st.st_mtime >= tagged[0]:
                tagged = (st.st_mtime, candidate)
        elif untagged is None or st.st_mtime >= untagged[0]:
            untagged = (st.st_mtime, candidate)

    if tagged is not None:
        return tagged[1]
    if untagged is not None:
        return untagged[1]
    raise NotFoundError(f"no images in {directory}")


def xdg_user_dir(home: Path, key: str) -> Optional[Path]:
    """Read XDG_<key>_DIR from ~/.config/user-dirs.dirs.

    Args:
        home: Home directory
        key: e.g. "DESKTOP" or "DOWNLOAD"

    Returns:
        Absolute path, or None if the file or key is missing
    """
    try:
        text = (home / USER_DIRS_FILE).read_text()
    except (OSError, UnicodeDecodeError):
        return None

    prefix = f"XDG_{key}_DIR="
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(prefix):
            continue
        value = line[len(prefix):].strip().strip("\"'")
        value = value.replace("${HOME}", str(home)).replace("$HOME", str(home))
        if value.startswith("~"):
            value = str(home) + "/" + value[1:].lstrip("/")
        if not value:
            return None
        path = Path(value)
        if not path.is_absolute():
            path = home / path
        return Path(os.path.normpath(path))
    return None


def locate_fallback_dir(
    use_downloads: bool,
    home: Optional[Path] = None,
    platform: Optional[str] = None,
) -> Path:
    """Locate the Desktop (or Downloads) directory.

    Raises:
        NotFoundError: If no such directory exists
    """
    home = home or Path.home()
    platform = platform or sys.platform

    name, xdg_key = ("Downloads", "DOWNLOAD") if use_downloads else ("Desktop", "DESKTOP")
    default = home / name
    if default.is_dir():
        return default

    if platform.startswith("linux"):
        configured = xdg_user_dir(home, xdg_key)
        if configured is not None and configured.is_dir():
            log.debug("Using XDG %s dir: %s", xdg_key, configured)
            return configured

    raise NotFoundError(f"no {name} directory")


def find_fallback_image(use_downloads: bool) -> FileCandidate:
    """Latest image in Desktop, or Downloads if use_downloads."""
    directory = locate_fallback_dir(use_downloads)
    return latest_image(str(directory))
