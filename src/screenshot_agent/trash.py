"""Send files to the desktop trash.

Two backends:
- macOS: ~/.Trash
- Linux: freedesktop.org home trash (~/.local/share/Trash/{files,info})

A discard is a sequence of forward steps. Each completed step registers an
undo action; if a later step fails the undo actions run in reverse so the
file ends up back where it started.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import quote

from .config import DEFAULT_TRASH_MAX_ATTEMPTS
from .errors import TrashError, UnsupportedPlatformError
from .fsops import move

log = logging.getLogger(__name__)

TRASHINFO_SUFFIX = ".trashinfo"


class Rollback:
    """Collects undo actions and runs them in reverse when the block fails."""

    def __init__(self):
        self._undo: List[Callable[[], None]] = []

    def record(self, action: Callable[[], None]) -> None:
        self._undo.append(action)

    def __enter__(self) -> "Rollback":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            for action in reversed(self._undo):
                try:
                    action()
                except OSError as undo_exc:
                    log.error("Rollback step failed: %s", undo_exc)
        self._undo.clear()
        return False


def _exists(path: Path) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError:
        # Unreadable but present
        return True
    return True


def _name_taken(name: str, files_dir: Path, info_dir: Optional[Path]) -> bool:
    if _exists(files_dir / name):
        return True
    if info_dir is None:
        return False
    return _exists(info_dir / (name + TRASHINFO_SUFFIX))


def unique_trash_name(
    base: str,
    files_dir: Path,
    info_dir: Optional[Path] = None,
    max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS,
) -> str:
    """Pick a name for base that is free in files_dir (and info_dir).

    Tries base, then stem.1.ext, stem.2.ext, ...

    Raises:
        TrashError: If base is empty or no free name is found
    """
    if not base:
        raise TrashError("empty trash name")
    if not _name_taken(base, files_dir, info_dir):
        return base

    stem, ext = os.path.splitext(base)
    for i in range(1, max_attempts):
        name = f"{stem}.{i}{ext}"
        if not _name_taken(name, files_dir, info_dir):
            return name
    raise TrashError(f"unable to find unique trash name for {base}")


def trash_escape_path(path: str) -> str:
    """Percent-encode an absolute path for a .trashinfo Path= line."""
    return quote(os.fsencode(path), safe="/")


def trashinfo_content(abs_path: str, deleted: datetime) -> str:
    return (
        "[Trash Info]\n"
        f"Path={trash_escape_path(abs_path)}\n"
        f"DeletionDate={deleted.strftime('%Y-%m-%dT%H:%M:%S')}\n"
    )


class MacTrash:
    """~/.Trash, no metadata."""

    def __init__(self, home: Path, max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS):
        self.trash_dir = home / ".Trash"
        self.max_attempts = max_attempts

    def discard(self, abs_path: str) -> Path:
        self.trash_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        name = unique_trash_name(
            os.path.basename(abs_path), self.trash_dir, max_attempts=self.max_attempts
        )
        dest = self.trash_dir / name
        move(abs_path, str(dest))
        log.debug("Trashed %s -> %s", abs_path, dest)
        return dest


class FreedesktopTrash:
    """Home trash per the freedesktop.org trash specification."""

    def __init__(self, home: Path, max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS):
        self.root = home / ".local" / "share" / "Trash"
        self.files_dir = self.root / "files"
        self.info_dir = self.root / "info"
        self.max_attempts = max_attempts

    def _write_info(self, info_path: Path, content: str, rollback: Rollback) -> None:
        # O_EXCL: a concurrent trasher may have claimed the same name
        fd = os.open(info_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        rollback.record(lambda: info_path.unlink(missing_ok=True))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)

    def discard(self, abs_path: str) -> Path:
        self.files_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        self.info_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

        name = unique_trash_name(
            os.path.basename(abs_path),
            self.files_dir,
            self.info_dir,
            max_attempts=self.max_attempts,
        )
        dest = self.files_dir / name
        info_path = self.info_dir / (name + TRASHINFO_SUFFIX)

        with Rollback() as rollback:
            move(abs_path, str(dest))
            rollback.record(lambda: move(str(dest), abs_path))
            self._write_info(info_path, trashinfo_content(abs_path, datetime.now()), rollback)

        log.debug("Trashed %s -> %s", abs_path, dest)
        return dest


def get_backend(
    platform: Optional[str] = None,
    home: Optional[Path] = None,
    max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS,
):
    """Return the trash backend for a platform.

    Raises:
        UnsupportedPlatformError: On anything but macOS and Linux
    """
    platform = platform or sys.platform
    home = home or Path.home()
    if platform == "darwin":
        return MacTrash(home, max_attempts)
    if platform.startswith("linux"):
        return FreedesktopTrash(home, max_attempts)
    raise UnsupportedPlatformError(f"trash unsupported on {platform}")


def trash_file(
    path: str,
    home: Optional[Path] = None,
    platform: Optional[str] = None,
    max_attempts: int = DEFAULT_TRASH_MAX_ATTEMPTS,
) -> Path:
    """Move a file into the user's trash.

    Args:
        path: File to discard (relative paths resolve against cwd)
        home: Home directory (default: Path.home())
        platform: sys.platform-style name (default: current platform)
        max_attempts: Bound on collision-free name probing

    Returns:
        Path of the file inside the trash

    Raises:
        UnsupportedPlatformError: On platforms without a backend
        TrashError: If no free trash name is available
        OSError: If the file cannot be moved or metadata cannot be written
    """
    backend = get_backend(platform, home, max_attempts)
    return backend.discard(os.path.abspath(path))
