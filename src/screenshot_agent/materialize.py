"""Stage the winning candidate into a fresh temp file.

All functions return an absolute path to a file the caller now owns.
No partially written temp file survives a failure.
"""

import logging
import os
import tempfile
from typing import Optional, TYPE_CHECKING

from .config import Config
from .fsops import copy, move
from .trash import trash_file

if TYPE_CHECKING:
    from .resolver import Options
    from .scanner import FileCandidate

log = logging.getLogger(__name__)


def _temp_dir(config: Config) -> Optional[str]:
    return str(config.temp_dir) if config.temp_dir else None


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def _reserve_temp(prefix: str, suffix: str, config: Config) -> str:
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=_temp_dir(config))
    os.close(fd)
    return path


def materialize_clipboard(data: bytes, config: Optional[Config] = None) -> str:
    """Write clipboard bytes to a new clipboard-*.png temp file.

    Raises:
        OSError: If the temp file cannot be created or written
    """
    config = config or Config()

    fd, path = tempfile.mkstemp(prefix="clipboard-", suffix=".png", dir=_temp_dir(config))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except BaseException:
        _discard(path)
        raise

    path = os.path.abspath(path)
    log.debug("Clipboard image written to %s", path)
    return path


def image_suffix(path: str) -> str:
    """Lower-cased extension of path, or .png if it has none."""
    return os.path.splitext(path)[1].lower() or ".png"


def materialize_file(
    candidate: "FileCandidate",
    options: "Options",
    config: Optional[Config] = None,
) -> str:
    """Stage a directory file into a new image-*<ext> temp file.

    Downloads mode moves the file. Desktop mode copies it and then sends
    the original to the trash; if trashing fails the copy is removed.

    Raises:
        OSError: If the move, copy or trash step fails
        ScreenshotAgentError: If the trash step fails for a non-I/O reason
    """
    config = config or Config()
    src = candidate.path
    temp_path = _reserve_temp("image-", image_suffix(src), config)

    if options.use_downloads:
        log.debug("Moving Downloads file to temp: %s", src)
        try:
            move(src, temp_path)
        except BaseException:
            _discard(temp_path)
            raise
        return os.path.abspath(temp_path)

    log.debug("Copying Desktop file to temp and trashing: %s", src)
    try:
        copy(src, temp_path)
        trash_file(src, max_attempts=config.trash_max_attempts)
    except BaseException:
        _discard(temp_path)
        raise
    return os.path.abspath(temp_path)
