"""Candidate resolution.

Probes the clipboard and the watched directory, decides which image to
hand over, and materializes it.

Arbitration when both sides have an image:
- File wins if its mtime is in the future or within the freshness window
- Otherwise the clipboard wins (it carries no timestamp of its own)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from .clipboard import ClipboardCandidate, read_clipboard
from .config import Config
from .errors import NotFoundError
from .materialize import materialize_clipboard, materialize_file
from .scanner import FileCandidate, find_fallback_image

log = logging.getLogger(__name__)

CLIPBOARD_SOURCE = "clipboard"

Candidate = Union[ClipboardCandidate, FileCandidate]


@dataclass(frozen=True)
class Options:
    """Parsed invocation options."""

    use_downloads: bool = False
    clipboard_only: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class Result:
    """The handed-over image."""

    source: str  # "clipboard" or the original file path
    temp_path: str

    def to_dict(self) -> dict:
        return {"source": self.source, "temp_path": self.temp_path}


# Probe outcomes: exactly one of these per side


@dataclass(frozen=True)
class Found:
    candidate: Candidate


@dataclass(frozen=True)
class Missing:
    reason: str = ""


@dataclass(frozen=True)
class Failed:
    error: Exception


Outcome = Union[Found, Missing, Failed]


def probe(fn: Callable[[], Candidate]) -> Outcome:
    """Run a candidate probe and classify its outcome."""
    try:
        return Found(fn())
    except NotFoundError as e:
        return Missing(str(e))
    except Exception as e:
        return Failed(e)


def is_fresh(
    candidate: FileCandidate,
    now: datetime,
    window: timedelta = timedelta(seconds=30),
) -> bool:
    """True if the file was modified within the window, or in the future."""
    if candidate.mod_time > now:
        return True
    return now - candidate.mod_time <= window


def choose(
    clipboard: Outcome,
    directory: Outcome,
    now: datetime,
    window: timedelta = timedelta(seconds=30),
) -> Candidate:
    """Pick the winning candidate from the two probe outcomes.

    Raises:
        Exception: The directory probe's error, else the clipboard probe's
        NotFoundError: If neither side found anything
    """
    if isinstance(clipboard, Found) and isinstance(directory, Found):
        if is_fresh(directory.candidate, now, window):
            log.debug("Selected file candidate: %s", directory.candidate.path)
            return directory.candidate
        log.debug("Selected clipboard candidate")
        return clipboard.candidate

    if isinstance(clipboard, Found):
        log.debug("Selected clipboard candidate (file missing)")
        return clipboard.candidate
    if isinstance(directory, Found):
        log.debug("Selected file candidate (clipboard missing): %s", directory.candidate.path)
        return directory.candidate

    if isinstance(directory, Failed):
        raise directory.error
    if isinstance(clipboard, Failed):
        raise clipboard.error
    raise NotFoundError()


def materialize(candidate: Candidate, options: Options, config: Config) -> Result:
    """Stage the winner into a temp file."""
    if isinstance(candidate, ClipboardCandidate):
        return Result(
            source=CLIPBOARD_SOURCE,
            temp_path=materialize_clipboard(candidate.data, config),
        )
    return Result(
        source=candidate.path,
        temp_path=materialize_file(candidate, options, config),
    )


def resolve(
    options: Options,
    config: Optional[Config] = None,
    clipboard_reader: Optional[Callable[[], ClipboardCandidate]] = None,
    directory_probe: Optional[Callable[[bool], FileCandidate]] = None,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
) -> Result:
    """Find the most relevant recent image and materialize it.

    Args:
        options: Parsed invocation options
        config: Configuration object. If None, uses defaults.
        clipboard_reader: Replaces the clipboard probe
        directory_probe: Replaces the Desktop/Downloads probe; receives use_downloads
        clock: Returns the current time (timezone-aware UTC)

    Returns:
        Result with source and temp path

    Raises:
        NotFoundError: If no image is available
        OSError, ScreenshotAgentError: On any other failure
    """
    config = config or Config()
    clipboard_reader = clipboard_reader or (lambda: read_clipboard(config))
    directory_probe = directory_probe or find_fallback_image

    clipboard = probe(clipboard_reader)

    if options.clipboard_only:
        if isinstance(clipboard, Found):
            log.debug("Selected clipboard candidate (clipboard-only)")
            return materialize(clipboard.candidate, options, config)
        if isinstance(clipboard, Failed):
            raise clipboard.error
        raise NotFoundError()

    directory = probe(lambda: directory_probe(options.use_downloads))
    if isinstance(directory, Failed):
        log.debug("Directory probe failed: %s", directory.error)
    if isinstance(clipboard, Failed):
        log.debug("Clipboard probe failed: %s", clipboard.error)

    window = timedelta(seconds=config.freshness_seconds)
    winner = choose(clipboard, directory, clock(), window)
    return materialize(winner, options, config)
