"""Hook system for post-resolution events.

Hooks are user-configurable scripts in a directory that ALL run after an
image has been handed over.

Directory structure (hooks_dir resolved by platformdirs):
    <hooks_dir>/
    └── on_resolve.d/
        ├── 10-annotate.sh
        └── 20-archive.sh

Scripts run in sorted order. Each receives: source temp_path

Hook scripts must not write to the agent's stdout; their output is discarded.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Config
    from .resolver import Result

log = logging.getLogger(__name__)

HOOK_CONTRACT = {
    "events": [
        {
            "name": "on_resolve",
            "args": ["source", "temp_path"],
            "description": "Called after an image has been materialized to a temp file",
        }
    ]
}


def find_hooks(hooks_dir: Optional[Path], event: str) -> list[Path]:
    """List executable hook scripts for an event, sorted by name."""
    if not hooks_dir:
        return []

    event_dir = hooks_dir / f"{event}.d"
    if not event_dir.is_dir():
        return []

    scripts = []
    try:
        for script in sorted(event_dir.iterdir()):
            if not script.is_file() or script.name.startswith("."):
                continue
            if not script.stat().st_mode & 0o111:
                log.debug("Skipping non-executable: %s", script)
                continue
            scripts.append(script)
    except OSError as e:
        log.warning("Could not list hooks in %s: %s", event_dir, e)
        return []
    return scripts


def run_hooks(hooks_dir: Optional[Path], event: str, *args) -> int:
    """Run all hook scripts for an event.

    Args:
        hooks_dir: Base hooks directory
        event: Event name (e.g., "on_resolve") - looks for {event}.d/ subdirectory
        *args: Arguments to pass to each script

    Returns:
        Number of scripts started
    """
    started = 0
    for script in find_hooks(hooks_dir, event):
        try:
            # Run in background (non-blocking)
            subprocess.Popen(
                [str(script)] + [str(a) for a in args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            started += 1
            log.debug("Hook executed: %s", script.name)
        except OSError as e:
            log.warning("Hook %s failed: %s", script.name, e)
    return started


def notify_resolved(result: "Result", config: "Config") -> int:
    """Notify all on_resolve hooks of a materialized image."""
    return run_hooks(
        config.hooks_dir,
        "on_resolve",
        result.source,
        result.temp_path,
    )
