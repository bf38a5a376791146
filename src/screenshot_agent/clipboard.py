"""Clipboard image reader.

Pillow's ImageGrab does the platform work (wl-paste/xclip on Linux,
osascript on macOS, the Win32 API on Windows). The clipboard is only read,
never modified.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageGrab

from .config import Config
from .errors import ClipboardTooLargeError, ClipboardUnavailableError, NotFoundError

log = logging.getLogger(__name__)

# Modes the PNG encoder writes as-is
PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


@dataclass(frozen=True)
class ClipboardCandidate:
    """Image bytes taken from the clipboard."""

    data: bytes

    def __repr__(self) -> str:
        return f"ClipboardCandidate(<{len(self.data)} bytes>)"


def _grab():
    try:
        return ImageGrab.grabclipboard()
    except NotImplementedError as e:
        # No clipboard backend (e.g. neither wl-paste nor xclip installed)
        raise ClipboardUnavailableError(f"clipboard unavailable: {e}") from e
    except (ChildProcessError, OSError) as e:
        raise ClipboardUnavailableError(f"clipboard read failed: {e}") from e


def _encode_png(image: Image.Image) -> bytes:
    if image.mode not in PNG_MODES:
        has_alpha = image.mode.upper().endswith("A") or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def read_clipboard(config: Optional[Config] = None) -> ClipboardCandidate:
    """Read the image currently on the clipboard.

    Returns:
        ClipboardCandidate with PNG-encoded bytes

    Raises:
        NotFoundError: If the clipboard holds no image
        ClipboardUnavailableError: If the clipboard cannot be accessed
        ClipboardTooLargeError: If the image exceeds config.max_clipboard_bytes
    """
    config = config or Config()

    grabbed = _grab()
    if not isinstance(grabbed, Image.Image):
        # None, or a list of copied file names
        raise NotFoundError("no image on clipboard")

    data = _encode_png(grabbed)
    if not data:
        raise NotFoundError("no image on clipboard")

    limit = config.max_clipboard_bytes
    if limit and len(data) > limit:
        raise ClipboardTooLargeError(
            f"clipboard image is {len(data)} bytes, limit is {limit}"
        )

    log.debug("Clipboard image: %d bytes", len(data))
    return ClipboardCandidate(data=data)
