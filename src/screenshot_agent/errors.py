"""Exception taxonomy.

NotFoundError is the expected "nothing to hand over" outcome. Everything
else, including plain OSError from the filesystem, is a hard failure.
"""


class ScreenshotAgentError(Exception):
    """Base class for screenshot-agent errors."""
    pass


class NotFoundError(ScreenshotAgentError):
    """Raised when no image candidate exists."""

    def __init__(self, message: str = "no image found"):
        super().__init__(message)


class UnsupportedPlatformError(ScreenshotAgentError):
    """Raised when an operation has no implementation on this OS."""
    pass


class ClipboardUnavailableError(ScreenshotAgentError):
    """Raised when the platform clipboard cannot be accessed."""
    pass


class ClipboardTooLargeError(ScreenshotAgentError):
    """Raised when the clipboard image exceeds the configured ceiling."""
    pass


class TrashError(ScreenshotAgentError):
    """Raised when a file cannot be placed in the trash."""
    pass
