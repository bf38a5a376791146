"""
Structured event emitter.

Default: JSON lines to stderr (pipeable, distinguishable from log lines).
Extensible: call add_handler() to forward events to other transports.

Event format:
    {"event_type": "...", "timestamp": "...", "source": {"tool": "..."}, "data": {...}}

An emitter is created once per invocation and passed to whoever emits.
"""

import json
import sys
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TextIO

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]

EVENT_CATALOG = [
    {
        "event_type": "config.resolved",
        "data_fields": ["config_path", "source"],
    },
    {
        "event_type": "operation.started",
        "data_fields": ["operation_type", "operation_id", "clipboard_only", "use_downloads"],
    },
    {
        "event_type": "operation.completed",
        "data_fields": ["operation_type", "operation_id", "success", "outputs", "error_message"],
    },
    {
        "event_type": "artifact.created",
        "data_fields": ["file_path", "source"],
    },
    {
        "event_type": "error.handled",
        "data_fields": ["error_type", "message"],
    },
]


class EventEmitter:
    """Writes structured events to a stream and any registered handlers."""

    def __init__(
        self,
        source: str,
        stream: Optional[TextIO] = None,
        enabled: bool = True,
    ):
        """
        Args:
            source: Source identifier for events
            stream: Where JSON lines go (default: sys.stderr at emit time)
            enabled: Whether to write to the stream at all
        """
        self.source = source
        self.stream = stream
        self.enabled = enabled
        self._handlers: List[EventHandler] = []

    def add_handler(self, handler: EventHandler) -> None:
        """Register an additional event handler."""
        self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove a previously registered handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event_type: str, data: Dict[str, Any]) -> dict:
        """
        Emit a structured event.

        Args:
            event_type: Event type (e.g., "operation.completed")
            data: Event payload

        Returns:
            The event dict that was emitted
        """
        event = {
            "event_type": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": {
                "tool": self.source,
            },
            "data": data,
        }

        if self.enabled:
            stream = self.stream or sys.stderr
            print(json.dumps(event, default=str), file=stream, flush=True)

        for handler in self._handlers:
            try:
                handler(event)
            except Exception as exc:
                logger.debug("Event handler error: %s", exc)

        return event
