"""
Structured Event Logging System

The diagnostic sink for copyops. Every progress or failure message the
interpreter produces goes through an object with two methods:

- info(message): routine/progress events
- warn(message): errors, skips and unrecognized instructions

EventEmitter implements both. Events are:
- Forwarded to standard logging
- Buffered in memory for the current session (queryable)
- Optionally appended to a JSON lines file
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol


logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    """Two-method interface every diagnostic receiver provides."""

    def info(self, message: str) -> None:
        ...

    def warn(self, message: str) -> None:
        ...


class EventSeverity(Enum):
    """Severity levels for events."""
    INFO = auto()
    WARNING = auto()


@dataclass
class StructuredEvent:
    """
    A structured event with consistent format.
    """
    event_id: str
    timestamp: datetime
    severity: EventSeverity
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'event_id': self.event_id,
            'timestamp': self.timestamp.isoformat(),
            'severity': self.severity.name,
            'message': self.message,
            'context': self.context,
            'session_id': self.session_id
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())


class EventEmitter:
    """
    Emits structured events to logging, an in-memory buffer and an optional file.
    """

    def __init__(
        self,
        log_file: Optional[Path] = None,
        session_id: Optional[str] = None,
        enable_console: bool = True
    ):
        """
        Initialize event emitter.

        Args:
            log_file: Path to event log file (JSON lines format); None disables it
            session_id: Session identifier for grouping events
            enable_console: Emit via standard logging
        """
        self.log_file = Path(log_file) if log_file else None
        self.session_id = session_id or str(uuid.uuid4())
        self.enable_console = enable_console

        self.event_buffer: List[StructuredEvent] = []

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def info(self, message: str) -> None:
        self.emit(message, EventSeverity.INFO)

    def warn(self, message: str) -> None:
        self.emit(message, EventSeverity.WARNING)

    def emit(
        self,
        message: str,
        severity: EventSeverity = EventSeverity.INFO,
        context: Optional[Dict] = None
    ) -> StructuredEvent:
        """
        Emit a structured event.

        Args:
            message: Human-readable message
            severity: Event severity
            context: Optional context data

        Returns:
            The emitted event
        """
        event = StructuredEvent(
            event_id=str(uuid.uuid4()),
            timestamp=datetime.now(),
            severity=severity,
            message=message,
            context=context or {},
            session_id=self.session_id
        )

        self.event_buffer.append(event)

        if self.enable_console:
            self._emit_to_console(event)

        if self.log_file:
            self._emit_to_file(event)

        return event

    def _emit_to_console(self, event: StructuredEvent):
        """Emit event via standard logging."""
        level_map = {
            EventSeverity.INFO: logging.INFO,
            EventSeverity.WARNING: logging.WARNING
        }
        logger.log(level_map.get(event.severity, logging.INFO), event.message)

    def _emit_to_file(self, event: StructuredEvent):
        """Append event to the JSON lines file."""
        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(event.to_json() + '\n')
        except OSError as e:
            logger.error(f"Failed to write event to file: {e}")

    def query_events(
        self,
        severity: Optional[EventSeverity] = None,
        contains: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> List[StructuredEvent]:
        """
        Query buffered events.

        Args:
            severity: Filter by severity
            contains: Only events whose message contains this text
            since: Events at or after this timestamp

        Returns:
            Filtered list of events
        """
        filtered = self.event_buffer

        if severity:
            filtered = [e for e in filtered if e.severity == severity]

        if contains:
            filtered = [e for e in filtered if contains in e.message]

        if since:
            filtered = [e for e in filtered if e.timestamp >= since]

        return filtered

    @property
    def warning_count(self) -> int:
        return len(self.query_events(severity=EventSeverity.WARNING))
