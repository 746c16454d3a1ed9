"""
Audit Logging for the txgate Validator

Keeps an audit trail of validation verdicts: one event per validated
transaction, recording the outcome, the violated rule kinds and the time it
took. Events are held in a bounded in-memory buffer and can also be appended
to a JSON-lines file.

The validator itself holds no mutable state; everything that accumulates
across calls lives here, behind a lock.
"""

import json
import logging
import threading
import time
import uuid
from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional

from .results import ValidationResult


class AuditResult(Enum):
    """Audit event result types."""
    APPROVED = "approved"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass
class AuditEvent:
    """A single audited validation."""
    event_id: str
    timestamp: float
    validator_id: str
    transaction_id: str
    result: AuditResult
    duration_ms: Optional[float] = None
    error_kinds: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    def __post_init__(self):
        if not self.event_id:
            self.event_id = f"audit_{int(time.time() * 1000000)}_{uuid.uuid4().hex[:8]}"
        if not self.timestamp:
            self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        event_dict = asdict(self)
        event_dict["result"] = self.result.value
        return event_dict


class AuditLogger:
    """
    Thread-safe audit trail for validator operations.

    Config keys:
        validator_id: Identifier stamped on every event
        log_file: Optional JSON-lines file events are appended to
        max_memory_events: Size of the in-memory event buffer
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger("validator.audit")
        self.validator_id = self.config.get("validator_id", f"validator_{uuid.uuid4().hex[:8]}")

        log_file = self.config.get("log_file")
        self.log_file: Optional[Path] = Path(log_file) if log_file else None
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self.events: Deque[AuditEvent] = deque(maxlen=self.config.get("max_memory_events", 10000))
        self.error_kind_counts: Counter = Counter()
        self.validation_times: Deque[float] = deque(maxlen=1000)
        self.event_handlers: List[Callable[[AuditEvent], None]] = []

        self.stats = {
            "total_validations": 0,
            "approved_validations": 0,
            "rejected_validations": 0,
            "error_validations": 0,
            "write_errors": 0,
            "start_time": time.time(),
        }

    def log_validation(self,
                       transaction_id: str,
                       result: ValidationResult,
                       duration_ms: Optional[float] = None) -> str:
        """
        Record a completed validation.

        Args:
            transaction_id: ID of the validated transaction
            result: Verdict returned by the validator
            duration_ms: Time spent validating

        Returns:
            Event ID
        """
        event = AuditEvent(
            event_id="",
            timestamp=time.time(),
            validator_id=self.validator_id,
            transaction_id=transaction_id,
            result=AuditResult.APPROVED if result.valid else AuditResult.REJECTED,
            duration_ms=duration_ms,
            error_kinds=[kind.value for kind in result.kinds],
        )
        self._process_event(event)
        return event.event_id

    def log_failure(self,
                    transaction_id: str,
                    error: Exception,
                    duration_ms: Optional[float] = None) -> str:
        """
        Record a validation that could not complete.

        Args:
            transaction_id: ID of the transaction being validated
            error: Collaborator failure that aborted validation
            duration_ms: Time spent before the failure

        Returns:
            Event ID
        """
        event = AuditEvent(
            event_id="",
            timestamp=time.time(),
            validator_id=self.validator_id,
            transaction_id=transaction_id,
            result=AuditResult.ERROR,
            duration_ms=duration_ms,
            error_message=f"{error.__class__.__name__}: {error}",
        )
        self._process_event(event)
        return event.event_id

    def add_event_handler(self, handler: Callable[[AuditEvent], None]) -> None:
        """Register a callback invoked for every recorded event."""
        with self._lock:
            self.event_handlers.append(handler)

    def get_events(self, result: Optional[AuditResult] = None) -> List[AuditEvent]:
        """Get buffered events, optionally filtered by result."""
        with self._lock:
            events = list(self.events)
        if result is not None:
            events = [event for event in events if event.result == result]
        return events

    def get_statistics(self) -> Dict[str, Any]:
        """Get audit statistics."""
        with self._lock:
            times = list(self.validation_times)
            stats = dict(self.stats)
            error_kinds = dict(self.error_kind_counts)
            stored_events = len(self.events)

        uptime = time.time() - stats["start_time"]
        return {
            **stats,
            "validator_id": self.validator_id,
            "uptime_seconds": uptime,
            "stored_events": stored_events,
            "error_kinds": error_kinds,
            "avg_validation_time_ms": (sum(times) / len(times)) if times else 0.0,
        }

    def export_audit_log(self, output_path: str, format: str = "json") -> None:
        """
        Export buffered events.

        Args:
            output_path: Destination file
            format: "json" or "text"
        """
        events = self.get_events()
        if format == "json":
            data = {
                "export_timestamp": datetime.now(timezone.utc).isoformat(),
                "validator_id": self.validator_id,
                "total_events": len(events),
                "events": [event.to_dict() for event in events],
            }
            with open(output_path, "w") as f:
                json.dump(data, f, indent=2)
        elif format == "text":
            with open(output_path, "w") as f:
                f.write("txgate Validator Audit Log Export\n")
                f.write(f"Validator ID: {self.validator_id}\n")
                f.write(f"Total Events: {len(events)}\n")
                f.write("=" * 80 + "\n\n")
                for event in events:
                    f.write(f"Event ID: {event.event_id}\n")
                    f.write(f"Time: {datetime.fromtimestamp(event.timestamp).isoformat()}\n")
                    f.write(f"Transaction: {event.transaction_id}\n")
                    f.write(f"Result: {event.result.value}\n")
                    if event.error_kinds:
                        f.write(f"Violations: {', '.join(event.error_kinds)}\n")
                    if event.error_message:
                        f.write(f"Error: {event.error_message}\n")
                    f.write("\n" + "-" * 40 + "\n\n")
        else:
            raise ValueError(f"Unsupported export format: {format}")

    def _process_event(self, event: AuditEvent) -> None:
        with self._lock:
            self.events.append(event)
            self.stats["total_validations"] += 1
            self.stats[f"{event.result.value}_validations"] += 1
            self.error_kind_counts.update(event.error_kinds)
            if event.duration_ms is not None:
                self.validation_times.append(event.duration_ms)
            if self.log_file:
                self._write_event(event)
            handlers = list(self.event_handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Audit event handler failed: {e}")

    def _write_event(self, event: AuditEvent) -> None:
        try:
            with open(self.log_file, "a") as f:
                json.dump(event.to_dict(), f)
                f.write("\n")
        except OSError as e:
            self.stats["write_errors"] += 1
            self.logger.error(f"Failed to write audit event: {e}")

