"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single lifecycle event recorded by the Tracker."""

    id: str
    event_type: str  # e.g. "status_changed", "escalation_refused"
    actor: str  # who caused this event
    data: dict
    timestamp: datetime
