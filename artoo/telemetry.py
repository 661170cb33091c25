"""In-process telemetry buffer for service metrics and events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

from .config import ObservabilityConfig
from .models import ObservabilityEvent


@dataclass
class TelemetryCollector:
    config: ObservabilityConfig
    max_buffered: int = 1000
    metrics: List[Dict[str, object]] = field(default_factory=list)
    events: List[ObservabilityEvent] = field(default_factory=list)

    def emit_metric(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        payload = {
            "name": name,
            "value": value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(labels or {}),
        }
        self.metrics.append(payload)
        del self.metrics[: -self.max_buffered]

    def emit_event(self, message: str, attributes: Dict[str, str] | None = None) -> None:
        self.events.append(ObservabilityEvent(event_type="custom", message=message, attributes=attributes))
        del self.events[: -self.max_buffered]

    def event_names(self) -> List[str]:
        return [event.message for event in self.events]
