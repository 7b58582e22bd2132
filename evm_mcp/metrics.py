"""In-process counters for HTTP requests and tool outcomes (single process only)."""

from __future__ import annotations

from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Deque, Dict, Optional, Tuple

SUCCESS = "success"
NOT_FOUND = "not_found"
INVALID_ARGUMENTS = "invalid_arguments"
ERROR = "error"

# Unregistered tool names share one bucket so callers cannot grow the table.
UNKNOWN_TOOL = "<unknown>"

RECENT_REQUESTS = 100


@dataclass(slots=True)
class ToolStats:
    outcomes: Counter = field(default_factory=Counter)
    last_duration_ms: Optional[float] = None

    def as_dict(self) -> Dict[str, object]:
        return {**self.outcomes, "last_duration_ms": self.last_duration_ms}


class MetricsRecorder:
    """Thread-safe; tool calls may be recorded from any transport."""

    def __init__(self, recent_requests: int = RECENT_REQUESTS) -> None:
        self._lock = Lock()
        self._requests = 0
        self._recent: Deque[Tuple[str, float]] = deque(maxlen=recent_requests)
        self._tools: Dict[str, ToolStats] = defaultdict(ToolStats)

    def incr_request(self) -> None:
        with self._lock:
            self._requests += 1

    def record_duration(self, request_id: str, duration_ms: float) -> None:
        with self._lock:
            self._recent.append((request_id, duration_ms))

    def record_tool(self, tool: str, outcome: str, *, duration_ms: Optional[float] = None) -> None:
        with self._lock:
            stats = self._tools[tool]
            stats.outcomes[outcome] += 1
            if duration_ms is not None:
                stats.last_duration_ms = duration_ms

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            tool_success = {name: s.outcomes[SUCCESS] for name, s in self._tools.items() if s.outcomes[SUCCESS]}
            tool_error = {}
            for name, stats in self._tools.items():
                failures = sum(count for outcome, count in stats.outcomes.items() if outcome != SUCCESS)
                if failures:
                    tool_error[name] = failures
            return {
                "requests": self._requests,
                "tool_success": tool_success,
                "tool_error": tool_error,
                "tools": {name: stats.as_dict() for name, stats in self._tools.items()},
                "recent_request_durations_ms": dict(self._recent),
            }

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._recent.clear()
            self._tools.clear()


default_metrics = MetricsRecorder()
