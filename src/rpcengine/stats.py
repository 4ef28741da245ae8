"""Live statistics for a JSON-RPC server.

Counters are updated by the dispatch path and may be read from any thread
at any time. Every counter is an independent integer: writers increment
under a lock, and single-counter reads are plain attribute loads that see
some value the counter actually held. ``snapshot()`` takes the lock to
return all counters from the same instant.

What counts as what:

- payload: one call to ``handle``/``handle_with_state``/``handle_request``.
  A batch is one payload.
- request: a call that reached a handler. Malformed, invalid-version and
  unknown-method requests are not requests.
- success/error response: the outcome of a call with an id, plus every
  structural rejection (parse error, invalid request object, empty batch).
- success/error notification: the outcome of a call without an id.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from threading import Lock
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StatReporter(Protocol):
    """Read-only statistics interface (satisfied by ServerStats)."""

    @property
    def total_payloads(self) -> int: ...

    @property
    def total_requests(self) -> int: ...

    @property
    def total_success_responses(self) -> int: ...

    @property
    def total_error_responses(self) -> int: ...

    @property
    def total_success_notifications(self) -> int: ...

    @property
    def total_error_notifications(self) -> int: ...

    @property
    def current_active_requests(self) -> int: ...

    @property
    def started_at(self) -> datetime: ...

    def uptime(self) -> float: ...


@dataclass(frozen=True)
class StatsSnapshot:
    """All counters captured at one instant."""

    total_payloads: int
    total_requests: int
    total_success_responses: int
    total_error_responses: int
    total_success_notifications: int
    total_error_notifications: int
    current_active_requests: int
    uptime_seconds: float
    started_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        result = asdict(self)
        result["started_at"] = self.started_at.isoformat()
        return result


class ServerStats:
    """Thread-safe counters and gauges for one server.

    Uptime is measured on the monotonic clock, so it never goes backwards
    when the wall clock is adjusted; ``started_at`` is the wall-clock start
    time for display.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._total_payloads = 0
        self._total_requests = 0
        self._total_success_responses = 0
        self._total_error_responses = 0
        self._total_success_notifications = 0
        self._total_error_notifications = 0
        self._current_active_requests = 0
        self._started_at = datetime.now(UTC)
        self._started_monotonic = time.monotonic()

    # ------------------------------------------------------------------
    # Writers (dispatch path only)
    # ------------------------------------------------------------------

    def record_payload(self) -> None:
        with self._lock:
            self._total_payloads += 1

    def record_request_started(self) -> None:
        """Count a request reaching its handler and raise the active gauge."""
        with self._lock:
            self._total_requests += 1
            self._current_active_requests += 1

    def record_request_finished(self) -> None:
        """Lower the active gauge. Called on every handler exit path."""
        with self._lock:
            self._current_active_requests -= 1

    def record_outcome(self, *, notification: bool, success: bool) -> None:
        """Count one finished call in the matching success/error bucket."""
        with self._lock:
            if notification:
                if success:
                    self._total_success_notifications += 1
                else:
                    self._total_error_notifications += 1
            elif success:
                self._total_success_responses += 1
            else:
                self._total_error_responses += 1

    def record_rejection(self) -> None:
        """Count a payload rejected before a Request could be built."""
        with self._lock:
            self._total_error_responses += 1

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @property
    def total_payloads(self) -> int:
        return self._total_payloads

    @property
    def total_requests(self) -> int:
        return self._total_requests

    @property
    def total_success_responses(self) -> int:
        return self._total_success_responses

    @property
    def total_error_responses(self) -> int:
        return self._total_error_responses

    @property
    def total_success_notifications(self) -> int:
        return self._total_success_notifications

    @property
    def total_error_notifications(self) -> int:
        return self._total_error_notifications

    @property
    def current_active_requests(self) -> int:
        return self._current_active_requests

    @property
    def started_at(self) -> datetime:
        return self._started_at

    def uptime(self) -> float:
        """Seconds since the server was created."""
        return time.monotonic() - self._started_monotonic

    def snapshot(self) -> StatsSnapshot:
        """Capture every counter consistently."""
        with self._lock:
            return StatsSnapshot(
                total_payloads=self._total_payloads,
                total_requests=self._total_requests,
                total_success_responses=self._total_success_responses,
                total_error_responses=self._total_error_responses,
                total_success_notifications=self._total_success_notifications,
                total_error_notifications=self._total_error_notifications,
                current_active_requests=self._current_active_requests,
                uptime_seconds=self.uptime(),
                started_at=self._started_at,
            )


__all__ = ["ServerStats", "StatReporter", "StatsSnapshot"]
