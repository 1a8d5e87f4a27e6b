# o2d/dispatch_dashboard/queries.py
"""
Data loading for the Dispatch Dashboard

Fetches GET /dashboard/summary and keeps the latest DashboardSnapshot:
- initial load, manual refresh and periodic refresh share one fetch path
- a fetch already in flight coalesces new requests (no queueing)
- every fetch carries a sequence number; a response older than the latest
  request is dropped, including one from an abandoned fetch
- failures keep the previous snapshot on screen with a banner; without a
  snapshot the dashboard shows a blocking error

The instance lives in st.session_state so it survives script reruns.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ..api_client import ApiClient, unwrap_envelope
from ..errors import MalformedResponseError, O2DError
from .constants import DASHBOARD_SUMMARY_PATH, REFRESH_INTERVAL_SECONDS
from .models import DashboardSnapshot

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to load dashboard data"


@dataclass(frozen=True)
class FetchTicket:
    sequence: int
    started_at: datetime


class DashboardDataSource:
    """
    Holder of the current dashboard snapshot.

    Usage:
        source = DashboardDataSource(client, refresh_interval=300, tz="Asia/Kolkata")
        source.ensure_loaded()

        if source.blocking_error:
            st.error(source.blocking_error)
        elif source.snapshot is not None:
            render(source.snapshot)
    """

    def __init__(
        self,
        client: ApiClient,
        clock: Callable[[], datetime] = datetime.now,
        refresh_interval: int = REFRESH_INTERVAL_SECONDS,
        stale_after: Optional[float] = None,
        tz: Optional[str] = None,
        path: str = DASHBOARD_SUMMARY_PATH
    ):
        """
        Args:
            client: ApiClient for the dashboard backend
            clock: Source of "now" (injectable for tests)
            refresh_interval: Seconds between periodic refreshes
            stale_after: Seconds after which an unanswered fetch is abandoned;
                defaults to twice the client timeout
            tz: Timezone used to resolve calendar days
            path: Endpoint path
        """
        self.client = client
        self.clock = clock
        self.refresh_interval = timedelta(seconds=refresh_interval)
        self.stale_after = timedelta(seconds=stale_after if stale_after is not None else 2 * client.timeout)
        self.tz = tz
        self.path = path

        self.snapshot: Optional[DashboardSnapshot] = None
        self.error: Optional[str] = None
        self.last_attempt_at: Optional[datetime] = None

        self._in_flight: Optional[FetchTicket] = None
        self._last_sequence = 0
        self._applied_sequence = 0

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    @property
    def is_loading(self) -> bool:
        return self.snapshot is None and self.in_flight

    @property
    def is_refreshing(self) -> bool:
        return self.snapshot is not None and self.in_flight

    @property
    def blocking_error(self) -> Optional[str]:
        return self.error if self.snapshot is None else None

    @property
    def banner_error(self) -> Optional[str]:
        return self.error if self.snapshot is not None else None

    # =========================================================================
    # FETCH LIFECYCLE
    # =========================================================================

    def begin_fetch(self) -> Optional[FetchTicket]:
        """Start a fetch, or return None if one is already outstanding."""
        now = self.clock()

        if self._in_flight is not None:
            if now - self._in_flight.started_at < self.stale_after:
                logger.debug(f"Fetch #{self._in_flight.sequence} in flight, request coalesced")
                return None
            logger.warning(f"Abandoning fetch #{self._in_flight.sequence}, no response after {self.stale_after}")

        self._last_sequence += 1
        ticket = FetchTicket(sequence=self._last_sequence, started_at=now)
        self._in_flight = ticket
        self.last_attempt_at = now
        return ticket

    def _settle(self, ticket: FetchTicket) -> bool:
        """Clear the in-flight marker; False when the ticket is outdated."""
        if self._in_flight is not None and self._in_flight.sequence == ticket.sequence:
            self._in_flight = None

        if ticket.sequence < self._last_sequence or ticket.sequence <= self._applied_sequence:
            logger.info(f"Discarding response #{ticket.sequence}, newer fetch #{self._last_sequence} exists")
            return False
        return True

    def complete_fetch(self, ticket: FetchTicket, payload: Any) -> bool:
        """
        Apply a response. Returns True if the snapshot was replaced.
        """
        if not self._settle(ticket):
            return False

        try:
            data = unwrap_envelope(payload, "dashboard data")
            snapshot = DashboardSnapshot.from_payload(data, fetched_at=self.clock(), tz=self.tz)
        except O2DError as e:
            self._record_failure(ticket, e)
            return False
        except (TypeError, ValueError, OverflowError) as e:
            self._record_failure(ticket, MalformedResponseError(f"Invalid dashboard data: {e}"))
            return False

        self.snapshot = snapshot
        self._applied_sequence = ticket.sequence
        self.error = None
        logger.info(f"Dashboard data loaded: {snapshot.row_count} rows (fetch #{ticket.sequence})")
        return True

    def fail_fetch(self, ticket: FetchTicket, error: Exception) -> bool:
        if not self._settle(ticket):
            return False
        self._record_failure(ticket, error)
        return True

    def _record_failure(self, ticket: FetchTicket, error: Exception):
        self.error = str(error) or DEFAULT_ERROR_MESSAGE
        if self.snapshot is None:
            logger.error(f"Dashboard fetch #{ticket.sequence} failed with no data to show: {self.error}")
        else:
            logger.warning(f"Dashboard fetch #{ticket.sequence} failed, keeping previous data: {self.error}")

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def refresh(self) -> bool:
        """Fetch now (manual refresh). Returns True if new data was applied."""
        ticket = self.begin_fetch()
        if ticket is None:
            return False

        try:
            payload = self.client.get_json(self.path)
        except O2DError as e:
            self.fail_fetch(ticket, e)
            return False

        return self.complete_fetch(ticket, payload)

    def ensure_loaded(self) -> bool:
        """Initial load: fetch only when there is no snapshot and no error yet."""
        if self.snapshot is not None or self.error is not None:
            return False
        return self.refresh()

    def is_due(self, now: Optional[datetime] = None) -> bool:
        if self.last_attempt_at is None:
            return True
        now = now or self.clock()
        return now - self.last_attempt_at >= self.refresh_interval

    def tick(self, now: Optional[datetime] = None) -> bool:
        """Periodic refresh; a no-op until the interval has elapsed."""
        if not self.is_due(now):
            return False
        return self.refresh()

    def __repr__(self) -> str:
        return (
            f"DashboardDataSource(rows={self.snapshot.row_count if self.snapshot else None}, "
            f"in_flight={self.in_flight}, error={self.error!r})"
        )


__all__ = [
    'DashboardDataSource',
    'FetchTicket',
    'DEFAULT_ERROR_MESSAGE',
]
