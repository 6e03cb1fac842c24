"""Event synchronization service.

Keeps the store in step with the remote Event Service. A sync either
replaces the whole store with the service's event list and statistics, or
keeps the current local set and recomputes statistics from it. Remote
failures never reach the caller.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from eventdesk.core.auth import AuthContext
from eventdesk.core.cancellation import CancellationToken
from eventdesk.core.config import settings
from eventdesk.core.errors import EventsError, OperationCancelled
from eventdesk.models import StatsSummary
from eventdesk.service.client import EventServiceClient
from eventdesk.service.dates import Clock, local_now
from eventdesk.service.seed import baseline_events
from eventdesk.service.statistics import compute_statistics
from eventdesk.service.store import EventStore

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    source: Literal["remote", "local", "cancelled"]
    events: int = 0
    error: str | None = None


@dataclass
class SyncState:
    """Result of the most recent completed (non-cancelled) sync."""
    last_sync_time: datetime | None = None
    success: bool | None = None
    source: str | None = None
    error: str | None = None
    history: list[SyncOutcome] = field(default_factory=list)

    def record(self, outcome: SyncOutcome, when: datetime) -> None:
        self.last_sync_time = when
        self.success = outcome.source == "remote"
        self.source = outcome.source
        self.error = outcome.error
        self.history = (self.history + [outcome])[-20:]

    def as_dict(self) -> dict:
        return {
            "last_sync_time": self.last_sync_time.isoformat() if self.last_sync_time else None,
            "last_sync_success": self.success,
            "last_sync_source": self.source,
            "last_sync_error": self.error,
        }


class SyncController:
    """Runs cancellable fetch-or-fallback cycles against the Event Service.

    Each ``begin()`` cancels the token of the sync before it, so only the
    most recently started sync can commit. A cancelled sync leaves the
    store and the statistics exactly as they were.
    """

    def __init__(
        self,
        store: EventStore,
        client: EventServiceClient,
        clock: Clock = local_now,
        seed_baseline: bool | None = None,
    ) -> None:
        self.store = store
        self.client = client
        self.state = SyncState()
        self._clock = clock
        self._seed_baseline = settings.seed_baseline_events if seed_baseline is None else seed_baseline
        self._seeded = False
        self._current: CancellationToken | None = None
        self._statistics: StatsSummary | None = None
        self._statistics_version = -1

    def begin(self, name: str = "sync") -> CancellationToken:
        """Issue a token for a new sync, superseding any sync in flight."""
        if self._current is not None:
            self._current.cancel("superseded")
        self._current = CancellationToken(name)
        return self._current

    def cancel_all(self, reason: str = "shutdown") -> None:
        if self._current is not None:
            self._current.cancel(reason)
            self._current = None

    def ensure_seeded(self) -> None:
        """Load the baseline set on first run if nothing else is loaded."""
        if self._seeded or len(self.store) or not self._seed_baseline:
            return
        self.store.replace_all(baseline_events(self._clock()))
        self._seeded = True
        logger.info("Seeded store with baseline events")

    @property
    def statistics(self) -> StatsSummary:
        """Cached statistics, recomputed locally once the store has changed."""
        if self._statistics is None or self._statistics_version != self.store.version:
            self._set_statistics(self.compute_local_statistics())
        return self._statistics

    def compute_local_statistics(self) -> StatsSummary:
        return compute_statistics(
            self.store.all(),
            self.store.registration_counts(),
            self.store.confirmed_counts(),
            now=self._clock(),
        )

    def _set_statistics(self, stats: StatsSummary) -> None:
        self._statistics = stats
        self._statistics_version = self.store.version

    async def sync(self, auth: AuthContext, token: CancellationToken | None = None) -> SyncOutcome:
        """
        Refresh the store from the Event Service, or keep the local set.

        Without a valid credential the remote call is skipped. If either
        remote call fails, the current set is kept and statistics are
        recomputed from it. The token is checked before the remote calls
        and again before anything is committed.
        """
        token = token or self.begin()
        try:
            token.raise_if_cancelled("before remote call")

            if not self.client.enabled:
                return self._keep_local(token, "Event Service not configured")
            if not auth.is_valid:
                logger.info("No valid credentials, using local events")
                return self._keep_local(token, "No valid credentials")

            try:
                events, stats = await token.run(self.client.fetch_snapshot(auth))
            except EventsError as e:
                logger.info(f"Event Service unavailable, using local events: {e}")
                return self._keep_local(token, str(e))

            token.raise_if_cancelled("before commit")
            count = self.store.replace_all(events)
            self._set_statistics(stats)
            self._seeded = True
            outcome = SyncOutcome("remote", count)
            self.state.record(outcome, self._clock())
            logger.info(f"Sync completed from Event Service: {count} events")
            return outcome

        except OperationCancelled as e:
            logger.debug(f"Sync discarded: {e}")
            return SyncOutcome("cancelled", len(self.store), error=str(e))
        finally:
            if self._current is token:
                self._current = None

    def _keep_local(self, token: CancellationToken, reason: str) -> SyncOutcome:
        token.raise_if_cancelled("before commit")
        self.ensure_seeded()
        self._set_statistics(self.compute_local_statistics())
        outcome = SyncOutcome("local", len(self.store), error=reason)
        self.state.record(outcome, self._clock())
        return outcome
