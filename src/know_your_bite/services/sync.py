"""Debounced write-ahead queue for profile persistence."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from know_your_bite.domain.profiles import UserProfile

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStatus:
    """Acknowledgment state of the latest profile write."""

    pending: bool
    failed: bool
    attempts: int
    last_synced_at: datetime | None
    last_error: str | None


@dataclass
class ProfileSyncQueue:
    """Writes the latest profile snapshot once an edit burst settles.

    A failed write keeps its snapshot pending and is retried after the same
    delay until ``max_attempts`` is reached, then reported through ``status``.
    """

    writer: Callable[[UserProfile], None]
    delay_seconds: float = 2.0
    max_attempts: int = 3
    _pending: UserProfile | None = field(default=None, init=False)
    _task: asyncio.Task | None = field(default=None, init=False)
    _attempts: int = field(default=0, init=False)
    _failed: bool = field(default=False, init=False)
    _last_synced_at: datetime | None = field(default=None, init=False)
    _last_error: str | None = field(default=None, init=False)

    def enqueue(self, profile: UserProfile) -> None:
        """Replace the pending snapshot and restart the debounce timer."""
        self._pending = profile
        self._attempts = 0
        self._failed = False
        self._schedule()

    def flush(self) -> bool:
        """Write the pending snapshot now; return True when nothing is left."""
        self._cancel_timer()
        return self._write_pending()

    def discard(self) -> None:
        """Drop the pending snapshot without writing it."""
        self._cancel_timer()
        self._pending = None
        self._attempts = 0
        self._failed = False

    def status(self) -> SyncStatus:
        """Return the current acknowledgment state."""
        return SyncStatus(
            pending=self._pending is not None,
            failed=self._failed,
            attempts=self._attempts,
            last_synced_at=self._last_synced_at,
            last_error=self._last_error,
        )

    def _schedule(self) -> None:
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop there is no timer to debounce with.
            self._write_pending()
            return
        self._task = loop.create_task(self._write_after_delay())

    async def _write_after_delay(self) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._task = None
        if not self._write_pending() and not self._failed:
            self._schedule()

    def _cancel_timer(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _write_pending(self) -> bool:
        profile = self._pending
        if profile is None:
            return True
        try:
            self.writer(profile)
        except Exception as exc:
            self._attempts += 1
            self._last_error = f"{type(exc).__name__}: {exc}"
            self._failed = self._attempts >= self.max_attempts
            _logger.exception(
                "Profile sync failed (attempt %s/%s) for %s",
                self._attempts,
                self.max_attempts,
                profile.id,
            )
            return False
        if self._pending is profile:
            self._pending = None
        self._attempts = 0
        self._failed = False
        self._last_error = None
        self._last_synced_at = datetime.now(tz=UTC)
        return True
