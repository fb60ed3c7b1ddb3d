"""Time-gated polling of the content source.

Every public read goes through :meth:`RefreshController.check_for_changes`.
The controller's lock doubles as the writer lock: at most one pull and
reload runs at a time, and readers arriving mid-reload wait for it.
"""

import logging
import threading
import time
from collections.abc import Callable

from method_catalog.store.source import ContentSource, is_up_to_date

logger = logging.getLogger(__name__)


class RefreshController:
    def __init__(
        self,
        source: ContentSource,
        interval: float,
        on_change: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.interval = interval
        self.on_change = on_change
        self._clock = clock
        self._lock = threading.Lock()
        self._closed = threading.Event()
        self.last_pull: float | None = None
        self.revision: str | None = None

    def mark_loaded(self, revision: str) -> None:
        """Record the revision the current snapshot was built from."""
        with self._lock:
            self.revision = revision
            self.last_pull = self._clock()

    def close(self) -> None:
        """Stop polling; the current snapshot keeps being served."""
        self._closed.set()

    def check_for_changes(self) -> bool:
        """Pull when the interval elapsed and reload on a new revision.

        Returns True when a reload happened. Failures are logged and the
        previous snapshot stays in service.
        """
        with self._lock:
            if self._closed.is_set():
                return False
            now = self._clock()
            if self.last_pull is not None and now - self.last_pull < self.interval:
                return False
            self.last_pull = now
            try:
                status = self.source.pull()
                if is_up_to_date(status):
                    return False
                revision = self.source.current_revision()
                if revision == self.revision:
                    return False
                logger.info(
                    "Refreshing catalog",
                    extra={"old_revision": self.revision, "new_revision": revision},
                )
                self.revision = revision
                self.on_change()
                return True
            except Exception:
                logger.warning("Error refreshing content, keeping current snapshot", exc_info=True)
                return False
