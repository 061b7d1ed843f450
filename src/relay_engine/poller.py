"""Event polling

One ``EventPoller`` per tracked event type, each a sequential loop:
1. query events after the current cursor (ascending, bounded page)
2. hand the whole batch to the tracker's handler
3. persist the next cursor only after the handler returned
4. poll again at once if more pages exist, otherwise after the interval

Ledger query errors count as "no events"; handler and cursor store errors
leave the cursor where it was, so the same batch is fetched again next tick.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from . import db
from .errors import LedgerError

logger = logging.getLogger(__name__)


@dataclass
class EventTracker:
    """Event type to follow and its handler"""
    type: str  # cursor key
    filter: Dict[str, Any]
    callback: Callable[[List], Any]


def module_filter(package_id: str, module: str) -> Dict[str, Any]:
    return {"MoveEventModule": {"package": package_id, "module": module}}


class EventPoller:
    """Polling loop for one tracker"""

    def __init__(self, client, tracker: EventTracker, interval: float = 5.0,
                 page_size: Optional[int] = 50, stop_event: Optional[threading.Event] = None):
        self.client = client
        self.tracker = tracker
        self.interval = interval
        self.page_size = page_size
        self.stop_event = stop_event or threading.Event()
        self.cursor: Optional[Dict[str, str]] = None
        self._thread: Optional[threading.Thread] = None

    def load_cursor(self) -> None:
        self.cursor = db.get_cursor(self.tracker.type)
        if self.cursor is None:
            logger.info(f"No cursor for {self.tracker.type}, starting from genesis")
        else:
            logger.info(f"Resuming {self.tracker.type} from {self.cursor}")

    def poll_once(self) -> bool:
        """Fetch and handle one page

        Returns:
            True when the ledger reported more pages

        Raises:
            whatever the handler or the cursor store raised
        """
        try:
            page = self.client.query_events(
                self.tracker.filter, cursor=self.cursor, limit=self.page_size, descending=False,
            )
        except LedgerError as e:
            logger.warning(f"Event query for {self.tracker.type} failed: {e}")
            return False

        if not page.data:
            return False

        logger.debug(f"{len(page.data)} {self.tracker.type} events")
        self.tracker.callback(page.data)

        if page.next_cursor is not None:
            position = page.next_cursor.to_cursor()
            db.save_cursor(self.tracker.type, position)
            self.cursor = position
        return page.has_next_page

    def run(self) -> None:
        """Poll until the stop event is set"""
        self.load_cursor()
        self._loop()

    def start(self) -> threading.Thread:
        """Load the cursor and run the loop on a daemon thread"""
        self.load_cursor()
        self._thread = threading.Thread(
            target=self._loop, name=f"poller-{self.tracker.type}", daemon=True,
        )
        self._thread.start()
        return self._thread

    def _loop(self) -> None:
        while not self.stop_event.is_set():
            try:
                has_more = self.poll_once()
            except Exception:
                logger.exception(f"Failed to handle {self.tracker.type} events, will retry")
                has_more = False
            if not has_more:
                self.stop_event.wait(self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
