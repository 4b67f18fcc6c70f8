# pentode/session/history.py
import threading
from typing import List, Optional

from ..models.url import Url
from ..protocol.errors import NoHistoryError


class NavigationHistory:
    """Stack of rendered URLs, most recent last."""

    def __init__(self):
        self._entries: List[Url] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def current(self) -> Optional[Url]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def push(self, url: Url) -> None:
        with self._lock:
            self._entries.append(url)

    def pop_for_back(self) -> Url:
        """Discard the current entry and return the one beneath it."""
        with self._lock:
            if len(self._entries) < 2:
                raise NoHistoryError("Nothing to go back to")
            self._entries.pop()
            return self._entries[-1]

    def back_enabled(self) -> bool:
        with self._lock:
            return len(self._entries) > 1
