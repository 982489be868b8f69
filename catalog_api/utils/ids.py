"""
Movie id generation.

Ids are fixed-width UTC timestamps, so sorting them as strings sorts them by
creation time. A generator never hands out the same id twice: if the clock
has not moved past the previous id, the previous id plus one microsecond is
used instead.
"""
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Optional

ID_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class MovieIdGenerator:
    def __init__(self):
        self._lock = Lock()
        self._last: Optional[datetime] = None

    def next_id(self, now: Optional[datetime] = None) -> str:
        with self._lock:
            current = now or datetime.now(timezone.utc)
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(microseconds=1)
            self._last = current
            return current.strftime(ID_FORMAT)


# Process-wide generator used by the catalogue writer
new_movie_id = MovieIdGenerator().next_id
