import time


class ExpiringCache:
    """Per-process memo with wall-clock expiry checked on read.

    Starts empty, is never persisted and is not shared between server
    processes, so a value may be stale for up to ``ttl`` seconds.
    """

    def __init__(self, ttl, clock=time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries = {}

    def get(self, key):
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key, value):
        self._entries[key] = (self._clock(), value)

    def clear(self):
        self._entries.clear()

    def __len__(self):
        return len(self._entries)
