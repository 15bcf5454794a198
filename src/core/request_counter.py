import threading


class RequestCounter:
    """
    Process-wide request counter. Increment-and-read is atomic, so no two
    callers ever get the same value.
    """

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def increment(self) -> int:
        """
        Increment the counter and return the new value.
        """
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
