"""Request id allocation.

One ``IdAllocator`` lives on each client and is shared by every thread
that issues calls through it.
"""

from __future__ import annotations

import threading

from jsonrpc_http.jsonrpc import JsonRpcRequest


class IdAllocator:
    """Thread-safe request id counter.

    With ``auto_increment`` on (the default) every ``allocate`` hands out
    the next integer.  With it off the counter is frozen and every request
    gets the same id until ``set_next`` or ``set_auto_increment(True)``.
    Ids are never handed back, even when the call they were used for
    fails.
    """

    def __init__(self, start: int = 0, auto_increment: bool = True) -> None:
        self._lock = threading.Lock()
        self._next_id = start
        self._auto_increment = auto_increment

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    @property
    def auto_increment(self) -> bool:
        with self._lock:
            return self._auto_increment

    def allocate(self) -> int:
        return self.allocate_block(1)

    def allocate_block(self, size: int) -> int:
        """Reserve *size* consecutive ids and return the first one."""
        if size < 1:
            raise ValueError("block size must be positive")
        with self._lock:
            first = self._next_id
            if self._auto_increment:
                self._next_id += size
            return first

    def set_next(self, next_id: int) -> None:
        with self._lock:
            self._next_id = next_id

    def set_auto_increment(self, enabled: bool) -> None:
        with self._lock:
            self._auto_increment = enabled

    def reallocate(self, request: JsonRpcRequest) -> int:
        """Give an already built request a fresh id before resubmitting it."""
        request.id = self.allocate()
        return request.id
