"""
Duplicate submission debounce.

A (worker, substation) pair may create at most one inspection record per
window (10 s by default). Entries expire lazily once older than the window,
a full sweep runs every SWEEP_EVERY calls, and the oldest keys are evicted
when the map grows past max_entries.

This is a coarse, single-process guard. It resets on restart and is not a
uniqueness guarantee for the relational store.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Optional

logger = logging.getLogger(__name__)


def dedupe_key(employee_id: str, substation_name: str) -> str:
    return f"{employee_id}|{substation_name}"


class SubmissionDeduplicator:
    SWEEP_EVERY = 256

    def __init__(self, window_ms: int = 10_000, max_entries: int = 10_000) -> None:
        self.window_ms = window_ms
        self.max_entries = max_entries
        # key -> last accepted epoch ms, oldest acceptance first
        self._entries: "OrderedDict[str, int]" = OrderedDict()
        self._lock = threading.Lock()
        self._calls = 0

    def __len__(self) -> int:
        return len(self._entries)

    def should_accept(
        self,
        employee_id: str,
        substation_name: str,
        now_ms: Optional[int] = None,
    ) -> bool:
        """Return False for a repeat inside the window, else record and accept."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        key = dedupe_key(employee_id, substation_name)

        with self._lock:
            self._calls += 1
            if self._calls % self.SWEEP_EVERY == 0:
                self._sweep(now_ms)

            last = self._entries.get(key)
            if last is not None:
                if now_ms - last < self.window_ms:
                    logger.info(f"[DEDUPE] Duplicate request ignored for {key}")
                    return False
                del self._entries[key]

            self._entries[key] = now_ms
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
            return True

    def forget(self, employee_id: str, substation_name: str) -> None:
        """Drop the entry for a submission that was accepted but never stored."""
        with self._lock:
            self._entries.pop(dedupe_key(employee_id, substation_name), None)

    def sweep(self, now_ms: Optional[int] = None) -> int:
        """Drop every expired entry. Returns the number removed."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        with self._lock:
            return self._sweep(now_ms)

    def _sweep(self, now_ms: int) -> int:
        removed = 0
        # Insertion order is acceptance order, so stop at the first live entry
        while self._entries:
            key, last = next(iter(self._entries.items()))
            if now_ms - last < self.window_ms:
                break
            del self._entries[key]
            removed += 1
        return removed
