# modechart/runtime/timers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
from typing import Dict, List, Optional, Tuple

from modechart.interfaces.types import TimerCallback

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 1000


class ThreadingTimerService:
    """
    Timer service backed by ``threading.Timer``. Callbacks run on the timer
    thread, so consumers must serialize them with their own event handling.
    """

    def __init__(self) -> None:
        self._timers: Dict[int, threading.Timer] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> int:
        with self._lock:
            handle = next(self._ids)

            def _fire() -> None:
                with self._lock:
                    if self._timers.pop(handle, None) is None:
                        return
                callback()

            timer = threading.Timer(delay_ms / 1000.0, _fire)
            timer.daemon = True
            self._timers[handle] = timer
        timer.start()
        return handle

    def cancel(self, handle: int) -> None:
        with self._lock:
            timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def shutdown(self) -> None:
        """Cancel every outstanding timer."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class AsyncioTimerService:
    """
    Timer service backed by ``loop.call_later``. Callbacks run on the event loop,
    between other callbacks, so they never interleave with synchronous handlers.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._handles: Dict[int, asyncio.TimerHandle] = {}
        self._ids = itertools.count(1)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> int:
        handle = next(self._ids)

        def _fire() -> None:
            if self._handles.pop(handle, None) is not None:
                callback()

        self._handles[handle] = self._get_loop().call_later(delay_ms / 1000.0, _fire)
        return handle

    def cancel(self, handle: int) -> None:
        timer = self._handles.pop(handle, None)
        if timer is not None:
            timer.cancel()

    @property
    def pending(self) -> int:
        return len(self._handles)


class ManualTimerService:
    """
    Deterministic timer service driven by a virtual clock. Nothing fires until
    advance() moves the clock past a deadline; due callbacks then run in deadline
    order (ties in scheduling order) on the caller's thread.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._heap: List[Tuple[float, int]] = []
        self._callbacks: Dict[int, TimerCallback] = {}
        self._ids = itertools.count(1)

    @property
    def now(self) -> float:
        """Current virtual time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def schedule_once(self, delay_ms: float, callback: TimerCallback) -> int:
        handle = next(self._ids)
        self._callbacks[handle] = callback
        heapq.heappush(self._heap, (self._now + delay_ms, handle))
        return handle

    def cancel(self, handle: int) -> None:
        if self._callbacks.pop(handle, None) is None:
            return
        # compact once cancelled entries outnumber live ones
        if len(self._heap) > 2 * len(self._callbacks):
            self._heap = [entry for entry in self._heap if entry[1] in self._callbacks]
            heapq.heapify(self._heap)

    def advance(self, delay_ms: float) -> int:
        """
        Move the clock forward by ``delay_ms`` and run every callback that became due.

        :return: Number of callbacks fired.
        """
        deadline = self._now + delay_ms
        fired = 0
        while self._heap and self._heap[0][0] <= deadline:
            when, handle = heapq.heappop(self._heap)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            self._now = when
            callback()
            fired += 1
        self._now = deadline
        logger.debug("Virtual clock at %sms, %d timer(s) fired", self._now, fired)
        return fired
