# tests/unit/runtime/test_timers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
import threading

import pytest

from modechart.interfaces.protocols import TimerService
from modechart.runtime.timers import AsyncioTimerService, ManualTimerService, ThreadingTimerService


@pytest.mark.parametrize("cls", [ManualTimerService, ThreadingTimerService, AsyncioTimerService])
def test_services_satisfy_protocol(cls):
    assert isinstance(cls(), TimerService)


# -----------------------------------------------------------------------------
# MANUAL
# -----------------------------------------------------------------------------


def test_manual_fires_in_deadline_order():
    timers = ManualTimerService()
    fired = []
    timers.schedule_once(300, lambda: fired.append("late"))
    timers.schedule_once(100, lambda: fired.append("early"))
    timers.schedule_once(100, lambda: fired.append("early-2"))
    assert timers.advance(99) == 0
    assert timers.advance(1) == 2
    assert fired == ["early", "early-2"]
    assert timers.now == 100
    timers.advance(500)
    assert fired == ["early", "early-2", "late"]
    assert timers.pending == 0


def test_manual_cancel():
    timers = ManualTimerService()
    fired = []
    handle = timers.schedule_once(10, lambda: fired.append(1))
    timers.cancel(handle)
    timers.cancel(handle)
    timers.advance(100)
    assert fired == []


def test_manual_cancel_compacts_heap():
    timers = ManualTimerService()
    keep = timers.schedule_once(50, lambda: None)
    for _ in range(1000):
        timers.cancel(timers.schedule_once(10, lambda: None))
    assert timers.pending == 1
    assert len(timers._heap) <= 3
    assert timers.advance(100) == 1
    timers.cancel(keep)


def test_manual_callback_may_schedule_more():
    timers = ManualTimerService()
    fired = []

    def first():
        fired.append(timers.now)
        timers.schedule_once(10, lambda: fired.append(timers.now))

    timers.schedule_once(10, first)
    timers.advance(50)
    assert fired == [10, 20]


# -----------------------------------------------------------------------------
# THREADING
# -----------------------------------------------------------------------------


def test_threading_timer_fires():
    timers = ThreadingTimerService()
    done = threading.Event()
    timers.schedule_once(10, done.set)
    assert done.wait(timeout=2.0)
    assert timers.pending == 0


def test_threading_timer_cancel():
    timers = ThreadingTimerService()
    done = threading.Event()
    handle = timers.schedule_once(200, done.set)
    timers.cancel(handle)
    assert not done.wait(timeout=0.4)


def test_threading_shutdown_cancels_everything():
    timers = ThreadingTimerService()
    done = threading.Event()
    timers.schedule_once(200, done.set)
    timers.schedule_once(300, done.set)
    timers.shutdown()
    assert timers.pending == 0
    assert not done.wait(timeout=0.5)


# -----------------------------------------------------------------------------
# ASYNCIO
# -----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_asyncio_timer_fires():
    timers = AsyncioTimerService()
    done = asyncio.Event()
    timers.schedule_once(10, done.set)
    await asyncio.wait_for(done.wait(), timeout=2.0)
    assert timers.pending == 0


@pytest.mark.asyncio
async def test_asyncio_timer_cancel():
    timers = AsyncioTimerService()
    fired = []
    handle = timers.schedule_once(20, lambda: fired.append(1))
    timers.cancel(handle)
    await asyncio.sleep(0.05)
    assert fired == []
