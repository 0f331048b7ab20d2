"""
Pytest configuration and fixtures for tixsuite tests.
"""

from datetime import datetime, timedelta, timezone
import itertools

import pytest

from tixsuite.notify import Notifier
from tixsuite.repository import TicketLedger
from tixsuite.storage import MemoryStore


class ManualTimer:
    """Stand-in for threading.Timer that only fires when the test says so."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


class FakeClock:
    """Returns ISO timestamps one second apart, starting 2024-01-15 10:00:00 UTC."""

    def __init__(self, start=datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        value = self.now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        self.now += timedelta(seconds=1)
        return value


@pytest.fixture
def timers():
    return []


@pytest.fixture
def notifier(timers):
    def factory(interval, function, args=()):
        timer = ManualTimer(interval, function, args)
        timers.append(timer)
        return timer

    return Notifier(timer_factory=factory)


@pytest.fixture
def notes(notifier):
    """Every notification published (None entries are dismissals)."""
    seen = []
    notifier.subscribe(seen.append)
    return seen


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"00000000-0000-4000-8000-{next(counter):012d}"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store, notifier, clock, id_factory):
    return TicketLedger(store, notifier, clock=clock, id_factory=id_factory)
