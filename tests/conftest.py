"""Shared fixtures: a JSON store in tmp_path, fake timers and a fixed clock."""

from datetime import datetime

import pytest

from termtask.dispatcher import Dispatcher
from termtask.scheduler import Scheduler
from termtask.store import JsonFileStore, RecordStore

# a Sunday
NOW = datetime(2025, 6, 15, 12, 0, 0)


class FakeTimer:
    def __init__(self, seconds, callback):
        self.seconds = seconds
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


class FakeTimers:
    """Stands in for threading.Timer: records what was scheduled, fires on demand."""

    def __init__(self):
        self.started = []

    def __call__(self, seconds, callback):
        timer = FakeTimer(seconds, callback)
        self.started.append(timer)
        return timer

    @property
    def last(self):
        return self.started[-1]


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class StubEditor:
    def __init__(self):
        self.reply = "edited text"
        self.calls = []

    def __call__(self, index, text):
        self.calls.append((index, text))
        return self.reply


@pytest.fixture
def store(tmp_path):
    return RecordStore(JsonFileStore(str(tmp_path / "store.json")))


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def clock():
    return Clock(NOW)


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def scheduler(alerts, timers, clock):
    return Scheduler(lambda title, msg: alerts.append((title, msg)),
                     start_timer=timers, now=clock)


@pytest.fixture
def editor():
    return StubEditor()


@pytest.fixture
def opened():
    return []


@pytest.fixture
def app(store, scheduler, editor, opened, tmp_path):
    return Dispatcher(store, scheduler, export_dir=tmp_path, editor=editor, opener=opened.append)


def texts(responses):
    return [r.text for r in responses]
