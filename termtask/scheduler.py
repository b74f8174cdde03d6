import logging
import math
import re
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from .errors import (AlreadyRunning, EmptyMessage, InvalidDuration,
                     InvalidTimeFormat, NotRunning)

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
DEFAULT_TIMER_MESSAGE = "Timer finished!"

Alert = Callable[[str, str], None]


def start_timer(seconds: float, callback: Callable[[], None]):
    """Run ``callback`` once after ``seconds``; the result has ``cancel()``."""
    timer = threading.Timer(seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


class Phase(Enum):
    IDLE = "idle"
    WORK = "work"
    BREAK = "break"
    RUNNING = "running"


class Slot:
    """Holds at most one pending timer. ``generation`` invalidates stale callbacks."""

    def __init__(self, label: str):
        self.label = label
        self.phase = Phase.IDLE
        self.handle = None
        self.generation = 0
        self.minutes = {}

    @property
    def idle(self) -> bool:
        return self.phase is Phase.IDLE

    def reset(self):
        handle, self.handle = self.handle, None
        self.phase = Phase.IDLE
        self.generation += 1
        return handle

    def __repr__(self):
        return f"Slot({self.label!r}, {self.phase.value})"


def _minutes(value, default: Optional[float] = None) -> float:
    if value is None or value == "":
        if default is None:
            raise InvalidDuration()
        value = default
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        raise InvalidDuration() from None
    if not math.isfinite(minutes) or minutes <= 0:
        raise InvalidDuration()
    return minutes


def _fmt(minutes: float) -> str:
    return f"{minutes:g}"


class Scheduler:
    """
    Pomodoro and countdown slots plus fire-and-forget reminders.

    Every callback takes ``lock`` before touching state, and the dispatcher
    holds the same lock while running a command, so a firing timer never
    interleaves with a command.
    """

    def __init__(self, alert: Alert, start_timer: Callable = start_timer,
                 now: Callable[[], datetime] = datetime.now, lock=None,
                 pomo_work: float = 25, pomo_break: float = 5):
        self.alert = alert
        self._start_timer = start_timer
        self.now = now
        self.lock = lock or threading.RLock()
        self.pomo_defaults = (pomo_work, pomo_break)
        self.pomodoro = Slot("pomodoro")
        self.countdown = Slot("timer")

    def _arm(self, slot: Slot, phase: Phase, minutes: float, on_fire: Callable[[], None]):
        slot.generation += 1
        generation = slot.generation
        slot.phase = phase

        def fire():
            with self.lock:
                if slot.generation != generation:
                    logger.debug("Dropping stale %s callback", slot.label)
                    return
                on_fire()

        slot.handle = self._start_timer(minutes * 60, fire)
        logger.debug("Armed %s (%s) for %s min", slot.label, phase.value, _fmt(minutes))

    # ────────────────────────────────────────────────────────────────────────
    # Pomodoro
    # ────────────────────────────────────────────────────────────────────────
    def start_pomodoro(self, work=None, brk=None) -> str:
        if not self.pomodoro.idle:
            raise AlreadyRunning("A Pomodoro timer is already running.")
        work_min = _minutes(work, self.pomo_defaults[0])
        break_min = _minutes(brk, self.pomo_defaults[1])
        self.pomodoro.minutes = {Phase.WORK: work_min, Phase.BREAK: break_min}
        self._run_phase(Phase.WORK)
        return f"Pomodoro started: {_fmt(work_min)} min work, {_fmt(break_min)} min break."

    def stop_pomodoro(self) -> str:
        if self.pomodoro.idle:
            raise NotRunning("No Pomodoro timer is running.")
        handle = self.pomodoro.reset()
        if handle is not None:
            handle.cancel()
        logger.info("Pomodoro stopped")
        return "Pomodoro timer stopped."

    def _run_phase(self, phase: Phase):
        upcoming = Phase.BREAK if phase is Phase.WORK else Phase.WORK

        def finished():
            self.alert(f"{phase.value.capitalize()} Session Over!",
                       f"Time for your {upcoming.value} session.")
            self._run_phase(upcoming)

        self._arm(self.pomodoro, phase, self.pomodoro.minutes[phase], finished)

    # ────────────────────────────────────────────────────────────────────────
    # Countdown
    # ────────────────────────────────────────────────────────────────────────
    def start_countdown(self, minutes, message: str = "") -> str:
        if not self.countdown.idle:
            raise AlreadyRunning("A timer is already running. Use 'timer stop' first.")
        mins = _minutes(minutes)
        text = message.strip() if message and message.strip() else DEFAULT_TIMER_MESSAGE

        def finished():
            self.countdown.reset()
            self.alert("Timer Complete!", text)

        self._arm(self.countdown, Phase.RUNNING, mins, finished)
        return f"Timer started for {_fmt(mins)} minute(s)."

    def stop_countdown(self) -> str:
        if self.countdown.idle:
            raise NotRunning("No timer is running.")
        handle = self.countdown.reset()
        if handle is not None:
            handle.cancel()
        return "Timer stopped."

    # ────────────────────────────────────────────────────────────────────────
    # Reminders
    # ────────────────────────────────────────────────────────────────────────
    def next_occurrence(self, time_str: str) -> datetime:
        match = TIME_RE.match(time_str or "")
        if not match:
            raise InvalidTimeFormat()
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise InvalidTimeFormat()
        now = self.now()
        target = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
        if target <= now:
            target += timedelta(days=1)
        return target

    def remind(self, time_str: str, message: str) -> datetime:
        target = self.next_occurrence(time_str)
        if not message or not message.strip():
            raise EmptyMessage()
        text = message.strip()
        delay = (target - self.now()).total_seconds()

        def fire():
            with self.lock:
                self.alert("Reminder", text)

        self._start_timer(max(delay, 0.001), fire)
        logger.info("Reminder scheduled for %s", target.isoformat(timespec="minutes"))
        return target
