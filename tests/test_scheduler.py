from datetime import datetime

import pytest

from termtask.errors import (AlreadyRunning, EmptyMessage, InvalidDuration,
                             InvalidTimeFormat, NotRunning)
from termtask.scheduler import Phase


# ────────────────────────────────────────────────────────────────────────────
# Countdown
# ────────────────────────────────────────────────────────────────────────────
def test_countdown_fires_once_and_resets(scheduler, timers, alerts):
    assert scheduler.start_countdown("5", "tea") == "Timer started for 5 minute(s)."
    assert timers.last.seconds == 300
    timers.last.fire()
    assert alerts == [("Timer Complete!", "tea")]
    assert scheduler.countdown.idle
    assert len(timers.started) == 1


def test_countdown_rejects_second_start(scheduler):
    scheduler.start_countdown(5)
    with pytest.raises(AlreadyRunning):
        scheduler.start_countdown(1)


def test_countdown_stop(scheduler, timers):
    scheduler.start_countdown(5)
    assert scheduler.stop_countdown() == "Timer stopped."
    assert timers.last.cancelled
    with pytest.raises(NotRunning):
        scheduler.stop_countdown()


def test_stale_callback_is_ignored(scheduler, timers, alerts):
    scheduler.start_countdown(5)
    stale = timers.last
    scheduler.stop_countdown()
    stale.fire()
    assert alerts == []


def test_countdown_default_message(scheduler, timers, alerts):
    scheduler.start_countdown("0.5", "  ")
    assert timers.last.seconds == 30
    timers.last.fire()
    assert alerts == [("Timer Complete!", "Timer finished!")]


@pytest.mark.parametrize("minutes", [None, "", "0", "-1", "abc", "nan", "inf"])
def test_countdown_invalid_duration(scheduler, minutes):
    with pytest.raises(InvalidDuration):
        scheduler.start_countdown(minutes)
    assert scheduler.countdown.idle


# ────────────────────────────────────────────────────────────────────────────
# Pomodoro
# ────────────────────────────────────────────────────────────────────────────
def test_pomodoro_alternates_until_stopped(scheduler, timers, alerts):
    assert scheduler.start_pomodoro("1", "2") == "Pomodoro started: 1 min work, 2 min break."
    assert scheduler.pomodoro.phase is Phase.WORK
    assert timers.last.seconds == 60

    timers.last.fire()
    assert alerts[-1] == ("Work Session Over!", "Time for your break session.")
    assert scheduler.pomodoro.phase is Phase.BREAK
    assert timers.last.seconds == 120

    timers.last.fire()
    assert alerts[-1] == ("Break Session Over!", "Time for your work session.")
    assert scheduler.pomodoro.phase is Phase.WORK
    assert len(timers.started) == 3

    scheduler.stop_pomodoro()
    assert timers.last.cancelled
    assert scheduler.pomodoro.idle


def test_pomodoro_defaults(scheduler, timers):
    scheduler.start_pomodoro()
    assert timers.last.seconds == 25 * 60
    assert scheduler.pomodoro.minutes[Phase.BREAK] == 5


def test_pomodoro_single_slot(scheduler):
    scheduler.start_pomodoro()
    with pytest.raises(AlreadyRunning):
        scheduler.start_pomodoro()
    scheduler.stop_pomodoro()
    with pytest.raises(NotRunning):
        scheduler.stop_pomodoro()


def test_pomodoro_and_countdown_are_independent(scheduler):
    scheduler.start_pomodoro()
    scheduler.start_countdown(3)
    assert not scheduler.pomodoro.idle
    assert not scheduler.countdown.idle


def test_pomodoro_invalid_duration(scheduler):
    with pytest.raises(InvalidDuration):
        scheduler.start_pomodoro("0", "5")
    assert scheduler.pomodoro.idle


# ────────────────────────────────────────────────────────────────────────────
# Reminders
# ────────────────────────────────────────────────────────────────────────────
def test_reminder_later_today(scheduler, timers, alerts):
    target = scheduler.remind("13:30", "stand up")
    assert target == datetime(2025, 6, 15, 13, 30)
    assert timers.last.seconds == 90 * 60
    timers.last.fire()
    assert alerts == [("Reminder", "stand up")]


def test_reminder_rolls_over_to_tomorrow(scheduler, timers):
    target = scheduler.remind("11:00", "yesterday's news")
    assert target == datetime(2025, 6, 16, 11, 0)
    assert timers.last.seconds == 23 * 3600


def test_reminder_for_this_very_minute_goes_to_tomorrow(scheduler, timers):
    scheduler.remind("12:00", "now")
    assert timers.last.seconds == 24 * 3600


def test_reminders_are_unlimited(scheduler, timers, alerts):
    scheduler.remind("13:00", "one")
    scheduler.remind("13:00", "two")
    for timer in timers.started:
        timer.fire()
    assert alerts == [("Reminder", "one"), ("Reminder", "two")]


@pytest.mark.parametrize("time_str", ["", "1230", "25:00", "12:60", "ab:cd", "1:2", None])
def test_reminder_invalid_time(scheduler, time_str):
    with pytest.raises(InvalidTimeFormat):
        scheduler.remind(time_str, "msg")


def test_reminder_needs_message(scheduler, timers):
    with pytest.raises(EmptyMessage):
        scheduler.remind("13:00", "  ")
    assert timers.started == []
