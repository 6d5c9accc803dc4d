"""
Unit tests for countdowns, the pollable ticker and the session clock.
"""

import pytest

from eitango.clock import Countdown, SessionClock, Ticker, format_seconds, urgency

from conftest import FakeTime


class TestCountdown:
    def test_tick_when_reaches_zero_then_true_once(self):
        c = Countdown(2)

        assert c.tick() is False
        assert c.tick() is True
        assert c.tick() is False
        assert c.remaining == 0
        assert c.expired

    def test_reset_when_new_total_then_remaining_restored(self):
        c = Countdown(5)
        c.tick()

        c.reset(10)

        assert c.remaining == 10
        assert c.elapsed == 0


class TestTicker:
    def test_poll_when_time_elapsed_then_one_call_per_second(self):
        calls = []
        t = Ticker(lambda: calls.append(1))
        t.start(now=0.0)

        assert t.poll(2.5) == 2
        assert t.poll(3.0) == 1
        assert len(calls) == 3

    def test_start_when_already_active_then_no_second_timer(self):
        calls = []
        t = Ticker(lambda: calls.append(1))

        assert t.start(now=0.0) is True
        assert t.start(now=0.5) is False
        t.poll(3.0)

        assert len(calls) == 3

    def test_suspend_when_resumed_then_fraction_carried(self):
        calls = []
        t = Ticker(lambda: calls.append(1))
        t.start(now=0.0)

        t.suspend(now=3.5)
        assert t.poll(10.0) == 0
        t.start(now=20.0)

        assert t.poll(20.25) == 0
        assert t.poll(20.5) == 1
        assert len(calls) == 4

    def test_suspend_when_already_suspended_then_noop(self):
        t = Ticker(lambda: None)
        t.start(now=0.0)
        t.suspend(now=0.5)

        t.suspend(now=9.0)
        t.start(now=10.0)

        assert t.poll(10.5) == 1

    def test_cancel_when_polled_later_then_no_callback(self):
        calls = []
        t = Ticker(lambda: calls.append(1))
        t.start(now=0.0)

        t.cancel()
        t.cancel()

        assert t.poll(100.0) == 0
        assert calls == []
        assert not t.active

    def test_poll_when_callback_cancels_then_stops_immediately(self):
        calls = []
        holder = {}

        def on_tick():
            calls.append(1)
            holder["t"].cancel()

        holder["t"] = Ticker(on_tick)
        holder["t"].start(now=0.0)

        assert holder["t"].poll(10.0) == 1
        assert calls == [1]

    def test_poll_when_uses_time_source_then_default_now(self):
        clock = FakeTime(start=0.0)
        calls = []
        t = Ticker(lambda: calls.append(1), time_source=clock)
        t.start()

        clock.advance(2)

        assert t.poll() == 2


class TestSessionClock:
    def make_clock(self, clock, **kwargs):
        events = []
        sc = SessionClock(
            total_sec=kwargs.pop("total_sec", 300),
            per_question_sec=kwargs.pop("per_question_sec", 20),
            on_session_expired=lambda: events.append("session"),
            on_question_expired=lambda: events.append("question"),
            time_source=clock,
            **kwargs,
        )
        return sc, events

    def test_pause_resume_when_toggled_then_only_unpaused_seconds_counted(self):
        clock = FakeTime(start=0.0)
        sc, _ = self.make_clock(clock, per_question_enabled=False)
        sc.start()

        unpaused = 0
        for run, paused in [(3, 7), (1, 4), (5, 1), (2, 30)]:
            clock.advance(run)
            sc.poll()
            unpaused += run
            assert sc.session.remaining == 300 - unpaused
            sc.pause()
            sc.pause()
            clock.advance(paused)
            sc.poll()
            assert sc.session.remaining == 300 - unpaused
            sc.resume()
            sc.resume()

        assert sc.elapsed == unpaused

    def test_poll_when_session_hits_zero_then_expired_once_and_stopped(self):
        clock = FakeTime(start=0.0)
        sc, events = self.make_clock(clock, total_sec=5, per_question_enabled=False)
        sc.start()

        clock.advance(60)
        sc.poll()

        assert events == ["session"]
        assert sc.session.remaining == 0
        assert not sc.running

    def test_poll_when_question_hits_zero_then_question_expired(self):
        clock = FakeTime(start=0.0)
        sc, events = self.make_clock(clock, per_question_sec=3)
        sc.start()

        clock.advance(3)
        sc.poll()

        assert events == ["question"]
        assert sc.session.remaining == 297

    def test_poll_when_both_hit_zero_same_tick_then_session_only(self):
        clock = FakeTime(start=0.0)
        sc, events = self.make_clock(clock, total_sec=4, per_question_sec=4)
        sc.start()

        clock.advance(4)
        sc.poll()

        assert events == ["session"]

    def test_both_countdowns_when_ticking_then_decrement_together(self):
        clock = FakeTime(start=0.0)
        sc, _ = self.make_clock(clock)
        sc.start()

        clock.advance(7)
        sc.poll()

        assert sc.session.remaining == 293
        assert sc.question.remaining == 13

    def test_next_question_when_called_then_question_countdown_reset(self):
        clock = FakeTime(start=0.0)
        sc, _ = self.make_clock(clock)
        sc.start()
        clock.advance(5)
        sc.poll()

        sc.next_question()

        assert sc.question.remaining == 20
        assert sc.session.remaining == 295

    def test_elapsed_when_session_timer_disabled_then_none(self):
        sc, _ = self.make_clock(FakeTime(), session_enabled=False)

        assert sc.elapsed is None


@pytest.mark.parametrize("sec, expected", [(0, "00:00"), (75, "01:15"), (300, "05:00"), (-3, "00:00")])
def test_format_seconds(sec, expected):
    assert format_seconds(sec) == expected


@pytest.mark.parametrize("sec, expected", [(30, ""), (10, "warn"), (6, "warn"), (5, "urgent"), (1, "urgent"), (0, "")])
def test_urgency(sec, expected):
    assert urgency(sec) == expected
