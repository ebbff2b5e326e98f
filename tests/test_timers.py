from __future__ import annotations

import unittest

from tasksidebar.runtime.timers import PollingScheduler, PollingTimer


class _Clock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class PollingTimerTests(unittest.TestCase):
    def test_fires_only_when_due_and_rearms_from_now(self) -> None:
        calls: list[str] = []
        timer = PollingTimer("t", 1.0, lambda: calls.append("tick"))
        self.assertFalse(timer.fire_if_due(5.0))

        timer.arm(10.0)
        self.assertFalse(timer.fire_if_due(10.5))
        self.assertTrue(timer.fire_if_due(13.0))
        self.assertEqual(timer.deadline, 14.0)
        self.assertEqual(calls, ["tick"])

    def test_cancel_disarms(self) -> None:
        timer = PollingTimer("t", 1.0, lambda: None)
        timer.arm(0.0)
        timer.cancel()
        self.assertFalse(timer.armed)
        self.assertFalse(timer.fire_if_due(50.0))


class PollingSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        self.calls: list[str] = []
        self.refresh = PollingTimer("data-refresh", 1.0, lambda: self.calls.append("refresh"), self.clock)
        self.check = PollingTimer("completion-check", 2.0, lambda: self.calls.append("check"), self.clock)
        self.scheduler = PollingScheduler([self.refresh, self.check], self.clock)

    def test_start_arms_every_timer_and_reports_next_deadline(self) -> None:
        self.scheduler.start()
        self.assertEqual(self.scheduler.next_deadline(), 101.0)
        self.assertEqual(self.scheduler.seconds_until_next(100.25), 0.75)
        self.assertEqual(self.scheduler.seconds_until_next(105.0), 0.0)

    def test_run_due_fires_each_due_timer(self) -> None:
        self.scheduler.start()
        self.assertEqual(self.scheduler.run_due(101.0), 1)
        self.assertEqual(self.scheduler.run_due(102.5), 2)
        self.assertEqual(self.calls, ["refresh", "refresh", "check"])

    def test_pause_clears_deadlines_until_resume(self) -> None:
        self.scheduler.start()
        self.scheduler.pause()
        self.assertIsNone(self.scheduler.next_deadline())
        self.assertIsNone(self.scheduler.seconds_until_next())
        self.assertEqual(self.scheduler.run_due(500.0), 0)

        self.clock.now = 200.0
        self.scheduler.resume()
        self.assertFalse(self.scheduler.paused)
        self.assertEqual(self.scheduler.next_deadline(), 201.0)

    def test_callback_that_pauses_stops_remaining_timers(self) -> None:
        self.refresh.callback = self.scheduler.pause
        self.scheduler.start()
        self.assertEqual(self.scheduler.run_due(110.0), 1)
        self.assertEqual(self.calls, [])


if __name__ == "__main__":
    unittest.main()
