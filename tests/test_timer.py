"""
Tests for the timer state machine.
"""

import unittest

from timerkit import IdentifierConflict, InvalidCallback, ManualScheduler, TimerRegistry, TimerStatus
from timerkit.timer import normalize_delay, normalize_repeat
from timerkit.unit import Millisecond, Minute, Second


class RecordingScheduler:
    """Scheduler whose cancel cannot stop a callback that is already in flight."""

    def __init__(self):
        self.calls = []

    def schedule_once(self, delay, callback):
        self.calls.append((delay, callback))
        return len(self.calls)

    def cancel(self, handle):
        pass

    def now(self):
        return 0.0


class TimerTestCase(unittest.TestCase):
    """Base fixture: a registry on a virtual clock."""

    def setUp(self):
        self.scheduler = ManualScheduler()
        self.registry = TimerRegistry(self.scheduler)
        self.fired = []

    def tearDown(self):
        self.registry.destroy_all()

    def make_timer(self, **properties):
        return self.registry.create(**properties).bind(self.fired.append)


class TestStartAndFire(TimerTestCase):
    """Test start, fire and the stopped/started transitions."""

    def test_initial_state(self):
        """Test a new timer is stopped and unbound."""
        timer = self.registry.create(delay=100)
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertIsNone(timer.last_run)
        self.assertIsNone(timer.remaining_delay)
        self.assertFalse(timer.repeat)
        self.assertFalse(timer.is_bound())
        self.assertFalse(timer.deleted)

    def test_fires_once_after_delay(self):
        """Test listeners run once, with the timer, after the delay."""
        timer = self.make_timer(delay=100, repeat=False)
        timer.start()
        self.assertIs(timer.status, TimerStatus.STARTED)

        self.scheduler.advance(99)
        self.assertEqual(self.fired, [])

        self.scheduler.advance(1)
        self.assertEqual(self.fired, [timer])
        self.assertIs(timer.status, TimerStatus.STOPPED)

        self.scheduler.advance(1000)
        self.assertEqual(len(self.fired), 1)

    def test_callbacks_run_in_binding_order(self):
        """Test every listener runs exactly once, in binding order."""
        order = []
        timer = self.registry.create(delay=10)
        timer.bind(lambda t: order.append("first"))
        timer.bind(lambda t: order.append("second"))
        timer.bind(lambda t: order.append("third"))

        timer.start()
        self.scheduler.advance(10)
        self.assertEqual(order, ["first", "second", "third"])

    def test_start_while_started_is_noop(self):
        """Test a second start does not reset the running cycle."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(50)
        timer.start()
        self.assertEqual(timer.last_run, 0)
        self.assertEqual(self.scheduler.pending, 1)

        self.scheduler.advance(50)
        self.assertEqual(self.fired, [timer])

    def test_no_delay_fires_immediately(self):
        """Test a timer without delay fires inline on start."""
        timer = self.make_timer()
        self.assertIsNone(timer.delay)

        timer.start()
        self.assertEqual(self.fired, [timer])
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertEqual(self.scheduler.pending, 0)

    def test_delay_change_applies_to_next_cycle(self):
        """Test changing the delay does not move a pending fire."""
        timer = self.make_timer(delay=100).start()
        timer.delay = 500
        self.scheduler.advance(100)
        self.assertEqual(len(self.fired), 1)

        timer.start()
        self.scheduler.advance(499)
        self.assertEqual(len(self.fired), 1)
        self.scheduler.advance(1)
        self.assertEqual(len(self.fired), 2)

    def test_duration_units_as_delay(self):
        """Test a duration unit delay is stored in milliseconds."""
        timer = self.make_timer(delay=Second(1.5)).start()
        self.assertEqual(timer.delay, 1500)
        self.scheduler.advance(Millisecond(1500))
        self.assertEqual(self.fired, [timer])


class TestPauseResume(TimerTestCase):
    """Test pause-aware remaining delay computation."""

    def test_pause_and_resume_uses_remaining_delay(self):
        """Test a resumed timer fires after the remainder, not the full delay."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(30)

        timer.pause()
        self.assertIs(timer.status, TimerStatus.PAUSED)
        self.assertEqual(timer.remaining_delay, 70)
        self.assertEqual(self.scheduler.pending, 0)

        self.scheduler.advance(1000)
        self.assertEqual(self.fired, [])

        timer.resume()
        self.assertIs(timer.status, TimerStatus.STARTED)
        self.scheduler.advance(69)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(1)
        self.assertEqual(self.fired, [timer])
        self.assertIs(timer.status, TimerStatus.STOPPED)

    def test_second_pause_accounts_for_earlier_progress(self):
        """Test the remaining delay keeps shrinking across pause cycles."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(30)
        timer.pause()
        self.scheduler.advance(500)

        timer.resume()
        self.assertEqual(timer.last_run, 530 + 70 - 100)
        self.scheduler.advance(20)
        timer.pause()
        self.assertEqual(timer.remaining_delay, 50)

        timer.resume()
        self.scheduler.advance(50)
        self.assertEqual(self.fired, [timer])

    def test_start_from_paused_resumes(self):
        """Test start on a paused timer continues with the remainder."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(60)
        timer.pause()

        timer.start()
        self.scheduler.advance(40)
        self.assertEqual(self.fired, [timer])

    def test_resume_with_nothing_left_fires_immediately(self):
        """Test a paused timer with no delay left fires on resume."""
        now = [0.0]
        registry = TimerRegistry(ManualScheduler(), clock=lambda: now[0])
        timer = registry.create(delay=100).bind(self.fired.append).start()

        now[0] = 150.0
        timer.pause()
        self.assertEqual(timer.remaining_delay, -50)

        timer.resume()
        self.assertEqual(self.fired, [timer])
        self.assertIs(timer.status, TimerStatus.STOPPED)
        registry.destroy_all()

    def test_pause_and_resume_are_noops_elsewhere(self):
        """Test pause only acts on started timers and resume on paused ones."""
        timer = self.make_timer(delay=100)
        timer.pause()
        self.assertIs(timer.status, TimerStatus.STOPPED)
        timer.resume()
        self.assertIs(timer.status, TimerStatus.STOPPED)

        timer.start()
        timer.resume()
        self.assertEqual(timer.last_run, 0)
        self.assertEqual(self.scheduler.pending, 1)


class TestStopRestart(TimerTestCase):
    """Test cancellation of pending fires."""

    def test_stop_cancels_pending_fire(self):
        """Test no listener runs for a stopped cycle."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(50)
        timer.stop()
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertIsNone(timer.last_run)

        self.scheduler.advance(1000)
        self.assertEqual(self.fired, [])
        self.assertEqual(self.scheduler.pending, 0)

    def test_stop_from_paused_clears_bookkeeping(self):
        """Test stop forgets paused progress."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(40)
        timer.pause().stop()
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertIsNone(timer.remaining_delay)

        timer.start()
        self.scheduler.advance(60)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(40)
        self.assertEqual(self.fired, [timer])

    def test_stop_does_not_unbind(self):
        """Test stopping keeps the listeners."""
        timer = self.make_timer(delay=100).start().stop()
        self.assertTrue(timer.is_bound())

    def test_restart_begins_full_cycle(self):
        """Test restart discards progress and waits a full delay."""
        timer = self.make_timer(delay=100).start()
        self.scheduler.advance(60)
        timer.restart()

        self.scheduler.advance(60)
        self.assertEqual(self.fired, [])
        self.scheduler.advance(40)
        self.assertEqual(self.fired, [timer])

    def test_late_fire_from_cancelled_cycle_is_dropped(self):
        """Test a callback that escapes cancellation does not notify."""
        scheduler = RecordingScheduler()
        registry = TimerRegistry(scheduler)
        timer = registry.create(delay=100).bind(self.fired.append).start()
        _, late_fire = scheduler.calls[-1]

        timer.stop()
        late_fire()
        self.assertEqual(self.fired, [])

        timer.start()
        timer.pause()
        _, late_fire = scheduler.calls[-1]
        late_fire()
        self.assertEqual(self.fired, [])
        self.assertIs(timer.status, TimerStatus.PAUSED)
        registry.destroy_all()


class TestRepeat(TimerTestCase):
    """Test periodic firing built from one-shot cycles."""

    def test_repeat_fires_every_cycle(self):
        """Test a repeating timer fires once per delay until stopped."""
        fired_at = []
        timer = self.registry.create(delay=100, repeat=True)
        timer.bind(lambda t: fired_at.append(self.scheduler.now()))
        timer.start()

        self.scheduler.advance(350)
        self.assertEqual(fired_at, [100, 200, 300])
        self.assertIs(timer.status, TimerStatus.STARTED)

        timer.stop()
        self.scheduler.advance(1000)
        self.assertEqual(len(fired_at), 3)

    def test_repeat_after_pause_restarts_full_length(self):
        """Test the cycle after a resumed one uses the full delay."""
        fired_at = []
        timer = self.registry.create(delay=100, repeat=True)
        timer.bind(lambda t: fired_at.append(self.scheduler.now()))
        timer.start()

        self.scheduler.advance(40)
        timer.pause()
        self.scheduler.advance(10)
        timer.resume()
        self.scheduler.advance(160)
        self.assertEqual(fired_at, [110, 210])

    def test_repeat_without_delay_yields_between_cycles(self):
        """Test a repeating timer without delay runs one cycle per turn."""
        timer = self.make_timer(repeat=True)
        timer.start()
        self.assertEqual(len(self.fired), 1)
        self.assertIs(timer.status, TimerStatus.STARTED)

        self.scheduler.run_pending()
        self.assertEqual(len(self.fired), 2)
        self.scheduler.advance(0)
        self.assertEqual(len(self.fired), 3)

        timer.stop()
        self.scheduler.run_pending()
        self.assertEqual(len(self.fired), 3)

    def test_listener_destroying_timer_stops_repeat(self):
        """Test no new cycle starts when a listener destroys the timer."""
        timer = self.registry.create(delay=100, repeat=True)
        timer.bind(lambda t: t.destroy())
        timer.start()

        self.scheduler.advance(100)
        self.assertTrue(timer.deleted)
        self.assertEqual(self.scheduler.pending, 0)
        self.assertNotIn(timer, self.registry)


class TestListenerErrors(TimerTestCase):
    """Test a failing listener does not disturb the fire sequence."""

    def test_failing_listener_does_not_block_others(self):
        """Test the remaining listeners run and the timer still stops."""
        def explode(timer):
            raise RuntimeError("boom")

        timer = self.registry.create(delay=10)
        timer.bind(explode)
        timer.bind(self.fired.append)
        timer.start()

        with self.assertLogs("timerkit", level="ERROR") as logs:
            self.scheduler.advance(10)

        self.assertEqual(self.fired, [timer])
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertIn("failed", logs.output[0])

    def test_failing_listener_does_not_block_repeat(self):
        """Test a repeating timer keeps cycling when a listener fails."""
        def explode(timer):
            raise ValueError("nope")

        timer = self.registry.create(delay=10, repeat=True).bind(explode).start()
        with self.assertLogs("timerkit", level="ERROR"):
            self.scheduler.advance(10)
        self.assertIs(timer.status, TimerStatus.STARTED)


class TestDestroy(TimerTestCase):
    """Test destruction of single timers."""

    def test_destroy_removes_from_registry(self):
        """Test destroy excises exactly the destroyed timer."""
        first = self.registry.create()
        second = self.registry.create()
        third = self.registry.create()

        second.destroy()
        self.assertEqual(self.registry.all(), [first, third])
        self.assertIsNone(self.registry.exists(second.id))
        self.assertTrue(second.deleted)
        self.assertFalse(second.is_bound())

    def test_destroy_suppresses_in_flight_fire(self):
        """Test a fire already on its way is not delivered after destroy."""
        scheduler = RecordingScheduler()
        registry = TimerRegistry(scheduler)
        timer = registry.create(delay=100).bind(self.fired.append).start()
        _, in_flight = scheduler.calls[-1]

        timer.destroy()
        in_flight()
        self.assertEqual(self.fired, [])

    def test_destroy_is_idempotent(self):
        """Test destroying twice is harmless."""
        timer = self.make_timer(delay=100).start()
        timer.destroy()
        timer.destroy()
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.scheduler.pending, 0)

    def test_destroyed_timer_ignores_start(self):
        """Test a destroyed timer cannot be started again."""
        timer = self.registry.create(delay=100)
        timer.destroy()
        with self.assertLogs("timerkit", level="WARNING"):
            timer.start()
        self.assertIs(timer.status, TimerStatus.STOPPED)
        self.assertEqual(self.scheduler.pending, 0)


class TestAccessors(TimerTestCase):
    """Test validating property setters."""

    def test_delay_normalization(self):
        """Test anything but a positive integer delay becomes None."""
        cases = [
            (100, 100),
            ("250", 250),
            (" 42 ", 42),
            ("12.5", 12),
            (99.9, 99),
            (Minute(1), 60000),
            (0, None),
            (-5, None),
            (0.5, None),
            ("soon", None),
            (None, None),
            (True, None),
            (float("nan"), None),
            (float("inf"), None),
            ([100], None),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(normalize_delay(value), expected)

        timer = self.registry.create(delay="bogus")
        self.assertIsNone(timer.delay)

    def test_repeat_coercion(self):
        """Test repeat is coerced to bool and refusals count as False."""
        class Stubborn:
            def __bool__(self):
                raise TypeError("no truth value")

        self.assertTrue(normalize_repeat(1))
        self.assertTrue(normalize_repeat("yes"))
        self.assertFalse(normalize_repeat(""))
        self.assertFalse(normalize_repeat(Stubborn()))

        timer = self.registry.create(repeat=Stubborn())
        self.assertIs(timer.repeat, False)

    def test_status_is_read_only(self):
        """Test status cannot be assigned."""
        timer = self.registry.create()
        with self.assertRaises(AttributeError):
            timer.status = TimerStatus.STARTED

    def test_id_conflict_keeps_previous_id(self):
        """Test a rejected id assignment leaves the timer unchanged."""
        first = self.registry.create(id="alpha")
        second = self.registry.create(id="beta")

        with self.assertRaises(IdentifierConflict) as ctx:
            second.id = "alpha"
        self.assertEqual(second.id, "beta")
        self.assertIs(ctx.exception.conflicting, first)
        self.assertEqual(ctx.exception.identifier, "alpha")

    def test_same_id_is_noop(self):
        """Test reassigning the current id succeeds."""
        timer = self.registry.create(id="alpha")
        timer.id = "alpha"
        self.assertEqual(timer.id, "alpha")

    def test_id_can_return_to_own_uid(self):
        """Test a timer may take its own uid back as id."""
        timer = self.registry.create(id="named")
        timer.id = timer.uid
        self.assertEqual(timer.id, timer.uid)

    def test_try_set_id(self):
        """Test the non-raising id assignment reports the conflict."""
        first = self.registry.create(id="alpha")
        second = self.registry.create()

        self.assertEqual(second.try_set_id("alpha"), (False, first))
        self.assertEqual(second.id, second.uid)
        self.assertEqual(second.try_set_id("gamma"), (True, None))
        self.assertEqual(second.id, "gamma")


class TestBinding(TimerTestCase):
    """Test listener binding through the timer."""

    def test_bind_rejects_non_callable(self):
        """Test binding a non-callable raises InvalidCallback."""
        timer = self.registry.create()
        with self.assertRaises(InvalidCallback):
            timer.bind("not a function")
        with self.assertRaises(TypeError):
            timer.bind(None)
        self.assertFalse(timer.is_bound())

    def test_unbind_removes_only_matching(self):
        """Test firing after unbind only reaches the remaining listeners."""
        calls = []

        def keep(timer):
            calls.append("keep")

        def drop(timer):
            calls.append("drop")

        timer = self.registry.create(delay=10)
        timer.bind(drop).bind(drop).bind(keep).bind(drop)
        timer.unbind(drop)
        self.assertEqual(timer.callbacks, (keep,))

        timer.start()
        self.scheduler.advance(10)
        self.assertEqual(calls, ["keep"])

    def test_unbind_all(self):
        """Test unbind_all clears every listener."""
        timer = self.make_timer(delay=10).unbind_all()
        self.assertFalse(timer.is_bound())
        timer.start()
        self.scheduler.advance(10)
        self.assertEqual(self.fired, [])


class TestSerialization(TimerTestCase):
    """Test to_dict and from_dict."""

    def test_to_dict(self):
        """Test only id and status are serialized."""
        timer = self.registry.create(id="job", delay=100, repeat=True)
        self.assertEqual(timer.to_dict(), {"id": "job", "status": "stopped"})
        timer.start()
        self.assertEqual(timer.to_dict(), {"id": "job", "status": "started"})

    def test_from_dict_validates_known_keys(self):
        """Test known keys go through their setters and others are stored."""
        timer = self.registry.create()
        timer.from_dict({"delay": "20", "repeat": 1, "label": "poll", "status": "paused"})

        self.assertEqual(timer.delay, 20)
        self.assertIs(timer.repeat, True)
        self.assertEqual(timer.label, "poll")
        self.assertIs(timer.status, TimerStatus.STOPPED)

    def test_from_dict_skips_protected_keys(self):
        """Test private names and methods cannot be overwritten."""
        timer = self.registry.create()
        uid = timer.uid
        timer.from_dict({"_uid": 999, "uid": 999, "start": None})
        self.assertEqual(timer.uid, uid)
        self.assertTrue(callable(timer.start))

    def test_from_dict_rejects_taken_id(self):
        """Test hydration with a taken id raises IdentifierConflict."""
        self.registry.create(id="taken")
        timer = self.registry.create()
        with self.assertRaises(IdentifierConflict):
            timer.from_dict({"id": "taken"})


if __name__ == "__main__":
    unittest.main()
