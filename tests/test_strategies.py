"""
Tests for timers, navigation and execution strategies.
"""
import random

import pytest

from goap_agent.navigation import StraightLineNavigator
from goap_agent.strategies import IdleStrategy, MoveStrategy, WanderStrategy
from goap_agent.timers import CountdownTimer


class TestCountdownTimer:
    """Test tick-driven countdown."""

    def test_fires_stop_once_elapsed(self):
        fired = []
        timer = CountdownTimer(1.0)
        timer.on_timer_stop.append(lambda: fired.append("stop"))
        timer.start()

        timer.tick(0.5)
        assert fired == []
        assert timer.remaining == pytest.approx(0.5)

        timer.tick(0.6)
        assert fired == ["stop"]
        assert not timer.is_running
        assert timer.remaining == 0.0

    def test_start_callback(self):
        started = []
        timer = CountdownTimer(1.0)
        timer.on_timer_start.append(lambda: started.append(True))

        timer.start()
        timer.start()

        assert started == [True]

    def test_tick_while_stopped_does_nothing(self):
        timer = CountdownTimer(1.0)
        timer.tick(5.0)

        assert timer.remaining == 1.0

    def test_stop_and_reset(self):
        timer = CountdownTimer(2.0)
        timer.start()
        timer.tick(1.5)
        timer.stop()
        timer.reset()

        assert not timer.is_running
        assert timer.remaining == 2.0

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            CountdownTimer(-1)


class TestStraightLineNavigator:
    """Test the reference navigator."""

    def test_moves_toward_destination(self):
        nav = StraightLineNavigator((0, 0), speed=2.0)
        nav.set_destination((4, 0))

        nav.tick(1.0)

        assert nav.position == pytest.approx((2.0, 0.0))
        assert nav.is_moving

    def test_does_not_overshoot(self):
        nav = StraightLineNavigator((0, 0), speed=10.0)
        nav.set_destination((3, 4))

        nav.tick(1.0)

        assert nav.position == pytest.approx((3.0, 4.0))
        assert nav.is_at_destination()
        assert not nav.is_moving

    def test_no_destination_counts_as_arrived(self):
        nav = StraightLineNavigator()
        assert nav.is_at_destination()

    def test_stop_movement_clears_destination(self):
        nav = StraightLineNavigator()
        nav.set_destination((5, 5))
        nav.stop_movement()

        assert nav.destination is None

    def test_bounds(self):
        nav = StraightLineNavigator(bounds=(-5.0, 5.0))

        assert nav.has_path((4.0, -4.0))
        assert not nav.has_path((6.0, 0.0))


class TestIdleStrategy:
    """Test waiting out a duration."""

    def test_completes_after_duration(self):
        strategy = IdleStrategy(1.0)
        strategy.start()

        strategy.update(0.5)
        assert not strategy.complete
        strategy.update(0.5)
        assert strategy.complete
        assert strategy.can_perform

    def test_restart_clears_completion(self):
        strategy = IdleStrategy(0.5)
        strategy.start()
        strategy.update(1.0)
        assert strategy.complete

        strategy.start()
        assert not strategy.complete


class TestMoveStrategy:
    """Test moving to a target."""

    def test_arrives_and_fires_callback_once(self):
        nav = StraightLineNavigator((0, 0), speed=1.0)
        arrivals = []
        strategy = MoveStrategy(nav, lambda: (2.0, 0.0), on_arrival=lambda: arrivals.append(1))

        strategy.start()
        assert nav.destination == (2.0, 0.0)

        for _ in range(5):
            nav.tick(1.0)
            if strategy.can_perform:
                strategy.update(1.0)

        assert strategy.complete
        assert arrivals == [1]
        assert nav.destination is None

    def test_target_is_read_on_start(self):
        nav = StraightLineNavigator()
        target = [(1.0, 1.0)]
        strategy = MoveStrategy(nav, lambda: target[0])

        strategy.start()
        target[0] = (5.0, 5.0)
        strategy.start()

        assert nav.destination == (5.0, 5.0)

    def test_stop_halts_navigator(self):
        nav = StraightLineNavigator()
        strategy = MoveStrategy(nav, lambda: (9.0, 9.0))
        strategy.start()
        strategy.stop()

        assert nav.destination is None
        assert not strategy.complete


class TestWanderStrategy:
    """Test random wandering."""

    def test_picks_point_within_radius(self):
        nav = StraightLineNavigator((1.0, 1.0))
        strategy = WanderStrategy(nav, 3.0, rng=random.Random(7))

        strategy.start()

        dx = nav.destination[0] - 1.0
        dy = nav.destination[1] - 1.0
        assert (dx * dx + dy * dy) ** 0.5 <= 3.0

    def test_completes_on_arrival(self):
        nav = StraightLineNavigator(speed=100.0)
        strategy = WanderStrategy(nav, 5.0, rng=random.Random(3))
        strategy.start()

        nav.tick(1.0)

        assert strategy.complete
        assert not strategy.can_perform

    def test_no_reachable_point_stops(self):
        """Unreachable candidates leave the agent standing still."""
        nav = StraightLineNavigator((100.0, 100.0), bounds=(-1.0, 1.0))
        strategy = WanderStrategy(nav, 2.0, rng=random.Random(1))

        strategy.start()

        assert nav.destination is None
        assert strategy.complete
