"""
AI Gateway — Rotation State Unit Tests
=======================================

What:  Tests for the health tracker and cursor shared by all requests.
"""

import threading

import pytest

from ai_gateway.services.rotation import RotationState


class TestHealthTracking:

    def test_new_state_is_all_healthy(self, clock):
        state = RotationState(3, clock=clock)
        assert state.unhealthy == frozenset()
        assert all(state.is_healthy(i) for i in range(3))
        assert state.cursor == 0

    def test_mark_unhealthy(self, clock):
        state = RotationState(3, clock=clock)
        state.mark_unhealthy(1)
        assert not state.is_healthy(1)
        assert state.is_healthy(0)

    def test_mark_out_of_range_index_rejected(self, clock):
        state = RotationState(2, clock=clock)
        with pytest.raises(IndexError):
            state.mark_unhealthy(2)

    def test_pool_size_must_be_positive(self):
        with pytest.raises(ValueError):
            RotationState(0)

    def test_success_clears_unhealthy_flag(self, clock):
        state = RotationState(3, clock=clock)
        state.mark_unhealthy(2)
        state.record_success(2)
        assert state.is_healthy(2)


class TestResetWindow:

    def test_no_reset_inside_window(self, clock):
        state = RotationState(2, reset_window=300.0, clock=clock)
        state.mark_unhealthy(0)
        clock.advance(299.0)
        assert state.reset_if_stale() is False
        assert state.unhealthy == frozenset({0})

    def test_reset_after_window(self, clock):
        state = RotationState(2, reset_window=300.0, clock=clock)
        state.mark_unhealthy(0)
        clock.advance(300.5)
        assert state.reset_if_stale() is True
        assert state.unhealthy == frozenset()

    def test_window_restarts_after_reset(self, clock):
        state = RotationState(2, reset_window=300.0, clock=clock)
        clock.advance(301.0)
        state.reset_if_stale()
        state.mark_unhealthy(1)
        clock.advance(100.0)
        assert state.reset_if_stale() is False
        assert state.unhealthy == frozenset({1})


class TestSelection:

    def test_select_skips_unhealthy(self, clock):
        state = RotationState(4, clock=clock)
        state.mark_unhealthy(0)
        state.mark_unhealthy(1)
        selection = state.select()
        assert selection.index == 2
        assert not selection.swept
        assert state.cursor == 2

    def test_select_wraps_around(self, clock):
        state = RotationState(3, clock=clock)
        state._cursor = 2
        state.mark_unhealthy(2)
        assert state.select().index == 0

    def test_select_when_all_unhealthy_sweeps(self, clock):
        state = RotationState(3, clock=clock)
        state._cursor = 1
        for i in range(3):
            state.mark_unhealthy(i)
        selection = state.select()
        assert selection.swept
        assert selection.index == 1
        assert state.unhealthy == frozenset()


class TestQuotaFailure:

    def test_quota_failure_advances_cursor(self, clock):
        state = RotationState(3, clock=clock)
        assert state.record_quota_failure(0) is False
        assert state.cursor == 1
        assert state.unhealthy == frozenset({0})

    def test_quota_failure_on_stale_index_does_not_move_cursor(self, clock):
        """Another request already rotated away from index 0."""
        state = RotationState(3, clock=clock)
        state._cursor = 2
        state.record_quota_failure(0)
        assert state.cursor == 2

    def test_last_healthy_key_failing_forces_clear(self, clock):
        state = RotationState(2, clock=clock)
        state.record_quota_failure(0)
        assert state.record_quota_failure(1) is True
        assert state.unhealthy == frozenset()
        assert state.cursor == 0

    def test_unhealthy_set_never_exceeds_pool(self, clock):
        state = RotationState(3, clock=clock)
        for i in [0, 1, 0, 2, 1, 2, 0]:
            state.record_quota_failure(i)
            assert len(state.unhealthy) < 3
            assert state.unhealthy <= {0, 1, 2}

    def test_concurrent_failures_keep_state_consistent(self, clock):
        state = RotationState(5, clock=clock)
        exhausted = []

        def worker(index):
            for _ in range(200):
                if state.record_quota_failure(index):
                    exhausted.append(index)
                state.select()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert state.unhealthy <= {0, 1, 2, 3, 4}
        assert len(state.unhealthy) < 5
        assert 0 <= state.cursor < 5
