"""Tests for injectable simulated work."""

from __future__ import annotations

import random

from sample_services.pipeline.delays import SimulatedWork, fixed_delay, no_delay, uniform_ms


class TestDelayFunctions:
    def test_no_delay(self):
        assert no_delay() == 0.0

    def test_fixed_delay(self):
        assert fixed_delay(0.25)() == 0.25

    def test_uniform_ms_range(self):
        delay = uniform_ms(10, 30, random.Random(1))
        for _ in range(200):
            seconds = delay()
            assert 0.010 <= seconds < 0.030


class TestSimulatedWork:
    def test_pause_uses_step_delay(self):
        slept = []
        work = SimulatedWork(delays={"fetch": fixed_delay(0.05)}, sleep=slept.append)

        assert work.pause("fetch") == 0.05
        assert slept == [0.05]

    def test_unknown_step_does_not_sleep(self):
        slept = []
        work = SimulatedWork(delays={}, sleep=slept.append)

        assert work.pause("other") == 0.0
        assert slept == []

    def test_instant(self):
        assert SimulatedWork.instant().pause("anything") == 0.0
