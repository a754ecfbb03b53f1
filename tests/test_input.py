"""Tests for intent arbitration, swipe tracking and the tilt sensor."""

import asyncio

import pytest

from solo_snake.input import InputArbiter, negotiate_sensor_permission
from solo_snake.models import GyroState, SensorPermission


class Heading:
    def __init__(self, value: str):
        self.value = value

    def __call__(self) -> str:
        return self.value


@pytest.fixture
def heading():
    return Heading("right")


@pytest.fixture
def arbiter(heading):
    return InputArbiter(heading=heading)


class TestIntentRegister:
    def test_last_writer_wins_across_sources(self, arbiter):
        arbiter.handle_key("ArrowUp")
        arbiter.handle_button("down")
        arbiter.swipe.begin(0, 0)
        arbiter.swipe.move(0, -30)
        assert arbiter.pending == "up"

    def test_record_intent_accepts_reversal(self, arbiter):
        assert arbiter.record_intent("left") is True
        assert arbiter.pending == "left"

    @pytest.mark.parametrize("key,expected", [
        ("ArrowUp", "up"), ("ArrowDown", "down"), ("ArrowLeft", "left"), ("ArrowRight", "right"),
        ("w", "up"), ("s", "down"), ("a", "left"), ("d", "right"),
    ])
    def test_key_map(self, arbiter, key, expected):
        arbiter.pending = "right" if expected != "right" else "up"
        assert arbiter.handle_key(key) is True
        assert arbiter.pending == expected

    @pytest.mark.parametrize("token", ["x", "Enter", "", None, 3, ["up"]])
    def test_malformed_input_is_ignored(self, arbiter, token):
        assert arbiter.handle_key(token) is False
        assert arbiter.handle_button(token) is False
        assert arbiter.pending == "right"

    def test_reset_restores_start_direction(self, arbiter):
        arbiter.record_intent("up")
        arbiter.swipe.begin(4, 4)
        arbiter.reset()
        assert arbiter.pending == "right"
        assert arbiter.swipe.anchor is None


class TestSwipe:
    def test_small_moves_produce_nothing(self, arbiter):
        arbiter.swipe.begin(100, 100)
        assert arbiter.swipe.move(110, 90) is None
        assert arbiter.pending == "right"

    def test_dominant_axis_wins_and_reanchors(self, arbiter):
        arbiter.swipe.begin(100, 100)
        assert arbiter.swipe.move(105, 130) == "down"
        assert arbiter.swipe.anchor == (105, 130)

        assert arbiter.swipe.move(125, 135) == "right"
        assert arbiter.pending == "right"

    def test_reversal_is_filtered_without_reanchoring(self, arbiter):
        arbiter.swipe.begin(100, 100)
        assert arbiter.swipe.move(70, 100) is None
        assert arbiter.pending == "right"
        assert arbiter.swipe.anchor == (100, 100)

    def test_move_without_begin_anchors(self, arbiter):
        assert arbiter.swipe.move(50, 50) is None
        assert arbiter.swipe.anchor == (50, 50)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_coordinates_are_ignored(self, arbiter, bad):
        arbiter.swipe.begin(100, 100)
        assert arbiter.swipe.move(bad, 100) is None
        assert arbiter.swipe.move(100, bad) is None
        assert arbiter.pending == "right"
        assert arbiter.swipe.anchor == (100, 100)

        arbiter.swipe.begin(bad, 0)
        assert arbiter.swipe.anchor is None


class TestGyro:
    def test_disabled_sensor_ignores_samples(self, arbiter):
        assert arbiter.gyro.handle_sample(0, 40, 0) is None
        assert arbiter.gyro.state is GyroState.DISABLED

    def test_first_sample_calibrates_silently(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        assert gyro.state is GyroState.CALIBRATING

        assert gyro.handle_sample(10, 5, 50) is None
        assert gyro.state is GyroState.ACTIVE
        assert gyro.calibration.calibrated
        assert gyro.calibration.beta_offset == 10
        assert gyro.calibration.gamma_offset == 5
        assert arbiter.pending == "right"

    def test_gamma_tilt_right(self, arbiter, heading):
        heading.value = "up"
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(10, 5, 0)

        assert gyro.handle_sample(15, 30, 100) == "right"
        assert arbiter.pending == "right"

    def test_gamma_tilt_left(self, arbiter, heading):
        heading.value = "up"
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(10, 5, 0)

        assert gyro.handle_sample(5, -20, 100) == "left"

    def test_beta_tilt_vertical(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)
        assert gyro.handle_sample(-30, 10, 100) == "up"

    def test_dead_zone(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)
        assert gyro.handle_sample(19, -19, 100) is None
        assert arbiter.pending == "right"

    def test_throttle_suppresses_quick_flip(self, arbiter, heading):
        heading.value = "down"
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)

        assert gyro.handle_sample(0, 30, 1000) == "right"
        assert gyro.handle_sample(0, -30, 1100) is None
        assert arbiter.pending == "right"
        assert gyro.handle_sample(0, -30, 1180) == "left"
        assert arbiter.pending == "left"

    def test_repeated_direction_not_reemitted(self, arbiter, heading):
        heading.value = "up"
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)

        assert gyro.handle_sample(0, 30, 1000) == "right"
        arbiter.record_intent("up")
        assert gyro.handle_sample(0, 35, 2000) is None
        assert arbiter.pending == "up"

    def test_reversal_is_self_filtered(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)
        assert gyro.handle_sample(0, -30, 500) is None
        assert gyro.last_emitted is None

    def test_recalibrate_captures_new_neutral(self, arbiter, heading):
        heading.value = "up"
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 0)
        gyro.recalibrate()
        assert gyro.state is GyroState.CALIBRATING

        assert gyro.handle_sample(0, 30, 500) is None
        assert gyro.handle_sample(0, 40, 600) is None
        assert gyro.handle_sample(0, 55, 700) == "right"

    def test_recalibrate_is_noop_when_disabled(self, arbiter):
        arbiter.gyro.recalibrate()
        assert arbiter.gyro.state is GyroState.DISABLED

    def test_new_run_recalibrates(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(3, 3, 0)
        arbiter.reset()
        assert gyro.state is GyroState.CALIBRATING
        assert not gyro.calibration.calibrated

    def test_missing_angles_are_ignored(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        assert gyro.handle_sample(None, 10, 10) is None
        assert gyro.state is GyroState.CALIBRATING
        assert gyro.received

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_angles_do_not_calibrate(self, arbiter, bad):
        gyro = arbiter.gyro
        gyro.enable(0)
        assert gyro.handle_sample(bad, 0.0, 10) is None
        assert gyro.handle_sample(0.0, bad, 20) is None
        assert gyro.state is GyroState.CALIBRATING
        assert not gyro.calibration.calibrated

        gyro.handle_sample(0.0, 0.0, 30)
        assert gyro.handle_sample(bad, 0.0, 400) is None
        assert gyro.handle_sample(0.0, 0.0, 800) is None
        assert arbiter.pending == "right"

    def test_watchdog_disables_silent_sensor(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        assert gyro.check_watchdog(999) is False
        assert gyro.check_watchdog(1000) is True
        assert gyro.state is GyroState.DISABLED
        assert gyro.unavailable

    def test_watchdog_quiet_once_samples_arrive(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.handle_sample(0, 0, 200)
        assert gyro.check_watchdog(5000) is False
        assert gyro.state is GyroState.ACTIVE

    def test_reenable_clears_unavailable(self, arbiter):
        gyro = arbiter.gyro
        gyro.enable(0)
        gyro.check_watchdog(2000)
        gyro.enable(3000)
        assert not gyro.unavailable
        assert gyro.state is GyroState.CALIBRATING


class TestPermissionNegotiation:
    def test_unsupported_platform(self):
        assert asyncio.run(negotiate_sensor_permission(supported=False)) is SensorPermission.UNSUPPORTED

    def test_no_prompt_needed(self):
        assert asyncio.run(negotiate_sensor_permission()) is SensorPermission.GRANTED

    @pytest.mark.parametrize("answer,expected", [
        ("granted", SensorPermission.GRANTED),
        ("denied", SensorPermission.DENIED),
        ("unsupported", SensorPermission.UNSUPPORTED),
        ("prompt", SensorPermission.DENIED),
    ])
    def test_prompt_answers(self, answer, expected):
        async def request():
            return answer

        assert asyncio.run(negotiate_sensor_permission(request)) is expected

    def test_prompt_failure_is_denied(self):
        async def request():
            raise RuntimeError("not allowed from here")

        assert asyncio.run(negotiate_sensor_permission(request)) is SensorPermission.DENIED
