"""Tests for the gesture state machine."""

from __future__ import annotations

import math

import pytest

from mural.engine.arbiter import (
    DeleteIntent,
    InteractionArbiter,
    Pan,
    PointerEvent,
    PointerKind,
    PointerType,
    Resonate,
    Select,
    SessionMode,
    WheelEvent,
    Zoom,
)

# Blob centres in screen space; "mine" belongs to the current user
BLOBS = {"mine": (100.0, 100.0), "theirs": (300.0, 100.0)}


def _hit(sx: float, sy: float, now: float) -> str | None:
    for blob_id, (x, y) in BLOBS.items():
        if math.hypot(sx - x, sy - y) <= 26.0:
            return blob_id
    return None


@pytest.fixture
def arbiter(config) -> InteractionArbiter:
    return InteractionArbiter(_hit, lambda blob_id: blob_id == "mine", config)


def down(x, y, t, pid=0, kind=PointerType.MOUSE):
    return PointerEvent(PointerKind.DOWN, x, y, t, pid, kind)


def move(x, y, t, pid=0, kind=PointerType.MOUSE):
    return PointerEvent(PointerKind.MOVE, x, y, t, pid, kind)


def up(x, y, t, pid=0, kind=PointerType.MOUSE):
    return PointerEvent(PointerKind.UP, x, y, t, pid, kind)


def tap(arb, x, y, t) -> list:
    return arb.handle(down(x, y, t)) + arb.handle(up(x, y, t + 60))


def of_type(gestures, kind) -> list:
    return [g for g in gestures if isinstance(g, kind)]


class TestTaps:
    def test_single_tap_selects_after_window(self, arbiter, config):
        out = tap(arbiter, 300, 100, 0)
        assert out == []
        assert arbiter.pending_tap == "theirs"
        assert arbiter.advance(60 + config.double_tap_ms) == []
        assert arbiter.advance(60 + config.double_tap_ms + 1) == [Select("theirs")]
        assert arbiter.pending_tap is None

    def test_double_tap_is_one_resonate_no_select(self, arbiter):
        out = tap(arbiter, 300, 100, 0)
        out += tap(arbiter, 302, 101, 200)
        out += arbiter.advance(5000)

        assert of_type(out, Resonate) == [Resonate("theirs")]
        assert of_type(out, Select) == []

    def test_taps_outside_window_are_two_selects(self, arbiter):
        out = tap(arbiter, 300, 100, 0)
        out += tap(arbiter, 300, 100, 400)
        out += arbiter.advance(5000)

        assert of_type(out, Select) == [Select("theirs"), Select("theirs")]
        assert of_type(out, Resonate) == []

    def test_taps_on_different_blobs(self, arbiter):
        out = tap(arbiter, 300, 100, 0)
        out += tap(arbiter, 100, 100, 150)
        out += arbiter.advance(5000)
        assert out == [Select("theirs"), Select("mine")]

    def test_empty_space_does_nothing(self, arbiter):
        assert tap(arbiter, 600, 500, 0) + arbiter.advance(5000) == []


class TestLongPress:
    def test_own_blob_fires_delete_and_suppresses_tap(self, arbiter, config):
        arbiter.handle(down(100, 100, 0))
        assert arbiter.long_press_pending
        assert arbiter.advance(config.long_press_ms - 1) == []
        assert arbiter.advance(config.long_press_ms) == [DeleteIntent("mine")]
        assert arbiter.mode is SessionMode.LONG_PRESS_FIRED

        out = arbiter.handle(up(100, 100, 900))
        out += arbiter.advance(5000)
        assert out == []

    def test_fires_once(self, arbiter, config):
        arbiter.handle(down(100, 100, 0))
        first = arbiter.advance(config.long_press_ms)
        second = arbiter.advance(config.long_press_ms + 500)
        assert first == [DeleteIntent("mine")]
        assert second == []

    def test_other_users_blob_never_deletes(self, arbiter, config):
        arbiter.handle(down(300, 100, 0))
        assert not arbiter.long_press_pending
        out = arbiter.advance(config.long_press_ms * 2)
        out += arbiter.handle(up(300, 100, config.long_press_ms * 2))
        out += arbiter.advance(5000)
        assert of_type(out, DeleteIntent) == []

    def test_small_jitter_keeps_long_press(self, arbiter, config):
        arbiter.handle(down(100, 100, 0))
        assert arbiter.handle(move(104, 103, 100)) == []
        assert arbiter.advance(config.long_press_ms) == [DeleteIntent("mine")]

    def test_drag_cancels_long_press(self, arbiter, config):
        arbiter.handle(down(100, 100, 0))
        out = arbiter.handle(move(130, 100, 100))
        assert out == [Pan(30.0, 0.0)]
        assert not arbiter.long_press_pending

        out = arbiter.advance(config.long_press_ms * 2)
        out += arbiter.handle(up(130, 100, 1200))
        out += arbiter.advance(5000)
        assert out == []


class TestDrag:
    def test_pan_deltas_are_incremental(self, arbiter):
        arbiter.handle(down(500, 400, 0))
        out = arbiter.handle(move(520, 400, 16))
        out += arbiter.handle(move(525, 390, 32))
        assert out == [Pan(20.0, 0.0), Pan(5.0, -10.0)]

    def test_drag_release_is_not_a_tap(self, arbiter):
        arbiter.handle(down(300, 100, 0))
        arbiter.handle(move(340, 100, 50))
        arbiter.handle(move(300, 100, 100))
        out = arbiter.handle(up(300, 100, 120))
        assert out == []
        assert arbiter.pending_tap is None

    def test_hover_moves_ignored(self, arbiter):
        assert arbiter.handle(move(10, 10, 0)) == []
        assert arbiter.mode is SessionMode.IDLE


class TestPinch:
    def test_two_touches_zoom_with_clamped_ratio(self, arbiter, config):
        t = PointerType.TOUCH
        arbiter.handle(down(500, 400, 0, pid=1, kind=t))
        arbiter.handle(down(600, 400, 10, pid=2, kind=t))
        assert arbiter.mode is SessionMode.PINCHING

        out = arbiter.handle(move(700, 400, 26, pid=2, kind=t))
        assert out == [Zoom(factor=config.pinch_ratio_max, x=600.0, y=400.0)]

        out = arbiter.handle(move(690, 400, 42, pid=2, kind=t))
        assert len(out) == 1
        assert out[0].factor == pytest.approx(190.0 / 200.0)

    def test_second_touch_cancels_long_press(self, arbiter, config):
        t = PointerType.TOUCH
        arbiter.handle(down(100, 100, 0, pid=1, kind=t))
        assert arbiter.long_press_pending
        arbiter.handle(down(200, 200, 50, pid=2, kind=t))
        assert not arbiter.long_press_pending

        out = arbiter.advance(config.long_press_ms * 2)
        out += arbiter.handle(up(200, 200, 1100, pid=2, kind=t))
        out += arbiter.handle(up(100, 100, 1110, pid=1, kind=t))
        out += arbiter.advance(5000)
        assert out == []

    def test_mouse_second_pointer_does_not_pinch(self, arbiter):
        arbiter.handle(down(500, 400, 0, pid=1))
        arbiter.handle(down(600, 400, 10, pid=2))
        assert arbiter.mode is SessionMode.PRESSED


class TestMisc:
    def test_wheel_zooms_at_cursor(self, arbiter):
        out = arbiter.handle_wheel(WheelEvent(x=50.0, y=60.0, delta_y=100.0, timestamp=0.0))
        assert len(out) == 1
        assert isinstance(out[0], Zoom)
        assert out[0].factor < 1.0
        assert (out[0].x, out[0].y) == (50.0, 60.0)

    def test_cancel_ends_session(self, arbiter):
        arbiter.handle(down(100, 100, 0))
        arbiter.handle(PointerEvent(PointerKind.CANCEL, 100, 100, 50))
        assert arbiter.mode is SessionMode.IDLE
        assert arbiter.advance(5000) == []

    def test_reset_forgets_pending_tap(self, arbiter):
        tap(arbiter, 300, 100, 0)
        arbiter.reset()
        assert arbiter.advance(5000) == []
