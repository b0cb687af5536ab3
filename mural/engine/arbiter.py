"""Interaction arbiter — raw pointer/touch events in, semantic gestures out.

One gesture session runs from the first pointer-down to the last pointer-up:

    IDLE ──down──▶ PRESSED ──move > threshold──▶ DRAGGING ──up──▶ IDLE
                      │  └──second touch──▶ PINCHING ──all up──▶ IDLE
                      ├──long-press timer (own blob)──▶ LONG_PRESS_FIRED ──up──▶ IDLE
                      └──up──▶ tap ──▶ IDLE

Taps are not reported immediately. A tap is held for the double-tap window;
a second tap on the same blob inside the window becomes one Resonate, and a
tap that outlives the window becomes one Select. Only this last-tap record
survives between sessions.

The arbiter owns no timers: ``advance(now)`` is called once per frame (and
before every event) to fire the long-press and flush the held tap.
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Union

from mural.engine.config import MuralConfig
from mural.utils.geometry import clamp, distance

logger = logging.getLogger(__name__)


class PointerKind(enum.Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


class PointerType(enum.Enum):
    MOUSE = "mouse"
    TOUCH = "touch"


@dataclass(frozen=True)
class PointerEvent:
    """A raw pointer sample in logical viewport pixels."""

    kind: PointerKind
    x: float
    y: float
    timestamp: float
    pointer_id: int = 0
    pointer_type: PointerType = PointerType.MOUSE


@dataclass(frozen=True)
class WheelEvent:
    x: float
    y: float
    delta_y: float
    timestamp: float


# ── Gestures ──


@dataclass(frozen=True)
class Select:
    entity_id: str


@dataclass(frozen=True)
class Resonate:
    entity_id: str


@dataclass(frozen=True)
class DeleteIntent:
    entity_id: str


@dataclass(frozen=True)
class Pan:
    dx: float
    dy: float


@dataclass(frozen=True)
class Zoom:
    factor: float
    x: float
    y: float


Gesture = Union[Select, Resonate, DeleteIntent, Pan, Zoom]

# (sx, sy, now) → id of the topmost blob under the point, or None
HitTest = Callable[[float, float, float], Optional[str]]
OwnershipCheck = Callable[[str], bool]


class SessionMode(enum.Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"
    PINCHING = "pinching"
    LONG_PRESS_FIRED = "long_press_fired"


@dataclass(frozen=True)
class _Tap:
    entity_id: str
    timestamp: float


class InteractionArbiter:
    """Classifies pointer sessions into Select / Resonate / DeleteIntent / Pan / Zoom."""

    def __init__(
        self,
        hit_test: HitTest,
        is_own: OwnershipCheck,
        config: MuralConfig | None = None,
    ) -> None:
        self._hit_test = hit_test
        self._is_own = is_own
        self.config = config or MuralConfig()

        self.mode = SessionMode.IDLE
        self._pointers: dict[int, tuple[float, float, PointerType]] = {}
        self._down_pos: tuple[float, float] = (0.0, 0.0)
        self._last_pos: tuple[float, float] = (0.0, 0.0)
        self._long_press_target: str | None = None
        self._long_press_deadline: float = 0.0
        self._suppress_tap = False
        self._pinch_distance = 0.0
        self._pending_tap: _Tap | None = None

    # ── Public API ──

    @property
    def long_press_pending(self) -> bool:
        return self._long_press_target is not None

    @property
    def pending_tap(self) -> str | None:
        return self._pending_tap.entity_id if self._pending_tap else None

    def handle(self, event: PointerEvent) -> list[Gesture]:
        """Feed one raw event. Returns the gestures it resolved, in order."""
        out = self.advance(event.timestamp)
        if event.kind is PointerKind.DOWN:
            out.extend(self._on_down(event))
        elif event.kind is PointerKind.MOVE:
            out.extend(self._on_move(event))
        elif event.kind is PointerKind.UP:
            out.extend(self._on_up(event))
        else:
            self._on_cancel(event)
        return out

    def handle_wheel(self, event: WheelEvent) -> list[Gesture]:
        out = self.advance(event.timestamp)
        factor = math.exp(-event.delta_y * self.config.wheel_zoom_rate)
        out.append(Zoom(factor=factor, x=event.x, y=event.y))
        return out

    def advance(self, now: float) -> list[Gesture]:
        """Fire an elapsed long-press and flush a tap that outlived the double-tap window."""
        out: list[Gesture] = []
        if (
            self.mode is SessionMode.PRESSED
            and self._long_press_target is not None
            and now >= self._long_press_deadline
        ):
            target = self._long_press_target
            self._long_press_target = None
            self._suppress_tap = True
            self.mode = SessionMode.LONG_PRESS_FIRED
            logger.debug("Long-press fired on %s", target)
            out.append(DeleteIntent(target))

        pending = self._pending_tap
        if pending is not None and now - pending.timestamp > self.config.double_tap_ms:
            self._pending_tap = None
            out.append(Select(pending.entity_id))
        return out

    def reset(self) -> None:
        """Forget the current session and the last-tap record."""
        self._end_session()
        self._pointers.clear()
        self._pending_tap = None

    # ── Event handlers ──

    def _on_down(self, event: PointerEvent) -> list[Gesture]:
        self._pointers[event.pointer_id] = (event.x, event.y, event.pointer_type)

        if self.mode is SessionMode.IDLE and len(self._pointers) == 1:
            self.mode = SessionMode.PRESSED
            self._down_pos = (event.x, event.y)
            self._last_pos = (event.x, event.y)
            self._suppress_tap = False
            target = self._hit_test(event.x, event.y, event.timestamp)
            if target is not None and self._is_own(target):
                self._long_press_target = target
                self._long_press_deadline = event.timestamp + self.config.long_press_ms
            return []

        touches = [p for p in self._pointers.values() if p[2] is PointerType.TOUCH]
        if len(touches) >= 2 and self.mode is not SessionMode.LONG_PRESS_FIRED:
            self.mode = SessionMode.PINCHING
            self._long_press_target = None
            self._pinch_distance = self._touch_spread()
        return []

    def _on_move(self, event: PointerEvent) -> list[Gesture]:
        if event.pointer_id not in self._pointers:
            return []  # hover
        self._pointers[event.pointer_id] = (event.x, event.y, event.pointer_type)
        pos = (event.x, event.y)

        if self.mode is SessionMode.PINCHING:
            return self._pinch_step()

        if self.mode is SessionMode.PRESSED:
            if distance(self._down_pos, pos) <= self.config.move_threshold_px:
                return []
            # Demote to a pure drag; the pan includes the sub-threshold travel
            self.mode = SessionMode.DRAGGING
            self._long_press_target = None

        if self.mode is SessionMode.DRAGGING:
            dx = pos[0] - self._last_pos[0]
            dy = pos[1] - self._last_pos[1]
            self._last_pos = pos
            return [Pan(dx, dy)]
        return []

    def _on_up(self, event: PointerEvent) -> list[Gesture]:
        if event.pointer_id not in self._pointers:
            return []
        del self._pointers[event.pointer_id]
        if self._pointers:
            return []  # session continues until the last pointer lifts

        mode = self.mode
        suppressed = self._suppress_tap
        self._end_session()

        if mode is SessionMode.PRESSED and not suppressed:
            return self._resolve_tap(event.x, event.y, event.timestamp)
        return []

    def _on_cancel(self, event: PointerEvent) -> None:
        self._pointers.pop(event.pointer_id, None)
        if not self._pointers:
            self._end_session()

    # ── Helpers ──

    def _resolve_tap(self, x: float, y: float, now: float) -> list[Gesture]:
        target = self._hit_test(x, y, now)
        if target is None:
            return []

        pending = self._pending_tap
        if (
            pending is not None
            and pending.entity_id == target
            and now - pending.timestamp <= self.config.double_tap_ms
        ):
            self._pending_tap = None
            return [Resonate(target)]

        out: list[Gesture] = []
        if pending is not None:
            out.append(Select(pending.entity_id))
        self._pending_tap = _Tap(target, now)
        return out

    def _pinch_step(self) -> list[Gesture]:
        spread = self._touch_spread()
        if spread <= 0 or self._pinch_distance <= 0:
            self._pinch_distance = spread
            return []
        cfg = self.config
        ratio = clamp(spread / self._pinch_distance, cfg.pinch_ratio_min, cfg.pinch_ratio_max)
        self._pinch_distance = spread
        mx, my = self._touch_midpoint()
        return [Zoom(factor=ratio, x=mx, y=my)]

    def _touch_points(self) -> list[tuple[float, float]]:
        return [(x, y) for x, y, kind in self._pointers.values() if kind is PointerType.TOUCH][:2]

    def _touch_spread(self) -> float:
        pts = self._touch_points()
        if len(pts) < 2:
            return 0.0
        return distance(pts[0], pts[1])

    def _touch_midpoint(self) -> tuple[float, float]:
        pts = self._touch_points()
        return ((pts[0][0] + pts[1][0]) / 2, (pts[0][1] + pts[1][1]) / 2)

    def _end_session(self) -> None:
        self.mode = SessionMode.IDLE
        self._long_press_target = None
        self._suppress_tap = False
        self._pinch_distance = 0.0
