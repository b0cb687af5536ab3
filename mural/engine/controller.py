"""MuralController — owns the mural state and wires every subsystem together.

Render path:  frame(now) → placements/glows/ephemera advance → painter.paint
Input path:   PointerEvent → arbiter → gesture → state mutation (+ store request)
Fold path:    store response → folding planner → state delta

All three run on one asyncio loop. Outbound requests never run inside a
frame; they are spawned as tasks and their results are folded in only if the
controller is still mounted (and, for selections, still showing the same
highlight).
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

from mural.client.store_client import EntryStoreAPI, StoreError
from mural.engine.arbiter import (
    DeleteIntent,
    Gesture,
    InteractionArbiter,
    Pan,
    PointerEvent,
    Resonate,
    Select,
    WheelEvent,
    Zoom,
)
from mural.engine.config import MuralConfig
from mural.engine.folding import (
    apply_insertions,
    apply_resonance_glows,
    apply_similarity_glows,
    plan_full_layout,
    plan_insertions,
    plan_resonance_glows,
    plan_similarity_glows,
)
from mural.engine.layout import SpiralLayout
from mural.engine.scheduler import FrameLoop, PeriodicTask
from mural.engine.state import Blob, MuralState, SidePanel
from mural.engine.transform import ViewTransform
from mural.render.shapes import seed_from_id

if TYPE_CHECKING:
    from mural.render.painter import MuralPainter

logger = logging.getLogger(__name__)

LOAD_ERROR = "Could not load the mural."


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class MuralController:
    """Orchestrates layout, animation, interaction and store traffic for one mural."""

    def __init__(
        self,
        store: EntryStoreAPI,
        user_id: str | None,
        config: MuralConfig | None = None,
        viewport: tuple[float, float] = (800.0, 600.0),
        device_pixel_ratio: float = 1.0,
        clock: Callable[[], float] | None = None,
        painter: MuralPainter | None = None,
        fps: float = 60.0,
        poll_entries_seconds: float = 3.0,
        poll_resonances_seconds: float = 2.0,
    ) -> None:
        self.config = config or MuralConfig()
        self.store = store
        self.user_id = user_id
        self.clock = clock or wall_clock_ms
        self.painter = painter

        self.state = MuralState(config=self.config)
        self.layout = SpiralLayout(self.config)
        self.transform = ViewTransform(
            self.state.view,
            viewport[0],
            viewport[1],
            self.config,
            device_pixel_ratio,
        )
        self.arbiter = InteractionArbiter(self._hit_test_id, self._is_own_id, self.config)

        self.mounted = False
        self._selection_seq = 0
        self._tasks: set[asyncio.Task] = set()
        self._frame_loop = FrameLoop(self.frame, self.clock, fps)
        self._polls = [
            PeriodicTask(self.poll_new_entries, poll_entries_seconds, "mural-poll-entries"),
            PeriodicTask(self.poll_resonances, poll_resonances_seconds, "mural-poll-resonances"),
        ]

    # ── Lifecycle ──

    async def mount(self, start_loops: bool = True) -> bool:
        """Load the mural once, then start the frame loop and polls."""
        self.mounted = True
        ok = await self.load()
        if start_loops and self.mounted:
            self._frame_loop.start()
            if ok:
                for poll in self._polls:
                    poll.start()
        return ok

    async def load(self) -> bool:
        """Initial fetch + full spiral layout. Failure is fatal for this view."""
        self.state.loading = True
        try:
            entries = await self.store.fetch_entries()
        except StoreError as e:
            logger.warning("Initial load failed: %s", e)
            self.state.error = LOAD_ERROR
            self.state.loading = False
            return False

        if not self.mounted:
            return False

        seen: set[str] = set()
        blobs: list[Blob] = []
        for entry in entries:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            blobs.append(Blob.from_entry(entry))

        insertions = plan_full_layout(blobs, self.clock(), self.layout)
        apply_insertions(self.state, insertions)
        self.state.loading = False
        self.state.error = None
        logger.info("Mural loaded with %d blobs", len(self.state))
        return True

    async def unmount(self) -> None:
        """Tear down loops and drop all state. In-flight requests become inert."""
        self.mounted = False
        await self._frame_loop.stop()
        for poll in self._polls:
            await poll.stop()
        self.arbiter.reset()
        self.state.clear()

    async def drain(self) -> None:
        """Wait for every spawned request task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def frame_count(self) -> int:
        return self._frame_loop.frames

    # ── Render step ──

    def frame(self, now: float) -> None:
        if not self.mounted:
            return
        for gesture in self.arbiter.advance(now):
            self.dispatch(gesture, now)

        for blob in self.state.entities:
            placement = self.state.placements.get(blob.id)
            if placement is not None and placement.advance(now):
                blob.x, blob.y = placement.target

        self.state.glows.sweep(now)
        self.state.ephemera.update(now)

        if self.painter is not None:
            self.painter.paint(self.state, self.transform, now)

    # ── Input step ──

    def handle_pointer(self, event: PointerEvent) -> list[Gesture]:
        gestures = self.arbiter.handle(event)
        for gesture in gestures:
            self.dispatch(gesture, event.timestamp)
        return gestures

    def handle_wheel(self, event: WheelEvent) -> list[Gesture]:
        gestures = self.arbiter.handle_wheel(event)
        for gesture in gestures:
            self.dispatch(gesture, event.timestamp)
        return gestures

    def dispatch(self, gesture: Gesture, now: float) -> None:
        if not self.mounted:
            return
        if isinstance(gesture, Select):
            blob = self.state.get(gesture.entity_id)
            if blob is not None:
                self._spawn(self.select(blob))
        elif isinstance(gesture, Resonate):
            self.resonate(gesture.entity_id)
        elif isinstance(gesture, DeleteIntent):
            self.delete(gesture.entity_id)
        elif isinstance(gesture, Pan):
            self.transform.pan_by_screen(gesture.dx, gesture.dy)
        elif isinstance(gesture, Zoom):
            self.transform.zoom_around(gesture.factor, gesture.x, gesture.y)

    # ── Actions ──

    async def select(self, blob: Blob) -> None:
        """Highlight a blob (or toggle it off) and glow what is similar to it."""
        state = self.state
        self._selection_seq += 1
        seq = self._selection_seq

        if state.highlighted == blob.id:
            state.highlighted = None
            state.glows.clear()
            state.side_panel = None
            return

        state.highlighted = blob.id
        state.glows.clear()
        own = blob.is_owned_by(self.user_id)
        state.side_panel = SidePanel(
            blob=blob,
            loading=own,
            can_resonate=bool(blob.owner) and not own,
        )

        jobs = [self._load_similar(blob, seq)]
        if own:
            jobs.append(self._load_similar_own(blob, seq))
        await asyncio.gather(*jobs)

    def resonate(self, entity_id: str) -> None:
        """Glow locally now; tell the store in the background."""
        if not self.mounted:
            return
        self.state.glows.set_resonance(entity_id, self.clock())
        if self.user_id is None:
            logger.debug("Resonance on %s kept local: no user token", entity_id)
            return
        self._spawn(self._send_resonance(entity_id, self.user_id))

    def delete(self, entity_id: str) -> bool:
        """Remove an owned blob immediately; the store request is fire-and-forget."""
        if not self.mounted:
            return False
        blob = self.state.get(entity_id)
        if blob is None or not blob.is_owned_by(self.user_id):
            logger.debug("Delete refused for %s", entity_id)
            return False

        now = self.clock()
        position = self.state.animated_position(blob, now)
        self.state.remove(entity_id)
        self.state.tombstones.add(entity_id)
        self.state.ephemera.spawn_deletion(
            entity_id, position, blob.color, blob.shape, seed_from_id(entity_id), now
        )
        self._spawn(self._send_delete(entity_id, blob.owner or ""))
        return True

    def close_panel(self) -> None:
        self.state.side_panel = None

    # ── View controls ──

    def zoom_in(self) -> None:
        self.transform.zoom_at_center(self.config.zoom_step)

    def zoom_out(self) -> None:
        self.transform.zoom_at_center(1.0 / self.config.zoom_step)

    def reset_view(self) -> None:
        self.transform.reset()

    def resize(self, width: float, height: float, device_pixel_ratio: float | None = None) -> None:
        self.transform.resize(width, height, device_pixel_ratio)
        if self.painter is not None:
            self.painter.resize(width, height, device_pixel_ratio)

    # ── Polls ──

    async def poll_new_entries(self) -> None:
        """Append entries created since the last look at the spiral tail."""
        if not self.mounted:
            return
        try:
            entries = await self.store.fetch_entries()
        except StoreError as e:
            logger.debug("Entry poll failed: %s", e)
            return
        if not self.mounted:
            return

        fresh = sorted((Blob.from_entry(e) for e in entries), key=lambda b: b.created_at)
        insertions = plan_insertions(self.state, fresh, self.clock(), self.layout)
        added = apply_insertions(self.state, insertions)
        if added:
            logger.info("Entry poll: %d new blobs", added)

    async def poll_resonances(self) -> None:
        """Glow own blobs that someone else just resonated with."""
        if not self.mounted or self.user_id is None:
            return
        try:
            events = await self.store.fetch_incoming_resonances(self.user_id)
        except StoreError as e:
            logger.debug("Resonance poll failed: %s", e)
            return
        if not self.mounted:
            return

        now = self.clock()
        targets = plan_resonance_glows(self.state, (e.target_entry_id for e in events), now)
        apply_resonance_glows(self.state, targets, now)

    # ── Background requests ──

    async def _load_similar(self, blob: Blob, seq: int) -> None:
        try:
            similar = await self.store.fetch_similar(blob.id)
        except StoreError as e:
            logger.debug("Similarity lookup for %s failed: %s", blob.id, e)
            return
        if not self._selection_current(seq, blob.id):
            return

        now = self.clock()
        results = [Blob.from_entry(e) for e in similar]
        apply_similarity_glows(self.state, plan_similarity_glows(blob.id, results), now)
        newcomers = [r for r in results if r.id != blob.id]
        added = apply_insertions(
            self.state, plan_insertions(self.state, newcomers, now, self.layout)
        )
        if added:
            logger.debug("Similarity lookup surfaced %d off-mural blobs", added)

    async def _load_similar_own(self, blob: Blob, seq: int) -> None:
        try:
            moments = await self.store.fetch_similar_own(blob.id, self.user_id or "")
        except StoreError as e:
            logger.debug("Own-history lookup for %s failed: %s", blob.id, e)
            moments = []
        if not self._selection_current(seq, blob.id):
            return
        self.state.side_panel = SidePanel(blob=blob, moments=list(moments), loading=False)

    async def _send_resonance(self, target_id: str, actor_id: str) -> None:
        try:
            await self.store.record_resonance(target_id, actor_id)
        except StoreError as e:
            logger.debug("Resonance on %s not recorded: %s", target_id, e)

    async def _send_delete(self, entity_id: str, owner: str) -> None:
        try:
            await self.store.delete_entry(entity_id, owner)
        except StoreError as e:
            # Local removal stands; there is no rollback path
            logger.debug("Delete of %s not confirmed: %s", entity_id, e)

    # ── Helpers ──

    def _selection_current(self, seq: int, entity_id: str) -> bool:
        return (
            self.mounted
            and seq == self._selection_seq
            and self.state.highlighted == entity_id
        )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _hit_test_id(self, sx: float, sy: float, now: float) -> str | None:
        blob = self.transform.hit_test(self.state, sx, sy, now)
        return blob.id if blob is not None else None

    def _is_own_id(self, entity_id: str) -> bool:
        blob = self.state.get(entity_id)
        return blob is not None and blob.is_owned_by(self.user_id)
