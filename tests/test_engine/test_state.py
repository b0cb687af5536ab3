"""Tests for the shared mural state."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mural.engine.animation import Placement
from mural.engine.state import Blob, MuralState, SidePanel, time_ago

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "age, label",
    [
        (timedelta(hours=3), "today"),
        (timedelta(days=1, hours=2), "yesterday"),
        (timedelta(days=4), "4 days ago"),
        (timedelta(days=7), "1 week ago"),
        (timedelta(days=20), "2 weeks ago"),
        (timedelta(days=40), "1 month ago"),
        (timedelta(days=95), "3 months ago"),
    ],
)
def test_time_ago(age, label):
    assert time_ago(NOW - age, now=NOW) == label


def test_time_ago_naive_timestamps_are_utc():
    naive = (NOW - timedelta(days=2)).replace(tzinfo=None)
    assert time_ago(naive, now=NOW) == "2 days ago"


def _blob(blob_id: str, owner: str | None = None) -> Blob:
    return Blob(id=blob_id, message="m", created_at=NOW, owner=owner)


class TestMuralState:
    def test_add_is_idempotent(self):
        state = MuralState()
        assert state.add(_blob("a"), Placement.at_rest((1.0, 1.0), 0.0))
        assert not state.add(_blob("a"), Placement.at_rest((9.0, 9.0), 0.0))
        assert len(state) == 1
        assert state.targets() == [(1.0, 1.0)]

    def test_remove_drops_every_record(self):
        state = MuralState()
        blob = _blob("a")
        state.add(blob, Placement.at_rest((1.0, 1.0), 0.0))
        state.glows.set_resonance("a", 0.0)
        state.glows.set_similarity("a", 0.0, 0.8)
        state.highlighted = "a"
        state.side_panel = SidePanel(blob=blob)

        assert state.remove("a") is blob
        assert "a" not in state
        assert state.placements == {}
        assert len(state.glows) == 0
        assert state.highlighted is None
        assert state.side_panel is None
        assert state.remove("a") is None

    def test_view_starts_at_reference_center(self, config):
        state = MuralState(config=config)
        assert (state.view.center_x, state.view.center_y) == config.center
        assert state.view.scale == 1.0

    def test_clear(self):
        state = MuralState()
        state.add(_blob("a"), Placement.at_rest((1.0, 1.0), 0.0))
        state.tombstones.add("b")
        state.spiral_tail_angle = 3.0
        state.clear()
        assert len(state) == 0
        assert state.tombstones == set()
        assert state.spiral_tail_angle is None


class TestBlob:
    def test_ownership_needs_an_owner(self):
        assert not _blob("a").is_owned_by(None)
        assert not _blob("a", owner="u1").is_owned_by("u2")
        assert _blob("a", owner="u1").is_owned_by("u1")

    def test_created_ms(self):
        blob = Blob(id="a", message="", created_at=datetime(1970, 1, 1, 0, 0, 1))
        assert blob.created_ms() == 1000.0
