"""Tests for the persisted local user token."""

from __future__ import annotations

import uuid

from mural.client.identity import load_or_create_user_id


def test_created_once_then_reused(tmp_path):
    path = tmp_path / "state" / "user_id"
    first = load_or_create_user_id(path)
    assert uuid.UUID(first).version == 4
    assert path.read_text().strip() == first
    assert load_or_create_user_id(path) == first


def test_malformed_file_is_replaced(tmp_path):
    path = tmp_path / "user_id"
    path.write_text("not a token")
    token = load_or_create_user_id(path)
    assert token != "not a token"
    assert path.read_text().strip() == token


def test_existing_token_is_normalised(tmp_path):
    path = tmp_path / "user_id"
    raw = "11111111-1111-4111-8111-111111111111"
    path.write_text(f"  {raw.upper()}\n")
    assert load_or_create_user_id(path) == raw
