"""Shared room builders for draft logic tests."""

from __future__ import annotations

import pytest

from draft.logic.catalog import STANDARD_CATALOG
from draft.logic.room import create_room_state, join, start_draft
from draft.logic.state import RoomState

CREATOR = "alice"


def make_room(max_players: int = 4, pool_size: int | None = None) -> RoomState:
    return create_room_state(
        "room-1",
        "Test Room",
        max_players,
        creator_id=CREATOR,
        catalog=STANDARD_CATALOG,
        pool_size=pool_size,
    )


def make_drafting_room(players: tuple[str, ...], max_players: int = 4, pool_size: int | None = None) -> RoomState:
    state = make_room(max_players, pool_size)
    for player in players:
        state = join(state, player)
    return start_draft(state, CREATOR)


@pytest.fixture
def waiting_room() -> RoomState:
    return make_room()


@pytest.fixture
def two_player_draft() -> RoomState:
    """Alice and Bob drafting from a 4-item pool, 2 rounds."""
    return make_drafting_room(("alice", "bob"), max_players=2)
