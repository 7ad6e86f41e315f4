"""Tests for LobbyRegistry routing and compare-and-set commits."""

from __future__ import annotations

import itertools
import logging

import pytest

from draft.logic.actions import PickItemAction
from draft.logic.enums import RoomStatus
from draft.logic.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    ItemNotAvailableError,
    NotYourTurnError,
    RoomNotFoundError,
)
from draft.logic.settings import DraftSettings
from draft.logic.state import DraftItem, RoomState
from lobby.registry.manager import LobbyRegistry
from shared.storage import InMemoryStore, StoredRecord, VersionConflictError

CREATOR = "creator"


class RacingStore(InMemoryStore[RoomState]):
    """Commits a concurrent write right after the next read of a room."""

    def __init__(self) -> None:
        super().__init__()
        self.race_next_read = False

    def get(self, key: str) -> StoredRecord[RoomState]:
        record = super().get(key)
        if self.race_next_read:
            self.race_next_read = False
            super().compare_and_set(key, record.version, record.value)
        return record


def _sequential_ids():
    counter = itertools.count(1)
    return lambda: f"room-{next(counter)}"


@pytest.fixture
def store() -> RacingStore:
    return RacingStore()


@pytest.fixture
def registry(store: RacingStore) -> LobbyRegistry:
    return LobbyRegistry(store, room_id_factory=_sequential_ids())


def _arena(registry: LobbyRegistry) -> str:
    room_id = registry.create_room("Arena", 2, creator_id="A")
    registry.join(room_id, "A")
    registry.join(room_id, "B")
    registry.start_draft(room_id, "A")
    return room_id


class TestCreateRoom:
    def test_returns_id_and_stores_waiting_room(self, registry, store):
        room_id = registry.create_room("Arena", 4, creator_id=CREATOR)

        assert room_id == "room-1"
        record = store.get(room_id)
        assert record.version == 1
        assert record.value.status == RoomStatus.WAITING
        assert record.value.creator_id == CREATOR
        assert len(record.value.pool) == 8

    def test_invalid_arguments_store_nothing(self, registry, store):
        with pytest.raises(InvalidArgumentError):
            registry.create_room("", 4, creator_id=CREATOR)
        with pytest.raises(InvalidArgumentError):
            registry.create_room("Arena", 9, creator_id=CREATOR)
        assert store.scan() == []

    def test_explicit_pool_size(self, registry):
        room_id = registry.create_room("Long", 2, creator_id=CREATOR, pool_size=6)
        assert registry.get_room_state(room_id).max_rounds == 3

    def test_duplicate_room_id_conflicts(self, store):
        registry = LobbyRegistry(store, room_id_factory=lambda: "fixed")
        registry.create_room("First", 2, creator_id=CREATOR)

        with pytest.raises(ConflictError):
            registry.create_room("Second", 2, creator_id=CREATOR)
        assert registry.get_room_state("fixed").name == "First"

    def test_uses_registry_catalog_and_settings(self, store):
        catalog = tuple(DraftItem(id=100 + i, name=f"Card {i}", power=i) for i in range(9))
        registry = LobbyRegistry(store, settings=DraftSettings(default_rounds=3), catalog=catalog)

        state = registry.get_room_state(registry.create_room("Custom", 3, creator_id=CREATOR))
        assert [item.id for item in state.pool] == [100 + i for i in range(9)]
        assert state.max_rounds == 3

    def test_default_room_ids_are_unique(self, store):
        registry = LobbyRegistry(store)
        ids = {registry.create_room("Room", 2, creator_id=CREATOR) for _ in range(5)}
        assert len(ids) == 5


class TestQueries:
    def test_list_rooms_in_creation_order(self, registry):
        first = registry.create_room("One", 2, creator_id=CREATOR)
        second = registry.create_room("Two", 3, creator_id=CREATOR)
        registry.join(first, "p1")

        rooms = registry.list_rooms()
        assert [(r.id, r.name, r.max_players, r.status) for r in rooms] == [
            (first, "One", 2, RoomStatus.WAITING),
            (second, "Two", 3, RoomStatus.WAITING),
        ]

    def test_list_rooms_empty(self, registry):
        assert registry.list_rooms() == []

    def test_unknown_room_not_found(self, registry):
        with pytest.raises(RoomNotFoundError, match="missing"):
            registry.get_room_state("missing")
        with pytest.raises(RoomNotFoundError):
            registry.join("missing", "p1")

    def test_mutating_returned_state_leaves_room_intact(self, registry):
        room_id = _arena(registry)
        registry.pick_item(room_id, "A", 1)

        registry.get_room_state(room_id).picks["A"] = ()

        assert [item.id for item in registry.get_picks(room_id, "A")] == [1]

    def test_get_picks(self, registry):
        room_id = _arena(registry)
        registry.pick_item(room_id, "A", 1)

        assert [item.id for item in registry.get_picks(room_id, "A")] == [1]
        assert registry.get_picks(room_id, "B") == ()
        assert registry.get_picks(room_id, "stranger") == ()


class TestOperations:
    def test_full_draft_through_registry(self, registry, store):
        room_id = _arena(registry)
        for player, item_id in (("A", 1), ("B", 2), ("B", 3), ("A", 4)):
            registry.pick_item(room_id, player, item_id)

        state = registry.get_room_state(room_id)
        assert state.status == RoomStatus.FINISHED
        assert store.get(room_id).version == 8

    def test_each_commit_bumps_version_by_one(self, registry, store):
        room_id = registry.create_room("Arena", 2, creator_id="A")
        registry.join(room_id, "A")
        assert store.get(room_id).version == 2
        registry.join(room_id, "B")
        assert store.get(room_id).version == 3

    def test_rejected_operation_leaves_room_untouched(self, registry, store):
        room_id = _arena(registry)
        before = store.get(room_id)

        with pytest.raises(NotYourTurnError):
            registry.pick_item(room_id, "B", 1)
        assert store.get(room_id) == before

    def test_negative_item_id_not_available(self, registry, store):
        room_id = _arena(registry)
        before = store.get(room_id)

        with pytest.raises(ItemNotAvailableError):
            registry.pick_item(room_id, "A", -1)
        assert store.get(room_id) == before

    def test_negative_item_id_out_of_turn(self, registry):
        room_id = _arena(registry)
        with pytest.raises(NotYourTurnError):
            registry.pick_item(room_id, "B", -1)

    def test_apply_accepts_typed_action(self, registry):
        room_id = _arena(registry)
        state = registry.apply(room_id, "A", PickItemAction(item_id=3))
        assert [item.id for item in state.picks_of("A")] == [3]

    def test_finalize_running_draft_rejected(self, registry):
        room_id = _arena(registry)
        with pytest.raises(InvalidStateError, match="Draft not finished"):
            registry.finalize_draft(room_id, "A")

    def test_finalize_is_idempotent_without_commit(self, registry, store):
        room_id = _arena(registry)
        for player, item_id in (("A", 1), ("B", 2), ("B", 3), ("A", 4)):
            registry.pick_item(room_id, player, item_id)
        version = store.get(room_id).version

        first = registry.finalize_draft(room_id, "A")
        second = registry.finalize_draft(room_id, "B")
        assert first == second
        assert first.status == RoomStatus.FINISHED
        assert store.get(room_id).version == version

    def test_rooms_are_isolated(self, registry):
        first = _arena(registry)
        second = registry.create_room("Other", 2, creator_id=CREATOR)
        registry.pick_item(first, "A", 1)

        assert not registry.get_room_state(first).has_item(1)
        assert registry.get_room_state(second).has_item(1)


class TestConcurrency:
    def test_lost_race_raises_retryable_conflict(self, registry, store):
        room_id = registry.create_room("Arena", 2, creator_id="A")
        store.race_next_read = True

        with pytest.raises(ConflictError) as exc_info:
            registry.join(room_id, "A")
        assert exc_info.value.retryable is True
        assert registry.get_room_state(room_id).players == ()

    def test_retry_after_conflict_succeeds(self, registry, store):
        room_id = registry.create_room("Arena", 2, creator_id="A")
        store.race_next_read = True
        with pytest.raises(ConflictError):
            registry.join(room_id, "A")

        state = registry.join(room_id, "A")
        assert state.players == ("A",)

    def test_conflict_is_logged(self, registry, store, caplog):
        room_id = registry.create_room("Arena", 2, creator_id="A")
        store.race_next_read = True
        with caplog.at_level(logging.WARNING), pytest.raises(ConflictError):
            registry.join(room_id, "A")
        assert "lost commit race" in caplog.text

    def test_stale_direct_commit_conflicts(self, store):
        registry = LobbyRegistry(store, room_id_factory=lambda: "r")
        registry.create_room("Arena", 2, creator_id="A")
        stale = store.get("r")
        registry.join("r", "A")

        with pytest.raises(VersionConflictError, match="expected 1, found 2"):
            store.compare_and_set("r", stale.version, stale.value)
        assert store.get("r").value.players == ("A",)
