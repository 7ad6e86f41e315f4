"""Lobby registry: room creation, listing, and operation routing.

The registry owns no room state. Every room lives in the versioned store it
is given; each mutating call reads the latest (state, version), runs the pure
state machine transition, and commits with compare-and-set. A lost race
surfaces as ConflictError and is never retried here.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from draft.logic.actions import (
    FinalizeDraftAction,
    JoinAction,
    PickItemAction,
    StartDraftAction,
    action_kind,
    apply_action,
)
from draft.logic.catalog import STANDARD_CATALOG
from draft.logic.exceptions import ConflictError, DraftError, RoomNotFoundError
from draft.logic.room import create_room_state
from draft.logic.settings import DraftSettings
from shared.logging import bound_room_context
from shared.storage import ABSENT_VERSION, RecordNotFoundError, VersionConflictError

if TYPE_CHECKING:
    from collections.abc import Callable

    from draft.logic.state import DraftItem, ParticipantId, RoomMetadata, RoomState
    from shared.storage import StoredRecord, VersionedStore

    RoomActionType = JoinAction | StartDraftAction | PickItemAction | FinalizeDraftAction

logger = structlog.get_logger()


def _new_room_id() -> str:
    return str(uuid.uuid4())


class LobbyRegistry:
    """Create rooms and route operations to them by id."""

    def __init__(
        self,
        store: VersionedStore[RoomState],
        *,
        settings: DraftSettings | None = None,
        catalog: tuple[DraftItem, ...] = STANDARD_CATALOG,
        room_id_factory: Callable[[], str] = _new_room_id,
    ) -> None:
        self._store = store
        self._settings = settings or DraftSettings()
        self._catalog = catalog
        self._room_id_factory = room_id_factory

    @property
    def settings(self) -> DraftSettings:
        return self._settings

    def create_room(
        self,
        name: str,
        max_players: int,
        *,
        creator_id: ParticipantId,
        pool_size: int | None = None,
    ) -> str:
        """Create a room in Waiting and return its id.

        Raises InvalidArgumentError for an empty name, a player count outside
        the allowed range, or a pool size that does not divide evenly.
        """
        room_id = self._room_id_factory()
        state = create_room_state(
            room_id,
            name,
            max_players,
            creator_id=creator_id,
            catalog=self._catalog,
            pool_size=pool_size,
            settings=self._settings,
        )
        with bound_room_context(room_id, creator_id):
            try:
                self._store.compare_and_set(room_id, ABSENT_VERSION, state)
            except VersionConflictError as e:
                logger.warning("room id already in use")
                raise ConflictError(f"Room id {room_id} already exists") from e
            logger.info(
                "room created",
                name=state.name,
                max_players=state.max_players,
                max_rounds=state.max_rounds,
            )
        return room_id

    def list_rooms(self) -> list[RoomMetadata]:
        """Return metadata for every room, in creation order."""
        return [record.value.metadata() for record in self._store.scan()]

    def get_room_state(self, room_id: str) -> RoomState:
        return self._load(room_id).value

    def get_picks(self, room_id: str, participant: ParticipantId) -> tuple[DraftItem, ...]:
        """Return the participant's picks in pick order (empty for non-members)."""
        return self.get_room_state(room_id).picks_of(participant)

    def join(self, room_id: str, participant: ParticipantId) -> RoomState:
        return self.apply(room_id, participant, JoinAction())

    def start_draft(self, room_id: str, participant: ParticipantId) -> RoomState:
        return self.apply(room_id, participant, StartDraftAction())

    def pick_item(self, room_id: str, participant: ParticipantId, item_id: int) -> RoomState:
        return self.apply(room_id, participant, PickItemAction(item_id=item_id))

    def finalize_draft(self, room_id: str, participant: ParticipantId) -> RoomState:
        return self.apply(room_id, participant, FinalizeDraftAction())

    def apply(self, room_id: str, participant: ParticipantId, action: RoomActionType) -> RoomState:
        """Apply one action against the latest committed version of the room.

        Raises the DraftError produced by the state machine, RoomNotFoundError
        for an unknown id, or ConflictError when another writer committed
        between the read and this commit.
        """
        kind = action_kind(action)
        with bound_room_context(room_id, participant):
            record = self._load(room_id)
            try:
                new_state = apply_action(record.value, participant, action, self._settings)
            except DraftError as e:
                logger.info("room action rejected", action=kind, code=e.code, reason=e.message)
                raise

            if new_state is record.value:
                # no-op transition (finalize on a finished room): nothing to commit
                return new_state

            try:
                version = self._store.compare_and_set(room_id, record.version, new_state)
            except VersionConflictError as e:
                logger.warning("room action lost commit race", action=kind, read_version=record.version)
                raise ConflictError("Room changed since it was read; retry the request") from e

            logger.info(
                "room action applied",
                action=kind,
                version=version,
                status=new_state.status,
                pick_count=new_state.current_pick_count,
            )
        return new_state

    def _load(self, room_id: str) -> StoredRecord[RoomState]:
        try:
            return self._store.get(room_id)
        except RecordNotFoundError as e:
            raise RoomNotFoundError(f"Room {room_id} not found") from e
