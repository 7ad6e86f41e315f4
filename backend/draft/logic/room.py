"""
Room state machine: Waiting -> Drafting -> Finished.

Each transition is a pure function from the current RoomState to the next
one. A rejected transition raises a DraftError and returns nothing, so the
caller never holds a half-applied state. Finished is terminal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from draft.logic.catalog import build_pool
from draft.logic.enums import RoomStatus
from draft.logic.exceptions import (
    AlreadyJoinedError,
    InvalidArgumentError,
    InvalidStateError,
    ItemNotAvailableError,
    NotCreatorError,
    NotEnoughPlayersError,
    NotYourTurnError,
    RoomFullError,
)
from draft.logic.settings import DraftSettings
from draft.logic.state import RoomState
from draft.logic.state_utils import add_player, move_item_to_picks, set_status
from draft.logic.turn import active_player, is_draft_complete, round_after_pick

if TYPE_CHECKING:
    from draft.logic.state import DraftItem, ParticipantId


def create_room_state(
    room_id: str,
    name: str,
    max_players: int,
    *,
    creator_id: ParticipantId,
    catalog: tuple[DraftItem, ...],
    pool_size: int | None = None,
    settings: DraftSettings | None = None,
) -> RoomState:
    """
    Build the initial Waiting state of a new room.

    The pool is the first pool_size catalog items. pool_size defaults to
    max_players * settings.default_rounds and must divide evenly by
    max_players; the quotient becomes max_rounds.
    """
    settings = settings or DraftSettings()
    name = name.strip()
    if not name:
        raise InvalidArgumentError("Room name must not be empty")
    if not settings.allows_player_count(max_players):
        raise InvalidArgumentError(
            f"max_players must be between {settings.min_players} and {settings.max_players}, got {max_players}",
        )
    if not creator_id:
        raise InvalidArgumentError("Room creator must not be empty")

    if pool_size is None:
        pool_size = max_players * settings.default_rounds
    if pool_size <= 0 or pool_size % max_players != 0:
        raise InvalidArgumentError(f"Pool size {pool_size} is not evenly divisible by max_players={max_players}")
    if pool_size > len(catalog):
        raise InvalidArgumentError(f"Pool size {pool_size} exceeds catalog of {len(catalog)} items")

    return RoomState(
        room_id=room_id,
        name=name,
        creator_id=creator_id,
        max_players=max_players,
        max_rounds=pool_size // max_players,
        pool=build_pool(catalog, pool_size),
    )


def _require_status(state: RoomState, expected: RoomStatus, operation: str) -> None:
    if state.status != expected:
        raise InvalidStateError(
            f"Cannot {operation}: room is {state.status.value}, expected {expected.value}",
        )


def join(state: RoomState, participant: ParticipantId) -> RoomState:
    """Append participant to the player list. Valid only while Waiting."""
    _require_status(state, RoomStatus.WAITING, "join")
    if state.is_member(participant):
        raise AlreadyJoinedError("Player already joined")
    if state.player_count >= state.max_players:
        raise RoomFullError(f"Room is full ({state.max_players} players)")
    return add_player(state, participant)


def start_draft(
    state: RoomState,
    participant: ParticipantId,
    settings: DraftSettings | None = None,
) -> RoomState:
    """Freeze the player list and open pick 0 of round 1. Creator only."""
    settings = settings or DraftSettings()
    _require_status(state, RoomStatus.WAITING, "start draft")
    if participant != state.creator_id:
        raise NotCreatorError("Only creator can start draft")
    if state.player_count < settings.min_players:
        raise NotEnoughPlayersError(
            f"Need at least {settings.min_players} players to start, have {state.player_count}",
        )
    return state.model_copy(
        update={
            "status": RoomStatus.DRAFTING,
            "current_pick_count": 0,
            "round": 1,
        },
    )


def pick_item(state: RoomState, participant: ParticipantId, item_id: int) -> RoomState:
    """
    Move item_id from the pool to the participant's picks.

    The room finishes once every player has picked max_rounds times.
    """
    _require_status(state, RoomStatus.DRAFTING, "pick item")
    if participant != active_player(state):
        raise NotYourTurnError("Not your turn")
    if not state.has_item(item_id):
        raise ItemNotAvailableError(f"Item {item_id} not found in pool")

    new_state, _item = move_item_to_picks(state, participant, item_id)
    pick_count = state.current_pick_count + 1
    new_state = new_state.model_copy(
        update={
            "current_pick_count": pick_count,
            "round": round_after_pick(pick_count, state.player_count, state.max_rounds),
        },
    )
    if is_draft_complete(pick_count, state.player_count, state.max_rounds):
        new_state = set_status(new_state, RoomStatus.FINISHED)
    return new_state


def finalize_draft(state: RoomState, participant: ParticipantId) -> RoomState:  # noqa: ARG001
    """
    Confirm a naturally completed draft.

    Idempotent: returns the state unchanged on every call once Finished.
    Never forces a running draft to complete.
    """
    if state.status != RoomStatus.FINISHED:
        raise InvalidStateError("Draft not finished")
    return state
