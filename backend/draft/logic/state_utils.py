"""
Immutable state update utilities using Pydantic model_copy.

These helpers never mutate the input state. They always return a new
RoomState with the requested change applied; rule checks live in room.py.
"""

from draft.logic.enums import ROOM_STATUS_ORDER, RoomStatus
from draft.logic.state import DraftItem, ParticipantId, RoomState


def add_player(state: RoomState, participant: ParticipantId) -> RoomState:
    """
    Return new state with participant appended to join order.

    Args:
        state: Current room state
        participant: Participant to append

    Returns:
        New RoomState with the participant and an empty pick list

    """
    picks = dict(state.picks)
    picks[participant] = ()
    return state.model_copy(
        update={
            "players": (*state.players, participant),
            "picks": picks,
        },
    )


def move_item_to_picks(
    state: RoomState,
    participant: ParticipantId,
    item_id: int,
) -> tuple[RoomState, DraftItem]:
    """
    Return new state with the item moved from the pool to the participant's picks.

    Raises:
        KeyError: If item_id is not in the pool

    """
    for index, item in enumerate(state.pool):
        if item.id == item_id:
            break
    else:
        raise KeyError(item_id)

    pool = (*state.pool[:index], *state.pool[index + 1 :])
    picks = dict(state.picks)
    picks[participant] = (*state.picks_of(participant), item)
    return state.model_copy(update={"pool": pool, "picks": picks}), item


def set_status(state: RoomState, status: RoomStatus) -> RoomState:
    """Return new state with status advanced. Raises ValueError on a backward move."""
    if ROOM_STATUS_ORDER[status] < ROOM_STATUS_ORDER[state.status]:
        raise ValueError(f"Cannot move room from {state.status.value} back to {status.value}")
    return state.model_copy(update={"status": status})
