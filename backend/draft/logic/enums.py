"""
String enum definitions for draft room concepts.
"""

from enum import Enum


class RoomStatus(str, Enum):
    """Lifecycle status of a draft room. Only ever advances forward."""

    WAITING = "waiting"
    DRAFTING = "drafting"
    FINISHED = "finished"


# forward-only ordering used to assert status never moves backward
ROOM_STATUS_ORDER: dict[RoomStatus, int] = {
    RoomStatus.WAITING: 0,
    RoomStatus.DRAFTING: 1,
    RoomStatus.FINISHED: 2,
}


class DraftAction(str, Enum):
    """Operations a participant can apply to a room."""

    JOIN = "join"
    START_DRAFT = "start_draft"
    PICK_ITEM = "pick_item"
    FINALIZE_DRAFT = "finalize_draft"


class DraftErrorCode(str, Enum):
    """Error kinds reported for rejected operations."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ALREADY_JOINED = "already_joined"
    ROOM_FULL = "room_full"
    NOT_CREATOR = "not_creator"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    NOT_YOUR_TURN = "not_your_turn"
    ITEM_NOT_AVAILABLE = "item_not_available"
    INVALID_STATE = "invalid_state"
    CONFLICT = "conflict"
