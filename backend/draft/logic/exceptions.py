"""Typed domain exceptions for draft room rule violations.

Every rejected operation raises a subclass of DraftError rather than a raw
ValueError. Each subclass carries a stable DraftErrorCode so the transport
layer can map it to its own error envelope without parsing messages.

Only ConflictError is retryable: it reports a lost compare-and-set race,
not a request that is invalid under the current room state.
"""

from draft.logic.enums import DraftErrorCode


class DraftError(Exception):
    """Base exception for rejected draft operations."""

    code: DraftErrorCode = DraftErrorCode.INVALID_STATE
    retryable: bool = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidArgumentError(DraftError):
    """Request arguments are malformed or out of range."""

    code = DraftErrorCode.INVALID_ARGUMENT


class RoomNotFoundError(DraftError):
    """No room exists with the requested id."""

    code = DraftErrorCode.NOT_FOUND


class AlreadyJoinedError(DraftError):
    """Participant is already a member of the room."""

    code = DraftErrorCode.ALREADY_JOINED


class RoomFullError(DraftError):
    """Room already holds max_players participants."""

    code = DraftErrorCode.ROOM_FULL


class NotCreatorError(DraftError):
    """Only the room creator may start the draft."""

    code = DraftErrorCode.NOT_CREATOR


class NotEnoughPlayersError(DraftError):
    """Draft cannot start with fewer than the minimum number of players."""

    code = DraftErrorCode.NOT_ENOUGH_PLAYERS


class NotYourTurnError(DraftError):
    """Participant is not the player scheduled for the current pick."""

    code = DraftErrorCode.NOT_YOUR_TURN


class ItemNotAvailableError(DraftError):
    """Item is not currently in the room's pool."""

    code = DraftErrorCode.ITEM_NOT_AVAILABLE


class InvalidStateError(DraftError):
    """Operation is not valid in the room's current status."""

    code = DraftErrorCode.INVALID_STATE


class ConflictError(DraftError):
    """Room changed between read and commit; the caller may retry."""

    code = DraftErrorCode.CONFLICT
    retryable = True
