"""Typed operation payloads for room actions.

Incoming payloads are a closed tagged union keyed by ``type``. They are
validated here, at the boundary, so the state machine only ever sees one of
the four known operations with well-typed fields.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from draft.logic.enums import DraftAction
from draft.logic.exceptions import InvalidArgumentError
from draft.logic.room import finalize_draft, join, pick_item, start_draft

if TYPE_CHECKING:
    from draft.logic.settings import DraftSettings
    from draft.logic.state import ParticipantId, RoomState


class JoinAction(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["join"] = "join"


class StartDraftAction(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["start_draft"] = "start_draft"


class PickItemAction(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["pick_item"] = "pick_item"
    item_id: int = Field(strict=True)


class FinalizeDraftAction(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["finalize_draft"] = "finalize_draft"


RoomAction = Annotated[
    JoinAction | StartDraftAction | PickItemAction | FinalizeDraftAction,
    Field(discriminator="type"),
]

_room_action_adapter: TypeAdapter[RoomAction] = TypeAdapter(RoomAction)


def parse_action(payload: Any) -> JoinAction | StartDraftAction | PickItemAction | FinalizeDraftAction:  # noqa: ANN401
    """Validate a decoded payload into a typed room action.

    Raises InvalidArgumentError for unknown types or malformed fields.
    """
    try:
        return _room_action_adapter.validate_python(payload)
    except ValidationError as e:
        raise InvalidArgumentError(f"Invalid action payload: {e}") from e


def action_kind(action: JoinAction | StartDraftAction | PickItemAction | FinalizeDraftAction) -> DraftAction:
    return DraftAction(action.type)


def apply_action(
    state: RoomState,
    participant: ParticipantId,
    action: JoinAction | StartDraftAction | PickItemAction | FinalizeDraftAction,
    settings: DraftSettings | None = None,
) -> RoomState:
    """Run the state machine transition matching the action."""
    match action:
        case JoinAction():
            return join(state, participant)
        case StartDraftAction():
            return start_draft(state, participant, settings)
        case PickItemAction(item_id=item_id):
            return pick_item(state, participant, item_id)
        case FinalizeDraftAction():
            return finalize_draft(state, participant)
    raise InvalidArgumentError(f"Unsupported action: {action!r}")  # pragma: no cover
