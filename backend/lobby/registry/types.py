"""Request and response models for the lobby's public operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from draft.logic.enums import RoomStatus
from draft.logic.settings import MAX_PLAYERS, MIN_PLAYERS
from draft.logic.state import DraftItem, ParticipantId
from draft.logic.turn import active_player

if TYPE_CHECKING:
    from draft.logic.state import RoomState


class CreateRoomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Range checks stay in the state machine so they report InvalidArgument
    # the same way for every caller; here we only pin down the types.
    name: str = Field(max_length=100)
    max_players: int = Field(strict=True)
    pool_size: int | None = Field(default=None, strict=True)


class PlayerPicks(BaseModel):
    player: ParticipantId
    items: list[DraftItem]


class RoomStateView(BaseModel):
    """Serializable room snapshot including whose turn it is."""

    room_id: str
    name: str
    creator_id: ParticipantId
    players: list[ParticipantId]
    max_players: int = Field(ge=MIN_PLAYERS, le=MAX_PLAYERS)
    current_pick_count: int
    round: int
    max_rounds: int
    pool: list[DraftItem]
    picks: list[PlayerPicks]
    status: RoomStatus
    active_player: ParticipantId | None

    @classmethod
    def from_state(cls, state: RoomState) -> RoomStateView:
        return cls(
            room_id=state.room_id,
            name=state.name,
            creator_id=state.creator_id,
            players=list(state.players),
            max_players=state.max_players,
            current_pick_count=state.current_pick_count,
            round=state.round,
            max_rounds=state.max_rounds,
            pool=list(state.pool),
            picks=[PlayerPicks(player=p, items=list(state.picks_of(p))) for p in state.players],
            status=state.status,
            active_player=active_player(state) if state.status == RoomStatus.DRAFTING else None,
        )
