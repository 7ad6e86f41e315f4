"""
Immutable room state models for the draft arena.

All models are frozen Pydantic models. State transitions never mutate a
snapshot; they build a new one with model_copy (see state_utils.py).
"""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, ConfigDict, Field, model_validator

from draft.logic.enums import RoomStatus

ParticipantId = str


class DraftItem(BaseModel):
    """An item that can be drafted. Ids are unique within the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    name: str = Field(min_length=1)
    power: int = Field(ge=0)


class RoomMetadata(BaseModel):
    """Discoverable summary of a room, as shown in the lobby listing."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    max_players: int
    status: RoomStatus


class RoomState(BaseModel):
    """
    Full state of one draft room.

    players keeps join order, which is also the draft order for odd rounds.
    picks holds an entry (possibly empty) for every joined player.
    """

    model_config = ConfigDict(frozen=True)

    room_id: str
    name: str
    creator_id: ParticipantId
    players: tuple[ParticipantId, ...] = ()
    max_players: int
    current_pick_count: int = 0
    round: int = 1
    max_rounds: int
    pool: tuple[DraftItem, ...]
    picks: dict[ParticipantId, tuple[DraftItem, ...]] = Field(default_factory=dict)
    status: RoomStatus = RoomStatus.WAITING

    @model_validator(mode="after")
    def _check_invariants(self) -> RoomState:
        if len(set(self.players)) != len(self.players):
            raise ValueError("players must be unique")
        if len(self.players) > self.max_players:
            raise ValueError(f"{len(self.players)} players exceeds max_players={self.max_players}")
        unknown = set(self.picks) - set(self.players)
        if unknown:
            raise ValueError(f"picks recorded for non-members: {sorted(unknown)}")

        item_ids = Counter(item.id for item in self.pool)
        for items in self.picks.values():
            item_ids.update(item.id for item in items)
        duplicated = sorted(item_id for item_id, count in item_ids.items() if count > 1)
        if duplicated:
            raise ValueError(f"items held more than once: {duplicated}")
        if item_ids.total() != self.initial_pool_size:
            raise ValueError(
                f"pool and picks hold {item_ids.total()} items, expected {self.initial_pool_size}",
            )
        return self

    @property
    def initial_pool_size(self) -> int:
        return self.max_players * self.max_rounds

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def total_picks(self) -> int:
        return sum(len(items) for items in self.picks.values())

    @property
    def draft_length(self) -> int:
        """Number of picks after which the draft is complete."""
        return self.player_count * self.max_rounds

    def is_member(self, participant: ParticipantId) -> bool:
        return participant in self.players

    def has_item(self, item_id: int) -> bool:
        return any(item.id == item_id for item in self.pool)

    def picks_of(self, participant: ParticipantId) -> tuple[DraftItem, ...]:
        return self.picks.get(participant, ())

    def metadata(self) -> RoomMetadata:
        return RoomMetadata(
            id=self.room_id,
            name=self.name,
            max_players=self.max_players,
            status=self.status,
        )
