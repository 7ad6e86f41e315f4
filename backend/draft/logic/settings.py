"""Centralized draft rules: player limits and default draft length."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

MIN_PLAYERS = 2
MAX_PLAYERS = 8
DEFAULT_ROUNDS = 2


class DraftSettings(BaseModel):
    """
    Configuration for room creation rules.

    default_rounds decides the pool size when a room is created without an
    explicit one: pool_size = max_players * default_rounds.
    """

    model_config = ConfigDict(frozen=True)

    min_players: int = Field(default=MIN_PLAYERS, ge=MIN_PLAYERS)
    max_players: int = Field(default=MAX_PLAYERS, le=MAX_PLAYERS)
    default_rounds: int = Field(default=DEFAULT_ROUNDS, ge=1)

    @model_validator(mode="after")
    def _check_player_range(self) -> DraftSettings:
        if self.min_players > self.max_players:
            raise ValueError(f"min_players={self.min_players} exceeds max_players={self.max_players}")
        return self

    def allows_player_count(self, max_players: int) -> bool:
        return self.min_players <= max_players <= self.max_players
