"""Lobby server configuration via environment variables."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from draft.logic.settings import DEFAULT_ROUNDS, DraftSettings
from shared.validators import parse_string_list

PLAYER_COOKIE_MAX_AGE = 60 * 60 * 24 * 30  # 30 days


class LobbyServerSettings(BaseSettings):
    model_config = {"env_prefix": "ARENA_"}

    log_dir: str = "backend/logs/lobby"
    cors_origins: Annotated[list[str], NoDecode] = []
    database_path: Path | None = None  # None keeps rooms in memory
    catalog_path: Path | None = None  # None uses the built-in catalog
    default_rounds: int = Field(default=DEFAULT_ROUNDS, ge=1)
    player_cookie_max_age: int = Field(default=PLAYER_COOKIE_MAX_AGE, ge=0)
    player_cookie_secure: bool = False

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)

    def draft_settings(self) -> DraftSettings:
        return DraftSettings(default_rounds=self.default_rounds)
