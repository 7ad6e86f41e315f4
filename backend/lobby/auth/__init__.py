"""Lobby player identity: Starlette backend and player model."""

from lobby.auth.backend import PLAYER_ID_COOKIE, PLAYER_ID_HEADER, PlayerSessionBackend
from lobby.auth.models import DraftPlayer

__all__ = [
    "PLAYER_ID_COOKIE",
    "PLAYER_ID_HEADER",
    "DraftPlayer",
    "PlayerSessionBackend",
]
