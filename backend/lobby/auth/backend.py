"""Starlette AuthenticationBackend that reads the player session id."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import AuthCredentials, AuthenticationBackend

from draft.logic.identity import is_valid_session_id
from lobby.auth.models import DraftPlayer

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

PLAYER_ID_HEADER = "x-player-id"
PLAYER_ID_COOKIE = "livedraft_player_id"


class PlayerSessionBackend(AuthenticationBackend):
    """Identify requests via the x-player-id header or the player cookie.

    The header wins over the cookie. Values that are not 16 hex characters
    are ignored, leaving the request unauthenticated so the endpoint can
    issue a fresh session id.
    """

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, DraftPlayer] | None:
        for session_id in (conn.headers.get(PLAYER_ID_HEADER), conn.cookies.get(PLAYER_ID_COOKIE)):
            if session_id and is_valid_session_id(session_id):
                return AuthCredentials(["player"]), DraftPlayer(session_id)
        return None
