"""Player model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from starlette.authentication import BaseUser

from draft.logic.identity import resolve_participant


class DraftPlayer(BaseUser):
    """Player identified by a client-held session id.

    The participant id is derived from the session id, so it is stable for
    as long as the client keeps presenting the same session id.
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._participant_id = resolve_participant(session_id)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:  # pragma: no cover
        return self._participant_id[:8]

    @property
    def identity(self) -> str:
        return self._participant_id

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def participant_id(self) -> str:
        return self._participant_id
