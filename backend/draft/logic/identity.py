"""
Player identity resolution.

A session id is the opaque identifier a client presents (header or cookie).
It resolves to a stable participant id by hashing, so the same session
always maps to the same participant and resolution keeps no state.
Proving that a client owns the session id it presents is the transport's
job, not this module's.
"""

import hashlib
import re
import secrets

from draft.logic.exceptions import InvalidArgumentError
from draft.logic.state import ParticipantId

PARTICIPANT_ID_PREFIX = b"livedraft_player_"

# Session ids are 16 hex characters (8 random bytes).
SESSION_ID_BYTES = 8
_SESSION_ID_RE = re.compile(r"[0-9a-fA-F]{16}")


def resolve_participant(session_id: str) -> ParticipantId:
    """Return the participant id for a session id (64 lowercase hex chars)."""
    if not session_id:
        raise InvalidArgumentError("Session id must not be empty")
    digest = hashlib.sha256(PARTICIPANT_ID_PREFIX + session_id.encode("utf-8"))
    return digest.hexdigest()


def is_valid_session_id(session_id: str) -> bool:
    return bool(_SESSION_ID_RE.fullmatch(session_id))


def generate_session_id() -> str:
    return secrets.token_hex(SESSION_ID_BYTES)
