import hashlib

import pytest

from draft.logic.exceptions import InvalidArgumentError
from draft.logic.identity import generate_session_id, is_valid_session_id, resolve_participant


class TestResolveParticipant:
    def test_hashes_prefixed_session_id(self):
        expected = hashlib.sha256(b"livedraft_player_0123456789abcdef").hexdigest()
        assert resolve_participant("0123456789abcdef") == expected

    def test_stable_across_calls(self):
        assert resolve_participant("deadbeefdeadbeef") == resolve_participant("deadbeefdeadbeef")

    def test_distinct_sessions_resolve_differently(self):
        assert resolve_participant("aaaaaaaaaaaaaaaa") != resolve_participant("bbbbbbbbbbbbbbbb")

    def test_output_is_lowercase_hex(self):
        participant = resolve_participant("0123456789ABCDEF")
        assert len(participant) == 64
        assert participant == participant.lower()

    def test_rejects_empty(self):
        with pytest.raises(InvalidArgumentError):
            resolve_participant("")


class TestSessionIds:
    def test_generated_ids_are_valid(self):
        session_id = generate_session_id()
        assert len(session_id) == 16
        assert is_valid_session_id(session_id)

    def test_generated_ids_differ(self):
        assert generate_session_id() != generate_session_id()

    @pytest.mark.parametrize("value", ["", "abc", "0123456789abcdeg", "0123456789abcdef0", " 0123456789abcde"])
    def test_rejects_malformed(self, value):
        assert is_valid_session_id(value) is False
