"""
Snake-draft turn scheduling.

The active player is a pure function of the global pick count and the
number of players. Odd rounds run forward through join order, even rounds
run backward, so the player at each end of the order picks twice in a row
at every round boundary:

    round        = pick_count // n + 1
    within_round = pick_count % n
    index        = within_round          (odd round)
                 = n - 1 - within_round  (even round)

No direction flag is stored anywhere; every caller recomputes from the
pick count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from draft.logic.state import ParticipantId, RoomState


def _check_args(pick_count: int, num_players: int) -> None:
    if num_players < 1:
        raise ValueError(f"Invalid player count {num_players}, expected at least 1")
    if pick_count < 0:
        raise ValueError(f"Invalid pick count {pick_count}, expected non-negative")


def round_for_pick(pick_count: int, num_players: int) -> int:
    """Return the 1-based round that pick number pick_count belongs to."""
    _check_args(pick_count, num_players)
    return pick_count // num_players + 1


def active_player_index(pick_count: int, num_players: int) -> int:
    """Return the index into join order of the player who makes pick pick_count."""
    _check_args(pick_count, num_players)
    within_round = pick_count % num_players
    if round_for_pick(pick_count, num_players) % 2 == 1:
        return within_round
    return num_players - 1 - within_round


def pick_order(num_players: int, rounds: int) -> list[int]:
    """Return the active player index for every pick of a full draft."""
    return [active_player_index(pick, num_players) for pick in range(num_players * rounds)]


def is_draft_complete(pick_count: int, num_players: int, rounds: int) -> bool:
    _check_args(pick_count, num_players)
    return pick_count >= num_players * rounds


def active_player(state: RoomState) -> ParticipantId | None:
    """
    Return the participant expected to pick next.

    Returns None when the room has no players or the draft is complete.
    """
    if not state.players:
        return None
    if is_draft_complete(state.current_pick_count, state.player_count, state.max_rounds):
        return None
    return state.players[active_player_index(state.current_pick_count, state.player_count)]


def round_after_pick(pick_count: int, num_players: int, rounds: int) -> int:
    """
    Return the round to record once pick_count picks have been made.

    Clamped to rounds so a finished room reports its final round rather
    than the round that would follow it.
    """
    return min(round_for_pick(pick_count, num_players), rounds)
