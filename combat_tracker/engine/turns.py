"""
Turn/round scheduler.

The session's ``(current_turn_index, current_round_number)`` pair moves through
two transitions, forward and back, with no terminal state. Status effects
decay when the order wraps forward; rewinding never restores them.
"""

from dataclasses import replace
from datetime import datetime

from .effects import decrement_durations
from .state import CombatSession, utcnow


def advance_turn(session: CombatSession, now: datetime | None = None) -> CombatSession:
    """Move to the next participant, starting a new round when the order wraps."""
    count = len(session.participants)
    next_index = (session.current_turn_index + 1) % count
    round_number = session.current_round_number
    participants = session.participants

    if next_index == 0:
        round_number += 1
        participants = decrement_durations(participants)

    return replace(
        session,
        participants=participants,
        current_turn_index=next_index,
        current_round_number=round_number,
        updated_at=now or utcnow(),
    )


def rewind_turn(session: CombatSession, now: datetime | None = None) -> CombatSession:
    """Step back one turn.

    Wrapping backwards drops the round by one, never below round 1. Effect
    durations already decayed on the way forward stay decayed.
    """
    count = len(session.participants)
    prev_index = (session.current_turn_index - 1 + count) % count
    round_number = session.current_round_number

    if prev_index == count - 1:
        round_number = max(1, round_number - 1)

    return replace(
        session,
        current_turn_index=prev_index,
        current_round_number=round_number,
        updated_at=now or utcnow(),
    )
