"""
Immutable combat snapshots.

Every engine operation takes one of these frozen dataclasses and returns a new
one built with ``dataclasses.replace``; nothing here is ever mutated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..core.enums import ParticipantType, SessionStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Finite:
    """A duration that ticks down once per completed round."""
    rounds: int

    def __post_init__(self):
        if self.rounds <= 0:
            raise ValueError(f"Finite duration must be positive, got {self.rounds}")


@dataclass(frozen=True)
class Permanent:
    """A duration that never decays."""


PERMANENT = Permanent()

Duration = Finite | Permanent


def duration_from_rounds(rounds: int | None) -> Duration:
    """Map the nullable wire representation onto the tagged variant."""
    if rounds is None:
        return PERMANENT
    return Finite(rounds)


def duration_to_rounds(duration: Duration) -> int | None:
    if isinstance(duration, Finite):
        return duration.rounds
    return None


@dataclass(frozen=True)
class StatusEffect:
    id: str
    name: str
    applied_at_round: int
    duration: Duration = PERMANENT
    icon: str | None = None
    description: str | None = None

    @property
    def is_permanent(self) -> bool:
        return isinstance(self.duration, Permanent)


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    type: ParticipantType
    initiative_value: int
    max_hp: int
    current_hp: int
    temporary_hp: int = 0
    ac_value: int | None = None
    status_effects: tuple[StatusEffect, ...] = ()

    def __post_init__(self):
        if self.max_hp <= 0:
            raise ValueError(f"max_hp must be positive, got {self.max_hp}")
        if self.temporary_hp < 0:
            raise ValueError(f"temporary_hp cannot be negative, got {self.temporary_hp}")
        # Accept lists from callers but always store a tuple
        object.__setattr__(self, "status_effects", tuple(self.status_effects))


@dataclass(frozen=True)
class CombatSession:
    id: str
    owner_id: str
    participants: tuple[Participant, ...]
    current_turn_index: int = 0
    current_round_number: int = 1
    status: SessionStatus = SessionStatus.ACTIVE
    lair_action_initiative: int | None = 20
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    org_id: str | None = None
    encounter_id: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "participants", tuple(self.participants))
        if not self.participants:
            raise ValueError("A combat session needs at least one participant")
        if not 0 <= self.current_turn_index < len(self.participants):
            raise ValueError(
                f"current_turn_index {self.current_turn_index} out of range "
                f"for {len(self.participants)} participants"
            )
        if self.current_round_number < 1:
            raise ValueError(f"current_round_number must be >= 1, got {self.current_round_number}")


# Derived, read-only helpers

def remaining_rounds(effect: StatusEffect, current_round: int) -> int | None:
    """Rounds left for a finite effect; None means it never expires."""
    if isinstance(effect.duration, Finite):
        return max(0, effect.applied_at_round + effect.duration.rounds - current_round)
    return None


def is_unconscious(participant: Participant) -> bool:
    return participant.current_hp <= 0


def hp_percentage(participant: Participant) -> float:
    """Health bar fill in [0, 100]; overkill and overheal are clipped for display only."""
    return max(0.0, min(100.0, participant.current_hp / participant.max_hp * 100))


def current_participant(session: CombatSession) -> Participant:
    return session.participants[session.current_turn_index]


def find_participant(session: CombatSession, participant_id: str) -> Participant | None:
    return next((p for p in session.participants if p.id == participant_id), None)
