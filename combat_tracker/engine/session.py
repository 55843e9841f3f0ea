"""
Session facade.

Composes initiative ordering, HP resolution, status effects and the turn
scheduler into the operations callers use. Holds no state: each call takes a
session snapshot and returns a result carrying a new snapshot.

Unknown participant or effect ids never raise here. The result comes back with
``participant=None`` (or ``effect=None``) and the caller decides which error
that is in its own context.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable
from uuid import uuid4

from ..core.enums import DamageTarget, SessionStatus
from . import effects, hp, turns
from .initiative import sort_by_initiative
from .state import CombatSession, Duration, Participant, StatusEffect, find_participant, utcnow


@dataclass(frozen=True)
class DamageResult:
    session: CombatSession
    participant: Participant | None
    damage_applied: int = 0
    temp_hp_applied: int = 0
    hp_applied: int = 0


@dataclass(frozen=True)
class HealingResult:
    session: CombatSession
    participant: Participant | None
    healing_applied: int = 0
    new_hp: int | None = None


@dataclass(frozen=True)
class EffectResult:
    session: CombatSession
    participant: Participant | None
    effect: StatusEffect | None = None


@dataclass(frozen=True)
class TurnResult:
    session: CombatSession
    new_turn_index: int
    new_round_number: int


def start_session(
    participants: Iterable[Participant],
    owner_id: str,
    *,
    session_id: str | None = None,
    org_id: str | None = None,
    encounter_id: str | None = None,
    lair_action_initiative: int | None = 20,
    now: datetime | None = None,
) -> CombatSession:
    """Open a new session at round 1 with participants in initiative order."""
    now = now or utcnow()
    return CombatSession(
        id=session_id or str(uuid4()),
        owner_id=owner_id,
        participants=sort_by_initiative(participants),
        current_turn_index=0,
        current_round_number=1,
        status=SessionStatus.ACTIVE,
        lair_action_initiative=lair_action_initiative,
        created_at=now,
        updated_at=now,
        org_id=org_id,
        encounter_id=encounter_id,
    )


def _with_participant(session: CombatSession, updated: Participant, now: datetime | None) -> CombatSession:
    if any(p is updated for p in session.participants):
        # no-op upstream; nothing changed, so updated_at stays put
        return session
    participants = tuple(updated if p.id == updated.id else p for p in session.participants)
    return replace(session, participants=participants, updated_at=now or utcnow())


def apply_damage(
    session: CombatSession,
    participant_id: str,
    amount: int,
    target: DamageTarget = DamageTarget.CURRENT_HP,
    now: datetime | None = None,
) -> DamageResult:
    participant = find_participant(session, participant_id)
    if participant is None:
        return DamageResult(session=session, participant=None)

    outcome = hp.resolve_damage(participant, amount, target)
    return DamageResult(
        session=_with_participant(session, outcome.participant, now),
        participant=outcome.participant,
        damage_applied=outcome.damage_applied,
        temp_hp_applied=outcome.temp_hp_applied,
        hp_applied=outcome.hp_applied,
    )


def apply_healing(
    session: CombatSession,
    participant_id: str,
    amount: int,
    now: datetime | None = None,
) -> HealingResult:
    participant = find_participant(session, participant_id)
    if participant is None:
        return HealingResult(session=session, participant=None)

    outcome = hp.resolve_healing(participant, amount)
    return HealingResult(
        session=_with_participant(session, outcome.participant, now),
        participant=outcome.participant,
        healing_applied=outcome.healing_applied,
        new_hp=outcome.new_hp,
    )


def add_effect(
    session: CombatSession,
    participant_id: str,
    name: str,
    duration: Duration,
    *,
    icon: str | None = None,
    description: str | None = None,
    id_factory: effects.IdFactory = effects.new_effect_id,
    now: datetime | None = None,
) -> EffectResult:
    """Attach an effect that counts from the session's current round."""
    participant = find_participant(session, participant_id)
    if participant is None:
        return EffectResult(session=session, participant=None)

    updated, effect = effects.add_effect(
        participant,
        name,
        duration,
        session.current_round_number,
        icon=icon,
        description=description,
        id_factory=id_factory,
    )
    return EffectResult(
        session=_with_participant(session, updated, now),
        participant=updated,
        effect=effect,
    )


def remove_effect(
    session: CombatSession,
    participant_id: str,
    effect_id: str,
    now: datetime | None = None,
) -> EffectResult:
    participant = find_participant(session, participant_id)
    if participant is None:
        return EffectResult(session=session, participant=None)

    removed = effects.find_effect(participant, effect_id)
    if removed is None:
        return EffectResult(session=session, participant=participant)

    updated = effects.remove_effect(participant, effect_id)
    return EffectResult(
        session=_with_participant(session, updated, now),
        participant=updated,
        effect=removed,
    )


def next_turn(session: CombatSession, now: datetime | None = None) -> TurnResult:
    advanced = turns.advance_turn(session, now)
    return TurnResult(advanced, advanced.current_turn_index, advanced.current_round_number)


def previous_turn(session: CombatSession, now: datetime | None = None) -> TurnResult:
    rewound = turns.rewind_turn(session, now)
    return TurnResult(rewound, rewound.current_turn_index, rewound.current_round_number)
