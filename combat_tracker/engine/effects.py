from dataclasses import replace
from typing import Callable, Iterable
from uuid import uuid4

from .state import Duration, Finite, Participant, StatusEffect

IdFactory = Callable[[], str]


def new_effect_id() -> str:
    return str(uuid4())


def add_effect(
    participant: Participant,
    name: str,
    duration: Duration,
    applied_at_round: int,
    *,
    icon: str | None = None,
    description: str | None = None,
    id_factory: IdFactory = new_effect_id,
) -> tuple[Participant, StatusEffect]:
    """Append a new effect. Applying the same condition twice yields two independent effects."""
    effect = StatusEffect(
        id=id_factory(),
        name=name,
        applied_at_round=applied_at_round,
        duration=duration,
        icon=icon,
        description=description,
    )
    updated = replace(participant, status_effects=participant.status_effects + (effect,))
    return updated, effect


def find_effect(participant: Participant, effect_id: str) -> StatusEffect | None:
    return next((e for e in participant.status_effects if e.id == effect_id), None)


def remove_effect(participant: Participant, effect_id: str) -> Participant:
    """Drop the effect with ``effect_id``. An unknown id returns the participant unchanged."""
    if find_effect(participant, effect_id) is None:
        return participant
    remaining = tuple(e for e in participant.status_effects if e.id != effect_id)
    return replace(participant, status_effects=remaining)


def _tick(effect: StatusEffect) -> StatusEffect | None:
    if not isinstance(effect.duration, Finite):
        return effect
    rounds = effect.duration.rounds - 1
    if rounds <= 0:
        return None
    return replace(effect, duration=Finite(rounds))


def decrement_durations(participants: Iterable[Participant]) -> tuple[Participant, ...]:
    """Tick every finite effect down by one round, dropping the ones that expire.

    Runs once per round boundary, never per turn. Permanent effects pass through.
    """
    updated = []
    for participant in participants:
        if not participant.status_effects:
            updated.append(participant)
            continue
        ticked = (_tick(effect) for effect in participant.status_effects)
        effects = tuple(effect for effect in ticked if effect is not None)
        updated.append(replace(participant, status_effects=effects))
    return tuple(updated)
