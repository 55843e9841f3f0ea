"""Combat log entries describing what a facade call did."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from ..core.enums import LogActionType
from .session import DamageResult, EffectResult, HealingResult, TurnResult
from .state import CombatSession, current_participant, duration_to_rounds, utcnow


@dataclass(frozen=True)
class CombatLogEntry:
    round_number: int
    turn_index: int
    action_type: LogActionType
    description: str
    actor: str | None = None
    target: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utcnow)


def _entry(session: CombatSession, action_type: LogActionType, description: str, **kwargs) -> CombatLogEntry:
    return CombatLogEntry(
        round_number=session.current_round_number,
        turn_index=session.current_turn_index,
        action_type=action_type,
        description=description,
        timestamp=session.updated_at,
        **kwargs,
    )


def damage_entry(result: DamageResult) -> CombatLogEntry:
    target = result.participant
    return _entry(
        result.session,
        LogActionType.DAMAGE,
        f"{target.name} takes {result.damage_applied} damage",
        actor=current_participant(result.session).id,
        target=target.id,
        details={
            "damageApplied": result.damage_applied,
            "tempHPApplied": result.temp_hp_applied,
            "hpApplied": result.hp_applied,
            "currentHP": target.current_hp,
        },
    )


def healing_entry(result: HealingResult) -> CombatLogEntry:
    target = result.participant
    return _entry(
        result.session,
        LogActionType.HEAL,
        f"{target.name} heals {result.healing_applied} HP",
        actor=current_participant(result.session).id,
        target=target.id,
        details={"healingApplied": result.healing_applied, "newHP": result.new_hp},
    )


def effect_applied_entry(result: EffectResult) -> CombatLogEntry:
    effect = result.effect
    rounds = duration_to_rounds(effect.duration)
    lasting = "permanently" if rounds is None else f"for {rounds} round{'s' if rounds != 1 else ''}"
    return _entry(
        result.session,
        LogActionType.EFFECT_APPLIED,
        f"{result.participant.name} is {effect.name} {lasting}",
        target=result.participant.id,
        details={"effectId": effect.id, "name": effect.name, "durationInRounds": rounds},
    )


def effect_removed_entry(result: EffectResult) -> CombatLogEntry:
    return _entry(
        result.session,
        LogActionType.EFFECT_REMOVED,
        f"{result.participant.name} is no longer {result.effect.name}",
        target=result.participant.id,
        details={"effectId": result.effect.id, "name": result.effect.name},
    )


def turn_entries(before: CombatSession, result: TurnResult, *, forward: bool) -> list[CombatLogEntry]:
    """Entries for a turn change. A forward wrap also closes one round and opens the next."""
    after = result.session
    acting = current_participant(after)
    entries = []

    if forward and result.new_turn_index == 0:
        entries.append(
            CombatLogEntry(
                round_number=before.current_round_number,
                turn_index=before.current_turn_index,
                action_type=LogActionType.ROUND_ENDED,
                description=f"Round {before.current_round_number} ends",
                timestamp=after.updated_at,
            )
        )
        entries.append(
            _entry(after, LogActionType.ROUND_STARTED, f"Round {result.new_round_number} begins")
        )

    action = LogActionType.TURN_ADVANCED if forward else LogActionType.TURN_REWOUND
    verb = "Turn passes to" if forward else "Turn rewinds to"
    entries.append(
        _entry(
            after,
            action,
            f"{verb} {acting.name}",
            actor=acting.id,
            details={
                "fromTurnIndex": before.current_turn_index,
                "fromRoundNumber": before.current_round_number,
            },
        )
    )
    return entries


def undo_entry(restored: CombatSession) -> CombatLogEntry:
    return _entry(
        restored,
        LogActionType.UNDO,
        f"Undo: back to round {restored.current_round_number}, turn {restored.current_turn_index + 1}",
    )


def redo_entry(restored: CombatSession) -> CombatLogEntry:
    return _entry(
        restored,
        LogActionType.REDO,
        f"Redo: forward to round {restored.current_round_number}, turn {restored.current_turn_index + 1}",
    )
