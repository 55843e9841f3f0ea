from dataclasses import dataclass, replace

from ..core.enums import DamageTarget
from .state import Participant


@dataclass(frozen=True)
class DamageOutcome:
    participant: Participant
    damage_applied: int
    temp_hp_applied: int
    hp_applied: int


@dataclass(frozen=True)
class HealingOutcome:
    participant: Participant
    healing_applied: int
    new_hp: int


def resolve_damage(
    participant: Participant,
    amount: int,
    target: DamageTarget = DamageTarget.CURRENT_HP,
) -> DamageOutcome:
    """Apply damage and report how it split between temporary and current HP.

    Temporary HP absorbs first. Current HP has no floor: overkill drives it
    negative. With ``DamageTarget.TEMPORARY_HP`` only the temporary pool is
    touched and anything beyond it is discarded.
    """
    if amount <= 0:
        return DamageOutcome(participant, 0, 0, 0)

    absorbed = min(amount, participant.temporary_hp)
    remaining = amount - absorbed
    if target == DamageTarget.TEMPORARY_HP:
        remaining = 0
        if absorbed == 0:
            return DamageOutcome(participant, 0, 0, 0)

    damaged = replace(
        participant,
        temporary_hp=participant.temporary_hp - absorbed,
        current_hp=participant.current_hp - remaining,
    )
    return DamageOutcome(
        participant=damaged,
        damage_applied=absorbed + remaining,
        temp_hp_applied=absorbed,
        hp_applied=remaining,
    )


def resolve_healing(participant: Participant, amount: int) -> HealingOutcome:
    """Heal current HP up to max HP. Temporary HP is a separate pool and is left alone."""
    if amount <= 0:
        return HealingOutcome(participant, 0, participant.current_hp)

    new_hp = min(participant.max_hp, participant.current_hp + amount)
    healed = replace(participant, current_hp=new_hp)
    return HealingOutcome(
        participant=healed,
        healing_applied=max(0, new_hp - participant.current_hp),
        new_hp=new_hp,
    )


def apply_damage(participant: Participant, amount: int) -> Participant:
    return resolve_damage(participant, amount).participant


def apply_healing(participant: Participant, amount: int) -> Participant:
    return resolve_healing(participant, amount).participant
