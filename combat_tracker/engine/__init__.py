from .state import (
    CombatSession,
    Participant,
    StatusEffect,
    Finite,
    Permanent,
    PERMANENT,
    Duration,
    duration_from_rounds,
    duration_to_rounds,
    remaining_rounds,
    is_unconscious,
    hp_percentage,
    current_participant,
    find_participant,
)
from .initiative import sort_by_initiative
from .hp import apply_damage, apply_healing, resolve_damage, resolve_healing
from .effects import add_effect, remove_effect, find_effect, decrement_durations
from .turns import advance_turn, rewind_turn
from .history import SessionHistory
from .log import CombatLogEntry

__all__ = [
    "CombatSession",
    "Participant",
    "StatusEffect",
    "Finite",
    "Permanent",
    "PERMANENT",
    "Duration",
    "duration_from_rounds",
    "duration_to_rounds",
    "remaining_rounds",
    "is_unconscious",
    "hp_percentage",
    "current_participant",
    "find_participant",
    "sort_by_initiative",
    "apply_damage",
    "apply_healing",
    "resolve_damage",
    "resolve_healing",
    "add_effect",
    "remove_effect",
    "find_effect",
    "decrement_durations",
    "advance_turn",
    "rewind_turn",
    "SessionHistory",
    "CombatLogEntry",
]
