from enum import Enum


class ParticipantType(str, Enum):
    MONSTER = "monster"
    CHARACTER = "character"  # party member
    NPC = "npc"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class DamageTarget(str, Enum):
    CURRENT_HP = "currentHP"  # temporary HP absorbs first, remainder hits current HP
    TEMPORARY_HP = "temporaryHP"  # only the temporary pool is depleted


class LogActionType(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    EFFECT_APPLIED = "effect_applied"
    EFFECT_REMOVED = "effect_removed"
    INITIATIVE_SET = "initiative_set"
    TURN_ADVANCED = "turn_advanced"
    TURN_REWOUND = "turn_rewound"
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"
    UNDO = "undo"
    REDO = "redo"


class ErrorCode(str, Enum):
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    EFFECT_NOT_FOUND = "EFFECT_NOT_FOUND"
    INVALID_SESSION_STATE = "INVALID_SESSION_STATE"
    INVALID_TURN_INDEX = "INVALID_TURN_INDEX"
    INVALID_DAMAGE_AMOUNT = "INVALID_DAMAGE_AMOUNT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
