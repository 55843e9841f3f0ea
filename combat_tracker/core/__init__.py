from .enums import (
    ParticipantType,
    SessionStatus,
    DamageTarget,
    LogActionType,
    ErrorCode,
)
from .exceptions import (
    GameException,
    NotFoundError,
    SessionNotFoundError,
    ParticipantNotFoundError,
    EffectNotFoundError,
    InvalidSessionStateError,
    InvalidTurnIndexError,
    InvalidDamageAmountError,
    PermissionDeniedError,
    ValidationError,
)

__all__ = [
    "ParticipantType",
    "SessionStatus",
    "DamageTarget",
    "LogActionType",
    "ErrorCode",
    "GameException",
    "NotFoundError",
    "SessionNotFoundError",
    "ParticipantNotFoundError",
    "EffectNotFoundError",
    "InvalidSessionStateError",
    "InvalidTurnIndexError",
    "InvalidDamageAmountError",
    "PermissionDeniedError",
    "ValidationError",
]
