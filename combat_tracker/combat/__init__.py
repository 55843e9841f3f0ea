from .router import router
from .models import CombatSessionRecord, CombatLogRecord
from .schemas import (
    CombatSessionSchema,
    ParticipantSchema,
    StatusEffectSchema,
    SessionCreateRequest,
    DamageResponse,
    HealingResponse,
    EffectResponse,
    TurnResponse,
)

__all__ = [
    "router",
    "CombatSessionRecord",
    "CombatLogRecord",
    "CombatSessionSchema",
    "ParticipantSchema",
    "StatusEffectSchema",
    "SessionCreateRequest",
    "DamageResponse",
    "HealingResponse",
    "EffectResponse",
    "TurnResponse",
]
