from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Any, Generic, TypeVar

from ..core.enums import ParticipantType, SessionStatus, DamageTarget, LogActionType
from ..engine import (
    CombatSession,
    Participant,
    StatusEffect,
    duration_from_rounds,
    duration_to_rounds,
)

T = TypeVar("T")


# Snapshot shapes (camelCase on the wire)

class StatusEffectSchema(BaseModel):
    id: str
    name: str = Field(..., min_length=1, max_length=100)
    duration_in_rounds: int | None = Field(default=None, gt=0, alias="durationInRounds")
    applied_at_round: int = Field(..., ge=1, alias="appliedAtRound")
    icon: str | None = None
    description: str | None = None

    class Config:
        populate_by_name = True

    @classmethod
    def from_engine(cls, effect: StatusEffect) -> "StatusEffectSchema":
        return cls(
            id=effect.id,
            name=effect.name,
            duration_in_rounds=duration_to_rounds(effect.duration),
            applied_at_round=effect.applied_at_round,
            icon=effect.icon,
            description=effect.description,
        )

    def to_engine(self) -> StatusEffect:
        return StatusEffect(
            id=self.id,
            name=self.name,
            applied_at_round=self.applied_at_round,
            duration=duration_from_rounds(self.duration_in_rounds),
            icon=self.icon,
            description=self.description,
        )


class ParticipantSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    type: ParticipantType
    initiative_value: int = Field(..., alias="initiativeValue")
    max_hp: int = Field(..., ge=1, alias="maxHP")
    current_hp: int = Field(..., alias="currentHP")
    temporary_hp: int = Field(default=0, ge=0, alias="temporaryHP")
    ac_value: int | None = Field(default=None, ge=0, le=30, alias="acValue")
    status_effects: list[StatusEffectSchema] = Field(default_factory=list, alias="statusEffects")

    class Config:
        populate_by_name = True

    @classmethod
    def from_engine(cls, participant: Participant) -> "ParticipantSchema":
        return cls(
            id=participant.id,
            name=participant.name,
            type=participant.type,
            initiative_value=participant.initiative_value,
            max_hp=participant.max_hp,
            current_hp=participant.current_hp,
            temporary_hp=participant.temporary_hp,
            ac_value=participant.ac_value,
            status_effects=[StatusEffectSchema.from_engine(e) for e in participant.status_effects],
        )

    def to_engine(self) -> Participant:
        return Participant(
            id=self.id,
            name=self.name,
            type=self.type,
            initiative_value=self.initiative_value,
            max_hp=self.max_hp,
            current_hp=self.current_hp,
            temporary_hp=self.temporary_hp,
            ac_value=self.ac_value,
            status_effects=tuple(e.to_engine() for e in self.status_effects),
        )


class CombatSessionSchema(BaseModel):
    id: str
    status: SessionStatus
    participants: list[ParticipantSchema]
    current_turn_index: int = Field(..., alias="currentTurnIndex")
    current_round_number: int = Field(..., alias="currentRoundNumber")
    lair_action_initiative: int | None = Field(default=None, alias="lairActionInitiative")
    encounter_id: str | None = Field(default=None, alias="encounterId")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    owner_id: str
    org_id: str | None = None
    version: int

    class Config:
        populate_by_name = True

    @classmethod
    def from_engine(cls, session: CombatSession, version: int) -> "CombatSessionSchema":
        return cls(
            id=session.id,
            status=session.status,
            participants=[ParticipantSchema.from_engine(p) for p in session.participants],
            current_turn_index=session.current_turn_index,
            current_round_number=session.current_round_number,
            lair_action_initiative=session.lair_action_initiative,
            encounter_id=session.encounter_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            owner_id=session.owner_id,
            org_id=session.org_id,
            version=version,
        )


# Requests

class ParticipantCreate(BaseModel):
    id: str | None = Field(default=None, min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    type: ParticipantType = ParticipantType.MONSTER
    initiative_value: int = Field(..., alias="initiativeValue")
    max_hp: int = Field(..., ge=1, alias="maxHP")
    current_hp: int | None = Field(default=None, alias="currentHP")  # defaults to maxHP
    temporary_hp: int = Field(default=0, ge=0, alias="temporaryHP")
    ac_value: int | None = Field(default=None, ge=0, le=30, alias="acValue")

    class Config:
        populate_by_name = True


class SessionCreateRequest(BaseModel):
    participants: list[ParticipantCreate] = Field(..., min_length=1)
    encounter_id: str | None = Field(default=None, alias="encounterId")
    org_id: str | None = None
    lair_action_initiative: int | None = Field(default=None, ge=1, le=30, alias="lairActionInitiative")

    class Config:
        populate_by_name = True


class VersionedRequest(BaseModel):
    # Optimistic concurrency: reject the write if the stored version moved on
    expected_version: int | None = Field(default=None, alias="expectedVersion")

    class Config:
        populate_by_name = True


class SessionUpdateRequest(VersionedRequest):
    status: SessionStatus | None = None
    current_turn_index: int | None = Field(default=None, alias="currentTurnIndex")
    current_round_number: int | None = Field(default=None, ge=1, alias="currentRoundNumber")
    lair_action_initiative: int | None = Field(default=None, ge=1, le=30, alias="lairActionInitiative")


class DamageRequest(VersionedRequest):
    participant_id: str = Field(..., alias="participantId")
    amount: int
    target_type: DamageTarget = Field(default=DamageTarget.CURRENT_HP, alias="targetType")


class HealingRequest(VersionedRequest):
    participant_id: str = Field(..., alias="participantId")
    amount: int


class EffectInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    duration_in_rounds: int | None = Field(default=None, gt=0, alias="durationInRounds")
    icon: str | None = None
    description: str | None = None

    class Config:
        populate_by_name = True


class EffectAddRequest(VersionedRequest):
    participant_id: str = Field(..., alias="participantId")
    effect: EffectInput


class EffectRemoveRequest(VersionedRequest):
    participant_id: str = Field(..., alias="participantId")
    effect_id: str = Field(..., alias="effectId")


class TurnRequest(VersionedRequest):
    pass


# Action results

class DamageResponse(BaseModel):
    participant: ParticipantSchema
    damage_applied: int = Field(..., alias="damageApplied")
    temp_hp_applied: int = Field(..., alias="tempHPApplied")
    hp_applied: int = Field(..., alias="hpApplied")

    class Config:
        populate_by_name = True


class HealingResponse(BaseModel):
    participant: ParticipantSchema
    healing_applied: int = Field(..., alias="healingApplied")
    new_hp: int = Field(..., alias="newHP")

    class Config:
        populate_by_name = True


class EffectResponse(BaseModel):
    participant: ParticipantSchema
    effect: StatusEffectSchema | None = None


class TurnResponse(BaseModel):
    session: CombatSessionSchema
    new_turn_index: int = Field(..., alias="newTurnIndex")
    new_round_number: int = Field(..., alias="newRoundNumber")

    class Config:
        populate_by_name = True


class CombatLogEntrySchema(BaseModel):
    id: str
    timestamp: datetime
    round_number: int = Field(..., alias="roundNumber")
    turn_index: int = Field(..., alias="turnIndex")
    action_type: LogActionType = Field(..., alias="actionType")
    actor: str | None = None
    target: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    description: str

    class Config:
        populate_by_name = True


class CombatLogPage(BaseModel):
    entries: list[CombatLogEntrySchema]
    total: int
    limit: int
    offset: int


# Envelopes

class ResponseMeta(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ApiResponse(BaseModel, Generic[T]):
    data: T
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


class ApiError(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ApiErrorResponse(BaseModel):
    error: ApiError
