import logging
from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .models import CombatSessionRecord, CombatLogRecord
from .schemas import (
    CombatLogEntrySchema,
    CombatSessionSchema,
    DamageRequest,
    EffectAddRequest,
    EffectRemoveRequest,
    HealingRequest,
    ParticipantSchema,
    SessionCreateRequest,
    SessionUpdateRequest,
    StatusEffectSchema,
)
from ..config import settings
from ..core.enums import LogActionType, SessionStatus
from ..core.exceptions import (
    EffectNotFoundError,
    InvalidDamageAmountError,
    InvalidSessionStateError,
    InvalidTurnIndexError,
    ParticipantNotFoundError,
    PermissionDeniedError,
    SessionNotFoundError,
    ValidationError,
)
from ..engine import CombatLogEntry, CombatSession, Participant, duration_from_rounds, log
from ..engine import session as facade

logger = logging.getLogger("combat-tracker.combat")


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# -----------------------
# Loading and saving
# -----------------------

def get_session_record(db: Session, session_id: str) -> CombatSessionRecord:
    record = db.query(CombatSessionRecord).filter(CombatSessionRecord.id == session_id).first()
    if not record:
        raise SessionNotFoundError(session_id)
    return record


def check_owner(record: CombatSessionRecord, user_id: str) -> None:
    if record.owner_id != user_id:
        logger.warning(f"User {user_id} denied access to session {record.id}")
        raise PermissionDeniedError()


def to_snapshot(record: CombatSessionRecord) -> CombatSession:
    return CombatSession(
        id=record.id,
        owner_id=record.owner_id,
        participants=tuple(ParticipantSchema.model_validate(p).to_engine() for p in record.participants),
        current_turn_index=record.current_turn_index,
        current_round_number=record.current_round_number,
        status=record.status,
        lair_action_initiative=record.lair_action_initiative,
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
        org_id=record.org_id,
        encounter_id=record.encounter_id,
    )


def to_schema(record: CombatSessionRecord) -> CombatSessionSchema:
    return CombatSessionSchema.from_engine(to_snapshot(record), record.version)


def _write_snapshot(record: CombatSessionRecord, snapshot: CombatSession) -> None:
    record.participants = [
        ParticipantSchema.from_engine(p).model_dump(mode="json", by_alias=True) for p in snapshot.participants
    ]
    record.current_turn_index = snapshot.current_turn_index
    record.current_round_number = snapshot.current_round_number
    record.status = snapshot.status
    record.lair_action_initiative = snapshot.lair_action_initiative
    record.updated_at = snapshot.updated_at


def _log_record(session_id: str, entry: CombatLogEntry) -> CombatLogRecord:
    return CombatLogRecord(
        entry_id=entry.id,
        session_id=session_id,
        timestamp=entry.timestamp,
        round_number=entry.round_number,
        turn_index=entry.turn_index,
        action_type=entry.action_type,
        actor=entry.actor,
        target=entry.target,
        description=entry.description[:500],
        details=entry.details,
    )


def save_snapshot(
    db: Session,
    record: CombatSessionRecord,
    snapshot: CombatSession,
    entries: list[CombatLogEntry] | None = None,
) -> CombatSessionRecord:
    """Persist a snapshot produced by the engine, plus its log entries, in one commit."""
    _write_snapshot(record, snapshot)
    for entry in entries or []:
        db.add(_log_record(record.id, entry))
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent write rejected for session {record.id}")
        raise InvalidSessionStateError(
            "Combat session was modified by another request; reload and retry",
            details={"sessionId": record.id},
        )
    db.refresh(record)
    return record


def load_for_action(
    db: Session,
    session_id: str,
    user_id: str,
    expected_version: int | None = None,
    allow_paused: bool = True,
) -> tuple[CombatSessionRecord, CombatSession]:
    """Fetch a session that the caller owns and that still accepts actions."""
    record = get_session_record(db, session_id)
    check_owner(record, user_id)

    if record.status == SessionStatus.ENDED:
        raise InvalidSessionStateError(
            "Combat session has ended", details={"sessionId": session_id, "status": record.status.value}
        )
    if record.status == SessionStatus.PAUSED and not allow_paused:
        raise InvalidSessionStateError(
            "Combat session is paused", details={"sessionId": session_id, "status": record.status.value}
        )
    if expected_version is not None and expected_version != record.version:
        raise InvalidSessionStateError(
            "Combat session version is stale",
            details={"sessionId": session_id, "expectedVersion": expected_version, "version": record.version},
        )
    return record, to_snapshot(record)


# -----------------------
# Session lifecycle
# -----------------------

def create_session(db: Session, request: SessionCreateRequest, owner_id: str) -> CombatSessionRecord:
    """Start a session with participants in initiative order."""
    participants = [
        Participant(
            id=p.id or str(uuid4()),
            name=p.name,
            type=p.type,
            initiative_value=p.initiative_value,
            max_hp=p.max_hp,
            current_hp=p.current_hp if p.current_hp is not None else p.max_hp,
            temporary_hp=p.temporary_hp,
            ac_value=p.ac_value,
        )
        for p in request.participants
    ]
    ids = [p.id for p in participants]
    if len(set(ids)) != len(ids):
        raise ValidationError("Participant ids must be unique", details={"participantIds": ids})

    lair = request.lair_action_initiative
    snapshot = facade.start_session(
        participants,
        owner_id,
        org_id=request.org_id,
        encounter_id=request.encounter_id,
        lair_action_initiative=lair if lair is not None else settings.default_lair_action_initiative,
    )

    record = CombatSessionRecord(
        id=snapshot.id,
        owner_id=snapshot.owner_id,
        org_id=snapshot.org_id,
        encounter_id=snapshot.encounter_id,
        created_at=snapshot.created_at,
    )
    _write_snapshot(record, snapshot)
    db.add(record)

    order = ", ".join(f"{p.name} ({p.initiative_value})" for p in snapshot.participants)
    db.add(_log_record(snapshot.id, CombatLogEntry(
        round_number=1,
        turn_index=0,
        action_type=LogActionType.INITIATIVE_SET,
        description=f"Initiative order: {order}",
        details={"order": [p.id for p in snapshot.participants]},
        timestamp=snapshot.created_at,
    )))
    db.commit()
    db.refresh(record)

    logger.info(f"Combat session {record.id} started with {len(participants)} participants")
    return record


def get_session(db: Session, session_id: str, user_id: str) -> CombatSessionRecord:
    record = get_session_record(db, session_id)
    check_owner(record, user_id)
    return record


def update_session(db: Session, session_id: str, request: SessionUpdateRequest, user_id: str) -> CombatSessionRecord:
    """Patch status, turn pointer, round or lair initiative directly."""
    record = get_session_record(db, session_id)
    check_owner(record, user_id)
    if request.expected_version is not None and request.expected_version != record.version:
        raise InvalidSessionStateError(
            "Combat session version is stale",
            details={"sessionId": session_id, "expectedVersion": request.expected_version, "version": record.version},
        )
    if record.status == SessionStatus.ENDED:
        if request.status not in (None, SessionStatus.ENDED):
            raise InvalidSessionStateError(
                "An ended combat session cannot be reopened", details={"sessionId": session_id}
            )
        edits = (request.current_turn_index, request.current_round_number, request.lair_action_initiative)
        if any(value is not None for value in edits):
            raise InvalidSessionStateError(
                "An ended combat session cannot be modified",
                details={"sessionId": session_id, "status": record.status.value},
            )
        return record

    snapshot = to_snapshot(record)
    changes = {}
    if request.current_turn_index is not None:
        if not 0 <= request.current_turn_index < len(snapshot.participants):
            raise InvalidTurnIndexError(request.current_turn_index, len(snapshot.participants))
        changes["current_turn_index"] = request.current_turn_index
    if request.current_round_number is not None:
        changes["current_round_number"] = request.current_round_number
    if request.status is not None:
        changes["status"] = request.status
    if request.lair_action_initiative is not None:
        changes["lair_action_initiative"] = request.lair_action_initiative

    if not changes:
        return record

    updated = replace(snapshot, updated_at=datetime.now(timezone.utc), **changes)
    logger.info(f"Session {session_id} updated: {sorted(changes)}")
    return save_snapshot(db, record, updated)


def delete_session(db: Session, session_id: str, user_id: str) -> None:
    record = get_session_record(db, session_id)
    check_owner(record, user_id)
    db.delete(record)
    db.commit()
    logger.info(f"Combat session {session_id} deleted")


# -----------------------
# Combat actions
# -----------------------

def apply_damage(db: Session, session_id: str, request: DamageRequest, user_id: str) -> dict:
    if request.amount <= 0:
        raise InvalidDamageAmountError(request.amount)
    record, snapshot = load_for_action(db, session_id, user_id, request.expected_version)

    result = facade.apply_damage(snapshot, request.participant_id, request.amount, request.target_type)
    if result.participant is None:
        raise ParticipantNotFoundError(request.participant_id)

    if result.session is not snapshot:
        save_snapshot(db, record, result.session, [log.damage_entry(result)])
    logger.info(
        f"Session {session_id}: {result.participant.name} took {result.damage_applied} damage "
        f"({result.temp_hp_applied} temp, {result.hp_applied} HP)"
    )
    return {
        "participant": ParticipantSchema.from_engine(result.participant),
        "damage_applied": result.damage_applied,
        "temp_hp_applied": result.temp_hp_applied,
        "hp_applied": result.hp_applied,
    }


def apply_healing(db: Session, session_id: str, request: HealingRequest, user_id: str) -> dict:
    if request.amount <= 0:
        raise InvalidDamageAmountError(request.amount)
    record, snapshot = load_for_action(db, session_id, user_id, request.expected_version)

    result = facade.apply_healing(snapshot, request.participant_id, request.amount)
    if result.participant is None:
        raise ParticipantNotFoundError(request.participant_id)

    save_snapshot(db, record, result.session, [log.healing_entry(result)])
    logger.info(f"Session {session_id}: {result.participant.name} healed {result.healing_applied}")
    return {
        "participant": ParticipantSchema.from_engine(result.participant),
        "healing_applied": result.healing_applied,
        "new_hp": result.new_hp,
    }


def add_effect(db: Session, session_id: str, request: EffectAddRequest, user_id: str) -> dict:
    record, snapshot = load_for_action(db, session_id, user_id, request.expected_version)

    result = facade.add_effect(
        snapshot,
        request.participant_id,
        request.effect.name,
        duration_from_rounds(request.effect.duration_in_rounds),
        icon=request.effect.icon,
        description=request.effect.description,
    )
    if result.participant is None:
        raise ParticipantNotFoundError(request.participant_id)

    save_snapshot(db, record, result.session, [log.effect_applied_entry(result)])
    logger.info(f"Session {session_id}: {result.effect.name} applied to {result.participant.name}")
    return {
        "participant": ParticipantSchema.from_engine(result.participant),
        "effect": StatusEffectSchema.from_engine(result.effect),
    }


def remove_effect(db: Session, session_id: str, request: EffectRemoveRequest, user_id: str) -> dict:
    record, snapshot = load_for_action(db, session_id, user_id, request.expected_version)

    result = facade.remove_effect(snapshot, request.participant_id, request.effect_id)
    if result.participant is None:
        raise ParticipantNotFoundError(request.participant_id)
    if result.effect is None:
        logger.warning(f"Session {session_id}: effect {request.effect_id} not on {request.participant_id}")
        raise EffectNotFoundError(request.effect_id)

    save_snapshot(db, record, result.session, [log.effect_removed_entry(result)])
    logger.info(f"Session {session_id}: {result.effect.name} removed from {result.participant.name}")
    return {"participant": ParticipantSchema.from_engine(result.participant)}


def next_turn(db: Session, session_id: str, user_id: str, expected_version: int | None = None) -> dict:
    record, snapshot = load_for_action(db, session_id, user_id, expected_version, allow_paused=False)

    result = facade.next_turn(snapshot)
    record = save_snapshot(db, record, result.session, log.turn_entries(snapshot, result, forward=True))
    logger.info(f"Session {session_id}: round {result.new_round_number}, turn {result.new_turn_index}")
    return {
        "session": to_schema(record),
        "new_turn_index": result.new_turn_index,
        "new_round_number": result.new_round_number,
    }


def previous_turn(db: Session, session_id: str, user_id: str, expected_version: int | None = None) -> dict:
    record, snapshot = load_for_action(db, session_id, user_id, expected_version, allow_paused=False)

    result = facade.previous_turn(snapshot)
    record = save_snapshot(db, record, result.session, log.turn_entries(snapshot, result, forward=False))
    logger.info(f"Session {session_id}: rewound to round {result.new_round_number}, turn {result.new_turn_index}")
    return {
        "session": to_schema(record),
        "new_turn_index": result.new_turn_index,
        "new_round_number": result.new_round_number,
    }


# -----------------------
# Combat log
# -----------------------

def get_log(db: Session, session_id: str, user_id: str, limit: int, offset: int) -> dict:
    """Newest entries first."""
    record = get_session_record(db, session_id)
    check_owner(record, user_id)

    query = db.query(CombatLogRecord).filter(CombatLogRecord.session_id == session_id)
    total = query.count()
    rows = query.order_by(CombatLogRecord.id.desc()).offset(offset).limit(limit).all()
    entries = [
        CombatLogEntrySchema(
            id=row.entry_id,
            timestamp=_as_utc(row.timestamp),
            round_number=row.round_number,
            turn_index=row.turn_index,
            action_type=row.action_type,
            actor=row.actor,
            target=row.target,
            details=row.details or {},
            description=row.description,
        )
        for row in rows
    ]
    return {"entries": entries, "total": total, "limit": limit, "offset": offset}
