from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship

from ..database import Base
from ..core.enums import SessionStatus, LogActionType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CombatSessionRecord(Base):
    __tablename__ = "combat_sessions"

    id = Column(String(36), primary_key=True, index=True)
    owner_id = Column(String(100), nullable=False, index=True)
    org_id = Column(String(100), nullable=True)
    encounter_id = Column(String(100), nullable=True)
    status = Column(Enum(SessionStatus), default=SessionStatus.ACTIVE, nullable=False)

    # Turn tracking
    current_turn_index = Column(Integer, default=0, nullable=False)
    current_round_number = Column(Integer, default=1, nullable=False)
    lair_action_initiative = Column(Integer, nullable=True)

    # Participant snapshot in wire format, including status effects
    participants = Column(JSON, nullable=False, default=list)

    # Bumped on every write; a stale write raises StaleDataError
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow)

    log_entries = relationship("CombatLogRecord", back_populates="session", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


class CombatLogRecord(Base):
    __tablename__ = "combat_log_entries"

    id = Column(Integer, primary_key=True, index=True)  # insertion order
    entry_id = Column(String(36), unique=True, nullable=False)
    session_id = Column(String(36), ForeignKey("combat_sessions.id"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)
    round_number = Column(Integer, nullable=False)
    turn_index = Column(Integer, nullable=False)
    action_type = Column(Enum(LogActionType), nullable=False)

    # Participant ids
    actor = Column(String(100), nullable=True)
    target = Column(String(100), nullable=True)

    description = Column(String(500), nullable=False)
    details = Column(JSON, default=dict)

    session = relationship("CombatSessionRecord", back_populates="log_entries")
