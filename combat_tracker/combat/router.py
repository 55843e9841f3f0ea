from fastapi import APIRouter, Depends, Header, Query, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..core.exceptions import PermissionDeniedError
from ..database import get_db
from . import service
from .schemas import (
    ApiResponse,
    CombatLogPage,
    CombatSessionSchema,
    DamageRequest,
    DamageResponse,
    EffectAddRequest,
    EffectRemoveRequest,
    EffectResponse,
    HealingRequest,
    HealingResponse,
    SessionCreateRequest,
    SessionUpdateRequest,
    TurnRequest,
    TurnResponse,
)

router = APIRouter(prefix="/combat-sessions", tags=["combat"])


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, resolved upstream by the auth proxy."""
    if not x_user_id:
        raise PermissionDeniedError("Missing X-User-Id header")
    return x_user_id


@router.post("", response_model=ApiResponse[CombatSessionSchema], status_code=201)
def create_session(
    request: SessionCreateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Create a combat session; participants are ordered by initiative."""
    record = service.create_session(db, request, user_id)
    return {"data": service.to_schema(record)}


@router.get("/{session_id}", response_model=ApiResponse[CombatSessionSchema])
def get_session(session_id: str, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """Get the current snapshot of a combat session."""
    record = service.get_session(db, session_id, user_id)
    return {"data": service.to_schema(record)}


@router.patch("/{session_id}", response_model=ApiResponse[CombatSessionSchema])
def update_session(
    session_id: str,
    request: SessionUpdateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Update status, turn index, round number or lair initiative."""
    record = service.update_session(db, session_id, request, user_id)
    return {"data": service.to_schema(record)}


@router.delete("/{session_id}", status_code=204)
def delete_session(session_id: str, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    service.delete_session(db, session_id, user_id)
    return Response(status_code=204)


@router.post("/{session_id}/actions/damage", response_model=ApiResponse[DamageResponse])
def apply_damage(
    session_id: str,
    request: DamageRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Apply damage; temporary HP absorbs first."""
    return {"data": service.apply_damage(db, session_id, request, user_id)}


@router.post("/{session_id}/actions/heal", response_model=ApiResponse[HealingResponse])
def apply_healing(
    session_id: str,
    request: HealingRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Heal up to max HP."""
    return {"data": service.apply_healing(db, session_id, request, user_id)}


@router.post("/{session_id}/actions/effect-add", response_model=ApiResponse[EffectResponse])
def add_effect(
    session_id: str,
    request: EffectAddRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Apply a status effect starting in the current round."""
    return {"data": service.add_effect(db, session_id, request, user_id)}


@router.post("/{session_id}/actions/effect-remove", response_model=ApiResponse[EffectResponse])
def remove_effect(
    session_id: str,
    request: EffectRemoveRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return {"data": service.remove_effect(db, session_id, request, user_id)}


@router.post("/{session_id}/actions/next-turn", response_model=ApiResponse[TurnResponse])
def next_turn(
    session_id: str,
    request: TurnRequest | None = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Advance to the next participant; wrapping starts a new round and decays effects."""
    expected = request.expected_version if request else None
    return {"data": service.next_turn(db, session_id, user_id, expected)}


@router.post("/{session_id}/actions/previous-turn", response_model=ApiResponse[TurnResponse])
def previous_turn(
    session_id: str,
    request: TurnRequest | None = None,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Step back one turn. Effect durations are not restored."""
    expected = request.expected_version if request else None
    return {"data": service.previous_turn(db, session_id, user_id, expected)}


@router.get("/{session_id}/log", response_model=ApiResponse[CombatLogPage])
def get_log(
    session_id: str,
    limit: int = Query(settings.default_log_limit, ge=1, le=settings.max_log_limit),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Combat log, newest first."""
    return {"data": service.get_log(db, session_id, user_id, limit, offset)}
