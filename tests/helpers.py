from combat_tracker.core.enums import ParticipantType
from combat_tracker.engine import CombatSession, Participant


def make_participant(
    id: str = "p1",
    initiative: int = 10,
    max_hp: int = 20,
    current_hp: int | None = None,
    temporary_hp: int = 0,
    effects=(),
    type: ParticipantType = ParticipantType.MONSTER,
) -> Participant:
    return Participant(
        id=id,
        name=f"Creature {id}",
        type=type,
        initiative_value=initiative,
        max_hp=max_hp,
        current_hp=max_hp if current_hp is None else current_hp,
        temporary_hp=temporary_hp,
        status_effects=tuple(effects),
    )


def make_session(*participants: Participant, turn: int = 0, round: int = 1) -> CombatSession:
    if not participants:
        participants = (make_participant("p1", 15), make_participant("p2", 10))
    return CombatSession(
        id="session-1",
        owner_id="user_123",
        participants=participants,
        current_turn_index=turn,
        current_round_number=round,
    )
