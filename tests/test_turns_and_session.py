from datetime import datetime, timezone

import pytest

from combat_tracker.core.enums import DamageTarget, LogActionType, SessionStatus
from combat_tracker.engine import (
    CombatSession,
    Finite,
    PERMANENT,
    SessionHistory,
    StatusEffect,
    advance_turn,
    current_participant,
    rewind_turn,
)
from combat_tracker.engine import log
from combat_tracker.engine import session as facade

from helpers import make_participant, make_session

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestAdvanceTurn:
    def test_round_wraps_and_effects_decay(self):
        poisoned = StatusEffect(id="e", name="Poisoned", applied_at_round=1, duration=Finite(3))
        session = make_session(make_participant("a", 15, effects=[poisoned]), make_participant("b", 10))

        session = advance_turn(session)
        assert (session.current_turn_index, session.current_round_number) == (1, 1)
        assert session.participants[0].status_effects[0].duration == Finite(3)

        session = advance_turn(session)
        assert (session.current_turn_index, session.current_round_number) == (0, 2)
        assert session.participants[0].status_effects[0].duration == Finite(2)

    def test_full_cycle_returns_to_start_one_round_later(self):
        session = make_session(*(make_participant(str(i), 20 - i) for i in range(5)))
        start = session
        for _ in range(len(session.participants)):
            session = advance_turn(session)
        assert session.current_turn_index == start.current_turn_index
        assert session.current_round_number == start.current_round_number + 1

    def test_mid_round_leaves_effects_alone(self):
        effect = StatusEffect(id="e", name="Stunned", applied_at_round=1, duration=Finite(1))
        session = make_session(make_participant("a", effects=[effect]), make_participant("b"), make_participant("c"))
        advanced = advance_turn(session)
        assert advanced.participants == session.participants

    def test_single_participant_every_advance_is_a_new_round(self):
        session = make_session(make_participant("solo"))
        session = advance_turn(advance_turn(session))
        assert (session.current_turn_index, session.current_round_number) == (0, 3)

    def test_updated_at_refreshed(self):
        session = make_session()
        assert advance_turn(session, NOW).updated_at == NOW

    def test_input_snapshot_untouched(self):
        session = make_session()
        advance_turn(session)
        assert session.current_turn_index == 0


class TestRewindTurn:
    def test_rewind_within_round(self):
        session = make_session(turn=1, round=3)
        rewound = rewind_turn(session, NOW)
        assert (rewound.current_turn_index, rewound.current_round_number) == (0, 3)
        assert rewound.updated_at == NOW

    def test_rewind_wraps_to_previous_round(self):
        session = make_session(turn=0, round=3)
        rewound = rewind_turn(session)
        assert (rewound.current_turn_index, rewound.current_round_number) == (1, 2)

    def test_round_never_below_one(self):
        session = make_session(turn=0, round=1)
        rewound = rewind_turn(session)
        assert rewound.current_turn_index == 1
        assert rewound.current_round_number == 1

    def test_rewind_does_not_restore_decayed_effects(self):
        effect = StatusEffect(id="e", name="Poisoned", applied_at_round=1, duration=Finite(1))
        session = make_session(make_participant("a", effects=[effect]), make_participant("b"), turn=1)

        advanced = advance_turn(session)
        assert advanced.participants[0].status_effects == ()

        rewound = rewind_turn(advanced)
        assert (rewound.current_turn_index, rewound.current_round_number) == (1, 1)
        assert len(rewound.participants) == 2
        assert rewound.participants[0].status_effects == ()


class TestSessionInvariants:
    def test_rejects_empty_participants(self):
        with pytest.raises(ValueError):
            CombatSession(id="s", owner_id="u", participants=())

    def test_rejects_out_of_range_turn(self):
        with pytest.raises(ValueError):
            make_session(turn=2)

    def test_random_walk_keeps_invariants(self):
        effect = StatusEffect(id="e", name="Hexed", applied_at_round=1, duration=Finite(4))
        session = make_session(make_participant("a", effects=[effect]), make_participant("b"), make_participant("c"))
        moves = [advance_turn, advance_turn, rewind_turn] * 10 + [rewind_turn] * 12
        for move in moves:
            session = move(session)
            assert 0 <= session.current_turn_index < len(session.participants)
            assert session.current_round_number >= 1
            for participant in session.participants:
                assert all(e.duration.rounds > 0 for e in participant.status_effects)


class TestFacade:
    def test_start_session_orders_by_initiative(self):
        session = facade.start_session(
            [make_participant("low", 5), make_participant("high", 19), make_participant("tie", 5)],
            "user_1",
            session_id="s-1",
            now=NOW,
        )
        assert [p.id for p in session.participants] == ["high", "low", "tie"]
        assert (session.current_turn_index, session.current_round_number) == (0, 1)
        assert session.status == SessionStatus.ACTIVE
        assert session.created_at == session.updated_at == NOW

    def test_damage_updates_only_target(self):
        session = make_session(make_participant("a", max_hp=50, temporary_hp=15), make_participant("b"))
        result = facade.apply_damage(session, "a", 20, now=NOW)

        assert result.participant.current_hp == 45
        assert (result.damage_applied, result.temp_hp_applied, result.hp_applied) == (20, 15, 5)
        assert result.session.participants[0] == result.participant
        assert result.session.participants[1] is session.participants[1]
        assert result.session.updated_at == NOW

    def test_damage_to_temporary_only(self):
        session = make_session(make_participant("a", max_hp=50, temporary_hp=3))
        result = facade.apply_damage(session, "a", 10, DamageTarget.TEMPORARY_HP)
        assert result.participant.current_hp == 50
        assert result.hp_applied == 0

    def test_temporary_only_damage_without_buffer_leaves_snapshot_unchanged(self):
        session = make_session()
        result = facade.apply_damage(session, "p1", 10, DamageTarget.TEMPORARY_HP, now=NOW)
        assert result.session is session
        assert result.damage_applied == 0

    def test_zero_damage_leaves_snapshot_unchanged(self):
        session = make_session()
        result = facade.apply_damage(session, "p1", 0)
        assert result.session is session

    def test_unknown_participant_is_a_noop(self):
        session = make_session()
        assert facade.apply_damage(session, "ghost", 5).participant is None
        assert facade.apply_healing(session, "ghost", 5).session is session
        assert facade.add_effect(session, "ghost", "Prone", PERMANENT).participant is None

    def test_healing(self):
        session = make_session(make_participant("a", max_hp=30, current_hp=1))
        result = facade.apply_healing(session, "a", 50)
        assert result.new_hp == 30
        assert result.healing_applied == 29

    def test_add_effect_uses_current_round(self):
        session = make_session(round=4)
        result = facade.add_effect(session, "p2", "Frightened", Finite(2), id_factory=lambda: "fx")
        assert result.effect.id == "fx"
        assert result.effect.applied_at_round == 4
        assert result.session.participants[1].status_effects == (result.effect,)

    def test_remove_effect(self):
        session = make_session()
        added = facade.add_effect(session, "p1", "Prone", PERMANENT, id_factory=lambda: "fx")
        removed = facade.remove_effect(added.session, "p1", "fx")
        assert removed.effect == added.effect
        assert removed.participant.status_effects == ()

        missing = facade.remove_effect(added.session, "p1", "nope")
        assert missing.effect is None
        assert missing.session is added.session

    def test_turn_results(self):
        session = make_session(turn=1)
        forward = facade.next_turn(session)
        assert (forward.new_turn_index, forward.new_round_number) == (0, 2)
        back = facade.previous_turn(forward.session)
        assert (back.new_turn_index, back.new_round_number) == (1, 1)


class TestSessionHistory:
    def test_undo_redo(self):
        history = SessionHistory()
        first = make_session()
        second = advance_turn(first)
        history.push(first)
        history.push(second)

        assert history.undo() is first
        assert (history.undo_count, history.redo_count) == (1, 1)
        assert history.redo() is second
        assert (history.undo_count, history.redo_count) == (2, 0)

    def test_boundaries(self):
        history = SessionHistory()
        assert history.undo() is None

        only = make_session()
        history.push(only)
        assert history.redo() is None
        assert history.undo() is only
        assert (history.undo_count, history.redo_count) == (0, 1)
        assert history.current is None
        assert history.undo() is None

        assert history.redo() is only
        assert history.redo() is None
        assert history.current is only

    def test_undo_single_snapshot_then_push_clears_redo(self):
        history = SessionHistory()
        history.push(make_session())
        history.undo()
        assert history.redo_count == 1

        history.push(make_session(round=5))
        assert history.redo_count == 0

    def test_push_clears_redo(self):
        history = SessionHistory()
        history.push(make_session())
        history.push(make_session(round=2))
        history.undo()
        history.push(make_session(round=5))
        assert history.redo_count == 0
        assert history.current.current_round_number == 5

    def test_max_depth(self):
        history = SessionHistory(max_depth=50)
        for round_number in range(1, 61):
            history.push(make_session(round=round_number))
        assert history.undo_count == 50
        history.clear()
        assert (history.undo_count, history.redo_count) == (0, 0)


class TestCombatLog:
    def test_wrap_logs_round_boundary(self):
        session = make_session(turn=1, round=2)
        result = facade.next_turn(session, NOW)
        entries = log.turn_entries(session, result, forward=True)

        assert [e.action_type for e in entries] == [
            LogActionType.ROUND_ENDED,
            LogActionType.ROUND_STARTED,
            LogActionType.TURN_ADVANCED,
        ]
        assert entries[0].round_number == 2
        assert entries[1].round_number == 3
        assert entries[2].actor == current_participant(result.session).id

    def test_rewind_logs_single_entry(self):
        session = make_session(turn=0, round=2)
        result = facade.previous_turn(session)
        entries = log.turn_entries(session, result, forward=False)
        assert [e.action_type for e in entries] == [LogActionType.TURN_REWOUND]

    def test_damage_entry_details(self):
        session = make_session(make_participant("a", temporary_hp=2), make_participant("b"))
        entry = log.damage_entry(facade.apply_damage(session, "b", 6))
        assert entry.action_type == LogActionType.DAMAGE
        assert entry.actor == "a"
        assert entry.target == "b"
        assert entry.details["hpApplied"] == 6

    def test_effect_entry_mentions_duration(self):
        session = make_session()
        added = facade.add_effect(session, "p1", "Blessed", Finite(1))
        assert "for 1 round" in log.effect_applied_entry(added).description
        permanent = facade.add_effect(session, "p1", "Cursed", PERMANENT)
        assert "permanently" in log.effect_applied_entry(permanent).description

    def test_history_steps_are_logged(self):
        history = SessionHistory()
        first = make_session(turn=1, round=2)
        history.push(first)
        history.push(facade.next_turn(first).session)

        undone = log.undo_entry(history.undo())
        assert undone.action_type == LogActionType.UNDO
        assert (undone.round_number, undone.turn_index) == (2, 1)
        assert "round 2, turn 2" in undone.description

        redone = log.redo_entry(history.redo())
        assert redone.action_type == LogActionType.REDO
        assert redone.round_number == 3
