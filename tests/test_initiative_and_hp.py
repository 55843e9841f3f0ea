import pytest

from combat_tracker.core.enums import DamageTarget
from combat_tracker.engine import (
    apply_damage,
    apply_healing,
    hp_percentage,
    is_unconscious,
    resolve_damage,
    resolve_healing,
    sort_by_initiative,
)

from helpers import make_participant


class TestInitiativeOrder:
    def test_already_descending_is_unchanged(self):
        first = make_participant("a", initiative=15)
        second = make_participant("b", initiative=10)

        ordered = sort_by_initiative([first, second])
        assert [p.initiative_value for p in ordered] == [15, 10]
        assert [p.id for p in ordered] == ["a", "b"]

    def test_highest_initiative_first(self):
        participants = [
            make_participant("slow", initiative=3),
            make_participant("fast", initiative=21),
            make_participant("mid", initiative=12),
        ]
        assert [p.id for p in sort_by_initiative(participants)] == ["fast", "mid", "slow"]

    def test_ties_keep_input_order(self):
        participants = [
            make_participant("x", initiative=10),
            make_participant("y", initiative=14),
            make_participant("z", initiative=10),
            make_participant("w", initiative=10),
        ]
        ordered = sort_by_initiative(participants)
        assert [p.id for p in ordered] == ["y", "x", "z", "w"]
        # Repeated runs give the same order
        assert sort_by_initiative(participants) == ordered

    def test_does_not_mutate_input(self):
        participants = [make_participant("a", initiative=1), make_participant("b", initiative=20)]
        sort_by_initiative(participants)
        assert [p.id for p in participants] == ["a", "b"]

    def test_empty_input(self):
        assert sort_by_initiative([]) == ()


class TestDamage:
    def test_temporary_hp_absorbs_first(self):
        participant = make_participant(max_hp=50, current_hp=50, temporary_hp=15)
        damaged = apply_damage(participant, 20)
        assert damaged.temporary_hp == 0
        assert damaged.current_hp == 45
        assert damaged.max_hp == 50

    def test_damage_fully_absorbed_by_temporary_hp(self):
        participant = make_participant(max_hp=30, current_hp=30, temporary_hp=10)
        damaged = apply_damage(participant, 4)
        assert damaged.temporary_hp == 6
        assert damaged.current_hp == 30

    def test_overkill_goes_negative(self):
        participant = make_participant(max_hp=50, current_hp=5)
        damaged = apply_damage(participant, 10)
        assert damaged.current_hp == -5
        assert is_unconscious(damaged)

    @pytest.mark.parametrize("amount", [0, -3])
    def test_non_positive_amount_is_identity(self, amount):
        participant = make_participant(current_hp=12, temporary_hp=4)
        assert apply_damage(participant, amount) is participant

    def test_breakdown(self):
        participant = make_participant(max_hp=40, current_hp=40, temporary_hp=5)
        outcome = resolve_damage(participant, 12)
        assert outcome.damage_applied == 12
        assert outcome.temp_hp_applied == 5
        assert outcome.hp_applied == 7
        assert outcome.participant.current_hp == 33

    def test_temporary_target_only_depletes_buffer(self):
        participant = make_participant(max_hp=40, current_hp=40, temporary_hp=5)
        outcome = resolve_damage(participant, 12, DamageTarget.TEMPORARY_HP)
        assert outcome.participant.temporary_hp == 0
        assert outcome.participant.current_hp == 40
        assert outcome.damage_applied == 5
        assert outcome.hp_applied == 0

    def test_temporary_target_without_buffer_is_a_noop(self):
        participant = make_participant(max_hp=40, current_hp=40)
        outcome = resolve_damage(participant, 12, DamageTarget.TEMPORARY_HP)
        assert outcome.participant is participant
        assert outcome.damage_applied == 0

    def test_original_participant_untouched(self):
        participant = make_participant(current_hp=20, temporary_hp=3)
        apply_damage(participant, 10)
        assert participant.current_hp == 20
        assert participant.temporary_hp == 3


class TestHealing:
    def test_heal_capped_at_max(self):
        participant = make_participant(max_hp=50, current_hp=45)
        healed = apply_healing(participant, 20)
        assert healed.current_hp == 50

    def test_heal_from_negative(self):
        participant = make_participant(max_hp=50, current_hp=-5)
        outcome = resolve_healing(participant, 10)
        assert outcome.new_hp == 5
        assert outcome.healing_applied == 10
        assert not is_unconscious(outcome.participant)

    def test_healing_ignores_temporary_hp(self):
        participant = make_participant(max_hp=50, current_hp=10, temporary_hp=0)
        healed = apply_healing(participant, 5)
        assert healed.temporary_hp == 0

        buffered = make_participant(max_hp=50, current_hp=10, temporary_hp=7)
        assert apply_healing(buffered, 100).temporary_hp == 7

    def test_healing_applied_reports_actual_gain(self):
        participant = make_participant(max_hp=20, current_hp=18)
        outcome = resolve_healing(participant, 10)
        assert outcome.healing_applied == 2

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_amount_is_identity(self, amount):
        participant = make_participant(current_hp=3)
        assert apply_healing(participant, amount) is participant


class TestDerivedHp:
    def test_hp_percentage_clipped(self):
        assert hp_percentage(make_participant(max_hp=20, current_hp=10)) == 50.0
        assert hp_percentage(make_participant(max_hp=20, current_hp=-4)) == 0.0

    def test_negative_temporary_hp_rejected(self):
        with pytest.raises(ValueError):
            make_participant(temporary_hp=-1)
