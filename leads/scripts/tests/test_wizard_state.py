#!/usr/bin/env python3
"""Tests for wizard_state.py.

40-ish tests covering:
- Step validity (required fields, booleans, multi-select, inline errors)
- Forward/backward navigation with the gym -> no equipment skip
- Progress display adjusted for skipped steps
- Phone normalization on blur and again before submit
- Session round-trip of the wizard state

Run with: pytest leads/scripts/tests/test_wizard_state.py -v
"""

import sys
from pathlib import Path

import pytest

# Add script path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from constants import PHONE_ERROR_MESSAGE
from wizard_flow import get_flow
from wizard_state import (
    BACKWARD,
    BLOCKED,
    FORWARD,
    MOVED,
    SUBMIT,
    Wizard,
    WizardError,
    WizardState,
    can_advance,
    display_step,
    next_position,
    previous_position,
)


# =============================================================================
# FIXTURES
# =============================================================================

BODY_STATS = {'gender': 'female', 'age': 29, 'height': 165, 'weight': 62}


@pytest.fixture
def plan_flow():
    return get_flow('plan')


@pytest.fixture
def coach_flow():
    return get_flow('coach')


def answer(wizard, **values):
    """Answer the current step and advance."""
    for name, value in values.items():
        wizard.set_answer(name, value)
    return wizard.advance()


def walk_plan_to_location(wizard):
    answer(wizard, **BODY_STATS)
    answer(wizard, goal='fat_loss')
    answer(wizard, activityLevel='beginner')
    assert wizard.current_step.id == 'location'


@pytest.fixture
def plan_wizard(plan_flow):
    return Wizard(plan_flow)


# =============================================================================
# STEP VALIDITY
# =============================================================================

class TestCanAdvance:

    def test_empty_first_step_blocks(self, plan_wizard):
        assert plan_wizard.can_advance() is False
        assert plan_wizard.advance() == BLOCKED
        assert plan_wizard.state.position == 0

    def test_partial_body_stats_blocks(self, plan_wizard):
        plan_wizard.set_answer('gender', 'male')
        plan_wizard.set_answer('age', 30)
        assert plan_wizard.can_advance() is False

    def test_out_of_range_value_blocks(self, plan_wizard):
        for name, value in BODY_STATS.items():
            plan_wizard.set_answer(name, value)
        error = plan_wizard.set_answer('age', 150)
        assert error == 'Age must be between 1 and 120'
        assert plan_wizard.state.errors['age'] == error
        assert plan_wizard.can_advance() is False

    def test_fixing_a_value_clears_its_error(self, plan_wizard):
        for name, value in BODY_STATS.items():
            plan_wizard.set_answer(name, value)
        plan_wizard.set_answer('age', 150)
        plan_wizard.set_answer('age', 40)
        assert 'age' not in plan_wizard.state.errors
        assert plan_wizard.can_advance() is True

    def test_boolean_false_satisfies_step(self, coach_flow):
        answers = coach_flow.empty_answers()
        position = coach_flow.step_index_for('hasInjuries')
        assert can_advance(coach_flow, position, answers) is False
        answers['hasInjuries'] = False
        assert can_advance(coach_flow, position, answers) is True

    def test_equipment_needs_a_selection(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers['trainingLocation'] = 'home'
        position = plan_flow.step_index_for('equipment')
        assert can_advance(plan_flow, position, answers) is False
        answers['equipment'] = ['bodyweight']
        assert can_advance(plan_flow, position, answers) is True

    def test_blank_name_blocks_contact(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers.update(name='   ', phone='0712345678')
        assert can_advance(plan_flow, plan_flow.total_steps - 1, answers) is False

    def test_phone_error_blocks_contact(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers.update(name='Amina', phone='0712')
        last = plan_flow.total_steps - 1
        assert can_advance(plan_flow, last, answers) is True
        assert can_advance(plan_flow, last, answers, {'phone': PHONE_ERROR_MESSAGE}) is False


class TestSetAnswer:

    def test_unknown_field(self, plan_wizard):
        with pytest.raises(WizardError, match='Unknown field'):
            plan_wizard.set_answer('favouriteColour', 'blue')

    def test_field_from_another_step(self, plan_wizard):
        with pytest.raises(WizardError, match='does not belong'):
            plan_wizard.set_answer('goal', 'fat_loss')

    def test_invalid_choice_stays_unanswered(self, plan_wizard):
        error = plan_wizard.set_answer('gender', 'robot')
        assert error
        assert plan_wizard.state.answers['gender'] is None


# =============================================================================
# NAVIGATION
# =============================================================================

class TestNavigation:

    def test_advance_moves_forward(self, plan_wizard):
        assert answer(plan_wizard, **BODY_STATS) == MOVED
        assert plan_wizard.current_step.id == 'goal'
        assert plan_wizard.state.direction == FORWARD

    def test_gym_skips_equipment_forward(self, plan_wizard):
        walk_plan_to_location(plan_wizard)
        answer(plan_wizard, trainingLocation='gym')
        assert plan_wizard.current_step.id == 'medical'

    def test_gym_skips_equipment_backward(self, plan_wizard):
        walk_plan_to_location(plan_wizard)
        answer(plan_wizard, trainingLocation='gym')
        assert plan_wizard.retreat() is True
        assert plan_wizard.current_step.id == 'location'
        assert plan_wizard.state.direction == BACKWARD

    def test_home_visits_equipment(self, plan_wizard):
        walk_plan_to_location(plan_wizard)
        answer(plan_wizard, trainingLocation='home')
        assert plan_wizard.current_step.id == 'equipment'
        answer(plan_wizard, equipment=['dumbbells'])
        assert plan_wizard.current_step.id == 'medical'
        plan_wizard.retreat()
        assert plan_wizard.current_step.id == 'equipment'

    def test_changed_answer_is_reevaluated(self, plan_wizard):
        """Going back and switching to gym drops the equipment step."""
        walk_plan_to_location(plan_wizard)
        answer(plan_wizard, trainingLocation='home')
        plan_wizard.retreat()
        answer(plan_wizard, trainingLocation='gym')
        assert plan_wizard.current_step.id == 'medical'

    def test_retreat_at_first_step(self, plan_wizard):
        assert plan_wizard.retreat() is False
        assert plan_wizard.state.position == 0
        assert plan_wizard.state.direction == FORWARD

    def test_gym_never_presents_equipment(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers['trainingLocation'] = 'gym'
        location = plan_flow.step_index_for('trainingLocation')
        medical = plan_flow.step_index_for('hasInjuries')
        assert next_position(plan_flow, location, answers) == medical
        assert previous_position(plan_flow, medical, answers) == location

    def test_next_position_at_end(self, plan_flow):
        answers = plan_flow.empty_answers()
        assert next_position(plan_flow, plan_flow.total_steps - 1, answers) is None

    def test_previous_position_at_start(self, plan_flow):
        assert previous_position(plan_flow, 0, plan_flow.empty_answers()) == 0

    def test_last_step_submits(self, coach_flow):
        wizard = Wizard(coach_flow, WizardState(position=coach_flow.total_steps - 1,
                                                answers=coach_flow.empty_answers()))
        wizard.set_answer('name', 'Brian')
        wizard.set_answer('phone', '0712345678')
        assert wizard.is_last_step is True
        assert wizard.advance() == SUBMIT
        assert wizard.state.position == coach_flow.total_steps - 1


# =============================================================================
# PROGRESS DISPLAY
# =============================================================================

class TestDisplayStep:

    def test_first_step(self, plan_flow):
        assert display_step(plan_flow, 0, plan_flow.empty_answers()) == (1, 8)

    def test_gym_shortens_total(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers['trainingLocation'] = 'gym'
        medical = plan_flow.step_index_for('hasInjuries')
        assert display_step(plan_flow, medical, answers) == (5, 7)
        assert display_step(plan_flow, plan_flow.total_steps - 1, answers) == (7, 7)

    def test_home_keeps_full_total(self, plan_flow):
        answers = plan_flow.empty_answers()
        answers['trainingLocation'] = 'home'
        medical = plan_flow.step_index_for('hasInjuries')
        assert display_step(plan_flow, medical, answers) == (6, 8)

    @pytest.mark.parametrize('location', ['gym', 'home'])
    def test_current_never_exceeds_total(self, plan_wizard, location):
        walk_plan_to_location(plan_wizard)
        answer(plan_wizard, trainingLocation=location)
        if location == 'home':
            answer(plan_wizard, equipment=['bands'])
        answer(plan_wizard, hasInjuries=True)
        answer(plan_wizard, daysAvailable='3-4')
        assert plan_wizard.is_last_step
        current, total = plan_wizard.display_step()
        assert 1 <= current <= total
        assert current == total

    def test_coach_flow_counts_every_step(self, coach_flow):
        answers = coach_flow.empty_answers()
        for position in range(coach_flow.total_steps):
            assert display_step(coach_flow, position, answers) == (position + 1, 11)


# =============================================================================
# PHONE HANDLING
# =============================================================================

class TestPhoneHandling:

    @pytest.fixture
    def contact_wizard(self, plan_flow):
        state = WizardState(position=plan_flow.total_steps - 1, answers=plan_flow.empty_answers())
        wizard = Wizard(plan_flow, state)
        wizard.set_answer('name', 'Amina')
        return wizard

    def test_blur_normalizes(self, contact_wizard):
        contact_wizard.set_answer('phone', '0712 345 678')
        assert contact_wizard.blur('phone') == ''
        assert contact_wizard.state.answers['phone'] == '+254712345678'

    def test_blur_surfaces_error(self, contact_wizard):
        contact_wizard.set_answer('phone', '071234')
        assert contact_wizard.blur('phone') == PHONE_ERROR_MESSAGE
        assert contact_wizard.state.answers['phone'] == '071234'
        assert contact_wizard.advance() == BLOCKED

    def test_editing_phone_clears_error(self, contact_wizard):
        contact_wizard.set_answer('phone', '071234')
        contact_wizard.blur('phone')
        contact_wizard.set_answer('phone', '0712345678')
        assert 'phone' not in contact_wizard.state.errors

    def test_blur_on_empty_phone(self, contact_wizard):
        assert contact_wizard.blur('phone') == ''
        assert 'phone' not in contact_wizard.state.errors

    def test_blur_non_phone_field(self, contact_wizard):
        assert contact_wizard.blur('name') == ''
        assert contact_wizard.state.answers['name'] == 'Amina'

    def test_finalize_normalizes_unblurred_phone(self, contact_wizard):
        """Paste then submit without leaving the field."""
        contact_wizard.set_answer('phone', '254712345678')
        ok, answers, error = contact_wizard.finalize()
        assert ok is True
        assert error == ''
        assert answers['phone'] == '+254712345678'

    def test_finalize_is_idempotent_after_blur(self, contact_wizard):
        contact_wizard.set_answer('phone', '0712345678')
        contact_wizard.blur('phone')
        ok, answers, _ = contact_wizard.finalize()
        assert ok is True
        assert answers['phone'] == '+254712345678'

    def test_finalize_rejects_invalid_phone(self, contact_wizard):
        contact_wizard.set_answer('phone', '0812345678')
        ok, answers, error = contact_wizard.finalize()
        assert ok is False
        assert error == PHONE_ERROR_MESSAGE
        assert contact_wizard.state.errors['phone'] == PHONE_ERROR_MESSAGE
        # Nothing entered is lost
        assert answers['name'] == 'Amina'


# =============================================================================
# SESSION STATE
# =============================================================================

class TestWizardState:

    def test_round_trip(self, plan_wizard, plan_flow):
        walk_plan_to_location(plan_wizard)
        restored = WizardState.from_dict(plan_wizard.state.to_dict(), plan_flow)
        assert restored == plan_wizard.state

    def test_empty_session(self, plan_flow):
        state = WizardState.from_dict(None, plan_flow)
        assert state.position == 0
        assert state.answers == plan_flow.empty_answers()

    def test_garbage_is_discarded(self, plan_flow):
        state = WizardState.from_dict({
            'position': 99,
            'direction': 'sideways',
            'answers': {'goal': 'strength', 'hacker': True},
            'errors': {'hacker': 'x', 'phone': ''},
        }, plan_flow)
        assert state.position == 0
        assert state.direction == FORWARD
        assert state.answers['goal'] == 'strength'
        assert 'hacker' not in state.answers
        assert state.errors == {}

    def test_to_dict_is_a_copy(self, plan_wizard):
        data = plan_wizard.state.to_dict()
        data['answers']['equipment'].append('bands')
        assert plan_wizard.state.answers['equipment'] == []


class TestSnapshot:

    def test_first_step_snapshot(self, plan_wizard):
        snapshot = plan_wizard.snapshot()
        assert snapshot['flow'] == 'plan'
        assert snapshot['step']['id'] == 'body_stats'
        assert snapshot['step']['index'] == 0
        assert snapshot['display'] == {'current': 1, 'total': 8}
        assert snapshot['can_advance'] is False
        assert snapshot['is_last_step'] is False

    def test_choice_fields_list_options(self, plan_wizard):
        fields = {f['name']: f for f in plan_wizard.snapshot()['step']['fields']}
        assert fields['gender']['options'] == ['male', 'female']
        assert fields['age']['options'] == []
        assert fields['age']['label'] == 'Age'
