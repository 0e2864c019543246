#!/usr/bin/env python3
"""
Wizard state machine.

Navigation is a pure function of (position, answers) over a Flow's step
table: skip rules are evaluated against the current answers every time, so
there is no record of visited or skipped steps to drift out of sync.

The Wizard class wraps those functions with the mutable session state
(position, answers, direction, inline errors).
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from constants import DOMAINS
from phone import normalize_phone
from wizard_flow import Flow

FORWARD = 'forward'
BACKWARD = 'backward'

# advance() outcomes
BLOCKED = 'blocked'
MOVED = 'moved'
SUBMIT = 'submit'


class WizardError(ValueError):
    """Raised for requests the wizard cannot honour (unknown or out-of-step fields)."""


# ============================================================================
# PURE NAVIGATION
# ============================================================================

def is_step_skipped(flow: Flow, index: int, answers: Dict[str, Any]) -> bool:
    return flow.steps[index].is_skipped(answers)


def can_advance(flow: Flow, position: int, answers: Dict[str, Any],
                errors: Optional[Dict[str, str]] = None) -> bool:
    """Every required field of the step is answered and none carries an error."""
    errors = errors or {}
    for spec in flow.steps[position].fields:
        if errors.get(spec.name):
            return False
        if spec.required and not spec.is_answered(answers.get(spec.name)):
            return False
    return True


def next_position(flow: Flow, position: int, answers: Dict[str, Any]) -> Optional[int]:
    """Index of the next relevant step, or None when position is the last step."""
    index = position + 1
    while index < flow.total_steps and is_step_skipped(flow, index, answers):
        index += 1
    if index >= flow.total_steps:
        return None
    return index


def previous_position(flow: Flow, position: int, answers: Dict[str, Any]) -> int:
    """Index of the previous relevant step; stays at 0."""
    if position <= 0:
        return 0
    index = position - 1
    while index > 0 and is_step_skipped(flow, index, answers):
        index -= 1
    return index


def display_step(flow: Flow, position: int, answers: Dict[str, Any]) -> Tuple[int, int]:
    """
    (current, total) for the progress indicator, 1-based.

    Skipped steps are left out of both numbers. The last step can never be
    skipped, so current never exceeds total.
    """
    relevant = [not is_step_skipped(flow, index, answers) for index in range(flow.total_steps)]
    total = sum(relevant)
    current = sum(relevant[:position]) + 1
    return min(current, total), total


# ============================================================================
# SESSION STATE
# ============================================================================

@dataclass
class WizardState:
    position: int = 0
    answers: Dict[str, Any] = field(default_factory=dict)
    direction: str = FORWARD
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': self.position,
            'answers': copy.deepcopy(self.answers),
            'direction': self.direction,
            'errors': dict(self.errors),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], flow: Flow) -> 'WizardState':
        """Rebuild state from a session dict, discarding anything the flow does not know."""
        if not data:
            return cls(answers=flow.empty_answers())

        answers = flow.empty_answers()
        for name, value in (data.get('answers') or {}).items():
            if name in answers:
                answers[name] = value

        position = data.get('position', 0)
        if not isinstance(position, int) or not 0 <= position < flow.total_steps:
            position = 0

        direction = data.get('direction', FORWARD)
        if direction not in (FORWARD, BACKWARD):
            direction = FORWARD

        errors = {k: v for k, v in (data.get('errors') or {}).items() if k in answers and v}
        return cls(position=position, answers=answers, direction=direction, errors=errors)


class Wizard:
    """Interactive wizard over a flow."""

    def __init__(self, flow: Flow, state: Optional[WizardState] = None):
        self.flow = flow
        self.state = state or WizardState(answers=flow.empty_answers())

    @property
    def current_step(self):
        return self.flow.steps[self.state.position]

    @property
    def is_last_step(self) -> bool:
        return self.state.position == self.flow.total_steps - 1

    def set_answer(self, name: str, value: Any) -> str:
        """
        Set one field of the current step. Returns the inline error ('' if none).

        Editing a field clears its previous error; a rejected value leaves
        the field unanswered with the new error attached.
        """
        spec = self.flow.fields.get(name)
        if spec is None:
            raise WizardError(f"Unknown field: {name}")
        if name not in self.current_step.field_names:
            raise WizardError(f"Field '{name}' does not belong to step '{self.current_step.id}'")

        coerced, error = spec.coerce(value)
        self.state.answers[name] = coerced
        if error:
            self.state.errors[name] = error
        else:
            self.state.errors.pop(name, None)
        return error

    def blur(self, name: str) -> str:
        """
        Field lost focus: normalize phone numbers eagerly.

        Returns the inline error ('' if none). Empty phones are left alone
        until the user types something.
        """
        spec = self.flow.fields.get(name)
        if spec is None:
            raise WizardError(f"Unknown field: {name}")
        if spec.kind != 'phone':
            return self.state.errors.get(name, '')

        raw = self.state.answers.get(name) or ''
        if not raw:
            return ''

        is_valid, normalized, error = normalize_phone(raw)
        if is_valid:
            self.state.answers[name] = normalized
            self.state.errors.pop(name, None)
            return ''
        self.state.errors[name] = error
        return error

    def can_advance(self) -> bool:
        return can_advance(self.flow, self.state.position, self.state.answers, self.state.errors)

    def advance(self) -> str:
        """Move forward. Returns BLOCKED, MOVED, or SUBMIT on the last step."""
        if not self.can_advance():
            return BLOCKED

        self.state.direction = FORWARD
        target = next_position(self.flow, self.state.position, self.state.answers)
        if target is None:
            return SUBMIT
        self.state.position = target
        return MOVED

    def retreat(self) -> bool:
        """Move back one relevant step. Returns False at the first step."""
        if self.state.position == 0:
            return False
        self.state.direction = BACKWARD
        self.state.position = previous_position(self.flow, self.state.position, self.state.answers)
        return True

    def display_step(self) -> Tuple[int, int]:
        return display_step(self.flow, self.state.position, self.state.answers)

    def finalize(self) -> Tuple[bool, Dict[str, Any], str]:
        """
        Prepare answers for submission.

        Phone fields are normalized once more in case the stored value never
        went through blur (paste then submit). Returns (ok, answers, error).
        """
        answers = copy.deepcopy(self.state.answers)
        for name, spec in self.flow.fields.items():
            if spec.kind != 'phone':
                continue
            is_valid, normalized, error = normalize_phone(answers.get(name) or '')
            if not is_valid:
                self.state.errors[name] = error
                return False, answers, error
            answers[name] = normalized
            self.state.answers[name] = normalized
        return True, answers, ''

    def snapshot(self) -> Dict[str, Any]:
        """JSON view of the wizard for the client."""
        current, total = self.display_step()
        step = self.current_step
        return {
            'flow': self.flow.name,
            'step': {
                'id': step.id,
                'title': step.title,
                'index': self.state.position,
                'fields': [
                    {
                        'name': spec.name,
                        'kind': spec.kind,
                        'label': spec.display_name,
                        'options': DOMAINS.get(spec.domain, []),
                    }
                    for spec in step.fields
                ],
            },
            'display': {'current': current, 'total': total},
            'answers': copy.deepcopy(self.state.answers),
            'errors': dict(self.state.errors),
            'direction': self.state.direction,
            'can_advance': self.can_advance(),
            'is_last_step': self.is_last_step,
        }
