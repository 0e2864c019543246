#!/usr/bin/env python3
"""
Wizard flow definitions.

A flow is an ordered table of step descriptors loaded from flows.yaml. Each
step owns a set of fields and may carry a skip rule; the state machine in
wizard_state.py interprets the table and never special-cases a step.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from constants import DOMAINS, FLOWS_FILE

FIELD_KINDS = ('choice', 'multi', 'boolean', 'integer', 'number', 'text', 'phone')


class FlowConfigError(ValueError):
    """Raised when flows.yaml describes an unusable flow."""


@dataclass(frozen=True)
class FieldSpec:
    """One question answered inside a step."""
    name: str
    kind: str
    domain: Optional[str] = None
    label: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    required: bool = True

    @property
    def display_name(self) -> str:
        return self.label or self.name

    def empty_value(self) -> Any:
        if self.kind in ('text', 'phone'):
            return ''
        if self.kind == 'multi':
            return []
        return None

    def is_answered(self, value: Any) -> bool:
        """Booleans count as answered when False; only None is unanswered."""
        if value is None:
            return False
        if self.kind in ('text', 'phone'):
            return isinstance(value, str) and value.strip() != ''
        if self.kind == 'multi':
            return len(value) > 0
        return True

    def coerce(self, value: Any) -> Tuple[Any, str]:
        """
        Coerce a submitted value for this field.

        Returns (value, error). On error the returned value is the field's
        empty value so a bad answer never counts as answered.
        """
        if value is None or value == '' or value == []:
            return self.empty_value(), ''

        if self.kind == 'choice':
            if isinstance(value, str) and value in DOMAINS[self.domain]:
                return value, ''
            return None, 'Please choose one of the options.'

        if self.kind == 'multi':
            if not isinstance(value, list) or not all(
                    isinstance(item, str) and item in DOMAINS[self.domain] for item in value):
                return [], 'Please choose from the listed options.'
            # Preserve selection order, drop duplicates
            return list(dict.fromkeys(value)), ''

        if self.kind == 'boolean':
            if isinstance(value, bool):
                return value, ''
            return None, 'Please answer yes or no.'

        if self.kind in ('integer', 'number'):
            if isinstance(value, bool):
                return None, f"{self.display_name} must be a number"
            try:
                number = float(value)
            except (ValueError, TypeError):
                return None, f"{self.display_name} must be a number"
            if not math.isfinite(number):
                return None, f"{self.display_name} must be a number"
            if self.kind == 'integer':
                if not number.is_integer():
                    return None, f"{self.display_name} must be a whole number"
                number = int(number)
            if self.min is not None and number < self.min:
                return None, self._range_message()
            if self.max is not None and number > self.max:
                return None, self._range_message()
            return number, ''

        # text / phone: raw string, phone normalization happens on blur
        if not isinstance(value, str):
            return self.empty_value(), f"{self.display_name} must be text"
        return value, ''

    def _range_message(self) -> str:
        if self.min is not None and self.max is not None:
            return f"{self.display_name} must be between {self.min:g} and {self.max:g}"
        if self.min is not None:
            return f"{self.display_name} must be at least {self.min:g}"
        return f"{self.display_name} must be at most {self.max:g}"


@dataclass(frozen=True)
class StepSpec:
    """A wizard step: the fields it owns and when it is irrelevant."""
    id: str
    title: str
    fields: Tuple[FieldSpec, ...]
    skip_if: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields]

    def is_skipped(self, answers: Dict[str, Any]) -> bool:
        """True when every skip_if field currently holds one of its listed values."""
        if not self.skip_if:
            return False
        return all(answers.get(name) in values for name, values in self.skip_if.items())


@dataclass(frozen=True)
class Flow:
    name: str
    steps: Tuple[StepSpec, ...]
    description: str = ''
    results_page: bool = False
    message_fields: Tuple[str, ...] = ()

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def fields(self) -> Dict[str, FieldSpec]:
        return {spec.name: spec for step in self.steps for spec in step.fields}

    def step_index_for(self, field_name: str) -> Optional[int]:
        for index, step in enumerate(self.steps):
            if field_name in step.field_names:
                return index
        return None

    def empty_answers(self) -> Dict[str, Any]:
        return {name: spec.empty_value() for name, spec in self.fields.items()}


# ============================================================================
# LOADING
# ============================================================================

def _parse_field(flow_name: str, raw: Dict[str, Any]) -> FieldSpec:
    name = raw.get('name')
    kind = raw.get('kind')
    if not name:
        raise FlowConfigError(f"{flow_name}: field without a name")
    if kind not in FIELD_KINDS:
        raise FlowConfigError(f"{flow_name}.{name}: unknown kind '{kind}'")
    domain = raw.get('domain')
    if kind in ('choice', 'multi') and domain not in DOMAINS:
        raise FlowConfigError(f"{flow_name}.{name}: unknown domain '{domain}'")
    return FieldSpec(
        name=name,
        kind=kind,
        domain=domain,
        label=raw.get('label'),
        min=raw.get('min'),
        max=raw.get('max'),
        required=raw.get('required', True),
    )


def _parse_flow(name: str, raw: Dict[str, Any]) -> Flow:
    steps = []
    for raw_step in raw.get('steps') or []:
        skip_if = {
            field_name: tuple(values)
            for field_name, values in (raw_step.get('skip_if') or {}).items()
        }
        steps.append(StepSpec(
            id=raw_step['id'],
            title=raw_step.get('title', raw_step['id']),
            fields=tuple(_parse_field(name, raw_field) for raw_field in raw_step.get('fields') or []),
            skip_if=skip_if,
        ))

    if not steps:
        raise FlowConfigError(f"{name}: flow has no steps")
    if steps[0].skip_if or steps[-1].skip_if:
        raise FlowConfigError(f"{name}: first and last steps cannot be skippable")

    seen = set()
    for step in steps:
        for field_name in step.field_names:
            if field_name in seen:
                raise FlowConfigError(f"{name}: field '{field_name}' appears in more than one step")
            seen.add(field_name)
    for step in steps:
        unknown = set(step.skip_if) - seen
        if unknown:
            raise FlowConfigError(f"{name}.{step.id}: skip_if references unknown fields {sorted(unknown)}")

    last_fields = {spec.kind for spec in steps[-1].fields}
    if 'phone' not in last_fields:
        raise FlowConfigError(f"{name}: last step must collect the phone number")

    return Flow(
        name=name,
        steps=tuple(steps),
        description=raw.get('description', ''),
        results_page=bool(raw.get('results_page', False)),
        message_fields=tuple(raw.get('message_fields') or ()),
    )


def load_flows(path: Optional[Path] = None) -> Dict[str, Flow]:
    """Load and validate every flow in flows.yaml."""
    path = Path(path) if path else FLOWS_FILE
    with open(path, 'r') as f:
        raw_flows = yaml.safe_load(f) or {}
    return {name: _parse_flow(name, raw) for name, raw in raw_flows.items()}


def get_flow(name: str, path: Optional[Path] = None) -> Flow:
    flows = load_flows(path)
    if name not in flows:
        raise FlowConfigError(f"Unknown wizard flow '{name}' (available: {', '.join(sorted(flows))})")
    return flows[name]
