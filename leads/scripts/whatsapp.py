#!/usr/bin/env python3
"""
WhatsApp handoff.

Builds the pre-filled message a lead sends to the coach and the wa.me deep
link that opens it.
"""

from typing import Any, Callable, Dict, Iterable, Tuple
from urllib.parse import quote

from content_map import (
    commitment_label,
    days_label,
    goal_label,
    location_label,
    method_label,
    program_label,
)

MESSAGE_HEADER = "Hi Coach! I just finished the quiz."
MESSAGE_FOOTER = "I'm ready to start."
NOT_SPECIFIED = 'Not specified'

# Characters encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "-_.!~*'()"


def _yes_no(value: Any) -> str:
    return 'Yes' if value is True else 'No'


# Answer field -> (line label, formatter)
MESSAGE_LINES: Dict[str, Tuple[str, Callable[[Any], str]]] = {
    'name': ('Name', str),
    'goal': ('Goal', goal_label),
    'selectedProgram': ('Program Interest', program_label),
    'trainingLocation': ('Training', location_label),
    'preferredMethod': ('Training', method_label),
    'daysAvailable': ('Days Available', days_label),
    'commitmentLevel': ('Commitment', commitment_label),
    'hasInjuries': ('Injured', _yes_no),
}


def build_message(answers: Dict[str, Any], fields: Iterable[str]) -> str:
    """
    Render the WhatsApp message for the given answer fields, in order.

    Empty answers read "Not specified"; the injury line always reads Yes/No.
    """
    lines = [MESSAGE_HEADER]
    for field_name in fields:
        if field_name not in MESSAGE_LINES:
            continue
        label, formatter = MESSAGE_LINES[field_name]
        value = answers.get(field_name)
        if formatter is _yes_no:
            text = formatter(value)
        elif value in (None, '', []):
            text = NOT_SPECIFIED
        else:
            text = formatter(value)
        lines.append(f"• {label}: {text}")
    lines.append(MESSAGE_FOOTER)
    return '\n'.join(lines)


def build_whatsapp_link(recipient: str, message: str, base_url: str = 'https://wa.me') -> str:
    """Deep link of the form <base>/<digits>?text=<url-encoded message>."""
    digits = ''.join(ch for ch in str(recipient) if ch.isdigit())
    return f"{base_url.rstrip('/')}/{digits}?text={quote(message, safe=URI_COMPONENT_SAFE)}"
