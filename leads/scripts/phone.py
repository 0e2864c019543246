#!/usr/bin/env python3
"""
Phone number normalization for Kenyan mobile numbers.

Accepts the formats people actually type (0712 345 678, 254712345678,
+254 712 345 678) and rewrites them to the canonical +2547XXXXXXXX form
used for storage and for the WhatsApp handoff.
"""

import re
from typing import Tuple

from constants import (
    PHONE_COUNTRY_CODE,
    PHONE_ERROR_MESSAGE,
    PHONE_INTERNATIONAL_PREFIX,
    PHONE_PATTERN,
    PHONE_TRUNK_PREFIX,
)

PHONE_RE = re.compile(PHONE_PATTERN)
WHITESPACE_RE = re.compile(r'\s')


def normalize_phone(raw: str) -> Tuple[bool, str, str]:
    """
    Validate and normalize a phone number.

    Returns (is_valid, normalized, error). On failure normalized is empty
    and error holds the message to show next to the field.
    """
    cleaned = WHITESPACE_RE.sub('', raw or '')

    if not PHONE_RE.match(cleaned):
        return False, '', PHONE_ERROR_MESSAGE

    if cleaned.startswith(PHONE_INTERNATIONAL_PREFIX):
        normalized = cleaned
    elif cleaned.startswith(PHONE_COUNTRY_CODE):
        normalized = '+' + cleaned
    else:
        normalized = PHONE_INTERNATIONAL_PREFIX + cleaned[len(PHONE_TRUNK_PREFIX):]

    return True, normalized, ''


def is_valid_phone(raw: str) -> bool:
    """Check whether a phone number can be normalized."""
    return normalize_phone(raw)[0]
