#!/usr/bin/env python3
"""
Lead submission.

Two entry points share the same save path:
- handle_submission(): the POST /api/submit endpoint (JSON in, status + JSON out)
- submit_wizard(): the wizard's final step, which makes one attempt and then
  applies the deployment's failure policy ('open' or 'closed')
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from constants import (
    MSG_CONFIG_ERROR,
    MSG_INVALID_BODY,
    MSG_INVALID_PHONE,
    MSG_MISSING_FIELDS,
    MSG_SAVE_FAILED,
)
from lead_store import LeadStoreError, StoreConfigError, build_lead_record, generate_slug
from logger import get_logger
from phone import normalize_phone
from wizard_flow import Flow

logger = get_logger()

Response = Tuple[int, Dict[str, Any]]


def _invalid_body() -> Response:
    return 400, {'success': False, 'message': MSG_INVALID_BODY}


def parse_submission(raw_body: Optional[str], content_type: Optional[str]) -> Tuple[Optional[Dict[str, Any]], Optional[Response]]:
    """
    Validate a submission request body.

    Returns (payload, None) on success, or (None, (status, body)) describing
    the 400 response. The phone in the payload is canonical.
    """
    if content_type and 'application/json' not in content_type:
        return None, _invalid_body()

    if not raw_body or not raw_body.strip():
        return None, _invalid_body()

    try:
        body = json.loads(raw_body)
    except ValueError as e:
        logger.error("Error parsing request body", error=str(e))
        return None, _invalid_body()

    if not isinstance(body, dict) or not body.get('phone'):
        return None, _invalid_body()

    if not body.get('name') or not body.get('phone') or body.get('formData') is None:
        return None, (400, {'success': False, 'error': MSG_MISSING_FIELDS})

    name, phone, form_data = body['name'], body['phone'], body['formData']
    if not isinstance(name, str) or not isinstance(phone, str) or not isinstance(form_data, dict):
        return None, _invalid_body()

    is_valid, normalized, _ = normalize_phone(phone)
    if not is_valid:
        return None, (400, {'success': False, 'error': MSG_INVALID_PHONE})

    return {'name': name.strip(), 'phone': normalized, 'formData': form_data}, None


def save_lead(store, payload: Dict[str, Any]) -> str:
    """Insert one lead record and return its slug. Raises LeadStoreError."""
    slug = generate_slug()
    record = build_lead_record(payload['name'], payload['phone'], payload['formData'], slug)
    store.insert(record)
    logger.success("Lead saved", plan_id=slug)
    return slug


def handle_submission(raw_body: Optional[str], content_type: Optional[str],
                      get_store: Callable[[], Any], include_slug: bool = False) -> Response:
    """Full request handling for POST /api/submit."""
    payload, error_response = parse_submission(raw_body, content_type)
    if error_response:
        return error_response

    try:
        store = get_store()
    except StoreConfigError as e:
        logger.error("Lead store not configured", error=str(e))
        return 500, {'success': False, 'error': MSG_CONFIG_ERROR}

    try:
        slug = save_lead(store, payload)
    except LeadStoreError as e:
        logger.error("Database insertion error", error=str(e))
        return 500, {'success': False, 'message': MSG_SAVE_FAILED}

    body = {'success': True}
    if include_slug:
        body['slug'] = slug
    return 200, body


# ============================================================================
# WIZARD SUBMISSION
# ============================================================================

@dataclass
class SubmissionResult:
    saved: bool
    proceed: bool
    slug: Optional[str] = None
    error: str = ''


def build_payload(flow: Flow, answers: Dict[str, Any]) -> Dict[str, Any]:
    """Split finished answers into the {name, phone, formData} request shape."""
    phone_field = next(name for name, spec in flow.fields.items() if spec.kind == 'phone')
    # Answers left over from steps the user routed around are not part of the lead
    skipped = {name for step in flow.steps if step.is_skipped(answers) for name in step.field_names}
    form_data = {
        key: value for key, value in answers.items()
        if key not in ('name', phone_field) and key not in skipped
    }
    return {
        'name': (answers.get('name') or '').strip(),
        'phone': answers.get(phone_field) or '',
        'formData': form_data,
    }


def submit_wizard(get_store: Callable[[], Any], flow: Flow, answers: Dict[str, Any],
                  policy: str) -> SubmissionResult:
    """
    Save the finished wizard, one attempt.

    policy='open': a failed save is logged and the handoff goes ahead.
    policy='closed': a failed save stops the flow with a retry message.
    """
    payload = build_payload(flow, answers)
    try:
        slug = save_lead(get_store(), payload)
    except LeadStoreError as e:
        if policy == 'open':
            logger.warning("Lead save failed, continuing to WhatsApp", error=str(e))
            return SubmissionResult(saved=False, proceed=True, error=str(e))
        logger.error("Lead save failed", error=str(e))
        return SubmissionResult(saved=False, proceed=False, error=MSG_SAVE_FAILED)

    return SubmissionResult(saved=True, proceed=True, slug=slug)
