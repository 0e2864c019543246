#!/usr/bin/env python3
"""
Bura Fitness Quiz Web App

Flask JSON API for the lead-generation quiz: a session-backed wizard, the
lead submission endpoint, a results lookup and the WhatsApp handoff.
"""

import logging
import os
import secrets
import sys
import time
from functools import wraps
from pathlib import Path

from flask import Flask, jsonify, redirect, request, session, url_for
from flask_wtf.csrf import CSRFProtect, generate_csrf

# Add scripts directory to path
SCRIPTS_DIR = Path(__file__).parent.parent / "leads" / "scripts"
sys.path.insert(0, str(SCRIPTS_DIR))

from config_loader import get_config
from content_map import build_plan_summary
from lead_store import LeadStoreError, create_lead_store, validate_slug
from logger import get_logger
from submission import handle_submission, submit_wizard
from whatsapp import build_message, build_whatsapp_link
from wizard_flow import get_flow
from wizard_state import BLOCKED, SUBMIT, Wizard, WizardError, WizardState

app = Flask(__name__)

# =============================================================================
# LOGGING
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger('bura-quiz')

# =============================================================================
# SECURITY CONFIGURATION
# =============================================================================

# Secret key - MUST be set in production (wizard state lives in the session)
_secret_key = os.environ.get('SECRET_KEY')
if not _secret_key:
    if os.environ.get('FLASK_ENV') == 'production':
        raise RuntimeError("SECRET_KEY environment variable is required in production")
    _secret_key = secrets.token_hex(32)
    logger.warning("Using randomly generated SECRET_KEY. Set SECRET_KEY env var for production.")
app.secret_key = _secret_key

# CSRF Protection (clients send the token from GET /api/wizard as X-CSRFToken)
csrf = CSRFProtect(app)


@app.after_request
def set_security_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-XSS-Protection'] = '1; mode=block'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    if os.environ.get('FLASK_ENV') == 'production':
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# =============================================================================
# CONFIGURATION - Fail fast on an unusable flow or policy
# =============================================================================

config = get_config()
get_logger().set_level(str(config.get('logging.level', 'INFO')))

app.config['WIZARD_FLOW'] = get_flow(config.get('wizard.flow', 'coach'))
app.config['FAILURE_POLICY'] = config.get_failure_policy()
app.config['HANDOFF_MODE'] = config.get_handoff_mode()
app.config['INCLUDE_SLUG'] = config.get_bool('submission.include_slug')
app.config['COACH_PHONE'] = str(config.get('handoff.coach_phone', ''))
app.config['WHATSAPP_BASE_URL'] = config.get('handoff.base_url', 'https://wa.me')
app.config['HANDOFF_TTL_SECONDS'] = int(config.get('handoff.session_ttl_seconds', 300))
# Tests and the dev server inject a ready-made store here
app.config.setdefault('LEAD_STORE', None)

logger.info(
    f"Quiz flow '{app.config['WIZARD_FLOW'].name}', "
    f"failure policy '{app.config['FAILURE_POLICY']}', handoff '{app.config['HANDOFF_MODE']}'"
)


def get_lead_store():
    """Configured lead store, built on first use. Raises StoreConfigError."""
    if app.config['LEAD_STORE'] is None:
        app.config['LEAD_STORE'] = create_lead_store(config)
    return app.config['LEAD_STORE']


# =============================================================================
# WIZARD SESSION
# =============================================================================

WIZARD_SESSION_KEY = 'wizard'
HANDOFF_SESSION_KEY = 'handoff'


def load_wizard() -> Wizard:
    flow = app.config['WIZARD_FLOW']
    return Wizard(flow, WizardState.from_dict(session.get(WIZARD_SESSION_KEY), flow))


def save_wizard(wizard: Wizard):
    session[WIZARD_SESSION_KEY] = wizard.state.to_dict()


def wizard_response(wizard: Wizard, code: int = 200, **extra):
    body = wizard.snapshot()
    body['csrf_token'] = generate_csrf()
    body.update(extra)
    return jsonify(body), code


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def handle_wizard_errors(f):
    """Decorator: wizard misuse becomes a 400 JSON response."""
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except WizardError as e:
            return jsonify({"success": False, "error": str(e)}), 400
    return decorated


def handoff_url(message: str) -> str:
    """Where the browser goes next: the deep link, or the session bridge."""
    if app.config['HANDOFF_MODE'] == 'session':
        session[HANDOFF_SESSION_KEY] = {
            'message': message,
            'expires_at': time.time() + app.config['HANDOFF_TTL_SECONDS'],
        }
        return url_for('whatsapp_bridge')
    return build_whatsapp_link(app.config['COACH_PHONE'], message, app.config['WHATSAPP_BASE_URL'])


def complete_wizard(wizard: Wizard):
    """Last step: re-normalize, save once, then hand off to WhatsApp."""
    ok, answers, error = wizard.finalize()
    if not ok:
        save_wizard(wizard)
        return wizard_response(wizard, 400, status='invalid', error=error)

    flow = wizard.flow
    result = submit_wizard(get_lead_store, flow, answers, app.config['FAILURE_POLICY'])
    if not result.proceed:
        # Fail-closed: keep every answer so the user can retry
        save_wizard(wizard)
        return wizard_response(wizard, 502, status='error', success=False, message=result.error)

    message = build_message(answers, flow.message_fields)
    body = {
        'status': 'submitted',
        'saved': result.saved,
        'redirect': handoff_url(message),
    }
    if flow.results_page and result.slug:
        body['slug'] = result.slug
        body['results_url'] = url_for('api_plan', slug=result.slug)

    session.pop(WIZARD_SESSION_KEY, None)
    return jsonify(body), 200


# =============================================================================
# ROUTES
# =============================================================================

@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'service': 'bura-quiz',
        'status': 'ok',
        'flow': app.config['WIZARD_FLOW'].name,
        'failure_policy': app.config['FAILURE_POLICY'],
    })


@app.route('/api/wizard', methods=['GET'])
def api_wizard():
    """Current wizard state."""
    return wizard_response(load_wizard())


@app.route('/api/wizard/answers', methods=['POST'])
@handle_wizard_errors
def api_wizard_answers():
    """Set one or more fields of the current step."""
    answers = json_body().get('answers')
    if not isinstance(answers, dict) or not answers:
        return jsonify({"success": False, "error": "Expected an 'answers' object"}), 400

    wizard = load_wizard()
    for name, value in answers.items():
        wizard.set_answer(name, value)
    save_wizard(wizard)
    return wizard_response(wizard)


@app.route('/api/wizard/blur', methods=['POST'])
@handle_wizard_errors
def api_wizard_blur():
    """A field lost focus (eager phone normalization)."""
    field_name = json_body().get('field', '')
    wizard = load_wizard()
    wizard.blur(field_name)
    save_wizard(wizard)
    return wizard_response(wizard)


@app.route('/api/wizard/next', methods=['POST'])
def api_wizard_next():
    """Advance, or submit and hand off on the last step."""
    wizard = load_wizard()
    outcome = wizard.advance()

    if outcome == BLOCKED:
        return wizard_response(wizard, 400, status=BLOCKED)
    if outcome == SUBMIT:
        return complete_wizard(wizard)

    save_wizard(wizard)
    return wizard_response(wizard, status=outcome)


@app.route('/api/wizard/back', methods=['POST'])
def api_wizard_back():
    wizard = load_wizard()
    wizard.retreat()
    save_wizard(wizard)
    return wizard_response(wizard)


@app.route('/api/wizard/reset', methods=['POST'])
def api_wizard_reset():
    session.pop(WIZARD_SESSION_KEY, None)
    return wizard_response(load_wizard())


@app.route('/api/submit', methods=['POST'])
@csrf.exempt  # Stateless JSON endpoint, no session involved
def api_submit():
    """Persist a finished questionnaire."""
    status, body = handle_submission(
        request.get_data(as_text=True),
        request.headers.get('Content-Type'),
        get_lead_store,
        include_slug=app.config['INCLUDE_SLUG'],
    )
    return jsonify(body), status


@app.route('/api/plan/<slug>', methods=['GET'])
def api_plan(slug: str):
    """Results for a stored lead."""
    if not validate_slug(slug):
        return jsonify({"error": "Invalid plan ID"}), 400

    try:
        lead = get_lead_store().get(slug)
    except LeadStoreError as e:
        logger.error(f"Plan lookup failed for {slug}: {e}")
        return jsonify({"success": False, "error": "Internal server error"}), 500

    if not lead:
        return jsonify({"error": "Plan not found"}), 404

    return jsonify({
        'plan_id': slug,
        'name': lead.get('name', ''),
        'plan': build_plan_summary(lead.get('form_data') or {}),
    })


@app.route('/whatsapp', methods=['GET'])
def whatsapp_bridge():
    """Session-storage handoff: read the parked message once, then redirect."""
    pending = session.pop(HANDOFF_SESSION_KEY, None)
    if not pending or pending.get('expires_at', 0) < time.time():
        return jsonify({"error": "No pending message"}), 404

    return redirect(build_whatsapp_link(
        app.config['COACH_PHONE'],
        pending['message'],
        app.config['WHATSAPP_BASE_URL'],
    ))


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
def server_error(e):
    return jsonify({"success": False, "error": "Internal server error"}), 500


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)
