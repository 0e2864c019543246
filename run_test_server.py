#!/usr/bin/env python3
"""Local test server backed by the file lead store.

Usage:
    python3 run_test_server.py            # coach flow
    BURA_WIZARD_FLOW=plan python3 run_test_server.py

Leads are written as YAML to /tmp/bura-test-leads, so no Supabase
credentials are needed. WhatsApp links point at the real wa.me.
"""
import os
import sys

# Set test mode environment BEFORE importing the app
os.environ['FLASK_ENV'] = 'development'
os.environ['BURA_LEAD_STORE'] = 'file'
os.environ['BURA_LEADS_DIR'] = '/tmp/bura-test-leads'
os.environ.setdefault('BURA_WIZARD_FLOW', 'coach')
os.environ.setdefault('BURA_FAILURE_POLICY', 'open')
os.environ.setdefault('BURA_LOG_LEVEL', 'DEBUG')

# Create temp dirs
os.makedirs('/tmp/bura-test-leads', exist_ok=True)

# Add webapp dir to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'webapp'))

from app import app

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5050))
    print(f"Quiz test server on http://localhost:{port}")
    print(f"  Flow:           {app.config['WIZARD_FLOW'].name}")
    print(f"  Failure policy: {app.config['FAILURE_POLICY']}")
    print(f"  Leads dir:      /tmp/bura-test-leads")
    print(f"  Wizard state:   GET http://localhost:{port}/api/wizard")
    app.run(host='127.0.0.1', port=port, debug=True)
