#!/usr/bin/env python3
"""
Lead persistence.

Two backends share one interface:
- SupabaseLeadStore: the hosted `leads` table (production)
- FileLeadStore: one YAML file per lead (local development, tests)

Identifiers are 6-character alphanumeric slugs. They are not checked for
collisions against existing records.
"""

import re
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from logger import get_logger
from atomic_write import safe_write_yaml
from constants import SLUG_ALPHABET, SLUG_LENGTH, SLUG_PATTERN

logger = get_logger()

SLUG_RE = re.compile(SLUG_PATTERN)


class LeadStoreError(Exception):
    """Persisting or reading a lead failed."""


class StoreConfigError(LeadStoreError):
    """The store is not configured (missing credentials or directory)."""


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Random alphanumeric identifier for a lead."""
    return ''.join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def validate_slug(slug: str) -> bool:
    """Slugs are exactly 6 ASCII letters or digits (safe for paths and queries)."""
    return bool(slug) and bool(SLUG_RE.match(slug))


def build_lead_record(name: str, phone: str, form_data: Dict[str, Any], plan_id: str) -> Dict[str, Any]:
    return {
        'plan_id': plan_id,
        'name': name,
        'phone': phone,
        'form_data': form_data,
        'created_at': datetime.now(timezone.utc).isoformat(),
    }


class SupabaseLeadStore:
    """Leads table in Supabase."""

    def __init__(self, url: str, key: str, table: str = 'leads'):
        if not url or not key:
            missing = 'SUPABASE_URL' if not url else 'SUPABASE_ANON_KEY'
            raise StoreConfigError(f"Supabase client not initialized. Missing: {missing}")

        from supabase import create_client
        self.table = table
        try:
            self._client = create_client(url, key)
        except Exception as e:
            raise StoreConfigError(f"Supabase client not initialized: {e}") from e

    def insert(self, record: Dict[str, Any]):
        row = {
            'phone': record['phone'],
            'name': record['name'],
            'form_data': record['form_data'],
            'plan_id': record['plan_id'],
        }
        try:
            self._client.table(self.table).insert(row).execute()
        except Exception as e:
            raise LeadStoreError(f"Database insertion error: {e}") from e

    def get(self, plan_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self._client.table(self.table).select('*').eq('plan_id', plan_id).limit(1).execute()
        except Exception as e:
            raise LeadStoreError(f"Database query error: {e}") from e
        return result.data[0] if result.data else None


class FileLeadStore:
    """Leads as YAML files: <leads_dir>/<plan_id>.yaml"""

    def __init__(self, leads_dir: Optional[Path]):
        if not leads_dir:
            raise StoreConfigError("Lead directory not configured")
        self.leads_dir = Path(leads_dir)

    def _path(self, plan_id: str) -> Path:
        return self.leads_dir / f"{plan_id}.yaml"

    def insert(self, record: Dict[str, Any]):
        try:
            safe_write_yaml(self._path(record['plan_id']), record)
        except OSError as e:
            raise LeadStoreError(f"Error writing lead file: {e}") from e

    def get(self, plan_id: str) -> Optional[Dict[str, Any]]:
        path = self._path(plan_id)
        if not path.exists():
            return None
        try:
            with open(path, 'r') as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise LeadStoreError(f"Error reading lead file: {e}") from e


def create_lead_store(config) -> Any:
    """
    Build the configured store.

    Raises StoreConfigError when the backend is unknown or its settings are
    missing; there is no fallback to another backend.
    """
    backend = str(config.get('store.backend', 'supabase')).strip().lower()

    if backend == 'supabase':
        store = SupabaseLeadStore(
            config.get('store.supabase_url', ''),
            config.get('store.supabase_key', ''),
            config.get('store.table', 'leads'),
        )
    elif backend == 'file':
        store = FileLeadStore(config.get_path('store.leads_dir'))
    else:
        raise StoreConfigError(f"Unknown lead store backend: {backend}")

    logger.info("Lead store ready", backend=backend)
    return store
