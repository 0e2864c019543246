#!/usr/bin/env python3
"""
Configuration loader for the Bura Fitness quiz.

Loads settings from config.yaml with environment variable overrides.
"""

import copy
import os
import re
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml

from constants import FAILURE_POLICIES, HANDOFF_MODES, PROJECT_ROOT


# Allowlist of environment variables that can be substituted
ALLOWED_ENV_VARS: Set[str] = {
    'BURA_WIZARD_FLOW',
    'BURA_FAILURE_POLICY',
    'BURA_INCLUDE_SLUG',
    'BURA_LEAD_STORE',
    'BURA_LEADS_DIR',
    'BURA_HANDOFF_MODE',
    'BURA_COACH_PHONE',
    'BURA_LOG_LEVEL',
    'SUPABASE_URL',
    'SUPABASE_ANON_KEY',
}

ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


class Config:
    """Quiz configuration manager."""

    _instance = None
    _config = None
    _lock = threading.Lock()  # Thread-safe singleton

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._config is None:
            self._load_config()

    def _load_config(self, config_path: Optional[Path] = None):
        """Load configuration from config.yaml, layered over the defaults."""
        if config_path is None:
            possible_paths = [
                PROJECT_ROOT / 'config.yaml',
                Path.cwd() / 'config.yaml',
                Path.home() / '.bura' / 'config.yaml',
            ]
            config_path = next((path for path in possible_paths if path.exists()), None)

        config = self._get_defaults()
        if config_path is not None:
            with open(config_path, 'r') as f:
                raw_config = yaml.safe_load(f) or {}
            self._merge(config, self._process_env_vars(raw_config))

        self._config = config

    def reload(self, config_path: Optional[Path] = None):
        """Re-read configuration (tests point this at a temporary file)."""
        with self._lock:
            self._load_config(Path(config_path) if config_path else None)

    def _merge(self, base: Dict, override: Dict):
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _process_env_vars(self, obj: Any) -> Any:
        """
        Recursively process environment variable substitutions.

        SECURITY: Only allowlisted environment variables can be substituted.
        """
        if isinstance(obj, str):
            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ''

                if var_name not in ALLOWED_ENV_VARS:
                    return default

                return os.environ.get(var_name, default)

            return ENV_PATTERN.sub(replace, obj)

        elif isinstance(obj, dict):
            return {k: self._process_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [self._process_env_vars(item) for item in obj]

        return obj

    def _get_defaults(self) -> Dict:
        """Return default configuration."""
        return {
            'wizard': {
                'flow': 'coach',
            },
            'submission': {
                'failure_policy': 'open',
                'include_slug': False,
            },
            'store': {
                'backend': 'supabase',
                'table': 'leads',
                'leads_dir': 'leads/data',
                'supabase_url': '',
                'supabase_key': '',
            },
            'handoff': {
                'mode': 'url',
                'base_url': 'https://wa.me',
                'coach_phone': '254746110624',
                'session_ttl_seconds': 300,
            },
            'logging': {
                'level': 'INFO',
            },
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example: config.get('handoff.base_url')
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_bool(self, key_path: str, default: bool = False) -> bool:
        value = self.get(key_path, default)
        if isinstance(value, str):
            return value.strip().lower() in TRUE_VALUES
        return bool(value)

    def get_path(self, key_path: str) -> Optional[Path]:
        """Get a path setting; relative paths resolve against the project root."""
        raw_path = self.get(key_path, '')
        if not raw_path:
            return None
        path = Path(os.path.expanduser(raw_path))
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path.resolve()

    def get_failure_policy(self) -> str:
        """
        Submission failure policy for this deployment: 'open' or 'closed'.

        Raises ValueError for anything else so a misconfigured deployment
        fails at startup instead of mixing policies.
        """
        policy = str(self.get('submission.failure_policy', 'open')).strip().lower()
        if policy not in FAILURE_POLICIES:
            raise ValueError(f"submission.failure_policy must be one of {FAILURE_POLICIES}, got '{policy}'")
        return policy

    def get_handoff_mode(self) -> str:
        mode = str(self.get('handoff.mode', 'url')).strip().lower()
        if mode not in HANDOFF_MODES:
            raise ValueError(f"handoff.mode must be one of {HANDOFF_MODES}, got '{mode}'")
        return mode

    @property
    def all(self) -> Dict:
        """Return a copy of the full configuration dictionary."""
        return copy.deepcopy(self._config)


# Global config instance
config = Config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config
