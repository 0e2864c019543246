#!/usr/bin/env python3
"""
Atomic file operations for the file-backed lead store.

Ensures lead files are written completely or not at all.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path

import yaml


@contextmanager
def atomic_write(target_path: Path, mode: str = 'w'):
    """
    Context manager for atomic file writes.

    Writes to a temp file first, then atomically moves to target.
    If an exception occurs, the temp file is cleaned up and target is unchanged.

    Usage:
        with atomic_write(Path('lead.yaml')) as f:
            yaml.dump(data, f)
    """
    target_path = Path(target_path)
    target_dir = target_path.parent
    target_dir.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so the rename stays on one filesystem
    fd, temp_path = tempfile.mkstemp(
        dir=target_dir,
        prefix=f'.{target_path.name}.',
        suffix='.tmp'
    )

    try:
        with os.fdopen(fd, mode) as f:
            yield f

        os.replace(temp_path, target_path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def safe_write_yaml(path: Path, data: dict):
    """Safely write YAML data atomically."""
    with atomic_write(path) as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
