"""
Settings Module

Reads SplitIt configuration from the environment. A ``.env`` file next to
the application (or one directory up) is loaded first.

Environment:
    SPLITIT_STORE: "memory" (default) or "firestore"
    SPLITIT_GROUP_ID: Firestore group document id (default "default")
    FIREBASE_CREDENTIALS: Path to a service-account JSON file
    SPLITIT_STRICT: "1", "true" or "yes" rejects suspicious expenses
    SPLITIT_LOG_LEVEL: Logging level name (default "INFO")
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / '.env'
if not env_path.exists():
    env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings:
    """Snapshot of the configuration taken when the instance is created."""

    def __init__(
        self,
        store_backend: Optional[str] = None,
        group_id: Optional[str] = None,
        firebase_credentials: Optional[str] = None,
        strict: Optional[bool] = None,
        log_level: Optional[str] = None
    ):
        self.store_backend = (store_backend or os.getenv('SPLITIT_STORE') or 'memory').strip().lower()
        self.group_id = group_id or os.getenv('SPLITIT_GROUP_ID') or 'default'
        self.firebase_credentials = firebase_credentials or os.getenv('FIREBASE_CREDENTIALS')
        if strict is None:
            strict = os.getenv('SPLITIT_STRICT', '').strip().lower() in _TRUE_VALUES
        self.strict = strict
        self.log_level = (log_level or os.getenv('SPLITIT_LOG_LEVEL') or 'INFO').upper()

    def __repr__(self) -> str:
        return f"Settings(store='{self.store_backend}', group='{self.group_id}', strict={self.strict})"
