"""
Firebase Config Module

Lazily initialises the Firebase Admin SDK and hands out the Firestore
client used by the store.
"""

import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)

_db = None


def get_db(credentials_path: Optional[str] = None):
    """
    Return the Firestore client, initialising Firebase on first use.

    Args:
        credentials_path: Service-account JSON file. Without it Firebase is
            considered unconfigured.

    Returns:
        The Firestore client, or None when Firebase is not configured or
        the credentials cannot be loaded.
    """
    global _db
    if _db is not None:
        return _db

    if not credentials_path:
        return None

    try:
        try:
            firebase_admin.get_app()
        except ValueError:
            firebase_admin.initialize_app(credentials.Certificate(credentials_path))
        _db = firestore.client()
    except (OSError, ValueError) as e:
        logger.error("Could not initialise Firebase from %s: %s", credentials_path, e)
        return None

    return _db
