"""Database module for the kiosk CMS.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from kiosk.db.engine import create_db_engine, get_engine
from kiosk.db.models import UPLOAD_KINDS, Base, Bubble, KioskHome, Media, MediaKind, Speaker
from kiosk.db.session import create_session_factory, get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "get_db",
    "transaction",
    # Base
    "Base",
    # Enums
    "MediaKind",
    "UPLOAD_KINDS",
    # Models
    "Media",
    "Bubble",
    "Speaker",
    "KioskHome",
]
