"""
Utility functions and helpers
"""

import uuid
from datetime import datetime, timezone

def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)

def new_identifier() -> str:
    """Opaque unique identifier for cases and their sub-entities"""
    return str(uuid.uuid4())

def is_blank(value) -> bool:
    return value is None or not str(value).strip()
