"""
Configuration settings for the case review backend
"""

import os
import logging

import resend

logger = logging.getLogger(__name__)

def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

# Environment configuration
ENV = os.getenv("ENV", "PROD")  # PROD, QA or DEV
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Workflow behaviour
AUTO_INTAKE_ASSIGNMENT = _env_flag("AUTO_INTAKE_ASSIGNMENT", True)
ENFORCE_REQUIRED_DOCUMENTS = _env_flag("ENFORCE_REQUIRED_DOCUMENTS", False)
SEED_DEMO_CASES = _env_flag("SEED_DEMO_CASES", False)

# Decision notifications via Resend
NOTIFY_ON_DECISION = _env_flag("NOTIFY_ON_DECISION", False)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
FROM_EMAIL = os.getenv("FROM_EMAIL", "no-reply@example.com")

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

logger.info(f"Environment: {ENV}")

if RESEND_API_KEY:
    # Configure Resend
    resend.api_key = RESEND_API_KEY
elif NOTIFY_ON_DECISION:
    logger.warning("NOTIFY_ON_DECISION is set but RESEND_API_KEY is missing - decision emails disabled")

def notifications_enabled() -> bool:
    """Decision emails need both the flag and a Resend key"""
    return NOTIFY_ON_DECISION and bool(RESEND_API_KEY)
