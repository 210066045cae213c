"""
Subsidy Deadline Engine - Runtime Configuration

Values are read from environment variables. Helpers that callers may want
to re-read at runtime (notification mode, current time) read the
environment on every call.
"""
import os
from datetime import datetime
from zoneinfo import ZoneInfo


DEADLINE_TIMEZONE = os.getenv("DEADLINE_TIMEZONE", "Asia/Tokyo")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Base URL used for dashboard links in reminder messages
APP_URL = os.getenv("APP_URL", "http://localhost:3000")


# =============================================================================
# NOTIFICATION CHANNEL
# =============================================================================

NOTIFICATION_MODE_LOG = "log"
NOTIFICATION_MODE_SMTP = "smtp"

SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
FROM_EMAIL = os.getenv("FROM_EMAIL", "noreply@subsidysmart.com")


def get_notification_mode() -> str:
    """
    Resolve the delivery channel.

    "log" writes reminders to the application log (development/demo).
    "smtp" sends real email, but only when SMTP credentials are configured.
    """
    mode = os.getenv("NOTIFICATION_MODE", NOTIFICATION_MODE_LOG).strip().lower()
    if mode == NOTIFICATION_MODE_SMTP and not os.getenv("SMTP_USER"):
        return NOTIFICATION_MODE_LOG
    if mode not in (NOTIFICATION_MODE_LOG, NOTIFICATION_MODE_SMTP):
        return NOTIFICATION_MODE_LOG
    return mode


def get_smtp_credentials() -> tuple:
    return os.getenv("SMTP_USER", ""), os.getenv("SMTP_PASSWORD", "")


def current_time() -> datetime:
    """Wall-clock time in the deadline timezone, without tzinfo."""
    return datetime.now(ZoneInfo(DEADLINE_TIMEZONE)).replace(tzinfo=None)
