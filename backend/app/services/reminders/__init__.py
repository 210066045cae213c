"""
Reminder Services

Threshold reminder scheduling, message templates and delivery channels.
"""

from .scheduler import ReminderScheduler, REMINDER_THRESHOLDS
from .notifier import Notifier, LogNotifier, SmtpNotifier, get_notifier
from .templates import build_deadline_reminder

__all__ = [
    'ReminderScheduler',
    'REMINDER_THRESHOLDS',
    'Notifier',
    'LogNotifier',
    'SmtpNotifier',
    'get_notifier',
    'build_deadline_reminder',
]
