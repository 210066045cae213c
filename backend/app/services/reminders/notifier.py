"""
Reminder delivery channels.

The notifier only delivers. Whether and when to send is decided by the
reminder scheduler. Every failure is raised as DeliveryError.
"""
from email.message import EmailMessage
import logging
import smtplib

from ... import config
from ...models.deadlines import ReminderMessage
from ..errors import DeliveryError


logger = logging.getLogger(__name__)


class Notifier:
    """Base delivery channel."""

    def send(self, message: ReminderMessage) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Development/demo channel: writes the message to the log."""

    def send(self, message: ReminderMessage) -> None:
        if not message.recipient:
            raise DeliveryError(f"No recipient for application {message.application_id}")
        logger.info(
            f"[log-only delivery] to={message.recipient} subject={message.subject}\n{message.body}"
        )


class SmtpNotifier(Notifier):
    """Sends reminders as plain-text email over SMTP with STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.timeout = timeout

    def send(self, message: ReminderMessage) -> None:
        if not message.recipient:
            raise DeliveryError(f"No recipient for application {message.application_id}")

        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = self.from_email
        email["To"] = message.recipient
        email.set_content(message.body)
        if message.html_body:
            email.add_alternative(message.html_body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery to {message.recipient} failed: {e}") from e

        logger.info(f"Reminder email sent to {message.recipient}")


def get_notifier() -> Notifier:
    """FastAPI dependency - notifier for the configured channel."""
    if config.get_notification_mode() == config.NOTIFICATION_MODE_SMTP:
        username, password = config.get_smtp_credentials()
        return SmtpNotifier(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            username=username,
            password=password,
            from_email=config.FROM_EMAIL,
        )
    return LogNotifier()
