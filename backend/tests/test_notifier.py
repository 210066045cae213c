"""
Tests for reminder templates and delivery channels.
"""
import smtplib
import pytest
from datetime import date
from unittest.mock import MagicMock, patch

from app.models.deadlines import ApplicationSnapshot, ReminderMessage
from app.services.errors import DeliveryError
from app.services.reminders import LogNotifier, SmtpNotifier, build_deadline_reminder, get_notifier


SNAPSHOT = ApplicationSnapshot(
    application_id="app-1",
    company_name="Acme Staffing",
    contact_email="hr@acme.example",
    subsidy_type="career_up",
    application_deadline_start=date(2024, 8, 16),
    application_deadline_end=date(2024, 10, 16),
)


class TestTemplates:

    def test_reminder_content(self):
        message = build_deadline_reminder(SNAPSHOT, 3)

        assert message.recipient == "hr@acme.example"
        assert message.subject.startswith("[URGENT]")
        assert "Acme Staffing" in message.subject
        assert "2024年10月16日 (3 days left)" in message.body
        assert "/applications" in message.body

    def test_notice_label_inside_two_weeks(self):
        assert build_deadline_reminder(SNAPSHOT, 10).subject.startswith("[NOTICE]")

    def test_operator_message_section_only_when_given(self):
        assert "Message from the administrator" not in build_deadline_reminder(SNAPSHOT, 7).body
        assert "Call us" in build_deadline_reminder(SNAPSHOT, 7, "Call us").body


class TestLogNotifier:

    def test_requires_recipient(self):
        message = ReminderMessage(recipient="", subject="s", body="b", application_id="app-1")
        with pytest.raises(DeliveryError):
            LogNotifier().send(message)


class TestSmtpNotifier:

    def _notifier(self):
        return SmtpNotifier("smtp.example", 587, "user", "secret", "noreply@example.com")

    @patch("app.services.reminders.notifier.smtplib.SMTP")
    def test_sends_with_starttls(self, smtp_class):
        smtp = MagicMock()
        smtp_class.return_value.__enter__.return_value = smtp

        self._notifier().send(build_deadline_reminder(SNAPSHOT, 7))

        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("user", "secret")
        sent = smtp.send_message.call_args.args[0]
        assert sent["To"] == "hr@acme.example"
        assert sent["From"] == "noreply@example.com"

    @patch("app.services.reminders.notifier.smtplib.SMTP")
    def test_smtp_error_becomes_delivery_error(self, smtp_class):
        smtp_class.side_effect = smtplib.SMTPConnectError(421, "unavailable")

        with pytest.raises(DeliveryError):
            self._notifier().send(build_deadline_reminder(SNAPSHOT, 7))


class TestChannelSelection:

    def test_log_by_default(self, monkeypatch):
        monkeypatch.delenv("NOTIFICATION_MODE", raising=False)
        assert isinstance(get_notifier(), LogNotifier)

    def test_smtp_without_credentials_falls_back_to_log(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_MODE", "smtp")
        monkeypatch.delenv("SMTP_USER", raising=False)
        assert isinstance(get_notifier(), LogNotifier)

    def test_smtp_with_credentials(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_MODE", "smtp")
        monkeypatch.setenv("SMTP_USER", "user")
        monkeypatch.setenv("SMTP_PASSWORD", "secret")

        notifier = get_notifier()

        assert isinstance(notifier, SmtpNotifier)
        assert notifier.username == "user"


class TestHtmlAlternative:

    def test_html_body_mirrors_text(self):
        message = build_deadline_reminder(SNAPSHOT, 3, "Bring the wage ledger")

        assert message.html_body.startswith("<!DOCTYPE html>")
        assert "[URGENT]" in message.html_body
        assert "2024年10月16日" in message.html_body
        assert "Bring the wage ledger" in message.html_body
        assert 'href="http' in message.html_body

    def test_html_escapes_interpolated_values(self):
        snapshot = ApplicationSnapshot(
            application_id="app-2",
            company_name="Smith & Sons <Ltd>",
            contact_email="office@smith.example",
            subsidy_type="career_up",
            application_deadline_start=date(2024, 8, 16),
            application_deadline_end=date(2024, 10, 16),
        )

        html = build_deadline_reminder(snapshot, 7, "<script>alert(1)</script>").html_body

        assert "Smith &amp; Sons &lt;Ltd&gt;" in html
        assert "<script>" not in html

    @patch("app.services.reminders.notifier.smtplib.SMTP")
    def test_smtp_sends_text_and_html_parts(self, smtp_class):
        smtp = MagicMock()
        smtp_class.return_value.__enter__.return_value = smtp

        SmtpNotifier("smtp.example", 587, "user", "secret", "noreply@example.com").send(
            build_deadline_reminder(SNAPSHOT, 7)
        )

        sent = smtp.send_message.call_args.args[0]
        assert sent.get_content_type() == "multipart/alternative"
        parts = [part.get_content_type() for part in sent.iter_parts()]
        assert parts == ["text/plain", "text/html"]

    @patch("app.services.reminders.notifier.smtplib.SMTP")
    def test_smtp_plain_text_only_without_html(self, smtp_class):
        smtp = MagicMock()
        smtp_class.return_value.__enter__.return_value = smtp
        message = ReminderMessage(
            recipient="hr@acme.example", subject="s", body="b", application_id="app-1"
        )

        SmtpNotifier("smtp.example", 587, "user", "secret", "noreply@example.com").send(message)

        assert smtp.send_message.call_args.args[0].get_content_type() == "text/plain"
