"""
Reminder message templates.
"""
from html import escape
from typing import Optional

from ...config import APP_URL
from ...models.deadlines import ApplicationSnapshot, ReminderMessage
from ..deadlines import format_localized


SUBSIDY_DISPLAY_NAMES = {
    "career_up": "Career-Up Subsidy (Regular Employment Conversion Course)",
    "work_life_balance": "Work-Life Balance Support Subsidy (Childcare Leave Course)",
    "human_resource_support": "Human Resource Support Subsidy (Employment Management Course)",
}


def subsidy_display_name(subsidy_type: Optional[str]) -> str:
    subsidy_type = subsidy_type or "career_up"
    return SUBSIDY_DISPLAY_NAMES.get(subsidy_type, subsidy_type)


def urgency_label(days_until_deadline: int) -> str:
    if days_until_deadline <= 7:
        return "URGENT"
    if days_until_deadline <= 14:
        return "NOTICE"
    return "INFO"


def build_deadline_reminder(
    snapshot: ApplicationSnapshot,
    days_until_deadline: int,
    operator_message: Optional[str] = None,
) -> ReminderMessage:
    """
    Compose the reminder email for one application.

    The caller must have checked that the snapshot has a contact email.
    """
    subsidy_name = subsidy_display_name(snapshot.subsidy_type)
    label = urgency_label(days_until_deadline)
    deadline = format_localized(snapshot.application_deadline_end)
    company = snapshot.company_name or "Unknown company"

    subject = f"[{label}] {subsidy_name} application deadline - {company}"

    lines = [
        f"[{label}] Subsidy application deadline",
        "",
        f"Dear {company},",
        "",
        f"The application deadline for the {subsidy_name} is approaching.",
        "",
        f"Application deadline: {deadline} ({days_until_deadline} days left)",
        "",
        "Application details",
        f"- Company: {company}",
        f"- Subsidy: {subsidy_name}",
        f"- Application ID: {snapshot.application_id}",
    ]

    if operator_message:
        lines += ["", "Message from the administrator", operator_message]

    dashboard_url = f"{APP_URL.rstrip('/')}/applications"

    lines += [
        "",
        "To complete the application, open the dashboard:",
        dashboard_url,
        "",
        "Important: the subsidy cannot be paid once the application deadline has passed.",
        "",
        "--",
        "This message was sent automatically by SubsidySmart.",
    ]

    return ReminderMessage(
        recipient=snapshot.contact_email,
        subject=subject,
        body="\n".join(lines),
        application_id=snapshot.application_id,
        html_body=_render_html(
            label, company, subsidy_name, deadline, days_until_deadline,
            snapshot.application_id, operator_message, dashboard_url,
        ),
    )


def _render_html(
    label: str,
    company: str,
    subsidy_name: str,
    deadline: str,
    days_until_deadline: int,
    application_id: str,
    operator_message: Optional[str],
    dashboard_url: str,
) -> str:
    """HTML alternative of the reminder body. Every interpolated value is escaped."""
    color = "#dc2626" if label == "URGENT" else "#d97706" if label == "NOTICE" else "#2563eb"

    operator_block = ""
    if operator_message:
        operator_block = (
            '<div style="background:#f3f4f6;padding:12px;margin:16px 0;">'
            "<strong>Message from the administrator</strong>"
            f'<p style="white-space:pre-line;">{escape(operator_message)}</p>'
            "</div>"
        )

    return (
        "<!DOCTYPE html>"
        '<html><body style="font-family:sans-serif;color:#1f2937;">'
        f'<h2 style="color:{color};">[{label}] Subsidy application deadline</h2>'
        f"<p>Dear {escape(company)},</p>"
        f"<p>The application deadline for the {escape(subsidy_name)} is approaching.</p>"
        f'<p style="font-size:18px;"><strong>Application deadline: {escape(deadline)}</strong> '
        f"({days_until_deadline} days left)</p>"
        "<ul>"
        f"<li>Company: {escape(company)}</li>"
        f"<li>Subsidy: {escape(subsidy_name)}</li>"
        f"<li>Application ID: {escape(application_id)}</li>"
        "</ul>"
        f"{operator_block}"
        f'<p><a href="{escape(dashboard_url, quote=True)}">Open the dashboard</a></p>'
        "<p><strong>Important:</strong> the subsidy cannot be paid once the application "
        "deadline has passed.</p>"
        '<hr><p style="font-size:12px;color:#6b7280;">'
        "This message was sent automatically by SubsidySmart.</p>"
        "</body></html>"
    )
