"""
Transactional e-mail via Resend.

When ``RESEND_API_KEY`` is not configured the message is only logged, which
is what development and test environments rely on. Sends are scheduled as
FastAPI background tasks, so failures are logged rather than raised.
"""

from __future__ import annotations

import html
import logging

import resend

from streamline.core.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html_content: str) -> dict | None:
    if not settings.RESEND_API_KEY:
        logger.info("Mock e-mail to %s: %s", to_email, subject)
        return None

    resend.api_key = settings.RESEND_API_KEY
    try:
        response = resend.Emails.send(
            {
                "from": settings.MAIL_FROM,
                "to": [to_email],
                "subject": subject,
                "html": html_content,
            }
        )
    except Exception as exc:
        logger.error("Failed to send e-mail to %s: %s", to_email, exc, exc_info=True)
        return None

    logger.info("E-mail sent to %s (id=%s)", to_email, response.get("id"))
    return response


def _layout(heading: str, body: str, cta_url: str | None = None, cta_text: str | None = None) -> str:
    button = (
        f'<p style="margin:32px 0;text-align:center">'
        f'<a href="{html.escape(cta_url)}" style="background:#2563eb;color:#fff;'
        f'padding:12px 24px;border-radius:8px;text-decoration:none">{html.escape(cta_text)}</a></p>'
        if cta_url and cta_text
        else ""
    )
    return (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;color:#374151">'
        f'<h2 style="color:#111827">{html.escape(heading)}</h2>'
        f"{body}{button}"
        '<p style="color:#6b7280;font-size:13px">The Streamline Team</p>'
        "</div>"
    )


def invitation_url(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/invite/{token}"


def send_employee_invitation(
    to_email: str,
    full_name: str,
    company_name: str,
    role: str,
    token: str,
    invited_by: str,
) -> dict | None:
    subject = f"You're invited to join {company_name} on Streamline"
    body = (
        f"<p>Hi {html.escape(full_name)},</p>"
        f"<p>{html.escape(invited_by)} has invited you to join "
        f"<strong>{html.escape(company_name)}</strong> on Streamline as "
        f"<strong>{html.escape(role)}</strong>.</p>"
        f"<p>This invitation expires in {settings.INVITATION_EXPIRE_DAYS} days.</p>"
    )
    return send_email(
        to_email,
        subject,
        _layout(subject, body, invitation_url(token), "Accept invitation"),
    )


def send_welcome_email(to_email: str, company_name: str) -> dict | None:
    subject = f"Welcome to Streamline - your {company_name} account is ready!"
    body = (
        f"<p>Your <strong>{html.escape(company_name)}</strong> account has been created.</p>"
        f"<p>Your {settings.TRIAL_DAYS}-day free trial has started. During the trial you can "
        "track time with GPS verification, follow your team on the live map, "
        "run payroll reports and invite your employees.</p>"
    )
    return send_email(
        to_email,
        subject,
        _layout("Welcome to Streamline", body, settings.APP_URL, "Open your dashboard"),
    )
