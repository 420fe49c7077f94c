"""Email dispatch over SMTP.

``send`` runs the blocking smtplib session in a worker thread with a socket
timeout. Callers on best-effort paths schedule it through
``negosyo.core.async_tasks.notify`` so delivery never blocks a transition.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from decimal import Decimal
from email.message import EmailMessage
from email.utils import make_msgid
from html import escape

from negosyo.config import settings
from negosyo.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _send_sync(message: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.email_timeout_seconds) as smtp:
        smtp.starttls()
        if settings.smtp_username:
            smtp.login(settings.smtp_username, settings.smtp_password)
        smtp.send_message(message)


async def send(to: str, subject: str, html_body: str) -> str:
    """Send one HTML email and return its Message-ID."""
    if not to:
        raise UpstreamError("email", "no recipient address")
    message = EmailMessage()
    message["From"] = settings.email_from
    message["To"] = to
    message["Subject"] = subject
    message_id = make_msgid(domain="negosyo.digital")
    message["Message-ID"] = message_id
    message.set_content("This message requires an HTML-capable email client.")
    message.add_alternative(html_body, subtype="html")

    try:
        await asyncio.wait_for(
            asyncio.to_thread(_send_sync, message),
            timeout=settings.email_timeout_seconds + 5,
        )
    except (asyncio.TimeoutError, TimeoutError) as e:
        raise UpstreamError("email", "SMTP session timed out", timeout=True) from e
    except (smtplib.SMTPException, OSError) as e:
        raise UpstreamError("email", str(e)) from e
    logger.info("Email sent to %s: %s", to, subject)
    return message_id


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_LAYOUT = """<!DOCTYPE html>
<html><body style="margin:0;padding:0;background:#f3f4f6;font-family:Arial,sans-serif;">
<table width="100%" cellpadding="0" cellspacing="0"><tr><td align="center" style="padding:40px 20px;">
<table width="600" cellpadding="0" cellspacing="0" style="background:#ffffff;border-radius:8px;">
<tr><td style="background:#10b981;padding:32px;text-align:center;border-radius:8px 8px 0 0;">
<h1 style="margin:0;color:#ffffff;font-size:28px;">{title}</h1></td></tr>
<tr><td style="padding:32px;color:#374151;font-size:16px;line-height:24px;">{body}</td></tr>
<tr><td style="padding:20px;text-align:center;color:#9ca3af;font-size:12px;">Negosyo Digital</td></tr>
</table></td></tr></table></body></html>"""


def approval_email(
    *,
    owner_name: str,
    business_name: str,
    amount: Decimal,
    website_url: str | None = None,
) -> tuple[str, str]:
    """Return (subject, html) for the approval notice with payment instructions."""
    preview = ""
    if website_url:
        preview = (
            f'<p>Preview your website here: <a href="{escape(website_url)}">{escape(website_url)}</a></p>'
        )
    body = (
        f"<p>Hi {escape(owner_name)},</p>"
        f"<p>Great news! The website for <strong>{escape(business_name)}</strong> has been approved.</p>"
        f"{preview}"
        '<p style="margin:24px 0;padding:16px;background:#fef3c7;border-radius:8px;">'
        f'Amount due: <strong style="font-size:24px;">&#8369;{amount:,.2f}</strong></p>'
        '<p style="padding:16px;background:#d1fae5;border-radius:8px;">'
        f"<strong>GCash Number:</strong> {escape(settings.payment_gcash_number)}<br>"
        f"<strong>Account Name:</strong> {escape(settings.payment_gcash_name)}</p>"
        "<ol><li>Send payment via GCash using the details above</li>"
        "<li>Reply to this email with a screenshot of your receipt</li>"
        "<li>We will publish your website once payment is confirmed</li></ol>"
    )
    subject = f"Your Website is Ready, {owner_name}!"
    return subject, _LAYOUT.format(title="Your Website is Ready!", body=body)


def website_live_email(*, owner_name: str, business_name: str, url: str) -> tuple[str, str]:
    body = (
        f"<p>Hi {escape(owner_name)},</p>"
        f"<p>The website for <strong>{escape(business_name)}</strong> is now live:</p>"
        f'<p><a href="{escape(url)}" style="color:#10b981;font-weight:bold;">{escape(url)}</a></p>'
        "<p>Share it with your customers!</p>"
    )
    return f"{business_name} is now online", _LAYOUT.format(title="Your Website is Live!", body=body)
