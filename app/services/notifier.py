# app/services/notifier.py
"""
Outbound alert e-mail.

send_alert_email(to, subject, title, html_body) wraps the body in the shared
HTML layout and hands it to the backend selected by MAIL_BACKEND:
  log   : only logs the message (default, local runs)
  smtp  : stdlib smtplib run in a thread executor
  resend: Resend HTTP API through httpx
Any delivery failure raises NotificationError; callers decide whether to swallow it.
"""

import asyncio
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape

import httpx

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationError(RuntimeError):
    """Raised when an alert e-mail could not be delivered."""


_EMAIL_TEMPLATE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="margin:0;padding:0;background:#0f172a;">
<table width="100%" cellpadding="0" cellspacing="0" style="background:#0f172a;padding:32px 0;">
  <tr><td align="center">
    <table width="100%" cellpadding="0" cellspacing="0" style="max-width:580px;background:#0b1120;border-radius:18px;padding:28px 24px;border:1px solid #1f2937;font-family:system-ui,-apple-system,'Segoe UI',sans-serif;color:#e5e7eb;">
      <tr><td align="center" style="padding-bottom:22px;border-bottom:1px solid #1f2937;">
        {logo}
        <div style="font-size:12px;color:#9ca3af;margin-top:4px;">{subtitle}</div>
      </td></tr>
      <tr><td style="padding-top:20px;padding-bottom:4px;">
        <h1 style="margin:0 0 10px 0;font-size:20px;font-weight:600;color:#f9fafb;">{title}</h1>
        {body}
      </td></tr>
      <tr><td style="padding-top:20px;border-top:1px solid #1f2937;text-align:center;">
        <p style="margin:0 0 4px 0;font-size:11px;color:#4b5563;">Automated message, please do not reply.</p>
        <p style="margin:0;font-size:11px;color:#4b5563;">&copy; {year} {app_name} &middot; Fleet management platform</p>
      </td></tr>
    </table>
  </td></tr>
</table>
</body>
</html>"""


def render_email(title: str, html_body: str, subtitle: str = "Automatic system notification") -> str:
    """Full HTML document for an alert. title/subtitle are escaped, html_body is trusted."""
    app_name = escape(settings.MAIL_NAME)
    logo = ""
    if settings.ALERTS_LOGO_URL.strip():
        logo = (
            f'<img src="{escape(settings.ALERTS_LOGO_URL.strip())}" alt="{app_name}" '
            f'style="max-width:160px;max-height:60px;margin-bottom:6px;display:block;" />'
        )
    return _EMAIL_TEMPLATE.format(
        logo=logo,
        subtitle=escape(subtitle),
        title=escape(title),
        body=html_body,
        year=datetime.utcnow().year,
        app_name=app_name,
    )


def _sender() -> str:
    return formataddr((settings.MAIL_NAME.strip(), settings.MAIL_FROM.strip()))


def _send_smtp_sync(to: list[str], subject: str, html: str) -> None:
    """Synchronous SMTP send, executed in a thread pool."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _sender()
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html, "html", "utf-8"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.MAIL_TIMEOUT_SECONDS) as server:
        server.ehlo()
        if settings.SMTP_PORT != 25:
            server.starttls()
            server.ehlo()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.MAIL_FROM, to, msg.as_string())


async def _send_smtp(to: list[str], subject: str, html: str) -> None:
    if not settings.SMTP_HOST:
        raise NotificationError("SMTP_HOST is not configured")
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, _send_smtp_sync, to, subject, html)
    except (smtplib.SMTPException, OSError) as exc:
        raise NotificationError(f"SMTP delivery failed: {exc}") from exc


async def _send_resend(to: list[str], subject: str, html: str) -> None:
    if not settings.RESEND_API_KEY:
        raise NotificationError("RESEND_API_KEY is not configured")
    payload = {"from": _sender(), "to": to, "subject": subject, "html": html}
    headers = {"Authorization": f"Bearer {settings.RESEND_API_KEY}"}
    try:
        async with httpx.AsyncClient(timeout=settings.MAIL_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.RESEND_API_URL, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise NotificationError(f"Resend request failed: {exc}") from exc
    if response.status_code >= 400:
        raise NotificationError(f"Resend returned HTTP {response.status_code}: {response.text[:200]}")


async def send_alert_email(to: list[str], subject: str, title: str, html_body: str) -> None:
    """Deliver one alert e-mail to all recipients. Raises NotificationError on failure."""
    recipients = [addr for addr in to if addr]
    if not recipients:
        return

    html = render_email(title, html_body)
    backend = settings.MAIL_BACKEND.lower()

    if backend == "smtp":
        await _send_smtp(recipients, subject, html)
    elif backend == "resend":
        await _send_resend(recipients, subject, html)
    elif backend == "log":
        logger.info(f"[MAIL][log] to={recipients} subject={subject!r}")
        return
    else:
        raise NotificationError(f"Unknown MAIL_BACKEND '{settings.MAIL_BACKEND}'")

    logger.info(f"[MAIL][{backend}] sent to {len(recipients)} recipient(s): {subject!r}")
