from __future__ import annotations

"""
Email client utilities for the ZeroWaste Market backend.

Responsibilities:
  - Read SMTP configuration from environment variables.
  - Provide send_email(...) for account flows (verification, password reset).
  - Render the small action emails those flows send.

Typical .env configuration:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=noreply@zerowastemarket.web.id
    SMTP_PASSWORD=<app password>
    SMTP_FROM_NAME=ZeroWaste Market
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
"""

import os
import smtplib
from email.message import EmailMessage
from html import escape


def _get_bool_env(name: str, default: bool = False) -> bool:
    """
    Read a boolean env var ("1", "true", "yes", "y" are truthy).
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


# ---------------------------------------------------------------------------
# Configuration: read once at import time
# ---------------------------------------------------------------------------

SMTP_HOST: str | None = os.getenv("SMTP_HOST")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))

SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")

SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", SMTP_USERNAME or "")
SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "ZeroWaste Market")

# SSL (465) or STARTTLS (587), never both
SMTP_USE_TLS: bool = _get_bool_env("SMTP_USE_TLS", default=True)
SMTP_USE_SSL: bool = _get_bool_env("SMTP_USE_SSL", default=False)


def _create_smtp_client() -> smtplib.SMTP:
    if not SMTP_HOST:
        raise RuntimeError("SMTP_HOST is not configured. Please set it in .env.")

    if SMTP_USE_SSL:
        server: smtplib.SMTP = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        if SMTP_USE_TLS:
            server.starttls()

    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an email to a single recipient.

    Raises
    ------
    RuntimeError:
        If required SMTP configuration is missing.
    smtplib.SMTPException:
        If the underlying SMTP connection or send fails.
    """
    if not (SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD):
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    msg = EmailMessage()
    msg["From"] = (
        f"{SMTP_FROM_NAME} <{SMTP_FROM_EMAIL}>" if SMTP_FROM_EMAIL else SMTP_USERNAME
    )
    msg["To"] = to_email
    msg["Subject"] = subject

    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client()
    try:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)  # type: ignore[arg-type]
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass


def render_action_email(greeting: str, intro: str, link: str, action: str) -> tuple[str, str]:
    """
    Build (text_body, html_body) for an email whose point is one link,
    e.g. "Verify email" or "Reset password".
    """
    text_body = f"{greeting}\n\n{intro}\n\n{action}: {link}\n\nZeroWaste Market"
    html_body = (
        f"<p>{escape(greeting)}</p>"
        f"<p>{escape(intro)}</p>"
        f'<p><a href="{escape(link, quote=True)}">{escape(action)}</a></p>'
        "<p>ZeroWaste Market</p>"
    )
    return text_body, html_body
