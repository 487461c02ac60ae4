"""Email service for sending transactional emails."""

from __future__ import annotations

import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from flask import current_app


def build_setup_url(token: str) -> str:
    base = current_app.config.get('FRONTEND_URL', 'http://localhost:3000').rstrip('/')
    return f"{base}/setup-password?token={token}"


def send_invite_email(email: str, token: str, role: str, expires_at: datetime) -> bool:
    """
    Send an invitation email with the password setup link.

    Args:
        email: Invitee address
        token: Opaque invite token
        role: Role the account will be created with
        expires_at: When the invite stops being valid

    Returns:
        True if email sent (or logged in development), False otherwise
    """
    setup_url = build_setup_url(token)
    subject = "You're invited to the Landing Page Builder"

    html_body = f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #4f46e5;">You're invited</h2>
                <p>You have been invited to join as <strong>{role}</strong>.</p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{setup_url}"
                       style="background-color: #4f46e5; color: white; padding: 12px 24px;
                              text-decoration: none; border-radius: 4px; display: inline-block;">
                        Set up your password
                    </a>
                </div>
                <p>Or copy and paste this link into your browser:</p>
                <p style="word-break: break-all; color: #4f46e5;">{setup_url}</p>
                <p><strong>This link expires on {expires_at:%Y-%m-%d %H:%M} UTC.</strong></p>
            </div>
        </body>
    </html>
    """

    text_body = f"""
You're invited

You have been invited to join as {role}.

Set up your password here:
{setup_url}

This link expires on {expires_at:%Y-%m-%d %H:%M} UTC.
    """

    return _send_email(
        to_email=email,
        subject=subject,
        html_body=html_body,
        text_body=text_body
    )


def _send_email(to_email: str, subject: str, html_body: str, text_body: str) -> bool:
    """Send via SMTP when EMAIL_ENABLED, otherwise log the message."""
    config = current_app.config

    if not config.get('EMAIL_ENABLED'):
        current_app.logger.info(f"""
        ========== EMAIL (Development Mode) ==========
        To: {to_email}
        Subject: {subject}

        {text_body}
        ==============================================
        """)
        return True

    smtp_host = config.get('SMTP_HOST')
    smtp_user = config.get('SMTP_USER')
    smtp_password = config.get('SMTP_PASSWORD')
    if not all([smtp_host, smtp_user, smtp_password]):
        current_app.logger.warning("Email credentials not configured")
        return False

    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = config.get('FROM_EMAIL', 'noreply@example.com')
    msg['To'] = to_email
    msg.attach(MIMEText(text_body, 'plain'))
    msg.attach(MIMEText(html_body, 'html'))

    try:
        with smtplib.SMTP(smtp_host, int(config.get('SMTP_PORT', 587))) as server:
            server.starttls()
            server.login(smtp_user, smtp_password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.error(f"Failed to send email: {e}")
        return False

    current_app.logger.info(f"Email sent successfully to {to_email}")
    return True


__all__ = ["send_invite_email", "build_setup_url"]
