"""Password-reset email delivery over async SMTP.

Learn: The notifier is fire-and-forget from the auth service's point of
view. AuthService commits the reset token *before* calling it and only
logs if sending fails, so a flaky mail server never loses a token.

Uses aiosmtplib (STARTTLS on 587 by default). When GAMEGAUGE_SMTP_HOST
is empty — local dev, tests — the message is logged and skipped.
"""

from email.message import EmailMessage
from typing import Optional
from urllib.parse import urlencode

import aiosmtplib
import structlog

from gamegauge.config import settings

logger = structlog.get_logger()

RESET_SUBJECT = "GameGauge - Password reset"


def build_reset_link(token: str, frontend_url: Optional[str] = None) -> str:
    base = (frontend_url or settings.frontend_url).rstrip("/")
    return f"{base}/reset-password?{urlencode({'token': token})}"


class EmailNotifier:
    """Sends reset links by email."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: Optional[bool] = None,
        from_email: Optional[str] = None,
    ):
        self.host = host if host is not None else settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.use_tls = use_tls if use_tls is not None else settings.smtp_use_tls
        self.from_email = from_email or settings.smtp_from_email

    def build_message(self, to_email: str, token: str) -> EmailMessage:
        link = build_reset_link(token)
        message = EmailMessage()
        message["From"] = self.from_email
        message["To"] = to_email
        message["Subject"] = RESET_SUBJECT
        message.set_content(
            "Someone asked to reset the password of your GameGauge account.\n\n"
            f"To choose a new password, open this link (valid for "
            f"{settings.reset_token_expire_minutes} minutes):\n{link}\n\n"
            "If you did not ask for this, you can ignore this email."
        )
        return message

    async def send_reset_link(self, to_email: str, token: str) -> None:
        """Send the reset link. Raises aiosmtplib.SMTPException on failure."""
        if not self.host:
            logger.info("email.skipped", reason="smtp_not_configured", to=to_email)
            return

        message = self.build_message(to_email, token)
        await aiosmtplib.send(
            message,
            hostname=self.host,
            port=self.port,
            username=self.username or None,
            password=self.password or None,
            start_tls=self.use_tls,
        )
        logger.info("email.reset_link_sent", to=to_email)


def get_notifier() -> EmailNotifier:
    """FastAPI dependency — overridden in tests with a recording fake."""
    return EmailNotifier()
