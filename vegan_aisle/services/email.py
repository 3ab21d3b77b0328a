"""Transactional email via the Postmark API."""

import logging
from html import escape

import httpx

from vegan_aisle.config import get_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending transactional email through Postmark."""

    POSTMARK_API_URL = "https://api.postmarkapp.com/email"

    def __init__(self) -> None:
        """Initialize the email service."""
        settings = get_settings()
        self.api_key = settings.postmark_api_key
        self.from_email = settings.postmark_from_email
        self.client_url = settings.client_url.rstrip("/")
        self._configured = bool(self.api_key)

    @property
    def is_configured(self) -> bool:
        """Check if Postmark is configured."""
        return self._configured

    async def send_email(self, to: str, subject: str, html_body: str, text_body: str) -> bool:
        """Send one email.

        Without an API key the message is logged and treated as delivered, so
        local development works without a Postmark account.

        Returns:
            True if the message was accepted, False otherwise
        """
        if not self._configured:
            logger.info(f"Postmark not configured; email to {to} not sent: {subject}")
            return True

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(
                    self.POSTMARK_API_URL,
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/json",
                        "X-Postmark-Server-Token": self.api_key,
                    },
                    json={
                        "From": self.from_email,
                        "To": to,
                        "Subject": subject,
                        "HtmlBody": html_body,
                        "TextBody": text_body,
                        "MessageStream": "outbound",
                    },
                )
                response.raise_for_status()
            logger.info(f"Sent email to {to}: {subject}")
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

    def build_reset_url(self, token: str) -> str:
        return f"{self.client_url}/reset-password?token={token}"

    async def send_password_reset_email(
        self, to: str, token: str, display_name: str | None = None
    ) -> bool:
        """Send the password reset link."""
        reset_url = self.build_reset_url(token)
        greeting = f"Hi {display_name}," if display_name else "Hi,"
        text_body = (
            f"{greeting}\n\n"
            "We received a request to reset your password for The Vegan Aisle.\n"
            f"Reset it here (the link expires in 1 hour):\n\n{reset_url}\n\n"
            "If you didn't ask for this, you can ignore this email."
        )
        html_body = (
            f"<p>{escape(greeting)}</p>"
            "<p>We received a request to reset your password for The Vegan Aisle.</p>"
            f'<p><a href="{escape(reset_url)}">Reset your password</a> '
            "(the link expires in 1 hour).</p>"
            "<p>If you didn't ask for this, you can ignore this email.</p>"
        )
        return await self.send_email(
            to, "Reset your Vegan Aisle password", html_body, text_body
        )

    async def send_password_changed_email(self, to: str, display_name: str | None = None) -> bool:
        """Confirm a completed password reset."""
        greeting = f"Hi {display_name}," if display_name else "Hi,"
        text_body = (
            f"{greeting}\n\nYour Vegan Aisle password was just changed. "
            "If this wasn't you, reset your password right away."
        )
        html_body = (
            f"<p>{escape(greeting)}</p><p>Your Vegan Aisle password was just changed. "
            "If this wasn't you, reset your password right away.</p>"
        )
        return await self.send_email(
            to, "Your Vegan Aisle password was changed", html_body, text_body
        )


def get_email_service() -> EmailService:
    """Get email service instance."""
    return EmailService()
