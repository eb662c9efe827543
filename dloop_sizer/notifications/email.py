"""Email notification service."""
import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from ..config import EmailConfig

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "dLOOP sizing alert"


class EmailNotifier:
    """Send operational alerts via email. Routine decision logs are not emailed."""

    def __init__(self, config: EmailConfig) -> None:
        self.alert_email = config.alert_email
        self.smtp_server = config.smtp_server
        self.smtp_port = config.smtp_port
        self.sender_email = config.sender_email
        self.sender_password = config.sender_password

    def _deliver(self, msg: MIMEText) -> None:
        with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
            server.starttls()
            server.login(self.sender_email, self.sender_password)
            server.send_message(msg)

    async def send_alert(self, message: str, subject: str = "") -> bool:
        """Send email alert."""
        if not self.alert_email:
            logger.debug("No alert email configured, skipping email")
            return False

        if not self.sender_email or not self.sender_password:
            logger.warning("Email credentials not configured")
            return False

        msg = MIMEText(message, "plain")
        msg["From"] = self.sender_email
        msg["To"] = self.alert_email
        msg["Subject"] = subject or DEFAULT_SUBJECT

        try:
            # smtplib blocks; keep the event loop free
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email: %s", e)
            return False

        logger.info("Alert email sent to %s", self.alert_email)
        return True

    async def send_log(self, message: str, silent: bool = True) -> bool:
        """Decision logs stay on the Telegram log channel; no-op."""
        return False
