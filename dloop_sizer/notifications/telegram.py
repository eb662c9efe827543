"""Telegram notification service."""
import html
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig

logger = logging.getLogger(__name__)

SEND_TIMEOUT_SECONDS = 10


class TelegramNotifier:
    """Send sizing outcomes via Telegram bots.

    Two bots share one chat: the alert bot (unmuted) for operational errors,
    the log bot for routine decisions.
    """

    def __init__(self, config: TelegramConfig) -> None:
        self.alert_bot_token = config.alert_bot_token
        self.log_bot_token = config.log_bot_token
        self.chat_id = config.chat_id

    async def _send_message(
        self, message: str, bot_token: str, silent: bool = False
    ) -> bool:
        """Send Telegram message using specified bot."""
        if not bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            # Error texts can carry '<' from reprs; parse_mode is HTML
            "text": html.escape(message, quote=False),
            "parse_mode": "HTML",
            "disable_notification": silent,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        timeout = aiohttp.ClientTimeout(total=SEND_TIMEOUT_SECONDS)

        async with aiohttp.ClientSession(connector=connector, timeout=timeout) as session:
            async with session.post(url, json=payload) as response:
                if response.status == 200:
                    return True
                logger.error("Failed to send Telegram message: %s", response.status)
                return False

    async def send_alert(self, message: str, subject: str = "") -> bool:
        """Send an operational alert (unmuted bot)."""
        text = f"{subject}\n\n{message}" if subject else message
        if await self._send_message(text, self.alert_bot_token, silent=False):
            logger.info("Telegram alert sent")
            return True
        return False

    async def send_log(self, message: str, silent: bool = True) -> bool:
        """Send a decision log (logs bot)."""
        if await self._send_message(message, self.log_bot_token, silent=silent):
            logger.debug("Telegram log sent")
            return True
        return False
