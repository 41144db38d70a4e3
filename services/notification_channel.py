from config import settings
from typing import Optional
from pydantic import BaseModel
import requests
import logging

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """The channel could not be reached or is not configured"""


class NotificationResult(BaseModel):
    ok: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class NotificationChannel:
    """Outbound channel for rendered reminders (single fixed recipient)"""

    def send(self, text: str) -> NotificationResult:
        raise NotImplementedError


class TelegramChannel(NotificationChannel):
    """Delivers HTML-formatted messages through the Telegram Bot API"""

    def __init__(
        self,
        bot_token: str = None,
        chat_id: str = None,
        timeout: float = None,
        api_base: str = None,
        session: requests.Session = None,
    ):
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_CHAT_ID
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self.api_base = (api_base or settings.TELEGRAM_API_BASE).rstrip("/")
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def send(self, text: str) -> NotificationResult:
        """Send one message

        Returns:
            NotificationResult with ok=False when Telegram answers but rejects the message

        Raises:
            NotificationError: credentials missing or the API could not be reached
        """
        if not self.is_configured:
            raise NotificationError("Telegram not configured (TELEGRAM_BOT_TOKEN / TELEGRAM_CHAT_ID)")

        url = f"{self.api_base}/bot{self.bot_token}/sendMessage"
        try:
            response = self.session.post(
                url,
                json={
                    "chat_id": self.chat_id,
                    "text": text,
                    "parse_mode": "HTML",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise NotificationError(f"Telegram request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            # Non-JSON body (proxy error page etc.)
            return NotificationResult(ok=False, error=f"HTTP {response.status_code}: invalid JSON response")

        if not body.get("ok"):
            error = body.get("description") or f"HTTP {response.status_code}"
            logger.warning(f"Telegram API rejected message: {error}")
            return NotificationResult(ok=False, error=error)

        return NotificationResult(
            ok=True,
            message_id=(body.get("result") or {}).get("message_id"),
        )
