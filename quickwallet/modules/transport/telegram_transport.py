import logging
from typing import Any

import httpx

from quickwallet.configuration.config import settings

logger = logging.getLogger(__name__)


class TelegramTransport:
    """Outbound half of the Telegram Bot API: sendMessage and deleteMessage."""

    def __init__(self, bot_token: str | None = None, client: httpx.AsyncClient | None = None):
        token = bot_token or settings.TELEGRAM_BOT_TOKEN
        if not token:
            logger.warning("TELEGRAM_BOT_TOKEN not configured. Outbound messages will fail.")
        self.client = client or httpx.AsyncClient(
            base_url=f"{settings.TELEGRAM_API_URL}/bot{token}",
            timeout=httpx.Timeout(timeout=settings.HTTP_TIMEOUT, connect=10.0),
        )

    async def send_message(self, chat_id: int, text: str, **opts: Any) -> dict[str, Any]:
        response = await self.client.post("/sendMessage", json={"chat_id": chat_id, "text": text, **opts})
        response.raise_for_status()
        return response.json()

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        """Best-effort delete. Returns False instead of raising when Telegram refuses or is unreachable."""
        try:
            response = await self.client.post(
                "/deleteMessage", json={"chat_id": chat_id, "message_id": message_id}
            )
            response.raise_for_status()
            return bool(response.json().get("result"))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"deleteMessage failed for chat {chat_id}, message {message_id}: {str(e)}")
            return False

    async def close(self):
        await self.client.aclose()
