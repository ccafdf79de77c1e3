import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from quickwallet.common.exceptions import PersistenceFailure
from quickwallet.modules.conversations import messages
from quickwallet.modules.conversations.agent.dialog_agent import DialogAgent
from quickwallet.modules.conversations.dtos.conversation import InboundMessage

logger = logging.getLogger(__name__)


class MessageDispatcher:
    """
    Entry point for inbound chat messages.

    Messages from the same user are handled one at a time, in arrival order;
    different users proceed concurrently. Nothing raised while handling a
    message reaches the transport layer.
    """

    def __init__(self, agent: DialogAgent, transport):
        self.agent = agent
        self.transport = transport
        self._locks: dict[int, asyncio.Lock] = {}
        # dispatches holding or waiting on each user's lock
        self._pending: dict[int, int] = {}

    @asynccontextmanager
    async def _user_turn(self, user_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._pending[user_id] = self._pending.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._pending[user_id] -= 1
            if not self._pending[user_id]:
                del self._pending[user_id]
                del self._locks[user_id]

    async def dispatch(self, message: InboundMessage) -> None:
        async with self._user_turn(message.user_id):
            try:
                replies = await self.agent.handle(message)
            except PersistenceFailure:
                logger.error(f"Record store unavailable while handling user {message.user_id}", exc_info=True)
                replies = [messages.RETRY_LATER]
            except Exception as e:
                logger.error(f"Error handling message from user {message.user_id}: {str(e)}", exc_info=True)
                replies = [messages.GENERIC_APOLOGY]

            for reply in replies:
                try:
                    await self.transport.send_message(message.chat_id, reply)
                except Exception as e:
                    logger.error(f"Could not send reply to chat {message.chat_id}: {str(e)}", exc_info=True)
                    break
