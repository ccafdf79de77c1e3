import logging
import time

from quickwallet.common.redis_service import RedisService, get_redis_service
from quickwallet.modules.conversations.dtos.conversation import ConversationState

logger = logging.getLogger(__name__)


def state_key(user_id: int) -> str:
    return f"conversation:{user_id}"


class ConversationStateStore:
    """
    Per-user dialog state. Absence of an entry means the user is idle.

    Backed by Redis when REDIS_URL is configured; entries also live in process
    memory with the same TTL so a Redis outage never loses an in-flight dialog.
    """

    def __init__(self, redis_service: RedisService | None = None):
        self.redis_service = redis_service if redis_service is not None else get_redis_service()
        self.ttl = self.redis_service.ttl
        self._memory: dict[int, tuple[ConversationState, float]] = {}

    def _from_memory(self, user_id: int) -> ConversationState | None:
        entry = self._memory.get(user_id)
        if entry is None:
            return None
        state, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._memory[user_id]
            return None
        return state

    async def get(self, user_id: int) -> ConversationState | None:
        if self.redis_service.enabled:
            cached = await self.redis_service.get(state_key(user_id))
            if cached is not None:
                try:
                    return ConversationState.model_validate(cached)
                except ValueError as e:
                    logger.warning(f"Discarding unreadable conversation state for user {user_id}: {str(e)}")
                    await self.clear(user_id)
                    return None
        return self._from_memory(user_id)

    async def set(self, user_id: int, state: ConversationState) -> None:
        self._memory[user_id] = (state, time.monotonic() + self.ttl)
        if self.redis_service.enabled:
            await self.redis_service.set(state_key(user_id), state.model_dump(mode="json"), ttl=self.ttl)

    async def clear(self, user_id: int) -> None:
        self._memory.pop(user_id, None)
        if self.redis_service.enabled:
            await self.redis_service.delete(state_key(user_id))
