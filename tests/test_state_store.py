import time

from quickwallet.common.enums.dialog_step import DialogStep
from quickwallet.common.redis_service import RedisService
from quickwallet.modules.conversations.dtos.conversation import ConversationState
from quickwallet.modules.conversations.services.state_store import ConversationStateStore, state_key


class FakeRedis(RedisService):
    """Dict-backed stand-in for the Redis JSON cache."""

    def __init__(self):
        super().__init__(url="redis://fake", ttl=60)
        self.values: dict = {}
        self.ttls: dict = {}

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value, ttl=None):
        self.values[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key):
        self.values.pop(key, None)
        return True


async def test_idle_user_has_no_state(state_store):
    assert await state_store.get(1) is None


async def test_set_get_clear(state_store):
    state = ConversationState(step=DialogStep.LAST_NAME, data={"first_name": "Ada"})

    await state_store.set(1, state)
    assert await state_store.get(1) == state
    assert await state_store.get(2) is None

    await state_store.clear(1)
    assert await state_store.get(1) is None


async def test_advance_does_not_mutate():
    state = ConversationState(step=DialogStep.FIRST_NAME)

    following = state.advance(DialogStep.LAST_NAME, first_name="Ada")

    assert state.data == {}
    assert following.step is DialogStep.LAST_NAME
    assert following.data == {"first_name": "Ada"}


async def test_memory_entries_expire(state_store):
    await state_store.set(7, ConversationState(step=DialogStep.FUND_AMOUNT))
    assert await state_store.get(7) is not None

    state, _ = state_store._memory[7]
    state_store._memory[7] = (state, time.monotonic() - 1)

    assert await state_store.get(7) is None
    assert 7 not in state_store._memory


async def test_redis_backed_state_round_trips_as_json():
    redis = FakeRedis()
    store = ConversationStateStore(redis)
    state = ConversationState(step=DialogStep.CONFIRM_PURCHASE, data={"purchase": {"amount": "500.00"}})

    await store.set(9, state)

    assert redis.values[state_key(9)] == {"step": "confirmPurchase", "data": {"purchase": {"amount": "500.00"}}}
    assert redis.ttls[state_key(9)] == 60
    assert await ConversationStateStore(redis).get(9) == state

    await store.clear(9)
    assert state_key(9) not in redis.values


async def test_unreadable_redis_state_is_discarded():
    redis = FakeRedis()
    redis.values[state_key(3)] = {"step": "notAStep"}
    store = ConversationStateStore(redis)

    assert await store.get(3) is None
    assert state_key(3) not in redis.values
