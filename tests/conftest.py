from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from quickwallet.common.redis_service import RedisService
from quickwallet.configuration.config import Base
from quickwallet.modules import entities  # noqa: F401
from quickwallet.modules.conversations.agent.dialog_agent import DialogAgent
from quickwallet.modules.conversations.agent.intent_parser import IntentParser
from quickwallet.modules.conversations.dtos.conversation import InboundMessage
from quickwallet.modules.conversations.services.purchase_orchestrator import PurchaseOrchestrator
from quickwallet.modules.conversations.services.state_store import ConversationStateStore
from quickwallet.modules.fulfillment import catalog
from quickwallet.modules.fulfillment.dtos.provider import (
    DataPlanListing,
    PaymentLink,
    PaymentVerification,
    ProviderOutcome,
)
from quickwallet.modules.fulfillment.services.fulfillment_service import FulfillmentService
from quickwallet.modules.transactions.services.transactions_service import TransactionsService
from quickwallet.modules.users.dtos.user import UserRegister
from quickwallet.modules.users.services.pin_hasher import PinHasher
from quickwallet.modules.users.services.user_service import UserService
from quickwallet.modules.wallets.services.ledger_service import LedgerService

TELEGRAM_ID = 555001
CHAT_ID = 555001


class FakeTransport:
    def __init__(self, fail_delete: bool = False):
        self.sent: list[tuple[int, str]] = []
        self.deleted: list[tuple[int, int]] = []
        self.fail_delete = fail_delete

    async def send_message(self, chat_id: int, text: str, **opts: Any) -> dict[str, Any]:
        self.sent.append((chat_id, text))
        return {"ok": True}

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        if self.fail_delete:
            return False
        self.deleted.append((chat_id, message_id))
        return True

    async def close(self):
        pass


class FakeVTPass:
    def __init__(self):
        self.outcome = ProviderOutcome(success=True, reference="VTP_REF_1", message="Airtime purchase successful")
        self.error: Exception | None = None
        self.calls: list[tuple] = []
        self.live_plans: DataPlanListing | None = None

    async def purchase_airtime(self, network, amount, phone_number) -> ProviderOutcome:
        self.calls.append(("airtime", network, amount, phone_number))
        if self.error:
            raise self.error
        return self.outcome

    async def purchase_data(self, network, data_size, phone_number, variation_code=None) -> ProviderOutcome:
        self.calls.append(("data", network, data_size, phone_number, variation_code))
        if self.error:
            raise self.error
        return self.outcome

    async def get_data_plans(self, network) -> DataPlanListing:
        if self.live_plans is not None:
            return self.live_plans
        return catalog.static_plans(network)

    async def close(self):
        pass


class FakePaystack:
    def __init__(self):
        self.links: list[tuple] = []
        self.link_success = True
        self.verification = PaymentVerification(success=True, amount=Decimal("2000"), status="success")
        self.verify_calls = 0

    async def generate_payment_link(self, email, amount, reference, metadata=None) -> PaymentLink:
        self.links.append((email, amount, reference, metadata))
        if not self.link_success:
            return PaymentLink(success=False, message="Paystack is down")
        return PaymentLink(success=True, payment_url=f"https://pay.test/{reference}", reference=reference)

    async def verify_payment(self, reference) -> PaymentVerification:
        self.verify_calls += 1
        return self.verification

    async def close(self):
        pass


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def vtpass():
    return FakeVTPass()


@pytest.fixture
def paystack():
    return FakePaystack()


@pytest.fixture
def fulfillment(vtpass, paystack):
    return FulfillmentService(vtpass=vtpass, paystack=paystack)


@pytest.fixture
def users(session_factory):
    return UserService(session_factory, PinHasher(rounds=4))


@pytest.fixture
def ledger(session_factory):
    return LedgerService(session_factory)


@pytest.fixture
def transactions(session_factory):
    return TransactionsService(session_factory)


@pytest.fixture
def orchestrator(ledger, transactions, fulfillment):
    return PurchaseOrchestrator(ledger, transactions, fulfillment)


@pytest.fixture
def state_store():
    return ConversationStateStore(RedisService(url=""))


@pytest.fixture
def agent(users, ledger, transactions, fulfillment, orchestrator, state_store, transport):
    return DialogAgent(
        users=users,
        ledger=ledger,
        transactions=transactions,
        fulfillment=fulfillment,
        orchestrator=orchestrator,
        state_store=state_store,
        intent_parser=IntentParser(openai_api_key=""),
        transport=transport,
    )


@pytest.fixture
def make_user(users, ledger):
    async def _make_user(
        telegram_id: int = TELEGRAM_ID,
        balance: Decimal | str = "0",
        pin: str | None = None,
        email: str = "ada@example.com",
        phone_number: str = "08123456789",
    ):
        profile = await users.create_account(
            UserRegister(
                telegram_id=telegram_id,
                first_name="Ada",
                last_name="Obi",
                email=email,
                phone_number=phone_number,
            )
        )
        if Decimal(str(balance)) > 0:
            await ledger.credit(profile.id, Decimal(str(balance)))
        if pin:
            await users.set_pin(profile.id, pin)
        return await users.get_by_telegram_id(telegram_id)

    return _make_user


@pytest.fixture
def say(agent):
    message_ids = iter(range(1000, 100000))

    async def _say(text: str, telegram_id: int = TELEGRAM_ID) -> list[str]:
        return await agent.handle(
            InboundMessage(chat_id=telegram_id, user_id=telegram_id, text=text, message_id=next(message_ids))
        )

    return _say
