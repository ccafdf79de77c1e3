"""Builds the long-lived service graph shared by the webhook routes."""
import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.redis_service import RedisService, get_redis_service
from quickwallet.configuration.config import get_session_factory
from quickwallet.modules.conversations.agent.dialog_agent import DialogAgent
from quickwallet.modules.conversations.agent.intent_parser import IntentParser
from quickwallet.modules.conversations.services.message_dispatcher import MessageDispatcher
from quickwallet.modules.conversations.services.purchase_orchestrator import PurchaseOrchestrator
from quickwallet.modules.conversations.services.state_store import ConversationStateStore
from quickwallet.modules.fulfillment.services.fulfillment_service import FulfillmentService
from quickwallet.modules.payments.services.funding_service import FundingService
from quickwallet.modules.transactions.services.transactions_service import TransactionsService
from quickwallet.modules.transport.telegram_transport import TelegramTransport
from quickwallet.modules.users.services.user_service import UserService
from quickwallet.modules.wallets.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class Container:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        transport: TelegramTransport | None = None,
        fulfillment: FulfillmentService | None = None,
        intent_parser: IntentParser | None = None,
        redis_service: RedisService | None = None,
    ):
        self.session_factory = session_factory or get_session_factory()
        self.redis_service = redis_service if redis_service is not None else get_redis_service()
        self.transport = transport or TelegramTransport()
        self.fulfillment = fulfillment or FulfillmentService()

        self.users = UserService(self.session_factory)
        self.ledger = LedgerService(self.session_factory)
        self.transactions = TransactionsService(self.session_factory)
        self.orchestrator = PurchaseOrchestrator(self.ledger, self.transactions, self.fulfillment)
        self.state_store = ConversationStateStore(self.redis_service)
        self.agent = DialogAgent(
            users=self.users,
            ledger=self.ledger,
            transactions=self.transactions,
            fulfillment=self.fulfillment,
            orchestrator=self.orchestrator,
            state_store=self.state_store,
            intent_parser=intent_parser or IntentParser(),
            transport=self.transport,
        )
        self.dispatcher = MessageDispatcher(self.agent, self.transport)
        self.funding = FundingService(self.session_factory, self.fulfillment)

    async def close(self):
        await self.transport.close()
        await self.fulfillment.close()
        await self.redis_service.close()
        logger.info("Service container closed")


def get_container(request: Request) -> Container:
    return request.app.state.container
