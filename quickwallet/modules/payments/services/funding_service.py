import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.enums.transaction_status import TransactionStatus
from quickwallet.common.exceptions import PersistenceFailure
from quickwallet.common.repositories import session_scope
from quickwallet.modules.fulfillment.services.fulfillment_service import FulfillmentService
from quickwallet.modules.payments.dtos.payment import FundingSettlement
from quickwallet.modules.transactions.repositories.transaction_repository import TransactionRepository
from quickwallet.modules.users.repositories.user_repository import UserRepository
from quickwallet.modules.wallets.repositories.wallet_repository import WalletRepository
from quickwallet.modules.wallets.services.ledger_service import to_money

logger = logging.getLogger(__name__)

FAILED_PAYMENT_STATUSES = {"failed", "reversed", "abandoned"}


class FundingService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], fulfillment: FulfillmentService):
        self.session_factory = session_factory
        self.fulfillment = fulfillment

    async def settle(self, reference: str) -> FundingSettlement:
        """
        Verifies a Paystack payment and credits the wallet once.

        The pending funding row moves to completed and the wallet is credited in the
        same database transaction; a row that is already settled is left alone, so
        repeated webhooks and callbacks are harmless.
        """
        async with session_scope(self.session_factory) as session:
            record = await TransactionRepository(session).get_by_reference(reference)
            if record is None or record.kind is not TransactionKind.FUNDING:
                logger.warning(f"Funding settlement for unknown reference {reference}")
                return FundingSettlement(reference=reference, credited=False, status="not_found")
            if record.status.is_terminal:
                return FundingSettlement(
                    reference=reference, credited=False, status="already_settled", amount=record.amount
                )
            record_id = record.id
            expected_amount = to_money(record.amount)

        verification = await self.fulfillment.verify_payment(reference)
        if not verification.success:
            if verification.status in FAILED_PAYMENT_STATUSES:
                async with session_scope(self.session_factory) as session:
                    await TransactionRepository(session).settle(record_id, TransactionStatus.FAILED)
                logger.info(f"Funding {reference} marked failed: payment status {verification.status}")
                return FundingSettlement(reference=reference, credited=False, status="failed")
            return FundingSettlement(
                reference=reference, credited=False, status="pending", message=verification.message
            )

        amount = to_money(verification.amount) if verification.amount is not None else expected_amount
        if amount != expected_amount:
            logger.warning(f"Funding {reference}: paid {amount} but {expected_amount} was requested")

        async with session_scope(self.session_factory) as session:
            if not await TransactionRepository(session).settle(record_id, TransactionStatus.COMPLETED):
                return FundingSettlement(reference=reference, credited=False, status="already_settled", amount=amount)

            record = await TransactionRepository(session).get_by_id(record_id)
            new_balance = await WalletRepository(session).credit(record.user_id, amount)
            if new_balance is None:
                raise PersistenceFailure(f"Wallet not found for user_id={record.user_id}")
            user = await UserRepository(session).get_by_id(record.user_id)
            telegram_id = user.telegram_id if user else None

        logger.info(f"Wallet funded: user_id={record.user_id}, amount={amount}, reference={reference}")
        return FundingSettlement(
            reference=reference,
            credited=True,
            status="completed",
            amount=amount,
            new_balance=to_money(new_balance),
            telegram_id=telegram_id,
        )
