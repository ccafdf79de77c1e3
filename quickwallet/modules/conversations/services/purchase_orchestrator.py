"""
Purchase orchestration: debit, log, fulfill, settle and compensate.

Money is reserved before the provider is called and given back if the provider
fails, so a purchase either completes or leaves the balance where it started.
"""
import logging
import time
from decimal import Decimal

from quickwallet.common.enums.purchase_outcome import PurchaseOutcome
from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.enums.transaction_status import TransactionStatus
from quickwallet.common.exceptions import CompensationFailure, InsufficientFunds, PersistenceFailure
from quickwallet.configuration.config import settings
from quickwallet.modules.conversations.dtos.conversation import FundingResult, PurchaseRequest, PurchaseResult
from quickwallet.modules.fulfillment.dtos.provider import ProviderOutcome
from quickwallet.modules.fulfillment.services.fulfillment_service import FulfillmentService
from quickwallet.modules.transactions.dtos.transaction import TransactionCreate, TransactionRecord
from quickwallet.modules.transactions.services.transactions_service import TransactionsService
from quickwallet.modules.users.dtos.user import UserProfile
from quickwallet.modules.wallets.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def funding_reference(user_id: int) -> str:
    return f"FUND_{user_id}_{int(time.time() * 1000)}"


class PurchaseOrchestrator:
    def __init__(
        self,
        ledger: LedgerService,
        transactions: TransactionsService,
        fulfillment: FulfillmentService,
    ):
        self.ledger = ledger
        self.transactions = transactions
        self.fulfillment = fulfillment

    async def execute(self, user_id: int, request: PurchaseRequest) -> PurchaseResult:
        # Reserve
        try:
            balance_after_debit = await self.ledger.debit(user_id, request.amount)
        except InsufficientFunds as e:
            logger.info(f"Purchase declined for user_id={user_id}: {str(e)}")
            return PurchaseResult(
                outcome=PurchaseOutcome.INSUFFICIENT_FUNDS,
                new_balance=e.balance,
                message="Insufficient wallet balance",
            )

        # Log intent
        try:
            record = await self.transactions.record_pending(
                TransactionCreate(
                    user_id=user_id,
                    kind=request.kind,
                    amount=request.amount,
                    network=request.network.value,
                    phone_number=request.phone_number,
                    description=request.description,
                )
            )
        except PersistenceFailure:
            logger.error(f"Could not log purchase for user_id={user_id}, reversing the debit", exc_info=True)
            await self.ledger.refund(user_id, request.amount)
            raise

        # Fulfill
        outcome = await self._fulfill(request)

        # Settle
        await self._settle(record, outcome)

        if outcome.success:
            return PurchaseResult(
                outcome=PurchaseOutcome.SUCCESS,
                reference=outcome.reference,
                new_balance=balance_after_debit,
                message=outcome.message,
            )

        # Compensate
        try:
            new_balance = await self.ledger.refund(user_id, request.amount)
        except CompensationFailure:
            return PurchaseResult(
                outcome=PurchaseOutcome.PROVIDER_FAILED,
                reference=self._support_reference(record),
                message=outcome.message,
            )

        logger.info(f"Purchase {record.id} failed and was refunded: user_id={user_id}, amount={request.amount}")
        return PurchaseResult(
            outcome=PurchaseOutcome.REFUNDED,
            new_balance=new_balance,
            message=outcome.message,
        )

    async def _fulfill(self, request: PurchaseRequest) -> ProviderOutcome:
        try:
            if request.kind is TransactionKind.AIRTIME:
                return await self.fulfillment.purchase_airtime(request.network, request.amount, request.phone_number)
            return await self.fulfillment.purchase_data(
                request.network, request.data_size or "", request.phone_number, request.variation_code
            )
        except Exception as e:
            logger.error(f"Fulfillment raised for {request.description}: {str(e)}", exc_info=True)
            return ProviderOutcome(success=False, message="Service temporarily unavailable")

    async def _settle(self, record: TransactionRecord, outcome: ProviderOutcome) -> None:
        status = TransactionStatus.COMPLETED if outcome.success else TransactionStatus.FAILED
        try:
            await self.transactions.settle(record.id, status, outcome.reference if outcome.success else None)
        except Exception as e:
            logger.error(f"Could not settle transaction {record.id} as {status.value}: {str(e)}", exc_info=True)

    @staticmethod
    def _support_reference(record: TransactionRecord) -> str:
        return record.reference or f"TXN{record.id}"

    async def fund(self, user: UserProfile, amount: Decimal) -> FundingResult:
        """
        Records a pending funding row and asks the payment provider for a hosted payment link.

        The wallet is credited later, when the payment is verified.
        """
        if amount < settings.MIN_FUNDING_AMOUNT:
            return FundingResult(
                success=False, message=f"The minimum funding amount is ₦{settings.MIN_FUNDING_AMOUNT}"
            )

        reference = funding_reference(user.telegram_id)
        record = await self.transactions.record_pending(
            TransactionCreate(
                user_id=user.id,
                kind=TransactionKind.FUNDING,
                amount=amount,
                description="wallet funding - Paystack",
                reference=reference,
            )
        )

        link = await self.fulfillment.generate_payment_link(
            user.email, amount, reference, {"userId": user.id, "telegramId": user.telegram_id}
        )
        if not link.success or not link.payment_url:
            await self.transactions.settle(record.id, TransactionStatus.FAILED)
            return FundingResult(
                success=False, message=link.message or "Failed to generate payment link", reference=reference
            )

        logger.info(f"Payment link issued: user_id={user.id}, amount={amount}, reference={reference}")
        return FundingResult(
            success=True, message="Payment link ready", payment_url=link.payment_url, reference=reference
        )
