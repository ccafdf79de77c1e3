import logging
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.enums.transaction_status import TransactionStatus
from quickwallet.common.repositories import session_scope
from quickwallet.modules.transactions.dtos.transaction import (
    MonthlySummary,
    TransactionCreate,
    TransactionRecord,
)
from quickwallet.modules.transactions.repositories.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)


def month_start(now: datetime | None = None) -> datetime:
    now = now or datetime.now(UTC)
    return datetime(now.year, now.month, 1, tzinfo=UTC)


class TransactionsService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record_pending(self, transaction_data: TransactionCreate) -> TransactionRecord:
        async with session_scope(self.session_factory) as session:
            transaction = await TransactionRepository(session).create(transaction_data)
            record = TransactionRecord.model_validate(transaction)
        logger.info(
            f"Pending transaction recorded: id={record.id}, user_id={record.user_id}, "
            f"kind={record.kind.value}, amount={record.amount}"
        )
        return record

    async def settle(
        self, transaction_id: int, status: TransactionStatus, reference: str | None = None
    ) -> bool:
        async with session_scope(self.session_factory) as session:
            changed = await TransactionRepository(session).settle(transaction_id, status, reference)
        if not changed:
            logger.warning(f"Transaction {transaction_id} was already settled, {status.value} ignored")
        return changed

    async def get_by_reference(self, reference: str) -> TransactionRecord | None:
        async with session_scope(self.session_factory) as session:
            transaction = await TransactionRepository(session).get_by_reference(reference)
            return TransactionRecord.model_validate(transaction) if transaction else None

    async def get_recent(self, user_id: int, limit: int = 5) -> list[TransactionRecord]:
        async with session_scope(self.session_factory) as session:
            transactions = await TransactionRepository(session).list_recent(user_id, limit)
            return [TransactionRecord.model_validate(t) for t in transactions]

    async def get_monthly_summary(self, user_id: int, now: datetime | None = None) -> MonthlySummary:
        start = month_start(now)
        async with session_scope(self.session_factory) as session:
            transactions = await TransactionRepository(session).list_since(user_id, start)
            records = [TransactionRecord.model_validate(t) for t in transactions]

        summary = MonthlySummary(month_start=start, transaction_count=len(records))
        for record in records:
            if record.status is TransactionStatus.FAILED:
                summary.failed_count += 1
                continue
            if record.status is not TransactionStatus.COMPLETED:
                continue
            summary.successful_count += 1
            amount = Decimal(record.amount)
            if record.kind is TransactionKind.FUNDING:
                summary.total_funded += amount
            else:
                summary.total_spent += amount
                if record.kind is TransactionKind.AIRTIME:
                    summary.airtime_spent += amount
                elif record.kind is TransactionKind.DATA:
                    summary.data_spent += amount
        return summary
