from datetime import datetime

from sqlalchemy import select, update

from quickwallet.common.enums.transaction_status import TransactionStatus
from quickwallet.common.repositories import BaseRepository
from quickwallet.modules.transactions.dtos.transaction import TransactionCreate
from quickwallet.modules.transactions.entities import Transaction


class TransactionRepository(BaseRepository[Transaction]):
    model = Transaction

    async def create(self, transaction_data: TransactionCreate) -> Transaction:
        data = transaction_data.model_dump(mode="python")
        return await super().create(Transaction(**data))

    async def get_by_reference(self, reference: str) -> Transaction | None:
        result = await self.session.execute(select(Transaction).where(Transaction.reference == reference))
        return result.scalar_one_or_none()

    async def settle(
        self, transaction_id: int, status: TransactionStatus, reference: str | None = None
    ) -> bool:
        """
        Moves a pending row to a terminal status. Rows already settled are left untouched.

        Returns True when this call performed the transition.
        """
        if not status.is_terminal:
            raise ValueError(f"Cannot settle a transaction to {status.value}")

        values: dict = {"status": status}
        if reference:
            values["reference"] = reference
        result = await self.session.execute(
            update(Transaction)
            .where(Transaction.id == transaction_id, Transaction.status == TransactionStatus.PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def list_recent(self, user_id: int, limit: int = 5) -> list[Transaction]:
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_since(self, user_id: int, since: datetime) -> list[Transaction]:
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.user_id == user_id, Transaction.created_at >= since)
            .order_by(Transaction.created_at.asc(), Transaction.id.asc())
        )
        return list(result.scalars().all())
