from decimal import Decimal

from sqlalchemy import select, update

from quickwallet.common.repositories import BaseRepository
from quickwallet.modules.wallets.entities import Wallet


class WalletRepository(BaseRepository[Wallet]):
    model = Wallet

    async def get_by_user_id(self, user_id: int) -> Wallet | None:
        result = await self.session.execute(select(Wallet).where(Wallet.user_id == user_id))
        return result.scalar_one_or_none()

    async def create_for_user(self, user_id: int) -> Wallet:
        return await self.create(Wallet(user_id=user_id, balance=Decimal("0.00")))

    async def get_balance(self, user_id: int) -> Decimal | None:
        result = await self.session.execute(select(Wallet.balance).where(Wallet.user_id == user_id))
        return result.scalar_one_or_none()

    async def credit(self, user_id: int, amount: Decimal) -> Decimal | None:
        """Adds amount in a single statement. Returns the new balance, None when the wallet does not exist."""
        result = await self.session.execute(
            update(Wallet)
            .where(Wallet.user_id == user_id)
            .values(balance=Wallet.balance + amount)
            .returning(Wallet.balance)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def debit_if_sufficient(self, user_id: int, amount: Decimal) -> Decimal | None:
        """
        Compare-and-subtract in one statement, so concurrent debits cannot overdraw.

        Returns the new balance, or None when the balance is lower than amount
        (or the wallet does not exist); nothing is written in that case.
        """
        result = await self.session.execute(
            update(Wallet)
            .where(Wallet.user_id == user_id, Wallet.balance >= amount)
            .values(balance=Wallet.balance - amount)
            .returning(Wallet.balance)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()
