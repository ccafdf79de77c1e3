"""
Ledger gateway: the only place wallet balances are read or changed.

Every mutation is a single conditional UPDATE ... RETURNING, so the read-check-write
of a debit is one serialized step per wallet at the database level.
"""
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quickwallet.common.enums.ledger_direction import LedgerDirection
from quickwallet.common.exceptions import CompensationFailure, InsufficientFunds, PersistenceFailure
from quickwallet.common.repositories import session_scope
from quickwallet.common.resilience import retry_db_operation, retry_with_backoff
from quickwallet.modules.wallets.repositories.wallet_repository import WalletRepository

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENT)


class LedgerService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @retry_db_operation(max_attempts=3, initial_wait=0.5, max_wait=5.0)
    async def get_balance(self, user_id: int) -> Decimal:
        async with session_scope(self.session_factory) as session:
            balance = await WalletRepository(session).get_balance(user_id)
        if balance is None:
            raise PersistenceFailure(f"Wallet not found for user_id={user_id}")
        return to_money(balance)

    async def adjust_balance(self, user_id: int, amount: Decimal, direction: LedgerDirection) -> Decimal:
        """
        Applies a credit or debit and returns the post-operation balance.

        Raises:
            ValueError: If amount is not positive
            InsufficientFunds: If a debit would make the balance negative (nothing is written)
            PersistenceFailure: If the wallet does not exist or the database fails
        """
        amount = to_money(amount)
        if amount <= 0:
            raise ValueError(f"Ledger amounts must be positive, got {amount}")

        async with session_scope(self.session_factory) as session:
            repository = WalletRepository(session)
            if direction is LedgerDirection.DEBIT:
                new_balance = await repository.debit_if_sufficient(user_id, amount)
                if new_balance is None:
                    current = await repository.get_balance(user_id)
                    if current is None:
                        raise PersistenceFailure(f"Wallet not found for user_id={user_id}")
                    raise InsufficientFunds(user_id, amount, to_money(current))
            else:
                new_balance = await repository.credit(user_id, amount)
                if new_balance is None:
                    raise PersistenceFailure(f"Wallet not found for user_id={user_id}")

        new_balance = to_money(new_balance)
        logger.info(
            f"Wallet {direction.value} applied: user_id={user_id}, amount={amount}, new_balance={new_balance}"
        )
        return new_balance

    async def debit(self, user_id: int, amount: Decimal) -> Decimal:
        return await self.adjust_balance(user_id, amount, LedgerDirection.DEBIT)

    async def credit(self, user_id: int, amount: Decimal) -> Decimal:
        return await self.adjust_balance(user_id, amount, LedgerDirection.CREDIT)

    async def refund(self, user_id: int, amount: Decimal) -> Decimal:
        """
        Compensating credit for a debit whose fulfillment failed.

        Retried with backoff; raises CompensationFailure once the attempts run out.
        """
        try:
            return await self._credit_with_retry(user_id, amount)
        except Exception as e:
            logger.critical(
                f"Refund failed, manual reconciliation needed: user_id={user_id}, amount={amount}: {str(e)}",
                exc_info=True,
            )
            raise CompensationFailure(user_id, to_money(amount), e) from e

    @retry_with_backoff(max_attempts=3, initial_wait=0.5, max_wait=4.0, retry_exceptions=(PersistenceFailure,))
    async def _credit_with_retry(self, user_id: int, amount: Decimal) -> Decimal:
        return await self.credit(user_id, amount)
