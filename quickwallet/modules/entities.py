"""Imports every ORM entity so ``Base.metadata`` knows all tables."""
from quickwallet.modules.transactions.entities import TransactionEntity
from quickwallet.modules.users.entities import UserEntity
from quickwallet.modules.wallets.entities import WalletEntity

__all__ = ["TransactionEntity", "UserEntity", "WalletEntity"]
