from quickwallet.modules.transactions.entities.transaction_entity import TransactionEntity

Transaction = TransactionEntity

__all__ = ["Transaction", "TransactionEntity"]
