"""
Error taxonomy shared by the wallet core.

Validation and business-rule errors are handled inside the dialog agent and the
purchase orchestrator; only unexpected failures reach the dispatcher's catch-all.
"""
from decimal import Decimal


class QuickWalletError(Exception):
    """Base class for errors raised by the wallet core."""


class ValidationError(QuickWalletError):
    """Malformed user input. Carries the prompt to re-issue on the same step."""

    def __init__(self, prompt: str):
        super().__init__(prompt)
        self.prompt = prompt


class NotRegistered(QuickWalletError):
    def __init__(self, telegram_id: int):
        super().__init__(f"No account for telegram_id={telegram_id}")
        self.telegram_id = telegram_id


class InsufficientFunds(QuickWalletError):
    def __init__(self, user_id: int, requested: Decimal, balance: Decimal | None = None):
        super().__init__(f"Insufficient balance for user_id={user_id}: requested {requested}, balance {balance}")
        self.user_id = user_id
        self.requested = requested
        self.balance = balance


class ProviderFailure(QuickWalletError):
    """A remote fulfillment or payment provider failed or returned an error."""


class CompensationFailure(QuickWalletError):
    """The refund of a debit could not be applied; funds need manual reconciliation."""

    def __init__(self, user_id: int, amount: Decimal, cause: Exception | None = None):
        super().__init__(f"Refund of {amount} to user_id={user_id} failed: {cause}")
        self.user_id = user_id
        self.amount = amount
        self.cause = cause


class PersistenceFailure(QuickWalletError):
    """The record store is unavailable or rejected an operation."""
