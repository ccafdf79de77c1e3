import enum


class PurchaseOutcome(str, enum.Enum):
    SUCCESS = "success"
    INSUFFICIENT_FUNDS = "insufficientFunds"
    PROVIDER_FAILED = "providerFailed"
    REFUNDED = "refunded"
