import enum


class LedgerDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"
