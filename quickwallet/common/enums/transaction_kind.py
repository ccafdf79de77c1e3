import enum


class TransactionKind(str, enum.Enum):
    AIRTIME = "airtime"
    DATA = "data"
    FUNDING = "funding"
