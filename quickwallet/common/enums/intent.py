import enum


class Intent(str, enum.Enum):
    BALANCE_CHECK = "balance_check"
    WALLET_FUND = "wallet_fund"
    AIRTIME_PURCHASE = "airtime_purchase"
    DATA_PURCHASE = "data_purchase"
    TRANSACTIONS = "transactions"
    MONTHLY_REPORT = "monthly_report"
    SET_PIN = "set_pin"
    CHANGE_PIN = "change_pin"
    UNKNOWN = "unknown"
