from datetime import datetime
from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, Field

from quickwallet.common.enums.transaction_kind import TransactionKind
from quickwallet.common.enums.transaction_status import TransactionStatus


class TransactionCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    kind: TransactionKind = Field(...)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    network: str | None = Field(None, max_length=16)
    phone_number: str | None = Field(None, max_length=20)
    status: TransactionStatus = Field(default=TransactionStatus.PENDING)
    description: str = Field(default="", max_length=255)
    reference: str | None = Field(None, max_length=100)

    class Config:
        json_schema_extra: ClassVar[dict] = {
            "example": {
                "user_id": 1,
                "kind": "airtime",
                "amount": "500.00",
                "network": "MTN",
                "phone_number": "08123456789",
                "status": "pending",
                "description": "airtime purchase - MTN",
                "reference": None,
            }
        }


class TransactionRecord(BaseModel):
    id: int
    user_id: int
    kind: TransactionKind
    amount: Decimal
    network: str | None = None
    phone_number: str | None = None
    status: TransactionStatus
    description: str
    reference: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class MonthlySummary(BaseModel):
    month_start: datetime
    total_funded: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    airtime_spent: Decimal = Decimal("0")
    data_spent: Decimal = Decimal("0")
    transaction_count: int = 0
    successful_count: int = 0
    failed_count: int = 0

    @property
    def net_flow(self) -> Decimal:
        return self.total_funded - self.total_spent
