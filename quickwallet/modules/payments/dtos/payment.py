from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, Field


class PaystackEventData(BaseModel):
    reference: str
    status: str | None = None
    amount: int | None = Field(None, description="Amount in kobo")

    class Config:
        extra = "allow"


class PaystackEvent(BaseModel):
    event: str = Field(..., description="Event name, e.g. charge.success")
    data: PaystackEventData

    class Config:
        json_schema_extra: ClassVar[dict] = {
            "example": {
                "event": "charge.success",
                "data": {"reference": "FUND_123456789_1760870400000", "status": "success", "amount": 200000},
            }
        }


class FundingSettlement(BaseModel):
    reference: str
    credited: bool = Field(..., description="True only for the call that credited the wallet")
    status: str = Field(..., description="completed, failed, pending, already_settled or not_found")
    amount: Decimal | None = None
    new_balance: Decimal | None = None
    telegram_id: int | None = None
    message: str = ""
