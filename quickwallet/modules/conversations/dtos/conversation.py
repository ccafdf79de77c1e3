from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from quickwallet.common.enums.dialog_step import DialogStep
from quickwallet.common.enums.network import Network
from quickwallet.common.enums.purchase_outcome import PurchaseOutcome
from quickwallet.common.enums.transaction_kind import TransactionKind


class InboundMessage(BaseModel):
    chat_id: int
    user_id: int = Field(..., description="Telegram user id of the sender")
    text: str = Field(default="")
    message_id: int | None = Field(None)


class ConversationState(BaseModel):
    step: DialogStep
    data: dict[str, Any] = Field(default_factory=dict)

    def advance(self, step: DialogStep, **updates: Any) -> "ConversationState":
        """Returns the next state; the current instance is never mutated."""
        return ConversationState(step=step, data={**self.data, **updates})


class PurchaseRequest(BaseModel):
    kind: TransactionKind
    amount: Decimal = Field(..., gt=0)
    network: Network
    phone_number: str
    data_size: str | None = None
    plan_name: str | None = None
    variation_code: str | None = Field(None, description="Provider code of the plan the price was quoted from")

    @property
    def description(self) -> str:
        return f"{self.kind.value} purchase - {self.network.value}"

    class Config:
        json_schema_extra: ClassVar[dict] = {
            "example": {
                "kind": "data",
                "amount": "700.00",
                "network": "MTN",
                "phone_number": "08123456789",
                "data_size": "2GB",
                "plan_name": "2GB - 30 days",
                "variation_code": "M2000_3",
            }
        }


class PurchaseResult(BaseModel):
    outcome: PurchaseOutcome
    reference: str | None = None
    new_balance: Decimal | None = None
    message: str = ""


class FundingResult(BaseModel):
    success: bool
    message: str = ""
    payment_url: str | None = None
    reference: str | None = None
