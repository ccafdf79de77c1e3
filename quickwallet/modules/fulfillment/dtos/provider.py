import re
from decimal import Decimal

from pydantic import BaseModel, Field

from quickwallet.common.enums.network import Network

SIZE_TOKEN = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(MB|GB|TB)\b", re.IGNORECASE)


def size_tokens(text: str) -> list[str]:
    """'MTN 1.5GB - 30 days' -> ['1.5GB']"""
    return [f"{number}{unit.upper()}" for number, unit in SIZE_TOKEN.findall(text)]


class ProviderOutcome(BaseModel):
    success: bool
    reference: str | None = None
    message: str = ""


class DataPlan(BaseModel):
    name: str = Field(..., description="Display name, e.g. '2GB - 30 days'")
    code: str = Field(..., description="Provider variation code")
    amount: Decimal = Field(..., gt=0)

    def matches(self, data_size: str) -> bool:
        return data_size.replace(" ", "").upper() in size_tokens(self.name)


class DataPlanListing(BaseModel):
    network: Network
    plans: list[DataPlan]
    is_fallback: bool = Field(default=False, description="True when the plans belong to the default network")

    def find(self, data_size: str | None) -> DataPlan | None:
        if not data_size:
            return None
        return next((plan for plan in self.plans if plan.matches(data_size)), None)


class PaymentLink(BaseModel):
    success: bool
    payment_url: str | None = None
    reference: str | None = None
    message: str = ""


class PaymentVerification(BaseModel):
    success: bool
    amount: Decimal | None = None
    status: str | None = None
    message: str = ""
