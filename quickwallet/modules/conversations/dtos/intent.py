from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from quickwallet.common.enums.intent import Intent
from quickwallet.common.enums.network import Network


class ResolvedIntent(BaseModel):
    intent: Intent = Field(default=Intent.UNKNOWN)
    amount: Decimal | None = Field(None, description="Amount in NGN")
    network: Network | None = Field(None)
    phone_number: str | None = Field(None, validation_alias=AliasChoices("phone_number", "phoneNumber"))
    data_size: str | None = Field(
        None, validation_alias=AliasChoices("data_size", "dataSize"), description="Size token such as 2GB or 500MB"
    )
    raw_network: str | None = Field(None, description="Network text as written, kept when it is not recognized")

    @model_validator(mode="before")
    @classmethod
    def keep_unrecognized_network(cls, data: Any) -> Any:
        if isinstance(data, dict):
            network = data.get("network")
            if isinstance(network, str) and network.strip() and Network.from_token(network) is None:
                data = {**data, "raw_network": data.get("raw_network") or network.strip()}
        return data

    @property
    def mentions_unknown_network(self) -> bool:
        return self.network is None and bool(self.raw_network)

    @field_validator("intent", mode="before")
    @classmethod
    def coerce_intent(cls, value: Any) -> Intent:
        if isinstance(value, Intent):
            return value
        try:
            return Intent(str(value).strip().lower())
        except ValueError:
            return Intent.UNKNOWN

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, value: Any) -> Decimal | None:
        if value is None or value == "":
            return None
        try:
            amount = Decimal(str(value).replace(",", "").replace("₦", "").strip())
        except InvalidOperation:
            return None
        return amount if amount > 0 else None

    @field_validator("network", mode="before")
    @classmethod
    def coerce_network(cls, value: Any) -> Network | None:
        if isinstance(value, Network):
            return value
        return Network.from_token(value) if isinstance(value, str) else None

    @field_validator("data_size", mode="before")
    @classmethod
    def normalize_data_size(cls, value: Any) -> str | None:
        if not value:
            return None
        return str(value).replace(" ", "").upper()

    class Config:
        populate_by_name = True
        json_schema_extra: ClassVar[dict] = {
            "example": {
                "intent": "airtime_purchase",
                "amount": "500",
                "network": "MTN",
                "phone_number": "08123456789",
                "data_size": None,
            }
        }
