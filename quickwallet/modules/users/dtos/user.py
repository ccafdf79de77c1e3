from typing import ClassVar

from pydantic import BaseModel, Field, field_validator


class UserRegister(BaseModel):
    telegram_id: int = Field(..., description="Telegram user id")
    first_name: str = Field(..., min_length=1, max_length=50, description="First name")
    last_name: str = Field(..., min_length=1, max_length=50, description="Last name")
    email: str = Field(..., max_length=255, description="Email address, stored lower-cased")
    phone_number: str = Field(..., min_length=11, max_length=11, description="Nigerian mobile number")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    class Config:
        json_schema_extra: ClassVar[dict] = {
            "example": {
                "telegram_id": 123456789,
                "first_name": "Ada",
                "last_name": "Obi",
                "email": "ada@example.com",
                "phone_number": "08123456789",
            }
        }


class UserProfile(BaseModel):
    id: int
    telegram_id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    has_pin: bool = False

    class Config:
        from_attributes = True
