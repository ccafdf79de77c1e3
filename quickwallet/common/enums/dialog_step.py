import enum


class DialogStep(str, enum.Enum):
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    EMAIL = "email"
    PHONE_NUMBER = "phoneNumber"
    SET_PIN = "setPIN"
    CONFIRM_PURCHASE = "confirmPurchase"
    ENTER_PIN = "enterPIN"
    FUND_AMOUNT = "fundAmount"

    @property
    def is_registration(self) -> bool:
        return self in (
            DialogStep.FIRST_NAME,
            DialogStep.LAST_NAME,
            DialogStep.EMAIL,
            DialogStep.PHONE_NUMBER,
        )

    @property
    def carries_secret(self) -> bool:
        return self in (DialogStep.SET_PIN, DialogStep.ENTER_PIN)
