import re
from decimal import Decimal, InvalidOperation

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^0[789][01]\d{8}$")
PIN_PATTERN = re.compile(r"^\d{4,6}$")

MAX_NAME_LENGTH = 50


def validate_name(name: str) -> tuple[bool, str | None]:
    cleaned = name.strip()
    if not cleaned:
        return False, "Please enter a name."
    if cleaned.startswith("/"):
        return False, "That looks like a command, not a name. Please type your name."
    if len(cleaned) > MAX_NAME_LENGTH:
        return False, f"Names can be at most {MAX_NAME_LENGTH} characters."
    return True, None


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_valid_phone_number(phone: str) -> bool:
    """Nigerian mobile number: 11 digits, 0 followed by 7/8/9 and 0/1."""
    return bool(PHONE_PATTERN.match(phone.strip()))


def is_valid_pin(pin: str) -> bool:
    return bool(PIN_PATTERN.match(pin.strip()))


def parse_amount(amount_text: str) -> tuple[bool, Decimal | None, str | None]:
    """
    Parses user-typed money like '500', '₦1,500.50' or 'N2000'.

    Returns (is_valid, amount, error). Amounts must be positive with at most 2 decimal places.
    """
    cleaned = re.sub(r"[\s,₦]", "", amount_text.strip())
    cleaned = re.sub(r"^(?:ngn|n)", "", cleaned, flags=re.IGNORECASE)
    if not re.fullmatch(r"\d+(?:\.\d+)?", cleaned):
        return False, None, "Please enter a valid amount in numbers, e.g. 2000"

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return False, None, "Please enter a valid amount in numbers, e.g. 2000"

    if amount <= 0:
        return False, None, "The amount must be greater than 0"
    if amount.as_tuple().exponent < -2:
        return False, None, "Amounts can have at most 2 decimal places"
    return True, amount, None
