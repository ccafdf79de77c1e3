from decimal import Decimal

import pytest

from quickwallet.modules.conversations.utils.validators import (
    is_valid_email,
    is_valid_phone_number,
    is_valid_pin,
    parse_amount,
    validate_name,
)


@pytest.mark.parametrize("email", ["john@gmail.com", "ada.obi+wallet@mail.example.ng", "A_B%c@x.io"])
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["john@", "john@gmail", "@gmail.com", "john gmail.com", "john@gmail.c"])
def test_invalid_emails(email):
    assert not is_valid_email(email)


@pytest.mark.parametrize("phone", ["08123456789", "07012345678", "09112345678", "08012345678"])
def test_valid_phone_numbers(phone):
    assert is_valid_phone_number(phone)


@pytest.mark.parametrize(
    "phone",
    ["8123456789", "0812345678", "081234567890", "06123456789", "08223456789", "+2348123456789", "0812345678a"],
)
def test_invalid_phone_numbers(phone):
    assert not is_valid_phone_number(phone)


@pytest.mark.parametrize("pin,expected", [("1234", True), ("123456", True), ("123", False), ("1234567", False), ("12a4", False)])
def test_pin_format(pin, expected):
    assert is_valid_pin(pin) is expected


def test_name_rules():
    assert validate_name("Ada") == (True, None)
    assert validate_name("   ")[0] is False
    assert validate_name("/start")[0] is False
    assert validate_name("x" * 51)[0] is False
    assert validate_name("x" * 50)[0] is True


@pytest.mark.parametrize(
    "text,amount",
    [("500", Decimal("500")), ("₦1,500.50", Decimal("1500.50")), ("N2000", Decimal("2000")), (" 250.5 ", Decimal("250.5"))],
)
def test_parse_amount_accepts_money(text, amount):
    is_valid, parsed, error = parse_amount(text)
    assert is_valid
    assert parsed == amount
    assert error is None


@pytest.mark.parametrize("text", ["abc", "0", "-50", "12.345", "", "1e3"])
def test_parse_amount_rejects_garbage(text):
    is_valid, parsed, error = parse_amount(text)
    assert not is_valid
    assert parsed is None
    assert error
