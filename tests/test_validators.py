import pytest

from smartwater.shared.serializers import mask_prefix, mask_secret
from smartwater.shared.validators import (
    slugify,
    validate_choice,
    validate_decimal_string,
    validate_email,
    validate_us_phone,
)


@pytest.mark.parametrize(
    "raw",
    ["(555) 123-4567", "555.123.4567", "+1 555 123 4567", "15551234567"],
)
def test_phone_is_normalized_to_e164(raw):
    assert validate_us_phone(raw) == "+15551234567"


def test_phone_rejects_short_numbers():
    with pytest.raises(ValueError):
        validate_us_phone("555-1234")


def test_email_is_lowercased():
    assert validate_email("  Owner@Example.COM ") == "owner@example.com"
    with pytest.raises(ValueError):
        validate_email("not-an-email")


def test_empty_values_pass_through():
    assert validate_us_phone(None) is None
    assert validate_email("") == ""
    assert validate_choice(None, ("a",)) is None


def test_decimal_string():
    assert validate_decimal_string(2) == "2"
    assert validate_decimal_string(" 8.25 ") == "8.25"
    with pytest.raises(ValueError):
        validate_decimal_string("-1")
    with pytest.raises(ValueError):
        validate_decimal_string("lots")


def test_choice():
    assert validate_choice("weekly", ("weekly", "monthly")) == "weekly"
    with pytest.raises(ValueError, match="Frequency must be one of"):
        validate_choice("hourly", ("weekly", "monthly"), "Frequency")


def test_slugify():
    assert slugify("Blue Lagoon  Pools!") == "blue-lagoon-pools"
    assert slugify("***") == "organization"


def test_masking():
    assert mask_prefix("AC1234567890") == "AC123..."
    assert mask_prefix(None) is None
    assert mask_secret("hunter2") == "[MASKED]"
    assert mask_secret(None) is None
