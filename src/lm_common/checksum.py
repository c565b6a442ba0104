"""Luhn checksum validation for order numbers and withdrawal references.

Validation happens before any storage or network access.
"""

from src.lm_common.errors import MalformedOrderNumberError


def is_valid_luhn(number: str) -> bool:
    """Return True if number is a non-empty digit string with a valid Luhn checksum."""
    if not number or not number.isascii() or not number.isdigit():
        return False

    total = 0
    for index, char in enumerate(reversed(number)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_order_number(number: str) -> str:
    """Strip surrounding whitespace and validate; raises MalformedOrderNumberError."""
    candidate = number.strip()
    if not is_valid_luhn(candidate):
        raise MalformedOrderNumberError(number)
    return candidate
