"""Input validation package."""

from budget_tracker.validation.validator import (
    USER_MESSAGE,
    InvalidInputError,
    clean_description,
    parse_amount,
    validate_transaction_input,
)

__all__ = [
    "USER_MESSAGE",
    "InvalidInputError",
    "clean_description",
    "parse_amount",
    "validate_transaction_input",
]
