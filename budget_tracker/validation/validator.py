"""
Transaction Input Validation

DESIGN DECISION: Input is checked before it ever reaches the ledger.
A rejected add leaves the ledger exactly as it was, and the caller gets
an InvalidInputError naming every offending field.

Accepted amount inputs:
- int, Decimal
- float (converted through its shortest repr, so 0.1 becomes Decimal("0.1"))
- numeric strings, as typed into a form field ("12.50", " -3 ")

Rejected: booleans, NaN, infinities, empty or non-numeric strings, and
amounts the stored JSON number cannot hold exactly (too large, or a
fraction with more digits than a float keeps, e.g. "1e-400").

IMPORTANT: Validation NEVER silently fixes values beyond trimming
surrounding whitespace from the description.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any


USER_MESSAGE = "Please enter a valid description and amount."


class InvalidInputError(ValueError):
    """Description empty or amount not a finite number."""

    def __init__(self, message: str, fields: tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = fields


def parse_amount(value: Any) -> Decimal:
    """
    Convert user input into a finite Decimal amount.

    Raises:
        InvalidInputError: If the value is not a finite number
    """
    # bool is an int subclass; True is not an amount
    if isinstance(value, bool):
        raise InvalidInputError(f"Amount must be a number, got {value!r}", ("amount",))

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidInputError("Amount is required", ("amount",))
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise InvalidInputError(f"Amount is not a number: {value!r}", ("amount",))
    else:
        raise InvalidInputError(
            f"Amount must be a number, got {type(value).__name__}",
            ("amount",),
        )

    if not amount.is_finite():
        raise InvalidInputError(f"Amount must be finite, got {value!r}", ("amount",))

    # Stored as a JSON number, so it must fit in a float
    if not math.isfinite(float(amount)):
        raise InvalidInputError(f"Amount is too large: {value!r}", ("amount",))

    # Fractions are stored through a float; they must come back unchanged
    if amount != amount.to_integral_value() and Decimal(repr(float(amount))) != amount:
        raise InvalidInputError(
            f"Amount has more precision than can be stored: {value!r}",
            ("amount",),
        )

    return amount


def clean_description(value: Any) -> str:
    """
    Trim a description and make sure something is left.

    Raises:
        InvalidInputError: If the description is missing or blank
    """
    if not isinstance(value, str):
        raise InvalidInputError("Description must be text", ("description",))

    text = value.strip()
    if not text:
        raise InvalidInputError("Description is required", ("description",))
    return text


def validate_transaction_input(description: Any, amount: Any) -> tuple[str, Decimal]:
    """
    Validate both fields of a new transaction.

    Both fields are checked before raising so the error lists every
    problem at once.

    Returns:
        (clean_description, amount)
    """
    problems = []
    fields = []

    try:
        text = clean_description(description)
    except InvalidInputError as e:
        problems.append(str(e))
        fields.extend(e.fields)

    try:
        parsed = parse_amount(amount)
    except InvalidInputError as e:
        problems.append(str(e))
        fields.extend(e.fields)

    if problems:
        raise InvalidInputError("; ".join(problems), tuple(fields))

    return text, parsed
