"""
Ledger Serialization

The stored ledger is one JSON array, in display order:

    [{"id": 1718000000000, "text": "salary", "amount": 5000},
     {"id": 1718000000001, "text": "rent", "amount": -1500}]

DESIGN DECISION: Decoding is strict. Anything that is not exactly a list
of well-formed transactions with unique ids is rejected as a whole with
DeserializationError; there is no partial salvage of a damaged ledger.
The caller decides what to do with a rejected blob (Ledger.load starts
empty).

Numbers are parsed straight into Decimal, so "0.1" in storage is
Decimal("0.1") in memory, never the float 0.1000000000000000055...
"""

import json
from decimal import Decimal
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from budget_tracker.models.transaction import Transaction


RECORD_FIELDS = frozenset({"id", "text", "amount"})

_transaction_list = TypeAdapter(list[Transaction])


class DeserializationError(Exception):
    """Stored ledger text is not a valid transaction list."""
    pass


def _json_number(amount: Decimal):
    # json has no Decimal support; integral amounts are written as ints
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def serialize_transactions(transactions: Iterable[Transaction]) -> str:
    """Encode transactions as the stored JSON array."""
    records = []
    for tx in transactions:
        record = tx.to_record()
        record["amount"] = _json_number(tx.amount)
        records.append(record)
    return json.dumps(records, ensure_ascii=False, allow_nan=False)


def _reject_constant(name: str):
    raise DeserializationError(f"Non-finite number {name} in stored ledger")


def deserialize_transactions(blob: str) -> list[Transaction]:
    """
    Decode the stored JSON array.

    A JSON null decodes to an empty list.

    Raises:
        DeserializationError: If the text is not a valid transaction list
    """
    try:
        data = json.loads(blob, parse_float=Decimal, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError) as e:
        raise DeserializationError(f"Stored ledger is not valid JSON: {e}")

    if data is None:
        return []

    if not isinstance(data, list):
        raise DeserializationError(
            f"Stored ledger must be a JSON array, got {type(data).__name__}"
        )

    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise DeserializationError(f"Entry {position} is not an object")
        keys = set(record)
        if keys != RECORD_FIELDS:
            raise DeserializationError(
                f"Entry {position} has fields {sorted(keys)}, "
                f"expected {sorted(RECORD_FIELDS)}"
            )
        # Stored amounts are JSON numbers; numeric strings are form input only
        amount = record["amount"]
        if isinstance(amount, bool) or not isinstance(amount, (int, Decimal)):
            raise DeserializationError(f"Entry {position} amount is not a number")

    try:
        transactions = _transaction_list.validate_python(data)
    except ValidationError as e:
        raise DeserializationError(f"Stored ledger has invalid entries: {e}")

    seen = set()
    for tx in transactions:
        if tx.id in seen:
            raise DeserializationError(f"Duplicate transaction id {tx.id}")
        seen.add(tx.id)

    return transactions
