"""Ledger package: the transaction store and its stored format."""

from budget_tracker.ledger.serialization import (
    DeserializationError,
    deserialize_transactions,
    serialize_transactions,
)
from budget_tracker.ledger.store import (
    DEFAULT_STORAGE_KEY,
    Ledger,
    TransactionIdGenerator,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "DeserializationError",
    "Ledger",
    "TransactionIdGenerator",
    "deserialize_transactions",
    "serialize_transactions",
]
